"""
Core models for cssmerge.

Manifest-facing models are pydantic so that malformed manifests fail loudly;
the per-run entries flowing through the pipeline are plain dataclasses.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_OUTPUT = "combined.css"
DEFAULT_BRANCH = "main"
RAW_GITHUB_BASE = "https://raw.githubusercontent.com"

Order = Union[int, float]


# ============================================================================
# Manifest Models
# ============================================================================


class Metadata(BaseModel):
    """Bundle metadata rendered into the output header"""

    model_config = ConfigDict(frozen=True, populate_by_name=True, coerce_numbers_to_str=True)

    name: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None
    author_id: Optional[str] = Field(default=None, alias="authorId")
    source: Optional[str] = None
    version: Optional[str] = None
    website: Optional[str] = None
    invite: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    output: str = DEFAULT_OUTPUT
    minify: bool = False
    preserve_metadata: Optional[bool] = Field(
        default=None, description="Keep the header verbatim when minifying unless explicitly false"
    )

    # A YAML key with no value (`tags:`) arrives as None
    @field_validator("tags", mode="before")
    @classmethod
    def _null_tags(cls, value):
        return [] if value is None else value

    @field_validator("minify", mode="before")
    @classmethod
    def _null_minify(cls, value):
        return False if value is None else value

    @field_validator("output", mode="before")
    @classmethod
    def _default_output(cls, value):
        return value or DEFAULT_OUTPUT


class UrlSnippet(BaseModel):
    """Snippet pointing at a single CSS resource"""

    model_config = ConfigDict(frozen=True)

    url: str
    order: Order = 0


class RepoSource(BaseModel):
    """One CSS file inside a repository snippet"""

    model_config = ConfigDict(frozen=True)

    css_path: str
    order: Order = 0


class RepoSnippet(BaseModel):
    """Snippet pointing at several files sharing a GitHub repository and branch"""

    model_config = ConfigDict(frozen=True)

    repo: str
    branch: str = DEFAULT_BRANCH
    sources: List[RepoSource]

    def raw_url(self, css_path: str) -> str:
        """Build the raw.githubusercontent.com URL for a file in this repository."""
        return f"{RAW_GITHUB_BASE}/{self.repo}/{self.branch}/{css_path}"


SnippetSpec = Union[UrlSnippet, RepoSnippet]


class BundleSpec(BaseModel):
    """One output file plus the snippets that make it up"""

    model_config = ConfigDict(frozen=True)

    metadata: Metadata = Field(default_factory=Metadata)
    snippets: List[SnippetSpec]
    source_path: Optional[Path] = Field(default=None, description="Manifest file this bundle was loaded from")


# ============================================================================
# Pipeline Entries
# ============================================================================


@dataclass(frozen=True)
class SourceEntry:
    """A single resolved CSS resource with its sort key."""

    url: str
    order: Order = 0
    index: int = 0

    @property
    def sort_key(self):
        return (self.order, self.index)


@dataclass(frozen=True)
class FetchedEntry(SourceEntry):
    """A source entry together with its fetched text (empty on failure)."""

    content: str = ""

    @classmethod
    def from_source(cls, entry: SourceEntry, content: str) -> "FetchedEntry":
        return cls(url=entry.url, order=entry.order, index=entry.index, content=content)


@dataclass
class BundleResult:
    """Outcome of merging one bundle"""

    output_path: Path
    content: str
    written: bool
    source_count: int = 0
    failed_sources: List[str] = field(default_factory=list)
