"""Assemble fetched CSS into the final stylesheet text.

The text transforms here are deliberately naive regex passes with no CSS
tokenizer: a ``/*`` inside a quoted string is still treated as a comment
start, and minification can merge statements that lacked a trailing
semicolon. Output must stay byte-for-byte stable on those edge cases.
"""

import re
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from loguru import logger

from .models import FetchedEntry, Metadata

# Non-greedy and DOTALL so multi-line comments end at the first closing marker
COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
WHITESPACE_RE = re.compile(r"\s+")

HEADER_OPEN = "/**\n"
HEADER_CLOSE = " */\n\n"


def sort_entries(entries: Iterable[FetchedEntry]) -> List[FetchedEntry]:
    """Stable sort by (order, index); restores manifest order after concurrent fetches."""
    return sorted(entries, key=lambda e: e.sort_key)


def strip_comments(css: str) -> str:
    """Return *css* with all /* ... */ comment blocks removed."""
    return COMMENT_RE.sub("", css)


def minify(css: str) -> str:
    """Collapse all whitespace (newlines included) to single spaces and trim."""
    return WHITESPACE_RE.sub(" ", css.replace("\n", " ")).strip()


def header_fields(metadata: Metadata) -> List[Tuple[str, str]]:
    """Return the (label, value) pairs to render, in fixed header order."""
    candidates = [
        ("name", metadata.name),
        ("description", metadata.description),
        ("author", metadata.author),
        ("authorId", metadata.author_id),
        ("source", metadata.source),
        ("version", metadata.version),
        ("website", metadata.website),
        ("invite", metadata.invite),
        ("tags", ", ".join(metadata.tags) if metadata.tags else None),
    ]
    return [(label, value) for label, value in candidates if value]


def render_header(metadata: Metadata) -> str:
    fields = header_fields(metadata)
    if not fields:
        return ""
    lines = "".join(f" * @{label} {value}\n" for label, value in fields)
    return f"{HEADER_OPEN}{lines}{HEADER_CLOSE}"


def wrap_entry(entry: FetchedEntry, content: Optional[str] = None) -> str:
    """Surround an entry's content with Begin/End marker comments."""
    body = entry.content if content is None else content
    return f"\n/* Begin {entry.url} */\n{body}\n/* End {entry.url} */\n"


def render_body(entries: Iterable[FetchedEntry], hide_comments: bool = False) -> str:
    """Concatenate entries in sorted order, stripping comments from each one first if asked."""
    parts = []
    for entry in sort_entries(entries):
        content = strip_comments(entry.content) if hide_comments else entry.content
        parts.append(wrap_entry(entry, content))
    return "".join(parts)


def assemble(metadata: Metadata, entries: Iterable[FetchedEntry], hide_comments: bool = False) -> str:
    """Build the final stylesheet text for one bundle.

    Args:
        metadata: Bundle metadata; drives the header and minification policy
        entries: Fetched entries in any order
        hide_comments: Strip comments from fetched content before wrapping

    Returns:
        Header followed by every wrapped entry, minified when ``metadata.minify`` is set
    """
    header = render_header(metadata)
    body = render_body(entries, hide_comments=hide_comments)

    if not metadata.minify:
        return header + body

    if metadata.preserve_metadata is False:
        return minify(header + body)
    return header + minify(body)


def resolve_output_path(output: str, cwd: Optional[Path] = None) -> Path:
    """Resolve the configured output path against the working directory.

    Absolute paths are re-rooted under ``cwd`` by dropping their anchor, so
    ``/dist/theme.css`` becomes ``<cwd>/dist/theme.css``.
    """
    cwd = Path(cwd) if cwd is not None else Path.cwd()
    path = Path(output)
    if path.is_absolute():
        converted = cwd / path.relative_to(path.anchor)
        logger.info(f"Converted absolute path {output} to: {converted}")
        return converted
    return cwd / path
