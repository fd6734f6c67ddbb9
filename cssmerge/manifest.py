"""Manifest discovery and loading.

A manifest is a YAML document describing one bundle. Two shapes are accepted:

    metadata:            # optional
      name: My Theme
      output: dist/theme.css
    snippets:
      - url: https://example.com/base.css
        order: 1
      - repo: owner/name
        branch: main
        sources:
          - css_path: src/a.css
            order: 2

or a bare list of snippet entries, in which case metadata defaults apply.
Snippets may also use the flat ``{repo, branch, css_path, order}`` form.
"""

from pathlib import Path
from typing import Any, Iterable, List, Optional

import yaml
from loguru import logger
from pydantic import ValidationError

from .exceptions import ManifestError
from .models import BundleSpec, Metadata, RepoSnippet, SnippetSpec, UrlSnippet

DEFAULT_MANIFEST = "css_manifest.yml"
MANIFEST_SUFFIXES = (".yml", ".yaml")


def discover_manifests(paths: Iterable[Path], cwd: Optional[Path] = None) -> List[Path]:
    """Expand files and directories into a list of manifest files."""
    paths = [Path(p) for p in paths]
    if not paths:
        paths = [(cwd or Path.cwd()) / DEFAULT_MANIFEST]

    manifests: List[Path] = []
    for path in paths:
        if path.is_dir():
            found = sorted(p for p in path.iterdir() if p.is_file() and p.suffix in MANIFEST_SUFFIXES)
            if not found:
                logger.warning(f"No manifests found in {path}")
            manifests.extend(found)
        elif path.is_file():
            manifests.append(path)
        else:
            raise ManifestError(f"Manifest not found: {path}")
    return manifests


def parse_snippet(raw: Any, position: int) -> SnippetSpec:
    """Validate one snippet entry into a UrlSnippet or RepoSnippet."""
    if not isinstance(raw, dict):
        raise ManifestError(f"Snippet #{position} must be a mapping, got {type(raw).__name__}")

    try:
        if "url" in raw:
            return UrlSnippet.model_validate(raw)
        if "sources" in raw:
            if not isinstance(raw["sources"], list):
                raise ManifestError(f'Snippet #{position}: "sources" must be a list')
            return RepoSnippet.model_validate(raw)
        if "repo" in raw and "css_path" in raw:
            # Flat single-file form
            source = {"css_path": raw["css_path"]}
            if "order" in raw:
                source["order"] = raw["order"]
            return RepoSnippet.model_validate(
                {"repo": raw["repo"], "branch": raw.get("branch") or "main", "sources": [source]}
            )
    except ValidationError as e:
        raise ManifestError(f"Snippet #{position} is invalid: {e}") from e

    raise ManifestError(f'Snippet #{position} needs either "url", "repo" + "sources", or "repo" + "css_path"')


def parse_manifest(data: Any, source_path: Optional[Path] = None) -> BundleSpec:
    """Turn an already-parsed YAML document into a BundleSpec."""
    if isinstance(data, list):
        raw_metadata: Any = {}
        raw_snippets: Any = data
    elif isinstance(data, dict):
        raw_metadata = data.get("metadata") or {}
        raw_snippets = data.get("snippets")
    else:
        raise ManifestError("Manifest must be a mapping with \"snippets\" or a list of snippet entries.")

    if not isinstance(raw_snippets, list):
        raise ManifestError('Manifest "snippets" must be an array of entries.')
    if not isinstance(raw_metadata, dict):
        raise ManifestError('Manifest "metadata" must be a mapping.')

    try:
        metadata = Metadata.model_validate(raw_metadata)
    except ValidationError as e:
        raise ManifestError(f"Manifest metadata is invalid: {e}") from e

    snippets = [parse_snippet(raw, i) for i, raw in enumerate(raw_snippets)]
    return BundleSpec(metadata=metadata, snippets=snippets, source_path=source_path)


def load_manifest(path: Path) -> BundleSpec:
    """Read and validate a single manifest file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestError(f"Could not read manifest {path}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ManifestError(f"Could not parse manifest {path}: {e}") from e

    try:
        bundle = parse_manifest(data, source_path=Path(path))
    except ManifestError as e:
        raise ManifestError(f"{path}: {e}") from e

    logger.info(f"Loaded manifest {path} ({len(bundle.snippets)} snippets)")
    return bundle


def load_manifests(paths: Iterable[Path], cwd: Optional[Path] = None) -> List[BundleSpec]:
    """Load every manifest up front so a bad one aborts before any output is written."""
    return [load_manifest(path) for path in discover_manifests(paths, cwd=cwd)]
