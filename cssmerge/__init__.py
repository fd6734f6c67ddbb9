"""cssmerge - fetch remote CSS snippets and merge them into one stylesheet."""

from .assembler import assemble, minify, strip_comments
from .exceptions import CssMergeError, ManifestError, OutputError
from .expander import expand_sources
from .fetcher import CssFetcher, FetchCache, RequestsTransport
from .manifest import load_manifest, load_manifests
from .models import BundleResult, BundleSpec, FetchedEntry, Metadata, SourceEntry
from .pipeline import RunReport, merge_bundle, run
from .settings import Settings

__version__ = "1.0.0"

__all__ = [
    "assemble",
    "minify",
    "strip_comments",
    "CssMergeError",
    "ManifestError",
    "OutputError",
    "expand_sources",
    "CssFetcher",
    "FetchCache",
    "RequestsTransport",
    "load_manifest",
    "load_manifests",
    "BundleResult",
    "BundleSpec",
    "FetchedEntry",
    "Metadata",
    "SourceEntry",
    "RunReport",
    "merge_bundle",
    "run",
    "Settings",
]
