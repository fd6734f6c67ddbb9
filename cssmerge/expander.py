"""Expand bundle snippets into a flat list of source entries."""

from typing import Iterator, List, Tuple

from .models import BundleSpec, Order, RepoSnippet, SnippetSpec, SourceEntry, UrlSnippet


def _snippet_urls(snippet: SnippetSpec) -> Iterator[Tuple[str, Order]]:
    if isinstance(snippet, UrlSnippet):
        yield snippet.url, snippet.order
    elif isinstance(snippet, RepoSnippet):
        for source in snippet.sources:
            yield snippet.raw_url(source.css_path), source.order
    else:
        raise TypeError(f"Unsupported snippet type: {type(snippet).__name__}")


def expand_sources(bundle: BundleSpec) -> List[SourceEntry]:
    """Flatten every snippet of a bundle, numbering entries in input order.

    The index is the tie-break for entries sharing an order, so it reflects
    manifest order and is assigned before any sorting happens.
    """
    flat = [pair for snippet in bundle.snippets for pair in _snippet_urls(snippet)]
    return [SourceEntry(url=url, order=order, index=i) for i, (url, order) in enumerate(flat)]
