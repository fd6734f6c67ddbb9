"""Bundle pipeline: expand, fetch, assemble, write."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from loguru import logger

from .assembler import assemble, resolve_output_path
from .exceptions import OutputError
from .expander import expand_sources
from .fetcher import CssFetcher, FetchCache, RequestsTransport
from .models import BundleResult, BundleSpec
from .settings import Settings
from .writer import write_output


@dataclass
class RunReport:
    """Results of a multi-bundle run"""

    results: List[BundleResult] = field(default_factory=list)
    failures: List[Tuple[str, str]] = field(default_factory=list)  # (bundle label, error)

    @property
    def ok(self) -> bool:
        return not self.failures


def bundle_label(bundle: BundleSpec) -> str:
    if bundle.source_path is not None:
        return str(bundle.source_path)
    return bundle.metadata.name or bundle.metadata.output


def build_fetcher(settings: Settings, cache: Optional[FetchCache] = None) -> CssFetcher:
    """Create the default requests-backed fetcher for a run."""
    return CssFetcher(
        transport=RequestsTransport(timeout=settings.request_timeout),
        cache=cache,
        max_attempts=settings.max_attempts,
        retry_delay=settings.retry_delay,
    )


async def merge_bundle(
    bundle: BundleSpec, fetcher: CssFetcher, settings: Settings, cwd: Optional[Path] = None
) -> BundleResult:
    """Merge one bundle and hand the result to the output sink.

    All sources are fetched concurrently; assembly starts only once every
    fetch has finished.
    """
    entries = expand_sources(bundle)
    logger.info(f"Merging {len(entries)} sources into {bundle.metadata.output}")

    fetched = await fetcher.fetch_all(entries)
    content = assemble(bundle.metadata, fetched, hide_comments=settings.hide_comments)

    output_path = resolve_output_path(bundle.metadata.output, cwd)
    written = write_output(output_path, content, dry_run=settings.dry_run)

    failed = sorted({e.url for e in fetched if fetcher.cache.is_failure(e.url)})
    return BundleResult(
        output_path=output_path,
        content=content,
        written=written,
        source_count=len(entries),
        failed_sources=failed,
    )


async def run(
    bundles: Iterable[BundleSpec],
    settings: Settings,
    fetcher: Optional[CssFetcher] = None,
    cwd: Optional[Path] = None,
) -> RunReport:
    """Process bundles one after another, sharing a single fetch cache.

    An output failure is recorded against its bundle and the run moves on.
    """
    owns_fetcher = fetcher is None
    fetcher = fetcher or build_fetcher(settings)
    report = RunReport()

    try:
        for bundle in bundles:
            try:
                report.results.append(await merge_bundle(bundle, fetcher, settings, cwd))
            except OutputError as e:
                logger.error(f"Bundle {bundle_label(bundle)} failed: {e}")
                report.failures.append((bundle_label(bundle), str(e)))
    finally:
        if owns_fetcher and isinstance(fetcher.transport, RequestsTransport):
            fetcher.transport.close()

    logger.debug(f"Fetch cache stats: {fetcher.cache.get_stats()}")
    return report
