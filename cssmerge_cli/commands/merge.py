"""Merge command."""

import asyncio
from pathlib import Path
from typing import Optional, Tuple

import click
from pydantic import ValidationError

from cssmerge.exceptions import ManifestError
from cssmerge.manifest import load_manifests
from cssmerge.pipeline import run
from cssmerge.settings import Settings


@click.command()
@click.argument("manifests", nargs=-1, type=click.Path(path_type=Path))
@click.option("--dry-run", is_flag=True, help="Print merged CSS instead of writing files (or set DRY_RUN=true)")
@click.option(
    "--hide-comments", is_flag=True, help="Strip /* */ comments from fetched CSS (or set HIDE_COMMENTS=true)"
)
@click.option("--max-attempts", type=int, help="Fetch attempts per URL before giving up")
@click.option("--retry-delay", type=float, help="Seconds to wait between fetch attempts")
@click.option("--timeout", "request_timeout", type=float, help="Per-request timeout in seconds")
def merge(
    manifests: Tuple[Path, ...],
    dry_run: bool,
    hide_comments: bool,
    max_attempts: Optional[int],
    retry_delay: Optional[float],
    request_timeout: Optional[float],
):
    """Fetch and merge the CSS described by one or more manifests."""
    try:
        settings = Settings.from_env().with_overrides(
            dry_run=True if dry_run else None,
            hide_comments=True if hide_comments else None,
            max_attempts=max_attempts,
            retry_delay=retry_delay,
            request_timeout=request_timeout,
        )
    except ValidationError as e:
        click.echo(f"❌ Invalid settings: {e}", err=True)
        raise click.Abort()

    click.echo(f"Hiding CSS comments from fetched files: {settings.hide_comments}")

    try:
        bundles = load_manifests(manifests)
    except ManifestError as e:
        click.echo(f"❌ Error during CSS merge process: {e}", err=True)
        raise click.Abort()

    report = asyncio.run(run(bundles, settings))

    for result in report.results:
        if result.failed_sources:
            click.echo(f"  ⚠️  {len(result.failed_sources)} source(s) could not be fetched:", err=True)
            for url in result.failed_sources:
                click.echo(f"     {url}", err=True)

        if settings.dry_run:
            click.echo(f"Dry run mode - merged CSS content for {result.output_path}:")
            click.echo(result.content)
        else:
            click.echo(f"✅ {result.output_path} ({result.source_count} sources)")

    for label, error in report.failures:
        click.echo(f"❌ {label}: {error}", err=True)

    if not report.ok:
        raise click.Abort()
