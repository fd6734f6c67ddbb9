"""Sources command."""

from pathlib import Path
from typing import Tuple

import click

from cssmerge.assembler import sort_entries
from cssmerge.exceptions import ManifestError
from cssmerge.expander import expand_sources
from cssmerge.manifest import load_manifests
from cssmerge.pipeline import bundle_label


@click.command()
@click.argument("manifests", nargs=-1, type=click.Path(path_type=Path))
def sources(manifests: Tuple[Path, ...]):
    """List the sources each bundle would fetch, in merge order."""
    try:
        bundles = load_manifests(manifests)
    except ManifestError as e:
        click.echo(f"❌ {e}", err=True)
        raise click.Abort()

    for bundle in bundles:
        entries = sort_entries(expand_sources(bundle))
        click.echo(f"📄 {bundle_label(bundle)} -> {bundle.metadata.output}")
        for entry in entries:
            click.echo(f"   [{entry.order}] {entry.url}")
