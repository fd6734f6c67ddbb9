"""CLI entrypoint."""

import sys

import click
from loguru import logger

from cssmerge import __version__

from .commands.merge import merge
from .commands.sources import sources


@click.group()
@click.version_option(version=__version__, prog_name="cssmerge")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
def cli(verbose: bool):
    """cssmerge CLI - Merge remote CSS snippets into a single stylesheet."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


cli.add_command(merge)
cli.add_command(sources)


if __name__ == "__main__":
    cli()
