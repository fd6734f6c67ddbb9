from pathlib import Path

from loguru import logger

from .exceptions import OutputError


def write_output(output_path: Path, content: str, dry_run: bool = False) -> bool:
    """Write merged CSS to disk, creating parent directories as needed.

    In dry-run mode nothing touches the filesystem and the caller is expected
    to display ``content`` instead.

    Returns:
        True if the file was written, False on a dry run
    """
    output_path = Path(output_path)

    if dry_run:
        logger.info(f"Dry run mode - not writing {output_path}")
        return False

    output_dir = output_path.parent
    try:
        if not output_dir.exists():
            output_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created directory: {output_dir}")

        with open(output_path, "w", encoding="utf-8") as f:
            f.write(content)
    except OSError as e:
        raise OutputError(f"Could not write {output_path}: {e}") from e

    logger.info(f'Combined CSS file "{output_path}" created/updated successfully.')
    return True
