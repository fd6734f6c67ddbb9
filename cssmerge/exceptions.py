"""Error types raised by cssmerge."""


class CssMergeError(Exception):
    """Base class for cssmerge errors."""


class ManifestError(CssMergeError):
    """Manifest is missing, unreadable or structurally invalid. Aborts the whole run."""


class OutputError(CssMergeError):
    """Writing a bundle's output failed. Only that bundle is affected."""
