"""cssmerge command-line interface."""
