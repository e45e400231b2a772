"""Command line entry points (``mediadesk ...``)."""
