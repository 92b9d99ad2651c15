"""CLI command implementations."""

from tabular_uploads.cli.commands import append, create, detect

__all__ = [
    "append",
    "create",
    "detect",
]
