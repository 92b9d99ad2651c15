"""Main CLI application entry point."""

from __future__ import annotations

import typer

from tabular_uploads.cli.commands import append, create, detect

app = typer.Typer(
    name="tabular-uploads",
    help="Tabular uploads - turn CSV files into typed database tables.",
    no_args_is_help=True,
)

# Register commands
app.command()(detect.detect)
app.command()(create.create)
app.command()(append.append)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
