"""Main CLI application module.

This module provides the main entry point for the draughtsman CLI.
"""

import typer

from .commands import daemon, version

app = typer.Typer(
    help="draughtsman: in-cluster agent for Helm based deployments",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command(name="daemon")(daemon)
app.command(name="version")(version)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
