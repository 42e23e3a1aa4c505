"""Version command."""

from rich.table import Table

from src.draughtsman import project

from .shared import console


def version() -> None:
    """Print build information."""
    table = Table(show_header=False, box=None)
    table.add_row("[bold]Name[/bold]", project.NAME)
    table.add_row("[bold]Description[/bold]", project.DESCRIPTION)
    table.add_row("[bold]Version[/bold]", project.VERSION)
    table.add_row("[bold]Git commit[/bold]", project.git_commit())
    table.add_row("[bold]Source[/bold]", project.SOURCE)
    console.print(table)
