"""Console output and error handling shared by the CLI commands."""

from collections.abc import Callable
from functools import wraps

import typer
from rich.console import Console
from rich.panel import Panel

from src.draughtsman.errors import ConfigurationError, DraughtsmanError

console = Console()

EXIT_FAILURE = 1
EXIT_CONFIGURATION = 2
EXIT_INTERRUPTED = 130


def fail(message: str, details: str | None = None, exit_code: int = EXIT_FAILURE) -> None:
    """Report a fatal error and leave with ``exit_code``."""
    console.print(f"\n[bold red]❌ {message}[/bold red]\n")
    if details:
        console.print(Panel(details, title="Details", border_style="red"))
    raise typer.Exit(exit_code)


def print_header(title: str, subtitle: str | None = None) -> None:
    """Print the start-up banner."""
    body = f"[bold blue]{title}[/bold blue]"
    if subtitle:
        body += f"\n[dim]{subtitle}[/dim]"
    console.print(Panel.fit(body, border_style="blue"))


def with_error_handling(func: Callable[..., None]) -> Callable[..., None]:
    """Turn agent errors raised by a command into exit codes.

    Configuration errors exit with 2, any other agent error with 1 and an
    interrupt with 130. Unexpected exceptions propagate with their traceback.
    """

    @wraps(func)
    def wrapper(*args: object, **kwargs: object) -> None:
        try:
            func(*args, **kwargs)
        except ConfigurationError as e:
            fail(f"Configuration error: {e.message}", e.details, EXIT_CONFIGURATION)
        except DraughtsmanError as e:
            fail(e.message, e.details)
        except KeyboardInterrupt:
            console.print("\n[dim]Interrupted.[/dim]")
            raise typer.Exit(EXIT_INTERRUPTED) from None

    return wrapper
