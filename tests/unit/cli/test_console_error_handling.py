import pytest
import typer

from src.cli.commands.shared import with_error_handling
from src.draughtsman.errors import ConfigurationError, InstallerError, UnknownComponentTypeError


def test_with_error_handling_handles_agent_error():
    @with_error_handling
    def _command() -> None:
        raise InstallerError("Boom", details="extra")

    with pytest.raises(typer.Exit) as excinfo:
        _command()

    assert excinfo.value.exit_code == 1


@pytest.mark.parametrize(
    "error",
    [ConfigurationError("bad"), UnknownComponentTypeError("Unknown eventer type 'x'")],
)
def test_with_error_handling_configuration_errors_exit_2(error):
    @with_error_handling
    def _command() -> None:
        raise error

    with pytest.raises(typer.Exit) as excinfo:
        _command()

    assert excinfo.value.exit_code == 2


def test_with_error_handling_handles_keyboard_interrupt():
    @with_error_handling
    def _command() -> None:
        raise KeyboardInterrupt

    with pytest.raises(typer.Exit) as excinfo:
        _command()

    assert excinfo.value.exit_code == 130


def test_with_error_handling_passes_through_other_errors():
    @with_error_handling
    def _command() -> None:
        raise RuntimeError("unexpected")

    with pytest.raises(RuntimeError):
        _command()
