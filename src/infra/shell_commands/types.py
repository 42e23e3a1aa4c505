"""Data types for shell command results."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["CommandResult"]


@dataclass
class CommandResult:
    """Result of a command execution.

    Attributes:
        success: Whether the command exited with code 0
        stdout: Captured standard output
        stderr: Captured standard error
        returncode: Exit code, or -1 if the command timed out
        timed_out: Whether the command was killed after its timeout
    """

    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0
    timed_out: bool = False

    @property
    def output(self) -> str:
        """Combined output, useful for error details."""
        return "\n".join(part for part in (self.stdout.strip(), self.stderr.strip()) if part)
