"""Command runner for executing shell commands.

This module provides the base command execution functionality used by
the specialized command modules.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path

from loguru import logger

from .types import CommandResult


class CommandRunner:
    """Low-level command executor with consistent result handling.

    Commands never raise on a non-zero exit code or a timeout; both are
    reported through the returned CommandResult.
    """

    def __init__(self, cwd: Path | None = None) -> None:
        """Initialize the command runner.

        Args:
            cwd: Working directory for commands (defaults to the process cwd)
        """
        self.cwd = cwd

    def run(
        self,
        cmd: Sequence[str],
        *,
        input: str | None = None,
        timeout: float | None = None,
        redact: Sequence[str] = (),
    ) -> CommandResult:
        """Execute a command and return structured result.

        Args:
            cmd: Command and arguments as a sequence
            input: Optional text passed on stdin
            timeout: Seconds after which the command is killed
            redact: Values to mask when the command line is logged

        Returns:
            CommandResult with success status, output, and return code
        """
        logger.debug(f"Running command: {_redacted(cmd, redact)}")
        try:
            result = subprocess.run(
                list(cmd),
                cwd=self.cwd,
                input=input,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            return CommandResult(
                success=False,
                stdout=_as_text(e.stdout),
                stderr=_as_text(e.stderr) or f"Command timed out after {timeout} seconds",
                returncode=-1,
                timed_out=True,
            )
        except OSError as e:
            return CommandResult(success=False, stderr=str(e), returncode=-1)

        return CommandResult(
            success=result.returncode == 0,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            returncode=result.returncode,
        )


def _as_text(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def _redacted(cmd: Sequence[str], redact: Sequence[str]) -> str:
    secrets = {value for value in redact if value}
    return " ".join("***" if part in secrets else part for part in cmd)
