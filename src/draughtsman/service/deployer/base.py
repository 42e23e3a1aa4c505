"""Deployer interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass
class TickResult:
    """Outcome of one poll-and-process cycle.

    Attributes:
        skipped: The tick did not run because a previous cycle was in flight
        polled: Number of actionable deployments returned by the poll
        succeeded: Deployments installed and reported as success
        failed: Deployments whose installation failed
        deferred: Deployments left pending upstream, retried next tick
        ignored: Deployments skipped because they were not pending any more
        error: Poll error that aborted the tick, if any
    """

    skipped: bool = False
    polled: int = 0
    succeeded: int = 0
    failed: int = 0
    deferred: int = 0
    ignored: int = 0
    error: str | None = None


@dataclass(frozen=True)
class DeployerState:
    """Snapshot of the loop for readiness checks."""

    running: bool
    in_flight: bool
    last_tick_at: datetime | None
    last_error: str | None


class Deployer(ABC):
    """Orchestration loop driving deployments to completion."""

    @abstractmethod
    def tick(self) -> TickResult:
        """Run a single poll-and-process cycle."""
        ...

    @abstractmethod
    def run(self) -> None:
        """Run ticks until stop() is called. Blocks the calling thread."""
        ...

    @abstractmethod
    def stop(self) -> None:
        """Ask the loop to exit once any in-flight cycle has finished."""
        ...

    @abstractmethod
    def state(self) -> DeployerState:
        ...
