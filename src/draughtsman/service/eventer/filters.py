"""Pure filters that narrow upstream deployments to the actionable set."""

from __future__ import annotations

from collections.abc import Iterable

from src.draughtsman.service.status import Deployment, is_pending


def filter_deployments_by_environment(
    deployments: Iterable[Deployment], environment: str
) -> list[Deployment]:
    """Keep deployments whose environment matches exactly, order preserved."""
    return [d for d in deployments if d.environment == environment]


def filter_deployments_by_status(deployments: Iterable[Deployment]) -> list[Deployment]:
    """Keep deployments that are still pending, order preserved."""
    return [d for d in deployments if is_pending(d)]


def sort_deployments(deployments: Iterable[Deployment]) -> list[Deployment]:
    """Order deployments oldest first, ties broken by id."""
    return sorted(deployments, key=lambda d: (d.created_at, d.id))
