"""Error types raised by the draughtsman agent.

Errors raised inside a single deployment cycle are caught by the deployer
and logged; only ``ConfigurationError`` is fatal to the process.
"""

from __future__ import annotations


class DraughtsmanError(Exception):
    """Base class for all agent errors."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ConfigurationError(DraughtsmanError):
    """Raised when the agent configuration is missing or invalid."""


class UnknownComponentTypeError(ConfigurationError):
    """Raised when a component type tag has no registered implementation."""


class EventerError(DraughtsmanError):
    """Raised when deployments cannot be fetched or reported upstream."""


class ConfigurerError(DraughtsmanError):
    """Raised when installation values cannot be fetched."""


class InstallerError(DraughtsmanError):
    """Raised when a release could not be installed."""


class NotifierError(DraughtsmanError):
    """Raised when a notification could not be delivered."""


class InvalidTransitionError(DraughtsmanError):
    """Raised when a status transition out of a terminal state is attempted."""
