"""Configurer interface."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Configurer(ABC):
    """Supplies the current desired installation values."""

    #: Tag used to select this configurer in the configuration
    type: str = ""

    @abstractmethod
    def fetch_values(self) -> bytes:
        """Fetch the values payload.

        Safe to call repeatedly; every call reads the current source.

        Returns:
            Raw values (usually YAML); empty if the source holds nothing

        Raises:
            ConfigurerError: If the source could not be read
        """
        ...
