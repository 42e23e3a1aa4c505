"""Combination of several configurers tried in order."""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from src.draughtsman.errors import ConfigurerError
from src.draughtsman.service.configurer.base import Configurer


class ChainConfigurer(Configurer):
    """Tries configurers in their configured order.

    The first configurer that returns a non-empty payload without raising
    wins. Later configurers are not consulted.
    """

    type = "chain"

    def __init__(self, configurers: Sequence[Configurer]) -> None:
        if not configurers:
            raise ValueError("ChainConfigurer needs at least one configurer")
        self._configurers = tuple(configurers)

    def fetch_values(self) -> bytes:
        failures: list[str] = []

        for configurer in self._configurers:
            try:
                values = configurer.fetch_values()
            except ConfigurerError as e:
                logger.warning(f"Configurer {configurer.type} failed: {e.message}")
                failures.append(f"{configurer.type}: {e.message}")
                continue

            if values.strip():
                logger.debug(f"Using values from configurer {configurer.type}")
                return values
            failures.append(f"{configurer.type}: empty values")

        raise ConfigurerError(
            "No configurer returned values",
            details="; ".join(failures),
        )
