"""Configurer reading values from a local file."""

from __future__ import annotations

from pathlib import Path

from src.draughtsman.config.config_data import ConfigData
from src.draughtsman.errors import ConfigurerError
from src.draughtsman.service.configurer.base import Configurer

FILE_CONFIGURER_TYPE = "file"


class FileConfigurer(Configurer):
    type = FILE_CONFIGURER_TYPE

    def __init__(self, config: ConfigData) -> None:
        self._path = Path(config.file.path)

    def fetch_values(self) -> bytes:
        try:
            return self._path.read_bytes()
        except OSError as e:
            raise ConfigurerError(f"Unable to read values file {self._path}: {e}") from e
