"""Slack notifier using the Web API ``chat.postMessage`` method."""

from __future__ import annotations

import httpx
from loguru import logger

from src.draughtsman.config.config_data import ConfigData
from src.draughtsman.errors import NotifierError
from src.draughtsman.service.notifier.base import Notifier

SLACK_NOTIFIER_TYPE = "slack"


class SlackNotifier(Notifier):
    def __init__(self, config: ConfigData, client: httpx.Client | None = None) -> None:
        self._settings = config.slack
        self._client = client or httpx.Client(
            base_url=self._settings.api_url,
            timeout=config.http_client.timeout,
            headers={"Authorization": f"Bearer {self._settings.token}"},
        )

    def notify(self, message: str) -> None:
        payload = {
            "channel": self._settings.channel,
            "text": message,
            "username": self._settings.username,
            "icon_emoji": self._settings.emoji,
        }
        try:
            response = self._client.post("/chat.postMessage", json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            raise NotifierError(f"Unable to post Slack message: {e}") from e
        except ValueError as e:
            raise NotifierError("Slack returned a malformed response") from e

        if not isinstance(body, dict):
            raise NotifierError("Slack returned a malformed response")
        # Slack reports most failures with a 200 and ok=false
        if not body.get("ok", False):
            raise NotifierError(f"Slack rejected message: {body.get('error', 'unknown error')}")

        logger.debug(f"Posted Slack message to {self._settings.channel}")

    def close(self) -> None:
        self._client.close()
