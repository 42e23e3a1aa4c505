"""GitHub deployments eventer.

Polls the GitHub deployments API for every configured project, keeps the
deployments meant for this agent's environment that are still pending, and
writes status entries back once a deployment has been handled.

The deployment list of each project is fetched with a conditional request.
ETags are only remembered once a whole poll succeeded, so a failed poll is
retried from scratch on the next tick.
"""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError

from src.draughtsman.config.config_data import ConfigData
from src.draughtsman.errors import EventerError
from src.draughtsman.service.eventer.base import Eventer
from src.draughtsman.service.eventer.filters import (
    filter_deployments_by_environment,
    filter_deployments_by_status,
    sort_deployments,
)
from src.draughtsman.service.status import Deployment, DeploymentState, DeploymentStatus

GITHUB_EVENTER_TYPE = "github"

PAGE_SIZE = 100

# GitHub rejects longer status descriptions
MAX_DESCRIPTION_LENGTH = 140


class GitHubEventer(Eventer):
    """Eventer backed by the GitHub REST deployments API."""

    def __init__(self, config: ConfigData, client: httpx.Client | None = None) -> None:
        """Initialize the eventer.

        Args:
            config: Agent configuration
            client: Optional preconfigured HTTP client, mainly for tests
        """
        settings = config.github
        self._environment = config.environment
        self._organisation = settings.organisation
        self._projects = settings.projects
        self._client = client or httpx.Client(
            base_url=settings.api_url,
            timeout=config.http_client.timeout,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"token {settings.oauth_token}",
            },
        )
        # Last successful deployment list per project, keyed by its ETag
        self._etags: dict[str, str] = {}
        self._cached: dict[str, list[dict[str, Any]]] = {}

    # =========================================================================
    # Eventer API
    # =========================================================================

    def poll(self) -> list[Deployment]:
        fetched: dict[str, tuple[str | None, list[dict[str, Any]]]] = {}
        deployments: list[Deployment] = []

        for project in self._projects:
            etag, raw_deployments = self._fetch_deployments(project)
            fetched[project] = (etag, raw_deployments)
            for raw in raw_deployments:
                deployment = self._parse_deployment(project, raw)
                if deployment is not None:
                    deployments.append(deployment)

        candidates = filter_deployments_by_environment(deployments, self._environment)

        with_statuses: list[Deployment] = []
        for deployment in candidates:
            statuses = self._fetch_statuses(deployment)
            if statuses is None:
                continue
            with_statuses.append(deployment.model_copy(update={"statuses": statuses}))

        actionable = sort_deployments(filter_deployments_by_status(with_statuses))

        # Only a fully successful poll updates the conditional request cache
        for project, (etag, raw_deployments) in fetched.items():
            if etag:
                self._etags[project] = etag
                self._cached[project] = raw_deployments

        logger.debug(
            f"Polled {len(deployments)} deployments, {len(candidates)} for "
            f"environment {self._environment}, {len(actionable)} actionable"
        )
        return actionable

    def report_status(
        self,
        deployment: Deployment,
        state: DeploymentState,
        description: str | None = None,
    ) -> None:
        path = self._statuses_path(deployment)
        payload: dict[str, str] = {"state": state.value}
        if description:
            payload["description"] = description[:MAX_DESCRIPTION_LENGTH]

        try:
            response = self._client.post(path, json=payload)
            self._log_rate_limit(response)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise EventerError(
                f"GitHub rejected {state.value} status for deployment {deployment.id}",
                details=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            raise EventerError(
                f"Unable to report {state.value} status for deployment {deployment.id}: {e}"
            ) from e

        logger.info(f"Set deployment {deployment.id} of {deployment.project} to {state.value}")

    def close(self) -> None:
        self._client.close()

    # =========================================================================
    # Fetching
    # =========================================================================

    def _fetch_deployments(self, project: str) -> tuple[str | None, list[dict[str, Any]]]:
        """Fetch every deployment of a project, following pagination.

        Returns:
            The ETag of the first page (or None) and the raw deployments
        """
        path = f"/repos/{self._organisation}/{project}/deployments"
        headers: dict[str, str] = {}
        cached_etag = self._etags.get(project)
        if cached_etag:
            headers["If-None-Match"] = cached_etag

        response = self._get(path, params={"per_page": PAGE_SIZE}, headers=headers)
        if response.status_code == httpx.codes.NOT_MODIFIED:
            logger.debug(f"Deployments of {project} not modified since last poll")
            return cached_etag, self._cached.get(project, [])

        return response.headers.get("ETag"), self._collect_pages(response)

    def _fetch_statuses(self, deployment: Deployment) -> tuple[DeploymentStatus, ...] | None:
        """Fetch a deployment's status history, oldest entry first.

        Returns:
            The statuses, or None if an entry carries a state this agent
            does not know, which makes the deployment non-actionable
        """
        response = self._get(self._statuses_path(deployment), params={"per_page": PAGE_SIZE})
        raw_statuses = self._collect_pages(response)

        statuses: list[DeploymentStatus] = []
        for raw in raw_statuses:
            try:
                statuses.append(DeploymentStatus.model_validate(raw))
            except ValidationError:
                logger.bind(**deployment.log_context).warning(
                    f"Ignoring deployment {deployment.id} with unexpected status state {raw.get('state')!r}"
                )
                return None

        return tuple(sorted(statuses, key=lambda s: s.created_at))

    def _collect_pages(self, response: httpx.Response) -> list[dict[str, Any]]:
        """Gather the items of a listing, following its Link: rel=next pages."""
        items = _json_list(response)
        next_url = response.links.get("next", {}).get("url")
        while next_url:
            response = self._get(next_url)
            items.extend(_json_list(response))
            next_url = response.links.get("next", {}).get("url")
        return items

    def _get(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            response = self._client.get(url, params=params, headers=headers)
            self._log_rate_limit(response)
            if response.status_code != httpx.codes.NOT_MODIFIED:
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise EventerError(
                f"GitHub returned {e.response.status_code} for {e.request.url}",
                details=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            raise EventerError(f"Unable to reach GitHub: {e}") from e
        return response

    # =========================================================================
    # Helpers
    # =========================================================================

    def _parse_deployment(self, project: str, raw: dict[str, Any]) -> Deployment | None:
        try:
            return Deployment.model_validate({**raw, "project": project, "statuses": ()})
        except ValidationError as e:
            logger.warning(f"Skipping malformed deployment {raw.get('id')} of {project}: {e}")
            return None

    def _statuses_path(self, deployment: Deployment) -> str:
        return (
            f"/repos/{self._organisation}/{deployment.project}"
            f"/deployments/{deployment.id}/statuses"
        )

    @staticmethod
    def _log_rate_limit(response: httpx.Response) -> None:
        remaining = response.headers.get("X-RateLimit-Remaining")
        if remaining is not None:
            logger.debug(
                f"GitHub rate limit: {remaining}/{response.headers.get('X-RateLimit-Limit')} remaining"
            )


def _json_list(response: httpx.Response) -> list[dict[str, Any]]:
    try:
        body = response.json()
    except ValueError as e:
        raise EventerError(f"GitHub returned invalid JSON for {response.request.url}") from e
    if not isinstance(body, list):
        raise EventerError(f"GitHub returned an unexpected payload for {response.request.url}")
    return body
