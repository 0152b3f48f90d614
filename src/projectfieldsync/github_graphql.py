from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

import requests

from .errors import FieldSyncError, ResponseShapeError, redact
from .logging import StructuredLogger, get_logger
from .models import PullRequestLinks
from .queries import (
    ADD_ITEM_MUTATION,
    LINKED_ISSUES_QUERY,
    PAGE_SIZE,
    UPDATE_FIELD_MUTATION,
)

DEFAULT_GRAPHQL_URL = "https://api.github.com/graphql"
USER_AGENT = "projectfieldsync/0.1.0"
HTTP_ERROR_STATUS = 400


class GitHubAPIError(FieldSyncError):
    """Raised when the GitHub GraphQL API returns an error."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        response_text: str | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.response_text = response_text


class GraphQLTransport(Protocol):
    def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]: ...


@dataclass
class GitHubGraphQLClient:
    """Minimal GraphQL client for the Projects v2 calls the sync needs."""

    token: str
    graphql_url: str = DEFAULT_GRAPHQL_URL
    session: requests.Session | None = None
    timeout: float = 30
    logger: StructuredLogger | None = None
    _session: requests.Session = field(init=False, repr=False)
    _log: StructuredLogger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = self.session or requests.Session()
        self._session.headers.setdefault("Authorization", f"Bearer {self.token}")
        self._session.headers.setdefault("Accept", "application/vnd.github+json")
        self._session.headers.setdefault("User-Agent", USER_AGENT)
        self._log = self.logger or get_logger()

    # ---- transport ----------------------------------------------------
    def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        payload = {"query": query, "variables": variables or {}}
        self._log.debug(
            "graphql request:\n"
            + redact(query.strip())
            + "\nvariables: "
            + redact(json.dumps(payload["variables"], default=str)),
            query=query,
            variables=payload["variables"],
        )
        response = self._session.request(
            "POST",
            self.graphql_url,
            json=payload,
            timeout=self.timeout,
        )
        if response.status_code >= HTTP_ERROR_STATUS:
            raise GitHubAPIError(
                f"GitHub GraphQL request failed with HTTP {response.status_code}: "
                f"{redact(response.text)}",
                status=response.status_code,
                response_text=response.text,
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise GitHubAPIError(
                "GitHub GraphQL response was not valid JSON",
                status=response.status_code,
                response_text=response.text,
            ) from exc
        self._log.debug("graphql response:\n" + redact(json.dumps(body, indent=2, default=str)))
        if not isinstance(body, Mapping):
            raise GitHubAPIError("GitHub GraphQL response was not an object")
        if body.get("errors"):
            raise GitHubAPIError(f"GraphQL query failed: {redact(str(body['errors']))}")
        data = body.get("data")
        if not isinstance(data, Mapping):
            raise GitHubAPIError("GitHub GraphQL response missing 'data'")
        return dict(data)

    # ---- Projects v2 operations ---------------------------------------
    def fetch_linked_issues(self, pull_request_id: str) -> PullRequestLinks:
        return fetch_linked_issues(self, pull_request_id)

    def ensure_project_item(self, project_id: str, content_id: str) -> str:
        return ensure_project_item(self, project_id, content_id)

    def set_single_select(
        self, project_id: str, item_id: str, field_id: str, option_id: str
    ) -> None:
        set_single_select(self, project_id, item_id, field_id, option_id)


def fetch_linked_issues(transport: GraphQLTransport, pull_request_id: str) -> PullRequestLinks:
    data = transport.graphql(
        LINKED_ISSUES_QUERY, {"pullRequestId": pull_request_id, "first": PAGE_SIZE}
    )
    return PullRequestLinks.from_payload(data, pull_request_id)


def ensure_project_item(transport: GraphQLTransport, project_id: str, content_id: str) -> str:
    """Return the id of ``content_id``'s item on ``project_id``."""
    data = transport.graphql(
        ADD_ITEM_MUTATION, {"projectId": project_id, "contentId": content_id}
    )
    add_payload = data.get("addProjectV2ItemById")
    item_payload = add_payload.get("item") if isinstance(add_payload, Mapping) else None
    item_id = item_payload.get("id") if isinstance(item_payload, Mapping) else None
    if not isinstance(item_id, str) or not item_id:
        raise ResponseShapeError(
            f"addProjectV2ItemById returned no item id for project {project_id}"
        )
    return item_id


def set_single_select(
    transport: GraphQLTransport, project_id: str, item_id: str, field_id: str, option_id: str
) -> None:
    transport.graphql(
        UPDATE_FIELD_MUTATION,
        {
            "projectId": project_id,
            "itemId": item_id,
            "fieldId": field_id,
            "optionId": option_id,
        },
    )


__all__ = [
    "DEFAULT_GRAPHQL_URL",
    "GitHubAPIError",
    "GitHubGraphQLClient",
    "GraphQLTransport",
    "ensure_project_item",
    "fetch_linked_issues",
    "set_single_select",
]
