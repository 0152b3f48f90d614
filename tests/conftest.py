"""Pytest configuration for projectfieldsync tests.

Ensures the in-repo `src` directory is on `sys.path` so the package can be
imported without an editable install (`pip install -e .`).
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

_WORKFLOW_VARS = (
    "GITHUB_EVENT_PATH",
    "GITHUB_TOKEN",
    "GH_TOKEN",
    "GITHUB_ACCESS_TOKEN",
    "GH_ACCESS_TOKEN",
    "GITHUB_PAT",
    "INPUT_GITHUB-TOKEN",
    "INPUT_PROJECT-FIELD-NAME",
    "INPUT_PROJECT-FIELD-VALUE",
    "RUNNER_DEBUG",
    "CI",
    "GITHUB_ACTIONS",
    "PROJECTFIELDSYNC_QUIET",
)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    # Keep the runner's own workflow variables and .env files out of the tests.
    # setenv first so teardown also removes values loaded from .env files.
    for name in _WORKFLOW_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    # Fresh global logger per test; handlers bind to the current sys.stdout.
    monkeypatch.setattr("projectfieldsync.logging._GLOBAL", None)


class RecordingTransport:
    """GraphQL transport double that replays queued ``data`` payloads."""

    def __init__(self, responses: list[dict[str, Any]]):
        self._responses = list(responses)
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        self.calls.append((query, dict(variables or {})))
        if not self._responses:
            raise AssertionError("No response queued for request")
        return self._responses.pop(0)

    def operations(self) -> list[str]:
        names = []
        for query, _ in self.calls:
            if "addProjectV2ItemById" in query:
                names.append("add_item")
            elif "updateProjectV2ItemFieldValue" in query:
                names.append("update_field")
            else:
                names.append("linked_issues")
        return names


def select_field(field_id: str, name: str, options: list[tuple[str, str]]) -> dict[str, Any]:
    return {
        "id": field_id,
        "name": name,
        "options": [{"id": oid, "name": oname} for oid, oname in options],
    }


def board(project_id: str, title: str, fields: list[dict[str, Any]]) -> dict[str, Any]:
    return {"id": project_id, "title": title, "fields": {"nodes": fields}}


def issue(issue_id: str, number: int, boards: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "id": issue_id,
        "number": number,
        "title": f"Issue {number}",
        "projectsV2": {"nodes": boards},
    }


def linked_issues(pr_id: str, issues: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "node": {
            "id": pr_id,
            "title": "Fix things",
            "number": 7,
            "closingIssuesReferences": {"nodes": issues},
        }
    }


def added_item(item_id: str | None) -> dict[str, Any]:
    item = {"id": item_id} if item_id is not None else {}
    return {"addProjectV2ItemById": {"item": item}}


UPDATED = {"updateProjectV2ItemFieldValue": {"clientMutationId": None}}
