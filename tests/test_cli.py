from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from conftest import UPDATED, added_item, board, issue, linked_issues, select_field

from projectfieldsync import cli
from projectfieldsync.github_graphql import GitHubAPIError


class _ScriptedClient:
    """Stands in for GitHubGraphQLClient inside field_sync."""

    responses: list[dict[str, Any]] = []
    calls: list[dict[str, Any]] = []
    error: Exception | None = None

    def __init__(self, **kwargs: Any) -> None:
        self.kwargs = kwargs

    def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        type(self).calls.append(dict(variables or {}))
        if type(self).error is not None:
            raise type(self).error
        return type(self).responses.pop(0)


@pytest.fixture
def scripted(monkeypatch: pytest.MonkeyPatch) -> type[_ScriptedClient]:
    _ScriptedClient.responses = []
    _ScriptedClient.calls = []
    _ScriptedClient.error = None
    monkeypatch.setattr("projectfieldsync.field_sync.GitHubGraphQLClient", _ScriptedClient)
    monkeypatch.setenv("INPUT_GITHUB-TOKEN", "tkn")
    monkeypatch.setenv("INPUT_PROJECT-FIELD-NAME", "Status")
    monkeypatch.setenv("INPUT_PROJECT-FIELD-VALUE", "Done")
    return _ScriptedClient


def _event(tmp_path: Path, payload: dict[str, Any]) -> Path:
    path = tmp_path / "event.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_sync_without_pull_request_succeeds(tmp_path, scripted, monkeypatch, capsys):
    monkeypatch.setenv("GITHUB_EVENT_PATH", str(_event(tmp_path, {"issue": {"number": 1}})))

    assert cli.main(["sync"]) == 0

    assert scripted.calls == []
    assert "nothing to be done" in capsys.readouterr().out


def test_sync_applies_update_and_writes_summary(tmp_path, scripted, monkeypatch, capsys):
    monkeypatch.setenv(
        "GITHUB_EVENT_PATH", str(_event(tmp_path, {"pull_request": {"node_id": "PR_1"}}))
    )
    status = select_field("F_S", "Status", [("O_TODO", "Todo"), ("O_DONE", "Done")])
    scripted.responses = [
        linked_issues("PR_1", [issue("I_1", 42, [board("PB_1", "Roadmap", [status])])]),
        added_item("ITEM_1"),
        UPDATED,
    ]
    summary = tmp_path / "summary.json"

    assert cli.main(["sync", "--summary-json", str(summary)]) == 0

    assert scripted.calls[-1] == {
        "projectId": "PB_1",
        "itemId": "ITEM_1",
        "fieldId": "F_S",
        "optionId": "O_DONE",
    }
    payload = json.loads(summary.read_text(encoding="utf-8"))
    assert payload["updated"][0]["item_id"] == "ITEM_1"
    assert "[sync] updated=1 skipped=0" in capsys.readouterr().out


def test_sync_skips_are_not_failures(scripted, capsys):
    scripted.responses = [
        linked_issues("PR_1", [issue("I_1", 42, [board("PB_1", "Roadmap", [])])]),
    ]

    assert cli.main(["sync", "--pr-node-id", "PR_1"]) == 0

    assert "[sync] updated=0 skipped=1" in capsys.readouterr().out


def test_sync_remote_failure_sets_failed_status(scripted, capsys):
    scripted.error = GitHubAPIError(
        "GraphQL query failed: Bad credentials ghp_ABCDEFGHIJKLMNOPQRSTUVWX", status=401
    )

    assert cli.main(["sync", "--pr-node-id", "PR_1"]) == 1

    out = capsys.readouterr().out
    assert "::error::GraphQL query failed: Bad credentials <redacted>" in out
    assert "ghp_" not in out


def test_sync_missing_configuration_fails(monkeypatch, capsys):
    monkeypatch.setenv("INPUT_GITHUB-TOKEN", "tkn")

    assert cli.main(["sync", "--pr-node-id", "PR_1"]) == 1

    assert "::error::Project field name required" in capsys.readouterr().out


def test_quiet_suppresses_summary(scripted, capsys):
    scripted.responses = [linked_issues("PR_1", [])]

    assert cli.main(["--quiet", "sync", "--pr-node-id", "PR_1"]) == 0

    assert "[sync]" not in capsys.readouterr().out


def test_dry_run_flag_plans_without_mutations(scripted, capsys):
    status = select_field("F_S", "Status", [("O_DONE", "Done")])
    scripted.responses = [
        linked_issues("PR_1", [issue("I_1", 42, [board("PB_1", "Roadmap", [status])])]),
    ]

    assert cli.main(["sync", "--pr-node-id", "PR_1", "--dry-run"]) == 0

    assert len(scripted.calls) == 1
    assert "[sync] planned=1 skipped=0" in capsys.readouterr().out


def test_non_pull_request_event_needs_no_inputs(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv(
        "GITHUB_EVENT_PATH", str(_event(tmp_path, {"ref": "refs/heads/main"}))
    )

    assert cli.main(["sync"]) == 0

    out = capsys.readouterr().out
    assert "nothing to be done" in out
    assert "::error::" not in out
