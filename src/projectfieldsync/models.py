from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import ResponseShapeError


def _require_str(payload: Mapping[str, Any], key: str, context: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str):
        raise ResponseShapeError(f"{context} response missing '{key}'")
    return value


def _connection_nodes(payload: Mapping[str, Any], key: str, context: str) -> list[Mapping[str, Any]]:
    connection = payload.get(key)
    if not isinstance(connection, Mapping):
        raise ResponseShapeError(f"{context} response missing '{key}'")
    nodes = connection.get("nodes")
    if not isinstance(nodes, list):
        raise ResponseShapeError(f"{context} response missing '{key}.nodes'")
    return [node for node in nodes if isinstance(node, Mapping)]


@dataclass(frozen=True)
class FieldOption:
    id: str
    name: str


@dataclass(frozen=True)
class ProjectField:
    """A single-select field on a project board."""

    id: str
    name: str
    options: tuple[FieldOption, ...] = ()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> ProjectField | None:
        # Non single-select fields come back as empty objects.
        field_id = payload.get("id")
        name = payload.get("name")
        if not isinstance(field_id, str) or not isinstance(name, str):
            return None
        options: list[FieldOption] = []
        raw_options = payload.get("options")
        if isinstance(raw_options, list):
            for node in raw_options:
                if not isinstance(node, Mapping):
                    continue
                option_id = node.get("id")
                option_name = node.get("name")
                if isinstance(option_id, str) and isinstance(option_name, str):
                    options.append(FieldOption(id=option_id, name=option_name))
        return cls(id=field_id, name=name, options=tuple(options))

    def find_option(self, name: str) -> FieldOption | None:
        for option in self.options:
            if option.name == name:
                return option
        return None


@dataclass(frozen=True)
class ProjectBoard:
    id: str
    title: str
    fields: tuple[ProjectField, ...] = ()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> ProjectBoard:
        project_id = _require_str(payload, "id", "Project")
        title = payload.get("title")
        fields: list[ProjectField] = []
        for node in _connection_nodes(payload, "fields", f"Project {project_id}"):
            parsed = ProjectField.from_payload(node)
            if parsed is not None:
                fields.append(parsed)
        return cls(
            id=project_id,
            title=title if isinstance(title, str) else project_id,
            fields=tuple(fields),
        )

    def find_field(self, name: str) -> ProjectField | None:
        for candidate in self.fields:
            if candidate.name == name:
                return candidate
        return None


@dataclass(frozen=True)
class LinkedIssue:
    id: str
    number: int
    title: str
    projects: tuple[ProjectBoard, ...] = ()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> LinkedIssue:
        issue_id = _require_str(payload, "id", "Issue")
        number = payload.get("number")
        if not isinstance(number, int):
            raise ResponseShapeError(f"Issue {issue_id} response missing 'number'")
        title = payload.get("title")
        projects = tuple(
            ProjectBoard.from_payload(node)
            for node in _connection_nodes(payload, "projectsV2", f"Issue #{number}")
        )
        return cls(
            id=issue_id,
            number=number,
            title=title if isinstance(title, str) else "",
            projects=projects,
        )


@dataclass(frozen=True)
class PullRequestLinks:
    """A pull request together with the issues it closes and their boards."""

    id: str
    number: int | None
    title: str
    issues: tuple[LinkedIssue, ...] = ()

    @classmethod
    def from_payload(cls, data: Mapping[str, Any], pull_request_id: str) -> PullRequestLinks:
        node = data.get("node")
        if not isinstance(node, Mapping):
            raise ResponseShapeError(f"Pull request {pull_request_id} not found")
        number = node.get("number")
        title = node.get("title")
        issues = tuple(
            LinkedIssue.from_payload(issue)
            for issue in _connection_nodes(
                node, "closingIssuesReferences", f"Pull request {pull_request_id}"
            )
        )
        return cls(
            id=_require_str(node, "id", "Pull request"),
            number=number if isinstance(number, int) else None,
            title=title if isinstance(title, str) else "",
            issues=issues,
        )


@dataclass(frozen=True)
class FieldUpdate:
    issue_number: int
    project_id: str
    project_title: str
    field_id: str
    option_id: str
    item_id: str | None = None
    dry_run: bool = False


@dataclass(frozen=True)
class SkippedPair:
    issue_number: int
    project_title: str
    reason: str


@dataclass
class FieldSyncResult:
    pull_request_id: str
    updated: list[FieldUpdate] = field(default_factory=list)
    skipped: list[SkippedPair] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "pull_request_id": self.pull_request_id,
            "updated": [
                {
                    "issue_number": u.issue_number,
                    "project_id": u.project_id,
                    "project_title": u.project_title,
                    "item_id": u.item_id,
                    "field_id": u.field_id,
                    "option_id": u.option_id,
                    "dry_run": u.dry_run,
                }
                for u in self.updated
            ],
            "skipped": [
                {
                    "issue_number": s.issue_number,
                    "project_title": s.project_title,
                    "reason": s.reason,
                }
                for s in self.skipped
            ],
        }


__all__ = [
    "FieldOption",
    "FieldSyncResult",
    "FieldUpdate",
    "LinkedIssue",
    "ProjectBoard",
    "ProjectField",
    "PullRequestLinks",
    "SkippedPair",
]
