"""Set a single-select project field on the issues a pull request closes.

For every (issue, board) pair linked to the pull request the named field and
option are looked up by exact name. Pairs where either is missing are skipped
with a log line; everything else gets two mutations: one to obtain the
board item id, one to set the field. Remote failures are not caught here and
end the run.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .config import SyncConfig
from .event import load_event, pull_request_node_id
from .github_graphql import (
    GitHubGraphQLClient,
    GraphQLTransport,
    ensure_project_item,
    fetch_linked_issues,
    set_single_select,
)
from .logging import StructuredLogger, get_logger
from .models import FieldSyncResult, FieldUpdate, LinkedIssue, ProjectBoard, SkippedPair

SKIP_FIELD_MISSING = "field_missing"
SKIP_OPTION_MISSING = "option_missing"


class FieldSyncTask:
    def __init__(
        self,
        client: GraphQLTransport,
        *,
        logger: StructuredLogger | None = None,
        dry_run: bool = False,
    ) -> None:
        self.client = client
        self.logger = logger or get_logger()
        self.dry_run = dry_run

    def run(self, pr_node_id: str, field_name: str, field_value: str) -> FieldSyncResult:
        result = FieldSyncResult(pull_request_id=pr_node_id)
        with self.logger.timed_operation("field_sync", pull_request_id=pr_node_id):
            links = fetch_linked_issues(self.client, pr_node_id)
            self.logger.info(
                f"Pull request {links.id} closes {len(links.issues)} issue(s)",
                pull_request_id=links.id,
                issue_count=len(links.issues),
            )
            for issue in links.issues:
                for board in issue.projects:
                    self._sync_pair(issue, board, field_name, field_value, result)
        return result

    def _sync_pair(
        self,
        issue: LinkedIssue,
        board: ProjectBoard,
        field_name: str,
        field_value: str,
        result: FieldSyncResult,
    ) -> None:
        field = board.find_field(field_name)
        if field is None:
            self.logger.log_skip(
                f"Issue #{issue.number} has a card on project {board.title}, but there is "
                f"no field named {field_name}, so it won't be moved.",
                reason=SKIP_FIELD_MISSING,
                issue_number=issue.number,
                project_title=board.title,
                project_id=board.id,
                field_name=field_name,
            )
            result.skipped.append(SkippedPair(issue.number, board.title, SKIP_FIELD_MISSING))
            return

        option = field.find_option(field_value)
        if option is None:
            self.logger.log_skip(
                f"Issue #{issue.number} has a card on project {board.title}, but the field "
                f"named {field_name} doesn't have an option {field_value}, so it won't be moved.",
                reason=SKIP_OPTION_MISSING,
                issue_number=issue.number,
                project_title=board.title,
                project_id=board.id,
                field_name=field_name,
                field_value=field_value,
            )
            result.skipped.append(SkippedPair(issue.number, board.title, SKIP_OPTION_MISSING))
            return

        if self.dry_run:
            self.logger.log_field_update(
                issue_number=issue.number,
                project_title=board.title,
                project_id=board.id,
                field_name=field_name,
                field_value=field_value,
                dry_run=True,
            )
            result.updated.append(
                FieldUpdate(
                    issue_number=issue.number,
                    project_id=board.id,
                    project_title=board.title,
                    field_id=field.id,
                    option_id=option.id,
                    dry_run=True,
                )
            )
            return

        item_id = ensure_project_item(self.client, board.id, issue.id)
        self.logger.debug(
            "resolved project item", project_id=board.id, content_id=issue.id, item_id=item_id
        )
        self.logger.log_field_update(
            issue_number=issue.number,
            project_title=board.title,
            project_id=board.id,
            field_name=field_name,
            field_value=field_value,
            item_id=item_id,
        )
        set_single_select(self.client, board.id, item_id, field.id, option.id)
        result.updated.append(
            FieldUpdate(
                issue_number=issue.number,
                project_id=board.id,
                project_title=board.title,
                field_id=field.id,
                option_id=option.id,
                item_id=item_id,
            )
        )


def sync_pull_request(
    config: SyncConfig,
    *,
    client: GraphQLTransport | None = None,
    event: Mapping[str, Any] | None = None,
    logger: StructuredLogger | None = None,
) -> FieldSyncResult | None:
    """Run the field sync for the pull request in ``config`` or the event.

    Returns ``None`` without touching the API when there is no pull request.
    """
    log = logger or get_logger()
    pr_node_id = config.pull_request_id
    if pr_node_id is None:
        payload = event if event is not None else load_event(config.event_path)
        pr_node_id = pull_request_node_id(payload)
    if pr_node_id is None:
        log.info("Payload doesn't contain a pull request, so nothing to be done.")
        return None

    transport = client or GitHubGraphQLClient(
        token=config.token, graphql_url=config.graphql_url, logger=log
    )
    task = FieldSyncTask(transport, logger=log, dry_run=config.dry_run)
    return task.run(pr_node_id, config.field_name, config.field_value)


__all__ = ["FieldSyncTask", "SKIP_FIELD_MISSING", "SKIP_OPTION_MISSING", "sync_pull_request"]
