"""projectfieldsync CLI.

Subcommands:
  sync  -> set a single-select project field on every issue a pull request closes

Inside a workflow step the inputs come from ``INPUT_*`` variables and the pull
request from ``GITHUB_EVENT_PATH``; every value can be overridden by a flag.
"""

from __future__ import annotations

import argparse
import json
import os
from typing import Any

import requests

from projectfieldsync.config import resolve_config
from projectfieldsync.errors import FieldSyncError, classify_error
from projectfieldsync.event import load_event, pull_request_node_id
from projectfieldsync.field_sync import sync_pull_request
from projectfieldsync.logging import StructuredLogger, configure_logging

_MAX_HELP_WIDTH = 100


class _HelpFormatter(argparse.HelpFormatter):
    def __init__(self, prog: str) -> None:
        super().__init__(prog, max_help_position=30, width=_MAX_HELP_WIDTH)


class _FormatterArgumentParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("formatter_class", _HelpFormatter)
        super().__init__(*args, **kwargs)


def _build_parser() -> argparse.ArgumentParser:
    p = _FormatterArgumentParser(
        prog="projectfieldsync",
        description="Update a project field on the issues a pull request closes",
    )
    p.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress the run summary (env: PROJECTFIELDSYNC_QUIET=1)",
    )
    sub = p.add_subparsers(
        dest="cmd",
        required=True,
        parser_class=_FormatterArgumentParser,
        metavar="<command>",
    )

    ps = sub.add_parser("sync", help="Set the field on every linked project item")
    ps.add_argument("--config", help="Optional YAML config file")
    ps.add_argument(
        "--token",
        help="GitHub token (falls back to input github-token, then GITHUB_TOKEN/GH_TOKEN)",
    )
    ps.add_argument("--field-name", help="Single-select field name (exact match)")
    ps.add_argument("--field-value", help="Option name to select (exact match)")
    ps.add_argument(
        "--pr-node-id",
        help="Pull request node id; skips reading the event payload",
    )
    ps.add_argument("--event-path", help="Event payload JSON (defaults to GITHUB_EVENT_PATH)")
    ps.add_argument("--graphql-url", help="GraphQL endpoint (GitHub Enterprise)")
    ps.add_argument(
        "--dry-run",
        action="store_true",
        help="Resolve fields and options without sending mutations",
    )
    ps.add_argument("--json-logs", action="store_true", help="Emit one JSON object per log line")
    ps.add_argument(
        "--log-level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Log level (RUNNER_DEBUG=1 forces DEBUG)",
    )
    ps.add_argument("--summary-json", help="Write the run result to this JSON file")
    return p


def _report_failure(exc: BaseException, logger: StructuredLogger) -> int:
    info = classify_error(exc)
    logger.log_error(
        "field sync failed", error=info.message, category=info.category
    )
    # Workflow command: marks the step as failed in the job log.
    message = info.message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
    print(f"::error::{message}")
    return 1


def _cmd_sync(args: argparse.Namespace) -> int:
    # Provisional logger so configuration errors are reported too.
    logger = configure_logging(json_logging=args.json_logs, level=args.log_level or "INFO")
    try:
        pr_node_id = args.pr_node_id or pull_request_node_id(load_event(args.event_path))
    except FieldSyncError as exc:
        return _report_failure(exc, logger)
    if pr_node_id is None:
        logger.info("Payload doesn't contain a pull request, so nothing to be done.")
        return 0

    try:
        config = resolve_config(
            config_path=args.config,
            token=args.token,
            field_name=args.field_name,
            field_value=args.field_value,
            pull_request_id=pr_node_id,
            event_path=args.event_path,
            graphql_url=args.graphql_url,
            dry_run=True if args.dry_run else None,
            json_logs=True if args.json_logs else None,
            log_level=args.log_level,
        )
    except FieldSyncError as exc:
        return _report_failure(exc, logger)

    logger = configure_logging(
        json_logging=config.logging_json_enabled, level=config.logging_level
    )
    try:
        result = sync_pull_request(config, logger=logger)
    except (FieldSyncError, requests.RequestException) as exc:
        return _report_failure(exc, logger)

    if result is None:
        return 0
    if args.summary_json:
        with open(args.summary_json, "w", encoding="utf-8") as fh:
            json.dump(result.to_dict(), fh, indent=2)
            fh.write("\n")
    if not args.quiet:
        action = "planned" if config.dry_run else "updated"
        print(f"[sync] {action}={len(result.updated)} skipped={len(result.skipped)}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "quiet", False) and os.environ.get("PROJECTFIELDSYNC_QUIET") == "1":
        args.quiet = True
    if args.cmd == "sync":
        return _cmd_sync(args)
    parser.print_help()  # pragma: no cover - argparse enforces valid choices
    return 1  # pragma: no cover


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())


__all__ = ["main"]
