"""Access to the workflow event that triggered the run."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .errors import EventPayloadError


def load_event(path: str | Path | None = None) -> dict[str, Any]:
    """Read the event payload JSON.

    Falls back to ``GITHUB_EVENT_PATH``. A missing path or file yields an
    empty payload, which downstream reads as "no pull request".
    """
    location = path or os.environ.get("GITHUB_EVENT_PATH")
    if not location:
        return {}
    event_file = Path(location)
    if not event_file.is_file():
        return {}
    try:
        payload = json.loads(event_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise EventPayloadError(f"Event payload {event_file} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise EventPayloadError(f"Event payload {event_file} is not a JSON object")
    return payload


def pull_request_node_id(event: Mapping[str, Any]) -> str | None:
    pull_request = event.get("pull_request")
    if not pull_request:
        return None
    if not isinstance(pull_request, Mapping):
        raise EventPayloadError("Event 'pull_request' is not an object")
    node_id = pull_request.get("node_id")
    if not isinstance(node_id, str) or not node_id:
        raise EventPayloadError("Event pull request has no 'node_id'")
    return node_id


__all__ = ["load_event", "pull_request_node_id"]
