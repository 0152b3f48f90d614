from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

import yaml

from .env_auth import EnvAuthConfig, create_env_auth_manager
from .errors import FieldSyncError
from .github_graphql import DEFAULT_GRAPHQL_URL

INPUT_TOKEN = "github-token"
INPUT_FIELD_NAME = "project-field-name"
INPUT_FIELD_VALUE = "project-field-value"


class ConfigError(FieldSyncError):
    pass


@dataclass
class SyncConfig:
    token: str
    field_name: str
    field_value: str
    pull_request_id: str | None = None
    event_path: str | None = None
    graphql_url: str = DEFAULT_GRAPHQL_URL
    dry_run: bool = False
    # Logging configuration
    logging_json_enabled: bool = False
    logging_level: str = "INFO"


@dataclass
class FileConfig:
    """Values read from an optional YAML config file."""

    token: str | None = None
    field_name: str | None = None
    field_value: str | None = None
    graphql_url: str | None = None
    dry_run: bool | None = None
    logging_json_enabled: bool | None = None
    logging_level: str | None = None
    env_auth_load_dotenv: bool = True
    env_auth_dotenv_path: str | None = None


def get_input(name: str) -> str:
    """Read a workflow step input the way ``@actions/core.getInput`` does."""
    key = f"INPUT_{name.replace(' ', '_').upper()}"
    return os.environ.get(key, "").strip()


def _resolve_env_var(value: Any) -> Any:
    """Resolve environment variable if value starts with $."""
    if isinstance(value, str) and value.startswith('$'):
        return os.getenv(value[1:], value)
    return value


def _optional_bool(value: Any) -> bool | None:
    return None if value is None else bool(value)


def load_config(path: str | Path) -> FileConfig:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f'Configuration file not found: {p}')
    try:
        raw = yaml.safe_load(p.read_text(encoding='utf-8')) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f'Invalid YAML in {p}: {exc}') from exc
    if not isinstance(raw, dict):
        raise ConfigError(f'Configuration file {p} must contain a mapping')
    raw = cast(dict[str, Any], raw)
    project = cast(dict[str, Any], raw.get('project', {}) or {})
    gh = cast(dict[str, Any], raw.get('github', {}) or {})
    behavior = cast(dict[str, Any], raw.get('behavior', {}) or {})
    logging_config = cast(dict[str, Any], raw.get('logging', {}) or {})
    env_auth = cast(dict[str, Any], raw.get('environment', {}) or {})

    token = _resolve_env_var(gh.get('token'))
    # An unresolved $VAR reference means no token.
    if isinstance(token, str) and token.startswith('$'):
        token = None

    return FileConfig(
        token=token,
        field_name=project.get('field_name'),
        field_value=project.get('field_value'),
        graphql_url=gh.get('graphql_url'),
        dry_run=_optional_bool(behavior.get('dry_run')),
        logging_json_enabled=_optional_bool(logging_config.get('json_enabled')),
        logging_level=logging_config.get('level'),
        env_auth_load_dotenv=bool(env_auth.get('load_dotenv', True)),
        env_auth_dotenv_path=env_auth.get('dotenv_path'),
    )


def _first(*values: str | None) -> str | None:
    for value in values:
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def resolve_config(
    *,
    config_path: str | Path | None = None,
    token: str | None = None,
    field_name: str | None = None,
    field_value: str | None = None,
    pull_request_id: str | None = None,
    event_path: str | None = None,
    graphql_url: str | None = None,
    dry_run: bool | None = None,
    json_logs: bool | None = None,
    log_level: str | None = None,
) -> SyncConfig:
    """Build a SyncConfig.

    Precedence: explicit arguments, workflow inputs, config file, environment
    token lookup, defaults.
    """
    file_cfg = load_config(config_path) if config_path else FileConfig()

    resolved_token = _first(token, get_input(INPUT_TOKEN), file_cfg.token)
    if resolved_token is None:
        manager = create_env_auth_manager(
            EnvAuthConfig(
                load_dotenv=file_cfg.env_auth_load_dotenv,
                dotenv_path=file_cfg.env_auth_dotenv_path,
            )
        )
        resolved_token = manager.get_github_token()
    if not resolved_token:
        raise ConfigError(
            f"GitHub token required (input '{INPUT_TOKEN}', --token or GITHUB_TOKEN)"
        )

    # Field and option names are matched exactly, so only surrounding
    # whitespace from the input layer is dropped.
    resolved_field = _first(field_name, get_input(INPUT_FIELD_NAME), file_cfg.field_name)
    if resolved_field is None:
        raise ConfigError(f"Project field name required (input '{INPUT_FIELD_NAME}')")
    resolved_value = _first(field_value, get_input(INPUT_FIELD_VALUE), file_cfg.field_value)
    if resolved_value is None:
        raise ConfigError(f"Project field value required (input '{INPUT_FIELD_VALUE}')")

    level = log_level or file_cfg.logging_level or 'INFO'
    if os.environ.get('RUNNER_DEBUG') == '1':
        level = 'DEBUG'

    return SyncConfig(
        token=resolved_token,
        field_name=resolved_field,
        field_value=resolved_value,
        pull_request_id=_first(pull_request_id),
        event_path=_first(event_path),
        graphql_url=graphql_url or file_cfg.graphql_url or DEFAULT_GRAPHQL_URL,
        dry_run=bool(dry_run if dry_run is not None else file_cfg.dry_run),
        logging_json_enabled=bool(
            json_logs if json_logs is not None else file_cfg.logging_json_enabled
        ),
        logging_level=level.upper(),
    )


__all__ = ["ConfigError", "FileConfig", "SyncConfig", "get_input", "load_config", "resolve_config"]
