"""projectfieldsync - set a GitHub Projects field on the issues a pull request closes.

from projectfieldsync import FieldSyncTask, GitHubGraphQLClient

client = GitHubGraphQLClient(token=token)
result = FieldSyncTask(client).run(pr_node_id, "Status", "Done")
print(len(result.updated), len(result.skipped))

The CLI (``projectfieldsync sync``) wraps the same calls for workflow steps.
"""

from __future__ import annotations

from .config import ConfigError, SyncConfig, resolve_config
from .errors import FieldSyncError, ResponseShapeError
from .field_sync import FieldSyncTask, sync_pull_request
from .github_graphql import GitHubAPIError, GitHubGraphQLClient
from .models import FieldSyncResult

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "FieldSyncError",
    "FieldSyncResult",
    "FieldSyncTask",
    "GitHubAPIError",
    "GitHubGraphQLClient",
    "ResponseShapeError",
    "SyncConfig",
    "resolve_config",
    "sync_pull_request",
    "__version__",
]
