"""Environment-based authentication for projectfieldsync.

Looks up a GitHub token in the process environment, optionally after loading
a ``.env`` file, so local runs behave like the workflow step.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .logging import get_logger

ALTERNATIVE_TOKEN_VARS = ("GH_TOKEN", "GITHUB_ACCESS_TOKEN", "GH_ACCESS_TOKEN", "GITHUB_PAT")


@dataclass
class EnvAuthConfig:
    """Configuration for environment-based authentication."""

    load_dotenv: bool = True
    dotenv_path: str | None = None
    github_token_var: str = "GITHUB_TOKEN"


class EnvironmentAuthManager:
    """Resolves credentials from environment variables and .env files."""

    def __init__(self, config: EnvAuthConfig):
        self.config = config
        self.logger = get_logger()
        self._dotenv_loaded = False
        # Workflow runs take credentials from step inputs and secrets only.
        if config.load_dotenv and not self.is_actions_environment():
            self._load_dotenv()

    @property
    def dotenv_loaded(self) -> bool:
        return self._dotenv_loaded

    def _load_dotenv(self) -> None:
        """Load the first .env file found; never overrides existing variables."""
        candidates = (
            [self.config.dotenv_path] if self.config.dotenv_path else [".env", ".env.local"]
        )
        for location in candidates:
            env_path = Path(location)
            if env_path.is_file():
                load_dotenv(str(env_path), override=False)
                self._dotenv_loaded = True
                self.logger.debug(f"Loaded environment variables from {env_path}")
                break

    def get_github_token(self) -> str | None:
        """Get GitHub token from environment variables."""
        token = os.getenv(self.config.github_token_var)
        if token and token.strip():
            self.logger.debug("Found GitHub token in environment variables")
            return token.strip()

        for alt_var in ALTERNATIVE_TOKEN_VARS:
            token = os.getenv(alt_var)
            if token and token.strip():
                self.logger.debug(f"Found GitHub token in {alt_var}")
                return token.strip()

        return None

    def is_actions_environment(self) -> bool:
        return os.getenv("GITHUB_ACTIONS") == "true" or bool(os.getenv("CI"))


def create_env_auth_manager(config: EnvAuthConfig | None = None) -> EnvironmentAuthManager:
    """Factory function to create environment authentication manager."""
    if config is None:
        config = EnvAuthConfig()
    return EnvironmentAuthManager(config)


__all__ = ["EnvAuthConfig", "EnvironmentAuthManager", "create_env_auth_manager"]
