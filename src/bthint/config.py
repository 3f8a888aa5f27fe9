# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Runtime configuration loaded from the environment.

Every setting can be overridden through a ``BTHINT_``-prefixed environment
variable or a ``.env`` file in the working directory.
"""

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bthint.detector import DeadlinePolicy

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Bot and detector settings."""

    model_config = SettingsConfigDict(
        env_prefix="BTHINT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Checker
    checker_executable: str = Field(
        default="php",
        description="PHP binary used for lint-only syntax checks.",
    )
    deadline_policy: DeadlinePolicy = Field(
        default="abort_search",
        description="Search behaviour after a window deadline expires.",
    )

    # Slack
    slack_bot_token: str = Field(
        default="",
        description="Bot user OAuth token (xoxb-...).",
    )
    slack_app_token: str = Field(
        default="",
        description="App-level token for Socket Mode (xapp-...).",
    )
    target_workspace: str | None = Field(
        default=None,
        description="Only answer messages from this workspace (team id).",
    )
    invite_link: str | None = Field(
        default=None,
        description="Install link returned by the invite command.",
    )
    invite_command: str = Field(
        default="bthint invite",
        description="Exact message text that requests the invite link.",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR.",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Normalize log level to uppercase."""
        return v.upper()

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level, logging.INFO)
