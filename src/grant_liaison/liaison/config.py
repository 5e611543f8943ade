"""Configuration for the liaison engine.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LiaisonSettings(BaseSettings):
    """Settings for the liaison engine.

    Environment variables:
    - LOG_LEVEL                         (optional)
    - LIAISON_STATE_PATH                (optional)
    - LIAISON_DEFAULT_FOLLOW_UP_DAYS    (optional)
    - LIAISON_DEFAULT_CHANGED_BY        (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `LiaisonSettings(_env_file=path_to_env)`.
    """

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    state_path: Path = Field(
        default=Path("liaison_state"),
        validation_alias="LIAISON_STATE_PATH",
        description="Directory where applications and calls are persisted",
    )

    default_follow_up_days: int = Field(
        default=30,
        validation_alias="LIAISON_DEFAULT_FOLLOW_UP_DAYS",
        description="Days after creation used as an application's default follow-up date",
        ge=0,
        le=365,
    )

    default_changed_by: str = Field(
        default="User",
        validation_alias="LIAISON_DEFAULT_CHANGED_BY",
        description="Name recorded on status changes when the caller does not supply one",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @property
    def state_file(self) -> Path:
        """Path where applications and calls are persisted."""

        return self.state_path / "liaison.json"
