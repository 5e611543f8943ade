"""Configuration for the REST server."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from grant_liaison.liaison.config import LiaisonSettings


class ServerSettings(LiaisonSettings):
    """Settings for the REST API.

    Inherits the engine settings (state path, defaults) and adds HTTP concerns.
    """

    # Dev-friendly CORS for a local dashboard. Override via LIAISON_CORS_ORIGINS=...
    cors_origins: str = Field(
        default="http://localhost:3000,http://127.0.0.1:3000",
        validation_alias="LIAISON_CORS_ORIGINS",
        description="Comma-separated list of allowed CORS origins.",
    )

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    def parsed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
