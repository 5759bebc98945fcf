"""Application configuration loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import Sequence

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GraphAuthSettings(BaseSettings):
    """Configuration for the Facebook authentication client."""

    model_config = SettingsConfigDict(env_prefix="GRAPH_AUTH_", extra="ignore")

    graph_api_base_url: str = Field(
        default="https://graph.facebook.com",
        description="Base URL of the Meta Graph API",
    )
    facebook_oauth_base_url: str = Field(
        default="https://www.facebook.com",
        description="Base URL for the Facebook login dialog",
    )
    graph_api_version: str = Field(
        default="v18.0",
        description="Graph API version to target",
    )
    app_id: str = Field(..., description="Facebook App ID (OAuth client id)")
    app_secret: SecretStr = Field(..., description="Facebook App secret (OAuth client secret)")
    oauth_redirect_uri: str = Field(
        default="http://localhost:8000/oauth/callback",
        description="Redirect URI registered with the Facebook app",
    )
    default_scopes: Sequence[str] = Field(
        default=("email",),
        description="Scopes requested when none are given",
    )
    default_timeout_seconds: float = Field(default=30.0, ge=1.0, description="HTTP request timeout")
    enable_request_logging: bool = Field(default=False, description="Emit request/response logs")
    pii_redaction_keys: Sequence[str] = Field(
        default=("access_token", "client_secret", "code", "authorization", "password"),
        description="Keys that should be redacted in logs",
    )

    @field_validator("graph_api_version")
    def _validate_version(cls, value: str) -> str:
        if not value.startswith("v"):
            msg = "Graph API versions must be prefixed with 'v'"
            raise ValueError(msg)
        return value


@lru_cache(maxsize=1)
def get_settings() -> GraphAuthSettings:
    """Return cached settings instance."""

    return GraphAuthSettings()  # type: ignore[call-arg]


__all__ = ["GraphAuthSettings", "get_settings"]
