# Settings loaded from the environment (and an optional .env file).
# Created: 2026-10-12

from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from wechat_connect.errors import ConfigError
from wechat_connect.oauth.models import OAuthCredentials
from wechat_connect.webhook.models import WebhookCredentials

REQUIRED_ENV_HELP = """Set the following environment variables:
   WECHAT_APP_ID=<your WeChat app id>
   WECHAT_APP_SECRET=<your WeChat app secret>
   WECHAT_REDIRECT_URI=http://localhost:3000/callback (optional)"""


class Settings(BaseSettings):
    """Runtime configuration.

    Field names map to upper-case environment variables, e.g.
    ``wechat_app_id`` <- ``WECHAT_APP_ID``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    wechat_app_id: str = ""
    wechat_app_secret: str = ""
    wechat_redirect_uri: str = "http://localhost:3000/callback"
    wechat_token: str = "your_wechat_token"
    wechat_encoding_aes_key: str | None = None
    wechat_login_url: str = "http://your-domain.com"

    server_host: str = "0.0.0.0"
    server_port: int = Field(default=3000, ge=1, le=65535)
    dev_mode: bool = False

    state_ttl_seconds: int = Field(default=600, gt=0)
    http_timeout: float = Field(default=15.0, gt=0)
    # Comma-separated in the environment, e.g. "https://a.example.com,https://b.example.com"
    cors_allowed_origins: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @field_validator("cors_allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                return json.loads(stripped)
            return [origin.strip() for origin in stripped.split(",") if origin.strip()]
        return value

    @classmethod
    def load(cls) -> Settings:
        return cls()

    @property
    def server_address(self) -> str:
        return f"{self.server_host}:{self.server_port}"

    def validate_required(self) -> None:
        """Raise ConfigError if the credentials needed to talk to WeChat are missing."""
        if not self.wechat_app_id:
            raise ConfigError("WeChat App ID cannot be empty")
        if not self.wechat_app_secret:
            raise ConfigError("WeChat App Secret cannot be empty")
        if not self.wechat_redirect_uri.startswith("http"):
            raise ConfigError("WeChat Redirect URI must be a valid HTTP(S) URL")

    def oauth_credentials(self) -> OAuthCredentials:
        return OAuthCredentials(
            app_id=self.wechat_app_id,
            app_secret=self.wechat_app_secret,
            redirect_uri=self.wechat_redirect_uri,
        )

    def webhook_credentials(self) -> WebhookCredentials:
        return WebhookCredentials(
            token=self.wechat_token,
            app_id=self.wechat_app_id,
            app_secret=self.wechat_app_secret,
            encoding_aes_key=self.wechat_encoding_aes_key,
        )


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings instance."""
    return Settings.load()
