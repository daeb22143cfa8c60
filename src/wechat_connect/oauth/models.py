# WeChat OAuth2 data models.
# Created: 2026-10-12

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

_GENDERS = {0: "unknown", 1: "male", 2: "female"}


@dataclass(frozen=True)
class OAuthCredentials:
    """App credentials registered with the WeChat open platform."""

    app_id: str
    app_secret: str
    redirect_uri: str


class AccessGrant(BaseModel):
    """Result of exchanging an authorization code (or refreshing one)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    access_token: str
    expires_in: int
    refresh_token: str
    openid: str
    scope: str
    unionid: str | None = None

    @property
    def subject_id(self) -> str:
        return self.openid


class ProfileInfo(BaseModel):
    """User profile returned by ``/sns/userinfo``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    openid: str
    nickname: str
    sex: int = 0
    province: str = ""
    city: str = ""
    country: str = ""
    headimgurl: str = ""
    privilege: list[str] = Field(default_factory=list)
    unionid: str | None = None

    @property
    def subject_id(self) -> str:
        return self.openid

    @property
    def display_name(self) -> str:
        return self.nickname

    @property
    def avatar_url(self) -> str:
        return self.headimgurl

    @property
    def gender(self) -> str:
        return _GENDERS.get(self.sex, "unknown")


class ProviderErrorBody(BaseModel):
    """``{"errcode": ..., "errmsg": ...}`` payload the API returns with HTTP 200."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    errcode: int
    errmsg: str = ""
