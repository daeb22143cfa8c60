# WeChat OAuth2 client: authorization URL, code exchange, profile, refresh.
# Created: 2026-10-12
#
# The WeChat API answers HTTP 200 for application errors too and signals them
# with an ``errcode`` field, so every response is inspected before it is
# decoded into the success model.

from __future__ import annotations

import json
import logging
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from wechat_connect.errors import DecodeError, ProviderError, TransportError
from wechat_connect.oauth.models import (
    AccessGrant,
    OAuthCredentials,
    ProfileInfo,
    ProviderErrorBody,
)

logger = logging.getLogger(__name__)

OPEN_BASE_URL = "https://open.weixin.qq.com"
API_BASE_URL = "https://api.weixin.qq.com"

AUTHORIZE_PATH = "/connect/oauth2/authorize"
ACCESS_TOKEN_PATH = "/sns/oauth2/access_token"
REFRESH_TOKEN_PATH = "/sns/oauth2/refresh_token"
USERINFO_PATH = "/sns/userinfo"

USERINFO_SCOPE = "snsapi_userinfo"

M = TypeVar("M", bound=BaseModel)


def _try_validate(model: type[M], data: dict) -> M | None:
    try:
        return model.model_validate(data)
    except ValidationError:
        return None


def decode_response(body: bytes | str, model: type[M]) -> ProviderErrorBody | M:
    """Decode an API response body in two stages.

    The raw JSON object is inspected for an ``errcode`` field first. Any
    body carrying it decodes as ProviderErrorBody, except ``errcode: 0``
    next to a complete *model* payload, which is a success. Bodies without
    the field are validated as *model*. Raises DecodeError if neither shape
    fits.
    """
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise DecodeError(f"Response is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object, got {type(data).__name__}")

    target: type[BaseModel] = model
    if "errcode" in data:
        target = ProviderErrorBody
        if data["errcode"] == 0:
            success = _try_validate(model, data)
            if success is not None:
                return success
    try:
        return target.model_validate(data)
    except ValidationError as exc:
        raise DecodeError(
            f"Unexpected {target.__name__} payload: {exc.error_count()} validation error(s)"
        ) from exc


class WeChatOAuthClient:
    """Client for the WeChat web-page authorization (snsapi_userinfo) flow.

    Holds no mutable state, so a single instance can serve concurrent
    requests. When *http_client* is omitted each call opens its own
    ``httpx.AsyncClient`` with *timeout*.
    """

    def __init__(
        self,
        credentials: OAuthCredentials,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
        api_base_url: str = API_BASE_URL,
        open_base_url: str = OPEN_BASE_URL,
    ):
        self.credentials = credentials
        self.timeout = timeout
        self.api_base_url = api_base_url.rstrip("/")
        self.open_base_url = open_base_url.rstrip("/")
        self._http = http_client

    def build_authorization_url(self, state: str) -> str:
        """Return the consent-page URL the browser should be sent to.

        Parameter order and the ``#wechat_redirect`` fragment are what WeChat
        expects; the redirect URI is fully percent-encoded.
        """
        return (
            f"{self.open_base_url}{AUTHORIZE_PATH}"
            f"?appid={self.credentials.app_id}"
            f"&redirect_uri={quote(self.credentials.redirect_uri, safe='')}"
            f"&response_type=code"
            f"&scope={USERINFO_SCOPE}"
            f"&state={state}"
            f"#wechat_redirect"
        )

    async def exchange_code(self, code: str) -> AccessGrant:
        """Exchange an authorization code for an access grant."""
        grant = await self._get(
            ACCESS_TOKEN_PATH,
            {
                "appid": self.credentials.app_id,
                "secret": self.credentials.app_secret,
                "code": code,
                "grant_type": "authorization_code",
            },
            AccessGrant,
        )
        logger.info("Exchanged authorization code for openid %s", grant.openid)
        return grant

    async def fetch_profile(self, access_token: str, openid: str) -> ProfileInfo:
        """Fetch the user's profile with a grant's access token."""
        return await self._get(
            USERINFO_PATH,
            {"access_token": access_token, "openid": openid, "lang": "zh_CN"},
            ProfileInfo,
        )

    async def refresh_grant(self, refresh_token: str) -> AccessGrant:
        """Trade a refresh token for a new access grant."""
        grant = await self._get(
            REFRESH_TOKEN_PATH,
            {
                "appid": self.credentials.app_id,
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
            },
            AccessGrant,
        )
        logger.info("Refreshed access grant for openid %s", grant.openid)
        return grant

    async def _get(self, path: str, params: dict[str, Any], model: type[M]) -> M:
        url = f"{self.api_base_url}{path}"
        try:
            if self._http is not None:
                resp = await self._http.get(url, params=params)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    resp = await client.get(url, params=params)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            # The exception text embeds the full URL, query secrets included.
            raise TransportError(
                f"GET {path} returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"GET {path} failed: {type(exc).__name__}") from exc

        result = decode_response(resp.content, model)
        if isinstance(result, ProviderErrorBody):
            logger.warning(
                "WeChat API %s returned errcode=%s: %s", path, result.errcode, result.errmsg
            )
            raise ProviderError(result.errcode, result.errmsg)
        return result
