# Login router: login page, OAuth callback, dev-mode mock callback.
# Created: 2026-10-12

from __future__ import annotations

import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse

from wechat_connect.api.deps import get_app_settings, get_oauth_client, get_session_store
from wechat_connect.api.pages import render_error_page, render_login_page, render_profile_page
from wechat_connect.config import Settings
from wechat_connect.errors import DecodeError, ProviderError, TransportError
from wechat_connect.oauth import (
    ProfileInfo,
    SessionStore,
    WeChatOAuthClient,
    generate_state,
    validate_state,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Login"])

# Only mounted when dev mode is on.
dev_router = APIRouter(tags=["Login (dev)"])

STATE_COOKIE = "wx_state"

MOCK_PROFILE = ProfileInfo(
    openid="mock_openid_123456",
    nickname="开发测试用户",
    sex=1,
    province="北京",
    city="北京",
    country="中国",
    headimgurl="https://via.placeholder.com/80x80?text=Mock",
    privilege=[],
    unionid="mock_unionid_789",
)

_UPSTREAM_ERRORS = (ProviderError, TransportError, DecodeError)


def _error(status_code: int, message: str) -> HTMLResponse:
    return HTMLResponse(render_error_page(message), status_code=status_code)


def _profile_response(profile: ProfileInfo) -> HTMLResponse:
    response = HTMLResponse(render_profile_page(profile))
    response.delete_cookie(STATE_COOKIE)
    return response


async def _check_state(request: Request, store: SessionStore, state: str) -> HTMLResponse | None:
    """Consume *state*; return an error response if it is not acceptable.

    The state must be pending in the store. If the browser still carries the
    cookie set by the login page, it has to match as well.
    """
    cookie_state = request.cookies.get(STATE_COOKIE)
    if cookie_state is not None and not validate_state(cookie_state, state):
        logger.warning("Login state does not match the browser cookie")
        return _error(400, "无效的状态参数")

    if not await store.consume(state):
        logger.warning("Unknown or expired login state")
        return _error(400, "无效的状态参数")
    return None


@router.get("/", response_class=HTMLResponse)
async def index(
    settings: Settings = Depends(get_app_settings),
    client: WeChatOAuthClient = Depends(get_oauth_client),
    store: SessionStore = Depends(get_session_store),
):
    """Render the login page with a fresh state-bound authorization link."""
    state = generate_state()
    await store.add(state)

    if settings.dev_mode:
        auth_url = "/dev-callback?" + urlencode({"code": "mock_code", "state": state})
    else:
        auth_url = client.build_authorization_url(state)

    response = HTMLResponse(render_login_page(auth_url, dev_mode=settings.dev_mode))
    response.set_cookie(
        STATE_COOKIE,
        state,
        max_age=settings.state_ttl_seconds,
        httponly=True,
        samesite="lax",
    )
    return response


@router.get("/callback", response_class=HTMLResponse)
async def callback(
    request: Request,
    code: str | None = Query(None),
    state: str | None = Query(None),
    error: str | None = Query(None),
    client: WeChatOAuthClient = Depends(get_oauth_client),
    store: SessionStore = Depends(get_session_store),
):
    """OAuth redirect target: exchange the code and show the user's profile."""
    if error:
        return _error(400, f"微信授权失败: {error}")
    if not code:
        return _error(400, "缺少授权码")
    if not state:
        return _error(400, "缺少状态参数")

    rejected = await _check_state(request, store, state)
    if rejected is not None:
        return rejected

    try:
        grant = await client.exchange_code(code)
    except _UPSTREAM_ERRORS as exc:
        logger.error("Access token exchange failed: %s", exc)
        return _error(502, f"获取访问令牌失败: {exc}")

    try:
        profile = await client.fetch_profile(grant.access_token, grant.openid)
    except _UPSTREAM_ERRORS as exc:
        logger.error("Profile fetch failed for %s: %s", grant.openid, exc)
        return _error(502, f"获取用户信息失败: {exc}")

    logger.info("User %s logged in", profile.openid)
    return _profile_response(profile)


@dev_router.get("/dev-callback", response_class=HTMLResponse)
async def dev_callback(
    request: Request,
    state: str | None = Query(None),
    store: SessionStore = Depends(get_session_store),
):
    """Mock callback that skips WeChat and returns a fixed profile.

    Only reachable in dev mode; create_app() leaves the route unmounted otherwise.
    """
    if not state:
        return _error(400, "缺少状态参数")

    rejected = await _check_state(request, store, state)
    if rejected is not None:
        return rejected

    logger.info("Dev-mode login with mock profile")
    return _profile_response(MOCK_PROFILE)
