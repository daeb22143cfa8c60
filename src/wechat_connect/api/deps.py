# Shared FastAPI dependencies for the HTTP layer.
# Created: 2026-10-12
#
# Components are built once by create_app() and kept on app.state.

from __future__ import annotations

from fastapi import Request

from wechat_connect.config import Settings
from wechat_connect.errors import MissingParameter
from wechat_connect.oauth import SessionStore, WeChatOAuthClient
from wechat_connect.webhook import MessageDispatcher, SignatureVerifier


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_oauth_client(request: Request) -> WeChatOAuthClient:
    return request.app.state.oauth_client


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_verifier(request: Request) -> SignatureVerifier:
    return request.app.state.verifier


def get_dispatcher(request: Request) -> MessageDispatcher:
    return request.app.state.dispatcher


def require_param(value: str | None, name: str) -> str:
    """Return *value*, or raise MissingParameter if it is absent or empty."""
    if not value:
        raise MissingParameter(name)
    return value
