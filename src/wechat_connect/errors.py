# Error taxonomy shared by the OAuth client, webhook core and HTTP layer.
# Created: 2026-10-12

from __future__ import annotations


class WeChatConnectError(Exception):
    """Base class for every error raised by wechat_connect."""


class ProviderError(WeChatConnectError):
    """The WeChat API reported an application-level error inside a 200 response."""

    def __init__(self, code: int, message: str):
        super().__init__(f"WeChat API error {code}: {message}")
        self.code = code
        self.message = message


class TransportError(WeChatConnectError):
    """Network or HTTP-level failure talking to the WeChat API."""


class DecodeError(WeChatConnectError):
    """A JSON or XML payload could not be decoded into the expected shape."""


class VerificationFailed(WeChatConnectError):
    """Webhook signature did not match."""


class MissingParameter(WeChatConnectError):
    """A required query parameter was absent or empty."""

    def __init__(self, name: str):
        super().__init__(f"Missing required parameter: {name}")
        self.name = name


class ConfigError(WeChatConnectError, ValueError):
    """Startup configuration is incomplete or invalid."""
