# WeChat OAuth2 login: state tokens, client, pending-state store.
# Created: 2026-10-12

from wechat_connect.oauth.client import WeChatOAuthClient
from wechat_connect.oauth.models import AccessGrant, OAuthCredentials, ProfileInfo
from wechat_connect.oauth.session_store import SessionStore
from wechat_connect.oauth.state import generate_state, validate_state

__all__ = [
    "AccessGrant",
    "OAuthCredentials",
    "ProfileInfo",
    "SessionStore",
    "WeChatOAuthClient",
    "generate_state",
    "validate_state",
]
