# WeChat official-account webhook: signatures, message codec, dispatch.
# Created: 2026-10-12

from wechat_connect.webhook.dispatcher import MessageDispatcher
from wechat_connect.webhook.messages import parse_message, render_reply
from wechat_connect.webhook.models import (
    NO_REPLY,
    InboundMessage,
    MessageType,
    NoReply,
    OutboundReply,
    TextReply,
    WebhookCredentials,
)
from wechat_connect.webhook.signature import SignatureVerifier, compute_signature

__all__ = [
    "NO_REPLY",
    "InboundMessage",
    "MessageDispatcher",
    "MessageType",
    "NoReply",
    "OutboundReply",
    "SignatureVerifier",
    "TextReply",
    "WebhookCredentials",
    "compute_signature",
    "parse_message",
    "render_reply",
]
