# Webhook message and reply types.
# Created: 2026-10-12

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class WebhookCredentials:
    """Server configuration for the official-account webhook.

    ``encoding_aes_key`` is carried for completeness; encrypted mode is not
    supported.
    """

    token: str
    app_id: str
    app_secret: str
    encoding_aes_key: str | None = None


class MessageType(str, Enum):
    TEXT = "text"
    EVENT = "event"
    IMAGE = "image"
    VOICE = "voice"
    OTHER = "other"

    @classmethod
    def from_raw(cls, raw: str) -> MessageType:
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class InboundMessage:
    """A message or event pushed by WeChat.

    ``to_user`` is the official account, ``from_user`` the sender's openid.
    """

    to_user: str
    from_user: str
    create_time: int
    msg_type: MessageType
    raw_type: str = ""
    content: str | None = None
    msg_id: int | None = None
    event: str | None = None
    event_key: str | None = None


@dataclass(frozen=True)
class TextReply:
    """A passive text reply, addressed back to the sender."""

    to_user: str
    from_user: str
    content: str

    @classmethod
    def answering(cls, msg: InboundMessage, content: str) -> TextReply:
        return cls(to_user=msg.from_user, from_user=msg.to_user, content=content)


@dataclass(frozen=True)
class NoReply:
    """Acknowledge without replying; rendered as the literal ``success``."""


NO_REPLY = NoReply()

OutboundReply = TextReply | NoReply
