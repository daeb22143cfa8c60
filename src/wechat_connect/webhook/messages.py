# XML codec for webhook pushes and passive replies.
# Created: 2026-10-12

from __future__ import annotations

import time
import xml.etree.ElementTree as ET

from wechat_connect.errors import DecodeError
from wechat_connect.webhook.models import (
    InboundMessage,
    MessageType,
    NoReply,
    OutboundReply,
    TextReply,
)

NO_REPLY_BODY = "success"

_REQUIRED_FIELDS = ("ToUserName", "FromUserName", "CreateTime", "MsgType")

_TEXT_REPLY_TEMPLATE = """<xml>
<ToUserName>{to_user}</ToUserName>
<FromUserName>{from_user}</FromUserName>
<CreateTime>{create_time}</CreateTime>
<MsgType><![CDATA[text]]></MsgType>
<Content>{content}</Content>
</xml>"""


def _text(root: ET.Element, tag: str) -> str | None:
    node = root.find(tag)
    if node is None:
        return None
    return node.text or ""


def _int_field(root: ET.Element, tag: str, *, required: bool) -> int | None:
    raw = _text(root, tag)
    if raw is None or raw.strip() == "":
        if required:
            raise DecodeError(f"Missing <{tag}> element")
        return None
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise DecodeError(f"<{tag}> is not an integer: {raw!r}") from exc


def parse_message(body: bytes | str) -> InboundMessage:
    """Parse a pushed ``<xml>`` document into an InboundMessage."""
    if not body:
        raise DecodeError("Empty message body")
    try:
        root = ET.fromstring(body)
    except (ET.ParseError, ValueError) as exc:
        raise DecodeError(f"Malformed XML: {exc}") from exc

    if root.tag != "xml":
        raise DecodeError(f"Unexpected root element <{root.tag}>")

    for tag in _REQUIRED_FIELDS:
        if _text(root, tag) is None:
            raise DecodeError(f"Missing <{tag}> element")

    raw_type = _text(root, "MsgType") or ""
    return InboundMessage(
        to_user=_text(root, "ToUserName") or "",
        from_user=_text(root, "FromUserName") or "",
        create_time=_int_field(root, "CreateTime", required=True),
        msg_type=MessageType.from_raw(raw_type),
        raw_type=raw_type,
        content=_text(root, "Content"),
        msg_id=_int_field(root, "MsgId", required=False),
        event=_text(root, "Event"),
        event_key=_text(root, "EventKey"),
    )


def cdata(value: str) -> str:
    """Wrap *value* in a CDATA section, splitting any embedded ``]]>``."""
    return "<![CDATA[" + value.replace("]]>", "]]]]><![CDATA[>") + "]]>"


def render_reply(reply: OutboundReply, now: int | None = None) -> str:
    """Serialize a reply for the HTTP response body.

    ``NoReply`` becomes the bare ``success`` acknowledgement, never XML.
    """
    if isinstance(reply, NoReply):
        return NO_REPLY_BODY
    if not isinstance(reply, TextReply):
        raise TypeError(f"Unsupported reply type: {type(reply).__name__}")
    return _TEXT_REPLY_TEMPLATE.format(
        to_user=cdata(reply.to_user),
        from_user=cdata(reply.from_user),
        create_time=int(time.time()) if now is None else now,
        content=cdata(reply.content),
    )
