# Message dispatcher: inbound push -> passive reply.
# Created: 2026-10-12
#
# Replies come from closed lookup tables. Unknown content, event names and
# event keys fall through to a default reply and are never errors.

from __future__ import annotations

import dataclasses
import logging

from wechat_connect.webhook.models import (
    NO_REPLY,
    InboundMessage,
    MessageType,
    OutboundReply,
    TextReply,
    WebhookCredentials,
)

logger = logging.getLogger(__name__)

LOGIN_URL_PLACEHOLDER = "{login_url}"

GREETING_REPLY = "你好！欢迎使用我们的服务！"
HELP_REPLY = "可用命令：\n- 你好：问候\n- 帮助：显示此帮助\n- 登录：获取登录链接"
LOGIN_REPLY = "请访问我们的网站进行登录：{login_url}"
DEFAULT_TEXT_REPLY = '感谢您的消息！如需帮助，请回复"帮助"。'

SUBSCRIBE_REPLY = '欢迎关注我们！\n\n您可以：\n- 回复"登录"获取登录链接\n- 回复"帮助"查看更多功能'
CLICK_LOGIN_REPLY = "请访问：{login_url} 进行登录"
CLICK_HELP_REPLY = "如需帮助，请联系客服"
CLICK_DEFAULT_REPLY = "感谢您的操作！"
DEFAULT_EVENT_REPLY = "感谢您的关注！"

IMAGE_REPLY = "收到您的图片，感谢分享！"
VOICE_REPLY = "收到您的语音消息！"
DEFAULT_REPLY = "感谢您的消息！"

# Ordered: first matching trigger set wins. Triggers are stored casefolded.
TEXT_REPLIES: tuple[tuple[frozenset[str], str], ...] = (
    (frozenset({"你好", "hello", "hi"}), GREETING_REPLY),
    (frozenset({"帮助", "help"}), HELP_REPLY),
    (frozenset({"登录", "login"}), LOGIN_REPLY),
)

CLICK_REPLIES: dict[str, str] = {
    "login": CLICK_LOGIN_REPLY,
    "help": CLICK_HELP_REPLY,
}

MEDIA_REPLIES: dict[MessageType, str] = {
    MessageType.IMAGE: IMAGE_REPLY,
    MessageType.VOICE: VOICE_REPLY,
}


def _normalize(value: str | None) -> str:
    return (value or "").strip().casefold()


class MessageDispatcher:
    """Classifies inbound messages and builds the reply for each."""

    def __init__(self, credentials: WebhookCredentials, login_url: str):
        self.credentials = credentials
        self.login_url = login_url

    def dispatch(self, msg: InboundMessage) -> OutboundReply:
        if msg.msg_type is MessageType.TEXT:
            return self.dispatch_text(msg)
        if msg.msg_type is MessageType.EVENT:
            return self.dispatch_event(msg)
        if msg.msg_type in MEDIA_REPLIES:
            return self._reply(msg, MEDIA_REPLIES[msg.msg_type])
        logger.debug("No handler for message type %r, sending default reply", msg.raw_type)
        return self._reply(msg, DEFAULT_REPLY)

    def dispatch_text(self, msg: InboundMessage) -> OutboundReply:
        content = _normalize(msg.content)
        for triggers, reply in TEXT_REPLIES:
            if content in triggers:
                return self._reply(msg, reply)
        return self._reply(msg, DEFAULT_TEXT_REPLY)

    def dispatch_event(self, msg: InboundMessage) -> OutboundReply:
        event = _normalize(msg.event)
        if event == "subscribe":
            logger.info("New follower %s", msg.from_user)
            return self._reply(msg, SUBSCRIBE_REPLY)
        if event == "unsubscribe":
            # WeChat discards replies to unsubscribe events.
            logger.info("Follower %s unsubscribed", msg.from_user)
            return NO_REPLY
        if event == "click":
            reply = CLICK_REPLIES.get(_normalize(msg.event_key), CLICK_DEFAULT_REPLY)
            return self._reply(msg, reply)
        return self._reply(msg, DEFAULT_EVENT_REPLY)

    def _reply(self, msg: InboundMessage, template: str) -> TextReply:
        content = template.replace(LOGIN_URL_PLACEHOLDER, self.login_url)
        reply = TextReply.answering(msg, content)
        if not reply.from_user:
            # Push arrived with an empty <ToUserName/>; answer as the configured account.
            reply = dataclasses.replace(reply, from_user=self.credentials.app_id)
        return reply
