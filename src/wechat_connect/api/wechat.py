# WeChat webhook router: server verification (GET) and message push (POST).
# Created: 2026-10-12
#
# The signature is checked before the body is even read; failures are raised
# as VerificationFailed / MissingParameter / DecodeError and mapped to status
# codes by the handlers registered in create_app().

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse, Response

from wechat_connect.api.deps import get_dispatcher, get_verifier, require_param
from wechat_connect.errors import VerificationFailed
from wechat_connect.webhook import (
    MessageDispatcher,
    NoReply,
    SignatureVerifier,
    parse_message,
    render_reply,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["WeChat"])

XML_MEDIA_TYPE = "application/xml; charset=utf-8"


@router.get("/wechat", response_class=PlainTextResponse)
async def verify_server(
    signature: str | None = Query(None),
    timestamp: str | None = Query(None),
    nonce: str | None = Query(None),
    echostr: str | None = Query(None),
    verifier: SignatureVerifier = Depends(get_verifier),
):
    """Server-configuration handshake: echo ``echostr`` back if signed."""
    echo = verifier.handle_verification_challenge(
        require_param(signature, "signature"),
        require_param(timestamp, "timestamp"),
        require_param(nonce, "nonce"),
        require_param(echostr, "echostr"),
    )
    logger.info("WeChat server verification succeeded")
    return PlainTextResponse(echo)


@router.post("/wechat")
async def receive_message(
    request: Request,
    signature: str | None = Query(None),
    timestamp: str | None = Query(None),
    nonce: str | None = Query(None),
    openid: str | None = Query(None),
    encrypt_type: str | None = Query(None),
    msg_signature: str | None = Query(None),
    verifier: SignatureVerifier = Depends(get_verifier),
    dispatcher: MessageDispatcher = Depends(get_dispatcher),
):
    """Handle a pushed message and answer with a passive reply."""
    if not verifier.verify(
        require_param(signature, "signature"),
        require_param(timestamp, "timestamp"),
        require_param(nonce, "nonce"),
    ):
        raise VerificationFailed("Webhook signature mismatch")

    if encrypt_type and encrypt_type.lower() != "raw":
        # Compatible mode still carries the plaintext fields; pure safe mode
        # does not and fails to parse below.
        logger.debug("Ignoring %s envelope, reading plaintext fields", encrypt_type)

    msg = parse_message(await request.body())
    logger.debug(
        "Received %s message from %s (openid param %s)", msg.raw_type, msg.from_user, openid
    )

    reply = dispatcher.dispatch(msg)
    body = render_reply(reply)
    if isinstance(reply, NoReply):
        return PlainTextResponse(body)
    return Response(content=body, media_type=XML_MEDIA_TYPE)
