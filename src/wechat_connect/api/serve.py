"""Application factory and server runner.

``create_app()`` wires the OAuth client, pending-state store, webhook
verifier and dispatcher onto ``app.state`` and mounts the login and webhook
routers. The dev-mode mock callback is only mounted when ``DEV_MODE`` is on.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response

from wechat_connect import __version__
from wechat_connect.config import Settings, get_settings
from wechat_connect.errors import DecodeError, MissingParameter, VerificationFailed
from wechat_connect.oauth import SessionStore, WeChatOAuthClient
from wechat_connect.webhook import MessageDispatcher, SignatureVerifier

logger = logging.getLogger(__name__)


async def _missing_parameter_handler(request: Request, exc: MissingParameter) -> Response:
    return PlainTextResponse(str(exc), status_code=400)


async def _verification_failed_handler(request: Request, exc: VerificationFailed) -> Response:
    client_ip = request.client.host if request.client else "unknown"
    logger.warning("Rejected webhook request from %s: %s", client_ip, exc)
    return Response(status_code=403)


async def _decode_error_handler(request: Request, exc: DecodeError) -> Response:
    logger.warning("Rejected malformed payload on %s: %s", request.url.path, exc)
    return PlainTextResponse("Malformed request body", status_code=400)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application."""
    from wechat_connect.api import health, login, wechat

    settings = settings or get_settings()

    app = FastAPI(
        title="WeChat Connect",
        description="WeChat OAuth2 login and official-account webhook.",
        version=__version__,
        docs_url="/docs" if settings.dev_mode else None,
        redoc_url=None,
    )

    app.state.settings = settings
    app.state.oauth_client = WeChatOAuthClient(
        settings.oauth_credentials(), timeout=settings.http_timeout
    )
    app.state.session_store = SessionStore(ttl_seconds=settings.state_ttl_seconds)
    app.state.verifier = SignatureVerifier(settings.wechat_token)
    app.state.dispatcher = MessageDispatcher(
        settings.webhook_credentials(), login_url=settings.wechat_login_url
    )

    # --- CORS -----------------------------------------------------------
    origins = settings.cors_allowed_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.middleware("http")
    async def security_headers_middleware(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    app.add_exception_handler(MissingParameter, _missing_parameter_handler)
    app.add_exception_handler(VerificationFailed, _verification_failed_handler)
    app.add_exception_handler(DecodeError, _decode_error_handler)

    app.include_router(login.router)
    app.include_router(wechat.router)
    app.include_router(health.router)
    if settings.dev_mode:
        app.include_router(login.dev_router)

    return app


def run_server(settings: Settings, reload: bool = False) -> None:
    """Start uvicorn on the configured host and port."""
    import uvicorn

    print("\n" + "=" * 50)
    print("WECHAT CONNECT")
    print("=" * 50)
    print(f"\nServer listening on http://{settings.server_address}")
    if settings.dev_mode:
        print("Development mode enabled: logins use mock profile data")
        print("The login flow can be tested without a real WeChat callback\n")
    else:
        print(f"WeChat app id: {settings.wechat_app_id}")
        print(f"Redirect URI:  {settings.wechat_redirect_uri}\n")

    if reload:
        import pathlib

        src_dir = str(pathlib.Path(__file__).resolve().parent.parent)
        uvicorn.run(
            "wechat_connect.api.serve:create_app",
            factory=True,
            host=settings.server_host,
            port=settings.server_port,
            reload=True,
            reload_dirs=[src_dir],
            reload_includes=["*.py"],
            log_level=settings.log_level.lower(),
        )
    else:
        uvicorn.run(
            create_app(settings),
            host=settings.server_host,
            port=settings.server_port,
            log_level=settings.log_level.lower(),
        )
