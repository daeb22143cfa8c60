# Rich console logging with secret redaction.
# Created: 2026-10-12

from __future__ import annotations

import logging
import re

from rich.logging import RichHandler

_REDACT_PATTERN = re.compile(r"\b(secret|access_token|refresh_token|code)=([^&\s#\"']+)")


class SecretRedactingFilter(logging.Filter):
    """Mask credential-bearing query parameters in log records.

    Token endpoint URLs carry the app secret and OAuth codes in the query
    string, so anything that ends up formatting a URL into a log line is
    scrubbed here.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            # Left for Handler.handleError to report when the record is emitted.
            return True
        redacted = _REDACT_PATTERN.sub(r"\1=***", message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger with a Rich handler."""
    handler = RichHandler(rich_tracebacks=True, show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    handler.addFilter(SecretRedactingFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())

    # httpx logs every request URL at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
