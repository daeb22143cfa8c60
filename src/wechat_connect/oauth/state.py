"""CSRF state tokens for the OAuth login flow.

A state is an opaque URL-safe string with 256 bits of entropy. It is issued
when the login page is rendered and must come back unchanged on the
provider's callback.
"""

import hmac
import secrets

__all__ = ["generate_state", "validate_state"]


def generate_state() -> str:
    """Return a fresh random state token."""
    return secrets.token_urlsafe(32)


def validate_state(expected: str, received: str) -> bool:
    """Constant-time comparison of two state tokens.

    Non-string or empty values never validate.
    """
    if not isinstance(expected, str) or not isinstance(received, str):
        return False
    if not expected or not received:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), received.encode("utf-8"))
