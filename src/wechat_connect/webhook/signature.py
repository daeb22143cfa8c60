"""Webhook request signatures.

WeChat signs every push with ``sha1(sorted([token, timestamp, nonce]))``
hex-encoded. Nothing from a webhook request is trusted until ``verify``
passes.
"""

import hashlib
import hmac

from wechat_connect.errors import VerificationFailed

__all__ = ["SignatureVerifier", "compute_signature"]


def compute_signature(token: str, timestamp: str, nonce: str) -> str:
    joined = "".join(sorted([token, timestamp, nonce]))
    return hashlib.sha1(joined.encode("utf-8")).hexdigest()


class SignatureVerifier:
    def __init__(self, token: str):
        self.token = token

    def verify(self, signature: str, timestamp: str, nonce: str) -> bool:
        expected = compute_signature(self.token, timestamp, nonce)
        return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))

    def handle_verification_challenge(
        self, signature: str, timestamp: str, nonce: str, echostr: str
    ) -> str:
        """Answer the server-configuration handshake.

        Returns *echostr* unchanged when the signature checks out.
        """
        if not self.verify(signature, timestamp, nonce):
            raise VerificationFailed("Webhook signature mismatch")
        return echostr
