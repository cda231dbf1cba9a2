"""
LINE Signature Verification

SECURITY BOUNDARY - Verify the X-Line-Signature HMAC.
No agent imports. No retries. No logic.
"""

import base64
import hashlib
import hmac
from typing import Optional

SIGNATURE_HEADER = "X-Line-Signature"


class SignatureVerificationError(Exception):
    """Signature verification failed."""
    pass


def compute_signature(channel_secret: str, body: bytes) -> str:
    """Base64 HMAC-SHA256 of the raw body, keyed with the channel secret."""
    digest = hmac.new(
        key=channel_secret.encode("utf-8"),
        msg=body,
        digestmod=hashlib.sha256
    ).digest()
    return base64.b64encode(digest).decode("utf-8")


def verify_signature(
    channel_secret: str,
    body: bytes,
    signature: Optional[str],
) -> None:
    """
    Verify LINE HMAC-SHA256 signature on a webhook body.

    LINE sends:
    - X-Line-Signature header with base64(HMAC(body, channel_secret))
    - Request body

    Args:
        channel_secret: Channel secret from the LINE console
        body: Raw request body bytes (must be verified before decoding)
        signature: Value of the X-Line-Signature header

    Raises:
        SignatureVerificationError: Missing or mismatched signature
    """

    if not channel_secret:
        raise SignatureVerificationError("Channel secret not configured")

    if not signature:
        raise SignatureVerificationError(f"Missing {SIGNATURE_HEADER} header")

    expected_signature = compute_signature(channel_secret, body)

    # Compare (constant-time to prevent timing attacks)
    if not hmac.compare_digest(signature.encode("utf-8"), expected_signature.encode("utf-8")):
        raise SignatureVerificationError("Invalid signature")
