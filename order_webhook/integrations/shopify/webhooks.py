"""Shopify webhook HMAC verification."""

import base64
import hashlib
import hmac

HMAC_HEADER = "X-Shopify-Hmac-Sha256"
TOPIC_HEADER = "X-Shopify-Topic"


def compute_signature(data: bytes, secret: str) -> str:
    """Base64-encoded HMAC-SHA256 of ``data`` keyed with ``secret``."""
    return base64.b64encode(
        hmac.new(
            secret.encode("utf-8"),
            data,
            hashlib.sha256,
        ).digest()
    ).decode("utf-8")


def verify_webhook(data: bytes, hmac_header: str | None, secret: str) -> bool:
    """Verify a Shopify webhook's HMAC-SHA256 signature.

    Args:
        data: The raw request body bytes.
        hmac_header: The X-Shopify-Hmac-Sha256 header value.
        secret: The Shopify webhook signing secret.

    Returns:
        True if the signature is valid. A missing header or an unconfigured
        secret never verifies.
    """
    if not hmac_header or not secret:
        return False

    computed = compute_signature(data, secret)
    return hmac.compare_digest(computed.encode("utf-8"), hmac_header.strip().encode("utf-8"))
