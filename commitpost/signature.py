"""GitHub webhook signature verification (X-Hub-Signature-256)."""

import hashlib
import hmac
from typing import Optional

from commitpost.errors import SignatureError

SIGNATURE_HEADER = "X-Hub-Signature-256"
SIGNATURE_PREFIX = "sha256="


def sign_body(secret: str, body: bytes) -> str:
    """Compute the ``sha256=<hex>`` header value GitHub would send for a body.

    Args:
        secret: The webhook shared secret.
        body: Raw request body bytes.

    Returns:
        The signature header value.
    """
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(secret: str, body: bytes, signature_header: Optional[str]) -> bool:
    """Verify an HMAC-SHA256 webhook signature over the raw body.

    The comparison is constant-time over equal-length inputs; a missing or
    malformed header, or an empty secret, fails without raising.

    Args:
        secret: The webhook shared secret.
        body: Raw, unparsed request body bytes.
        signature_header: Value of the X-Hub-Signature-256 header.

    Returns:
        True if the signature matches.
    """
    if not secret or not signature_header:
        return False
    if not signature_header.startswith(SIGNATURE_PREFIX):
        return False

    theirs = signature_header[len(SIGNATURE_PREFIX):].encode("ascii", errors="replace")
    ours = sign_body(secret, body)[len(SIGNATURE_PREFIX):].encode("ascii")

    if len(theirs) != len(ours):
        return False
    return hmac.compare_digest(theirs, ours)


def require_signature(secret: str, body: bytes, signature_header: Optional[str]) -> None:
    """Raise SignatureError unless the body carries a valid signature.

    Raises:
        SignatureError: If the header is missing, malformed or does not match.
    """
    if not signature_header:
        raise SignatureError(f"missing {SIGNATURE_HEADER} header")
    if not verify_signature(secret, body, signature_header):
        raise SignatureError("signature mismatch")
