"""
Verification of the X-Miniflux-Signature header.
Miniflux signs the raw webhook body with HMAC-SHA256 keyed by the webhook secret and sends the hex digest.
"""

import hashlib
import hmac
from typing import Optional

SIGNATURE_HEADER = "X-Miniflux-Signature"


def compute_signature(secret: str, body: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_signature(secret: str, body: bytes, signature: Optional[str]) -> bool:
    """Constant-time check of the provided signature against the body. Missing values never verify."""
    if not secret or not signature:
        return False
    expected = compute_signature(secret, body)
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))
