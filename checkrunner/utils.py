"""Request helpers."""

from __future__ import annotations

import hashlib
import hmac


def gh_verify(secret: str, body: bytes, signature_header: str | None) -> bool:
    """
    Verify GitHub webhook HMAC signature (X-Hub-Signature-256).

    Returns
    -------
    bool
        True if valid, False otherwise.
    """
    if not signature_header or not signature_header.startswith("sha256="):
        return False
    sig = signature_header.split("=", 1)[1]
    mac = hmac.new(secret.encode(), msg=body, digestmod=hashlib.sha256).hexdigest()
    return hmac.compare_digest(mac, sig)


def admin_key_ok(expected: str, provided: str | None) -> bool:
    """Constant-time comparison of the admin HTTP key."""
    if not expected or not provided:
        return False
    return hmac.compare_digest(expected.encode(), provided.encode())
