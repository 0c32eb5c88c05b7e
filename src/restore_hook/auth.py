"""Optional GitHub-style HMAC signature verification."""

from __future__ import annotations

import hashlib
import hmac
from collections.abc import Mapping

from .models import SIGNATURE_HEADER

_PREFIX = "sha256="


def sign(secret: str, body: bytes) -> str:
    """Return the ``X-Hub-Signature-256`` value for *body*."""
    digest = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return f"{_PREFIX}{digest}"


def verify_signature(
    secret: str | None,
    headers: Mapping[str, str],
    body: bytes,
) -> bool:
    """Check the request signature; always passes when no secret is configured."""
    if secret is None:
        return True
    # Normalise header keys to lowercase for lookup
    lower_headers = {k.lower(): v for k, v in headers.items()}
    sig = lower_headers.get(SIGNATURE_HEADER.lower(), "")
    if not sig.startswith(_PREFIX):
        return False
    return hmac.compare_digest(sig, sign(secret, body))
