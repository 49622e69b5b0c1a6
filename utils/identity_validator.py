"""
Identity assertion validation utility.

The identity provider signs a query string of subject claims with HMAC-SHA256
so that requests can be attributed to a subject without a session store.

Security features:
- HMAC-SHA256 signature verification
- Replay attack protection (timestamp validation)
- Subject id extraction
"""

import hmac
import hashlib
import time
import logging
from urllib.parse import parse_qsl, urlencode

from pydantic import BaseModel

logger = logging.getLogger(__name__)

ALLOWED_CLOCK_SKEW_SECONDS = 60


class IdentityValidationError(Exception):
    """Raised when identity token validation fails."""
    pass


class IdentityClaims(BaseModel):
    sub: str
    email: str | None = None
    role: str | None = None
    name: str | None = None
    auth_date: int


def _secret_key(shared_secret: str) -> bytes:
    # Secret = HMAC_SHA256(shared_secret, "IdentityAssertion")
    return hmac.new(
        key=b"IdentityAssertion",
        msg=shared_secret.encode('utf-8'),
        digestmod=hashlib.sha256
    ).digest()


def _data_check_string(claims: dict[str, str]) -> str:
    return '\n'.join(f"{k}={v}" for k, v in sorted(claims.items()))


def sign_identity_claims(claims: dict[str, str | int], shared_secret: str) -> str:
    """
    Build a signed token from claims. Used by the identity provider bridge and tests.

    Example:
        >>> token = sign_identity_claims({"sub": "user_2abc", "auth_date": int(time.time())}, secret)
    """
    claims = {k: str(v) for k, v in claims.items() if v is not None}
    signature = hmac.new(
        key=_secret_key(shared_secret),
        msg=_data_check_string(claims).encode('utf-8'),
        digestmod=hashlib.sha256
    ).hexdigest()
    return urlencode({**claims, 'hash': signature})


def validate_identity_token(
    token: str,
    shared_secret: str,
    max_age_seconds: int = 3600
) -> IdentityClaims:
    """
    Validates an identity token HMAC signature.

    Args:
        token: Raw value of the X-Identity-Token header
        shared_secret: Secret shared with the identity provider
        max_age_seconds: Maximum age of the assertion (default: 1 hour)

    Returns:
        IdentityClaims with the verified subject

    Raises:
        IdentityValidationError: If validation fails
    """
    if not token:
        raise IdentityValidationError("No identity token provided")

    if not shared_secret:
        raise IdentityValidationError("Identity secret not configured")

    parsed = dict(parse_qsl(token, keep_blank_values=True))
    if not parsed:
        raise IdentityValidationError("Malformed identity token")

    received_hash = parsed.pop('hash', None)
    if not received_hash:
        raise IdentityValidationError("No hash in identity token")

    try:
        auth_date = int(parsed.get('auth_date', ''))
    except (ValueError, TypeError):
        raise IdentityValidationError("Invalid auth_date")

    age_seconds = time.time() - auth_date
    if age_seconds > max_age_seconds:
        raise IdentityValidationError(
            f"Identity token too old ({int(age_seconds)}s > {max_age_seconds}s max)"
        )

    if age_seconds < -ALLOWED_CLOCK_SKEW_SECONDS:
        raise IdentityValidationError("Identity token timestamp is in the future")

    expected_hash = hmac.new(
        key=_secret_key(shared_secret),
        msg=_data_check_string(parsed).encode('utf-8'),
        digestmod=hashlib.sha256
    ).hexdigest()

    # Constant-time comparison to prevent timing attacks
    if not hmac.compare_digest(expected_hash, received_hash):
        logger.warning(
            f"Identity signature mismatch | "
            f"Expected: {expected_hash[:8]}... | "
            f"Received: {received_hash[:8]}..."
        )
        raise IdentityValidationError("Invalid signature")

    if not parsed.get('sub', '').strip():
        raise IdentityValidationError("No subject in identity token")

    return IdentityClaims(
        sub=parsed['sub'].strip(),
        email=parsed.get('email') or None,
        role=parsed.get('role') or None,
        name=parsed.get('name') or None,
        auth_date=auth_date,
    )
