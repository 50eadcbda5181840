"""
Credential Resolver

Extracts credentials from request headers. Two paths are kept distinct:

- Machine credential: the X-API-Key header, falling back to the
  Authorization header (optional "Bearer " prefix). Validated against the
  configured shared secret.
- Delegated bearer token: the Authorization header only, consumed by the
  delegated OAuth provider.

The X-API-Key header is checked first; when it is present the
Authorization header is never consulted for the machine path, so a
machine key cannot collide with a user's bearer token.
"""

import hmac
import re
from collections.abc import Mapping

from .identity import Identity

MACHINE_CREDENTIAL_HEADER = "x-api-key"
AUTHORIZATION_HEADER = "authorization"

SERVICE_LOGIN = "service"
SERVICE_DISPLAY_NAME = "service-account"
SERVICE_EMAIL = "service@local"

_BEARER_PREFIX = re.compile(r"^Bearer\s+", re.IGNORECASE)


def _header(headers: Mapping[str, str], name: str) -> str | None:
    """Case-insensitive header lookup that also works on plain dicts."""
    value = headers.get(name)
    if value is None:
        for key, candidate in headers.items():
            if key.lower() == name:
                return candidate
    return value


def has_machine_credential_header(headers: Mapping[str, str]) -> bool:
    """True when the request carries a non-blank X-API-Key header."""
    value = _header(headers, MACHINE_CREDENTIAL_HEADER)
    return bool(value and value.strip())


def extract_machine_credential(headers: Mapping[str, str]) -> str | None:
    """
    Extract the machine credential from request headers.

    Order:
    1. X-API-Key (any case), trimmed
    2. Authorization, trimmed, with an optional case-insensitive "Bearer " prefix removed

    Returns:
        The credential, or None if neither header is present
    """
    xkey = _header(headers, MACHINE_CREDENTIAL_HEADER)
    if xkey and xkey.strip():
        return xkey.strip()

    raw = _header(headers, AUTHORIZATION_HEADER)
    if not raw:
        return None

    return _BEARER_PREFIX.sub("", raw.strip()).strip() or None


def extract_bearer_token(headers: Mapping[str, str]) -> str | None:
    """
    Extract a delegated bearer token from the Authorization header.

    Only the "Bearer <token>" form is accepted (prefix is case-insensitive).
    """
    raw = _header(headers, AUTHORIZATION_HEADER)
    if not raw:
        return None

    raw = raw.strip()
    if not _BEARER_PREFIX.match(raw):
        return None

    return _BEARER_PREFIX.sub("", raw).strip() or None


def validate_machine_credential(
    candidate: str | None, configured_secret: str | None
) -> bool:
    """
    Check a candidate credential against the configured shared secret.

    Exact, case-sensitive match with a constant-time comparison. False when
    either side is missing or empty.
    """
    if not candidate or not configured_secret:
        return False

    return hmac.compare_digest(
        candidate.encode("utf-8"), configured_secret.encode("utf-8")
    )


def synthesize_service_identity(
    configured_secret: str, configured_service_token: str | None = None
) -> Identity:
    """Build the identity used for machine callers."""
    return Identity(
        login=SERVICE_LOGIN,
        display_name=SERVICE_DISPLAY_NAME,
        email=SERVICE_EMAIL,
        access_token=configured_service_token or "",
        api_key=configured_secret,
        authorization_header_value=f"Bearer {configured_secret}",
    )
