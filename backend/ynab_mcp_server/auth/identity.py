"""
Caller identity.

One Identity shape is used for both delegated (OAuth) users and machine
callers, so downstream code cannot tell which gate admitted a request.
The identity for the request in flight is published through a context
variable, the way a web framework exposes `current_user`.
"""

from contextvars import ContextVar
from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """Caller identity for one request. Never persisted."""

    login: str
    display_name: str
    email: str
    access_token: str
    api_key: str | None = None
    authorization_header_value: str | None = None


_current_identity: ContextVar[Identity | None] = ContextVar(
    "current_identity", default=None
)


def get_current_identity() -> Identity | None:
    """Identity of the request being served, or None (stdio / anonymous)."""
    return _current_identity.get()


def set_current_identity(identity: Identity | None):
    """Publish identity for the current context; returns a reset token."""
    return _current_identity.set(identity)


def reset_current_identity(token) -> None:
    _current_identity.reset(token)
