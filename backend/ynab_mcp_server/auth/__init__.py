"""
Authentication package.

- identity.py: caller Identity and the current-identity context
- credentials.py: machine credential / delegated bearer extraction
- provider.py: delegated OAuth provider boundary (import directly)
"""

from .credentials import (
    extract_bearer_token,
    extract_machine_credential,
    synthesize_service_identity,
    validate_machine_credential,
)
from .identity import Identity, get_current_identity

__all__ = [
    "Identity",
    "get_current_identity",
    "extract_bearer_token",
    "extract_machine_credential",
    "synthesize_service_identity",
    "validate_machine_credential",
]
