"""
Dual-Mode Dispatch Gate

Wraps an endpoint so it accepts either:
- a machine credential matching the configured shared secret, in which case
  a service identity replaces whatever the delegated flow produced, or
- the delegated flow's own identity (possibly None), passed through unchanged.

The wrapped endpoint runs the same code either way. The gate keeps no state
between requests and does not catch downstream errors.
"""

import logging

from starlette.requests import Request
from starlette.types import ASGIApp

from ..auth.credentials import (
    extract_machine_credential,
    synthesize_service_identity,
    validate_machine_credential,
)
from ..auth.identity import Identity
from ..logging_config import mask_secret
from .endpoints import Endpoint

logger = logging.getLogger(__name__)


class DualModeGate(Endpoint):
    """Machine-credential bypass in front of a delegated-flow endpoint."""

    def __init__(
        self,
        endpoint: Endpoint,
        api_key: str | None,
        service_access_token: str | None = None,
    ):
        self.endpoint = endpoint
        self.api_key = api_key
        self.service_access_token = service_access_token

    async def handle(
        self, request: Request, identity: Identity | None = None
    ) -> ASGIApp:
        candidate = extract_machine_credential(request.headers)

        if validate_machine_credential(candidate, self.api_key):
            logger.info(
                "Machine credential accepted",
                extra={"auth_mode": "machine", "request_path": request.url.path},
            )
            identity = synthesize_service_identity(
                self.api_key, self.service_access_token
            )
        else:
            logger.debug(
                f"No valid machine credential ({mask_secret(candidate)}), "
                "using delegated identity",
                extra={
                    "auth_mode": "delegated" if identity else "anonymous",
                    "request_path": request.url.path,
                },
            )

        return await self.endpoint.handle(request, identity)

    def __repr__(self) -> str:
        return f"<DualModeGate(endpoint={self.endpoint!r})>"
