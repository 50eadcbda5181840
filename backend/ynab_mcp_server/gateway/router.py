"""
Top-Level Router

Outermost ASGI app. For each HTTP request it extracts the machine
credential once; when it is valid and the path belongs to a gated endpoint,
the gate is invoked directly and the delegated provider never sees the
request. Everything else (no or invalid credential, other paths, lifespan
events) goes to the delegated provider unchanged.

The shortcut is only a fast path: any error while resolving it is logged
and the request falls back to the provider.
"""

import logging
from collections.abc import Mapping

from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Scope, Send

from ..auth.credentials import extract_machine_credential, validate_machine_credential
from ..auth.provider import DelegatedAuthProvider
from .endpoints import Endpoint, match_endpoint

logger = logging.getLogger(__name__)


class TopLevelRouter:
    """Machine-credential fast path in front of the delegated provider."""

    def __init__(
        self,
        gated_endpoints: Mapping[str, Endpoint],
        provider: ASGIApp,
        api_key: str | None,
    ):
        self.gated_endpoints = dict(gated_endpoints)
        self.provider = provider
        self.api_key = api_key

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            response = await self._machine_shortcut(scope, receive)
            if response is not None:
                await response(scope, receive, send)
                return

        await self.provider(scope, receive, send)

    async def _machine_shortcut(self, scope: Scope, receive: Receive) -> ASGIApp | None:
        """Resolve the direct gated response, or None to fall back."""
        try:
            request = Request(scope, receive)
            candidate = extract_machine_credential(request.headers)
            if not validate_machine_credential(candidate, self.api_key):
                return None

            endpoint = match_endpoint(scope["path"], self.gated_endpoints)
            if endpoint is None:
                return None

            return await endpoint.handle(request, None)
        except Exception:
            logger.warning(
                "Machine-credential shortcut failed, falling back to provider",
                exc_info=True,
                extra={"auth_mode": "machine", "request_path": scope.get("path")},
            )
            return None


def create_app(context) -> TopLevelRouter:
    """
    Assemble the ASGI application from an AppContext.

    The provider owns the application lifespan (startup/shutdown) since it
    receives every non-HTTP event.
    """
    provider = DelegatedAuthProvider(
        api_handlers=context.gated_endpoints,
        token_verifier=context.token_verifier,
        resource_url=context.config.RESOURCE_SERVER_URL,
        issuer_url=context.config.OAUTH_ISSUER_URL,
        lifespan=context.lifespan,
    )

    return TopLevelRouter(
        gated_endpoints=context.gated_endpoints,
        provider=provider,
        api_key=context.config.API_KEY,
    )
