"""
Delegated Authorization Provider

The human-facing OAuth flow lives on an external authorization server.
This module is the boundary to it:

- /authorize, /register and /token are owned here and forwarded (307) to the
  configured issuer, which implements them.
- /.well-known/oauth-protected-resource advertises this resource and its
  authorization server (RFC 9728).
- API paths (the gated endpoints) get the caller's bearer token verified
  through a TokenVerifier; the endpoint receives the resulting identity,
  or None when there is no valid delegated session.
- Everything else goes to the default handler.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Protocol

import httpx
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response
from starlette.routing import Route
from starlette.types import Receive, Scope, Send

from ..gateway.endpoints import Endpoint, match_endpoint
from .credentials import extract_bearer_token, has_machine_credential_header
from .identity import Identity

logger = logging.getLogger(__name__)

OAUTH_PATHS = ("/authorize", "/register", "/token")
PROTECTED_RESOURCE_METADATA_PATH = "/.well-known/oauth-protected-resource"

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


# ============================================================================
# Token Verification
# ============================================================================


class TokenVerifier(Protocol):
    """Maps a delegated bearer token to an identity."""

    async def verify_token(self, token: str) -> Identity | None: ...


class NullTokenVerifier:
    """Verifier used when no introspection endpoint is configured."""

    async def verify_token(self, token: str) -> Identity | None:
        return None


class IntrospectionTokenVerifier:
    """
    Verify bearer tokens with an RFC 7662 introspection endpoint.

    Any transport failure or non-active token means "not verified".
    """

    def __init__(
        self,
        introspection_url: str,
        client_id: str | None = None,
        client_secret: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.introspection_url = introspection_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout
        self.transport = transport

    async def verify_token(self, token: str) -> Identity | None:
        auth = (
            (self.client_id, self.client_secret)
            if self.client_id and self.client_secret
            else None
        )

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post(
                    self.introspection_url, data={"token": token}, auth=auth
                )
        except httpx.HTTPError as e:
            logger.warning(f"Token introspection failed: {e}")
            return None

        if response.status_code != 200:
            logger.warning(
                f"Token introspection returned HTTP {response.status_code}"
            )
            return None

        try:
            claims = response.json()
        except ValueError:
            logger.warning("Token introspection returned a non-JSON response")
            return None

        if not claims.get("active"):
            return None

        login = claims.get("username") or claims.get("sub") or "unknown"
        return Identity(
            login=login,
            display_name=claims.get("name") or login,
            email=claims.get("email") or "",
            access_token=token,
            authorization_header_value=f"Bearer {token}",
        )


# ============================================================================
# Responses
# ============================================================================


def challenge_response(
    resource_url: str, description: str = "Authentication required"
) -> Response:
    """401 with a Bearer challenge pointing at the resource metadata."""
    metadata_url = f"{resource_url.rstrip('/')}{PROTECTED_RESOURCE_METADATA_PATH}"
    return JSONResponse(
        {"error": "invalid_token", "error_description": description},
        status_code=401,
        headers={
            "WWW-Authenticate": (
                f'Bearer error="invalid_token", '
                f'error_description="{description}", '
                f'resource_metadata="{metadata_url}"'
            )
        },
    )


# ============================================================================
# Provider
# ============================================================================


class DelegatedAuthProvider:
    """
    ASGI app owning delegated-authorization routing.

    Args:
        api_handlers: Gated endpoints by path
        token_verifier: Verifier for delegated bearer tokens
        resource_url: Public URL of this server
        issuer_url: External authorization server (None disables /authorize etc.)
        lifespan: Application lifespan (startup/shutdown)
    """

    def __init__(
        self,
        api_handlers: Mapping[str, Endpoint],
        token_verifier: TokenVerifier,
        resource_url: str,
        issuer_url: str | None = None,
        lifespan: Callable | None = None,
    ):
        self.api_handlers = dict(api_handlers)
        self.token_verifier = token_verifier
        self.resource_url = resource_url.rstrip("/")
        self.issuer_url = issuer_url.rstrip("/") if issuer_url else None

        routes = [
            Route(path, self.authorization_server, methods=["GET", "POST"])
            for path in OAUTH_PATHS
        ]
        routes.append(
            Route(
                PROTECTED_RESOURCE_METADATA_PATH,
                self.protected_resource_metadata,
                methods=["GET"],
            )
        )
        routes.append(Route("/{path:path}", self.default_handler, methods=ALL_METHODS))

        self.app = Starlette(routes=routes, lifespan=lifespan)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            endpoint = match_endpoint(scope["path"], self.api_handlers)
            if endpoint is not None:
                request = Request(scope, receive)
                identity = await self.resolve_identity(request)
                response = await endpoint.handle(request, identity)
                await response(scope, receive, send)
                return

        await self.app(scope, receive, send)

    async def resolve_identity(self, request: Request) -> Identity | None:
        """
        Identity from the delegated bearer token, if any.

        Bearer parsing is skipped when the request carries an X-API-Key
        header; that request belongs to the machine path.
        """
        if has_machine_credential_header(request.headers):
            return None

        token = extract_bearer_token(request.headers)
        if not token:
            return None

        identity = await self.token_verifier.verify_token(token)
        if identity is None:
            logger.info(
                "Delegated bearer token rejected",
                extra={"auth_mode": "delegated", "request_path": request.url.path},
            )
        return identity

    def challenge(self, request: Request) -> Response:
        return challenge_response(self.resource_url)

    async def authorization_server(self, request: Request) -> Response:
        """Forward /authorize, /register and /token to the issuer."""
        if not self.issuer_url:
            return JSONResponse(
                {
                    "error": "temporarily_unavailable",
                    "error_description": "No authorization server is configured",
                },
                status_code=503,
            )

        target = f"{self.issuer_url}{request.url.path}"
        if request.url.query:
            target = f"{target}?{request.url.query}"

        # 307 keeps the method and body (token/register are POSTs)
        return RedirectResponse(target, status_code=307)

    async def protected_resource_metadata(self, request: Request) -> Response:
        return JSONResponse(
            {
                "resource": self.resource_url,
                "authorization_servers": [self.issuer_url] if self.issuer_url else [],
                "bearer_methods_supported": ["header"],
            }
        )

    async def default_handler(self, request: Request) -> Response:
        return JSONResponse(
            {"error": "not_found", "path": request.url.path}, status_code=404
        )
