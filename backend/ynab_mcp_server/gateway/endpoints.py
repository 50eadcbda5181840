"""
Endpoint interface.

Every HTTP endpoint the server exposes, gated or not, implements one
capability: `handle(request, identity) -> response`, where the response is
any ASGI callable (a Starlette Response, or a wrapped transport app).
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import TypeVar

from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Receive, Scope, Send

from ..auth.identity import Identity, reset_current_identity, set_current_identity

# Fixed set of gated endpoint paths
STREAMING_ENDPOINT_PATH = "/sse"
REQUEST_RESPONSE_ENDPOINT_PATH = "/mcp"

T = TypeVar("T")


class Endpoint(ABC):
    """A request handler that receives the caller's identity explicitly."""

    @abstractmethod
    async def handle(self, request: Request, identity: Identity | None) -> ASGIApp:
        """Return the ASGI response for this request."""


def match_endpoint(path: str, endpoints: Mapping[str, T]) -> T | None:
    """
    Find the endpoint owning a path.

    An endpoint owns its exact path and everything below it, so "/sse"
    also owns "/sse/messages/".
    """
    for prefix, endpoint in endpoints.items():
        if path == prefix or path.startswith(prefix.rstrip("/") + "/"):
            return endpoint
    return None


class IdentityScopedApp:
    """Run an ASGI app with the caller's identity published for tools."""

    def __init__(self, app: ASGIApp, identity: Identity):
        self.app = app
        self.identity = identity

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        token = set_current_identity(self.identity)
        try:
            await self.app(scope, receive, send)
        finally:
            reset_current_identity(token)


class TransportEndpoint(Endpoint):
    """
    MCP transport endpoint (streaming SSE or request/response HTTP).

    Runs the transport for any identified caller; without an identity it
    answers with the authorization challenge instead.
    """

    def __init__(
        self, name: str, app: ASGIApp, challenge: Callable[[Request], Response]
    ):
        self.name = name
        self.app = app
        self.challenge = challenge

    async def handle(self, request: Request, identity: Identity | None) -> ASGIApp:
        if identity is None:
            return self.challenge(request)
        return IdentityScopedApp(self.app, identity)

    def __repr__(self) -> str:
        return f"<TransportEndpoint(name={self.name})>"
