"""
YNAB MCP Server

Entry point for the MCP server that exposes a YNAB budget to AI assistants
via the Model Context Protocol.

Usage:
    # HTTP (SSE at /sse, streamable HTTP at /mcp)
    ynab-mcp-server

    # stdio, for local desktop clients
    ynab-mcp-server --transport stdio

Architecture:
    TopLevelRouter
      -> machine credential valid: DualModeGate -> transport endpoint
      -> otherwise: DelegatedAuthProvider (OAuth paths, bearer verification)
                    -> DualModeGate -> transport endpoint

    Both transport endpoints run the same FastMCP tool server.
"""

import argparse
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

import uvicorn
from mcp.server.fastmcp import FastMCP

from .auth.provider import (
    IntrospectionTokenVerifier,
    NullTokenVerifier,
    TokenVerifier,
    challenge_response,
)
from .config import MCPServerConfig
from .config import config as default_config
from .gateway.endpoints import (
    REQUEST_RESPONSE_ENDPOINT_PATH,
    STREAMING_ENDPOINT_PATH,
    Endpoint,
    TransportEndpoint,
)
from .gateway.gate import DualModeGate
from .gateway.router import create_app
from .logging_config import configure_logging
from .tools import RegisteredTools, register_all_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "ynab-mcp-server"

SERVER_INSTRUCTIONS = (
    "Tools for a YNAB budget. Amounts in tool results are display units "
    "(e.g. -12.5); createTransaction takes display units and stores "
    "milliunits. convertToZAR takes integer milliunits."
)


def create_mcp_server(config: MCPServerConfig) -> tuple[FastMCP, RegisteredTools]:
    """Build the tool server and register every enabled tool family."""
    mcp = FastMCP(
        name=SERVER_NAME,
        instructions=SERVER_INSTRUCTIONS,
        host=config.HOST,
        port=config.PORT,
        sse_path=STREAMING_ENDPOINT_PATH,
        message_path=f"{STREAMING_ENDPOINT_PATH}/messages/",
        streamable_http_path=REQUEST_RESPONSE_ENDPOINT_PATH,
        stateless_http=True,
        log_level=config.LOG_LEVEL,
    )

    tools = register_all_tools(mcp, config)
    return mcp, tools


def create_token_verifier(config: MCPServerConfig) -> TokenVerifier:
    if config.OAUTH_INTROSPECTION_URL:
        return IntrospectionTokenVerifier(
            introspection_url=config.OAUTH_INTROSPECTION_URL,
            client_id=config.OAUTH_CLIENT_ID,
            client_secret=config.OAUTH_CLIENT_SECRET,
        )

    logger.warning(
        "OAUTH_INTROSPECTION_URL not set; delegated bearer tokens cannot be "
        "verified and only machine access is possible"
    )
    return NullTokenVerifier()


# ============================================================================
# Application Context
# ============================================================================


@dataclass
class AppContext:
    """Everything the HTTP application is assembled from."""

    config: MCPServerConfig
    mcp: FastMCP
    tools: RegisteredTools
    token_verifier: TokenVerifier
    gated_endpoints: dict[str, Endpoint] = field(default_factory=dict)

    @asynccontextmanager
    async def lifespan(self, app) -> AsyncIterator[None]:
        """
        Server lifecycle management.

        Runs the streamable HTTP session manager and closes the YNAB client
        on shutdown.
        """
        logger.info("MCP Server starting...")
        try:
            async with self.mcp.session_manager.run():
                logger.info("MCP Server started successfully")
                yield
        finally:
            logger.info("MCP Server shutting down...")
            self.tools.close()
            logger.info("MCP Server stopped")


def build_app_context(config: MCPServerConfig) -> AppContext:
    """Create the tool server and wrap both transports in dual-mode gates."""
    mcp, tools = create_mcp_server(config)

    # streamable_http_app() creates the session manager used by the lifespan
    transports = {
        STREAMING_ENDPOINT_PATH: ("sse", mcp.sse_app()),
        REQUEST_RESPONSE_ENDPOINT_PATH: ("streamable-http", mcp.streamable_http_app()),
    }

    def challenge(request):
        return challenge_response(config.RESOURCE_SERVER_URL)

    gated_endpoints = {
        path: DualModeGate(
            TransportEndpoint(name, app, challenge),
            api_key=config.API_KEY,
            service_access_token=config.SERVICE_ACCESS_TOKEN,
        )
        for path, (name, app) in transports.items()
    }

    return AppContext(
        config=config,
        mcp=mcp,
        tools=tools,
        token_verifier=create_token_verifier(config),
        gated_endpoints=gated_endpoints,
    )


# ============================================================================
# Server Entry Point
# ============================================================================


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog=SERVER_NAME, description="YNAB budget tools over MCP"
    )
    parser.add_argument(
        "--transport",
        choices=["http", "stdio"],
        default="http",
        help="http serves /sse and /mcp behind the auth gate; stdio is for local clients",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None, config: MCPServerConfig | None = None):
    """
    Main entry point for MCP server.

    Raises:
        SystemExit: On invalid configuration
    """
    args = parse_args(argv)
    config = config or default_config

    configure_logging(config)

    is_valid, error = config.validate()
    if not is_valid:
        logger.error(f"Invalid configuration: {error}")
        raise SystemExit(f"Configuration error: {error}")

    logger.info(f"Configuration: {config.get_summary()}")

    if not config.machine_access_enabled:
        logger.warning("API_KEY not set; machine access is disabled")

    if args.transport == "stdio":
        logger.info("Starting MCP server in stdio mode...")
        mcp, tools = create_mcp_server(config)
        try:
            mcp.run(transport="stdio")
        finally:
            tools.close()
        return

    context = build_app_context(config)
    logger.info(
        f"Starting MCP server on http://{config.HOST}:{config.PORT} "
        f"({STREAMING_ENDPOINT_PATH}, {REQUEST_RESPONSE_ENDPOINT_PATH})"
    )
    uvicorn.run(
        create_app(context),
        host=config.HOST,
        port=config.PORT,
        log_level=config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
