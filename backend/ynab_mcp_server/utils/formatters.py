"""
Response Formatting

Utilities for formatting tool responses for MCP clients.

Every tool answer is a short human-readable text with the machine-readable
envelope embedded as a JSON block, so both people and models can use it.
"""

import json
from typing import Any

from mcp.types import CallToolResult, TextContent


def format_json_block(data: Any) -> str:
    """Render data as a fenced JSON block."""
    return f"```json\n{json.dumps(data, indent=2, default=str)}\n```"


def format_success_response(
    title: str, data: Any, summary: str | None = None
) -> str:
    """
    Format successful tool response.

    Args:
        title: Heading shown to the user
        data: Response envelope (dict or list)
        summary: Optional one-line summary appended after the data

    Returns:
        Markdown text

    Example:
        >>> format_success_response("Budget Payees", {"payees": []}, "Total payees: 0")
    """
    text = f"**{title}**\n\n**Results:**\n{format_json_block(data)}"

    if summary:
        text += f"\n\n{summary}"

    return text


def format_error_response(error: Exception | str) -> str:
    """
    Format error text for MCP tools.

    Args:
        error: Exception that occurred (or a plain message)

    Returns:
        Markdown error text
    """
    message = getattr(error, "message", None) or str(error) or type(error).__name__
    return f"**Error**\n\n{message}"


def format_created_by(identity) -> str:
    """Describe who performed a write, e.g. 'service (service-account)'."""
    if identity is None:
        return "local"
    return f"{identity.login} ({identity.display_name})"


def tool_result(text: str, is_error: bool = False) -> CallToolResult:
    """Wrap tool text as a call result; errors are flagged, not raised."""
    return CallToolResult(
        content=[TextContent(type="text", text=text)], isError=is_error
    )
