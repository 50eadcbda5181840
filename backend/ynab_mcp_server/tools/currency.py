"""
Currency Conversion Tool

convertToZAR - convert a milliunit amount in any currency (except ZAR)
into ZAR using the latest Freecurrencyapi rate.
"""

import asyncio
import json
import logging
from typing import Annotated

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult
from pydantic import Field

from ..client.currency_client import CurrencyConversionError, FreeCurrencyClient
from ..utils.currency import milliunits_to_units, units_to_milliunits
from ..utils.formatters import format_error_response, tool_result
from ..utils.validators import (
    ValidationError,
    validate_currency_code,
    validate_milliunits,
)

logger = logging.getLogger(__name__)

TARGET_CURRENCY = "ZAR"


class CurrencyTools:
    """convertToZAR, with the rate API key checked on each call."""

    def __init__(self, api_key: str | None, api_url: str, timeout: int = 30):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout

    def register(self, mcp: FastMCP) -> None:
        mcp.add_tool(
            self.convert_to_zar,
            name="convertToZAR",
            description="Convert an amount from any currency (except ZAR) into ZAR",
        )

    async def convert_to_zar(
        self,
        amount: Annotated[
            int,
            Field(
                description=(
                    "Amount in the source currency milliunits (integer). "
                    "Example: 10500 = 10.5 units."
                )
            ),
        ],
        currency: Annotated[
            str,
            Field(
                description=(
                    "ISO 4217 3-letter currency code for the source currency "
                    "(e.g. USD, EUR). Do NOT pass ZAR."
                )
            ),
        ],
    ) -> CallToolResult:
        try:
            source = validate_currency_code(currency, excluded=TARGET_CURRENCY)
            milliunits = validate_milliunits(amount)
        except ValidationError as e:
            logger.error(f"convertToZAR error: {e.to_dict()}")
            return tool_result(format_error_response(e), is_error=True)

        if not self.api_key:
            logger.error("convertToZAR called without FREECURRENCY_API_KEY")
            return tool_result(
                format_error_response(
                    "FREECURRENCY_API_KEY is not configured in the environment."
                ),
                is_error=True,
            )

        client = FreeCurrencyClient(self.api_key, self.api_url, timeout=self.timeout)
        try:
            response = await asyncio.to_thread(
                client.latest, source, TARGET_CURRENCY
            )
        except CurrencyConversionError as e:
            logger.error(f"convertToZAR error: {e}")
            return tool_result(
                format_error_response(f"Currency conversion failed: {e.message}"),
                is_error=True,
            )

        data = response.get("data") if isinstance(response, dict) else None
        rate = data.get(TARGET_CURRENCY) if isinstance(data, dict) else None
        if isinstance(rate, bool) or not isinstance(rate, (int, float)):
            logger.error(f"No {TARGET_CURRENCY} rate in response: {response}")
            return tool_result(
                format_error_response(
                    f"Could not determine {TARGET_CURRENCY} rate from Freecurrencyapi "
                    f"response: {json.dumps(response, default=str)}"
                ),
                is_error=True,
            )

        source_units = milliunits_to_units(milliunits)
        converted_units = source_units * rate
        converted_milliunits = units_to_milliunits(converted_units)

        logger.info(
            f"Converted {milliunits} {source} milliunits at rate {rate} "
            f"-> {converted_milliunits} {TARGET_CURRENCY} milliunits"
        )

        return tool_result(
            "**Conversion Result**\n\n"
            f"{milliunits} {source} milliunits ({source_units:.3f} {source}) -> "
            f"{converted_units:.2f} {TARGET_CURRENCY} "
            f"({converted_milliunits} {TARGET_CURRENCY} milliunits)\n\n"
            f"Rate used: 1 {source} = {rate} {TARGET_CURRENCY}"
        )


def register_currency_tools(mcp: FastMCP, config) -> CurrencyTools:
    """Register convertToZAR (the API key is checked per call)."""
    if not config.FREECURRENCY_API_KEY:
        logger.warning(
            "FREECURRENCY_API_KEY not set; convertToZAR will report a "
            "configuration error when called"
        )

    tools = CurrencyTools(
        api_key=config.FREECURRENCY_API_KEY,
        api_url=config.FREECURRENCY_API_URL,
        timeout=config.YNAB_API_TIMEOUT,
    )
    tools.register(mcp)

    logger.info("Registered 1 currency tool")
    return tools
