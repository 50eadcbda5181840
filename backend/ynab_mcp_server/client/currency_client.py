"""
Freecurrencyapi HTTP Client

Minimal client for https://api.freecurrencyapi.com/v1/latest.
"""

import logging

import requests
from requests.exceptions import RequestException

logger = logging.getLogger(__name__)


class CurrencyConversionError(Exception):
    """Exception raised when a rate lookup fails."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class FreeCurrencyClient:
    """HTTP client for the latest-rates endpoint."""

    def __init__(self, api_key: str, base_url: str, timeout: int = 30):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def latest(self, base_currency: str, currencies: str) -> dict:
        """
        GET /latest

        Returns:
            Raw response, e.g. {"data": {"ZAR": 18.21}}

        Raises:
            CurrencyConversionError: On transport or HTTP errors
        """
        try:
            response = requests.get(
                f"{self.base_url}/latest",
                params={
                    "apikey": self.api_key,
                    "base_currency": base_currency,
                    "currencies": currencies,
                },
                timeout=self.timeout,
            )
        except RequestException as e:
            raise CurrencyConversionError(f"Connection error: {e}") from e

        if response.status_code >= 400:
            raise CurrencyConversionError(
                f"Rate API error ({response.status_code}): {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise CurrencyConversionError("Rate API returned a non-JSON response") from e
