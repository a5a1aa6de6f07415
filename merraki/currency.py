"""Currency conversion rates."""

from __future__ import annotations

import json
import urllib.error
import urllib.request

from merraki.errors import AppError, wrap

_STATIC_RATES: dict[str, dict[str, float]] = {
    "INR": {
        "USD": 0.012,
        "EUR": 0.011,
        "GBP": 0.0095,
        "AUD": 0.018,
        "CAD": 0.016,
        "SGD": 0.016,
        "AED": 0.044,
    },
}


class CurrencyService:
    """Looks up exchange rates from a fixed table or a rates web service."""

    def __init__(self, api_url: str = "", timeout: float = 10.0) -> None:
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    def get_exchange_rate(self, from_currency: str, to_currency: str) -> float:
        """Return the built-in rate, or 1.0 when the pair is unknown."""
        return _STATIC_RATES.get(from_currency, {}).get(to_currency, 1.0)

    def get_exchange_rate_from_api(self, from_currency: str, to_currency: str) -> float:
        """Fetch ``{api_url}/{from_currency}`` and return the rate for ``to_currency``."""
        url = f"{self.api_url}/{from_currency}"
        try:
            request = urllib.request.Request(url, method="GET")
        except ValueError as exc:
            raise wrap(exc, "CURRENCY_ERROR", "Failed to create request", 500) from exc

        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                status = response.status
                body = response.read()
        except urllib.error.HTTPError as exc:
            raise AppError("CURRENCY_ERROR", "Failed to fetch exchange rate", 500) from exc
        except (urllib.error.URLError, OSError, ValueError) as exc:
            raise wrap(exc, "CURRENCY_ERROR", "Failed to fetch exchange rate", 500) from exc

        if status != 200:
            raise AppError("CURRENCY_ERROR", "Failed to fetch exchange rate", 500)

        try:
            result = json.loads(body)
            rates = result.get("rates") or {}
            if not isinstance(rates, dict):
                raise ValueError("rates is not an object")
        except (ValueError, AttributeError) as exc:
            raise wrap(exc, "CURRENCY_ERROR", "Failed to parse response", 500) from exc

        if to_currency in rates:
            return float(rates[to_currency])
        raise AppError("CURRENCY_ERROR", "Currency not found", 404)