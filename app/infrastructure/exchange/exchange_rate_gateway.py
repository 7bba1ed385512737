"""
Exchange rate gateway backed by an HTTP rate feed.
Fetches INR-based rate tables and converts amounts through the INR pivot.
"""

import logging
import threading
import time
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional, Tuple

import requests

from app.domain.models.base import ConversionUnavailableError
from app.domain.models.value_objects import PIVOT_CURRENCY, normalize_currency
from app.domain.services.exchange_gateway import ExchangeGateway


logger = logging.getLogger(__name__)


class ExchangeRateApiGateway(ExchangeGateway):
    """
    Gateway for an exchangerate-api style feed.

    The feed answers GET {base_url}/INR with {"rates": {"USD": 0.012, ...}},
    each rate being units of that currency per one INR. A fetched table is
    reused for cache_seconds; there are no fallback rates.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        cache_seconds: int = 60,
        session: Optional[requests.Session] = None,
        pivot_currency: str = PIVOT_CURRENCY
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.cache_seconds = cache_seconds
        self.session = session or requests.Session()
        self._cache: Optional[Tuple[float, Dict[str, Decimal]]] = None
        self._lock = threading.Lock()
        self.pivot_currency = normalize_currency(pivot_currency)

    def to_inr(self, amount: Decimal, currency: str) -> Decimal:
        currency = self._currency(currency)
        if currency == self.pivot_currency:
            return amount
        return amount / self._rate(currency)

    def from_inr(self, amount_inr: Decimal, currency: str) -> Decimal:
        currency = self._currency(currency)
        if currency == self.pivot_currency:
            return amount_inr
        return amount_inr * self._rate(currency)

    def get_rates(self) -> Dict[str, Decimal]:
        """
        Return the current INR-based rate table.

        Returns:
            Mapping of currency code to units of that currency per INR

        Raises:
            ConversionUnavailableError: If the feed cannot be reached or parsed
        """
        with self._lock:
            now = time.monotonic()
            if self._cache is not None and now - self._cache[0] < self.cache_seconds:
                return self._cache[1]

            rates = self._fetch_rates()
            self._cache = (now, rates)
            return rates

    def clear_cache(self) -> None:
        with self._lock:
            self._cache = None

    def _rate(self, currency: str) -> Decimal:
        rate = self.get_rates().get(currency)
        if rate is None:
            raise ConversionUnavailableError(currency, "currency not offered by the rate feed")
        if rate <= 0:
            raise ConversionUnavailableError(currency, f"non-positive rate {rate}")
        return rate

    def _fetch_rates(self) -> Dict[str, Decimal]:
        url = f"{self.base_url}/{self.pivot_currency}"
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Exchange rate fetch from {url} failed: {str(e)}")
            raise ConversionUnavailableError(self.pivot_currency, str(e))

        raw_rates = payload.get("rates") if isinstance(payload, dict) else None
        if not isinstance(raw_rates, dict):
            logger.error(f"Exchange rate feed {url} returned no rate table")
            raise ConversionUnavailableError(self.pivot_currency, "malformed rate table")

        rates = {}
        for code, value in raw_rates.items():
            try:
                rates[code.upper()] = Decimal(str(value))
            except (InvalidOperation, AttributeError):
                logger.warning(f"Skipping unparseable rate {code}={value!r}")

        logger.info(f"Fetched {len(rates)} exchange rates from {url}")
        return rates

    @staticmethod
    def _currency(currency: str) -> str:
        try:
            return normalize_currency(currency)
        except ValueError as e:
            raise ConversionUnavailableError(str(currency), str(e))
