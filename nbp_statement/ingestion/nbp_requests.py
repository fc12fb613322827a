"""requests-based client for the NBP daily reference rate API."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import requests

from nbp_statement.config import NBP_API_URL
from nbp_statement.exceptions import RateNotPublished, TransportError
from nbp_statement.utils.logger import get_logger

LOGGER = get_logger(__name__)


class NBPRatesClient:
    """Fetch single-day mid rates from ``api.nbp.pl``.

    The API answers ``404`` when no table was published for a day (weekends
    and Polish public holidays), which is reported as
    :class:`RateNotPublished` so callers can fall back to an earlier date.
    """

    def __init__(
        self,
        *,
        base_url: str = NBP_API_URL,
        table: str = "a",
        currency: str = "EUR",
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.table = table.lower()
        self.currency = currency.upper()
        self.timeout = timeout
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/json",
                "User-Agent": "nbp-statement/1.0",
            }
        )

    def rate_url(self, lookup_key: str) -> str:
        return f"{self.base_url}/{self.table}/{self.currency}/{lookup_key}/"

    def get_mid(self, lookup_key: str) -> Decimal:
        """Return the published mid rate for ``lookup_key``."""

        url = self.rate_url(lookup_key)
        try:
            response = self.session.get(url, params={"format": "json"}, timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransportError(f"Request to {url} failed: {exc}") from exc

        if response.status_code == 404:
            raise RateNotPublished(lookup_key)
        self._raise_with_context(response, url)

        try:
            payload = response.json(parse_float=Decimal)
        except ValueError as exc:
            raise TransportError(f"NBP returned invalid JSON for {lookup_key}") from exc
        return self._extract_mid(payload, lookup_key)

    @staticmethod
    def _extract_mid(payload: Any, lookup_key: str) -> Decimal:
        try:
            entry = payload["rates"][0]
            mid = entry["mid"]
        except (KeyError, IndexError, TypeError) as exc:
            raise TransportError(f"NBP payload for {lookup_key} has no rates[0].mid") from exc
        try:
            rate = Decimal(str(mid))
        except InvalidOperation as exc:
            raise TransportError(f"NBP mid rate {mid!r} for {lookup_key} is not numeric") from exc
        effective = entry.get("effectiveDate")
        if effective and effective != lookup_key:
            LOGGER.debug("NBP quoted %s for %s as effective %s", rate, lookup_key, effective)
        return rate

    def _raise_with_context(self, response: requests.Response, url: str) -> None:
        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            status = response.status_code
            hint = " NBP is throttling requests; lower the chunk size." if status == 429 else ""
            raise TransportError(f"NBP responded with HTTP {status} for {url}.{hint}") from exc

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "NBPRatesClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = ["NBPRatesClient"]
