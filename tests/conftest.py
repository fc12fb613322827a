from __future__ import annotations

from decimal import Decimal
from typing import Callable

import pytest

from nbp_statement.exceptions import RateNotPublished, TransportError


class FakeRateSource:
    """In-memory stand-in for the NBP API that records every lookup."""

    def __init__(
        self,
        rates: dict[str, str] | None = None,
        *,
        failing: set[str] | None = None,
    ) -> None:
        self.rates = {key: Decimal(value) for key, value in (rates or {}).items()}
        self.failing = failing or set()
        self.calls: list[str] = []

    def get_mid(self, lookup_key: str) -> Decimal:
        self.calls.append(lookup_key)
        if lookup_key in self.failing:
            raise TransportError(f"boom for {lookup_key}")
        if lookup_key not in self.rates:
            raise RateNotPublished(lookup_key)
        return self.rates[lookup_key]


@pytest.fixture
def make_source() -> Callable[..., FakeRateSource]:
    return FakeRateSource
