"""Runtime configuration for the enrichment pipeline."""

from __future__ import annotations

from dataclasses import dataclass

NBP_API_URL = "https://api.nbp.pl/api/exchangerates/rates"


@dataclass(slots=True)
class PipelineConfig:
    """Knobs for the rate source, fallback loop and batch throttling."""

    api_url: str = NBP_API_URL
    table: str = "a"
    currency: str = "EUR"
    timeout: float = 30.0
    chunk_size: int = 50
    chunk_delay: float = 0.1
    max_attempts: int = 10
    cache_prefix: str = "nbp_rate_"

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if self.chunk_delay < 0:
            raise ValueError("chunk_delay must not be negative")
        if self.max_attempts <= 0:
            raise ValueError("max_attempts must be positive")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")


__all__ = ["NBP_API_URL", "PipelineConfig"]
