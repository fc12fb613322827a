"""Exception hierarchy shared across nbp_statement modules."""

from __future__ import annotations


class NbpStatementError(Exception):
    """Base class for every error raised by the package."""


class ParseError(NbpStatementError, ValueError):
    """A statement date or monetary amount could not be parsed."""


class RateSourceError(NbpStatementError):
    """The external rate source did not return a usable quote."""


class RateNotPublished(RateSourceError):
    """The rate source has no quote for the requested day (HTTP 404)."""

    def __init__(self, lookup_key: str) -> None:
        super().__init__(f"No rate published for {lookup_key}")
        self.lookup_key = lookup_key


class TransportError(RateSourceError):
    """Network, HTTP or payload failure while talking to the rate source."""


class RateUnavailable(NbpStatementError, LookupError):
    """No quote was found after walking back the allowed number of days."""

    def __init__(self, lookup_key: str, attempts: int) -> None:
        super().__init__(f"No rate found for {lookup_key} after {attempts} attempt(s)")
        self.lookup_key = lookup_key
        self.attempts = attempts


class FileReadError(NbpStatementError, OSError):
    """The statement file could not be opened or decoded."""


class CSVFormatError(NbpStatementError, ValueError):
    """The statement file is not a CSV with the expected header."""


__all__ = [
    "NbpStatementError",
    "ParseError",
    "RateSourceError",
    "RateNotPublished",
    "TransportError",
    "RateUnavailable",
    "FileReadError",
    "CSVFormatError",
]
