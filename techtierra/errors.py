"""Exception hierarchy shared by the search core."""

from __future__ import annotations

from typing import Optional


class TechTierraError(Exception):
    """Base class for recoverable search errors."""


class MalformedQuery(TechTierraError):
    """The search request URL could not be constructed."""


class NetworkFailure(TechTierraError):
    """Transport error or non-success response from the search endpoint."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeFailure(TechTierraError):
    """Response body lacked the expected top-level shape."""


class FilterPatternError(TechTierraError):
    """Local filter text is not a valid pattern."""
