"""Exception classes for roxiler_stats."""

from __future__ import annotations


class RoxilerStatsError(Exception):
    """Base exception for roxiler_stats."""


class InvalidRequest(RoxilerStatsError):
    """A required parameter is missing or malformed."""


class InvalidMonth(InvalidRequest):
    """Month text that cannot be resolved to 1-12."""


class StoreError(RoxilerStatsError):
    """Base class for storage failures."""


class StoreUnavailable(StoreError):
    """The store cannot be reached."""


class StoreQueryFailed(StoreError):
    """The store was reached but a query or write failed."""


class SeedSourceUnavailable(RoxilerStatsError):
    """The remote seed dump could not be fetched or decoded."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class SeedValidationError(RoxilerStatsError):
    """A seed record does not have the transaction shape."""
