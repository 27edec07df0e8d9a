"""Error taxonomy shared by the core and its adapters."""

from __future__ import annotations


class HauntscopeError(Exception):
    """Base class for all hauntscope errors."""


class FetchError(HauntscopeError):
    """Feed or actor lookup was unreachable or returned a malformed body.

    The watch loop treats this as recoverable and retries after a backoff.
    """


class StoreError(HauntscopeError):
    """The dedup/endpoint store could not be read or written."""


class DispatchError(HauntscopeError):
    """A webhook endpoint rejected a delivery or could not be reached."""

    def __init__(self, message: str, url: str = "", status_code: int = 0) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class RateLimitHeaderError(DispatchError):
    """A required rate limit header was missing or malformed."""
