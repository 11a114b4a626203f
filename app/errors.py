"""Error types raised when talking to the media provider."""

from __future__ import annotations


class FetchError(Exception):
    """Raised when an outbound request could not produce a usable response."""

    retryable = True

    def __init__(self, message: str, *, url: str | None = None, attempts: int = 0):
        super().__init__(message)
        self.url = url
        self.attempts = attempts


class TransientFetchError(FetchError):
    """Timeout or transport-level failure."""


class ProviderError(FetchError):
    """The provider answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        url: str | None = None,
        attempts: int = 0,
    ):
        super().__init__(message, url=url, attempts=attempts)
        self.status_code = status_code


class ResponseValidationError(FetchError):
    """The provider response did not have the expected shape.

    Retrying cannot fix a shape mismatch, so this error is never retried.
    """

    retryable = False


__all__ = [
    "FetchError",
    "ProviderError",
    "ResponseValidationError",
    "TransientFetchError",
]
