"""Resilient single-request helper shared by every provider call."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Mapping

import httpx

from ..config import Settings
from ..errors import (
    FetchError,
    ProviderError,
    ResponseValidationError,
    TransientFetchError,
)
from ..utils import backoff_delay, require_positive

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class RetryingFetcher:
    """Issue GET requests with a per-attempt deadline and exponential backoff."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        max_attempts: int = 3,
        timeout: float = 8.0,
        base_delay: float = 0.5,
        jitter: float = 0.0,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self._client = http_client
        self._max_attempts = require_positive(max_attempts, name="max_attempts")
        self._timeout = timeout
        self._base_delay = base_delay
        self._jitter = jitter
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls, settings: Settings, http_client: httpx.AsyncClient
    ) -> "RetryingFetcher":
        return cls(
            http_client,
            max_attempts=settings.fetch_max_attempts,
            timeout=settings.fetch_timeout_seconds,
            base_delay=settings.fetch_backoff_seconds,
            jitter=settings.fetch_jitter_seconds,
        )

    async def fetch(
        self,
        url: str,
        params: Mapping[str, Any] | None = None,
        *,
        max_attempts: int | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Return the first 2xx response, retrying transient and provider failures."""

        attempts_allowed = require_positive(
            max_attempts if max_attempts is not None else self._max_attempts,
            name="max_attempts",
        )
        deadline = timeout if timeout is not None else self._timeout

        attempt = 0
        while True:
            attempt += 1
            try:
                return await self._attempt(url, params, deadline, attempt)
            except FetchError as exc:
                if not exc.retryable:
                    raise
                if attempt >= attempts_allowed:
                    logger.warning(
                        "Giving up on %s after %s attempts: %s",
                        url,
                        attempts_allowed,
                        exc,
                    )
                    raise
                delay = backoff_delay(
                    self._base_delay, attempt - 1, jitter=self._jitter
                )
                logger.info(
                    "Attempt %s/%s for %s failed (%s). Retrying in %.2fs",
                    attempt,
                    attempts_allowed,
                    url,
                    exc,
                    delay,
                )
            await self._sleep(delay)

    async def fetch_json(
        self,
        url: str,
        params: Mapping[str, Any] | None = None,
        *,
        max_attempts: int | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Fetch *url* and decode a JSON object from the body."""

        response = await self.fetch(
            url, params, max_attempts=max_attempts, timeout=timeout
        )
        try:
            payload = response.json()
        except ValueError as exc:
            raise ResponseValidationError(
                f"Provider returned non-JSON body for {url}", url=url
            ) from exc
        if not isinstance(payload, dict):
            raise ResponseValidationError(
                f"Provider returned {type(payload).__name__} instead of an object for {url}",
                url=url,
            )
        return payload

    async def _attempt(
        self,
        url: str,
        params: Mapping[str, Any] | None,
        deadline: float,
        attempt: int,
    ) -> httpx.Response:
        # wait_for cancels the in-flight request when the deadline expires
        try:
            response = await asyncio.wait_for(
                self._client.get(url, params=params), timeout=deadline
            )
        except asyncio.TimeoutError as exc:
            error = TransientFetchError(
                f"Timed out after {deadline:.2f}s", url=url, attempts=attempt
            )
            raise error from exc
        except httpx.HTTPError as exc:
            error = TransientFetchError(
                f"{exc.__class__.__name__}: {exc}", url=url, attempts=attempt
            )
            raise error from exc

        if not response.is_success:
            error = ProviderError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
                url=url,
                attempts=attempt,
            )
            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                raise error from exc
            raise error
        return response


__all__ = ["RetryingFetcher"]
