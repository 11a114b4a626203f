"""Batch enrichment of stored references with provider metadata."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Protocol, Sequence

from pydantic import ValidationError

from ..config import Settings
from ..errors import FetchError
from ..models import (
    DECORATION_FIELDS,
    LIST_DECORATIONS,
    NUMERIC_DECORATIONS,
    EnrichedReference,
    Reference,
)
from ..utils import chunked, require_positive
from .tmdb import extract_decorations

if TYPE_CHECKING:
    from .references import ReferenceStore

logger = logging.getLogger(__name__)

DecorationExtractor = Callable[[Mapping[str, Any], str], dict[str, Any]]
SleepFunc = Callable[[float], Awaitable[None]]


class DetailsProvider(Protocol):
    async def details(self, media_type: str, item_id: int) -> dict[str, Any]: ...


def merge_decorations(
    reference: Reference, fetched: Mapping[str, Any]
) -> dict[str, Any]:
    """Resolve each decoration field from fetched, stored, then default values.

    Only ``None`` counts as absent: a fetched ``0`` or empty list wins over a
    stored value.
    """

    merged: dict[str, Any] = {}
    for name in DECORATION_FIELDS:
        value = fetched.get(name)
        if value is None:
            value = getattr(reference, name, None)
        if value is None:
            if name in NUMERIC_DECORATIONS:
                value = 0
            elif name in LIST_DECORATIONS:
                value = []
        merged[name] = value
    return merged


class BatchEnricher:
    """Decorate references in paced, concurrently processed batches."""

    def __init__(
        self,
        provider: DetailsProvider,
        *,
        batch_size: int = 5,
        inter_batch_delay: float = 0.5,
        extractor: DecorationExtractor = extract_decorations,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self._provider = provider
        self._batch_size = require_positive(batch_size, name="batch_size")
        self._inter_batch_delay = inter_batch_delay
        self._extractor = extractor
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        provider: DetailsProvider,
        *,
        extractor: DecorationExtractor = extract_decorations,
    ) -> "BatchEnricher":
        return cls(
            provider,
            batch_size=settings.enrich_batch_size,
            inter_batch_delay=settings.enrich_batch_delay_seconds,
            extractor=extractor,
        )

    async def enrich(
        self,
        references: Sequence[Reference],
        *,
        batch_size: int | None = None,
        inter_batch_delay: float | None = None,
    ) -> list[EnrichedReference]:
        """Return one enriched record per reference, in input order."""

        size = require_positive(
            batch_size if batch_size is not None else self._batch_size,
            name="batch_size",
        )
        delay = self._inter_batch_delay if inter_batch_delay is None else inter_batch_delay

        batches = chunked(references, size)
        enriched: list[EnrichedReference] = []
        for index, batch in enumerate(batches):
            enriched.extend(await self._enrich_batch(batch))
            logger.debug(
                "Enriched batch %d/%d (%d/%d items)",
                index + 1,
                len(batches),
                len(enriched),
                len(references),
            )
            if index < len(batches) - 1 and delay > 0:
                await self._sleep(delay)
        return enriched

    async def enrich_collection(
        self, store: "ReferenceStore", owner_id: str, collection: str
    ) -> list[EnrichedReference]:
        """Enrich every reference an owner keeps in *collection*."""

        references = await store.list(collection, owner_id)
        return await self.enrich(references)

    async def _enrich_batch(self, batch: Sequence[Reference]) -> list[EnrichedReference]:
        tasks = [asyncio.create_task(self._enrich_one(reference)) for reference in batch]
        # all-settled join: a failing item never cancels its siblings
        results = await asyncio.gather(*tasks, return_exceptions=True)

        settled: list[EnrichedReference] = []
        for reference, result in zip(batch, results):
            if isinstance(result, BaseException):
                logger.warning(
                    "Unexpected enrichment failure for %s/%s: %r",
                    reference.media_type,
                    reference.item_id,
                    result,
                )
                settled.append(EnrichedReference.from_reference(reference))
                continue
            settled.append(result)
        return settled

    async def _enrich_one(self, reference: Reference) -> EnrichedReference:
        if not reference.is_enrichable:
            return EnrichedReference.from_reference(reference)

        try:
            payload = await self._provider.details(reference.media_type, reference.item_id)
        except FetchError as exc:
            logger.warning(
                "Failed to fetch details for %s/%s: %s",
                reference.media_type,
                reference.item_id,
                exc,
            )
            return EnrichedReference.from_reference(reference)

        decorations = merge_decorations(
            reference, self._extractor(payload, reference.media_type)
        )
        try:
            return EnrichedReference.from_reference(reference, decorations)
        except ValidationError as exc:
            logger.warning(
                "Discarding malformed details for %s/%s: %s",
                reference.media_type,
                reference.item_id,
                exc,
            )
            return EnrichedReference.from_reference(reference)


__all__ = ["BatchEnricher", "DetailsProvider", "merge_decorations"]
