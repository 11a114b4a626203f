"""Mood-driven recommendations built from two discovery queries."""

from __future__ import annotations

import asyncio
import logging

from ..models import MergedResult
from ..moods import get_mood
from ..utils import require_positive
from .merger import RankedMerger
from .tmdb import TMDBClient

logger = logging.getLogger(__name__)


class MoodRecommendationService:
    """Query genre and keyword discovery in parallel and blend the pages.

    A failure of either query propagates to the caller; deciding whether a
    single-source result is acceptable is left to whoever calls this.
    """

    def __init__(self, tmdb: TMDBClient, merger: RankedMerger) -> None:
        self._tmdb = tmdb
        self._merger = merger

    async def recommend(self, mood: str, *, page: int = 1) -> MergedResult:
        blueprint = get_mood(mood)
        require_positive(page, name="page")

        tasks = [
            asyncio.create_task(self._tmdb.discover(blueprint.genre_query(page))),
            asyncio.create_task(self._tmdb.discover(blueprint.keyword_query(page))),
        ]
        try:
            genre_set, keyword_set = await asyncio.gather(*tasks)
        except BaseException:
            # A failed query stops its sibling before the error propagates.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        logger.debug(
            "Mood %s page %s: %d genre and %d keyword candidates",
            blueprint.key,
            page,
            len(genre_set.results),
            len(keyword_set.results),
        )
        return self._merger.merge(genre_set, keyword_set, page=page)


__all__ = ["MoodRecommendationService"]
