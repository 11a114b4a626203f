"""Blend two independently ranked candidate sets into one list."""

from __future__ import annotations

from ..models import CandidateItem, CandidateSet, MergedResult
from ..utils import require_positive


class RankedMerger:
    """Deduplicate, re-rank by popularity and cap two candidate sets.

    Only the results each source already returned are considered, so a
    popular item that sits beyond either source's page never shows up here.
    Source failures are the caller's concern; the merger itself is pure.
    """

    def __init__(self, cap: int = 20) -> None:
        self._cap = require_positive(cap, name="cap")

    def merge(
        self,
        primary: CandidateSet,
        secondary: CandidateSet,
        *,
        cap: int | None = None,
        page: int | None = None,
    ) -> MergedResult:
        limit = require_positive(cap if cap is not None else self._cap, name="cap")

        seen: set[int] = set()
        combined: list[CandidateItem] = []
        for item in [*primary.results, *secondary.results]:
            if item.id in seen:
                continue
            seen.add(item.id)
            combined.append(item)

        # sorted() is stable, so popularity ties keep their post-dedup order
        ranked = sorted(combined, key=lambda item: item.popularity, reverse=True)[:limit]

        return MergedResult(
            page=page if page is not None else primary.page,
            results=ranked,
            total_results=len(ranked),
            total_pages=max(primary.total_pages, secondary.total_pages),
        )


__all__ = ["RankedMerger"]
