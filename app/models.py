"""Pydantic models describing stored references and discovery results."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, get_args

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .utils import utcnow

MediaType = Literal["movie", "series"]
MEDIA_TYPES: frozenset[str] = frozenset(get_args(MediaType))

COLLECTIONS: tuple[str, ...] = ("watchlist", "favorites", "history")

_MEDIA_TYPE_ALIASES = {"tv": "series", "show": "series", "shows": "series"}

NUMERIC_DECORATIONS: tuple[str, ...] = ("vote_average", "popularity", "runtime")
LIST_DECORATIONS: tuple[str, ...] = ("genres",)
DECORATION_FIELDS: tuple[str, ...] = (
    "overview",
    "vote_average",
    "genres",
    "release_date",
    "popularity",
    "runtime",
)


def normalize_media_type(value: str) -> str:
    """Map provider spellings onto the catalog media types.

    Unknown values are returned unchanged so callers can pass them through.
    """

    cleaned = (value or "").strip().lower()
    return _MEDIA_TYPE_ALIASES.get(cleaned, cleaned)


class Reference(BaseModel):
    """Minimal persisted record linking an owner to a catalog item."""

    model_config = ConfigDict(populate_by_name=True)

    owner_id: str = Field(validation_alias=AliasChoices("owner_id", "ownerId", "userId"))
    item_id: int = Field(validation_alias=AliasChoices("item_id", "itemId"))
    media_type: str = Field(
        validation_alias=AliasChoices("media_type", "mediaType", "type")
    )
    title: str = ""
    poster_path: str | None = Field(
        default=None, validation_alias=AliasChoices("poster_path", "posterPath")
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        validation_alias=AliasChoices("created_at", "createdAt", "viewedAt"),
    )

    @field_validator("media_type", mode="before")
    @classmethod
    def _normalize_media_type(cls, value: object) -> str:
        return normalize_media_type(str(value or ""))

    @property
    def is_enrichable(self) -> bool:
        """Return whether the provider knows how to describe this record."""

        return self.media_type in MEDIA_TYPES

    def base_fields(self) -> dict[str, Any]:
        """Return only the stored reference attributes."""

        return {name: getattr(self, name) for name in Reference.model_fields}


class EnrichedReference(Reference):
    """Reference decorated with best-effort provider metadata."""

    overview: str | None = None
    vote_average: float | None = None
    genres: list[str] | None = None
    release_date: str | None = None
    popularity: float | None = None
    runtime: int | None = None
    added_at: datetime | None = None

    @classmethod
    def from_reference(
        cls, reference: Reference, decorations: dict[str, Any] | None = None
    ) -> "EnrichedReference":
        """Build an enriched view; without decorations this is the fallback record."""

        payload = reference.base_fields()
        payload["added_at"] = reference.created_at
        if decorations:
            payload.update(decorations)
        return cls.model_validate(payload)

    @property
    def is_decorated(self) -> bool:
        return any(getattr(self, name) is not None for name in DECORATION_FIELDS)


class CandidateItem(BaseModel):
    """A single discovery result; unknown provider fields are preserved."""

    model_config = ConfigDict(extra="allow")

    id: int
    popularity: float = 0.0

    @field_validator("popularity", mode="before")
    @classmethod
    def _default_popularity(cls, value: object) -> object:
        return 0.0 if value is None else value


class CandidateSet(BaseModel):
    """One page of discovery results as returned by the provider."""

    page: int = 1
    results: list[CandidateItem] = Field(default_factory=list)
    total_pages: int = 0
    total_results: int = 0


class MergedResult(BaseModel):
    """Blend of two candidate sets.

    ``total_pages`` is the larger of the two source totals and does not
    describe the merged list itself. ``total_results`` counts the returned
    ``results`` after the cap has been applied.
    """

    page: int
    results: list[CandidateItem] = Field(default_factory=list)
    total_results: int
    total_pages: int

    def ids(self) -> list[int]:
        return [item.id for item in self.results]
