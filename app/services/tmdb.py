"""Utilities for resolving metadata from The Movie Database (TMDB)."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import ValidationError

from ..config import Settings
from ..errors import ResponseValidationError
from ..models import CandidateSet, normalize_media_type
from .fetcher import RetryingFetcher

logger = logging.getLogger(__name__)

_PROVIDER_NAMESPACES = {"movie": "movie", "series": "tv"}


def provider_namespace(media_type: str) -> str:
    """Return the TMDB path segment for a catalog media type."""

    normalized = normalize_media_type(media_type)
    try:
        return _PROVIDER_NAMESPACES[normalized]
    except KeyError as exc:
        raise ValueError(f"Unsupported media type: {media_type!r}") from exc


def request_key(media_type: str, item_id: int) -> str:
    """Build the details path for an item, e.g. ``/tv/1399``."""

    return f"/{provider_namespace(media_type)}/{int(item_id)}"


def extract_decorations(payload: Mapping[str, Any], media_type: str) -> dict[str, Any]:
    """Map a TMDB details payload onto decoration fields.

    Missing or null provider values come back as ``None`` so the caller can
    tell "absent" apart from a legitimate zero.
    """

    genres: list[str] | None = None
    raw_genres = payload.get("genres")
    if isinstance(raw_genres, list):
        genres = []
        for genre in raw_genres:
            if isinstance(genre, Mapping) and genre.get("name"):
                genres.append(str(genre["name"]))
            elif isinstance(genre, str) and genre:
                genres.append(genre)

    if normalize_media_type(media_type) == "series":
        release_date = payload.get("first_air_date") or payload.get("release_date")
    else:
        release_date = payload.get("release_date") or payload.get("first_air_date")

    runtime = payload.get("runtime")
    if runtime is None:
        episode_runtimes = payload.get("episode_run_time")
        if isinstance(episode_runtimes, list) and episode_runtimes:
            runtime = episode_runtimes[0]

    return {
        "overview": payload.get("overview"),
        "vote_average": payload.get("vote_average"),
        "genres": genres,
        "release_date": release_date or None,
        "popularity": payload.get("popularity"),
        "runtime": runtime,
    }


class TMDBClient:
    """Client for the TMDB detail and discovery endpoints."""

    def __init__(self, settings: Settings, fetcher: RetryingFetcher):
        if not settings.tmdb_api_key:
            raise ValueError("TMDB API key is required when initialising TMDBClient")
        self._settings = settings
        self._fetcher = fetcher

    def _params(self, extra: Mapping[str, Any] | None = None) -> dict[str, Any]:
        params: dict[str, Any] = {"api_key": self._settings.tmdb_api_key}
        if extra:
            params.update(extra)
        return params

    def _url(self, path: str) -> str:
        return f"{self._settings.tmdb_base_url}{path}"

    async def details(self, media_type: str, item_id: int) -> dict[str, Any]:
        """Fetch the raw details payload for a movie or series."""

        return await self._fetcher.fetch_json(
            self._url(request_key(media_type, item_id)), self._params()
        )

    async def discover(
        self, params: Mapping[str, Any], *, media_type: str = "movie"
    ) -> CandidateSet:
        """Run a discovery query and return the page as a candidate set."""

        path = f"/discover/{provider_namespace(media_type)}"
        payload = await self._fetcher.fetch_json(self._url(path), self._params(params))
        try:
            return CandidateSet.model_validate(payload)
        except ValidationError as exc:
            logger.debug("Discovery payload for %s failed validation: %s", path, exc)
            raise ResponseValidationError(
                f"Unexpected discovery payload for {path}", url=self._url(path)
            ) from exc


__all__ = [
    "TMDBClient",
    "extract_decorations",
    "provider_namespace",
    "request_key",
]
