"""Tests for the TMDB provider adapter."""

from __future__ import annotations

import httpx
import pytest

from app.config import Settings
from app.errors import ResponseValidationError
from app.services.fetcher import RetryingFetcher
from app.services.tmdb import TMDBClient, extract_decorations, request_key


def build_settings() -> Settings:
    return Settings(
        _env_file=None,
        TMDB_API_KEY="test-key",
        TMDB_API_URL="https://api.example.com/3",
    )


@pytest.mark.parametrize(
    ("media_type", "expected"),
    [("movie", "/movie/603"), ("series", "/tv/603"), ("tv", "/tv/603")],
)
def test_request_key_maps_series_to_tv(media_type: str, expected: str) -> None:
    assert request_key(media_type, 603) == expected


def test_request_key_rejects_unknown_types() -> None:
    with pytest.raises(ValueError):
        request_key("person", 1)


def test_extract_decorations_for_series_uses_episode_runtime() -> None:
    decorations = extract_decorations(
        {
            "first_air_date": "2008-01-20",
            "episode_run_time": [47],
            "genres": [{"id": 18, "name": "Drama"}, {"id": 0}],
            "vote_average": 8.9,
        },
        "series",
    )

    assert decorations["release_date"] == "2008-01-20"
    assert decorations["runtime"] == 47
    assert decorations["genres"] == ["Drama"]
    assert decorations["popularity"] is None
    assert decorations["overview"] is None


def test_extract_decorations_reports_missing_genres_as_absent() -> None:
    decorations = extract_decorations({"runtime": 0}, "movie")

    assert decorations["genres"] is None
    assert decorations["runtime"] == 0
    assert decorations["release_date"] is None


def test_client_requires_api_key() -> None:
    with pytest.raises(ValueError, match="TMDB API key is required"):
        TMDBClient(Settings(_env_file=None, TMDB_API_KEY=""), object())  # type: ignore[arg-type]


@pytest.mark.anyio("asyncio")
async def test_details_sends_api_key(sleep_recorder) -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"id": 603, "title": "The Matrix"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        tmdb = TMDBClient(build_settings(), RetryingFetcher(client, sleep=sleep_recorder))
        payload = await tmdb.details("movie", 603)

    assert payload["title"] == "The Matrix"
    assert requests[0].url.path == "/3/movie/603"
    assert requests[0].url.params["api_key"] == "test-key"


@pytest.mark.anyio("asyncio")
async def test_discover_returns_candidate_set(sleep_recorder) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/3/discover/movie"
        assert request.url.params["with_genres"] == "35,10751"
        return httpx.Response(
            200,
            json={
                "page": 1,
                "results": [{"id": 1, "popularity": 9.5, "title": "Paddington"}],
                "total_pages": 12,
                "total_results": 240,
            },
        )

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        tmdb = TMDBClient(build_settings(), RetryingFetcher(client, sleep=sleep_recorder))
        candidates = await tmdb.discover({"with_genres": "35,10751"})

    assert candidates.total_pages == 12
    assert candidates.results[0].id == 1


@pytest.mark.anyio("asyncio")
async def test_discover_rejects_unexpected_shape(sleep_recorder) -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"results": [{"title": "no id"}]})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        tmdb = TMDBClient(build_settings(), RetryingFetcher(client, sleep=sleep_recorder))
        with pytest.raises(ResponseValidationError):
            await tmdb.discover({})
