"""Entry point for the FastAPI-powered enrichment service."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .database import Database
from .errors import FetchError
from .models import COLLECTIONS
from .services.enrichment import BatchEnricher
from .services.fetcher import RetryingFetcher
from .services.merger import RankedMerger
from .services.recommendations import MoodRecommendationService
from .services.references import ReferenceStore
from .services.tmdb import TMDBClient

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app: FastAPI


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    tmdb_http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(timeout=httpx.Timeout(20.0, connect=10.0))
    )
    database = Database(settings.database_url)
    await database.create_all()

    fastapi_app.state.database = database
    fastapi_app.state.reference_store = ReferenceStore(database.session_factory)

    if settings.tmdb_api_key:
        fetcher = RetryingFetcher.from_settings(settings, tmdb_http_client)
        tmdb = TMDBClient(settings, fetcher)
        fastapi_app.state.enricher = BatchEnricher.from_settings(settings, tmdb)
        fastapi_app.state.recommendations = MoodRecommendationService(
            tmdb, RankedMerger(settings.merge_cap)
        )
    else:
        logger.warning("TMDB_API_KEY is not configured; enrichment is disabled")

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await database.dispose()
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Enriched watchlists and mood-based recommendations",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def _require_state(fastapi_app: FastAPI, name: str, expected: type) -> Any:
    service = getattr(fastapi_app.state, name, None)
    if not isinstance(service, expected):
        raise HTTPException(status_code=503, detail=f"{name} is not configured")
    return service


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/users/{owner_id}/{collection}/enriched")
    async def enriched_collection(owner_id: str, collection: str) -> list[dict[str, Any]]:
        if collection not in COLLECTIONS:
            raise HTTPException(status_code=404, detail="Unknown collection")
        store = _require_state(fastapi_app, "reference_store", ReferenceStore)
        enricher = _require_state(fastapi_app, "enricher", BatchEnricher)
        items = await enricher.enrich_collection(store, owner_id, collection)
        return [item.model_dump(mode="json") for item in items]

    @fastapi_app.get("/mood-recommendations")
    async def mood_recommendations(
        mood: str = Query(...), page: int = Query(default=1, ge=1)
    ) -> dict[str, Any]:
        service = _require_state(
            fastapi_app, "recommendations", MoodRecommendationService
        )
        try:
            result = await service.recommend(mood, page=page)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except FetchError as exc:
            logger.warning("Mood recommendations for %s failed: %s", mood, exc)
            raise HTTPException(
                status_code=502, detail="Failed to fetch recommendations"
            ) from exc
        return result.model_dump(mode="json")


app = create_app()
