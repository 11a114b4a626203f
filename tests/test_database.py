from __future__ import annotations

import asyncio
from datetime import datetime

import pytest
from sqlalchemy import create_engine, inspect

from app.database import Database
from app.models import Reference
from app.services.references import ReferenceStore


def test_create_all_creates_reference_table(tmp_path) -> None:
    database_path = tmp_path / "fresh.db"

    async def _create() -> None:
        database = Database(f"sqlite+aiosqlite:///{database_path}")
        await database.create_all()
        await database.dispose()

    asyncio.run(_create())

    inspector_engine = create_engine(f"sqlite:///{database_path}")
    try:
        inspector = inspect(inspector_engine)
        columns = {
            column["name"] for column in inspector.get_columns("stored_references")
        }
    finally:
        inspector_engine.dispose()

    assert {"collection", "owner_id", "item_id", "media_type", "created_at"} <= columns


def _reference(item_id: int, *, minute: int, media_type: str = "movie", **extra) -> Reference:
    return Reference(
        owner_id="viewer",
        item_id=item_id,
        media_type=media_type,
        title=extra.pop("title", f"Title {item_id}"),
        created_at=datetime(2024, 5, 1, 12, minute),
        **extra,
    )


@pytest.mark.anyio("asyncio")
async def test_store_upserts_and_lists_newest_first(tmp_path) -> None:
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await database.create_all()
    store = ReferenceStore(database.session_factory)
    try:
        await store.add("watchlist", _reference(1, minute=1))
        await store.add("watchlist", _reference(2, minute=2, media_type="tv"))
        await store.add(
            "watchlist", _reference(1, minute=3, title="Renamed", poster_path="/p.jpg")
        )
        await store.add("favorites", _reference(1, minute=4))

        watchlist = await store.list("watchlist", "viewer")
        favorites = await store.list("favorites", "viewer")
    finally:
        await database.dispose()

    assert [(ref.item_id, ref.media_type) for ref in watchlist] == [
        (1, "movie"),
        (2, "series"),
    ]
    assert watchlist[0].title == "Renamed"
    assert watchlist[0].poster_path == "/p.jpg"
    assert len(favorites) == 1


@pytest.mark.anyio("asyncio")
async def test_store_remove_and_clear_are_scoped(tmp_path) -> None:
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await database.create_all()
    store = ReferenceStore(database.session_factory)
    try:
        await store.add("history", _reference(1, minute=1))
        await store.add("history", _reference(2, minute=2))
        await store.add("watchlist", _reference(1, minute=3))

        assert await store.remove("history", "viewer", 1, "movie") is True
        assert await store.remove("history", "viewer", 1, "movie") is False
        assert await store.clear("history", "viewer") == 1
        assert await store.list("history", "viewer") == []
        assert len(await store.list("watchlist", "viewer")) == 1
    finally:
        await database.dispose()


@pytest.mark.anyio("asyncio")
async def test_store_rejects_unknown_collection(tmp_path) -> None:
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await database.create_all()
    store = ReferenceStore(database.session_factory)
    try:
        with pytest.raises(ValueError, match="Unknown collection"):
            await store.list("ratings", "viewer")
    finally:
        await database.dispose()
