"""Persistence for the watchlist, favorites and history collections."""

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..db_models import ReferenceRecord
from ..models import COLLECTIONS, Reference, normalize_media_type

logger = logging.getLogger(__name__)


def _require_collection(collection: str) -> str:
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection!r}")
    return collection


def _to_reference(record: ReferenceRecord) -> Reference:
    return Reference(
        owner_id=record.owner_id,
        item_id=record.item_id,
        media_type=record.media_type,
        title=record.title,
        poster_path=record.poster_path,
        created_at=record.created_at,
    )


class ReferenceStore:
    """Store per-owner references, unique per collection, owner, item and type."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def add(self, collection: str, reference: Reference) -> Reference:
        """Insert the reference or refresh the stored copy on a repeat add."""

        _require_collection(collection)
        async with self._session_factory() as session:
            record = await self._find(
                session,
                collection,
                reference.owner_id,
                reference.item_id,
                reference.media_type,
            )
            if record is None:
                record = ReferenceRecord(
                    collection=collection,
                    owner_id=reference.owner_id,
                    item_id=reference.item_id,
                    media_type=reference.media_type,
                    title=reference.title,
                    poster_path=reference.poster_path,
                    created_at=reference.created_at,
                )
                session.add(record)
            else:
                record.title = reference.title or record.title
                record.poster_path = reference.poster_path or record.poster_path
                record.created_at = reference.created_at
            await session.commit()
            return _to_reference(record)

    async def remove(
        self, collection: str, owner_id: str, item_id: int, media_type: str
    ) -> bool:
        """Delete a single reference; return whether anything was removed."""

        _require_collection(collection)
        async with self._session_factory() as session:
            result = await session.execute(
                delete(ReferenceRecord).where(
                    ReferenceRecord.collection == collection,
                    ReferenceRecord.owner_id == owner_id,
                    ReferenceRecord.item_id == item_id,
                    ReferenceRecord.media_type == normalize_media_type(media_type),
                )
            )
            await session.commit()
            return bool(result.rowcount)

    async def clear(self, collection: str, owner_id: str) -> int:
        """Delete every reference an owner keeps in *collection*."""

        _require_collection(collection)
        async with self._session_factory() as session:
            result = await session.execute(
                delete(ReferenceRecord).where(
                    ReferenceRecord.collection == collection,
                    ReferenceRecord.owner_id == owner_id,
                )
            )
            await session.commit()
            removed = int(result.rowcount or 0)
        logger.info("Cleared %d %s entries for %s", removed, collection, owner_id)
        return removed

    async def list(self, collection: str, owner_id: str) -> list[Reference]:
        """Return the owner's references, newest first."""

        _require_collection(collection)
        async with self._session_factory() as session:
            result = await session.execute(
                select(ReferenceRecord)
                .where(
                    ReferenceRecord.collection == collection,
                    ReferenceRecord.owner_id == owner_id,
                )
                .order_by(ReferenceRecord.created_at.desc(), ReferenceRecord.id.desc())
            )
            return [_to_reference(record) for record in result.scalars()]

    @staticmethod
    async def _find(
        session: AsyncSession,
        collection: str,
        owner_id: str,
        item_id: int,
        media_type: str,
    ) -> ReferenceRecord | None:
        result = await session.execute(
            select(ReferenceRecord).where(
                ReferenceRecord.collection == collection,
                ReferenceRecord.owner_id == owner_id,
                ReferenceRecord.item_id == item_id,
                ReferenceRecord.media_type == media_type,
            )
        )
        return result.scalar_one_or_none()


__all__ = ["ReferenceStore"]
