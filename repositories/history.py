import json

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from models.history import HistoryEntry, HistoryEntryDTO


class HistoryRepository:
    """
    Append-only access to the audit log.

    There is deliberately no update or delete method.
    """

    @staticmethod
    def _to_dto(entry: HistoryEntry) -> HistoryEntryDTO:
        return HistoryEntryDTO(
            id=entry.id,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            actor_id=entry.actor_id,
            action=entry.action,
            before=json.loads(entry.before_json) if entry.before_json else None,
            after=json.loads(entry.after_json) if entry.after_json else None,
            created_at=entry.created_at,
        )

    @staticmethod
    async def create(entry_dto: HistoryEntryDTO, session: AsyncSession | Session) -> HistoryEntryDTO:
        entry = HistoryEntry(
            entity_type=entry_dto.entity_type,
            entity_id=entry_dto.entity_id,
            actor_id=entry_dto.actor_id,
            action=entry_dto.action,
            before_json=json.dumps(entry_dto.before, default=str) if entry_dto.before is not None else None,
            after_json=json.dumps(entry_dto.after, default=str) if entry_dto.after is not None else None,
        )
        session.add(entry)
        await session_flush(session)
        return HistoryRepository._to_dto(entry)

    @staticmethod
    async def get_for_entity(entity_type: str, entity_id: int,
                             session: AsyncSession | Session) -> list[HistoryEntryDTO]:
        stmt = (
            select(HistoryEntry)
            .where(HistoryEntry.entity_type == entity_type, HistoryEntry.entity_id == entity_id)
            .order_by(HistoryEntry.created_at, HistoryEntry.id)
        )
        entries = (await session_execute(stmt, session)).scalars().all()
        return [HistoryRepository._to_dto(entry) for entry in entries]
