import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from enums.history import HistoryEntityType, HistoryAction
from models.history import HistoryEntryDTO
from repositories.history import HistoryRepository

logger = logging.getLogger(__name__)


class HistoryService:
    """
    Append-only audit log for orders and order line items.

    record() joins the caller's transaction: the entry is committed together
    with the change it describes, or not at all.
    """

    @staticmethod
    async def record(entity_type: HistoryEntityType, entity_id: int, actor_id: int | None,
                     action: HistoryAction, before: dict | None, after: dict | None,
                     session: AsyncSession | Session) -> HistoryEntryDTO:
        entry = await HistoryRepository.create(HistoryEntryDTO(
            entity_type=entity_type.value,
            entity_id=entity_id,
            actor_id=actor_id,
            action=action.value,
            before=before,
            after=after,
        ), session)
        logger.info(
            f"HISTORY: {entity_type.value} {entity_id} {action.value} "
            f"by {'admin ' + str(actor_id) if actor_id is not None else 'customer'}"
        )
        return entry

    @staticmethod
    async def get_history_for_entity(entity_type: HistoryEntityType, entity_id: int,
                                     session: AsyncSession | Session) -> list[HistoryEntryDTO]:
        """Entries oldest first (created_at, then insertion order)."""
        return await HistoryRepository.get_for_entity(entity_type.value, entity_id, session)
