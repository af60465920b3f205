from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute
from enums.special_status import SpecialStatus
from models.special import Special, SpecialItem, SpecialDTO, SpecialItemDTO


class SpecialRepository:

    @staticmethod
    async def _load(stmt, session: Session | AsyncSession) -> list[SpecialDTO]:
        specials = (await session_execute(stmt, session)).scalars().all()
        if not specials:
            return []

        # Single query for the items of all loaded specials
        items_stmt = (
            select(SpecialItem)
            .where(SpecialItem.special_id.in_([special.id for special in specials]))
            .order_by(SpecialItem.display_order, SpecialItem.id)
        )
        items = (await session_execute(items_stmt, session)).scalars().all()
        items_by_special: dict[int, list[SpecialItemDTO]] = {}
        for item in items:
            items_by_special.setdefault(item.special_id, []).append(
                SpecialItemDTO.model_validate(item, from_attributes=True)
            )

        return [
            SpecialDTO(
                id=special.id,
                name=special.name,
                description=special.description,
                price=special.price,
                status=special.status,
                items=items_by_special.get(special.id, []),
            )
            for special in specials
        ]

    @staticmethod
    async def get_by_id(special_id: int, session: Session | AsyncSession) -> SpecialDTO | None:
        specials = await SpecialRepository._load(select(Special).where(Special.id == special_id), session)
        return specials[0] if specials else None

    @staticmethod
    async def get_by_ids(special_ids: list[int] | set[int], session: Session | AsyncSession) -> dict[int, SpecialDTO]:
        special_ids = set(special_ids)
        if not special_ids:
            return {}
        specials = await SpecialRepository._load(select(Special).where(Special.id.in_(special_ids)), session)
        return {special.id: special for special in specials}

    @staticmethod
    async def get_all(session: Session | AsyncSession, status: SpecialStatus | None = None) -> list[SpecialDTO]:
        stmt = select(Special).order_by(Special.id)
        if status is not None:
            stmt = stmt.where(Special.status == status)
        return await SpecialRepository._load(stmt, session)

    @staticmethod
    async def update_status(special_id: int, status: SpecialStatus, session: Session | AsyncSession) -> bool:
        stmt = update(Special).where(Special.id == special_id).values(status=status)
        result = await session_execute(stmt, session)
        return result.rowcount > 0
