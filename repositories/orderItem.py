from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from models.orderItem import OrderLineItem, OrderLineItemDTO
from utils.selection import encode_selection


class OrderLineItemRepository:

    @staticmethod
    def _to_row(line_item_dto: OrderLineItemDTO) -> OrderLineItem:
        return OrderLineItem(
            order_id=line_item_dto.order_id,
            product_id=line_item_dto.product_id,
            special_id=line_item_dto.special_id,
            product_name=line_item_dto.product_name,
            quantity=line_item_dto.quantity,
            unit_price=line_item_dto.unit_price,
            selected_parameters=encode_selection(line_item_dto.selected_parameters),
        )

    @staticmethod
    async def create(line_item_dto: OrderLineItemDTO, session: AsyncSession | Session) -> OrderLineItemDTO:
        line_item = OrderLineItemRepository._to_row(line_item_dto)
        session.add(line_item)
        await session_flush(session)
        return OrderLineItemDTO.model_validate(line_item, from_attributes=True)

    @staticmethod
    async def create_many(line_items: list[OrderLineItemDTO], session: AsyncSession | Session) -> list[OrderLineItemDTO]:
        rows = [OrderLineItemRepository._to_row(line_item_dto) for line_item_dto in line_items]
        session.add_all(rows)
        await session_flush(session)
        return [OrderLineItemDTO.model_validate(row, from_attributes=True) for row in rows]

    @staticmethod
    async def get_by_order_id(order_id: int, session: AsyncSession | Session) -> list[OrderLineItemDTO]:
        stmt = select(OrderLineItem).where(OrderLineItem.order_id == order_id).order_by(OrderLineItem.id)
        line_items = (await session_execute(stmt, session)).scalars().all()
        return [OrderLineItemDTO.model_validate(line_item, from_attributes=True) for line_item in line_items]

    @staticmethod
    async def get_by_order_ids(order_ids: list[int], session: AsyncSession | Session) -> dict[int, list[OrderLineItemDTO]]:
        """Line items of several orders in a single query, grouped by order id."""
        if not order_ids:
            return {}
        stmt = (
            select(OrderLineItem)
            .where(OrderLineItem.order_id.in_(order_ids))
            .order_by(OrderLineItem.order_id, OrderLineItem.id)
        )
        line_items = (await session_execute(stmt, session)).scalars().all()
        grouped: dict[int, list[OrderLineItemDTO]] = {order_id: [] for order_id in order_ids}
        for line_item in line_items:
            grouped[line_item.order_id].append(OrderLineItemDTO.model_validate(line_item, from_attributes=True))
        return grouped

    @staticmethod
    async def delete_by_order_id(order_id: int, session: AsyncSession | Session) -> None:
        stmt = delete(OrderLineItem).where(OrderLineItem.order_id == order_id)
        await session_execute(stmt, session)
