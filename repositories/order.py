from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from enums.order_status import OrderStatus
from models.order import Order, OrderDTO


class OrderRepository:

    @staticmethod
    async def create(order_dto: OrderDTO, session: AsyncSession | Session) -> OrderDTO:
        order = Order(**order_dto.model_dump(exclude={'id', 'items', 'created_at', 'updated_at'}))
        session.add(order)
        await session_flush(session)
        return OrderDTO.model_validate(order, from_attributes=True)

    @staticmethod
    async def get_by_id(order_id: int, session: AsyncSession | Session) -> OrderDTO | None:
        stmt = select(Order).where(Order.id == order_id)
        order = (await session_execute(stmt, session)).scalar()
        if order is None:
            return None
        return OrderDTO.model_validate(order, from_attributes=True)

    @staticmethod
    async def get_by_cart_id(cart_id: int, session: AsyncSession | Session) -> OrderDTO | None:
        stmt = select(Order).where(Order.cart_id == cart_id)
        order = (await session_execute(stmt, session)).scalar()
        if order is None:
            return None
        return OrderDTO.model_validate(order, from_attributes=True)

    @staticmethod
    async def get_by_user_id(user_id: int, session: AsyncSession | Session) -> list[OrderDTO]:
        stmt = select(Order).where(Order.user_id == user_id).order_by(Order.created_at.desc(), Order.id.desc())
        orders = (await session_execute(stmt, session)).scalars().all()
        return [OrderDTO.model_validate(order, from_attributes=True) for order in orders]

    @staticmethod
    async def update_status(order_id: int, status: OrderStatus, expected_status: OrderStatus,
                            session: AsyncSession | Session) -> bool:
        """Compare-and-set: only moves the order if it is still in expected_status."""
        stmt = update(Order).where(Order.id == order_id, Order.status == expected_status).values(status=status)
        result = await session_execute(stmt, session)
        return result.rowcount > 0

    @staticmethod
    async def update_total(order_id: int, total_price: float, session: AsyncSession | Session) -> None:
        stmt = update(Order).where(Order.id == order_id).values(total_price=total_price)
        await session_execute(stmt, session)

    @staticmethod
    async def update_details(order_id: int, fields: dict, session: AsyncSession | Session) -> None:
        if not fields:
            return
        stmt = update(Order).where(Order.id == order_id).values(**fields)
        await session_execute(stmt, session)

    @staticmethod
    async def delete(order_id: int, session: AsyncSession | Session) -> None:
        stmt = delete(Order).where(Order.id == order_id)
        await session_execute(stmt, session)
