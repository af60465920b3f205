from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from enums.cart_status import CartStatus
from models.cart import Cart, CartDTO, UserOwner, GuestOwner


class CartRepository:

    @staticmethod
    def _owner_clause(owner: UserOwner | GuestOwner):
        if isinstance(owner, UserOwner):
            return Cart.user_id == owner.user_id
        return Cart.session_id == owner.session_id

    @staticmethod
    async def get_active(owner: UserOwner | GuestOwner, session: AsyncSession | Session) -> CartDTO | None:
        stmt = select(Cart).where(CartRepository._owner_clause(owner), Cart.status == CartStatus.ACTIVE)
        cart = (await session_execute(stmt, session)).scalar()
        if cart is None:
            return None
        return CartDTO.model_validate(cart, from_attributes=True)

    @staticmethod
    async def create(owner: UserOwner | GuestOwner, session: AsyncSession | Session) -> CartDTO:
        if isinstance(owner, UserOwner):
            cart = Cart(user_id=owner.user_id, status=CartStatus.ACTIVE)
        else:
            cart = Cart(session_id=owner.session_id, status=CartStatus.ACTIVE)
        session.add(cart)
        await session_flush(session)
        return CartDTO.model_validate(cart, from_attributes=True)

    @staticmethod
    async def get_or_create(owner: UserOwner | GuestOwner, session: AsyncSession | Session) -> tuple[CartDTO, bool]:
        cart = await CartRepository.get_active(owner, session)
        if cart is not None:
            return cart, False
        return await CartRepository.create(owner, session), True

    @staticmethod
    async def get_by_id(cart_id: int, session: AsyncSession | Session) -> CartDTO | None:
        stmt = select(Cart).where(Cart.id == cart_id)
        cart = (await session_execute(stmt, session)).scalar()
        if cart is None:
            return None
        return CartDTO.model_validate(cart, from_attributes=True)

    @staticmethod
    async def reassign_to_user(cart_id: int, user_id: int, session: AsyncSession | Session) -> None:
        stmt = update(Cart).where(Cart.id == cart_id).values(user_id=user_id, session_id=None)
        await session_execute(stmt, session)

    @staticmethod
    async def update_status(cart_id: int, status: CartStatus, session: AsyncSession | Session) -> None:
        stmt = update(Cart).where(Cart.id == cart_id).values(status=status)
        await session_execute(stmt, session)

    @staticmethod
    async def delete(cart_id: int, session: AsyncSession | Session) -> None:
        stmt = delete(Cart).where(Cart.id == cart_id)
        await session_execute(stmt, session)
