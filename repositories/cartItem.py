from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from models.cartItem import CartItem, CartItemDTO
from utils.selection import encode_selection


class CartItemRepository:

    @staticmethod
    async def create(cart_item_dto: CartItemDTO, session: AsyncSession | Session) -> CartItemDTO:
        cart_item = CartItem(
            cart_id=cart_item_dto.cart_id,
            product_id=cart_item_dto.product_id,
            special_id=cart_item_dto.special_id,
            quantity=cart_item_dto.quantity,
            selected_parameters=encode_selection(cart_item_dto.selected_parameters)
            if cart_item_dto.product_id is not None else None,
            unit_price=cart_item_dto.unit_price,
        )
        session.add(cart_item)
        await session_flush(session)
        return CartItemDTO.model_validate(cart_item, from_attributes=True)

    @staticmethod
    async def get_by_cart_id(cart_id: int, session: AsyncSession | Session) -> list[CartItemDTO]:
        stmt = select(CartItem).where(CartItem.cart_id == cart_id).order_by(CartItem.id)
        cart_items = (await session_execute(stmt, session)).scalars().all()
        return [CartItemDTO.model_validate(cart_item, from_attributes=True) for cart_item in cart_items]

    @staticmethod
    async def get_by_id(cart_item_id: int, session: AsyncSession | Session) -> CartItemDTO | None:
        stmt = select(CartItem).where(CartItem.id == cart_item_id)
        cart_item = (await session_execute(stmt, session)).scalar()
        if cart_item is None:
            return None
        return CartItemDTO.model_validate(cart_item, from_attributes=True)

    @staticmethod
    async def find_product_line(cart_id: int, product_id: int, selected_parameters: dict[int, int],
                                session: AsyncSession | Session) -> CartItemDTO | None:
        """Line of the cart holding this product with exactly this (complete) selection."""
        stmt = select(CartItem).where(
            CartItem.cart_id == cart_id,
            CartItem.product_id == product_id,
            CartItem.selected_parameters == encode_selection(selected_parameters)
        )
        cart_item = (await session_execute(stmt, session)).scalar()
        if cart_item is None:
            return None
        return CartItemDTO.model_validate(cart_item, from_attributes=True)

    @staticmethod
    async def find_special_line(cart_id: int, special_id: int,
                                session: AsyncSession | Session) -> CartItemDTO | None:
        stmt = select(CartItem).where(CartItem.cart_id == cart_id, CartItem.special_id == special_id)
        cart_item = (await session_execute(stmt, session)).scalar()
        if cart_item is None:
            return None
        return CartItemDTO.model_validate(cart_item, from_attributes=True)

    @staticmethod
    async def find_matching_line(cart_id: int, cart_item: CartItemDTO,
                                 session: AsyncSession | Session) -> CartItemDTO | None:
        if cart_item.special_id is not None:
            return await CartItemRepository.find_special_line(cart_id, cart_item.special_id, session)
        return await CartItemRepository.find_product_line(
            cart_id, cart_item.product_id, cart_item.selected_parameters, session
        )

    @staticmethod
    async def increment_quantity(cart_item_id: int, quantity: int, session: AsyncSession | Session) -> None:
        stmt = update(CartItem).where(CartItem.id == cart_item_id).values(quantity=CartItem.quantity + quantity)
        await session_execute(stmt, session)

    @staticmethod
    async def update_quantity(cart_item_id: int, quantity: int, session: AsyncSession | Session) -> None:
        stmt = update(CartItem).where(CartItem.id == cart_item_id).values(quantity=quantity)
        await session_execute(stmt, session)

    @staticmethod
    async def move_to_cart(cart_item_id: int, cart_id: int, session: AsyncSession | Session) -> None:
        stmt = update(CartItem).where(CartItem.id == cart_item_id).values(cart_id=cart_id)
        await session_execute(stmt, session)

    @staticmethod
    async def delete(cart_item_id: int, session: AsyncSession | Session) -> None:
        stmt = delete(CartItem).where(CartItem.id == cart_item_id)
        await session_execute(stmt, session)

    @staticmethod
    async def delete_by_special(cart_id: int, special_id: int, session: AsyncSession | Session) -> int:
        stmt = delete(CartItem).where(CartItem.cart_id == cart_id, CartItem.special_id == special_id)
        result = await session_execute(stmt, session)
        return result.rowcount

    @staticmethod
    async def delete_by_cart_id(cart_id: int, session: AsyncSession | Session) -> None:
        stmt = delete(CartItem).where(CartItem.cart_id == cart_id)
        await session_execute(stmt, session)
