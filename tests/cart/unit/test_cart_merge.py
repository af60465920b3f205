"""
Unit Tests: guest -> user cart migration

Covers CartService.migrate_guest_cart_to_user() and the login hook
UserService.on_authenticated().
"""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from exceptions.cart import MergeFailedException
from exceptions.common import ValidationException
from models.cart import UserOwner, GuestOwner
from models.cartItem import AddProductToCartRequest, AddSpecialToCartRequest
from repositories.cart import CartRepository
from repositories.cartItem import CartItemRepository
from services.cart import CartService
from services.user import UserService

GUEST = "guest-session-1"
USER_ID = 7


async def add_product(session, catalogue, quantity, color_parameter_id, user_id=None, guest_session_id=None):
    return await CartService.add_product_to_cart(AddProductToCartRequest(
        user_id=user_id,
        guest_session_id=guest_session_id,
        product_id=catalogue.enclosure_id,
        quantity=quantity,
        selected_parameters={catalogue.color_id: color_parameter_id},
    ), session)


async def cart_lines(session, owner):
    cart = await CartRepository.get_active(owner, session)
    if cart is None:
        return None
    return {
        (cart_item.product_id, cart_item.special_id, tuple(sorted(cart_item.selected_parameters.items()))):
            cart_item.quantity
        for cart_item in await CartItemRepository.get_by_cart_id(cart.id, session)
    }


class TestMigrateGuestCart:

    @pytest.mark.asyncio
    async def test_reassigns_when_user_has_no_cart(self, session, catalogue):
        guest_line = await add_product(session, catalogue, 2, catalogue.blue_id, guest_session_id=GUEST)

        cart = await CartService.migrate_guest_cart_to_user(USER_ID, GUEST, session)

        assert cart.id == guest_line.cart_id
        assert cart.owner == UserOwner(user_id=USER_ID)
        assert await CartRepository.get_active(GuestOwner(session_id=GUEST), session) is None

    @pytest.mark.asyncio
    async def test_merge_with_one_overlapping_line(self, session, catalogue):
        await add_product(session, catalogue, 1, catalogue.blue_id, user_id=USER_ID)
        guest_blue = await add_product(session, catalogue, 2, catalogue.blue_id, guest_session_id=GUEST)
        await add_product(session, catalogue, 1, catalogue.red_id, guest_session_id=GUEST)

        cart = await CartService.migrate_guest_cart_to_user(USER_ID, GUEST, session)

        lines = await cart_lines(session, UserOwner(user_id=USER_ID))
        assert len(lines) == 2
        assert lines[(catalogue.enclosure_id, None, ((catalogue.color_id, catalogue.blue_id),))] == 3
        assert lines[(catalogue.enclosure_id, None, ((catalogue.color_id, catalogue.red_id),))] == 1
        assert await CartRepository.get_by_id(guest_blue.cart_id, session) is None
        assert await CartService.calculate_cart_total(cart.id, session) == 415.0

    @pytest.mark.asyncio
    async def test_specials_merge_by_special_id(self, session, catalogue):
        await CartService.add_special_to_cart(AddSpecialToCartRequest(
            user_id=USER_ID, special_id=catalogue.bundle_id), session)
        await CartService.add_special_to_cart(AddSpecialToCartRequest(
            guest_session_id=GUEST, special_id=catalogue.bundle_id, quantity=2), session)

        await CartService.migrate_guest_cart_to_user(USER_ID, GUEST, session)

        lines = await cart_lines(session, UserOwner(user_id=USER_ID))
        assert lines == {(None, catalogue.bundle_id, ()): 3}

    @pytest.mark.asyncio
    async def test_no_guest_cart_is_a_no_op(self, session, catalogue):
        user_line = await add_product(session, catalogue, 1, catalogue.blue_id, user_id=USER_ID)
        cart = await CartService.migrate_guest_cart_to_user(USER_ID, GUEST, session)
        assert cart.id == user_line.cart_id

    @pytest.mark.asyncio
    async def test_no_carts_at_all_gives_the_user_an_empty_cart(self, session, catalogue):
        cart = await CartService.migrate_guest_cart_to_user(USER_ID, GUEST, session)

        assert cart is not None
        assert cart.owner == UserOwner(user_id=USER_ID)
        assert (await CartRepository.get_active(UserOwner(user_id=USER_ID), session)).id == cart.id
        assert await cart_lines(session, UserOwner(user_id=USER_ID)) == {}

    @pytest.mark.asyncio
    async def test_requires_both_identities(self, session):
        with pytest.raises(ValidationException):
            await CartService.migrate_guest_cart_to_user(USER_ID, "", session)

    @pytest.mark.asyncio
    async def test_failure_leaves_both_carts_untouched(self, session, catalogue):
        await add_product(session, catalogue, 1, catalogue.blue_id, user_id=USER_ID)
        await add_product(session, catalogue, 2, catalogue.blue_id, guest_session_id=GUEST)
        await add_product(session, catalogue, 1, catalogue.red_id, guest_session_id=GUEST)
        user_before = await cart_lines(session, UserOwner(user_id=USER_ID))
        guest_before = await cart_lines(session, GuestOwner(session_id=GUEST))

        # The overlapping line merges first, then moving the second line fails
        with patch('services.cart.CartItemRepository.move_to_cart',
                   side_effect=OperationalError("UPDATE cart_items", {}, Exception("database is locked"))):
            with pytest.raises(MergeFailedException) as exc_info:
                await CartService.migrate_guest_cart_to_user(USER_ID, GUEST, session)

        assert "database is locked" in exc_info.value.reason
        assert await cart_lines(session, UserOwner(user_id=USER_ID)) == user_before
        assert await cart_lines(session, GuestOwner(session_id=GUEST)) == guest_before


class TestMergeAtLogin:

    @pytest.mark.asyncio
    async def test_login_merges_guest_cart(self, session, catalogue):
        await add_product(session, catalogue, 2, catalogue.blue_id, guest_session_id=GUEST)
        cart = await UserService.on_authenticated(USER_ID, GUEST, session)
        assert cart.owner == UserOwner(user_id=USER_ID)

    @pytest.mark.asyncio
    async def test_merge_failure_does_not_block_login(self, session, catalogue):
        await add_product(session, catalogue, 2, catalogue.blue_id, guest_session_id=GUEST)

        with patch('services.user.CartService.migrate_guest_cart_to_user',
                   side_effect=MergeFailedException(USER_ID, GUEST, "boom")):
            result = await UserService.on_authenticated(USER_ID, GUEST, session)

        assert result is None
        assert await cart_lines(session, GuestOwner(session_id=GUEST)) is not None

    @pytest.mark.asyncio
    async def test_login_without_guest_session(self, session):
        assert await UserService.on_authenticated(USER_ID, None, session) is None
