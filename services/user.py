import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from exceptions.cart import MergeFailedException
from models.cart import CartDTO
from services.cart import CartService


class UserService:

    @staticmethod
    async def on_authenticated(user_id: int, guest_session_id: str | None,
                               session: AsyncSession | Session) -> CartDTO | None:
        """
        Hook called by the auth layer after login or registration.

        Carries the visitor's guest cart over to the account. A failed merge is
        logged and does not block authentication; the guest cart is then left
        untouched and can be merged again on the next login.
        """
        if not guest_session_id:
            return None
        try:
            return await CartService.migrate_guest_cart_to_user(user_id, guest_session_id, session)
        except MergeFailedException as e:
            logging.error(f"Guest cart merge for user {user_id} failed at login, continuing: {e.reason}")
            return None
