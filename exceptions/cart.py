"""
Cart-related exceptions.
"""

from .base import StorefrontException
from .common import NotFoundException, ValidationException


class CartException(StorefrontException):
    """Base exception for cart-related errors."""
    pass


class InvalidIdentityException(CartException):
    """Raised when a cart is requested with both or neither of user id and guest session id."""

    def __init__(self, user_id: int | None, guest_session_id: str | None):
        if user_id is not None and guest_session_id:
            reason = "both user id and guest session id given"
        else:
            reason = "neither user id nor guest session id given"
        super().__init__(
            f"Invalid cart identity: {reason}",
            details={'user_id': user_id, 'has_guest_session': bool(guest_session_id)}
        )
        self.user_id = user_id
        self.guest_session_id = guest_session_id


class MergeFailedException(CartException):
    """Raised when a guest cart could not be merged into a user cart. Both carts are left untouched."""

    def __init__(self, user_id: int, guest_session_id: str, reason: str):
        super().__init__(
            f"Failed to merge guest cart into cart of user {user_id}: {reason}",
            details={'user_id': user_id, 'reason': reason}
        )
        self.user_id = user_id
        self.guest_session_id = guest_session_id
        self.reason = reason


class CartNotFoundException(NotFoundException):
    """Raised when cart is not found in database."""

    def __init__(self, cart_id: int):
        super().__init__("cart", cart_id)
        self.cart_id = cart_id


class CartItemNotFoundException(NotFoundException):
    """Raised when cart item not found."""

    def __init__(self, cart_item_id: int):
        super().__init__("cart item", cart_item_id)
        self.cart_item_id = cart_item_id


class EmptyCartException(ValidationException):
    """Raised when trying to checkout with empty cart."""

    def __init__(self, cart_id: int):
        super().__init__(
            f"Cart {cart_id} is empty",
            details={'cart_id': cart_id}
        )
        self.cart_id = cart_id
