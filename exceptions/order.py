"""
Order-related exceptions.
"""

from .base import StorefrontException
from .common import NotFoundException


class OrderException(StorefrontException):
    """Base exception for order-related errors."""
    pass


class OrderNotFoundException(NotFoundException):
    """Raised when order is not found in database."""

    def __init__(self, order_id: int):
        super().__init__("order", order_id)
        self.order_id = order_id


class InvalidTransitionException(OrderException):
    """Raised when a status change is not allowed by the order state machine."""

    def __init__(self, order_id: int, current_status: str, requested_status: str):
        super().__init__(
            f"Order {order_id} cannot move from '{current_status}' to '{requested_status}'",
            details={
                'order_id': order_id,
                'current_status': current_status,
                'requested_status': requested_status
            }
        )
        self.order_id = order_id
        self.current_status = current_status
        self.requested_status = requested_status


class OrderLockedException(OrderException):
    """Raised when an order is modified in a status that no longer permits changes."""

    def __init__(self, order_id: int, current_status: str):
        super().__init__(
            f"Order {order_id} is '{current_status}' and can no longer be modified",
            details={'order_id': order_id, 'current_status': current_status}
        )
        self.order_id = order_id
        self.current_status = current_status


class DuplicateOrderException(OrderException):
    """Raised when a cart that was already converted is checked out again."""

    def __init__(self, cart_id: int, order_id: int):
        super().__init__(
            f"Cart {cart_id} was already converted into order {order_id}",
            details={'cart_id': cart_id, 'order_id': order_id}
        )
        self.cart_id = cart_id
        self.order_id = order_id
