import logging
from typing import Awaitable, Callable

from models.order import OrderDTO

logger = logging.getLogger(__name__)

OrderSender = Callable[[OrderDTO], Awaitable[None]]


class NotificationService:
    """
    Fire-and-forget outbound notifications.

    Delivery (email to the customer, message to the shop admins) is done by
    externally registered senders. A failing sender is logged and never
    propagates into the operation that triggered it.
    """

    _order_created_senders: list[OrderSender] = []

    @classmethod
    def register_order_created_sender(cls, sender: OrderSender) -> None:
        if sender not in cls._order_created_senders:
            cls._order_created_senders.append(sender)

    @classmethod
    def clear_senders(cls) -> None:
        cls._order_created_senders = []

    @classmethod
    async def order_created(cls, order: OrderDTO) -> int:
        """Dispatch the new order to every sender. Returns the number of successful deliveries."""
        delivered = 0
        for sender in list(cls._order_created_senders):
            try:
                await sender(order)
                delivered += 1
            except Exception as e:
                logger.error(f"Order {order.id} created notification failed in {sender!r}: {e}")
        if not cls._order_created_senders:
            logger.debug(f"No notification senders registered for order {order.id}")
        return delivered
