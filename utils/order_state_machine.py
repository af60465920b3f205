"""
Order State Machine for validating order status transitions and maintaining consistency.

This module implements a finite state machine to ensure valid order status
transitions. Every accepted transition is persisted in the history log by
services/order.py; this module only decides and logs.
"""

import logging
from typing import Dict, List, Set

from enums.order_status import OrderStatus
from exceptions.order import InvalidTransitionException

logger = logging.getLogger(__name__)


class OrderStatusTransition:
    """Represents a valid status transition with metadata"""

    def __init__(self, from_status: OrderStatus, to_status: OrderStatus, description: str = ""):
        self.from_status = from_status
        self.to_status = to_status
        self.description = description

    def __repr__(self):
        return f"{self.from_status.value} -> {self.to_status.value}"


class OrderStateMachine:
    """
    Finite state machine for order status transitions.

    Valid status transitions:
    - PENDING -> PROCESSING
    - PENDING -> CANCELLED
    - PROCESSING -> SHIPPED
    - PROCESSING -> CANCELLED
    - SHIPPED -> COMPLETED

    Invalid transitions (will be rejected):
    - COMPLETED -> any status (final state)
    - CANCELLED -> any status (final state)
    - any status -> the same status
    """

    VALID_TRANSITIONS: List[OrderStatusTransition] = [
        # From PENDING
        OrderStatusTransition(
            OrderStatus.PENDING,
            OrderStatus.PROCESSING,
            description="Order accepted for processing"
        ),
        OrderStatusTransition(
            OrderStatus.PENDING,
            OrderStatus.CANCELLED,
            description="Order cancelled before processing"
        ),

        # From PROCESSING
        OrderStatusTransition(
            OrderStatus.PROCESSING,
            OrderStatus.SHIPPED,
            description="Order shipped"
        ),
        OrderStatusTransition(
            OrderStatus.PROCESSING,
            OrderStatus.CANCELLED,
            description="Order cancelled during processing"
        ),

        # From SHIPPED
        OrderStatusTransition(
            OrderStatus.SHIPPED,
            OrderStatus.COMPLETED,
            description="Order delivered"
        ),
    ]

    # Statuses in which line items and customer details may still change
    MUTABLE_STATUSES: Set[OrderStatus] = {OrderStatus.PENDING, OrderStatus.PROCESSING}

    # Build transition map for fast lookup
    _transition_map: Dict[OrderStatus, Set[OrderStatus]] = {}
    _transition_descriptions: Dict[tuple, str] = {}

    @classmethod
    def _build_transition_map(cls):
        """Build internal transition maps"""
        if cls._transition_map:
            return  # Already built

        for transition in cls.VALID_TRANSITIONS:
            cls._transition_map.setdefault(transition.from_status, set()).add(transition.to_status)
            cls._transition_descriptions[(transition.from_status, transition.to_status)] = transition.description

    @classmethod
    def is_valid_transition(cls, from_status: OrderStatus, to_status: OrderStatus) -> bool:
        """
        Check if a status transition is valid according to the state machine.

        Staying in the same status is not a transition and is rejected.
        """
        cls._build_transition_map()
        return to_status in cls._transition_map.get(from_status, set())

    @classmethod
    def get_valid_transitions(cls, from_status: OrderStatus) -> List[OrderStatus]:
        """Get all valid next statuses from the current status, in declaration order."""
        cls._build_transition_map()
        destinations = cls._transition_map.get(from_status, set())
        return [status for status in OrderStatus if status in destinations]

    @classmethod
    def get_transition_description(cls, from_status: OrderStatus, to_status: OrderStatus) -> str:
        cls._build_transition_map()
        return cls._transition_descriptions.get(
            (from_status, to_status),
            f"Transition from {from_status.value} to {to_status.value}"
        )

    @classmethod
    def is_final_status(cls, status: OrderStatus) -> bool:
        """Check if a status is final (no transitions allowed from it)."""
        cls._build_transition_map()
        return not cls._transition_map.get(status)

    @classmethod
    def allows_modification(cls, status: OrderStatus) -> bool:
        """Check if line items / customer details may still be changed in this status."""
        return status in cls.MUTABLE_STATUSES

    @classmethod
    def validate_transition(cls, order_id: int, from_status: OrderStatus, to_status: OrderStatus,
                            admin_id: int | None = None) -> None:
        """
        Validate a status transition and log it.

        Raises:
            InvalidTransitionException: If the transition is not allowed
        """
        if not cls.is_valid_transition(from_status, to_status):
            logger.error(
                f"Invalid status transition for order {order_id}: {from_status.value} -> {to_status.value}"
            )
            raise InvalidTransitionException(order_id, from_status.value, to_status.value)

        transition_desc = cls.get_transition_description(from_status, to_status)
        performer = f"admin {admin_id}" if admin_id is not None else "system"
        logger.info(
            f"ORDER_STATUS_TRANSITION: Order {order_id} {from_status.value} -> {to_status.value} "
            f"by {performer}: {transition_desc}"
        )
