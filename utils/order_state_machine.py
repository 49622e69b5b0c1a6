"""
Order State Machine for validating order status transitions and maintaining consistency.

This module implements a finite state machine to ensure valid order status transitions
and provide audit logging for all status changes.
"""

import logging
from typing import Dict, List, Optional, Set

from enums.order_status import OrderStatus

logger = logging.getLogger(__name__)


class OrderStatusTransition:
    """Represents a valid status transition with metadata"""

    def __init__(self, from_status: OrderStatus, to_status: OrderStatus, owned_by_core: bool = False,
                 description: str = ""):
        self.from_status = from_status
        self.to_status = to_status
        self.owned_by_core = owned_by_core
        self.description = description

    def __repr__(self):
        owner = "" if self.owned_by_core else " (external)"
        return f"{self.from_status.value} -> {self.to_status.value}{owner}"


class OrderStateMachine:
    """
    Finite state machine for order status transitions with validation and audit logging.

    Valid status transitions:
    - PENDING -> CONFIRMED (payment confirmation, external: decrements stock and clears the cart)
    - CONFIRMED -> SHIPPED (fulfillment, external)
    - SHIPPED -> DELIVERED (fulfillment, external)
    - PENDING -> CANCELLED (customer initiated, performed here)

    Invalid transitions (will be rejected):
    - DELIVERED -> any status (final state)
    - CANCELLED -> any status (final state)
    """

    VALID_TRANSITIONS: List[OrderStatusTransition] = [
        OrderStatusTransition(
            OrderStatus.PENDING,
            OrderStatus.CONFIRMED,
            description="Payment received and confirmed"
        ),
        OrderStatusTransition(
            OrderStatus.CONFIRMED,
            OrderStatus.SHIPPED,
            description="Order handed to carrier"
        ),
        OrderStatusTransition(
            OrderStatus.SHIPPED,
            OrderStatus.DELIVERED,
            description="Order delivered to customer"
        ),
        OrderStatusTransition(
            OrderStatus.PENDING,
            OrderStatus.CANCELLED,
            owned_by_core=True,
            description="Order cancelled by customer"
        ),
    ]

    _transition_map: Dict[OrderStatus, Set[OrderStatus]] = {}
    _core_transitions: Set[tuple] = set()
    _transition_descriptions: Dict[tuple, str] = {}

    @classmethod
    def _build_transition_map(cls):
        """Build internal transition maps for performance"""
        if cls._transition_map:
            return

        for transition in cls.VALID_TRANSITIONS:
            cls._transition_map.setdefault(transition.from_status, set()).add(transition.to_status)
            if transition.owned_by_core:
                cls._core_transitions.add((transition.from_status, transition.to_status))
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
    def is_owned_by_core(cls, from_status: OrderStatus, to_status: OrderStatus) -> bool:
        """Whether this service performs the transition itself (as opposed to payment or fulfillment)."""
        cls._build_transition_map()
        return (from_status, to_status) in cls._core_transitions

    @classmethod
    def get_valid_transitions(cls, from_status: OrderStatus) -> List[OrderStatus]:
        cls._build_transition_map()
        return sorted(cls._transition_map.get(from_status, set()), key=lambda s: s.value)

    @classmethod
    def get_transition_description(cls, from_status: OrderStatus, to_status: OrderStatus) -> str:
        cls._build_transition_map()
        return cls._transition_descriptions.get(
            (from_status, to_status),
            f"Transition from {from_status.value} to {to_status.value}"
        )

    @classmethod
    def is_final_status(cls, status: OrderStatus) -> bool:
        cls._build_transition_map()
        return not cls._transition_map.get(status)

    @classmethod
    def validate_and_log_transition(cls, order_id: str, from_status: OrderStatus, to_status: OrderStatus,
                                    user_id: Optional[str] = None) -> bool:
        """
        Validate a status transition and create audit log entry.

        Returns:
            True if transition is valid and logged, False otherwise
        """
        if not cls.is_valid_transition(from_status, to_status):
            logger.error(f"Invalid status transition for order {order_id}: {from_status.value} -> {to_status.value}")
            return False

        transition_desc = cls.get_transition_description(from_status, to_status)
        performer = f"user {user_id}" if user_id else "system"
        logger.info(f"ORDER_STATUS_TRANSITION: Order {order_id} {from_status.value} -> {to_status.value} "
                    f"by {performer}: {transition_desc}")
        return True
