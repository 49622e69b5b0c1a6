"""
Order-related exceptions.
"""

from enums.error_code import ErrorCode
from .base import StorefrontException


class OrderException(StorefrontException):
    """Base exception for order-related errors."""
    pass


class OrderNotFoundException(OrderException):
    """Raised when order is not found or belongs to another user."""

    error_code = ErrorCode.NOT_FOUND

    def __init__(self, order_id: str):
        super().__init__(
            f"Order {order_id} not found",
            details={'order_id': order_id}
        )
        self.order_id = order_id


class InsufficientStockException(OrderException):
    """Raised when a cart line asks for more than the live stock at checkout."""

    error_code = ErrorCode.INSUFFICIENT_STOCK

    def __init__(self, product_id: str, product_name: str, requested: int, available: int):
        super().__init__(
            f'Insufficient stock for "{product_name}" (remaining stock: {available})',
            details={
                'product_id': product_id,
                'product_name': product_name,
                'requested': requested,
                'available': available,
            }
        )
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available


class InvalidOrderStateException(OrderException):
    """Raised when order is in invalid state for requested operation."""

    error_code = ErrorCode.INVALID_TRANSITION

    def __init__(self, order_id: str, current_state: str, required_state: str, reason: str | None = None,
                 action: str = "changed"):
        message = f"Order {order_id} cannot be {action}"
        if reason:
            message += f" ({reason})"
        super().__init__(
            message,
            details={'order_id': order_id, 'current_state': current_state, 'required_state': required_state}
        )
        self.order_id = order_id
        self.current_state = current_state
        self.required_state = required_state
        self.reason = reason


class OrderCreationFailedException(OrderException):
    """Raised when the order or its line items could not be written."""

    error_code = ErrorCode.ORDER_CREATION_FAILED

    def __init__(self, stage: str, reason: str):
        super().__init__(
            f"Failed to create order ({stage}): {reason}",
            details={'stage': stage}
        )
        self.stage = stage
        self.reason = reason


class InvalidShippingInfoException(OrderException):
    """Raised when shipping name, address or phone is missing."""

    error_code = ErrorCode.INVALID_SHIPPING_INFO

    def __init__(self, field: str):
        super().__init__(
            f"Shipping {field} is required",
            details={'field': field}
        )
        self.field = field
