"""
Cart-related exceptions.
"""

from enums.error_code import ErrorCode
from .base import StorefrontException


class CartException(StorefrontException):
    """Base exception for cart-related errors."""
    pass


class EmptyCartException(CartException):
    """Raised when trying to checkout with empty cart."""

    error_code = ErrorCode.EMPTY_CART

    def __init__(self, user_id: str):
        super().__init__(
            "Cart is empty",
            details={'user_id': user_id}
        )
        self.user_id = user_id


class CartItemNotFoundException(CartException):
    """Raised when cart item not found or owned by another user."""

    error_code = ErrorCode.NOT_FOUND

    def __init__(self, cart_item_id: str):
        super().__init__(
            f"Cart item {cart_item_id} not found",
            details={'cart_item_id': cart_item_id}
        )
        self.cart_item_id = cart_item_id


class InvalidQuantityException(CartException):
    """Raised when a requested quantity is below one."""

    error_code = ErrorCode.INVALID_QUANTITY

    def __init__(self, quantity: int):
        super().__init__(
            "Quantity must be at least 1",
            details={'field': 'quantity', 'requested': quantity}
        )
        self.quantity = quantity


class OutOfStockException(CartException):
    """Raised when a cart line would exceed the product's stock."""

    error_code = ErrorCode.OUT_OF_STOCK

    def __init__(self, product_id: str, product_name: str, available: int, requested: int, in_cart: int = 0):
        message = f'Only {available} of "{product_name}" available'
        if in_cart:
            message += f" ({in_cart} already in cart)"
        super().__init__(
            message,
            details={
                'product_id': product_id,
                'product_name': product_name,
                'available': available,
                'requested': requested,
                'in_cart': in_cart,
            }
        )
        self.product_id = product_id
        self.product_name = product_name
        self.available = available
        self.requested = requested
        self.in_cart = in_cart


class CartUpdateConflictException(CartException):
    """Raised when concurrent changes to the same cart line keep an add from applying."""

    def __init__(self, product_id: str):
        super().__init__(
            "Cart changed while adding the item, please try again",
            details={'product_id': product_id}
        )
        self.product_id = product_id
