"""
Custom exceptions for the storefront core.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the application. Every class carries the ErrorCode reported to callers.

Exception Hierarchy:
--------------------
StorefrontException (base)
├── UserException
│   ├── UnauthenticatedException
│   ├── UserUnresolvableException
│   ├── UserNotFoundException
│   └── AdminRequiredException
├── ProductException
│   ├── ProductNotFoundException
│   ├── ProductUnavailableException
│   ├── InvalidProductDataException
│   └── CatalogUnavailableException
├── CartException
│   ├── EmptyCartException
│   ├── CartItemNotFoundException
│   ├── InvalidQuantityException
│   ├── OutOfStockException
│   └── CartUpdateConflictException
└── OrderException
    ├── OrderNotFoundException
    ├── InsufficientStockException
    ├── InvalidOrderStateException
    ├── OrderCreationFailedException
    └── InvalidShippingInfoException

Usage:
------
Services raise specific exceptions:
    raise OrderNotFoundException(order_id)

Handlers turn them into ActionResult envelopes:
    @safe_service_call("cancel_order")
    async def cancel_order(...):
        ...
"""

from .base import StorefrontException
from .cart import (
    CartException,
    EmptyCartException,
    CartItemNotFoundException,
    InvalidQuantityException,
    OutOfStockException,
    CartUpdateConflictException
)
from .order import (
    OrderException,
    OrderNotFoundException,
    InsufficientStockException,
    InvalidOrderStateException,
    OrderCreationFailedException,
    InvalidShippingInfoException
)
from .product import (
    ProductException,
    ProductNotFoundException,
    ProductUnavailableException,
    InvalidProductDataException,
    CatalogUnavailableException
)
from .user import (
    UserException,
    UnauthenticatedException,
    UserUnresolvableException,
    UserNotFoundException,
    AdminRequiredException
)

__all__ = [
    # Base
    'StorefrontException',

    # Cart
    'CartException',
    'EmptyCartException',
    'CartItemNotFoundException',
    'InvalidQuantityException',
    'OutOfStockException',
    'CartUpdateConflictException',

    # Order
    'OrderException',
    'OrderNotFoundException',
    'InsufficientStockException',
    'InvalidOrderStateException',
    'OrderCreationFailedException',
    'InvalidShippingInfoException',

    # Product
    'ProductException',
    'ProductNotFoundException',
    'ProductUnavailableException',
    'InvalidProductDataException',
    'CatalogUnavailableException',

    # User
    'UserException',
    'UnauthenticatedException',
    'UserUnresolvableException',
    'UserNotFoundException',
    'AdminRequiredException',
]
