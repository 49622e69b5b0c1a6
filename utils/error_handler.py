"""
Error Handler Utility for storefront actions

Provides centralized error handling for the public operation surface with:
- A uniform ActionResult success/error envelope
- Automatic exception to error-code mapping
- Sanitised storage error messages
- Logging for debugging

Usage in handlers:
    from utils.error_handler import safe_service_call

    @safe_service_call("cancel_order")
    async def cancel_order(identity, order_id, session):
        await OrderService.cancel_order(user_id, order_id, session)
"""

import logging
import re
from functools import wraps
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from enums.error_code import ErrorCode
from exceptions import StorefrontException

T = TypeVar("T")

GENERIC_ERROR_MESSAGE = "An unknown error occurred"

SENSITIVE_PATTERNS = [
    re.compile(r'password', re.IGNORECASE),
    re.compile(r'secret', re.IGNORECASE),
    re.compile(r'key', re.IGNORECASE),
    re.compile(r'token', re.IGNORECASE),
    re.compile(r'api[_-]?key', re.IGNORECASE),
    re.compile(r'bearer', re.IGNORECASE),
    re.compile(r'authorization', re.IGNORECASE),
]

HTTP_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.UNAUTHENTICATED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.INVALID_QUANTITY: 400,
    ErrorCode.INVALID_SHIPPING_INFO: 400,
    ErrorCode.INVALID_PRODUCT_DATA: 400,
    ErrorCode.EMPTY_CART: 400,
    ErrorCode.PRODUCT_UNAVAILABLE: 409,
    ErrorCode.OUT_OF_STOCK: 409,
    ErrorCode.INSUFFICIENT_STOCK: 409,
    ErrorCode.INVALID_TRANSITION: 409,
    ErrorCode.ORDER_CREATION_FAILED: 500,
    ErrorCode.INTERNAL: 500,
    ErrorCode.UNRESOLVABLE: 503,
    ErrorCode.CATALOG_UNAVAILABLE: 503,
}


class ActionResult(BaseModel, Generic[T]):
    """Discriminated success/error envelope returned by every public operation."""
    success: bool
    data: T | None = None
    error_code: ErrorCode | None = None
    error: str | None = None
    details: dict[str, Any] = {}

    @classmethod
    def ok(cls, data: Any = None) -> "ActionResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error_code: ErrorCode, error: str, details: dict | None = None) -> "ActionResult":
        return cls(success=False, error_code=error_code, error=error, details=details or {})

    @property
    def http_status(self) -> int:
        if self.success:
            return 200
        return HTTP_STATUS_BY_CODE.get(self.error_code, 500)


def contains_sensitive_info(text: str) -> bool:
    return any(pattern.search(text) for pattern in SENSITIVE_PATTERNS)


def safe_error_message(error: BaseException | str | None) -> str:
    """
    Return the error text unless it looks like it carries credentials.

    Storage driver errors are passed through to callers, so anything mentioning
    passwords, keys, tokens or authorization headers is replaced by a generic message.
    """
    if error is None:
        return GENERIC_ERROR_MESSAGE
    message = str(error)
    if not message or contains_sensitive_info(message):
        return GENERIC_ERROR_MESSAGE
    return message


def handle_service_error(exception: StorefrontException) -> ActionResult:
    """
    Convert service exception to an error envelope.

    Example:
        try:
            order = await OrderService.get_order(user_id, order_id, session)
        except OrderNotFoundException as e:
            return handle_service_error(e)
    """
    logging.warning(f"Service error handled: {type(exception).__name__} - {exception.error_code.value}")
    return ActionResult.fail(exception.error_code, exception.message, exception.details)


def handle_unexpected_error(exception: Exception, operation: str) -> ActionResult:
    """
    Handle unexpected exceptions (non-StorefrontException).

    Note:
        Logs the full exception for debugging, the caller only sees a generic message
    """
    logging.error(f"Unexpected error in {operation}: {type(exception).__name__} - {str(exception)}", exc_info=True)
    return ActionResult.fail(ErrorCode.INTERNAL, GENERIC_ERROR_MESSAGE)


def safe_service_call(operation: str):
    """
    Decorator for handlers to automatically catch service exceptions.

    The wrapped coroutine returns the payload of a successful call, the wrapper
    returns an ActionResult in every case and never raises.

    Usage:
        @safe_service_call("list_orders")
        async def list_orders(identity, session):
            return await OrderService.list_orders(user_id, session)
    """
    def decorator(handler_func):
        @wraps(handler_func)
        async def wrapper(*args, **kwargs) -> ActionResult:
            try:
                data = await handler_func(*args, **kwargs)
                return ActionResult.ok(data)
            except StorefrontException as e:
                return handle_service_error(e)
            except Exception as e:
                return handle_unexpected_error(e, operation)

        return wrapper
    return decorator
