"""
Tests for Error Handler Utility

Tests the centralized error handling system that converts
custom exceptions to ActionResult error envelopes.
"""

import pytest
from sqlalchemy.exc import OperationalError

from enums.error_code import ErrorCode
from exceptions import (
    AdminRequiredException,
    EmptyCartException,
    InsufficientStockException,
    InvalidOrderStateException,
    OrderNotFoundException,
    OutOfStockException,
    UnauthenticatedException,
)
from utils.error_handler import (
    GENERIC_ERROR_MESSAGE,
    ActionResult,
    handle_service_error,
    handle_unexpected_error,
    safe_error_message,
    safe_service_call,
)


class TestErrorHandler:
    """Test error handling utility"""

    def test_order_not_found_exception(self):
        result = handle_service_error(OrderNotFoundException(order_id="abc"))

        assert not result.success
        assert result.error_code == ErrorCode.NOT_FOUND
        assert result.details == {'order_id': "abc"}
        assert result.http_status == 404

    def test_invalid_order_state_exception_message(self):
        exc = InvalidOrderStateException(
            order_id="abc",
            current_state="cancelled",
            required_state="pending",
            reason="already cancelled",
            action="cancelled",
        )
        result = handle_service_error(exc)

        assert result.error == "Order abc cannot be cancelled (already cancelled)"
        assert result.error_code == ErrorCode.INVALID_TRANSITION
        assert result.http_status == 409

    def test_insufficient_stock_keeps_product_name(self):
        """Product names containing words like 'key' must not be blanked."""
        exc = InsufficientStockException("p1", "Mechanical Keyboard", requested=3, available=1)
        result = handle_service_error(exc)

        assert result.error == 'Insufficient stock for "Mechanical Keyboard" (remaining stock: 1)'

    def test_out_of_stock_message_with_cart_quantity(self):
        result = handle_service_error(OutOfStockException("p1", "Mug", available=5, requested=2, in_cart=4))

        assert result.error_code == ErrorCode.OUT_OF_STOCK
        assert "Only 5" in result.error
        assert "4 already in cart" in result.error

    @pytest.mark.parametrize("exception, status", [
        (UnauthenticatedException(), 401),
        (AdminRequiredException("sub_1"), 403),
        (EmptyCartException("u1"), 400),
    ])
    def test_http_status_mapping(self, exception, status):
        assert handle_service_error(exception).http_status == status

    def test_unexpected_error_hides_details(self):
        result = handle_unexpected_error(RuntimeError("connection to 10.0.0.1 refused"), "list_cart")

        assert result.error_code == ErrorCode.INTERNAL
        assert result.error == GENERIC_ERROR_MESSAGE
        assert result.http_status == 500


class TestSafeErrorMessage:

    def test_plain_storage_message_passes_through(self):
        error = OperationalError("INSERT", {}, Exception("database is locked"))

        assert "database is locked" in safe_error_message(error)

    @pytest.mark.parametrize("message", [
        "password authentication failed for user shop",
        "invalid api_key supplied",
        "Authorization header rejected",
    ])
    def test_sensitive_messages_replaced(self, message):
        assert safe_error_message(message) == GENERIC_ERROR_MESSAGE

    def test_empty_message_replaced(self):
        assert safe_error_message(None) == GENERIC_ERROR_MESSAGE
        assert safe_error_message("") == GENERIC_ERROR_MESSAGE


class TestSafeServiceCall:

    @pytest.mark.asyncio
    async def test_success_wraps_payload(self):
        @safe_service_call("double")
        async def double(value):
            return value * 2

        result = await double(21)

        assert result == ActionResult(success=True, data=42)
        assert result.http_status == 200

    @pytest.mark.asyncio
    async def test_service_exception_becomes_error_result(self):
        @safe_service_call("checkout")
        async def checkout():
            raise EmptyCartException("u1")

        result = await checkout()

        assert result.error_code == ErrorCode.EMPTY_CART
        assert result.error == "Cart is empty"

    @pytest.mark.asyncio
    async def test_unexpected_exception_never_propagates(self):
        @safe_service_call("explode")
        async def explode():
            raise KeyError("boom")

        result = await explode()

        assert result.error_code == ErrorCode.INTERNAL
