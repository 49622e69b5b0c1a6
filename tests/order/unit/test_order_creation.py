"""
Unit Tests: OrderService.create_order

Tests for services/order.py checkout covering:
- Cart validation (empty cart, unavailable product, insufficient stock)
- Price snapshot and total calculation
- Order number format
- Atomic and compensating placement modes, including failure cleanup
"""

import re
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select, func, update
from sqlalchemy.exc import SQLAlchemyError

import config
from enums.order_status import OrderStatus
from exceptions import (
    EmptyCartException,
    InsufficientStockException,
    OrderCreationFailedException,
    ProductUnavailableException,
)
from models.cartItem import CartItem
from models.order import Order, ShippingInfoDTO
from models.orderItem import OrderItem
from models.product import Product
from repositories.orderItem import OrderItemRepository
from services.cart import CartService
from services.order import OrderService

SHIPPING = ShippingInfoDTO(name="Jane Doe", address="1 Main Street, Springfield", phone="+1 555 0100")


async def count_rows(session, column) -> int:
    result = await session.execute(select(func.count(column)))
    return result.scalar_one()


@pytest.fixture(params=["atomic", "compensating"])
def placement_mode(request, monkeypatch):
    monkeypatch.setattr(config, "ORDER_PLACEMENT_MODE", request.param)
    return request.param


class TestCartValidation:

    @pytest.mark.asyncio
    async def test_empty_cart_rejected(self, test_session, user_factory, placement_mode):
        user_id = await user_factory()

        with pytest.raises(EmptyCartException):
            await OrderService.create_order(user_id, SHIPPING, test_session)

        assert await count_rows(test_session, Order.id) == 0

    @pytest.mark.asyncio
    async def test_inactive_product_rejected(self, test_session, user_factory, product_factory, placement_mode):
        user_id = await user_factory()
        product_id = await product_factory(name="Retired Mug")
        await CartService.add_item(user_id, product_id, 1, test_session)
        await test_session.execute(update(Product).where(Product.id == product_id).values(is_active=False))
        await test_session.commit()

        with pytest.raises(ProductUnavailableException) as exc_info:
            await OrderService.create_order(user_id, SHIPPING, test_session)

        assert "Retired Mug" in exc_info.value.message
        assert await count_rows(test_session, Order.id) == 0

    @pytest.mark.asyncio
    async def test_stock_dropped_below_cart_quantity(self, test_session, user_factory, product_factory,
                                                     placement_mode):
        user_id = await user_factory()
        product_id = await product_factory(name="Headphones", stock_quantity=10)
        await CartService.add_item(user_id, product_id, 5, test_session)
        await test_session.execute(update(Product).where(Product.id == product_id).values(stock_quantity=3))
        await test_session.commit()

        with pytest.raises(InsufficientStockException) as exc_info:
            await OrderService.create_order(user_id, SHIPPING, test_session)

        assert exc_info.value.available == 3
        assert exc_info.value.requested == 5
        assert "remaining stock: 3" in exc_info.value.message
        assert await count_rows(test_session, Order.id) == 0


class TestOrderPlacement:

    @pytest.mark.asyncio
    async def test_total_and_price_snapshot(self, test_session, user_factory, product_factory, placement_mode):
        user_id = await user_factory()
        keyboard = await product_factory(name="Keyboard", price=4999)
        cable = await product_factory(name="Cable", price=500)
        await CartService.add_item(user_id, keyboard, 1, test_session)
        await CartService.add_item(user_id, cable, 3, test_session)

        order = await OrderService.create_order(user_id, SHIPPING, test_session)

        assert order.total_amount == 4999 + 3 * 500
        assert order.status == OrderStatus.PENDING
        assert order.shipping_name == "Jane Doe"
        prices = {item.product_id: item.price for item in order.items}
        assert prices == {keyboard: 4999, cable: 500}
        assert {item.product_name for item in order.items} == {"Keyboard", "Cable"}

    @pytest.mark.asyncio
    async def test_later_price_change_does_not_touch_order(self, test_session, user_factory, product_factory,
                                                           placement_mode):
        user_id = await user_factory()
        product_id = await product_factory(price=1000)
        await CartService.add_item(user_id, product_id, 2, test_session)
        order = await OrderService.create_order(user_id, SHIPPING, test_session)

        await test_session.execute(update(Product).where(Product.id == product_id).values(price=9999))
        await test_session.commit()
        stored = await OrderService.get_order(user_id, order.id, test_session)

        assert stored.total_amount == 2000
        assert stored.items[0].price == 1000

    @pytest.mark.asyncio
    async def test_order_number_format(self, test_session, user_factory, product_factory, placement_mode):
        user_id = await user_factory()
        product_id = await product_factory()
        await CartService.add_item(user_id, product_id, 1, test_session)

        order = await OrderService.create_order(user_id, SHIPPING, test_session)

        assert re.fullmatch(r"ORDER-\d+-[0-9A-Z]{7}", order.order_number)

    @pytest.mark.asyncio
    async def test_stock_and_cart_untouched(self, test_session, user_factory, product_factory, placement_mode):
        user_id = await user_factory()
        product_id = await product_factory(stock_quantity=10)
        await CartService.add_item(user_id, product_id, 4, test_session)

        await OrderService.create_order(user_id, SHIPPING, test_session)

        product = await test_session.execute(select(Product.stock_quantity).where(Product.id == product_id))
        assert product.scalar_one() == 10
        assert await count_rows(test_session, CartItem.id) == 1

    @pytest.mark.asyncio
    async def test_order_note_is_trimmed(self, test_session, user_factory, product_factory, placement_mode):
        user_id = await user_factory()
        product_id = await product_factory()
        await CartService.add_item(user_id, product_id, 1, test_session)

        order = await OrderService.create_order(user_id, SHIPPING, test_session, order_note="  ring twice ")

        assert order.order_note == "ring twice"

    @pytest.mark.asyncio
    async def test_blank_order_note_stored_as_none(self, test_session, user_factory, product_factory):
        user_id = await user_factory()
        product_id = await product_factory()
        await CartService.add_item(user_id, product_id, 1, test_session)

        order = await OrderService.create_order(user_id, SHIPPING, test_session, order_note="   ")

        assert order.order_note is None


class TestPlacementFailures:

    @pytest.mark.asyncio
    async def test_item_insert_failure_leaves_no_order(self, test_session, user_factory, product_factory,
                                                       placement_mode):
        user_id = await user_factory()
        product_id = await product_factory()
        await CartService.add_item(user_id, product_id, 1, test_session)

        with patch.object(OrderItemRepository, "create_many",
                          AsyncMock(side_effect=SQLAlchemyError("disk I/O error"))):
            with pytest.raises(OrderCreationFailedException) as exc_info:
                await OrderService.create_order(user_id, SHIPPING, test_session)

        assert exc_info.value.stage == "order_items"
        assert await count_rows(test_session, Order.id) == 0
        assert await count_rows(test_session, OrderItem.id) == 0

    @pytest.mark.asyncio
    async def test_failed_compensating_delete_is_logged(self, test_session, user_factory, product_factory,
                                                        monkeypatch, caplog):
        monkeypatch.setattr(config, "ORDER_PLACEMENT_MODE", "compensating")
        user_id = await user_factory()
        product_id = await product_factory()
        await CartService.add_item(user_id, product_id, 1, test_session)

        with patch.object(OrderItemRepository, "create_many",
                          AsyncMock(side_effect=SQLAlchemyError("disk I/O error"))), \
                patch("services.order.OrderRepository.delete",
                      AsyncMock(side_effect=SQLAlchemyError("database is locked"))):
            with pytest.raises(OrderCreationFailedException):
                await OrderService.create_order(user_id, SHIPPING, test_session)

        assert any(record.levelname == "CRITICAL" for record in caplog.records)
        assert await count_rows(test_session, Order.id) == 1
