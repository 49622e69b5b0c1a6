import logging
import secrets
import string
import time

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import session_commit, session_rollback
from enums.order_status import OrderStatus
from exceptions import (
    EmptyCartException,
    InsufficientStockException,
    InvalidOrderStateException,
    OrderCreationFailedException,
    OrderNotFoundException,
    ProductUnavailableException,
)
from models.cartItem import CartLineDTO
from models.order import OrderDTO, OrderWithItemsDTO, ShippingInfoDTO
from models.orderItem import OrderItemDTO
from models.product import ProductDTO
from repositories.order import OrderRepository
from repositories.orderItem import OrderItemRepository
from repositories.product import ProductRepository
from services.cart import CartService
from utils.error_handler import safe_error_message
from utils.order_state_machine import OrderStateMachine
from utils.transaction_manager import TransactionManager

ORDER_NUMBER_ALPHABET = string.digits + string.ascii_uppercase


class OrderService:

    @staticmethod
    def generate_order_number() -> str:
        """ORDER-<epoch ms>-<random base36 suffix>, unique enforced by the database."""
        suffix = ''.join(secrets.choice(ORDER_NUMBER_ALPHABET) for _ in range(config.ORDER_NUMBER_SUFFIX_LENGTH))
        return f"{config.ORDER_NUMBER_PREFIX}-{int(time.time() * 1000)}-{suffix}"

    @staticmethod
    def _validate_lines(lines: list[CartLineDTO],
                        products: dict[str, ProductDTO]) -> tuple[int, list[OrderItemDTO]]:
        """
        Check every cart line against the observed product rows, in cart order.

        Returns the order total and the line items carrying the observed unit price.
        The first failing line aborts the checkout.
        """
        total = 0
        items = []
        for line in lines:
            product = products.get(line.product_id)
            if product is None or not product.is_active:
                raise ProductUnavailableException(line.product_id, product.name if product else line.product.name)
            if line.quantity > product.stock_quantity:
                raise InsufficientStockException(product.id, product.name, line.quantity, product.stock_quantity)
            total += product.price * line.quantity
            items.append(OrderItemDTO(
                product_id=product.id,
                quantity=line.quantity,
                price=product.price,
                product_name=product.name,
            ))
        return total, items

    @staticmethod
    def _build_order(user_id: str, total: int, shipping: ShippingInfoDTO, order_note: str | None) -> OrderDTO:
        note = order_note.strip() if order_note else None
        return OrderDTO(
            user_id=user_id,
            order_number=OrderService.generate_order_number(),
            total_amount=total,
            status=OrderStatus.PENDING,
            shipping_name=shipping.name,
            shipping_address=shipping.address,
            shipping_phone=shipping.phone,
            order_note=note or None,
        )

    @staticmethod
    def _with_items(order: OrderDTO, items: list[OrderItemDTO], names: dict[str, str]) -> OrderWithItemsDTO:
        for item in items:
            item.product_name = names.get(item.product_id)
        return OrderWithItemsDTO(**order.model_dump(), items=items)

    @staticmethod
    async def create_order(user_id: str, shipping: ShippingInfoDTO, session: AsyncSession,
                           order_note: str | None = None) -> OrderWithItemsDTO:
        """
        Place a pending order from the user's cart.

        Stock is only checked here, not decremented, and the cart is left as is;
        both happen when payment confirms the order.
        """
        lines = await CartService.list_items(user_id, session)
        if not lines:
            raise EmptyCartException(user_id)

        if config.ORDER_PLACEMENT_MODE == "compensating":
            return await OrderService._create_compensating(user_id, lines, shipping, order_note, session)
        return await OrderService._create_atomic(user_id, lines, shipping, order_note, session)

    @staticmethod
    async def _create_atomic(user_id: str, lines: list[CartLineDTO], shipping: ShippingInfoDTO,
                             order_note: str | None, session: AsyncSession) -> OrderWithItemsDTO:
        stage = "validation"
        try:
            async with TransactionManager.atomic_transaction(session):
                products = await ProductRepository.get_by_ids_for_update(
                    [line.product_id for line in lines], session
                )
                total, item_dtos = OrderService._validate_lines(lines, products)

                stage = "order"
                order = await OrderRepository.create(
                    OrderService._build_order(user_id, total, shipping, order_note), session
                )

                stage = "order_items"
                for item in item_dtos:
                    item.order_id = order.id
                items = await OrderItemRepository.create_many(item_dtos, session)
        except SQLAlchemyError as e:
            logging.error(f"❌ Order creation failed for user {user_id} at stage {stage}: {type(e).__name__}")
            raise OrderCreationFailedException(stage, safe_error_message(e))

        logging.info(f"✅ Order {order.order_number} created for user {user_id} "
                     f"({len(items)} items, total {total})")
        return OrderService._with_items(order, items, {p.id: p.name for p in products.values()})

    @staticmethod
    async def _create_compensating(user_id: str, lines: list[CartLineDTO], shipping: ShippingInfoDTO,
                                   order_note: str | None, session: AsyncSession) -> OrderWithItemsDTO:
        """
        Two-step placement for stores without multi-table transactions: the order row
        is committed first and deleted again if its line items cannot be written.
        """
        products = {line.product_id: line.product for line in lines}
        total, item_dtos = OrderService._validate_lines(lines, products)

        try:
            order = await OrderRepository.create(
                OrderService._build_order(user_id, total, shipping, order_note), session
            )
            await session_commit(session)
        except SQLAlchemyError as e:
            await session_rollback(session)
            logging.error(f"❌ Order row insert failed for user {user_id}: {type(e).__name__}")
            raise OrderCreationFailedException("order", safe_error_message(e))

        try:
            for item in item_dtos:
                item.order_id = order.id
            items = await OrderItemRepository.create_many(item_dtos, session)
            await session_commit(session)
        except SQLAlchemyError as e:
            await session_rollback(session)
            logging.error(f"❌ Order items insert failed for order {order.order_number}, "
                          f"deleting order: {type(e).__name__}")
            await OrderService._delete_failed_order(order.id, session)
            raise OrderCreationFailedException("order_items", safe_error_message(e))

        logging.info(f"✅ Order {order.order_number} created for user {user_id} "
                     f"({len(items)} items, total {total})")
        return OrderService._with_items(order, items, {p.id: p.name for p in products.values()})

    @staticmethod
    async def _delete_failed_order(order_id: str, session: AsyncSession) -> None:
        try:
            await OrderRepository.delete(order_id, session)
            await session_commit(session)
            logging.info(f"Compensating delete of order {order_id} done")
        except SQLAlchemyError as e:
            await session_rollback(session)
            logging.critical(f"Compensating delete of order {order_id} failed, orphan order row left: "
                             f"{type(e).__name__}")

    @staticmethod
    def _cancel_refusal_reason(status: OrderStatus | None) -> str:
        if status == OrderStatus.CANCELLED:
            return "already cancelled"
        return "already processing"

    @staticmethod
    async def cancel_order(user_id: str, order_id: str, session: AsyncSession) -> OrderDTO:
        order = await OrderRepository.get_by_id_for_user(order_id, user_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)
        if not OrderStateMachine.is_valid_transition(order.status, OrderStatus.CANCELLED):
            raise InvalidOrderStateException(
                order_id, order.status.value, OrderStatus.PENDING.value,
                reason=OrderService._cancel_refusal_reason(order.status), action="cancelled"
            )

        updated = await OrderRepository.update_status_if(
            order_id, user_id, OrderStatus.PENDING, OrderStatus.CANCELLED, session
        )
        if updated == 0:
            # A concurrent transition moved the order first
            await session_rollback(session)
            current = await OrderRepository.get_by_id_for_user(order_id, user_id, session)
            current_status = current.status if current else None
            raise InvalidOrderStateException(
                order_id, current_status.value if current_status else "unknown", OrderStatus.PENDING.value,
                reason=OrderService._cancel_refusal_reason(current_status), action="cancelled"
            )
        await session_commit(session)
        OrderStateMachine.validate_and_log_transition(order_id, order.status, OrderStatus.CANCELLED, user_id=user_id)
        return await OrderRepository.get_by_id_for_user(order_id, user_id, session)

    @staticmethod
    async def get_order(user_id: str, order_id: str, session: AsyncSession) -> OrderWithItemsDTO:
        order = await OrderRepository.get_by_id_for_user(order_id, user_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)
        items = await OrderItemRepository.get_by_order_id(order_id, session)
        return OrderWithItemsDTO(**order.model_dump(), items=items)

    @staticmethod
    async def list_orders(user_id: str, session: AsyncSession) -> list[OrderDTO]:
        return await OrderRepository.get_by_user_id(user_id, session)
