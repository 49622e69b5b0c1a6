import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit, session_rollback
from exceptions import (
    CartItemNotFoundException,
    CartUpdateConflictException,
    InvalidQuantityException,
    OutOfStockException,
    ProductUnavailableException,
)
from models.cartItem import CartItemDTO, CartLineDTO, CartSummaryDTO
from models.product import ProductDTO
from repositories.cartItem import CartItemRepository
from repositories.product import ProductRepository

ADD_ITEM_ATTEMPTS = 3


class CartService:

    @staticmethod
    async def _get_purchasable_product(product_id: str, session: AsyncSession) -> ProductDTO:
        product = await ProductRepository.get_by_id(product_id, session)
        if product is None or not product.is_active:
            raise ProductUnavailableException(product_id, product.name if product else None)
        return product

    @staticmethod
    async def _raise_out_of_stock_unless_line_gone(user_id: str, product_id: str, quantity: int,
                                                   session: AsyncSession) -> None:
        """
        Explain an increment that updated no rows. Returns normally only when the
        line was removed in between and the stock covers a fresh insert.
        """
        # Re-read both rows: the conditional update only tells us that it did not apply
        product = await CartService._get_purchasable_product(product_id, session)
        line = await CartItemRepository.get_line(user_id, product_id, session)
        if line is None and quantity <= product.stock_quantity:
            return
        in_cart = line.quantity if line else 0
        raise OutOfStockException(product.id, product.name, product.stock_quantity, quantity, in_cart)

    @staticmethod
    async def add_item(user_id: str, product_id: str, quantity: int, session: AsyncSession) -> CartItemDTO:
        """
        Add quantity of a product to the user's cart.

        The first add inserts a line, repeat adds increment it with a single
        conditional UPDATE guarded by the live stock, so concurrent adds can
        neither create a second line nor lose an increment. A line removed
        between the read and the increment is inserted again.
        """
        if quantity is None or quantity < 1:
            raise InvalidQuantityException(quantity)

        for attempt in range(ADD_ITEM_ATTEMPTS):
            product = await CartService._get_purchasable_product(product_id, session)
            existing = await CartItemRepository.get_line(user_id, product_id, session)
            if existing is None:
                if quantity > product.stock_quantity:
                    raise OutOfStockException(product.id, product.name, product.stock_quantity, quantity)
                try:
                    await CartItemRepository.create(
                        CartItemDTO(user_id=user_id, product_id=product_id, quantity=quantity), session
                    )
                    await session_commit(session)
                    logging.info(f"Cart line added: user {user_id}, product {product_id}, quantity {quantity}")
                    return await CartItemRepository.get_line(user_id, product_id, session)
                except IntegrityError:
                    # Another request created the line first, fall through to the increment
                    await session_rollback(session)
                    logging.info(f"Cart line for product {product_id} created concurrently, incrementing instead")

            updated = await CartItemRepository.increment_within_stock(user_id, product_id, quantity, session)
            if updated:
                await session_commit(session)
                logging.info(f"Cart line incremented: user {user_id}, product {product_id}, +{quantity}")
                return await CartItemRepository.get_line(user_id, product_id, session)

            await session_rollback(session)
            await CartService._raise_out_of_stock_unless_line_gone(user_id, product_id, quantity, session)
            logging.info(f"Cart line for product {product_id} removed concurrently, retrying insert "
                         f"(attempt {attempt + 1})")

        raise CartUpdateConflictException(product_id)

    @staticmethod
    async def set_quantity(user_id: str, cart_item_id: str, quantity: int, session: AsyncSession) -> CartItemDTO:
        if quantity is None or quantity < 1:
            raise InvalidQuantityException(quantity)
        cart_item = await CartItemRepository.get_by_id(cart_item_id, session)
        if cart_item is None or cart_item.user_id != user_id:
            raise CartItemNotFoundException(cart_item_id)
        product = await CartService._get_purchasable_product(cart_item.product_id, session)
        if quantity > product.stock_quantity:
            raise OutOfStockException(product.id, product.name, product.stock_quantity, quantity)

        updated = await CartItemRepository.set_quantity_within_stock(
            cart_item_id, user_id, cart_item.product_id, quantity, session
        )
        if updated == 0:
            await session_rollback(session)
            product = await CartService._get_purchasable_product(cart_item.product_id, session)
            raise OutOfStockException(product.id, product.name, product.stock_quantity, quantity)
        await session_commit(session)
        return await CartItemRepository.get_by_id(cart_item_id, session)

    @staticmethod
    async def remove_item(user_id: str, cart_item_id: str, session: AsyncSession) -> None:
        removed = await CartItemRepository.remove(cart_item_id, user_id, session)
        await session_commit(session)
        if removed:
            logging.info(f"Cart line {cart_item_id} removed for user {user_id}")

    @staticmethod
    async def list_items(user_id: str, session: AsyncSession) -> list[CartLineDTO]:
        return await CartItemRepository.get_lines(user_id, session)

    @staticmethod
    async def get_summary(user_id: str, session: AsyncSession) -> CartSummaryDTO:
        lines = await CartService.list_items(user_id, session)
        return CartSummaryDTO(
            total_items=len(lines),
            total_quantity=sum(line.quantity for line in lines),
            total_amount=sum(line.line_total for line in lines),
        )
