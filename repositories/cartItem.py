import logging
from datetime import datetime

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.cartItem import CartItem, CartItemDTO, CartLineDTO
from models.product import Product, ProductDTO


class CartItemRepository:
    @staticmethod
    async def get_by_id(cart_item_id: str, session: AsyncSession) -> CartItemDTO | None:
        stmt = select(CartItem).where(CartItem.id == cart_item_id).execution_options(populate_existing=True)
        cart_item = await session_execute(stmt, session)
        cart_item = cart_item.scalar()
        if cart_item is not None:
            return CartItemDTO.model_validate(cart_item, from_attributes=True)
        return None

    @staticmethod
    async def get_line(user_id: str, product_id: str, session: AsyncSession) -> CartItemDTO | None:
        stmt = select(CartItem).where(CartItem.user_id == user_id, CartItem.product_id == product_id).execution_options(populate_existing=True)
        cart_item = await session_execute(stmt, session)
        cart_item = cart_item.scalar()
        if cart_item is not None:
            return CartItemDTO.model_validate(cart_item, from_attributes=True)
        return None

    @staticmethod
    async def create(cart_item_dto: CartItemDTO, session: AsyncSession) -> str:
        cart_item = CartItem(**cart_item_dto.model_dump(exclude_none=True))
        session.add(cart_item)
        await session_flush(session)
        return cart_item.id

    @staticmethod
    async def increment_within_stock(user_id: str, product_id: str, quantity: int, session: AsyncSession) -> int:
        """
        Atomically adds quantity to an existing line unless the result would exceed
        the stock of the (active) product. Returns the number of updated rows.
        """
        stock = (select(Product.stock_quantity)
                 .where(Product.id == product_id, Product.is_active == True)
                 .scalar_subquery())
        stmt = (update(CartItem)
                .where(CartItem.user_id == user_id,
                       CartItem.product_id == product_id,
                       CartItem.quantity + quantity <= stock)
                .execution_options(synchronize_session=False)
                .values(quantity=CartItem.quantity + quantity, updated_at=datetime.now()))
        result = await session_execute(stmt, session)
        return result.rowcount

    @staticmethod
    async def set_quantity_within_stock(cart_item_id: str, user_id: str, product_id: str, quantity: int,
                                        session: AsyncSession) -> int:
        stock = (select(Product.stock_quantity)
                 .where(Product.id == product_id, Product.is_active == True)
                 .scalar_subquery())
        stmt = (update(CartItem)
                .where(CartItem.id == cart_item_id,
                       CartItem.user_id == user_id,
                       stock >= quantity)
                .execution_options(synchronize_session=False)
                .values(quantity=quantity, updated_at=datetime.now()))
        result = await session_execute(stmt, session)
        return result.rowcount

    @staticmethod
    async def remove(cart_item_id: str, user_id: str, session: AsyncSession) -> int:
        stmt = delete(CartItem).where(CartItem.id == cart_item_id, CartItem.user_id == user_id).execution_options(synchronize_session=False)
        result = await session_execute(stmt, session)
        return result.rowcount

    @staticmethod
    async def remove_by_product(product_id: str, session: AsyncSession) -> int:
        stmt = delete(CartItem).where(CartItem.product_id == product_id).execution_options(synchronize_session=False)
        result = await session_execute(stmt, session)
        return result.rowcount

    @staticmethod
    async def get_lines(user_id: str, session: AsyncSession) -> list[CartLineDTO]:
        stmt = (select(CartItem, Product)
                .outerjoin(Product, Product.id == CartItem.product_id)
                .where(CartItem.user_id == user_id)
                .order_by(CartItem.created_at.desc())
                .execution_options(populate_existing=True))
        rows = await session_execute(stmt, session)
        lines = []
        for cart_item, product in rows.all():
            if product is None:
                logging.warning(f"Cart item {cart_item.id} references missing product {cart_item.product_id}, skipped")
                continue
            lines.append(CartLineDTO(
                id=cart_item.id,
                product_id=cart_item.product_id,
                quantity=cart_item.quantity,
                created_at=cart_item.created_at,
                product=ProductDTO.model_validate(product, from_attributes=True),
            ))
        return lines
