from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.orderItem import OrderItem, OrderItemDTO
from models.product import Product

DELETED_PRODUCT_NAME = "(deleted product)"


class OrderItemRepository:
    @staticmethod
    async def create_many(order_items: list[OrderItemDTO], session: AsyncSession) -> list[OrderItemDTO]:
        rows = [OrderItem(**item.model_dump(exclude_none=True, exclude={'product_name'})) for item in order_items]
        session.add_all(rows)
        await session_flush(session)
        return [OrderItemDTO.model_validate(row, from_attributes=True) for row in rows]

    @staticmethod
    async def get_by_order_id(order_id: str, session: AsyncSession) -> list[OrderItemDTO]:
        stmt = (select(OrderItem, Product.name)
                .outerjoin(Product, Product.id == OrderItem.product_id)
                .where(OrderItem.order_id == order_id)
                .order_by(OrderItem.created_at.asc()))
        rows = await session_execute(stmt, session)
        items = []
        for order_item, product_name in rows.all():
            item = OrderItemDTO.model_validate(order_item, from_attributes=True)
            item.product_name = product_name or DELETED_PRODUCT_NAME
            items.append(item)
        return items

    @staticmethod
    async def count_by_product_id(product_id: str, session: AsyncSession) -> int:
        stmt = select(func.count(OrderItem.id)).where(OrderItem.product_id == product_id)
        count = await session_execute(stmt, session)
        return count.scalar_one()
