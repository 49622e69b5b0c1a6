from datetime import datetime

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from enums.order_status import OrderStatus
from models.order import Order, OrderDTO


class OrderRepository:
    @staticmethod
    async def create(order_dto: OrderDTO, session: AsyncSession) -> OrderDTO:
        order = Order(**order_dto.model_dump(exclude_none=True))
        session.add(order)
        await session_flush(session)
        return OrderDTO.model_validate(order, from_attributes=True)

    @staticmethod
    async def get_by_id_for_user(order_id: str, user_id: str, session: AsyncSession) -> OrderDTO | None:
        stmt = select(Order).where(Order.id == order_id, Order.user_id == user_id).execution_options(populate_existing=True)
        order = await session_execute(stmt, session)
        order = order.scalar()
        if order is not None:
            return OrderDTO.model_validate(order, from_attributes=True)
        else:
            return None

    @staticmethod
    async def get_by_user_id(user_id: str, session: AsyncSession) -> list[OrderDTO]:
        stmt = select(Order).where(Order.user_id == user_id).order_by(Order.created_at.desc()).execution_options(populate_existing=True)
        orders = await session_execute(stmt, session)
        return [OrderDTO.model_validate(order, from_attributes=True) for order in orders.scalars().all()]

    @staticmethod
    async def update_status_if(order_id: str, user_id: str, expected: OrderStatus, new_status: OrderStatus,
                               session: AsyncSession) -> int:
        """Compare-and-set on status. Zero rows means another transition won."""
        stmt = (update(Order)
                .where(Order.id == order_id,
                       Order.user_id == user_id,
                       Order.status == expected)
                .execution_options(synchronize_session=False)
                .values(status=new_status, updated_at=datetime.now()))
        result = await session_execute(stmt, session)
        return result.rowcount

    @staticmethod
    async def delete(order_id: str, session: AsyncSession) -> int:
        stmt = delete(Order).where(Order.id == order_id).execution_options(synchronize_session=False)
        result = await session_execute(stmt, session)
        return result.rowcount
