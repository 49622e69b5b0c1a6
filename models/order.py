from datetime import datetime

from pydantic import BaseModel, field_validator
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, CheckConstraint, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship

from enums.order_status import OrderStatus
from models.base import Base, new_id
from models.orderItem import OrderItemDTO


class Order(Base):
    __tablename__ = 'orders'

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey('users.id'), nullable=False)
    order_number = Column(String, nullable=False, unique=True)
    total_amount = Column(Integer, nullable=False)
    status = Column(SQLEnum(OrderStatus), nullable=False, default=OrderStatus.PENDING)

    # Shipping snapshot taken at checkout
    shipping_name = Column(String, nullable=False)
    shipping_address = Column(Text, nullable=False)
    shipping_phone = Column(String, nullable=False)
    order_note = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    # Relations
    items = relationship('OrderItem', back_populates='order', cascade='all, delete-orphan',
                         passive_deletes=True)

    __table_args__ = (
        CheckConstraint('total_amount >= 0', name='check_order_total_amount_non_negative'),
        Index('ix_orders_user_created', 'user_id', 'created_at'),
    )


class OrderDTO(BaseModel):
    id: str | None = None
    user_id: str | None = None
    order_number: str | None = None
    total_amount: int | None = None
    status: OrderStatus | None = None
    shipping_name: str | None = None
    shipping_address: str | None = None
    shipping_phone: str | None = None
    order_note: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderWithItemsDTO(OrderDTO):
    items: list[OrderItemDTO] = []


class ShippingInfoDTO(BaseModel):
    name: str
    address: str
    phone: str

    @field_validator("name", "address", "phone")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value
