from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import relationship

from models.base import Base, new_id


class OrderItem(Base):
    __tablename__ = 'order_items'

    __table_args__ = (
        CheckConstraint('quantity > 0', name='ck_order_item_positive_quantity'),
        CheckConstraint('price >= 0', name='ck_order_item_non_negative_price'),
        Index('ix_order_items_order_id', 'order_id'),
        Index('ix_order_items_product_id', 'product_id'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    order_id = Column(String(36), ForeignKey('orders.id', ondelete='CASCADE'), nullable=False)
    product_id = Column(String(36), ForeignKey('products.id'), nullable=False)
    quantity = Column(Integer, nullable=False)
    # Unit price observed at checkout, never updated afterwards
    price = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    order = relationship("Order", back_populates="items")


class OrderItemDTO(BaseModel):
    id: str | None = None
    order_id: str | None = None
    product_id: str | None = None
    quantity: int | None = None
    price: int | None = None
    created_at: datetime | None = None
    # Current product name, filled on read
    product_name: str | None = None
