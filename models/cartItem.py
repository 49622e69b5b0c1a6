from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, CheckConstraint, UniqueConstraint

from models.base import Base, new_id
from models.product import ProductDTO


class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    quantity = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    __table_args__ = (
        CheckConstraint('quantity > 0', name='check_quantity_positive'),
        # One line per (user, product); repeat adds increment the existing line
        UniqueConstraint('user_id', 'product_id', name='uq_cart_items_user_product'),
    )


class CartItemDTO(BaseModel):
    id: str | None = None
    user_id: str | None = None
    product_id: str | None = None
    quantity: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CartLineDTO(BaseModel):
    """Cart line joined with the live product row."""
    id: str
    product_id: str
    quantity: int
    created_at: datetime | None = None
    product: ProductDTO

    @property
    def line_total(self) -> int:
        return self.product.price * self.quantity


class CartSummaryDTO(BaseModel):
    total_items: int = 0
    total_quantity: int = 0
    total_amount: int = 0
