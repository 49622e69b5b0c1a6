import math
from datetime import datetime

from pydantic import BaseModel, Field, field_validator
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, CheckConstraint, Index

import config
from enums.product_sort import ProductSort
from models.base import Base, new_id


class Product(Base):
    __tablename__ = 'products'

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Integer, nullable=False)
    category = Column(String, nullable=True)
    stock_quantity = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_product_price_non_negative'),
        CheckConstraint('stock_quantity >= 0', name='check_product_stock_non_negative'),
        Index('ix_products_active_created', 'is_active', 'created_at'),
    )


class ProductDTO(BaseModel):
    id: str | None = None
    name: str | None = None
    description: str | None = None
    price: int | None = None
    category: str | None = None
    stock_quantity: int | None = None
    is_active: bool | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProductFilterDTO(BaseModel):
    """
    Catalog query parameters.

    "all" or an empty string for category means no category filter.
    Pages are 1-indexed.
    """
    category: str | None = None
    search: str | None = None
    sort: ProductSort = ProductSort.LATEST
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default_factory=lambda: config.PAGE_ENTRIES, ge=1)

    @field_validator("category", "search")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if not value or value.lower() == "all":
            return None
        return value


class ProductPageDTO(BaseModel):
    items: list[ProductDTO] = []
    total_count: int = 0
    page: int = 1
    page_size: int = 1
    total_pages: int = 0

    @staticmethod
    def build(items: list[ProductDTO], total_count: int, page: int, page_size: int) -> "ProductPageDTO":
        return ProductPageDTO(
            items=items,
            total_count=total_count,
            page=page,
            page_size=page_size,
            total_pages=math.ceil(total_count / page_size) if total_count else 0,
        )


class ProductCreateDTO(BaseModel):
    name: str
    description: str | None = None
    price: int
    category: str | None = None
    stock_quantity: int = 0
    is_active: bool = True


class ProductUpdateDTO(BaseModel):
    name: str | None = None
    description: str | None = None
    price: int | None = None
    category: str | None = None
    stock_quantity: int | None = None
    is_active: bool | None = None
