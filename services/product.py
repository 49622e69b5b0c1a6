import logging
import re

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_rollback
from exceptions import CatalogUnavailableException
from models.product import ProductDTO, ProductFilterDTO, ProductPageDTO
from repositories.product import ProductRepository
from utils.error_handler import safe_error_message

MISSING_TABLE_PATTERNS = [
    re.compile(r"no such table", re.IGNORECASE),                    # SQLite
    re.compile(r'relation "[^"]+" does not exist', re.IGNORECASE),  # PostgreSQL
    re.compile(r"table '[^']+' doesn't exist", re.IGNORECASE),      # MySQL / MariaDB
]
POSTGRES_UNDEFINED_TABLE = "42P01"
MYSQL_NO_SUCH_TABLE = 1146


def is_missing_table_error(error: SQLAlchemyError) -> bool:
    """
    True only for "table does not exist" errors. Missing columns, functions
    or schemas are real failures and must not look like an empty catalog.
    """
    orig = getattr(error, "orig", None)
    if orig is not None:
        if getattr(orig, "sqlstate", None) == POSTGRES_UNDEFINED_TABLE \
                or getattr(orig, "pgcode", None) == POSTGRES_UNDEFINED_TABLE:
            return True
        args = getattr(orig, "args", ())
        if args and args[0] == MYSQL_NO_SUCH_TABLE:
            return True
    message = str(orig if orig is not None else error)
    return any(pattern.search(message) for pattern in MISSING_TABLE_PATTERNS)


class ProductService:

    @staticmethod
    async def list_products(product_filter: ProductFilterDTO, session: AsyncSession) -> ProductPageDTO:
        """
        Active products matching the filter, one 1-indexed page at a time.

        A store whose products table has not been created yet yields an empty page.
        """
        try:
            items, total_count = await ProductRepository.get_page(product_filter, session)
        except SQLAlchemyError as e:
            await session_rollback(session)
            if is_missing_table_error(e):
                logging.warning("Products table missing, returning empty catalog page")
                return ProductPageDTO.build([], 0, product_filter.page, product_filter.page_size)
            logging.error(f"Catalog query failed: {type(e).__name__}")
            raise CatalogUnavailableException(safe_error_message(e))
        return ProductPageDTO.build(items, total_count, product_filter.page, product_filter.page_size)

    @staticmethod
    async def get_product(product_id: str, session: AsyncSession) -> ProductDTO | None:
        try:
            product = await ProductRepository.get_by_id(product_id, session)
        except SQLAlchemyError as e:
            await session_rollback(session)
            if is_missing_table_error(e):
                return None
            raise CatalogUnavailableException(safe_error_message(e))
        if product is None or not product.is_active:
            return None
        return product
