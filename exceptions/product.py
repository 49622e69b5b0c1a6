"""
Catalog-related exceptions.
"""

from enums.error_code import ErrorCode
from .base import StorefrontException


class ProductException(StorefrontException):
    """Base exception for catalog errors."""
    pass


class ProductNotFoundException(ProductException):
    """Raised when product is not found in database."""

    error_code = ErrorCode.NOT_FOUND

    def __init__(self, product_id: str):
        super().__init__(
            f"Product {product_id} not found",
            details={'product_id': product_id}
        )
        self.product_id = product_id


class ProductUnavailableException(ProductException):
    """Raised when a product is missing or inactive at the moment it is put into a cart or order."""

    error_code = ErrorCode.PRODUCT_UNAVAILABLE

    def __init__(self, product_id: str, product_name: str | None = None):
        if product_name:
            message = f'"{product_name}" is currently not available for purchase'
        else:
            message = "Product is currently not available for purchase"
        super().__init__(
            message,
            details={'product_id': product_id, 'product_name': product_name}
        )
        self.product_id = product_id
        self.product_name = product_name


class InvalidProductDataException(ProductException):
    """Raised when admin-supplied product data violates a catalog rule."""

    error_code = ErrorCode.INVALID_PRODUCT_DATA

    def __init__(self, field: str, reason: str):
        super().__init__(
            reason,
            details={'field': field}
        )
        self.field = field
        self.reason = reason


class CatalogUnavailableException(ProductException):
    """Raised when the catalog cannot be read for a reason other than a missing table."""

    error_code = ErrorCode.CATALOG_UNAVAILABLE

    def __init__(self, reason: str):
        super().__init__(
            f"Failed to load products: {reason}",
            details={'reason': reason}
        )
        self.reason = reason
