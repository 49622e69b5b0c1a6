from enum import Enum


class ErrorCode(str, Enum):
    """Machine-readable error kinds carried by every failed ActionResult."""
    UNAUTHENTICATED = "Unauthenticated"
    UNRESOLVABLE = "Unresolvable"
    FORBIDDEN = "Forbidden"
    NOT_FOUND = "NotFound"
    INVALID_QUANTITY = "InvalidQuantity"
    INVALID_SHIPPING_INFO = "InvalidShippingInfo"
    INVALID_PRODUCT_DATA = "InvalidProductData"
    PRODUCT_UNAVAILABLE = "ProductUnavailable"
    OUT_OF_STOCK = "OutOfStock"
    INSUFFICIENT_STOCK = "InsufficientStock"
    EMPTY_CART = "EmptyCart"
    INVALID_TRANSITION = "InvalidTransition"
    ORDER_CREATION_FAILED = "OrderCreationFailed"
    CATALOG_UNAVAILABLE = "CatalogUnavailable"
    INTERNAL = "Internal"
