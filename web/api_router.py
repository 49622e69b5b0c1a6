"""
JSON API for the storefront.

Every route delegates to a handler and returns its ActionResult envelope with
the HTTP status mapped from the error code.

Security:
- Identity comes only from the HMAC-signed X-Identity-Token header
- Cart and order rows are always scoped to the resolved user
"""

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

import config
from enums.product_sort import ProductSort
from handlers.common import identity as identity_handlers
from handlers.user import cart as cart_handlers
from handlers.user import catalog as catalog_handlers
from handlers.user import order as order_handlers
from models.product import ProductFilterDTO
from utils.identity_validator import IdentityClaims
from web.dependencies import get_identity_claims, get_session, to_response

api_router = APIRouter(prefix="/api", tags=["api"])


class AddCartItemPayload(BaseModel):
    product_id: str
    quantity: int = 1


class SetQuantityPayload(BaseModel):
    quantity: int


class CreateOrderPayload(BaseModel):
    """Shipping fields are validated by the order handler so that blanks map to InvalidShippingInfo."""
    shipping_name: str = ""
    shipping_address: str = ""
    shipping_phone: str = ""
    order_note: str | None = Field(default=None, max_length=1000)


@api_router.get("/products")
async def list_products(category: str | None = None,
                        search: str | None = None,
                        sort: ProductSort = ProductSort.LATEST,
                        page: int = Query(default=1, ge=1),
                        page_size: int = Query(default=config.PAGE_ENTRIES, ge=1, le=100),
                        session: AsyncSession = Depends(get_session)):
    product_filter = ProductFilterDTO(category=category, search=search, sort=sort, page=page, page_size=page_size)
    return to_response(await catalog_handlers.list_products(product_filter, session))


@api_router.get("/products/{product_id}")
async def get_product(product_id: str, session: AsyncSession = Depends(get_session)):
    return to_response(await catalog_handlers.get_product(product_id, session))


@api_router.get("/me")
async def resolve_me(claims: IdentityClaims | None = Depends(get_identity_claims),
                     session: AsyncSession = Depends(get_session)):
    return to_response(await identity_handlers.resolve_or_create_user(claims, session))


@api_router.get("/cart")
async def list_cart(claims: IdentityClaims | None = Depends(get_identity_claims),
                    session: AsyncSession = Depends(get_session)):
    return to_response(await cart_handlers.list_cart(claims, session))


@api_router.get("/cart/summary")
async def get_cart_summary(claims: IdentityClaims | None = Depends(get_identity_claims),
                           session: AsyncSession = Depends(get_session)):
    return to_response(await cart_handlers.get_cart_summary(claims, session))


@api_router.post("/cart/items")
async def add_cart_item(payload: AddCartItemPayload,
                        claims: IdentityClaims | None = Depends(get_identity_claims),
                        session: AsyncSession = Depends(get_session)):
    result = await cart_handlers.add_cart_item(claims, payload.product_id, payload.quantity, session)
    return to_response(result, status.HTTP_201_CREATED)


@api_router.patch("/cart/items/{cart_item_id}")
async def set_cart_quantity(cart_item_id: str, payload: SetQuantityPayload,
                            claims: IdentityClaims | None = Depends(get_identity_claims),
                            session: AsyncSession = Depends(get_session)):
    return to_response(await cart_handlers.set_cart_quantity(claims, cart_item_id, payload.quantity, session))


@api_router.delete("/cart/items/{cart_item_id}")
async def remove_cart_item(cart_item_id: str,
                           claims: IdentityClaims | None = Depends(get_identity_claims),
                           session: AsyncSession = Depends(get_session)):
    return to_response(await cart_handlers.remove_cart_item(claims, cart_item_id, session))


@api_router.post("/orders")
async def create_order(payload: CreateOrderPayload,
                       claims: IdentityClaims | None = Depends(get_identity_claims),
                       session: AsyncSession = Depends(get_session)):
    shipping = {
        "name": payload.shipping_name,
        "address": payload.shipping_address,
        "phone": payload.shipping_phone,
    }
    result = await order_handlers.create_order(claims, shipping, session, order_note=payload.order_note)
    return to_response(result, status.HTTP_201_CREATED)


@api_router.get("/orders")
async def list_orders(claims: IdentityClaims | None = Depends(get_identity_claims),
                      session: AsyncSession = Depends(get_session)):
    return to_response(await order_handlers.list_orders(claims, session))


@api_router.get("/orders/{order_id}")
async def get_order(order_id: str,
                    claims: IdentityClaims | None = Depends(get_identity_claims),
                    session: AsyncSession = Depends(get_session)):
    return to_response(await order_handlers.get_order(claims, order_id, session))


@api_router.post("/orders/{order_id}/cancel")
async def cancel_order(order_id: str,
                       claims: IdentityClaims | None = Depends(get_identity_claims),
                       session: AsyncSession = Depends(get_session)):
    return to_response(await order_handlers.cancel_order(claims, order_id, session))
