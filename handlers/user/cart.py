from sqlalchemy.ext.asyncio import AsyncSession

from handlers.common.identity import resolve_user_id
from models.cartItem import CartItemDTO, CartLineDTO, CartSummaryDTO
from services.cart import CartService
from utils.error_handler import safe_service_call
from utils.identity_validator import IdentityClaims


@safe_service_call("add_cart_item")
async def add_cart_item(claims: IdentityClaims | None, product_id: str, quantity: int,
                        session: AsyncSession) -> CartItemDTO:
    user_id = await resolve_user_id(claims, session)
    return await CartService.add_item(user_id, product_id, quantity, session)


@safe_service_call("set_cart_quantity")
async def set_cart_quantity(claims: IdentityClaims | None, cart_item_id: str, quantity: int,
                            session: AsyncSession) -> CartItemDTO:
    user_id = await resolve_user_id(claims, session)
    return await CartService.set_quantity(user_id, cart_item_id, quantity, session)


@safe_service_call("remove_cart_item")
async def remove_cart_item(claims: IdentityClaims | None, cart_item_id: str, session: AsyncSession) -> None:
    user_id = await resolve_user_id(claims, session)
    await CartService.remove_item(user_id, cart_item_id, session)


@safe_service_call("list_cart")
async def list_cart(claims: IdentityClaims | None, session: AsyncSession) -> list[CartLineDTO]:
    user_id = await resolve_user_id(claims, session)
    return await CartService.list_items(user_id, session)


@safe_service_call("get_cart_summary")
async def get_cart_summary(claims: IdentityClaims | None, session: AsyncSession) -> CartSummaryDTO:
    user_id = await resolve_user_id(claims, session)
    return await CartService.get_summary(user_id, session)
