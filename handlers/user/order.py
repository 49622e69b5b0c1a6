from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from exceptions import InvalidShippingInfoException
from handlers.common.identity import resolve_user_id
from models.order import OrderDTO, OrderWithItemsDTO, ShippingInfoDTO
from services.order import OrderService
from utils.error_handler import safe_service_call
from utils.identity_validator import IdentityClaims


def parse_shipping_info(shipping: ShippingInfoDTO | dict | None) -> ShippingInfoDTO:
    if isinstance(shipping, ShippingInfoDTO):
        return shipping
    try:
        return ShippingInfoDTO.model_validate(shipping or {})
    except ValidationError as e:
        first_error = e.errors()[0]
        field = first_error["loc"][0] if first_error["loc"] else "info"
        raise InvalidShippingInfoException(str(field))


@safe_service_call("create_order")
async def create_order(claims: IdentityClaims | None, shipping: ShippingInfoDTO | dict | None,
                       session: AsyncSession, order_note: str | None = None) -> OrderWithItemsDTO:
    user_id = await resolve_user_id(claims, session)
    shipping_info = parse_shipping_info(shipping)
    return await OrderService.create_order(user_id, shipping_info, session, order_note=order_note)


@safe_service_call("cancel_order")
async def cancel_order(claims: IdentityClaims | None, order_id: str, session: AsyncSession) -> OrderDTO:
    user_id = await resolve_user_id(claims, session)
    return await OrderService.cancel_order(user_id, order_id, session)


@safe_service_call("get_order")
async def get_order(claims: IdentityClaims | None, order_id: str, session: AsyncSession) -> OrderWithItemsDTO:
    user_id = await resolve_user_id(claims, session)
    return await OrderService.get_order(user_id, order_id, session)


@safe_service_call("list_orders")
async def list_orders(claims: IdentityClaims | None, session: AsyncSession) -> list[OrderDTO]:
    user_id = await resolve_user_id(claims, session)
    return await OrderService.list_orders(user_id, session)
