from sqlalchemy.ext.asyncio import AsyncSession

from models.product import ProductCreateDTO, ProductDTO, ProductPageDTO, ProductUpdateDTO
from services.admin import AdminService
from utils.error_handler import safe_service_call
from utils.identity_validator import IdentityClaims
from utils.permission_utils import AdminPolicy


@safe_service_call("create_product")
async def create_product(claims: IdentityClaims | None, data: ProductCreateDTO, session: AsyncSession,
                         policy: AdminPolicy | None = None) -> ProductDTO:
    return await AdminService.create_product(claims, data, session, policy)


@safe_service_call("update_product")
async def update_product(claims: IdentityClaims | None, product_id: str, data: ProductUpdateDTO,
                         session: AsyncSession, policy: AdminPolicy | None = None) -> ProductDTO:
    return await AdminService.update_product(claims, product_id, data, session, policy)


@safe_service_call("update_stock")
async def update_stock(claims: IdentityClaims | None, product_id: str, stock_quantity: int,
                       session: AsyncSession, policy: AdminPolicy | None = None) -> ProductDTO:
    return await AdminService.update_stock(claims, product_id, stock_quantity, session, policy)


@safe_service_call("toggle_product_status")
async def toggle_product_status(claims: IdentityClaims | None, product_id: str, session: AsyncSession,
                                policy: AdminPolicy | None = None) -> bool:
    return await AdminService.toggle_active(claims, product_id, session, policy)


@safe_service_call("delete_product")
async def delete_product(claims: IdentityClaims | None, product_id: str, session: AsyncSession,
                         policy: AdminPolicy | None = None) -> None:
    await AdminService.delete_product(claims, product_id, session, policy)


@safe_service_call("list_all_products")
async def list_all_products(claims: IdentityClaims | None, page: int, page_size: int, session: AsyncSession,
                            policy: AdminPolicy | None = None) -> ProductPageDTO:
    return await AdminService.list_all_products(claims, page, page_size, session, policy)
