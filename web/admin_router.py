"""
Admin catalog API.

Authorization is decided by the AdminPolicy against the verified identity
claims; denied calls come back as Forbidden envelopes with status 403.
"""

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

import config
from handlers.admin import product_management
from models.product import ProductCreateDTO, ProductUpdateDTO
from utils.identity_validator import IdentityClaims
from utils.permission_utils import AdminPolicy, get_admin_policy
from web.dependencies import get_identity_claims, get_session, to_response

admin_router = APIRouter(prefix="/api/admin", tags=["admin"])


class StockPayload(BaseModel):
    stock_quantity: int


@admin_router.get("/products")
async def list_all_products(page: int = Query(default=1, ge=1),
                            page_size: int = Query(default=config.PAGE_ENTRIES, ge=1, le=100),
                            claims: IdentityClaims | None = Depends(get_identity_claims),
                            policy: AdminPolicy = Depends(get_admin_policy),
                            session: AsyncSession = Depends(get_session)):
    return to_response(await product_management.list_all_products(claims, page, page_size, session, policy))


@admin_router.post("/products")
async def create_product(payload: ProductCreateDTO,
                         claims: IdentityClaims | None = Depends(get_identity_claims),
                         policy: AdminPolicy = Depends(get_admin_policy),
                         session: AsyncSession = Depends(get_session)):
    result = await product_management.create_product(claims, payload, session, policy)
    return to_response(result, status.HTTP_201_CREATED)


@admin_router.patch("/products/{product_id}")
async def update_product(product_id: str, payload: ProductUpdateDTO,
                         claims: IdentityClaims | None = Depends(get_identity_claims),
                         policy: AdminPolicy = Depends(get_admin_policy),
                         session: AsyncSession = Depends(get_session)):
    return to_response(await product_management.update_product(claims, product_id, payload, session, policy))


@admin_router.put("/products/{product_id}/stock")
async def update_stock(product_id: str, payload: StockPayload,
                       claims: IdentityClaims | None = Depends(get_identity_claims),
                       policy: AdminPolicy = Depends(get_admin_policy),
                       session: AsyncSession = Depends(get_session)):
    result = await product_management.update_stock(claims, product_id, payload.stock_quantity, session, policy)
    return to_response(result)


@admin_router.post("/products/{product_id}/toggle")
async def toggle_product_status(product_id: str,
                                claims: IdentityClaims | None = Depends(get_identity_claims),
                                policy: AdminPolicy = Depends(get_admin_policy),
                                session: AsyncSession = Depends(get_session)):
    return to_response(await product_management.toggle_product_status(claims, product_id, session, policy))


@admin_router.delete("/products/{product_id}")
async def delete_product(product_id: str,
                         claims: IdentityClaims | None = Depends(get_identity_claims),
                         policy: AdminPolicy = Depends(get_admin_policy),
                         session: AsyncSession = Depends(get_session)):
    return to_response(await product_management.delete_product(claims, product_id, session, policy))
