from sqlalchemy.ext.asyncio import AsyncSession

from exceptions import ProductNotFoundException
from models.product import ProductDTO, ProductFilterDTO, ProductPageDTO
from services.product import ProductService
from utils.error_handler import safe_service_call


@safe_service_call("list_products")
async def list_products(product_filter: ProductFilterDTO, session: AsyncSession) -> ProductPageDTO:
    return await ProductService.list_products(product_filter, session)


@safe_service_call("get_product")
async def get_product(product_id: str, session: AsyncSession) -> ProductDTO:
    product = await ProductService.get_product(product_id, session)
    if product is None:
        raise ProductNotFoundException(product_id)
    return product
