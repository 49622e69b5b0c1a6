import logging

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit
from exceptions import InvalidProductDataException, ProductNotFoundException
from models.product import ProductCreateDTO, ProductDTO, ProductPageDTO, ProductUpdateDTO
from repositories.cartItem import CartItemRepository
from repositories.orderItem import OrderItemRepository
from repositories.product import ProductRepository
from utils.identity_validator import IdentityClaims
from utils.permission_utils import AdminPolicy, get_admin_policy


class AdminService:
    """
    Catalog management. Every operation checks the admin policy against the
    caller's verified claims before touching the database.
    """

    @staticmethod
    def _require_admin(claims: IdentityClaims | None, policy: AdminPolicy | None) -> None:
        (policy or get_admin_policy()).require_admin(claims)

    @staticmethod
    def _validate_fields(values: dict) -> dict:
        if 'name' in values:
            name = (values['name'] or '').strip()
            if not name:
                raise InvalidProductDataException('name', "Product name must not be empty")
            values['name'] = name
        if 'price' in values and values['price'] < 0:
            raise InvalidProductDataException('price', "Price must be 0 or greater")
        if 'stock_quantity' in values and values['stock_quantity'] < 0:
            raise InvalidProductDataException('stock_quantity', "Stock quantity must be 0 or greater")
        for optional in ('description', 'category'):
            if optional in values and isinstance(values[optional], str):
                values[optional] = values[optional].strip() or None
        return values

    @staticmethod
    async def _get_existing(product_id: str, session: AsyncSession) -> ProductDTO:
        product = await ProductRepository.get_by_id(product_id, session)
        if product is None:
            raise ProductNotFoundException(product_id)
        return product

    @staticmethod
    async def create_product(claims: IdentityClaims | None, data: ProductCreateDTO, session: AsyncSession,
                             policy: AdminPolicy | None = None) -> ProductDTO:
        AdminService._require_admin(claims, policy)
        values = AdminService._validate_fields(data.model_dump())
        product = await ProductRepository.create(ProductDTO(**values), session)
        await session_commit(session)
        logging.info(f"Product {product.id} created by {claims.sub}")
        return product

    @staticmethod
    async def update_product(claims: IdentityClaims | None, product_id: str, data: ProductUpdateDTO,
                             session: AsyncSession, policy: AdminPolicy | None = None) -> ProductDTO:
        AdminService._require_admin(claims, policy)
        values = data.model_dump(exclude_unset=True)
        # name, price and stock are NOT NULL, an explicit null there means no change
        for required in ('name', 'price', 'stock_quantity', 'is_active'):
            if required in values and values[required] is None:
                values.pop(required)
        if not values:
            raise InvalidProductDataException('fields', "No product fields to update")
        values = AdminService._validate_fields(values)
        await AdminService._get_existing(product_id, session)
        await ProductRepository.update(product_id, values, session)
        await session_commit(session)
        logging.info(f"Product {product_id} updated by {claims.sub}: {sorted(values)}")
        return await AdminService._get_existing(product_id, session)

    @staticmethod
    async def update_stock(claims: IdentityClaims | None, product_id: str, stock_quantity: int,
                           session: AsyncSession, policy: AdminPolicy | None = None) -> ProductDTO:
        AdminService._require_admin(claims, policy)
        values = AdminService._validate_fields({'stock_quantity': stock_quantity})
        await AdminService._get_existing(product_id, session)
        await ProductRepository.update(product_id, values, session)
        await session_commit(session)
        logging.info(f"Product {product_id} stock set to {stock_quantity} by {claims.sub}")
        return await AdminService._get_existing(product_id, session)

    @staticmethod
    async def toggle_active(claims: IdentityClaims | None, product_id: str, session: AsyncSession,
                            policy: AdminPolicy | None = None) -> bool:
        AdminService._require_admin(claims, policy)
        product = await AdminService._get_existing(product_id, session)
        new_flag = not product.is_active
        await ProductRepository.update(product_id, {'is_active': new_flag}, session)
        await session_commit(session)
        logging.info(f"Product {product_id} is_active={new_flag} set by {claims.sub}")
        return new_flag

    @staticmethod
    async def delete_product(claims: IdentityClaims | None, product_id: str, session: AsyncSession,
                             policy: AdminPolicy | None = None) -> None:
        """
        Hard delete. Products referenced by order items stay, deactivate them instead.
        """
        AdminService._require_admin(claims, policy)
        await AdminService._get_existing(product_id, session)
        if await OrderItemRepository.count_by_product_id(product_id, session) > 0:
            raise InvalidProductDataException(
                'product_id', "Product is referenced by orders, deactivate it instead of deleting"
            )
        removed_lines = await CartItemRepository.remove_by_product(product_id, session)
        await ProductRepository.delete(product_id, session)
        await session_commit(session)
        logging.info(f"Product {product_id} deleted by {claims.sub} ({removed_lines} cart lines removed)")

    @staticmethod
    async def list_all_products(claims: IdentityClaims | None, page: int, page_size: int, session: AsyncSession,
                                policy: AdminPolicy | None = None) -> ProductPageDTO:
        AdminService._require_admin(claims, policy)
        page = max(page, 1)
        page_size = max(page_size, 1)
        items, total_count = await ProductRepository.get_all_page(page, page_size, session)
        return ProductPageDTO.build(items, total_count, page, page_size)
