from sqlalchemy import select, update, delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from enums.product_sort import ProductSort
from models.product import Product, ProductDTO, ProductFilterDTO


class ProductRepository:
    @staticmethod
    async def get_by_id(product_id: str, session: AsyncSession) -> ProductDTO | None:
        stmt = select(Product).where(Product.id == product_id).execution_options(populate_existing=True)
        product = await session_execute(stmt, session)
        product = product.scalar()
        if product is not None:
            return ProductDTO.model_validate(product, from_attributes=True)
        return None

    @staticmethod
    async def get_by_ids_for_update(product_ids: list[str], session: AsyncSession) -> dict[str, ProductDTO]:
        """
        Re-read products inside the current transaction with row locks.

        SELECT ... FOR UPDATE is silently dropped by the SQLite dialect, where the
        database-level write lock of the transaction serialises writers instead.
        """
        stmt = select(Product).where(Product.id.in_(product_ids)).with_for_update().execution_options(populate_existing=True)
        products = await session_execute(stmt, session)
        return {
            product.id: ProductDTO.model_validate(product, from_attributes=True)
            for product in products.scalars().all()
        }

    @staticmethod
    def _filter_conditions(product_filter: ProductFilterDTO) -> list:
        conditions = [Product.is_active == True]
        if product_filter.category:
            conditions.append(Product.category == product_filter.category)
        if product_filter.search:
            conditions.append(or_(
                Product.name.icontains(product_filter.search, autoescape=True),
                Product.description.icontains(product_filter.search, autoescape=True),
            ))
        return conditions

    @staticmethod
    async def get_page(product_filter: ProductFilterDTO, session: AsyncSession) -> tuple[list[ProductDTO], int]:
        conditions = ProductRepository._filter_conditions(product_filter)
        if product_filter.sort == ProductSort.NAME:
            order_by = (Product.name.asc(), Product.id.asc())
        else:
            order_by = (Product.created_at.desc(), Product.id.asc())

        count_stmt = select(func.count(Product.id)).where(*conditions)
        total_count = await session_execute(count_stmt, session)
        total_count = total_count.scalar_one()

        stmt = (select(Product)
                .where(*conditions)
                .order_by(*order_by)
                .execution_options(populate_existing=True)
                .limit(product_filter.page_size)
                .offset((product_filter.page - 1) * product_filter.page_size))
        products = await session_execute(stmt, session)
        return [ProductDTO.model_validate(p, from_attributes=True) for p in products.scalars().all()], total_count

    @staticmethod
    async def get_all_page(page: int, page_size: int, session: AsyncSession) -> tuple[list[ProductDTO], int]:
        count_stmt = select(func.count(Product.id))
        total_count = await session_execute(count_stmt, session)
        total_count = total_count.scalar_one()

        stmt = (select(Product)
                .order_by(Product.created_at.desc(), Product.id.asc())
                .execution_options(populate_existing=True)
                .limit(page_size)
                .offset((page - 1) * page_size))
        products = await session_execute(stmt, session)
        return [ProductDTO.model_validate(p, from_attributes=True) for p in products.scalars().all()], total_count

    @staticmethod
    async def create(product_dto: ProductDTO, session: AsyncSession) -> ProductDTO:
        product = Product(**product_dto.model_dump(exclude_none=True))
        session.add(product)
        await session_flush(session)
        return ProductDTO.model_validate(product, from_attributes=True)

    @staticmethod
    async def update(product_id: str, values: dict, session: AsyncSession) -> int:
        stmt = update(Product).where(Product.id == product_id).values(**values).execution_options(synchronize_session=False)
        result = await session_execute(stmt, session)
        return result.rowcount

    @staticmethod
    async def delete(product_id: str, session: AsyncSession) -> int:
        stmt = delete(Product).where(Product.id == product_id).execution_options(synchronize_session=False)
        result = await session_execute(stmt, session)
        return result.rowcount
