"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import os
import sys
from datetime import datetime

# Environment must be in place before config.py is imported anywhere
os.environ.setdefault("RUNTIME_ENVIRONMENT", "TEST")
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("IDENTITY_SHARED_SECRET", "test_identity_secret_0123456789abcdef0123456789")
os.environ.setdefault("ORDER_PLACEMENT_MODE", "atomic")
os.environ.setdefault("PAGE_ENTRIES", "12")

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from db import create_db_and_tables  # noqa: F401  registers the pragma listener
from models.base import Base
from models.product import Product
from models.user import User
from utils.identity_validator import IdentityClaims


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create test database engine (in-memory SQLite shared by all sessions)."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine):
    """Create test database session."""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()


# ============================================================================
# Factories
# ============================================================================

@pytest_asyncio.fixture
async def user_factory(test_session):
    """Insert a user row and return its id."""
    counter = {"n": 0}

    async def create(external_id: str | None = None, name: str = "Customer") -> str:
        counter["n"] += 1
        user = User(external_id=external_id or f"ext_user_{counter['n']}", name=name)
        test_session.add(user)
        await test_session.commit()
        return user.id

    return create


@pytest_asyncio.fixture
async def product_factory(test_session):
    """Insert a product row and return its id."""
    counter = {"n": 0}

    async def create(name: str | None = None, price: int = 1000, stock_quantity: int = 10,
                     is_active: bool = True, category: str | None = "electronics",
                     description: str | None = None, created_at: datetime | None = None) -> str:
        counter["n"] += 1
        values = dict(
            name=name or f"Product {counter['n']}",
            price=price,
            stock_quantity=stock_quantity,
            is_active=is_active,
            category=category,
            description=description,
        )
        if created_at is not None:
            values["created_at"] = created_at
        product = Product(**values)
        test_session.add(product)
        await test_session.commit()
        return product.id

    return create


# ============================================================================
# Identity Fixtures
# ============================================================================

@pytest.fixture
def make_claims():
    def create(sub: str = "ext_user_1", role: str | None = None, email: str | None = None,
               name: str | None = None) -> IdentityClaims:
        return IdentityClaims(sub=sub, role=role, email=email, name=name, auth_date=int(datetime.now().timestamp()))

    return create
