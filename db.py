from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

from sqlalchemy import event, Engine, Result, CursorResult
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

import config
from models.base import Base
"""
Imports of these models are needed to correctly create tables in the database.
For more information see https://stackoverflow.com/questions/7478403/sqlalchemy-classes-across-files
"""
from models.user import User
from models.product import Product
from models.cartItem import CartItem
from models.order import Order
from models.orderItem import OrderItem

url = make_url(config.DB_URL)

# Relative SQLite files live under data/ by default
if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)

engine = create_async_engine(url, echo=config.SQL_ECHO)
session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@asynccontextmanager
async def get_db_session() -> AsyncIterator[AsyncSession]:
    session = session_maker()
    try:
        yield session
    finally:
        await session.close()


async def session_execute(stmt, session: AsyncSession) -> Result[Any] | CursorResult[Any]:
    return await session.execute(stmt)


async def session_flush(session: AsyncSession) -> None:
    await session.flush()


async def session_commit(session: AsyncSession) -> None:
    await session.commit()


async def session_rollback(session: AsyncSession) -> None:
    await session.rollback()


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    # Only SQLite needs foreign keys switched on per connection
    if "sqlite" in type(dbapi_connection).__module__:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


async def create_db_and_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
