import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit, session_rollback

logger = logging.getLogger(__name__)


class TransactionManager:
    """
    Utility class for running a unit of work on a request-scoped session
    with commit on success and rollback on any error.
    """

    @staticmethod
    @asynccontextmanager
    async def atomic_transaction(session: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
        """
        Context manager for atomic database transactions.

        Usage:
            async with TransactionManager.atomic_transaction(session):
                await OrderRepository.create(order_dto, session)
                await OrderItemRepository.create_many(items, session)
        """
        transaction_start = datetime.now()
        logger.debug(f"Transaction started at {transaction_start}")
        try:
            yield session
            await session_commit(session)
        except Exception as e:
            try:
                await session_rollback(session)
                logger.info(f"Transaction rolled back due to error: {type(e).__name__}")
            except Exception as rollback_error:
                logger.critical(f"Failed to rollback transaction: {str(rollback_error)}")
            raise
        duration = (datetime.now() - transaction_start).total_seconds()
        logger.debug(f"Transaction committed successfully in {duration:.2f}s")
