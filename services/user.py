import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import session_commit, session_rollback
from exceptions import UnauthenticatedException, UserUnresolvableException, UserNotFoundException
from models.user import UserDTO
from repositories.user import UserRepository
from utils.error_handler import safe_error_message


class UserService:

    @staticmethod
    async def resolve_or_create(external_id: str | None, session: AsyncSession) -> str:
        """
        Map an identity-provider subject id to the internal user id, creating
        the user with the placeholder name on first sight.

        A concurrent first-time insert that loses the unique-constraint race
        re-reads the winner's row instead of failing.
        """
        if external_id is None or not external_id.strip():
            raise UnauthenticatedException()
        external_id = external_id.strip()

        try:
            user = await UserRepository.get_by_external_id(external_id, session)
            if user is not None:
                return user.id
            user_id = await UserRepository.create(
                UserDTO(external_id=external_id, name=config.PLACEHOLDER_USER_NAME), session
            )
            await session_commit(session)
            logging.info(f"Created user {user_id} for new external identity")
            return user_id
        except IntegrityError:
            await session_rollback(session)
            logging.info("User insert lost a concurrent race, re-reading existing row")
        except SQLAlchemyError as e:
            await session_rollback(session)
            logging.error(f"Failed to resolve user: {type(e).__name__}")
            raise UserUnresolvableException(external_id, safe_error_message(e))

        try:
            winner = await UserRepository.get_by_external_id(external_id, session)
        except SQLAlchemyError as e:
            await session_rollback(session)
            raise UserUnresolvableException(external_id, safe_error_message(e))
        if winner is None:
            raise UserUnresolvableException(external_id, "user row missing after insert conflict")
        return winner.id

    @staticmethod
    async def get_by_id(user_id: str, session: AsyncSession) -> UserDTO:
        user = await UserRepository.get_by_id(user_id, session)
        if user is None:
            raise UserNotFoundException(user_id)
        return user

    @staticmethod
    async def update_name(user_id: str, name: str | None, session: AsyncSession) -> UserDTO:
        """Replace the placeholder display name once the identity provider supplies one."""
        user = await UserService.get_by_id(user_id, session)
        if not name or not name.strip() or name.strip() == user.name:
            return user
        await UserRepository.update_name(user_id, name.strip(), session)
        await session_commit(session)
        return await UserService.get_by_id(user_id, session)
