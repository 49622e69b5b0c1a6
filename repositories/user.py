from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.user import UserDTO, User


class UserRepository:
    @staticmethod
    async def get_by_external_id(external_id: str, session: AsyncSession) -> UserDTO | None:
        stmt = select(User).where(User.external_id == external_id).execution_options(populate_existing=True)
        user = await session_execute(stmt, session)
        user = user.scalar()
        if user is not None:
            return UserDTO.model_validate(user, from_attributes=True)
        else:
            return user

    @staticmethod
    async def get_by_id(user_id: str, session: AsyncSession) -> UserDTO | None:
        stmt = select(User).where(User.id == user_id).execution_options(populate_existing=True)
        user = await session_execute(stmt, session)
        user = user.scalar()
        if user is not None:
            return UserDTO.model_validate(user, from_attributes=True)
        else:
            return user

    @staticmethod
    async def create(user_dto: UserDTO, session: AsyncSession) -> str:
        user_dto_dict = user_dto.model_dump(exclude_none=True)
        user = User(**user_dto_dict)
        session.add(user)
        await session_flush(session)
        return user.id

    @staticmethod
    async def update_name(user_id: str, name: str, session: AsyncSession) -> int:
        stmt = update(User).where(User.id == user_id).values(name=name).execution_options(synchronize_session=False)
        result = await session_execute(stmt, session)
        return result.rowcount
