from sqlalchemy.ext.asyncio import AsyncSession

from exceptions import UnauthenticatedException
from services.user import UserService
from utils.identity_validator import IdentityClaims
from utils.error_handler import safe_service_call


async def resolve_user_id(claims: IdentityClaims | None, session: AsyncSession) -> str:
    """Internal user id for the verified identity; raises before any cart or order work runs."""
    if claims is None:
        raise UnauthenticatedException()
    return await UserService.resolve_or_create(claims.sub, session)


@safe_service_call("resolve_or_create_user")
async def resolve_or_create_user(claims: IdentityClaims | None, session: AsyncSession) -> str:
    user_id = await resolve_user_id(claims, session)
    if claims.name:
        await UserService.update_name(user_id, claims.name, session)
    return user_id
