import logging
from typing import AsyncIterator

from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import get_db_session
from utils.error_handler import ActionResult
from utils.identity_validator import IdentityClaims, IdentityValidationError, validate_identity_token

logger = logging.getLogger(__name__)

IDENTITY_HEADER = "X-Identity-Token"


async def get_session() -> AsyncIterator[AsyncSession]:
    """One session per request, closed when the response is sent."""
    async with get_db_session() as session:
        yield session


async def get_identity_claims(request: Request) -> IdentityClaims | None:
    """
    Verified claims of the X-Identity-Token header, or None.

    A missing or invalid token is not rejected here: the handlers turn a missing
    identity into an Unauthenticated envelope.
    """
    token = request.headers.get(IDENTITY_HEADER)
    if not token:
        return None
    try:
        return validate_identity_token(
            token=token,
            shared_secret=config.IDENTITY_SHARED_SECRET,
            max_age_seconds=config.IDENTITY_TOKEN_MAX_AGE_SECONDS,
        )
    except IdentityValidationError as e:
        logger.warning(f"Identity token rejected for {request.url.path}: {e}")
        return None


def to_response(result: ActionResult, success_status: int = 200) -> JSONResponse:
    status_code = success_status if result.success else result.http_status
    return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"))
