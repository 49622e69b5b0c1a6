"""
Unit Tests: UserService and the identity bridge handler
"""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select, func
from sqlalchemy.exc import OperationalError

import config
from enums.error_code import ErrorCode
from exceptions import UnauthenticatedException, UserNotFoundException, UserUnresolvableException
from handlers.common.identity import resolve_or_create_user
from models.user import User
from services.user import UserService


async def count_users(session) -> int:
    result = await session.execute(select(func.count(User.id)))
    return result.scalar_one()


class TestResolveOrCreate:

    @pytest.mark.asyncio
    async def test_first_sight_creates_user_with_placeholder_name(self, test_session):
        user_id = await UserService.resolve_or_create("clerk_abc", test_session)

        user = await UserService.get_by_id(user_id, test_session)
        assert user.external_id == "clerk_abc"
        assert user.name == config.PLACEHOLDER_USER_NAME

    @pytest.mark.asyncio
    async def test_repeat_calls_return_same_id(self, test_session):
        first = await UserService.resolve_or_create("clerk_abc", test_session)
        second = await UserService.resolve_or_create("clerk_abc", test_session)

        assert first == second
        assert await count_users(test_session) == 1

    @pytest.mark.asyncio
    async def test_distinct_subjects_get_distinct_users(self, test_session):
        first = await UserService.resolve_or_create("clerk_a", test_session)
        second = await UserService.resolve_or_create("clerk_b", test_session)

        assert first != second

    @pytest.mark.asyncio
    @pytest.mark.parametrize("external_id", [None, "", "   "])
    async def test_missing_subject_unauthenticated(self, test_session, external_id):
        with pytest.raises(UnauthenticatedException):
            await UserService.resolve_or_create(external_id, test_session)

        assert await count_users(test_session) == 0

    @pytest.mark.asyncio
    async def test_storage_failure_unresolvable(self, test_session):
        error = OperationalError("SELECT", {}, Exception("database is locked"))
        with patch("services.user.UserRepository.get_by_external_id", AsyncMock(side_effect=error)):
            with pytest.raises(UserUnresolvableException):
                await UserService.resolve_or_create("clerk_abc", test_session)


class TestUpdateName:

    @pytest.mark.asyncio
    async def test_update_name(self, test_session, user_factory):
        user_id = await user_factory(name="Customer")

        user = await UserService.update_name(user_id, " Jane ", test_session)

        assert user.name == "Jane"

    @pytest.mark.asyncio
    async def test_blank_name_keeps_existing(self, test_session, user_factory):
        user_id = await user_factory(name="Jane")

        user = await UserService.update_name(user_id, "  ", test_session)

        assert user.name == "Jane"

    @pytest.mark.asyncio
    async def test_missing_user(self, test_session):
        with pytest.raises(UserNotFoundException):
            await UserService.update_name("missing", "Jane", test_session)


class TestIdentityHandler:

    @pytest.mark.asyncio
    async def test_no_claims_returns_unauthenticated_result(self, test_session):
        result = await resolve_or_create_user(None, test_session)

        assert not result.success
        assert result.error_code == ErrorCode.UNAUTHENTICATED
        assert result.http_status == 401

    @pytest.mark.asyncio
    async def test_claims_name_synced_on_resolve(self, test_session, make_claims):
        result = await resolve_or_create_user(make_claims(sub="clerk_1", name="Jane Doe"), test_session)

        assert result.success
        user = await UserService.get_by_id(result.data, test_session)
        assert user.name == "Jane Doe"
