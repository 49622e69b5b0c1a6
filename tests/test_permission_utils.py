"""
Tests for utils/permission_utils.py

Tests cover:
- Admin verification by role claim and by email
- The allow-all switch
- require_admin() raising for customers and anonymous callers
- Building the policy from config
"""

from unittest.mock import patch

import pytest

from exceptions import AdminRequiredException
from utils.identity_validator import IdentityClaims
from utils.permission_utils import AdminPolicy, get_admin_policy


def claims(sub="user_1", role=None, email=None):
    return IdentityClaims(sub=sub, role=role, email=email, auth_date=0)


class TestIsAdmin:
    """Test AdminPolicy.is_admin()."""

    policy = AdminPolicy(role_names=frozenset({"admin", "org:admin"}), emails=frozenset({"owner@example.com"}))

    def test_admin_role(self):
        assert self.policy.is_admin(claims(role="org:admin")) is True

    def test_other_role(self):
        assert self.policy.is_admin(claims(role="member")) is False

    def test_admin_email_case_insensitive(self):
        assert self.policy.is_admin(claims(email="OWNER@example.com")) is True

    def test_no_role_or_email(self):
        assert self.policy.is_admin(claims()) is False

    def test_missing_claims(self):
        assert self.policy.is_admin(None) is False

    def test_allow_all_authenticated(self):
        policy = AdminPolicy(allow_all_authenticated=True)

        assert policy.is_admin(claims()) is True
        assert policy.is_admin(None) is False


class TestRequireAdmin:

    def test_customer_raises(self):
        policy = AdminPolicy(role_names=frozenset({"admin"}))

        with pytest.raises(AdminRequiredException) as exc_info:
            policy.require_admin(claims(sub="customer_9"))

        assert exc_info.value.subject == "customer_9"

    def test_admin_passes(self):
        AdminPolicy(role_names=frozenset({"admin"})).require_admin(claims(role="admin"))


class TestFromConfig:

    def test_policy_built_from_config(self):
        with patch('utils.permission_utils.config') as mock_config:
            mock_config.ADMIN_ROLE_NAMES = ["admin"]
            mock_config.ADMIN_EMAILS = ["Boss@Example.com"]
            mock_config.ADMIN_ALLOW_ALL_AUTHENTICATED = False

            policy = get_admin_policy()

        assert policy.role_names == frozenset({"admin"})
        assert policy.emails == frozenset({"boss@example.com"})
        assert policy.allow_all_authenticated is False
