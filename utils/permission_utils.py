"""
Centralized permission utilities for admin authorization.

A single AdminPolicy object is built from configuration and evaluated against
the claims of a verified identity token. Nothing in the check depends on the
runtime environment; the allow-all switch is refused at startup in PROD.
"""

import logging
from dataclasses import dataclass, field

import config
from exceptions import AdminRequiredException
from utils.identity_validator import IdentityClaims


@dataclass(frozen=True)
class AdminPolicy:
    role_names: frozenset[str] = field(default_factory=frozenset)
    emails: frozenset[str] = field(default_factory=frozenset)
    allow_all_authenticated: bool = False

    @staticmethod
    def from_config() -> "AdminPolicy":
        return AdminPolicy(
            role_names=frozenset(config.ADMIN_ROLE_NAMES),
            emails=frozenset(email.lower() for email in config.ADMIN_EMAILS),
            allow_all_authenticated=config.ADMIN_ALLOW_ALL_AUTHENTICATED,
        )

    def is_admin(self, claims: IdentityClaims | None) -> bool:
        """
        Check whether the verified identity may use admin operations.

        Example:
            >>> AdminPolicy(role_names=frozenset({"admin"})).is_admin(claims_with_role_admin)
            True
        """
        if claims is None or not claims.sub:
            return False
        if claims.role and claims.role in self.role_names:
            return True
        if claims.email and claims.email.lower() in self.emails:
            return True
        if self.allow_all_authenticated:
            logging.warning(f"Admin access granted to {claims.sub} by ADMIN_ALLOW_ALL_AUTHENTICATED")
            return True
        return False

    def require_admin(self, claims: IdentityClaims | None) -> None:
        if not self.is_admin(claims):
            subject = claims.sub if claims else None
            logging.warning(f"Admin operation denied for subject {subject}")
            raise AdminRequiredException(subject)


def get_admin_policy() -> AdminPolicy:
    return AdminPolicy.from_config()
