"""
Configuration Validation Module

Validates critical configuration values at startup to fail-fast
with clear error messages instead of runtime failures.
"""

import sys

from enums.runtime_environment import RuntimeEnvironment


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""
    pass


def validate_identity_secret(secret: str) -> None:
    """
    Validate the secret shared with the identity provider.

    Raises:
        ConfigValidationError: If secret is missing or too weak
    """
    if not secret or len(secret.strip()) == 0:
        raise ConfigValidationError(
            "IDENTITY_SHARED_SECRET is required to verify identity tokens!\n"
            "Generate a secure secret with: openssl rand -hex 32\n"
            "Add to .env: IDENTITY_SHARED_SECRET=<your-generated-secret>"
        )

    if len(secret) < 32:
        raise ConfigValidationError(
            f"IDENTITY_SHARED_SECRET is too weak (length: {len(secret)}, minimum: 32)!\n"
            "Generate a secure secret with: openssl rand -hex 32"
        )


def validate_admin_policy(runtime_environment: RuntimeEnvironment, allow_all_authenticated: bool) -> None:
    """
    Refuse the allow-all admin switch outside development.

    Raises:
        ConfigValidationError: If ADMIN_ALLOW_ALL_AUTHENTICATED is set in PROD
    """
    if allow_all_authenticated and runtime_environment == RuntimeEnvironment.PROD:
        raise ConfigValidationError(
            "ADMIN_ALLOW_ALL_AUTHENTICATED=true is not allowed in PROD!\n"
            "Grant admin access with ADMIN_ROLE_NAMES or ADMIN_EMAILS instead."
        )


def validate_startup_config(config_module) -> None:
    """
    Validate all critical configuration at startup.

    Raises:
        ConfigValidationError: If any validation fails
    """
    validate_identity_secret(config_module.IDENTITY_SHARED_SECRET)
    validate_admin_policy(config_module.RUNTIME_ENVIRONMENT, config_module.ADMIN_ALLOW_ALL_AUTHENTICATED)


def validate_or_exit(config_module) -> None:
    """
    Validate configuration and exit with error code 1 if validation fails.

    This is the main entry point for startup validation.
    """
    try:
        validate_startup_config(config_module)
    except ConfigValidationError as e:
        print(f"\n ERROR: Configuration Validation Failed\n", file=sys.stderr)
        print(str(e), file=sys.stderr)
        print("\nStartup aborted. Please fix configuration and try again.\n", file=sys.stderr)
        sys.exit(1)
