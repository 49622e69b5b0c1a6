import os
import sys

from dotenv import load_dotenv

from enums.runtime_environment import RuntimeEnvironment

# Load .env but don't override existing environment variables
# This allows test scripts to set RUNTIME_ENVIRONMENT=TEST before import
load_dotenv(".env", override=False)


def _exit_with_config_error(name: str, reason: str, expected: str) -> None:
    print(f"\n ERROR: Invalid {name} configuration\n", file=sys.stderr)
    print(f"Reason: {reason}", file=sys.stderr)
    print(f"Expected: {expected}", file=sys.stderr)
    print(f"Current value: {os.environ.get(name, '(not set)')}\n", file=sys.stderr)
    sys.exit(1)


def _positive_int(name: str, default: str, minimum: int = 1) -> int:
    try:
        value = int(os.environ.get(name, default))
        if value < minimum:
            raise ValueError(f"{name} must be >= {minimum} (got: {value})")
        return value
    except ValueError as e:
        _exit_with_config_error(name, str(e), f"Integer >= {minimum}")


def _csv(name: str, default: str = "") -> list[str]:
    raw = os.environ.get(name, default)
    return [part.strip() for part in raw.split(",") if part.strip()]


# Parse RUNTIME_ENVIRONMENT with clear error message on misconfiguration
try:
    RUNTIME_ENVIRONMENT = RuntimeEnvironment(os.environ.get("RUNTIME_ENVIRONMENT", "DEV"))
except ValueError as e:
    _exit_with_config_error(
        "RUNTIME_ENVIRONMENT", str(e), ", ".join(env.value for env in RuntimeEnvironment)
    )

# Database
DB_URL = os.environ.get("DB_URL", "sqlite+aiosqlite:///data/storefront.db")
SQL_ECHO = os.environ.get("SQL_ECHO", "false") == "true"

# Catalog
PAGE_ENTRIES = _positive_int("PAGE_ENTRIES", "12")

# Identity bridge
PLACEHOLDER_USER_NAME = os.environ.get("PLACEHOLDER_USER_NAME", "Customer")
IDENTITY_SHARED_SECRET = os.environ.get("IDENTITY_SHARED_SECRET", "")
IDENTITY_TOKEN_MAX_AGE_SECONDS = _positive_int("IDENTITY_TOKEN_MAX_AGE_SECONDS", "3600")

# Order workflow
ORDER_NUMBER_PREFIX = os.environ.get("ORDER_NUMBER_PREFIX", "ORDER")
ORDER_NUMBER_SUFFIX_LENGTH = _positive_int("ORDER_NUMBER_SUFFIX_LENGTH", "7", minimum=7)

# "atomic": order + line items in one transaction (default)
# "compensating": order committed first, deleted again if line items fail
ORDER_PLACEMENT_MODE = os.environ.get("ORDER_PLACEMENT_MODE", "atomic")
if ORDER_PLACEMENT_MODE not in ("atomic", "compensating"):
    _exit_with_config_error("ORDER_PLACEMENT_MODE", "Unknown placement mode", "atomic, compensating")

# Admin policy
ADMIN_ROLE_NAMES = _csv("ADMIN_ROLE_NAMES", "admin,org:admin")
ADMIN_EMAILS = [email.lower() for email in _csv("ADMIN_EMAILS")]
ADMIN_ALLOW_ALL_AUTHENTICATED = os.environ.get("ADMIN_ALLOW_ALL_AUTHENTICATED", "false") == "true"

# Web server
WEBAPP_HOST = os.environ.get("WEBAPP_HOST", "0.0.0.0")
WEBAPP_PORT = _positive_int("WEBAPP_PORT", "8000")
SECURITY_HEADERS_ENABLED = os.environ.get("SECURITY_HEADERS_ENABLED", "false") == "true"
HSTS_ENABLED = os.environ.get("HSTS_ENABLED", "false") == "true"
CORS_ALLOWED_ORIGINS = _csv("CORS_ALLOWED_ORIGINS")

# Logging Configuration
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_MASK_SECRETS = os.environ.get("LOG_MASK_SECRETS", "true") == "true"
LOG_DIR = os.environ.get("LOG_DIR", "logs")

# Log Retention: Environment-specific defaults
# Dev: keep a month for debugging
# Prod: Use 5 days default to save disk space
if RUNTIME_ENVIRONMENT == RuntimeEnvironment.DEV:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "30"))
else:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "5"))
