"""
Centralized Logging Configuration

Provides secure, production-ready logging with:
- Configurable log levels
- Automatic log rotation
- Secret masking to prevent credential leaks
"""

import logging
import logging.handlers
import re
from pathlib import Path
from typing import Pattern

import config


class SecretMaskingFilter(logging.Filter):
    """
    Logging filter that masks sensitive data in log records.

    Prevents credential leaks by replacing sensitive values with [REDACTED].

    Masks:
    - API keys and secrets
    - Tokens, identity assertions and passwords
    - Email addresses and phone numbers
    - Shipping addresses
    """

    PATTERNS: list[tuple[Pattern, str]] = [
        # API Keys (various formats)
        (re.compile(r'(api[_-]?key["\']?\s*[:=]\s*["\']?)([A-Za-z0-9_\-]{20,})(["\']?)', re.IGNORECASE), r'\1[REDACTED_API_KEY]\3'),
        (re.compile(r'(secret["\']?\s*[:=]\s*["\']?)([^\s"\'&]{8,})(["\']?)', re.IGNORECASE), r'\1[REDACTED_SECRET]\3'),

        # Tokens
        (re.compile(r'(token["\']?\s*[:=]\s*["\']?)([A-Za-z0-9_\-:.%=&]{20,})(["\']?)', re.IGNORECASE), r'\1[REDACTED_TOKEN]\3'),
        (re.compile(r'(Bearer\s+)([A-Za-z0-9_\-\.]+)', re.IGNORECASE), r'\1[REDACTED_BEARER_TOKEN]'),
        # Identity assertion signatures
        (re.compile(r'(hash=)([a-fA-F0-9]{64})'), r'\1[REDACTED_HASH]'),

        # Passwords
        (re.compile(r'(password["\']?\s*[:=]\s*["\']?)([^\s"\']+)(["\']?)', re.IGNORECASE), r'\1[REDACTED_PASSWORD]\3'),

        # Email addresses (PII)
        (re.compile(r'\b([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})\b'), '[REDACTED_EMAIL]'),

        # Phone numbers (various formats)
        (re.compile(r'\b(\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3,4}[-.\s]?\d{4}\b'), '[REDACTED_PHONE]'),

        # Shipping addresses
        (re.compile(r'(address["\']?\s*[:=]\s*["\']?)([^"\']{10,})(["\']?)', re.IGNORECASE), r'\1[REDACTED_ADDRESS]\3'),
    ]

    @classmethod
    def mask(cls, text: str) -> str:
        for pattern, replacement in cls.PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Filter log record to mask sensitive data.

        Returns:
            True (always - we modify but don't block records)
        """
        if record.msg:
            record.msg = self.mask(str(record.msg))

        if record.args:
            masked_args = []
            for arg in record.args:
                if isinstance(arg, str):
                    arg = self.mask(arg)
                masked_args.append(arg)
            record.args = tuple(masked_args)

        return True


def setup_logging():
    """
    Initialize centralized logging configuration.

    Call this function once at application startup (in run.py).

    Configuration:
    - Log level from config.LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)
    - Automatic rotation every midnight
    - Keeps logs for config.LOG_RETENTION_DAYS days
    - Masks secrets if config.LOG_MASK_SECRETS is True
    - Writes to {config.LOG_DIR}/storefront.log
    """
    log_dir = Path(config.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    log_level_str = config.LOG_LEVEL
    log_level = getattr(logging, log_level_str.upper(), logging.INFO)
    retention_days = config.LOG_RETENTION_DAYS
    mask_secrets = config.LOG_MASK_SECRETS

    formatter = logging.Formatter(
        fmt='%(asctime)s | %(name)-25s | %(levelname)-8s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_handler = logging.handlers.TimedRotatingFileHandler(
        filename=log_dir / "storefront.log",
        when="midnight",
        interval=1,
        backupCount=retention_days,
        encoding="utf-8"
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(log_level)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)

    if mask_secrets:
        file_handler.addFilter(SecretMaskingFilter())
        console_handler.addFilter(SecretMaskingFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.info("=" * 80)
    logging.info(f"Logging initialized: Level={log_level_str}, Retention={retention_days} days, Masking={'ENABLED' if mask_secrets else 'DISABLED'}")
    logging.info("=" * 80)
