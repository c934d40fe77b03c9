"""
Logging setup and Sentry error reporting.

Every module logs through `get_logger(__name__)`; `setup_logging()` wires the
root handler once at startup. Sentry is optional and only active when
SENTRY_DSN is set.
"""

import logging
import sys
from typing import Dict, Any, Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from taskboard.core.config import settings

# Request fields and headers never sent to Sentry (invite codes included)
SENSITIVE_FIELDS = [
    'password', 'token', 'secret', 'authorization',
    'access_token', 'code',
]
SENSITIVE_HEADERS = ['Authorization', 'Cookie']

# Chatty libraries kept at WARNING unless LOG_LEVEL is DEBUG
QUIET_LOGGERS = ['aiosqlite', 'sqlalchemy.engine', 'httpx', 'uvicorn.access']

LOG_FORMAT = '%(asctime)s %(levelname)-8s [%(name)s] %(message)s'


def init_sentry() -> bool:
    """
    Start Sentry if a DSN is configured.

    Returns:
        True if Sentry was initialized
    """
    if not settings.SENTRY_DSN:
        logging.info("Sentry disabled (no SENTRY_DSN)")
        return False

    try:
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            environment=settings.MODE,
            release=f"taskboard@{settings.APP_VERSION}",
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
            integrations=[
                FastApiIntegration(),
                SqlalchemyIntegration(),
            ],
            before_send=filter_sensitive_data,
            send_default_pii=False,
            attach_stacktrace=True,
        )
    except Exception as e:
        logging.error(f"Could not start Sentry: {e}")
        return False

    logging.info(f"Sentry enabled ({settings.MODE})")
    return True


def filter_sensitive_data(event: Dict[str, Any], hint: Dict[str, Any] = None) -> Optional[Dict[str, Any]]:
    """
    Sentry `before_send` hook.

    Masks credentials and invite codes in the request body and auth headers.
    """
    request = event.get('request') or {}

    data = request.get('data')
    if isinstance(data, dict):
        for field in SENSITIVE_FIELDS:
            if field in data:
                data[field] = '[FILTERED]'

    headers = request.get('headers')
    if isinstance(headers, dict):
        for header in SENSITIVE_HEADERS:
            if header in headers:
                headers[header] = '[FILTERED]'

    return event


def capture_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    tags: Optional[Dict[str, str]] = None
) -> Optional[str]:
    """
    Report an unexpected error.

    Without Sentry the traceback goes to the log instead.

    Returns:
        Sentry event id, or None when Sentry is disabled
    """
    logger = logging.getLogger(__name__)
    if not settings.SENTRY_DSN:
        logger.error(f"Unhandled error: {error}", exc_info=error)
        return None

    with sentry_sdk.new_scope() as scope:
        for key, value in (context or {}).items():
            scope.set_context(key, value)
        for key, value in (tags or {}).items():
            scope.set_tag(key, value)
        event_id = sentry_sdk.capture_exception(error)

    logger.info(f"Reported to Sentry: {event_id}")
    return event_id


def setup_logging():
    """Send all records at LOG_LEVEL or above to stdout."""
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    quiet_level = level if level <= logging.DEBUG else logging.WARNING
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    logging.debug(f"Logging configured ({logging.getLevelName(level)})")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
