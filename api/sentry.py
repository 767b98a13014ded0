"""Sentry error tracking integration."""

from __future__ import annotations

import sentry_sdk
import structlog
from fastapi import HTTPException
from sentry_sdk.integrations.asyncio import AsyncioIntegration
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.httpx import HttpxIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from api.config import get_settings
from api.exceptions import OntologizerError

logger = structlog.get_logger(__name__)

# Flag to track if Sentry is initialized
_sentry_initialized = False

SENSITIVE_HEADERS = ("authorization", "cookie", "x-api-key")
IGNORED_TRANSACTIONS = ("/api/health",)


def init_sentry() -> bool:
    """Initialize Sentry SDK if configured.

    Returns True if Sentry was initialized, False otherwise.
    """
    global _sentry_initialized

    settings = get_settings()

    if not settings.sentry_dsn:
        logger.info("Sentry DSN not configured, skipping initialization")
        return False

    if _sentry_initialized:
        return True

    try:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.env,
            release="ontologizer@0.1.0",
            sample_rate=1.0,
            # Analyses are long-running; sample transactions lightly in production
            traces_sample_rate=0.1 if settings.is_production else 1.0,
            send_default_pii=False,
            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                StarletteIntegration(transaction_style="endpoint"),
                HttpxIntegration(),
                AsyncioIntegration(),
                LoggingIntegration(
                    level=None,  # Capture all logs as breadcrumbs
                    event_level=None,  # Don't create events for logs
                ),
            ],
            before_send=_before_send,
            before_send_transaction=_before_send_transaction,
        )
    except Exception as e:
        logger.error("Failed to initialize Sentry", error=str(e))
        return False

    _sentry_initialized = True
    logger.info("Sentry initialized", environment=settings.env)
    return True


def _client_error(exc: BaseException | None) -> bool:
    if isinstance(exc, HTTPException):
        return 400 <= exc.status_code < 500
    if isinstance(exc, OntologizerError):
        return 400 <= exc.status_code < 500
    return False


def _before_send(event: dict, hint: dict) -> dict | None:
    """Filter or modify events before sending to Sentry."""
    if "exc_info" in hint:
        _, exc_value, _ = hint["exc_info"]
        # Bad input is the caller's problem, not ours
        if _client_error(exc_value):
            return None

    request_data = event.get("request")
    if request_data and "headers" in request_data:
        headers = request_data["headers"]
        for header in SENSITIVE_HEADERS:
            if header in headers:
                headers[header] = "[Filtered]"

    return event


def _before_send_transaction(event: dict, hint: dict) -> dict | None:  # noqa: ARG001
    """Filter transactions before sending."""
    if event.get("transaction") in IGNORED_TRANSACTIONS:
        return None
    return event
