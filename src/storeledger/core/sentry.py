"""Sentry setup and the before_send filter for ledger payloads."""

import os

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.utils import BadDsn

from storeledger.core.logging import get_logger

logger = get_logger(__name__)

_sentry_initialized = False


def usable_dsn(raw: str | None) -> str | None:
    """Return the stripped DSN, or None for unset and placeholder values."""
    dsn = (raw or "").strip()
    if not dsn.startswith(("https://", "http://")):
        return None
    return dsn


def init_sentry() -> None:
    """
    Initialize the Sentry SDK once per process.

    No-op without a usable SENTRY_DSN, so local runs and CI never report.
    Tracing is off and the logging integration is disabled; structlog
    already emits every event and Sentry only receives exceptions.
    """
    global _sentry_initialized

    if _sentry_initialized:
        return

    raw_dsn = os.getenv("SENTRY_DSN")
    dsn = usable_dsn(raw_dsn)
    if dsn is None:
        logger.info("sentry.disabled", reason="placeholder_dsn" if raw_dsn else "no_dsn")
        return

    environment = os.getenv("ENVIRONMENT", "development")
    release = os.getenv("SENTRY_RELEASE")

    try:
        sentry_sdk.init(
            dsn=dsn,
            environment=environment,
            release=release,
            traces_sample_rate=0.0,
            send_default_pii=False,
            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                LoggingIntegration(level=None, event_level=None),
            ],
            before_send=filter_sensitive_data,
        )
    except BadDsn as exc:
        logger.warning("sentry.init_failed", error=str(exc))
        return

    _sentry_initialized = True
    logger.info("sentry.initialized", environment=environment, release=release)


def filter_sensitive_data(event: dict, hint: dict) -> dict:
    """
    Filter sensitive data from Sentry events.

    Drops SQL fragments from extras and breadcrumbs, and buyer names from
    the request body of sale payloads.
    """
    environment = os.getenv("ENVIRONMENT", "development").lower()
    if environment in {"test", "testing"}:
        return event

    extra = event.get("extra")
    if isinstance(extra, dict):
        event["extra"] = {
            key: value
            for key, value in extra.items()
            if "sql" not in str(key).lower() and "sql" not in str(value).lower()
        }

    breadcrumbs = event.get("breadcrumbs")
    if isinstance(breadcrumbs, dict):
        # Sentry SDK 2.x wraps breadcrumbs as {"values": [...]}
        values = breadcrumbs.get("values", [])
        breadcrumbs["values"] = [
            b for b in values if "sql" not in str(b.get("message", "")).lower()
        ]
    elif isinstance(breadcrumbs, list):
        event["breadcrumbs"] = [
            b
            for b in breadcrumbs
            if "sql" not in str(b.get("message", "") if isinstance(b, dict) else b).lower()
        ]

    request = event.get("request")
    if isinstance(request, dict) and isinstance(request.get("data"), dict):
        request["data"].pop("buyer", None)

    return event
