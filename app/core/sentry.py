"""Sentry error tracking integration.

Initializes Sentry SDK if SENTRY_DSN is set; no-op otherwise. Client-side
errors (4xx ``AppError``s) are not reported; provider and computation failures
are sent with their keyword/platform context as tags.
"""

import logging

from app.core.config import settings
from app.core.exceptions import AppError

logger = logging.getLogger(__name__)

# AppError.context keys promoted to searchable Sentry tags
_TAGGED_CONTEXT = ("keyword_id", "platform", "client")


def _before_send(event: dict, hint: dict) -> dict | None:
    exc_info = hint.get("exc_info")
    exc = exc_info[1] if exc_info else None
    if not isinstance(exc, AppError):
        return event
    if exc.status_code < 500:
        return None

    tags = event.setdefault("tags", {})
    tags["error_kind"] = exc.kind
    for key in _TAGGED_CONTEXT:
        if key in exc.context:
            tags[key] = str(exc.context[key])
    return event


def init_sentry() -> None:
    """Initialize Sentry if SENTRY_DSN is configured."""
    if not settings.sentry_dsn:
        logger.debug("Sentry DSN not configured, skipping")
        return

    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.app_env,
        release="brand-visibility-tracker@1.0.0",
        traces_sample_rate=0.1 if settings.app_env == "production" else 1.0,
        send_default_pii=False,
        before_send=_before_send,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
    )
    sentry_sdk.set_tag("brand", settings.brand_name)
    logger.info("Sentry initialized (env=%s, brand=%s)", settings.app_env, settings.brand_name)
