# =============================================================================
# Sentry Error Tracking Integration
# =============================================================================
#
# Reconciliation failures leave translations split between a provisional and
# a final identifier. They are reported here so someone can re-run them.
#
# Setup:
#   Set TRANSLATABLE_SENTRY_DSN=https://...@sentry.io/...
#   Call init_sentry() at app startup (hosts with their own Sentry setup
#   can skip this; events go to whatever client is active)
#
# =============================================================================

import logging

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from translatable.config import get_settings

logger = logging.getLogger(__name__)


def init_sentry() -> bool:
    """
    Initialize Sentry error tracking.

    Returns True if initialized, False if skipped.
    """
    settings = get_settings()

    if not settings.sentry_dsn:
        logger.info("TRANSLATABLE_SENTRY_DSN not set - error tracking disabled")
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        integrations=[
            LoggingIntegration(
                level=logging.INFO,
                event_level=logging.ERROR,
            ),
        ],
        # Translated text can be personal data
        send_default_pii=False,
    )

    logger.info(f"Sentry initialized for {settings.environment}")
    return True


def _client_active() -> bool:
    return sentry_sdk.get_client().is_active()


def capture_exception(error: Exception, **context) -> str | None:
    """
    Capture an exception to Sentry.

    Returns the event ID if captured, None otherwise.
    """
    if not _client_active():
        logger.error("Error (Sentry disabled): %s", error, extra={"context": context})
        return None

    with sentry_sdk.new_scope() as scope:
        for key, value in context.items():
            scope.set_extra(key, value)
        scope.set_tag("component", "translatable")
        return sentry_sdk.capture_exception(error)

