import logging
from typing import Any

import sentry_sdk

logger = logging.getLogger(__name__)


class ErrorReporter:
    """Logs collaborator failures and, when enabled, forwards them to Sentry."""

    def __init__(self, *, enabled: bool = False, dsn: str = "") -> None:
        self.enabled = bool(enabled and dsn)
        if enabled and not dsn:
            logger.warning("error monitoring enabled but SENTRY_DSN is empty; reporting to logs only")
        if self.enabled:
            sentry_sdk.init(dsn=dsn, traces_sample_rate=0.0, send_default_pii=False)
            logger.info("sentry error monitoring enabled")

    def capture(self, exc: BaseException, **context: Any) -> None:
        logger.error("%s: %s", type(exc).__name__, exc, exc_info=exc, extra={"context": context})
        if not self.enabled:
            return
        with sentry_sdk.new_scope() as scope:
            for key, value in context.items():
                scope.set_extra(key, value)
            sentry_sdk.capture_exception(exc)
