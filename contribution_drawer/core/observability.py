import logging

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from contribution_drawer.settings import Settings


def init_sentry(app_settings: Settings) -> None:
    """Initialize Sentry SDK when DSN is configured.

    Error-level log records (such as failed exports) are sent as events.
    """

    if not app_settings.sentry_dsn:
        return

    sentry_sdk.init(
        dsn=app_settings.sentry_dsn,
        environment=app_settings.environment,
        release=app_settings.release,
        traces_sample_rate=app_settings.sentry_traces_sample_rate,
        send_default_pii=False,
        integrations=[
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
    )
