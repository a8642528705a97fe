"""Entry point: build the session's notification pipeline and serve it."""

import asyncio
import structlog
from auth.session import Session
from config.logging_config import setup_logging
from config.settings import settings
from notifications.provider import NotificationProvider
from realtime.config_service import ConfigService
from realtime.connection import ConnectionManager
from web.app import start_web

log = structlog.get_logger(__name__)


def build_provider(session: Session, config_service: ConfigService) -> NotificationProvider:
    """Wire a fresh connection and provider for one session."""
    connection = ConnectionManager(config_service)
    return NotificationProvider(connection, session)


async def start_console() -> None:
    """Start the notification pipeline and the HTTP surface."""
    setup_logging()
    log.info("starting_notification_console", api=settings.api_base_url)

    session = Session(
        token=settings.session_token,
        username=settings.session_username,
        permissions=frozenset(settings.session_permissions),
    )
    config_service = ConfigService()
    provider = build_provider(session, config_service)

    try:
        await provider.start()
        await start_web(provider)
    finally:
        log.info("shutting_down")
        await provider.stop()
        await config_service.close()


def main() -> None:
    """Run the console."""
    asyncio.run(start_console())


if __name__ == "__main__":
    main()
