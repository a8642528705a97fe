"""Quart app exposing notification state to the console UI."""

import structlog
from quart import Quart
from config.settings import settings

log = structlog.get_logger(__name__)


def create_app(provider=None) -> Quart:
    """Create and configure the Quart web application."""
    app = Quart(__name__)
    app.secret_key = settings.web_secret_key

    # Session-scoped notification provider, read by the API routes
    app.notification_provider = provider  # type: ignore[attr-defined]

    from web.routes.api import api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    @app.route("/health")
    async def health():
        return {"status": "ok"}, 200

    return app


async def start_web(provider=None) -> None:
    """Serve the notification API."""
    app = create_app(provider=provider)
    log.info("starting_web", port=settings.web_port)
    await app.run_task(host="0.0.0.0", port=settings.web_port)
