"""Lucky draw widget: Flask application package."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from flask import Flask
from dotenv import load_dotenv

if TYPE_CHECKING:
    from luckydraw.services.lottery_service import LotteryService


def create_app(
    config_overrides: dict[str, Any] | None = None,
    lottery_service: LotteryService | None = None,
) -> Flask:
    """Application factory.

    Args:
        config_overrides: Values applied after the environment config,
            e.g. ``{"DATABASE_URL": "sqlite+pysqlite:///:memory:"}`` in tests.
        lottery_service: Service used by the API routes; tests pass one
            with a fixed sample source.

    Returns:
        Configured Flask application.
    """
    load_dotenv()

    from luckydraw.config import get_config
    from luckydraw.db import init_db
    from luckydraw.error_handlers import register_error_handlers
    from luckydraw.logging_config import configure_logging
    from luckydraw.routes.health import health_bp
    from luckydraw.routes.lottery import lottery_bp
    from luckydraw.routes.web import web_bp
    from luckydraw.services.lottery_service import LotteryService

    app = Flask(__name__)
    app.config.from_object(get_config())
    if config_overrides:
        app.config.update(config_overrides)
    app.json.ensure_ascii = False  # type: ignore[attr-defined]

    configure_logging(app)
    init_db(app)
    register_error_handlers(app)
    app.extensions["lottery_service"] = lottery_service or LotteryService()

    app.register_blueprint(health_bp)
    app.register_blueprint(web_bp)
    app.register_blueprint(lottery_bp, url_prefix="/api")

    return app
