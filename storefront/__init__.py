import os
from typing import Any, Mapping, Optional

from flask import Flask, request, Response

from .config import config_by_name
from .utils.logging import setup_logging
from .utils.extensions import login_manager, jwt
from .database import db


def create_app(config_name: Optional[str] = None, config_overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    """
    Application factory.
    Keeps startup side-effects isolated and testable.
    """
    config_name = config_name or os.getenv("FLASK_ENV", "default")
    app = Flask(__name__, instance_relative_config=True)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    app.config.from_object(config_by_name[config_name])
    app.config.from_envvar("STOREFRONT_SETTINGS", silent=True)
    if config_overrides:
        app.config.update(config_overrides)
    config_by_name[config_name].init_app(app)

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    setup_logging(app)

    # ------------------------------------------------------------------
    # Extensions
    # ------------------------------------------------------------------
    login_manager.init_app(app)
    jwt.init_app(app)

    # ------------------------------------------------------------------
    # Database
    # ------------------------------------------------------------------
    db.init_app(app)

    with app.app_context():
        # ------------------------------------------------------------------
        # Schema & defaults
        # ------------------------------------------------------------------
        db.checkDB()

        from storefront.models import models
        from storefront.database.defaults import default_list
        models.set_defaults(default_list=default_list(app.config))

        from .blueprints import init_blueprints
        init_blueprints(app)
        from .utils.error_handlers import register_error_handlers
        register_error_handlers(app)

        @app.after_request
        def log_request(response: Response) -> Response:
            app.logger.debug("%s %s -> %s", request.method, request.path, response.status_code)
            return response

        app.logger.info("Storefront %s server ready (database: %s)", config_name, db.backend)

    return app
