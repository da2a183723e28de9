# backend/opsdesk/__init__.py
import logging

from flask import Flask

from .config import Config
from .extensions import db, migrate


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Outbound collaborators, replaceable per app (tests swap in fakes)
    from .services.assistant_service import EXTENSION_KEY
    from .services.communications_service import EmailClient, InvoiceClient
    from .services.extraction_service import RemoteExtractor

    app.extensions[EXTENSION_KEY] = {
        "extractor": RemoteExtractor.from_config(app.config),
        "email_client": EmailClient.from_config(app.config),
        "invoice_client": InvoiceClient.from_config(app.config),
    }

    # Register blueprints
    from .routes.system import system_bp
    from .routes.assistant import assistant_bp
    from .routes.analytics import analytics_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(assistant_bp)
    app.register_blueprint(analytics_bp)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
