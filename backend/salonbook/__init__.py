# backend/salonbook/__init__.py
from flask import Flask, request

from .config import Config
from .extensions import db, migrate


def create_app(test_config: dict | None = None) -> Flask:
    """
    Application factory.

    test_config overrides Config keys and is applied before the extensions
    are bound, so an overridden SQLALCHEMY_DATABASE_URI is the one the engine
    is created from.
    """
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.admin import admin_bp
    from .routes.catalog import services_bp, clients_bp, staff_bp
    from .routes.employees import employees_bp
    from .routes.appointments import appointments_bp
    from .routes.sales import sales_bp
    from .routes.sessions import sessions_bp
    from .routes.dashboard import dashboard_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(services_bp)
    app.register_blueprint(clients_bp)
    app.register_blueprint(staff_bp)
    app.register_blueprint(employees_bp)
    app.register_blueprint(appointments_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(sessions_bp)
    app.register_blueprint(dashboard_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin and origin in app.config.get("CORS_ALLOWED_ORIGINS", ()):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,PATCH,DELETE,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
