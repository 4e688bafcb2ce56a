"""
Flask application factory.

Creates and configures the Flask application with all blueprints and extensions.
"""
import logging
import sys

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

__version__ = "1.0.0"

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging once for the process.

    Args:
        level: Log level name
    """
    logging.basicConfig(
        format=LOG_FORMAT,
        stream=sys.stdout,
        level=level,
    )
    logging.getLogger().setLevel(level)

    # Reduce noise from third-party libraries
    logging.getLogger("werkzeug").setLevel(logging.WARNING)


def create_app(config_override: dict = None, database=None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_override: Optional dictionary to override settings
        database: Optional Database handle; built from settings when omitted

    Returns:
        Configured Flask application instance

    Usage:
        app = create_app()
        app.run()
    """
    from attribution_tracker.config import settings
    from attribution_tracker.models.base import Database

    app = Flask(__name__)

    # Configure Flask
    app.config['SECRET_KEY'] = settings.secret_key
    app.config['DEBUG'] = settings.debug
    app.config['ENV'] = settings.flask_env

    # Apply any config overrides (useful for testing)
    if config_override:
        app.config.update(config_override)

    configure_logging(settings.log_level)

    # Initialize database
    if database is None:
        database = Database(
            settings.get_database_url(),
            sslmode=settings.database_sslmode or None,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            echo=settings.is_development,
        )
    app.extensions['database'] = database

    connected, error = database.check_connection()
    if connected:
        app.logger.info("Connected to database")
    else:
        app.logger.warning("Could not connect to database: %s", error)
        app.logger.warning("The application will start but database operations will fail.")

    # Register blueprints
    from attribution_tracker.api import health_bp, conversions_bp
    app.register_blueprint(health_bp)
    app.register_blueprint(conversions_bp)

    # Register error handlers
    register_error_handlers(app)

    # Add CORS headers for API responses
    @app.after_request
    def after_request(response):
        response.headers['Access-Control-Allow-Origin'] = '*'
        response.headers['Access-Control-Allow-Headers'] = 'Content-Type'
        response.headers['Access-Control-Allow-Methods'] = 'GET,POST,OPTIONS'
        return response

    return app


def register_error_handlers(app: Flask) -> None:
    """
    Register global error handlers.

    All errors use the {"success": false, "error": ...} envelope.

    Args:
        app: Flask application instance
    """

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        """Handle HTTP exceptions."""
        return jsonify({
            'success': False,
            'error': e.description
        }), e.code

    @app.errorhandler(Exception)
    def handle_exception(e):
        """Handle unexpected exceptions."""
        app.logger.error(f"Unhandled exception: {str(e)}", exc_info=True)
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500

    @app.errorhandler(404)
    def handle_not_found(e):
        """Handle 404 errors."""
        return jsonify({
            'success': False,
            'error': 'Not found'
        }), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(e):
        """Handle 405 errors."""
        return jsonify({
            'success': False,
            'error': 'Method not allowed'
        }), 405
