"""Flask application factory for the Mailsieve API."""

from flask import Flask
from flask_cors import CORS

import config
from api.middleware import register_error_handlers, register_request_logging
from database.connection import remove_session
from utils.logger import setup_logger


def create_app():
    """Create and configure the Flask application."""
    setup_logger()

    app = Flask(__name__)

    # Configuration
    app.config["SECRET_KEY"] = config.SECRET_KEY
    app.config["DEBUG"] = config.FLASK_DEBUG

    # Enable CORS for all routes
    CORS(app)

    # Clean up database sessions after each request
    @app.teardown_appcontext
    def shutdown_session(exception=None):
        remove_session()

    register_error_handlers(app)
    register_request_logging(app)

    # Register blueprints
    from api.routes.rules import rules_bp
    from api.routes.emails import emails_bp
    from api.routes.jobs import jobs_bp
    from api.routes.results import results_bp
    from api.routes.export import export_bp

    app.register_blueprint(rules_bp, url_prefix="/api/rules")
    app.register_blueprint(emails_bp, url_prefix="/api/emails")
    app.register_blueprint(jobs_bp, url_prefix="/api/jobs")
    app.register_blueprint(results_bp, url_prefix="/api/results")
    app.register_blueprint(export_bp, url_prefix="/api")

    # Health check
    @app.route("/api/health")
    def health():
        return {"status": "ok", "app": "mailsieve"}

    return app
