import logging

import click
from flask import Flask
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config import get_config
from utils.db import init_db_connection, ensure_indexes, mongo
from utils.helpers import MongoJSONProvider
from utils.logger import init_logging
from utils.responses import ApiError, send_error

# Import controllers
from controllers.auth_controller import auth_bp

from controllers.role_controller import roles_bp
from controllers.permission_controller import permissions_bp
from controllers.activity_controller import activities_bp
from controllers.activity_permission_controller import activity_permissions_bp
from controllers.user_controller import users_bp

from controllers.location_controller import locations_bp
from controllers.amavasya_controller import amavasya_bp
from controllers.amavasya_user_location_controller import aul_bp
from controllers.report_controller import report_bp
from controllers.dashboard_controller import dashboard_bp

logger = logging.getLogger("sevak.app")


def create_app(config_class=None):
    app = Flask(__name__)                                # Initialize Flask app
    app.config.from_object(config_class or get_config())  # Load configuration class
    init_logging(app)
    init_db_connection(app)                              # Initialize MongoDB connection
    # after init_db_connection: Flask-PyMongo installs its own BSON provider
    app.json = MongoJSONProvider(app)                    # ObjectId / datetime as plain strings
    CORS(app, origins=app.config["CORS_ORIGIN"])

    # Register Blueprint
    app.register_blueprint(auth_bp)

    app.register_blueprint(roles_bp)
    app.register_blueprint(permissions_bp)
    app.register_blueprint(activities_bp)
    app.register_blueprint(activity_permissions_bp)
    app.register_blueprint(users_bp)

    app.register_blueprint(locations_bp)
    app.register_blueprint(amavasya_bp)
    app.register_blueprint(aul_bp)
    app.register_blueprint(report_bp)
    app.register_blueprint(dashboard_bp)

    register_error_handlers(app)
    register_commands(app)
    return app


def register_error_handlers(app):

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        return send_error(error.message, error.status_code, error.data)

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return send_error(error.description or error.name, error.code)

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        logger.exception("Unhandled error: %s", error)
        return send_error("Internal Server Error", 500)


def register_commands(app):

    @app.cli.command("init-db")
    def init_db_command():
        """Create MongoDB indexes."""
        ensure_indexes(mongo.db)
        click.echo("Indexes created.")

    @app.cli.command("seed")
    def seed_command():
        """Insert default roles, permissions, activities, locations and admin user."""
        from utils.seed import run_seed

        ensure_indexes(mongo.db)
        result = run_seed(app.config)
        click.echo(f"Seed complete. Admin user {'created' if result['adminId'] else 'already present'}.")


# Run the app
if __name__ == "__main__":
    create_app().run()
