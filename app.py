import logging

from flask import Flask, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from config.config import Config
from extensions import db, login_manager, migrate
from utils.errors import PortalError, StoreError

# Route Imports
from routes.auth_routes import auth_bp
from routes.admin_routes import admin_bp
from routes.hod_routes import hod_bp
from routes.teacher_routes import teacher_bp
from routes.exam_cell_routes import exam_cell_bp
from routes.paper_routes import paper_bp
from routes.notification_routes import notification_bp
from routes.function_routes import function_bp

# Model Imports (registers every table with the metadata)
from models import User
from services.auth_service import user_from_token
from utils.seed_data import seed_command

logger = logging.getLogger(__name__)


def configure_logging(app):
    logging.basicConfig(
        level=getattr(logging, app.config["LOG_LEVEL"], logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    app.logger.setLevel(app.config["LOG_LEVEL"])


def register_error_handlers(app):
    @app.errorhandler(PortalError)
    def handle_portal_error(exc):
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_store_error(exc):
        db.session.rollback()
        logger.exception("Unhandled store error on %s %s", request.method, request.path)
        err = StoreError()
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(413)
    def handle_too_large(exc):
        return jsonify({"error": "Uploaded file is too large", "code": "VALIDATION_ERROR"}), 413


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    configure_logging(app)

    # Initialize Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, user_id)

    @login_manager.request_loader
    def load_user_from_request(req):
        header = req.headers.get("Authorization", "")
        if not header.startswith("Bearer "):
            return None
        return user_from_token(header[len("Bearer "):].strip())

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": "Unauthorized", "code": "UNAUTHENTICATED"}), 401

    register_error_handlers(app)
    app.cli.add_command(seed_command)

    # Register Blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(hod_bp)
    app.register_blueprint(teacher_bp)
    app.register_blueprint(exam_cell_bp)
    app.register_blueprint(paper_bp)
    app.register_blueprint(notification_bp)
    app.register_blueprint(function_bp)

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=5000, debug=True)
