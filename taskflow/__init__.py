# backend/taskflow/__init__.py

from flask import Flask, jsonify
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager

from config import Config

db = SQLAlchemy()
jwt = JWTManager()

STORE_EXTENSION_KEY = "taskflow_store"


def _build_store(app):
    backend = (app.config.get("TASKFLOW_STORE") or "sql").lower()
    if backend == "memory":
        # bookings keep a foreign key to the SQL users table, which only
        # SQLite leaves unenforced
        uri = app.config.get("SQLALCHEMY_DATABASE_URI") or ""
        if not uri.startswith("sqlite"):
            raise ValueError("TASKFLOW_STORE=memory requires a SQLite DATABASE_URL")

        from .adapters.memory_store import MemoryTaskFlowStore

        return MemoryTaskFlowStore()
    if backend == "sql":
        from .adapters.sql_store import SqlTaskFlowStore

        return SqlTaskFlowStore(db)
    raise ValueError(f"unknown TASKFLOW_STORE {backend!r}, expected 'sql' or 'memory'")


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Init extensions
    db.init_app(app)
    jwt.init_app(app)

    # CORS: the dashboard SPA calls /api/*
    CORS(app, resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    app.extensions[STORE_EXTENSION_KEY] = _build_store(app)
    app.logger.info("task store backend: %s", app.config.get("TASKFLOW_STORE"))

    # -----------------------------
    # Error handlers
    # -----------------------------
    from .errors import TaskFlowError

    @app.errorhandler(TaskFlowError)
    def taskflow_error(err):
        if err.status_code >= 500:
            app.logger.error("request failed: %s", err.message)
        return jsonify(err.to_dict()), err.status_code

    @jwt.unauthorized_loader
    def unauthorized_callback(reason):
        return (
            jsonify(
                {
                    "message": "Missing or invalid auth token",
                    "error": reason,
                }
            ),
            401,
        )

    @jwt.invalid_token_loader
    def invalid_token_callback(reason):
        return (
            jsonify(
                {
                    "message": "Invalid auth token",
                    "error": reason,
                }
            ),
            422,
        )

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({"message": "Token has expired"}), 401

    # -----------------------------
    # IMPORT BLUEPRINTS (all routes)
    # -----------------------------
    from .routes.user_routes import user_bp
    from .routes.category_routes import categories_bp
    from .routes.task_routes import tasks_bp
    from .routes.class_routes import classes_bp

    # -----------------------------
    # REGISTER BLUEPRINTS
    # -----------------------------
    app.register_blueprint(user_bp, url_prefix="/api")
    app.register_blueprint(categories_bp, url_prefix="/api/categories")
    app.register_blueprint(tasks_bp, url_prefix="/api/tasks")
    app.register_blueprint(classes_bp, url_prefix="/api")

    @app.route("/api/health")
    def health():
        return {"status": "ok"}

    # -----------------------------
    # DB init
    # -----------------------------
    from .models import activity, booking, task, user  # noqa: F401

    with app.app_context():
        db.create_all()

    return app
