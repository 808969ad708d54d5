import logging

from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config
from .errors import register_error_handlers
from models.db_storage import DBStorage
from services.credential_store import CredentialStore
from services.media_host import MediaHost
from services.session import SessionController
from services.settings import AuthSettings
from services.tokens import TokenIssuer

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0.0",
    "info": {
        "title": "VideoTube API",
        "version": "1.0.0",
        "description": "Accounts, sessions and videos for the VideoTube front end.",
    },
    "basePath": "/",  # blueprints live under /api/v1
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(app: Flask) -> None:
    level = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
    app.logger.setLevel(level)


def create_app(config_name: str | None = None, test_config: dict | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.

    Configuration is validated here, once. The storage, token issuer, media
    host and session controller are built from it and kept on
    app.extensions for the blueprints.
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    if test_config:
        app.config.update(test_config)

    configure_logging(app)

    # Raises ConfigError when secrets are missing or shared
    settings = AuthSettings.from_mapping(app.config)

    # Cookies carry the session, so CORS must allow credentials
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    storage = DBStorage(app.config["DATABASE_URL"], echo=app.config.get("SQL_ECHO", False))
    storage.reload()
    media_host = MediaHost.from_config(app.config)
    controller = SessionController(
        CredentialStore(storage),
        TokenIssuer(settings),
        media_host,
        distinct_login_errors=app.config.get("AUTH_DISTINCT_LOGIN_ERRORS", False),
    )
    app.extensions["storage"] = storage
    app.extensions["auth_settings"] = settings
    app.extensions["media_host"] = media_host
    app.extensions["session_controller"] = controller

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp
    from .videos import bp as videos_bp

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(auth_bp, url_prefix="/api/v1")
    app.register_blueprint(users_bp, url_prefix="/api/v1")
    app.register_blueprint(videos_bp, url_prefix="/api/v1")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        # This calls scoped_session.remove(), preventing connection leaks
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to VideoTube API",
            "docs": "/apidocs/",
            "health": "/api/v1/health",
        }, 200

    app.logger.info("App created (env=%s, db=%s)", app.config.get("APP_ENV"), storage_backend(app))
    return app


def storage_backend(app: Flask) -> str:
    return str(app.config["DATABASE_URL"]).split(":", 1)[0]
