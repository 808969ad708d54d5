"""
Environment-aware configuration.
Values come from the process environment (a .env file is loaded if
present). The auth-relevant subset is validated once in create_app() and
turned into an AuthSettings object.
"""
import os
from dotenv import load_dotenv

load_dotenv()  # Read .env if present


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///videotube.db")
    SQL_ECHO = False

    # Tokens: two distinct secrets, no defaults
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET")
    ACCESS_TOKEN_EXPIRY_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRY_MINUTES", "15"))
    REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET")
    REFRESH_TOKEN_EXPIRY_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRY_DAYS", "10"))
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "videotube-api")
    # Off by default: unknown user and wrong password both answer 401
    AUTH_DISTINCT_LOGIN_ERRORS = _env_bool("AUTH_DISTINCT_LOGIN_ERRORS", False)

    COOKIE_SECURE = _env_bool("COOKIE_SECURE", True)
    COOKIE_SAMESITE = os.getenv("COOKIE_SAMESITE", "Strict")

    # Cloudinary-style upload endpoint, e.g. https://api.cloudinary.com/v1_1/<cloud>/auto/upload
    MEDIA_UPLOAD_URL = os.getenv("MEDIA_UPLOAD_URL")
    MEDIA_API_KEY = os.getenv("MEDIA_API_KEY")
    MEDIA_UPLOAD_PRESET = os.getenv("MEDIA_UPLOAD_PRESET")
    MEDIA_TIMEOUT_SECONDS = float(os.getenv("MEDIA_TIMEOUT_SECONDS", "30"))
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_UPLOAD_BYTES", str(100 * 1024 * 1024)))


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SQL_ECHO = _env_bool("SQL_ECHO", True)
    # Plain http on localhost
    COOKIE_SECURE = _env_bool("COOKIE_SECURE", False)


class ProductionConfig(BaseConfig):
    DEBUG = False


class TestingConfig(BaseConfig):
    TESTING = True
    APP_ENV = "test"
    DATABASE_URL = "sqlite:///:memory:"
    ACCESS_TOKEN_SECRET = "test-access-secret-0123456789abcdef0123"
    REFRESH_TOKEN_SECRET = "test-refresh-secret-0123456789abcdef012"
    ACCESS_TOKEN_EXPIRY_MINUTES = 15
    REFRESH_TOKEN_EXPIRY_DAYS = 10
    AUTH_DISTINCT_LOGIN_ERRORS = False
    COOKIE_SECURE = False
    COOKIE_SAMESITE = "Strict"
    MEDIA_UPLOAD_URL = None
    LOG_LEVEL = "DEBUG"


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/prod/test).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
