"""
Class-based configuration, selected by name in create_app().

Every value can be overridden from the environment.
"""
import os


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev")
    LOG_LEVEL  = os.getenv("LOG_LEVEL", "INFO")

    # Database (SQLite under the instance folder unless DATABASE_URL is set)
    SQLALCHEMY_DATABASE_URI        = os.getenv("DATABASE_URL", "sqlite:///manavault.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Cookie security
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE   = _env_flag("SESSION_COOKIE_SECURE")

    # Rate limiting (Flask-Limiter)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_ENABLED     = True

    TALISMAN_ENABLED = _env_flag("TALISMAN_ENABLED")
    TALISMAN_CONFIG  = {"force_https": False, "content_security_policy": None}

    # Scryfall client
    SCRYFALL_BASE_URL     = os.getenv("SCRYFALL_BASE_URL", "https://api.scryfall.com")
    SCRYFALL_TIMEOUT      = float(os.getenv("SCRYFALL_TIMEOUT", "10"))
    SCRYFALL_MAX_RETRIES  = int(os.getenv("SCRYFALL_MAX_RETRIES", "3"))
    SCRYFALL_MIN_INTERVAL = float(os.getenv("SCRYFALL_MIN_INTERVAL", "0.1"))  # Scryfall asks for 50-100 ms

    # Price tracking
    PRICE_STALE_HOURS = int(os.getenv("PRICE_STALE_HOURS", "24"))


class DevelopmentConfig(BaseConfig):
    DEBUG     = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")


class TestingConfig(BaseConfig):
    TESTING                 = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    WTF_CSRF_ENABLED        = False
    RATELIMIT_ENABLED       = False
    SCRYFALL_MIN_INTERVAL   = 0.0


class ProductionConfig(BaseConfig):
    DEBUG                 = False
    SESSION_COOKIE_SECURE = True


config = {
    "development": DevelopmentConfig,
    "testing":     TestingConfig,
    "production":  ProductionConfig,
    "default":     DevelopmentConfig,
}
