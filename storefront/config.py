import os
from dotenv import load_dotenv
from pathlib import Path

from datetime import timedelta
from typing import Type

from flask import Flask

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s | %(name)-20s | %(levelname)-8s | %(message)s"
DEFAULT_LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LOG_FILE = None

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(dotenv_path=BASE_DIR / ".env")


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Base configuration – never use directly."""
    SECRET_KEY: str | None = os.getenv("APP_SECRET", "")
    JWT_SECRET_KEY: str | None = os.getenv("JWT_SECRET_KEY") or SECRET_KEY
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=1)

    # Bearer tokens only, no cookie sessions to protect
    WTF_CSRF_ENABLED = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL)
    LOG_FORMAT = os.getenv("LOG_FORMAT", DEFAULT_LOG_FORMAT)
    LOG_DATEFMT = os.getenv("LOG_DATEFMT", DEFAULT_LOG_DATEFMT)
    LOG_FILE = os.getenv("LOG_FILE", DEFAULT_LOG_FILE)

    DATABASE_URI = os.getenv(
        "DATABASE_URL", f"sqlite:///{os.path.join(os.getcwd(), 'instance', 'storefront.db')}"
    )

    DEFAULT_PAGE_SIZE = 10
    MAX_PAGE_SIZE = 20

    # Orders only check stock unless this is switched on
    DECREMENT_STOCK_ON_ORDER = _env_bool("DECREMENT_STOCK_ON_ORDER", False)

    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", 12))

    DEFAULT_ADMIN_USERNAME = os.getenv("DEFAULT_ADMIN_USERNAME", "admin")
    DEFAULT_ADMIN_EMAIL = os.getenv("DEFAULT_ADMIN_EMAIL", "admin@storefront.io")
    DEFAULT_ADMIN_PASSWORD = os.getenv("DEFAULT_ADMIN_PASSWORD", "Storefront")

    @staticmethod
    def init_app(app: Flask) -> None:
        pass


class DevelopmentConfig(Config):
    DEBUG = True
    HOST = "0.0.0.0"
    PORT = 5000
    SECRET_KEY = Config.SECRET_KEY or "super-secret-string"
    JWT_SECRET_KEY = Config.JWT_SECRET_KEY or SECRET_KEY

    @staticmethod
    def init_app(app: Flask) -> None:
        print("→ Development mode active")
        if len(app.secret_key or "") < 32:  # type: ignore
            print(
                "\033[93mWARNING: SECRET_KEY is weak or missing. "
                "Generate one with: python -c 'import secrets; print(secrets.token_hex(32))'\033[0m"
            )


class ProductionConfig(Config):
    HOST = "0.0.0.0"
    PORT = int(os.getenv("PORT", 5000))

    @staticmethod
    def init_app(app: Flask) -> None:
        # Tokens are signed with these, refuse to boot with garbage
        if not app.secret_key or len(app.secret_key) < 32:
            raise ValueError(
                "SECRET_KEY must be a strong 32+ byte value in production. "
                "Set it in .env or environment variables."
            )
        jwt_secret = app.config.get("JWT_SECRET_KEY") or ""
        if len(jwt_secret) < 32:
            raise ValueError("JWT_SECRET_KEY must be a strong 32+ byte value in production.")
        if app.config.get("DEFAULT_ADMIN_PASSWORD") == Config.DEFAULT_ADMIN_PASSWORD:
            raise ValueError("DEFAULT_ADMIN_PASSWORD must be changed in production.")


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "testing-secret-key-testing-secret-key"
    JWT_SECRET_KEY = "testing-jwt-secret-key-testing-jwt-secret"
    DATABASE_URI = os.getenv(
        "TEST_DATABASE_URL", f"sqlite:///{os.path.join(os.getcwd(), 'instance', 'testing.db')}"
    )
    BCRYPT_ROUNDS = 4
    DECREMENT_STOCK_ON_ORDER = False
    HOST = "localhost"
    PORT = 5000


config_by_name: dict[str, Type[Config]] = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}
