"""
config.py
-----------------
Application settings loaded from environment variables (.env supported).
Select the active class with APP_ENV=development|production|testing.
"""

import os
from dotenv import load_dotenv

load_dotenv(override=False)


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "sevak-dev-secret")

    # MongoDB
    MONGO_URI = os.environ.get("MONGO_URI", "mongodb://localhost:27017/Sevak")

    # JWT
    JWT_TOKEN_SECRET_KEY = os.environ.get("JWT_TOKEN_SECRET_KEY", "sevak-access-secret")
    JWT_REFRESH_TOKEN_SECRET_KEY = os.environ.get("JWT_REFRESH_TOKEN_SECRET_KEY", "sevak-refresh-secret")
    JWT_VERIFY_SECRET_KEY = os.environ.get("JWT_VERIFY_SECRET_KEY", "sevak-verify-secret")
    JWT_TOKEN_EXPIRE_MINUTES = int(os.environ.get("JWT_TOKEN_EXPIRE_MINUTES", "60"))
    JWT_REFRESH_TOKEN_EXPIRE_DAYS = int(os.environ.get("JWT_REFRESH_TOKEN_EXPIRE_DAYS", "7"))
    JWT_VERIFY_EXPIRE_HOURS = int(os.environ.get("JWT_VERIFY_EXPIRE_HOURS", "24"))

    CORS_ORIGIN = os.environ.get("CORS_ORIGIN", "*")

    # Logging
    LOG_DIR = os.environ.get("LOG_DIR", "logs")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    LOG_TO_FILE = True

    # Pagination
    DEFAULT_PAGE_LIMIT = int(os.environ.get("DEFAULT_PAGE_LIMIT", "20"))
    MAX_PAGE_LIMIT = int(os.environ.get("MAX_PAGE_LIMIT", "100"))

    # Seeder
    ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "admin@sevak.local")
    ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "Admin@123")

    DEBUG = False
    TESTING = False


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG").upper()


class ProductionConfig(Config):
    DEBUG = False


class TestingConfig(Config):
    TESTING = True
    MONGO_URI = "mongodb://localhost:27017/SevakTest"
    LOG_TO_FILE = False
    JWT_TOKEN_SECRET_KEY = "test-access-secret"
    JWT_REFRESH_TOKEN_SECRET_KEY = "test-refresh-secret"
    JWT_VERIFY_SECRET_KEY = "test-verify-secret"


def get_config():
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return ProductionConfig
    if env in {"test", "testing"}:
        return TestingConfig
    return DevelopmentConfig
