# backend/config.py
import os
from datetime import timedelta


def _int_or_none(raw):
    if raw in (None, ""):
        return None
    return int(raw)


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "dev-jwt-secret-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "mysql+pymysql://root:@localhost/taskflow"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # 🔐 JWT config (tokens are issued by the identity provider, we only verify)
    JWT_TOKEN_LOCATION = ["headers"]
    JWT_HEADER_NAME = "Authorization"
    JWT_HEADER_TYPE = "Bearer"
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=7)

    # "sql" (default) or "memory" for the task-tracker store
    TASKFLOW_STORE = os.environ.get("TASKFLOW_STORE", "sql")

    # dev only: user id to act as when no token is sent
    MOCK_USER_ID = _int_or_none(os.environ.get("MOCK_USER_ID"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "test-jwt-secret-with-enough-length-for-hs256"
    TASKFLOW_STORE = "sql"
    MOCK_USER_ID = None
    LOG_LEVEL = "DEBUG"
