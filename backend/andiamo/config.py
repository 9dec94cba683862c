# backend/andiamo/config.py
from __future__ import annotations
import os
from datetime import timedelta


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # Postgres in production, local SQLite file otherwise
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///andiamo.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Admin sessions: signed JWT carried in an HttpOnly cookie
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", os.environ.get("JWT_SECRET", "fallback-secret-dev-only"))
    JWT_TOKEN_LOCATION = ["cookies"]
    JWT_ACCESS_COOKIE_NAME = "adminToken"
    JWT_ACCESS_COOKIE_PATH = "/"
    JWT_COOKIE_SAMESITE = "Lax"
    JWT_COOKIE_SECURE = _env_flag("COOKIE_SECURE")
    JWT_COOKIE_DOMAIN = os.environ.get("COOKIE_DOMAIN") or None
    JWT_COOKIE_CSRF_PROTECT = False
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(seconds=int(os.environ.get("ADMIN_TOKEN_TTL_SECONDS", "3600")))

    CORS_ALLOWED_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:4173,http://127.0.0.1:4173",
        ).split(",")
        if origin.strip()
    ]

    # WinSMS gateway
    WINSMS_API_KEY = os.environ.get("WINSMS_API_KEY")
    WINSMS_API_URL = os.environ.get("WINSMS_API_URL", "https://www.winsmspro.com/sms/sms/api")
    WINSMS_SENDER = os.environ.get("WINSMS_SENDER", "Andiamo")

    # Outgoing mail
    SMTP_HOST = os.environ.get("SMTP_HOST")
    SMTP_PORT = int(os.environ.get("SMTP_PORT", "587"))
    SMTP_USER = os.environ.get("SMTP_USER")
    SMTP_PASSWORD = os.environ.get("SMTP_PASSWORD")
    EMAIL_FROM = os.environ.get("EMAIL_FROM", "contact@andiamoevents.com")

    # Shared secret for the expired-order sweeper (cron)
    CRON_SECRET = os.environ.get("CRON_SECRET")

    DEFAULT_CASH_TIMEOUT_HOURS = int(os.environ.get("DEFAULT_CASH_TIMEOUT_HOURS", "24"))
