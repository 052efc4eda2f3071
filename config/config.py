"""Shared defaults for every environment module."""

import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "dev-secret-key"

    # Cấu hình DB
    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "lateness_db")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Deduction defaults when a package has no configured base amount
    DEFAULT_LATENESS_BASE_AMOUNT = os.environ.get("DEFAULT_LATENESS_BASE_AMOUNT", "30")
    DEFAULT_ABSENCE_BASE_AMOUNT = os.environ.get("DEFAULT_ABSENCE_BASE_AMOUNT", "25")
    CURRENCY = os.environ.get("CURRENCY", "ETB")

    ANALYTICS_MAX_WORKERS = int(os.environ.get("ANALYTICS_MAX_WORKERS", "1"))
    ANALYTICS_TIMEOUT_SECONDS = float(os.environ.get("ANALYTICS_TIMEOUT_SECONDS", "30"))
    # Longest from..to window (inclusive days) a report may cover.
    ANALYTICS_MAX_DAYS = int(os.environ.get("ANALYTICS_MAX_DAYS", "366"))

    @classmethod
    def db_config(cls) -> dict:
        return {
            "host": cls.DB_HOST,
            "port": cls.DB_PORT,
            "user": cls.DB_USER,
            "password": cls.DB_PASSWORD,
            "database": cls.DB_NAME,
        }
