import os

from config.config import Config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
DB_CONFIG = Config.db_config()

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

DEFAULT_LATENESS_BASE_AMOUNT = Config.DEFAULT_LATENESS_BASE_AMOUNT
DEFAULT_ABSENCE_BASE_AMOUNT = Config.DEFAULT_ABSENCE_BASE_AMOUNT
CURRENCY = Config.CURRENCY

ANALYTICS_MAX_WORKERS = int(os.getenv("ANALYTICS_MAX_WORKERS", "4"))
ANALYTICS_TIMEOUT_SECONDS = Config.ANALYTICS_TIMEOUT_SECONDS
ANALYTICS_MAX_DAYS = Config.ANALYTICS_MAX_DAYS
