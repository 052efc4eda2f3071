import os

from config.config import Config

SECRET_KEY = Config.SECRET_KEY
DB_CONFIG = Config.db_config()

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed default tiers and packages on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

DEFAULT_LATENESS_BASE_AMOUNT = Config.DEFAULT_LATENESS_BASE_AMOUNT
DEFAULT_ABSENCE_BASE_AMOUNT = Config.DEFAULT_ABSENCE_BASE_AMOUNT
CURRENCY = Config.CURRENCY

ANALYTICS_MAX_WORKERS = Config.ANALYTICS_MAX_WORKERS
ANALYTICS_TIMEOUT_SECONDS = Config.ANALYTICS_TIMEOUT_SECONDS
ANALYTICS_MAX_DAYS = Config.ANALYTICS_MAX_DAYS
