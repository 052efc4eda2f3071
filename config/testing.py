import os

from config.config import Config

SECRET_KEY = "test-secret"
DB_CONFIG = dict(Config.db_config(), database=os.getenv("DB_NAME", "lateness_test_db"))

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

DEFAULT_LATENESS_BASE_AMOUNT = "30"
DEFAULT_ABSENCE_BASE_AMOUNT = "25"
CURRENCY = "ETB"

ANALYTICS_MAX_WORKERS = 2
ANALYTICS_TIMEOUT_SECONDS = 0
ANALYTICS_MAX_DAYS = 366
