"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_LATENESS_BASE_AMOUNT = Decimal("30")
DEFAULT_ABSENCE_BASE_AMOUNT = Decimal("25")
DEFAULT_CURRENCY = "ETB"

DEFAULT_ANALYTICS_MAX_WORKERS = 1
DEFAULT_ANALYTICS_TIMEOUT_SECONDS = 30.0

# Events resolved per worker task in resolve_many.
RESOLVE_CHUNK_SIZE = 500

MONEY_QUANT = Decimal("0.01")

# Column limits (database/schema.sql); writes outside them are rejected, not rounded.
MAX_INT_COLUMN = 2_147_483_647
MAX_PERCENT = Decimal("99999.99")  # DECIMAL(7, 2)
MAX_AMOUNT = Decimal("99999999.99")  # DECIMAL(10, 2)
MONEY_PLACES = 2
MAX_ID_LENGTH = 64
MAX_NAME_LENGTH = 191
MAX_REASON_LENGTH = 500

DEFAULT_ANALYTICS_MAX_DAYS = 366
