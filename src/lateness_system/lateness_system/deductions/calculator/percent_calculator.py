from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from ...core.constants import MONEY_QUANT
from .base import DeductionCalculator


class PercentOfBaseCalculator(DeductionCalculator):
    """Standard rule: base * percent / 100, rounded half up to 2 decimals."""

    def amount(self, base_amount: Decimal, deduction_percent: Decimal) -> Decimal:
        raw = Decimal(base_amount) * Decimal(deduction_percent) / Decimal(100)
        return raw.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)
