from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal


class DeductionCalculator(ABC):
    """Calculator interface (Strategy Pattern for deduction amounts)."""

    @abstractmethod
    def amount(self, base_amount: Decimal, deduction_percent: Decimal) -> Decimal:
        raise NotImplementedError
