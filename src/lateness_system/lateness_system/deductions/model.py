from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..core.enums import DeductionOutcome
from ..events.model import LatenessEvent
from ..tiers.model import DeductionTier


@dataclass(frozen=True)
class ResolvedDeduction:
    """Read-model: deduction for one event, recomputed on every query and never stored."""

    teacher_id: str
    package_name: str
    lateness_minutes: int
    outcome: DeductionOutcome
    deduction_percent: Decimal
    base_amount: Decimal
    deduction_applied: Decimal
    matched_tier: Optional[DeductionTier] = None
    excused_threshold: int = 0
    base_amount_defaulted: bool = False
    tier_conflict: bool = False
    # Waived teacher-date: deduction_applied is 0, waived_amount keeps what it would have been.
    waived: bool = False
    waived_amount: Decimal = Decimal("0")
    event: Optional[LatenessEvent] = None

    @property
    def is_unconfigured(self) -> bool:
        return self.outcome == DeductionOutcome.UNCONFIGURED

    @property
    def label(self) -> str:
        if self.outcome == DeductionOutcome.MATCHED and self.matched_tier is not None:
            label = f"Tier {self.matched_tier.tier}"
            return f"{label} (waived)" if self.waived else label
        if self.outcome == DeductionOutcome.EXCUSED:
            return "Excused"
        return "Unconfigured"
