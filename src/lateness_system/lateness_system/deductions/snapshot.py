from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import AbstractSet, Mapping, Optional, Sequence, Tuple

from ..core.constants import DEFAULT_ABSENCE_BASE_AMOUNT, DEFAULT_LATENESS_BASE_AMOUNT
from ..packages.model import PackageBaseAmount
from ..packages.repository import PackageBaseAmountRepository
from ..tiers.model import DeductionTier
from ..tiers.repository import TierRepository
from ..waivers.repository import WaiverRepository


@dataclass(frozen=True)
class TierConfigSnapshot:
    """Configuration read once per request; resolvers never touch storage."""

    tiers: Sequence[DeductionTier]
    base_amounts: Mapping[str, PackageBaseAmount] = field(default_factory=dict)
    default_lateness_amount: Decimal = DEFAULT_LATENESS_BASE_AMOUNT
    default_absence_amount: Decimal = DEFAULT_ABSENCE_BASE_AMOUNT
    # (teacher_id, date) pairs whose lateness deductions are waived.
    waived: AbstractSet[Tuple[str, date]] = frozenset()

    @classmethod
    def load(
        cls,
        tiers: TierRepository,
        packages: PackageBaseAmountRepository,
        *,
        default_lateness_amount: Decimal = DEFAULT_LATENESS_BASE_AMOUNT,
        default_absence_amount: Decimal = DEFAULT_ABSENCE_BASE_AMOUNT,
        waivers: Optional[WaiverRepository] = None,
        window: Optional[Tuple[date, date]] = None,
    ) -> "TierConfigSnapshot":
        waived: frozenset = frozenset()
        if waivers is not None and window is not None:
            waived = frozenset(w.key for w in waivers.list_in_window(start_date=window[0], end_date=window[1]))

        return cls(
            tiers=tuple(tiers.list_all()),
            base_amounts={p.package_name: p for p in packages.list_all()},
            default_lateness_amount=Decimal(default_lateness_amount),
            default_absence_amount=Decimal(default_absence_amount),
            waived=waived,
        )
