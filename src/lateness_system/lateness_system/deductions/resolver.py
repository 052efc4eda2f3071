from __future__ import annotations

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from ..common.cancellation import CancellationToken, check_cancelled
from ..core.constants import RESOLVE_CHUNK_SIZE
from ..core.enums import DeductionOutcome
from ..core.exceptions import ValidationError
from ..events.model import LatenessEvent
from ..packages.model import EffectiveBaseAmounts
from ..tiers.model import DeductionTier
from .calculator.base import DeductionCalculator
from .calculator.percent_calculator import PercentOfBaseCalculator
from .model import ResolvedDeduction
from .snapshot import TierConfigSnapshot

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


def _tier_order(t: DeductionTier) -> tuple:
    return (t.tier, t.start_minute, t.tier_id if t.tier_id is not None else 0)


class TierResolver:
    """Maps lateness minutes to a deduction using one configuration snapshot.

    Scope rule: when a teacher has any tiers of their own, only those apply. Global tiers
    are used for everyone else. The two sets are never merged, so gaps in a teacher's
    own tiers resolve to Unconfigured.
    """

    def __init__(self, snapshot: TierConfigSnapshot, *, calculator: Optional[DeductionCalculator] = None):
        self._snapshot = snapshot
        self._calculator = calculator or PercentOfBaseCalculator()

        global_tiers: List[DeductionTier] = []
        by_teacher: Dict[str, List[DeductionTier]] = defaultdict(list)
        for t in snapshot.tiers:
            if t.teacher_id is None:
                global_tiers.append(t)
            else:
                by_teacher[t.teacher_id].append(t)

        self._global = sorted(global_tiers, key=_tier_order)
        self._by_teacher = {k: sorted(v, key=_tier_order) for k, v in by_teacher.items()}

    def tiers_for(self, teacher_id: Optional[str]) -> Sequence[DeductionTier]:
        if teacher_id is not None and str(teacher_id) in self._by_teacher:
            return self._by_teacher[str(teacher_id)]
        return self._global

    @staticmethod
    def excused_threshold(tiers: Sequence[DeductionTier]) -> int:
        return min((t.excused_threshold for t in tiers), default=0)

    def lateness_base_amount(self, package_name: str) -> Tuple[Decimal, bool]:
        amount = self._snapshot.base_amounts.get(package_name or "")
        if amount is None:
            return self._snapshot.default_lateness_amount, True
        return amount.lateness_base_amount, False

    def resolve_absence(self, package_name: str) -> Tuple[Decimal, bool]:
        """Absence base amount for a package and whether it fell back to the default."""

        amount = self._snapshot.base_amounts.get(package_name or "")
        if amount is None:
            return self._snapshot.default_absence_amount, True
        return amount.absence_base_amount, False

    def effective_amounts(self, package_name: str) -> EffectiveBaseAmounts:
        name = (package_name or "").strip()
        lateness, lateness_defaulted = self.lateness_base_amount(name)
        absence, absence_defaulted = self.resolve_absence(name)
        return EffectiveBaseAmounts(
            package_name=name,
            lateness_base_amount=lateness,
            absence_base_amount=absence,
            defaulted=lateness_defaulted or absence_defaulted,
        )

    def resolve(
        self,
        teacher_id: str,
        package_name: str,
        lateness_minutes: int,
        *,
        event: Optional[LatenessEvent] = None,
    ) -> ResolvedDeduction:
        if lateness_minutes < 0:
            raise ValidationError("latenessMinutes must not be negative", field="latenessMinutes")

        tiers = self.tiers_for(teacher_id)
        threshold = self.excused_threshold(tiers)

        if lateness_minutes <= threshold:
            return ResolvedDeduction(
                teacher_id=teacher_id,
                package_name=package_name,
                lateness_minutes=lateness_minutes,
                outcome=DeductionOutcome.EXCUSED,
                deduction_percent=_ZERO,
                base_amount=_ZERO,
                deduction_applied=_ZERO,
                excused_threshold=threshold,
                event=event,
            )

        # tiers are pre-sorted, so the first match has the lowest ordering number.
        matches = [t for t in tiers if t.contains(lateness_minutes)]
        if not matches:
            logger.debug(
                "No tier covers %s minutes (teacher=%s, %d tiers in scope)",
                lateness_minutes,
                teacher_id,
                len(tiers),
            )
            return ResolvedDeduction(
                teacher_id=teacher_id,
                package_name=package_name,
                lateness_minutes=lateness_minutes,
                outcome=DeductionOutcome.UNCONFIGURED,
                deduction_percent=_ZERO,
                base_amount=_ZERO,
                deduction_applied=_ZERO,
                excused_threshold=threshold,
                event=event,
            )

        tier = matches[0]
        if len(matches) > 1:
            logger.debug(
                "Tiers %s all cover %s minutes (teacher=%s); using tier id=%s",
                [t.tier_id for t in matches],
                lateness_minutes,
                teacher_id,
                tier.tier_id,
            )

        base_amount, defaulted = self.lateness_base_amount(package_name)
        return ResolvedDeduction(
            teacher_id=teacher_id,
            package_name=package_name,
            lateness_minutes=lateness_minutes,
            outcome=DeductionOutcome.MATCHED,
            deduction_percent=tier.deduction_percent,
            base_amount=base_amount,
            deduction_applied=self._calculator.amount(base_amount, tier.deduction_percent),
            matched_tier=tier,
            excused_threshold=threshold,
            base_amount_defaulted=defaulted,
            tier_conflict=len(matches) > 1,
            event=event,
        )

    def is_waived(self, teacher_id: str, day: date) -> bool:
        return (teacher_id, day) in self._snapshot.waived

    def resolve_event(self, event: LatenessEvent) -> ResolvedDeduction:
        r = self.resolve(event.teacher_id, event.package_name, event.lateness_minutes, event=event)
        if r.outcome == DeductionOutcome.MATCHED and self.is_waived(event.teacher_id, event.event_date):
            return replace(r, deduction_applied=_ZERO, waived=True, waived_amount=r.deduction_applied)
        return r

    def _resolve_chunk(
        self, events: Sequence[LatenessEvent], cancel_token: Optional[CancellationToken]
    ) -> List[ResolvedDeduction]:
        check_cancelled(cancel_token)
        return [self.resolve_event(e) for e in events]

    def resolve_many(
        self,
        events: Sequence[LatenessEvent],
        *,
        cancel_token: Optional[CancellationToken] = None,
        max_workers: int = 1,
        chunk_size: int = RESOLVE_CHUNK_SIZE,
    ) -> List[ResolvedDeduction]:
        """Resolve a batch, preserving input order.

        With ``max_workers > 1`` chunks are resolved in a thread pool; each chunk checks
        the cancellation token before starting.
        """

        size = max(int(chunk_size), 1)
        chunks = [events[i : i + size] for i in range(0, len(events), size)]
        if max_workers <= 1 or len(chunks) <= 1:
            out: List[ResolvedDeduction] = []
            for chunk in chunks:
                out.extend(self._resolve_chunk(chunk, cancel_token))
            return out

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = executor.map(lambda c: self._resolve_chunk(c, cancel_token), chunks)
            return [r for chunk_result in results for r in chunk_result]
