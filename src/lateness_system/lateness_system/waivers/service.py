from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from ..analytics.service import AnalyticsService
from ..common.cancellation import CancellationToken
from ..core.enums import DeductionOutcome
from ..core.exceptions import NotFoundError
from .model import DeductionWaiver, WaiverPreview, WaiverPreviewRow, WaiverRequest, WaiverResult
from .repository import WaiverRepository

logger = logging.getLogger(__name__)


class DeductionWaiverService:
    """Admin waivers for lateness deductions.

    A waiver covers one teacher for one calendar day. Amounts come from the same
    resolver the analytics use, computed with waivers switched off so the preview
    shows what each teacher-day would cost.
    """

    def __init__(self, waivers: WaiverRepository, analytics: AnalyticsService):
        self._waivers = waivers
        self._analytics = analytics

    def list_waivers(
        self,
        *,
        start: date,
        end: date,
        teacher_id: Optional[str] = None,
    ) -> Sequence[DeductionWaiver]:
        flt = self._analytics.make_filter(start=start, end=end, teacher_id=teacher_id)
        return self._waivers.list_in_window(start_date=flt.start_date, end_date=flt.end_date, teacher_id=teacher_id)

    def preview(
        self,
        data: Mapping[str, Any],
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> WaiverPreview:
        req = WaiverRequest.from_dict(data, require_reason=False)
        return self._preview(req, cancel_token)

    def _preview(self, req: WaiverRequest, cancel_token: Optional[CancellationToken]) -> WaiverPreview:
        # One teacher narrows the fetch; several share one window query.
        single = req.teacher_ids[0] if len(req.teacher_ids) == 1 else None
        flt = self._analytics.make_filter(start=req.start_date, end=req.end_date, teacher_id=single)
        resolved = self._analytics.resolve_window(flt, cancel_token, apply_waivers=False)

        wanted = set(req.teacher_ids)
        amounts: Dict[Tuple[str, date], Decimal] = defaultdict(Decimal)
        counts: Dict[Tuple[str, date], int] = defaultdict(int)
        names: Dict[str, str] = {}
        for r in resolved:
            e = r.event
            if e is None or e.teacher_id not in wanted:
                continue
            if r.outcome != DeductionOutcome.MATCHED or r.deduction_applied <= 0:
                continue
            key = (e.teacher_id, e.event_date)
            amounts[key] += r.deduction_applied
            counts[key] += 1
            names.setdefault(e.teacher_id, e.teacher_name or e.teacher_id)

        existing = {
            w.key
            for w in self._waivers.list_in_window(start_date=flt.start_date, end_date=flt.end_date, teacher_id=single)
        }
        rows = [
            WaiverPreviewRow(
                teacher_id=teacher_id,
                teacher_name=names[teacher_id],
                waiver_date=day,
                events=counts[(teacher_id, day)],
                amount=amount,
                already_waived=(teacher_id, day) in existing,
            )
            for (teacher_id, day), amount in amounts.items()
        ]
        rows.sort(key=lambda row: (row.teacher_id, row.waiver_date))
        return WaiverPreview(rows=rows)

    def apply(
        self,
        data: Mapping[str, Any],
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> WaiverResult:
        """Waive every teacher-day in the request that still costs something.

        Days already waived are skipped, so re-sending the same request is a no-op.
        """

        req = WaiverRequest.from_dict(data)
        preview = self._preview(req, cancel_token)

        pending = [
            DeductionWaiver(
                waiver_id=None,
                teacher_id=row.teacher_id,
                waiver_date=row.waiver_date,
                original_amount=row.amount,
                reason=req.reason or "",
                admin_id=req.admin_id,
            )
            for row in preview.pending
        ]
        created = list(self._waivers.create_many(pending)) if pending else []
        result = WaiverResult(created=created)
        logger.info(
            "Waived %d teacher-days (%s..%s) total=%s teachers=%d admin=%s",
            result.records_affected,
            req.start_date,
            req.end_date,
            result.total_amount_waived,
            result.affected_teachers,
            req.admin_id or "-",
        )
        return result

    def delete_waiver(self, waiver_id: int) -> None:
        if not self._waivers.delete(int(waiver_id)):
            raise NotFoundError(f"Waiver {waiver_id} does not exist")
        logger.info("Deleted waiver id=%s", waiver_id)
