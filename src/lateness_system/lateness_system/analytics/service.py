from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

from ..common.cancellation import CancellationToken
from ..core.constants import (
    DEFAULT_ABSENCE_BASE_AMOUNT,
    DEFAULT_ANALYTICS_MAX_DAYS,
    DEFAULT_LATENESS_BASE_AMOUNT,
)
from ..core.enums import GroupBy, SortKey
from ..core.exceptions import ValidationError
from ..deductions.model import ResolvedDeduction
from ..deductions.resolver import TierResolver
from ..deductions.snapshot import TierConfigSnapshot
from ..deductions.warnings import ResolutionWarning, collect_warnings
from ..events.source import EventSource
from ..packages.repository import PackageBaseAmountRepository
from ..tiers.repository import TierRepository
from ..waivers.repository import WaiverRepository
from .aggregator import EventAggregator
from .model import AggregateRow, AnalyticsFilter, Breakdown

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalyticsReport:
    daily_trend: List[AggregateRow]
    controller_data: List[AggregateRow]
    teacher_data: List[AggregateRow]
    unresolved_events: int = 0
    waived_events: int = 0
    warnings: List[ResolutionWarning] = field(default_factory=list)


@dataclass(frozen=True)
class BreakdownReport:
    breakdown: Breakdown
    warnings: List[ResolutionWarning] = field(default_factory=list)


class AnalyticsService:
    """Fetch one event slice, resolve it against current config, aggregate it.

    Nothing is cached or stored: every call reloads the configuration, so edits to
    tiers, base amounts or waivers show up in the very next report.
    """

    def __init__(
        self,
        events: EventSource,
        tiers: TierRepository,
        packages: PackageBaseAmountRepository,
        *,
        aggregator: Optional[EventAggregator] = None,
        default_lateness_amount: Decimal = DEFAULT_LATENESS_BASE_AMOUNT,
        default_absence_amount: Decimal = DEFAULT_ABSENCE_BASE_AMOUNT,
        max_workers: int = 1,
        timeout_seconds: Optional[float] = None,
        waivers: Optional[WaiverRepository] = None,
        max_days: int = DEFAULT_ANALYTICS_MAX_DAYS,
    ):
        self._events = events
        self._tiers = tiers
        self._packages = packages
        self._max_workers = max(int(max_workers), 1)
        self._aggregator = aggregator or EventAggregator(max_workers=self._max_workers)
        self._default_lateness = Decimal(default_lateness_amount)
        self._default_absence = Decimal(default_absence_amount)
        self._timeout_seconds = timeout_seconds
        self._waivers = waivers
        self._max_days = max(int(max_days), 1)

    def new_cancel_token(self) -> CancellationToken:
        return CancellationToken(timeout_seconds=self._timeout_seconds)

    def make_filter(
        self,
        *,
        start: date,
        end: date,
        controller_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
    ) -> AnalyticsFilter:
        flt = AnalyticsFilter(start_date=start, end_date=end, controller_id=controller_id, teacher_id=teacher_id)
        if flt.days > self._max_days:
            raise ValidationError(f"Date range must not exceed {self._max_days} days", field="to")
        return flt

    def build_resolver(self, flt: Optional[AnalyticsFilter] = None, *, apply_waivers: bool = True) -> TierResolver:
        window = (flt.start_date, flt.end_date) if flt is not None else None
        snapshot = TierConfigSnapshot.load(
            self._tiers,
            self._packages,
            default_lateness_amount=self._default_lateness,
            default_absence_amount=self._default_absence,
            waivers=self._waivers if apply_waivers else None,
            window=window,
        )
        return TierResolver(snapshot)

    def resolve_window(
        self,
        flt: AnalyticsFilter,
        cancel_token: Optional[CancellationToken] = None,
        *,
        apply_waivers: bool = True,
    ) -> List[ResolvedDeduction]:
        token = cancel_token or self.new_cancel_token()
        events = self._events.fetch_events(
            start_date=flt.start_date,
            end_date=flt.end_date,
            controller_id=flt.controller_id,
            teacher_id=flt.teacher_id,
        )
        token.raise_if_cancelled()

        resolver = self.build_resolver(flt, apply_waivers=apply_waivers)
        resolved = resolver.resolve_many(events, cancel_token=token, max_workers=self._max_workers)
        logger.debug("Resolved %d events for %s..%s", len(resolved), flt.start_date, flt.end_date)
        return resolved

    def build_analytics(
        self,
        *,
        start: date,
        end: date,
        controller_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
        sort_by: SortKey = SortKey.NAME,
        descending: bool = False,
        cancel_token: Optional[CancellationToken] = None,
    ) -> AnalyticsReport:
        token = cancel_token or self.new_cancel_token()
        flt = self.make_filter(start=start, end=end, controller_id=controller_id, teacher_id=teacher_id)
        resolved = self.resolve_window(flt, token)

        daily = self._aggregator.daily_trend(resolved, flt, cancel_token=token)
        controllers = self._aggregator.aggregate_parallel(
            resolved, GroupBy.CONTROLLER, flt, sort_by=sort_by, descending=descending, cancel_token=token
        )
        teachers = self._aggregator.aggregate_parallel(
            resolved, GroupBy.TEACHER, flt, sort_by=sort_by, descending=descending, cancel_token=token
        )
        totals = self._aggregator.summarize(resolved, flt)

        return AnalyticsReport(
            daily_trend=daily,
            controller_data=controllers,
            teacher_data=teachers,
            unresolved_events=totals.unresolved_events,
            waived_events=totals.waived_events,
            warnings=collect_warnings(resolved),
        )

    def build_breakdown(
        self,
        *,
        start: date,
        end: date,
        controller_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> BreakdownReport:
        if not controller_id and not teacher_id:
            raise ValidationError("controllerId or teacherId is required", field="controllerId")

        token = cancel_token or self.new_cancel_token()
        flt = self.make_filter(start=start, end=end, controller_id=controller_id, teacher_id=teacher_id)
        resolved = self.resolve_window(flt, token)

        breakdown = self._aggregator.breakdown(resolved, flt, cancel_token=token)
        return BreakdownReport(breakdown=breakdown, warnings=collect_warnings(breakdown.records))
