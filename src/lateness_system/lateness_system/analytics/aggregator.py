from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from ..common.cancellation import CancellationToken, check_cancelled
from ..common.datetime_utils import iter_days
from ..core.enums import GroupBy, SortKey
from ..deductions.model import ResolvedDeduction
from .model import AggregateRow, AnalyticsFilter, Breakdown, BreakdownSummary

# How often (in events) long loops look at the cancellation token.
_CANCEL_CHECK_EVERY = 1000

KeyFunc = Callable[[ResolvedDeduction], Optional[Tuple[str, str]]]


def _controller_key(r: ResolvedDeduction) -> Optional[Tuple[str, str]]:
    e = r.event
    if e.controller_id is None:
        return None
    return e.controller_id, e.controller_name or e.controller_id


def _teacher_key(r: ResolvedDeduction) -> Optional[Tuple[str, str]]:
    e = r.event
    return e.teacher_id, e.teacher_name or e.teacher_id


def _student_key(r: ResolvedDeduction) -> Optional[Tuple[str, str]]:
    e = r.event
    return e.student_id, e.student_name or e.student_id


def _day_key(r: ResolvedDeduction) -> Optional[Tuple[str, str]]:
    d = r.event.event_date.isoformat()
    return d, d


_KEY_FUNCS: Dict[GroupBy, KeyFunc] = {
    GroupBy.CONTROLLER: _controller_key,
    GroupBy.TEACHER: _teacher_key,
    GroupBy.STUDENT: _student_key,
    GroupBy.DAY: _day_key,
}


class _Accumulator:
    __slots__ = (
        "key",
        "name",
        "events",
        "minutes",
        "deduction",
        "unresolved",
        "waived",
        "waived_amount",
        "teacher_name",
        "students",
    )

    def __init__(self, key: str, name: str, *, track_students: bool = False):
        self.key = key
        self.name = name
        self.events = 0
        self.minutes = 0
        self.deduction = Decimal("0")
        self.unresolved = 0
        self.waived = 0
        self.waived_amount = Decimal("0")
        self.teacher_name: Optional[str] = None
        self.students: Optional[Set[str]] = set() if track_students else None

    def add(self, r: ResolvedDeduction) -> None:
        self.events += 1
        self.minutes += r.lateness_minutes
        if r.is_unconfigured:
            self.unresolved += 1
        else:
            self.deduction += r.deduction_applied
        if r.waived:
            self.waived += 1
            self.waived_amount += r.waived_amount
        if self.students is not None:
            self.students.add(r.event.student_id)

    def to_row(self) -> AggregateRow:
        return AggregateRow(
            key=self.key,
            name=self.name,
            total_events=self.events,
            total_lateness_minutes=self.minutes,
            total_deduction=self.deduction,
            unresolved_events=self.unresolved,
            waived_events=self.waived,
            teacher_name=self.teacher_name,
            student_count=len(self.students) if self.students is not None else None,
        )


def _sort_value(row: AggregateRow, sort_by: SortKey):
    if sort_by == SortKey.TOTAL_EVENTS:
        return row.total_events
    if sort_by == SortKey.TOTAL_LATENESS:
        return row.total_lateness_minutes
    if sort_by == SortKey.AVERAGE_LATENESS:
        return row.average_lateness
    if sort_by == SortKey.TOTAL_DEDUCTION:
        return row.total_deduction
    return row.name.casefold()


def sort_rows(rows: Iterable[AggregateRow], sort_by: SortKey = SortKey.NAME, *, descending: bool = False) -> List[AggregateRow]:
    """Sort by ``sort_by`` with ties broken by name then key, both ascending.

    Python's sort is stable (also with reverse=True), so the tie-break order from the
    first pass survives the second.
    """

    out = sorted(rows, key=lambda r: (r.name.casefold(), r.key))
    if sort_by != SortKey.NAME or descending:
        out.sort(key=lambda r: _sort_value(r, sort_by), reverse=descending)
    return out


class EventAggregator:
    """Folds resolved deductions into grouped statistics.

    Every method filters its input with the given AnalyticsFilter first and never
    re-fetches anything, so numbers computed from the same slice always agree.
    """

    def __init__(self, *, max_workers: int = 1):
        self._max_workers = max(int(max_workers), 1)

    @staticmethod
    def filter_events(
        resolved: Iterable[ResolvedDeduction],
        flt: Optional[AnalyticsFilter] = None,
    ) -> List[ResolvedDeduction]:
        items = [r for r in resolved if r.event is not None]
        if flt is None:
            return items
        return [r for r in items if flt.matches(r)]

    @staticmethod
    def _fold(
        resolved: Sequence[ResolvedDeduction],
        group_by: GroupBy,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Dict[str, _Accumulator]:
        key_func = _KEY_FUNCS[group_by]
        groups: Dict[str, _Accumulator] = {}
        for i, r in enumerate(resolved):
            if i % _CANCEL_CHECK_EVERY == 0:
                check_cancelled(cancel_token)
            k = key_func(r)
            if k is None:
                continue
            acc = groups.get(k[0])
            if acc is None:
                acc = _Accumulator(k[0], k[1], track_students=group_by == GroupBy.TEACHER)
                if group_by == GroupBy.STUDENT:
                    acc.teacher_name = r.event.teacher_name or r.event.teacher_id
                groups[k[0]] = acc
            acc.add(r)
        return groups

    def aggregate(
        self,
        resolved: Iterable[ResolvedDeduction],
        group_by: GroupBy,
        flt: Optional[AnalyticsFilter] = None,
        *,
        sort_by: SortKey = SortKey.NAME,
        descending: bool = False,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[AggregateRow]:
        items = self.filter_events(resolved, flt)
        groups = self._fold(items, group_by, cancel_token)
        return sort_rows((a.to_row() for a in groups.values()), sort_by, descending=descending)

    def aggregate_parallel(
        self,
        resolved: Iterable[ResolvedDeduction],
        group_by: GroupBy,
        flt: Optional[AnalyticsFilter] = None,
        *,
        sort_by: SortKey = SortKey.NAME,
        descending: bool = False,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[AggregateRow]:
        """Same result as ``aggregate``; partitions by group key and folds them in a thread pool."""

        items = self.filter_events(resolved, flt)
        key_func = _KEY_FUNCS[group_by]

        partitions: Dict[str, List[ResolvedDeduction]] = {}
        for r in items:
            k = key_func(r)
            if k is not None:
                partitions.setdefault(k[0], []).append(r)

        if self._max_workers <= 1 or len(partitions) <= 1:
            return self.aggregate(items, group_by, sort_by=sort_by, descending=descending, cancel_token=cancel_token)

        # Partitions are disjoint by key, so the fan-in is a plain concatenation.
        rows: List[AggregateRow] = []
        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            futures = [
                executor.submit(self._fold, part, group_by, cancel_token)
                for part in partitions.values()
            ]
            for future in futures:
                rows.extend(a.to_row() for a in future.result().values())

        return sort_rows(rows, sort_by, descending=descending)

    def summarize(
        self,
        resolved: Iterable[ResolvedDeduction],
        flt: Optional[AnalyticsFilter] = None,
        *,
        key: str = "all",
        name: str = "All",
    ) -> AggregateRow:
        """Single totals row; zeroed (average 0) when nothing matches."""

        acc = _Accumulator(key, name)
        for r in self.filter_events(resolved, flt):
            acc.add(r)
        return acc.to_row()

    def daily_trend(
        self,
        resolved: Iterable[ResolvedDeduction],
        flt: AnalyticsFilter,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[AggregateRow]:
        """One row per calendar day in the filter window, days without events included."""

        groups = self._fold(self.filter_events(resolved, flt), GroupBy.DAY, cancel_token)
        out: List[AggregateRow] = []
        for d in iter_days(flt.start_date, flt.end_date):
            check_cancelled(cancel_token)
            key = d.isoformat()
            acc = groups.get(key)
            out.append(acc.to_row() if acc else AggregateRow(key=key, name=key))
        return out

    def breakdown(
        self,
        resolved: Iterable[ResolvedDeduction],
        flt: AnalyticsFilter,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Breakdown:
        """Deep review for one controller or teacher.

        Totals, unique counts and the teacher/student/daily tabs are all filled in the
        same loop over one filtered slice.
        """

        items = self.filter_events(resolved, flt)

        total = _Accumulator("all", "All")
        teachers: Dict[str, _Accumulator] = {}
        students: Dict[str, _Accumulator] = {}
        days: Dict[str, _Accumulator] = {}

        for i, r in enumerate(items):
            if i % _CANCEL_CHECK_EVERY == 0:
                check_cancelled(cancel_token)
            total.add(r)

            e = r.event
            t = teachers.get(e.teacher_id)
            if t is None:
                t = teachers[e.teacher_id] = _Accumulator(e.teacher_id, e.teacher_name or e.teacher_id, track_students=True)
            t.add(r)

            s = students.get(e.student_id)
            if s is None:
                s = students[e.student_id] = _Accumulator(e.student_id, e.student_name or e.student_id)
                s.teacher_name = e.teacher_name or e.teacher_id
            s.add(r)

            day = e.event_date.isoformat()
            d = days.get(day)
            if d is None:
                d = days[day] = _Accumulator(day, day)
            d.add(r)

        records = sorted(items, key=lambda r: ((r.event.student_name or r.event.student_id).casefold(), r.event.student_id))
        records.sort(key=lambda r: (r.event.event_date, r.lateness_minutes), reverse=True)

        controller_scoped = bool(flt.controller_id)
        summary = BreakdownSummary(
            total_events=total.events,
            total_lateness_minutes=total.minutes,
            total_deduction=total.deduction,
            unresolved_events=total.unresolved,
            controller_id=flt.controller_id,
            waived_events=total.waived,
            waived_amount=total.waived_amount,
            teacher_id=flt.teacher_id,
            unique_teachers=len(teachers) if controller_scoped else None,
            unique_students=len(students) if controller_scoped else None,
            teacher_statistics=sort_rows(a.to_row() for a in teachers.values()) if controller_scoped else None,
            student_statistics=sort_rows(a.to_row() for a in students.values()) if controller_scoped else None,
            daily_statistics=(
                sorted((a.to_row() for a in days.values()), key=lambda row: row.key, reverse=True)
                if controller_scoped
                else None
            ),
        )
        return Breakdown(summary=summary, records=records)
