from __future__ import annotations

from typing import Iterable, Optional

from ..core.exceptions import OverlappingTierRange
from .model import DeductionTier


def ensure_fits_scope(candidate: DeductionTier, existing: Iterable[DeductionTier]) -> None:
    """Reject a tier that collides with the other tiers of its scope.

    ``existing`` may include the candidate's own previous version (same id); it is skipped.
    """

    for other in existing:
        if other.teacher_id != candidate.teacher_id:
            continue
        if candidate.tier_id is not None and other.tier_id == candidate.tier_id:
            continue
        if candidate.is_unlimited and other.is_unlimited:
            raise OverlappingTierRange(
                f"Scope {_scope_label(candidate.teacher_id)} already has an unlimited tier (id={other.tier_id})",
                field="endMinute",
            )
        if candidate.overlaps(other):
            raise OverlappingTierRange(
                f"Minute range {_range_label(candidate)} overlaps tier id={other.tier_id} "
                f"({_range_label(other)}) in scope {_scope_label(candidate.teacher_id)}",
                field="startMinute",
            )


def _scope_label(teacher_id: Optional[str]) -> str:
    return "Global" if teacher_id is None else f"teacher {teacher_id}"


def _range_label(tier: DeductionTier) -> str:
    if tier.end_minute is None:
        return f"{tier.start_minute}+"
    return f"{tier.start_minute}-{tier.end_minute}"
