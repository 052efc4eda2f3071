from __future__ import annotations

from decimal import Decimal
from typing import Optional

import pytest

from src.lateness_system.lateness_system.core.exceptions import (
    InvalidConfig,
    NotFoundError,
    OverlappingTierRange,
    ValidationError,
)
from src.lateness_system.lateness_system.tiers.model import DeductionTier
from src.lateness_system.lateness_system.tiers.rules import ensure_fits_scope
from src.lateness_system.lateness_system.tiers.service import TierConfigService


class InMemoryTiers:
    def __init__(self, tiers=None):
        self._tiers: dict[int, DeductionTier] = {}
        self._id = 0
        for t in tiers or []:
            self.create(t)

    def list_all(self):
        return sorted(self._tiers.values(), key=lambda t: (t.tier, t.start_minute))

    def list_for_scope(self, teacher_id: Optional[str]):
        return [t for t in self.list_all() if t.teacher_id == teacher_id]

    def get_by_id(self, tier_id: int) -> Optional[DeductionTier]:
        return self._tiers.get(tier_id)

    def create(self, tier: DeductionTier) -> int:
        self._id += 1
        self._tiers[self._id] = tier.with_id(self._id)
        return self._id

    def update(self, tier: DeductionTier) -> bool:
        if tier.tier_id not in self._tiers:
            return False
        self._tiers[tier.tier_id] = tier
        return True

    def delete(self, tier_id: int) -> bool:
        return self._tiers.pop(tier_id, None) is not None


def _tier(tier, start, end, percent, teacher_id=None, tier_id=None, threshold=3):
    return DeductionTier(
        tier_id=tier_id,
        teacher_id=teacher_id,
        tier=tier,
        excused_threshold=threshold,
        start_minute=start,
        end_minute=end,
        deduction_percent=Decimal(str(percent)),
    )


def test_from_dict_reads_admin_payload():
    t = DeductionTier.from_dict(
        {"teacherId": " T1 ", "tier": "2", "excusedThreshold": 3, "startMinute": 8, "endMinute": 15, "deductionPercent": "20.5"}
    )
    assert t.teacher_id == "T1"
    assert t.tier == 2
    assert t.end_minute == 15
    assert t.deduction_percent == Decimal("20.5")
    assert not t.is_global


def test_from_dict_global_and_unlimited_flags():
    t = DeductionTier.from_dict(
        {"isGlobal": True, "teacherId": "T1", "tier": 4, "startMinute": 31, "endMinute": 99, "isUnlimited": True, "deductionPercent": 50}
    )
    assert t.is_global
    assert t.is_unlimited
    assert t.contains(10_000)
    assert not t.contains(30)


def test_negative_values_rejected_with_field():
    with pytest.raises(InvalidConfig) as exc:
        DeductionTier.from_dict({"tier": 1, "startMinute": 4, "endMinute": 7, "deductionPercent": -1})
    assert exc.value.field == "deductionPercent"

    with pytest.raises(InvalidConfig) as exc:
        _tier(1, 10, 5, 10)
    assert exc.value.field == "endMinute"


def test_values_outside_column_range_rejected():
    base = {"tier": 1, "startMinute": 4, "endMinute": 7, "deductionPercent": 10}

    for percent in ("12.345", 1e9, "100000"):
        with pytest.raises(InvalidConfig) as exc:
            DeductionTier.from_dict(dict(base, deductionPercent=percent))
        assert exc.value.field == "deductionPercent"

    with pytest.raises(InvalidConfig) as exc:
        DeductionTier.from_dict(dict(base, endMinute=2**31))
    assert exc.value.field == "endMinute"

    with pytest.raises(ValidationError) as exc:
        DeductionTier.from_dict(dict(base, teacherId="T" * 65))
    assert exc.value.field == "teacherId"

    t = DeductionTier.from_dict(dict(base, deductionPercent="12.30", endMinute=2**31 - 1))
    assert t.deduction_percent == Decimal("12.30")
    assert t.end_minute == 2**31 - 1


def test_non_numeric_start_is_validation_error():
    with pytest.raises(ValidationError) as exc:
        DeductionTier.from_dict({"tier": 1, "startMinute": "abc", "endMinute": 7, "deductionPercent": 10})
    assert exc.value.field == "startMinute"


def test_range_bounds_are_inclusive():
    t = _tier(1, 4, 7, 10)
    assert t.contains(4)
    assert t.contains(7)
    assert not t.contains(3)
    assert not t.contains(8)


def test_overlap_in_same_scope_rejected():
    existing = [_tier(1, 4, 7, 10, tier_id=1)]
    with pytest.raises(OverlappingTierRange):
        ensure_fits_scope(_tier(2, 7, 15, 20), existing)


def test_adjacent_ranges_allowed_and_other_scope_ignored():
    existing = [_tier(1, 4, 7, 10, tier_id=1), _tier(1, 0, 100, 10, teacher_id="T1", tier_id=2)]
    ensure_fits_scope(_tier(2, 8, 15, 20), existing)


def test_second_unlimited_tier_rejected():
    existing = [_tier(4, 31, None, 50, tier_id=1)]
    with pytest.raises(OverlappingTierRange) as exc:
        ensure_fits_scope(_tier(5, 60, None, 80), existing)
    assert exc.value.field == "endMinute"


def test_update_may_keep_its_own_range():
    existing = [_tier(1, 4, 7, 10, tier_id=1)]
    ensure_fits_scope(_tier(1, 4, 9, 12, tier_id=1), existing)


def test_service_create_list_update_delete():
    svc = TierConfigService(InMemoryTiers())
    created = svc.create_tier({"tier": 1, "excusedThreshold": 3, "startMinute": 4, "endMinute": 7, "deductionPercent": 10})
    svc.create_tier({"teacherId": "T1", "tier": 1, "startMinute": 1, "endMinute": 10, "deductionPercent": 5})

    assert created.tier_id == 1
    assert len(svc.list_tiers()) == 2
    assert [t.teacher_id for t in svc.list_tiers(teacher_id="T1")] == ["T1"]

    updated = svc.update_tier({"id": created.tier_id, "tier": 1, "excusedThreshold": 3, "startMinute": 4, "endMinute": 9, "deductionPercent": 15})
    assert svc.get_tier(created.tier_id).end_minute == 9
    assert updated.deduction_percent == Decimal("15")

    svc.delete_tier(created.tier_id)
    with pytest.raises(NotFoundError):
        svc.get_tier(created.tier_id)


def test_service_rejects_overlap_and_unknown_ids():
    svc = TierConfigService(InMemoryTiers([_tier(1, 4, 7, 10)]))

    with pytest.raises(OverlappingTierRange):
        svc.create_tier({"tier": 2, "startMinute": 6, "endMinute": 12, "deductionPercent": 20})
    with pytest.raises(ValidationError):
        svc.update_tier({"tier": 2, "startMinute": 8, "endMinute": 12, "deductionPercent": 20})
    with pytest.raises(NotFoundError):
        svc.update_tier({"id": 99, "tier": 2, "startMinute": 8, "endMinute": 12, "deductionPercent": 20})
    with pytest.raises(NotFoundError):
        svc.delete_tier(99)
