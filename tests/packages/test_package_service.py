from __future__ import annotations

from decimal import Decimal
from typing import Optional

import pytest

from src.lateness_system.lateness_system.core.exceptions import (
    DuplicateError,
    InvalidConfig,
    NotFoundError,
    ValidationError,
)
from src.lateness_system.lateness_system.packages.model import PackageBaseAmount
from src.lateness_system.lateness_system.packages.service import PackageBaseAmountService


class InMemoryPackages:
    def __init__(self):
        self._by_name: dict[str, PackageBaseAmount] = {}
        self._id = 0

    def list_all(self):
        return sorted(self._by_name.values(), key=lambda p: p.package_name)

    def get_by_name(self, package_name: str) -> Optional[PackageBaseAmount]:
        return self._by_name.get(package_name)

    def create(self, amount: PackageBaseAmount) -> int:
        self._id += 1
        self._by_name[amount.package_name] = PackageBaseAmount(
            self._id, amount.package_name, amount.lateness_base_amount, amount.absence_base_amount
        )
        return self._id

    def upsert(self, amount: PackageBaseAmount) -> int:
        current = self._by_name.get(amount.package_name)
        if current is None:
            return self.create(amount)
        self._by_name[amount.package_name] = PackageBaseAmount(
            current.package_id, amount.package_name, amount.lateness_base_amount, amount.absence_base_amount
        )
        return current.package_id

    def delete(self, package_name: str) -> bool:
        return self._by_name.pop(package_name, None) is not None


def test_create_then_duplicate_rejected():
    svc = PackageBaseAmountService(InMemoryPackages())
    created = svc.create_base_amount({"packageName": "3 days", "latenessBaseAmount": 30, "absenceBaseAmount": "25"})

    assert created.package_id == 1
    assert created.absence_base_amount == Decimal("25")
    with pytest.raises(DuplicateError):
        svc.create_base_amount({"packageName": "3 days", "latenessBaseAmount": 40, "absenceBaseAmount": 35})


def test_upsert_replaces_amounts_by_name():
    svc = PackageBaseAmountService(InMemoryPackages())
    svc.upsert_base_amount({"packageName": "Europe", "latenessBaseAmount": 60, "absenceBaseAmount": 50})
    saved = svc.upsert_base_amount({"packageName": "Europe", "latenessBaseAmount": 65, "absenceBaseAmount": 50})

    assert saved.package_id == 1
    assert svc.get_base_amount("Europe").lateness_base_amount == Decimal("65")
    assert len(svc.list_base_amounts()) == 1


def test_amounts_must_fit_the_money_column():
    svc = PackageBaseAmountService(InMemoryPackages())

    with pytest.raises(InvalidConfig) as exc:
        svc.create_base_amount({"packageName": "X", "latenessBaseAmount": "30.005", "absenceBaseAmount": 25})
    assert exc.value.field == "latenessBaseAmount"

    with pytest.raises(InvalidConfig) as exc:
        svc.upsert_base_amount({"packageName": "X", "latenessBaseAmount": 30, "absenceBaseAmount": 1e9})
    assert exc.value.field == "absenceBaseAmount"

    with pytest.raises(ValidationError) as exc:
        svc.create_base_amount({"packageName": "p" * 192, "latenessBaseAmount": 30, "absenceBaseAmount": 25})
    assert exc.value.field == "packageName"

    saved = svc.create_base_amount(
        {"packageName": "X", "latenessBaseAmount": "99999999.99", "absenceBaseAmount": "0.5"}
    )
    assert saved.lateness_base_amount == Decimal("99999999.99")
    assert svc.list_base_amounts() == [saved]


def test_invalid_amounts_and_missing_rows():
    svc = PackageBaseAmountService(InMemoryPackages())

    with pytest.raises(InvalidConfig) as exc:
        svc.create_base_amount({"packageName": "X", "latenessBaseAmount": -1, "absenceBaseAmount": 0})
    assert exc.value.field == "latenessBaseAmount"

    with pytest.raises(ValidationError):
        svc.create_base_amount({"latenessBaseAmount": 1, "absenceBaseAmount": 1})
    with pytest.raises(NotFoundError):
        svc.get_base_amount("nope")
    with pytest.raises(NotFoundError):
        svc.delete_base_amount("nope")
