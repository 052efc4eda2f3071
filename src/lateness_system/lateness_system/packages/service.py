from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from ..common.validators import require_non_empty
from ..core.exceptions import DuplicateError, NotFoundError
from .model import PackageBaseAmount
from .repository import PackageBaseAmountRepository

logger = logging.getLogger(__name__)


class PackageBaseAmountService:
    """Admin CRUD for per-package base amounts; defaults are applied by the resolver."""

    def __init__(self, packages: PackageBaseAmountRepository):
        self._packages = packages

    def list_base_amounts(self) -> Sequence[PackageBaseAmount]:
        return self._packages.list_all()

    def get_base_amount(self, package_name: str) -> PackageBaseAmount:
        name = require_non_empty(package_name, "packageName")
        amount = self._packages.get_by_name(name)
        if not amount:
            raise NotFoundError(f"No base deduction configured for package {name}")
        return amount

    def create_base_amount(self, data: Mapping[str, Any]) -> PackageBaseAmount:
        amount = PackageBaseAmount.from_dict(data)
        if self._packages.get_by_name(amount.package_name):
            raise DuplicateError(f"Package deduction already exists: {amount.package_name}")

        package_id = self._packages.create(amount)
        logger.info("Created base deduction for package %s", amount.package_name)
        return PackageBaseAmount(
            package_id=package_id,
            package_name=amount.package_name,
            lateness_base_amount=amount.lateness_base_amount,
            absence_base_amount=amount.absence_base_amount,
        )

    def upsert_base_amount(self, data: Mapping[str, Any]) -> PackageBaseAmount:
        amount = PackageBaseAmount.from_dict(data)
        package_id = self._packages.upsert(amount)
        logger.info("Saved base deduction for package %s", amount.package_name)
        return PackageBaseAmount(
            package_id=package_id,
            package_name=amount.package_name,
            lateness_base_amount=amount.lateness_base_amount,
            absence_base_amount=amount.absence_base_amount,
        )

    def delete_base_amount(self, package_name: str) -> None:
        name = require_non_empty(package_name, "packageName")
        if not self._packages.delete(name):
            raise NotFoundError(f"No base deduction configured for package {name}")
        logger.info("Deleted base deduction for package %s", name)
