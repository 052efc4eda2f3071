from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import PackageBaseAmount


class PackageBaseAmountRepository(Protocol):
    def list_all(self) -> Sequence[PackageBaseAmount]:
        raise NotImplementedError

    def get_by_name(self, package_name: str) -> Optional[PackageBaseAmount]:
        raise NotImplementedError

    def create(self, amount: PackageBaseAmount) -> int:
        raise NotImplementedError

    def upsert(self, amount: PackageBaseAmount) -> int:
        """Create or replace by package name. Returns package_id."""

        raise NotImplementedError

    def delete(self, package_name: str) -> bool:
        raise NotImplementedError
