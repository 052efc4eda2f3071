from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import DeductionTier


class TierRepository(Protocol):
    def list_all(self) -> Sequence[DeductionTier]:
        """All tiers, ordered by (tier, start_minute)."""

        raise NotImplementedError

    def list_for_scope(self, teacher_id: Optional[str]) -> Sequence[DeductionTier]:
        raise NotImplementedError

    def get_by_id(self, tier_id: int) -> Optional[DeductionTier]:
        raise NotImplementedError

    def create(self, tier: DeductionTier) -> int:
        """Insert the tier after re-checking its scope inside the write transaction.

        Raises OverlappingTierRange if a concurrent write got there first.
        """

        raise NotImplementedError

    def update(self, tier: DeductionTier) -> bool:
        raise NotImplementedError

    def delete(self, tier_id: int) -> bool:
        raise NotImplementedError
