from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from ..common.validators import require_int
from ..core.exceptions import NotFoundError, ValidationError
from .model import DeductionTier
from .repository import TierRepository
from .rules import ensure_fits_scope

logger = logging.getLogger(__name__)


class TierConfigService:
    """Admin CRUD for deduction tiers.

    Writes are validated twice: here against a fresh read of the scope (so the admin gets
    the offending field back), and again by the repository inside the write transaction.
    """

    def __init__(self, tiers: TierRepository):
        self._tiers = tiers

    def list_tiers(self, *, teacher_id: Optional[str] = None) -> Sequence[DeductionTier]:
        if teacher_id:
            return self._tiers.list_for_scope(teacher_id.strip())
        return self._tiers.list_all()

    def get_tier(self, tier_id: int) -> DeductionTier:
        tier = self._tiers.get_by_id(int(tier_id))
        if not tier:
            raise NotFoundError(f"Tier {tier_id} does not exist")
        return tier

    def create_tier(self, data: Mapping[str, Any]) -> DeductionTier:
        tier = DeductionTier.from_dict(data)
        ensure_fits_scope(tier, self._tiers.list_for_scope(tier.teacher_id))

        tier_id = self._tiers.create(tier)
        created = tier.with_id(tier_id)
        logger.info(
            "Created tier id=%s scope=%s range=%s-%s percent=%s",
            tier_id,
            tier.teacher_id or "global",
            tier.start_minute,
            tier.end_minute if tier.end_minute is not None else "",
            tier.deduction_percent,
        )
        return created

    def update_tier(self, data: Mapping[str, Any]) -> DeductionTier:
        if data.get("id") in (None, ""):
            raise ValidationError("id is required", field="id")
        tier_id = require_int(data.get("id"), "id")
        self.get_tier(tier_id)

        tier = DeductionTier.from_dict(data, tier_id=tier_id)
        ensure_fits_scope(tier, self._tiers.list_for_scope(tier.teacher_id))

        self._tiers.update(tier)
        logger.info("Updated tier id=%s", tier_id)
        return tier

    def delete_tier(self, tier_id: int) -> None:
        # Deleting is unrestricted; deductions are recomputed on every read.
        if not self._tiers.delete(int(tier_id)):
            raise NotFoundError(f"Tier {tier_id} does not exist")
        logger.info("Deleted tier id=%s", tier_id)
