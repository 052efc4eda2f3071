from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import DeductionWaiver


class WaiverRepository(Protocol):
    def list_in_window(
        self,
        *,
        start_date: date,
        end_date: date,
        teacher_id: Optional[str] = None,
    ) -> Sequence[DeductionWaiver]:
        """Waivers with start_date <= waiver_date <= end_date, ordered by (date, teacher)."""

        raise NotImplementedError

    def create_many(self, waivers: Sequence[DeductionWaiver]) -> Sequence[DeductionWaiver]:
        """Insert waivers, skipping (teacher, date) pairs that already have one.

        Returns only the rows actually inserted, with their ids.
        """

        raise NotImplementedError

    def delete(self, waiver_id: int) -> bool:
        raise NotImplementedError
