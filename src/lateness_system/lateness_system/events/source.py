from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import LatenessEvent


class EventSource(Protocol):
    def fetch_events(
        self,
        *,
        start_date: date,
        end_date: date,
        controller_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
    ) -> Sequence[LatenessEvent]:
        """Events whose scheduled date (UTC) falls in [start_date, end_date].

        Implementations raise DataFetchFailure when the upstream store is unreachable.
        """

        raise NotImplementedError
