from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

from ..core.exceptions import DataFetchFailure, ValidationError
from .model import LatenessEvent
from .source import EventSource

logger = logging.getLogger(__name__)


class JsonFileEventSource(EventSource):
    """Reads events from a JSON array exported by attendance capture.

    Used by scripts and offline reports; the file is re-read on every fetch so the
    result always reflects the latest export.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)

    def fetch_events(
        self,
        *,
        start_date: date,
        end_date: date,
        controller_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
    ) -> Sequence[LatenessEvent]:
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.exception("Failed to read events file %s", self._path)
            raise DataFetchFailure(f"Cannot read events file {self._path.name}") from e

        if not isinstance(payload, list):
            raise DataFetchFailure(f"Events file {self._path.name} must contain a JSON array")

        events: list[LatenessEvent] = []
        for index, item in enumerate(payload):
            if not isinstance(item, dict):
                raise DataFetchFailure(f"Invalid event at index {index}: expected an object")
            try:
                event = LatenessEvent.from_dict(item)
            except ValidationError as e:
                raise DataFetchFailure(f"Invalid event at index {index}: {e}") from e

            if not (start_date <= event.event_date <= end_date):
                continue
            if controller_id and event.controller_id != str(controller_id):
                continue
            if teacher_id and event.teacher_id != str(teacher_id):
                continue
            events.append(event)
        return events
