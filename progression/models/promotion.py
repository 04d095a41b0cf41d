"""
Promotion data model.

A promotion is a cohort of students starting together. Its `event_id` is the
identifier the progression API uses; its `key` (e.g., "P1 2024") is the
name used everywhere else, including promo_status.json.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class Promotion:
    key: str
    event_id: int
    title: str = ""
    archived: bool = False
    dates: dict = field(default_factory=dict)  # start, piscine-js-start, ..., end

    @property
    def promo_id(self) -> str:
        """Event id as used in URLs and audit records."""
        return str(self.event_id)

    @property
    def end_date(self) -> Optional[datetime]:
        end = self.dates.get("end")
        if not end:
            return None
        return datetime.fromisoformat(end)

    def is_active(self, now: Optional[datetime] = None) -> bool:
        """Not archived and not finished yet (no end date = still running)."""
        if self.archived:
            return False
        end = self.end_date
        if end is None:
            return True
        return end > (now or datetime.now())
