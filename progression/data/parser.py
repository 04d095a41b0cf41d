"""
Progression feed parsing.

This module turns the raw JSON returned by the progression API into
ProgressionEntry objects.
"""

import logging
from collections import OrderedDict
from datetime import datetime

from ..models import ProgressionEntry

logger = logging.getLogger(__name__)


def _as_dict(value) -> dict:
    return value if isinstance(value, dict) else {}


class ProgressionParser:
    """
    Parses the `progress` array of GET /promotions/{eventId}/students.

    RAW FORMAT:
        {
            "user": {"login": "jdoe", "firstName": "John", "lastName": "Doe"},
            "object": {"name": "Lem-in"},
            "group": {"id": 4521, "status": "finished",
                      "finishedAt": "2024-04-08T14:30:00Z"},   # optional
            "grade": 1.2
        }

    Group ids are numbers in the feed; they are stored as strings everywhere
    else (audit records, URLs), so the conversion happens here once.
    """

    def parse_entry(self, raw: dict) -> ProgressionEntry:
        """
        Parse one raw entry.

        Raises:
            ValueError: if the record is not an object, or its login,
                project name or group is missing
        """
        if not isinstance(raw, dict):
            raise ValueError(f"progression entry is not an object: {raw!r}")
        user = _as_dict(raw.get("user"))
        obj = _as_dict(raw.get("object"))
        group = _as_dict(raw.get("group"))

        login = user.get("login")
        project_name = obj.get("name")
        if not login:
            raise ValueError("progression entry without user login")
        if not project_name:
            raise ValueError(f"progression entry for {login} without project name")
        if group.get("id") is None or not group.get("status"):
            raise ValueError(f"progression entry for {login}/{project_name} without group")

        return ProgressionEntry(
            login=login,
            project_name=project_name,
            group_status=group["status"],
            group_id=str(group["id"]),
            first_name=user.get("firstName"),
            last_name=user.get("lastName"),
            grade=raw.get("grade"),
            finished_at=self._parse_timestamp(group.get("finishedAt")),
        )

    @staticmethod
    def _parse_timestamp(value):
        """ISO timestamp to naive local datetime, None if absent or invalid."""
        if not value:
            return None
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            logger.warning("Ignoring invalid timestamp %r", value)
            return None
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone().replace(tzinfo=None)
        return parsed

    def parse(self, progress: list, strict: bool = False) -> list:
        """
        Parse a whole progress array.

        Args:
            progress: Raw `progress` list
            strict: Raise on the first malformed entry instead of skipping it

        Returns:
            List of ProgressionEntry in feed order
        """
        entries = []
        for raw in progress:
            try:
                entries.append(self.parse_entry(raw))
            except ValueError as e:
                if strict:
                    raise
                logger.warning("Skipping malformed progression entry: %s", e)
        return entries

    @staticmethod
    def group_by_login(progress: list) -> "OrderedDict":
        """
        Split the raw progress array per student, keeping first-seen order.

        Entries are kept raw so that a malformed record only fails the
        student it belongs to. Records that are not objects or have no login
        cannot be attributed and are dropped.
        """
        per_login = OrderedDict()
        for raw in progress:
            if not isinstance(raw, dict):
                logger.warning("Dropping progression entry that is not an object: %r", raw)
                continue
            login = _as_dict(raw.get("user")).get("login")
            if not login:
                logger.warning("Dropping progression entry without login")
                continue
            per_login.setdefault(login, []).append(raw)
        return per_login
