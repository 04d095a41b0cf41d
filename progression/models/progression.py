"""
Progression data models.

Contains the raw ProgressionEntry coming from the progression API and the
derived per-track state and delay level computed by the engines.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from ..config import STATUS_NOT_CHOSEN, STATUS_WITHOUT_GROUP


class DelayLevel(Enum):
    """
    A student's standing relative to the promotion's expected project.

    The values are the exact strings stored on student records and shown in
    the dashboard; use `.value` only when serializing.

    UNKNOWN is emitted when the expected project is not in the catalog, so
    a configuration typo does not silently read as "on track".
    """
    ON_TRACK = "bien"
    LATE = "en retard"
    AHEAD = "en avance"
    SPECIALTY = "spécialité"
    VALIDATED = "Validé"
    NOT_VALIDATED = "Non Validé"
    UNKNOWN = "Inconnu"


@dataclass
class ProgressionEntry:
    """
    One (student, project, group) record from the progression feed.

    A student has one entry per project group they have ever joined. The
    full list per student is treated as their history.
    """
    login: str
    project_name: str
    group_status: str
    group_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    grade: Optional[float] = None
    finished_at: Optional[datetime] = None  # group.finishedAt, when the feed has it


@dataclass
class TrackState:
    """
    Resolved state of one track for one student.

    Example for a student working on Lem-in:
        track: Track.GOLANG
        project_name: "Lem-in"
        status: "working"
        all_finished: False
    """
    track: object                 # Track enum
    project_name: Optional[str]   # None when not chosen or empty track
    status: str
    all_finished: bool = False

    @property
    def is_not_chosen(self) -> bool:
        return self.status == STATUS_NOT_CHOSEN

    @property
    def is_engaged(self) -> bool:
        """True if the student has a group on this track's current project."""
        return (
            self.status not in (STATUS_NOT_CHOSEN, STATUS_WITHOUT_GROUP)
            and bool(self.project_name)
        )


@dataclass
class StudentProgress:
    """
    Everything the resync pass derives for one student.

    `states` is keyed by Track. `elective_conflict` is True when both Rust
    and Java look active; both states are then left as resolved and the
    caller decides what to do.
    """
    login: str
    states: dict
    current_project: Optional[str]
    current_status: str
    delay_level: DelayLevel
    elective_conflict: bool = False
    completed: dict = field(default_factory=dict)
