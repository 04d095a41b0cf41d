"""
Group and priority data models.

Contains the project group rebuilt from the progression feed and the
priority evaluations computed for the code-review dashboard.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from ..config import STATUS_FINISHED


class Priority(Enum):
    """
    Three-level urgency bucket for a group in the code-review queue.

    The ordering is URGENT > WARNING > NORMAL; `rank` gives a sort key where
    the most urgent comes first.
    """
    URGENT = "urgent"
    WARNING = "warning"
    NORMAL = "normal"

    @property
    def rank(self) -> int:
        return {"urgent": 0, "warning": 1, "normal": 2}[self.value]


@dataclass
class GroupMember:
    """A student inside a project group."""
    login: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    grade: Optional[float] = None
    is_dropout: bool = False


@dataclass
class Group:
    """
    Students jointly working on one project instance.

    Groups are specific to a project: the same student is usually in
    different groups for different projects. The status comes straight from
    the group record of the feed, it is never derived.
    """
    group_id: str
    project_name: str
    status: str
    members: list = field(default_factory=list)  # List of GroupMember
    track: Optional[object] = None               # Track enum when known
    finished_at: Optional[datetime] = None

    @property
    def logins(self) -> set:
        return {m.login.lower() for m in self.members}

    @property
    def active_members(self) -> list:
        return [m for m in self.members if not m.is_dropout]

    @property
    def dropout_count(self) -> int:
        return len(self.members) - len(self.active_members)

    @property
    def is_audit_eligible(self) -> bool:
        """Finished and at least one member still in the program."""
        return self.status == STATUS_FINISHED and len(self.active_members) > 0


@dataclass
class PendingGroupPriority:
    """
    Priority evaluation of one finished group that has no audit yet.

    Higher `priority_score` = more urgent. `reasons` are human-readable
    explanations shown next to the badge.
    """
    group_id: str
    project_name: str
    track: object
    members: list                  # Active logins
    active_members: int
    priority_score: int
    priority: Priority
    reasons: list
    members_never_audited: int = 0
    total_previous_audits: int = 0
    avg_audits_per_member: float = 0.0
    days_pending: Optional[int] = None


@dataclass
class PriorityEvaluation:
    """Result of evaluating every pending group of a promotion."""
    promo_id: str
    evaluated_at: datetime
    total_pending: int
    urgent_count: int
    warning_count: int
    normal_count: int
    groups: list  # List of PendingGroupPriority, highest score first


@dataclass
class AuditedGroupPriority:
    """Priority of a group that already has an audit."""
    warnings_count: int
    validated_count: int
    active_members: int
    validation_rate: float
    priority: Priority

    @property
    def has_warnings(self) -> bool:
        return self.warnings_count > 0
