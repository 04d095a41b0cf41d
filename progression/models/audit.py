"""
Audit input data models.

Contains the dataclasses callers fill to create or update a code-review
audit. The persisted rows themselves live in `progression.data.store`.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class AuditResultInput:
    """Individual evaluation of one student inside an audit."""
    student_login: str
    validated: bool = False
    feedback: Optional[str] = None
    warnings: list = field(default_factory=list)


@dataclass
class AuditInput:
    """
    A code review of one group's submission of one project.

    (promo_id, project_name, group_id) identifies the audit: there is at
    most one per group and project.
    """
    promo_id: str
    track: object              # Track enum
    project_name: str
    group_id: str
    auditor_name: str
    summary: Optional[str] = None
    warnings: list = field(default_factory=list)
    auditor_id: Optional[int] = None
    results: list = field(default_factory=list)  # List of AuditResultInput
    created_at: Optional[datetime] = None


@dataclass
class AuditHistory:
    """Audit history of one student within a promotion."""
    audit_count: int = 0
    validated_count: int = 0
    last_audit_date: Optional[datetime] = None
    tracks: set = field(default_factory=set)
