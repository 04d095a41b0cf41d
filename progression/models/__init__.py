"""
Data models for the progression system.

This package contains all dataclasses and enums used throughout the system.
These serve as "contracts" between different parts of the system.
"""

from .project import Project, Track
from .promotion import Promotion
from .audit import AuditHistory, AuditInput, AuditResultInput
from .progression import DelayLevel, ProgressionEntry, StudentProgress, TrackState
from .group import (
    AuditedGroupPriority,
    Group,
    GroupMember,
    PendingGroupPriority,
    Priority,
    PriorityEvaluation,
)
from .report import (
    CsvAuditRow,
    GroupReportRow,
    ImportResult,
    MatchedRow,
    PromoResyncResult,
    PromotionGroupReport,
    ResyncSummary,
    UnmatchedRow,
)

__all__ = [
    # Catalog models
    "Project",
    "Track",
    "Promotion",
    # Progression models
    "DelayLevel",
    "ProgressionEntry",
    "StudentProgress",
    "TrackState",
    # Group models
    "AuditedGroupPriority",
    "Group",
    "GroupMember",
    "PendingGroupPriority",
    "Priority",
    "PriorityEvaluation",
    # Audit inputs
    "AuditHistory",
    "AuditInput",
    "AuditResultInput",
    # Reports
    "CsvAuditRow",
    "GroupReportRow",
    "ImportResult",
    "MatchedRow",
    "PromoResyncResult",
    "PromotionGroupReport",
    "ResyncSummary",
    "UnmatchedRow",
]
