"""
Reconciliation engines.

This package contains the engines that perform the core business logic of
the progression system: track resolution, delay classification, group
building, review priorities, CSV import and the batch resync.
"""

from .track_progress import TrackProgressResolver, TrackSelectionNormalizer
from .delay import DelayClassifier
from .groups import GroupBuilder
from .priority import PendingPriorityEvaluator, audited_group_priority
from .csv_import import AuditImporter, find_matching_group
from .resync import ResyncEngine

__all__ = [
    "TrackProgressResolver",
    "TrackSelectionNormalizer",
    "DelayClassifier",
    "GroupBuilder",
    "PendingPriorityEvaluator",
    "audited_group_priority",
    "AuditImporter",
    "find_matching_group",
    "ResyncEngine",
]
