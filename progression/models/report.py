"""
Batch report data models.

Contains dataclasses for the summaries returned by the resync and CSV import
runs. Both runs favor partial success: individual failures are collected
here instead of aborting the batch.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class PromoResyncResult:
    """Outcome of resyncing the students of one promotion."""
    promo_id: str
    updated: int = 0
    errors: list = field(default_factory=list)
    elective_conflicts: list = field(default_factory=list)  # Logins


@dataclass
class ResyncSummary:
    """
    Aggregate of a full resync run over several promotions.

    Example:
        total_promos: 5
        total_students_updated: 212
        total_errors: 1
        archived_promos_skipped: 1
    """
    results: list = field(default_factory=list)  # List of PromoResyncResult
    archived_promo_names: list = field(default_factory=list)
    archived_promos_skipped: int = 0
    duration_ms: int = 0

    @property
    def total_promos(self) -> int:
        return len(self.results)

    @property
    def total_students_updated(self) -> int:
        return sum(r.updated for r in self.results)

    @property
    def total_errors(self) -> int:
        return sum(len(r.errors) for r in self.results)

    def to_dict(self) -> dict:
        return {
            "summary": {
                "totalPromos": self.total_promos,
                "totalStudentsUpdated": self.total_students_updated,
                "totalErrors": self.total_errors,
                "archivedPromosSkipped": self.archived_promos_skipped,
                "archivedPromoNames": list(self.archived_promo_names),
            },
            "duration": f"{self.duration_ms}ms",
            "results": [
                {"promoId": r.promo_id, "updated": r.updated, "errors": list(r.errors)}
                for r in self.results
            ],
        }


@dataclass
class CsvAuditRow:
    """
    One row of the legacy code-review export.

    Header: Nom,Commentaire,Date,Date de création,Effectuée par,Groupe,Projet,Promotion
    The Groupe column is free text such as
    "jdoe (https://...), asmith (https://...)".
    """
    name: str = ""
    comment: str = ""
    date: str = ""
    created: str = ""
    auditor: str = ""
    group: str = ""
    project: str = ""
    promotion: str = ""


@dataclass
class MatchedRow:
    row: int
    group_id: str
    logins: list


@dataclass
class UnmatchedRow:
    row: int
    logins: list
    reason: str


@dataclass
class ImportResult:
    """
    Summary of a CSV import.

    `skipped` counts every row that did not produce a new audit, including
    rows whose audit already exists. `errors` only holds unexpected failures
    while writing to the database.
    """
    total: int = 0
    imported: int = 0
    skipped: int = 0
    errors: list = field(default_factory=list)
    matched: list = field(default_factory=list)    # List of MatchedRow
    unmatched: list = field(default_factory=list)  # List of UnmatchedRow
    cleared_before: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "imported": self.imported,
            "skipped": self.skipped,
            "errors": list(self.errors),
            "details": {
                "matched": [
                    {"row": m.row, "groupId": m.group_id, "logins": m.logins}
                    for m in self.matched
                ],
                "unmatched": [
                    {"row": u.row, "logins": u.logins, "reason": u.reason}
                    for u in self.unmatched
                ],
            },
        }


@dataclass
class GroupReportRow:
    """One audit-eligible group of a promotion report."""
    group: object                        # Group
    audited: bool
    priority: object                     # Priority
    audit_id: Optional[int] = None
    audited_priority: Optional[object] = None   # AuditedGroupPriority when audited
    pending: Optional[object] = None            # PendingGroupPriority otherwise


@dataclass
class PromotionGroupReport:
    """
    Finished groups of a promotion with their code-review status.

    Example stats_by_track:
        {"Golang": {"total": 12, "audited": 9, "pending": 3}, ...}
    """
    promo_id: str
    promo_key: str
    rows: list = field(default_factory=list)     # List of GroupReportRow, most urgent first
    evaluation: Optional[object] = None          # PriorityEvaluation of the pending groups
    stats_by_track: dict = field(default_factory=dict)

    @property
    def audited_count(self) -> int:
        return sum(1 for r in self.rows if r.audited)

    @property
    def pending_count(self) -> int:
        return sum(1 for r in self.rows if not r.audited)
