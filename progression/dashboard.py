"""
Progression Dashboard - Main Orchestrator.

This module contains the ProgressionDashboard class that connects the
engines to the presentation layer.

NOTE: Don't run this file directly. Run from the project root:
    python3 -m progression
"""

from datetime import datetime
from typing import Optional

from .data import (
    AuditStore,
    Database,
    DataLoader,
    ProgressionCache,
    ProgressionClient,
    StudentStore,
)
from .data.csv_reader import read_audit_csv
from .engines import AuditImporter, GroupBuilder, PendingPriorityEvaluator, ResyncEngine
from .engines.priority import priority_for_audit
from .models import GroupReportRow, PromotionGroupReport, Track
from .ui import TerminalDisplay


class ProgressionDashboard:
    """
    Main interface for the progression system.

    ═══════════════════════════════════════════════════════════════════════════
    ROLE: ORCHESTRATOR
    ═══════════════════════════════════════════════════════════════════════════

    This class connects the engines to the presentation layer:

    1. Builds the shared DataLoader, API client and stores
    2. Calls engine methods to get results (pure data)
    3. Passes that data to the display

    Every `run_*` / `show_*` method also returns its data, so the class can
    back a web endpoint by simply ignoring the display.

    ═══════════════════════════════════════════════════════════════════════════

    USAGE:
        dashboard = ProgressionDashboard()
        dashboard.run_resync()                      # every promotion
        dashboard.run_import("audits.csv")
        report = dashboard.group_report("303")      # no display
    """

    def __init__(self, database: Optional[Database] = None,
                 client: Optional[ProgressionClient] = None,
                 loader: Optional[DataLoader] = None,
                 display=None, quiet: bool = False):
        self.loader = loader or DataLoader()
        self.db = database or Database()
        self.db.create_all()
        # One progression cache per dashboard run
        self.client = client or ProgressionClient(cache=ProgressionCache())

        self.audits = AuditStore(self.db)
        self.students = StudentStore(self.db)
        self.evaluator = PendingPriorityEvaluator()

        self.display = display or TerminalDisplay()
        # Commands still return their data, nothing is printed
        self.quiet = quiet

    def _promotion(self, promo_id: str):
        promotion = self.loader.parse_promo_id(promo_id)
        if promotion is None:
            raise ValueError(f"Unknown promotion: {promo_id}")
        return promotion

    # ------------------------------------------------------------------ data

    def group_report(self, promo_id: str, now: Optional[datetime] = None) -> PromotionGroupReport:
        """
        Audit-eligible groups of a promotion with their review status.

        Audited groups are ranked from their audit (warnings, validation
        rate); the others go through the pending evaluator. Rows are sorted
        urgent first, pending groups by descending score inside a bucket.

        Raises:
            ValueError: if the promotion is unknown
            ProgressionAPIError: if the feed cannot be fetched
        """
        promotion = self._promotion(promo_id)
        entries = self.client.fetch_promotion_progressions(promotion.promo_id)
        builder = GroupBuilder(self.loader.catalog, self.students.dropout_logins())

        audits = {
            (a.project_name.lower(), a.group_id): a
            for a in self.audits.list_by_promo(promotion.promo_id)
        }

        rows = []
        pending_groups = []
        stats = {}
        for track in Track:
            track_stats = stats.setdefault(track.value, {"total": 0, "audited": 0, "pending": 0})
            for groups in builder.build_track_groups(entries, track).values():
                for group in groups:
                    if not group.is_audit_eligible:
                        continue
                    track_stats["total"] += 1
                    audit = audits.get((group.project_name.lower(), group.group_id))
                    if audit is None:
                        track_stats["pending"] += 1
                        pending_groups.append(group)
                        continue
                    track_stats["audited"] += 1
                    audited = priority_for_audit(audit, group)
                    rows.append(GroupReportRow(
                        group=group,
                        audited=True,
                        priority=audited.priority,
                        audit_id=audit.id,
                        audited_priority=audited,
                    ))

        history = self.audits.student_audit_history(promotion.promo_id)
        evaluation = self.evaluator.evaluate(promotion.promo_id, pending_groups, history, now)
        by_id = {(g.project_name, g.group_id): g for g in pending_groups}
        for pending in evaluation.groups:
            rows.append(GroupReportRow(
                group=by_id[(pending.project_name, pending.group_id)],
                audited=False,
                priority=pending.priority,
                pending=pending,
            ))

        rows.sort(key=lambda r: (
            r.priority.rank,
            -(r.pending.priority_score if r.pending else 0),
        ))

        return PromotionGroupReport(
            promo_id=promotion.promo_id,
            promo_key=promotion.key,
            rows=rows,
            evaluation=evaluation,
            stats_by_track=stats,
        )

    def project_groups(self, promo_id: str, project_name: str) -> list:
        """Every group of one project, whatever its status."""
        promotion = self._promotion(promo_id)
        project = self.loader.catalog.find(project_name)
        if project is None:
            raise ValueError(f"Unknown project: {project_name}")
        entries = self.client.fetch_promotion_progressions(promotion.promo_id)
        builder = GroupBuilder(self.loader.catalog, self.students.dropout_logins())
        return builder.build_project_groups(entries, project.name)

    # ------------------------------------------------------------- commands

    def run_resync(self, promo_id: Optional[str] = None, strict: bool = False):
        """Resync one or every promotion and display the summary."""
        engine = ResyncEngine(self.loader, self.client, self.students, strict=strict)
        summary = engine.run(promo_id)
        if not self.quiet:
            self.display.print_resync_summary(summary)
        return summary

    def run_import(self, csv_path: str, clear: bool = False):
        """Import a legacy audit CSV and display the result."""
        rows = read_audit_csv(csv_path)
        importer = AuditImporter(self.loader.catalog, self.client, self.audits)
        result = importer.import_rows(rows, clear=clear)
        if not self.quiet:
            self.display.print_import_result(result)
        return result

    def show_pending(self, promo_id: str):
        """Display the pending review queue of a promotion."""
        report = self.group_report(promo_id)
        if not self.quiet:
            self.display.print_pending_evaluation(report.evaluation)
        return report.evaluation

    def show_groups(self, promo_id: str, project_name: Optional[str] = None):
        """
        Display groups: one project in every state, or the whole promotion
        report when no project is given.
        """
        if project_name:
            groups = self.project_groups(promo_id, project_name)
            if not self.quiet:
                self.display.print_project_groups(project_name, groups)
            return groups

        report = self.group_report(promo_id)
        if not self.quiet:
            self.display.print_group_report(report)
        return report

