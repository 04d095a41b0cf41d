"""
Terminal Display Implementation.

This module handles all console/terminal output formatting.
It's the ONLY place where printing happens in the progression package.

To create a different UI (web, JSON API), create a new class with the same
method signatures but different output handling.
"""

from ..models import (
    Group,
    ImportResult,
    Priority,
    PriorityEvaluation,
    PromotionGroupReport,
    ResyncSummary,
)


class TerminalDisplay:
    """
    Pretty terminal output for resync, import and review queue results.

    ═══════════════════════════════════════════════════════════════════════════
    HOW TO REPLACE THIS UI
    ═══════════════════════════════════════════════════════════════════════════

    1. FOR A WEB DASHBOARD:
       Create a WebDisplay class with the same method signatures.
       Instead of print(), render templates.

    2. FOR API RESPONSES:
       ResyncSummary and ImportResult already have to_dict(); return that.

    ═══════════════════════════════════════════════════════════════════════════
    """

    # ANSI color codes for terminal styling
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"

    BG_GREEN = "\033[42m"
    BG_YELLOW = "\033[43m"
    BG_RED = "\033[41m"

    @classmethod
    def print_header(cls, title: str):
        """Print a major section header with decorative borders."""
        width = 70
        print()
        print(f"{cls.BOLD}{cls.CYAN}{'═' * width}{cls.RESET}")
        print(f"{cls.BOLD}{cls.CYAN}  {title}{cls.RESET}")
        print(f"{cls.BOLD}{cls.CYAN}{'═' * width}{cls.RESET}")

    @classmethod
    def print_subheader(cls, title: str):
        """Print a subsection header."""
        print()
        print(f"{cls.BOLD}{cls.WHITE}  ── {title} ──{cls.RESET}")

    @classmethod
    def priority_badge(cls, priority: Priority) -> str:
        """Return a colored priority badge."""
        if priority == Priority.URGENT:
            return f"{cls.BG_RED}{cls.WHITE} URGENT  {cls.RESET}"
        if priority == Priority.WARNING:
            return f"{cls.BG_YELLOW}{cls.WHITE} WARNING {cls.RESET}"
        return f"{cls.BG_GREEN}{cls.WHITE} NORMAL  {cls.RESET}"

    @classmethod
    def _members_str(cls, group: Group) -> str:
        parts = []
        for m in group.members:
            if m.is_dropout:
                parts.append(f"{cls.DIM}{m.login} (abandon){cls.RESET}")
            else:
                parts.append(m.login)
        return ", ".join(parts)

    # ------------------------------------------------------------- resync

    @classmethod
    def print_resync_summary(cls, summary: ResyncSummary):
        """Print the outcome of a resync run."""
        cls.print_header("RESYNC SUMMARY")
        print(f"  {cls.BOLD}Promotions:{cls.RESET} {summary.total_promos}")
        print(f"  {cls.BOLD}Students updated:{cls.RESET} {summary.total_students_updated}")
        errors_color = cls.RED if summary.total_errors else cls.GREEN
        print(f"  {cls.BOLD}Errors:{cls.RESET} {errors_color}{summary.total_errors}{cls.RESET}")
        if summary.archived_promos_skipped:
            names = ", ".join(summary.archived_promo_names)
            print(f"  {cls.BOLD}Archived skipped:{cls.RESET} {summary.archived_promos_skipped} "
                  f"{cls.DIM}({names}){cls.RESET}")
        print(f"  {cls.DIM}Done in {summary.duration_ms}ms{cls.RESET}")

        for result in summary.results:
            cls.print_subheader(f"Promotion {result.promo_id}")
            print(f"    {cls.GREEN}✓ {result.updated} updated{cls.RESET}")
            for login in result.elective_conflicts:
                print(f"    {cls.YELLOW}⚠ {login}: progress on both Rust and Java{cls.RESET}")
            for error in result.errors:
                print(f"    {cls.RED}✗ {error}{cls.RESET}")

    # ------------------------------------------------------------- import

    @classmethod
    def print_import_result(cls, result: ImportResult):
        """Print the outcome of a CSV audit import."""
        cls.print_header("CSV AUDIT IMPORT")
        if result.cleared_before is not None:
            print(f"  {cls.YELLOW}{result.cleared_before} existing audits deleted first{cls.RESET}")
        print(f"  {cls.BOLD}Rows:{cls.RESET} {result.total}")
        print(f"  {cls.BOLD}Imported:{cls.RESET} {cls.GREEN}{result.imported}{cls.RESET}")
        print(f"  {cls.BOLD}Skipped:{cls.RESET} {result.skipped}")
        print(f"  {cls.BOLD}Errors:{cls.RESET} {len(result.errors)}")

        if result.unmatched:
            cls.print_subheader("Unmatched rows")
            for row in result.unmatched:
                print(f"    {cls.YELLOW}Ligne {row.row:<5}{cls.RESET} {row.reason}")

        if result.errors:
            cls.print_subheader("Errors")
            for error in result.errors:
                print(f"    {cls.RED}✗ {error}{cls.RESET}")

    # ------------------------------------------------------- review queue

    @classmethod
    def print_pending_evaluation(cls, evaluation: PriorityEvaluation):
        """Print the pending review queue, most urgent first."""
        cls.print_header(f"PENDING CODE REVIEWS: PROMOTION {evaluation.promo_id}")
        print(f"  {cls.BOLD}Pending groups:{cls.RESET} {evaluation.total_pending}  "
              f"{cls.RED}{evaluation.urgent_count} urgent{cls.RESET}  "
              f"{cls.YELLOW}{evaluation.warning_count} warning{cls.RESET}  "
              f"{cls.GREEN}{evaluation.normal_count} normal{cls.RESET}")

        if not evaluation.groups:
            print(f"\n  {cls.DIM}Nothing to review.{cls.RESET}")
            return

        print(f"\n  {cls.BOLD}{'PRIORITY':<10} {'SCORE':>5}  {'PROJECT':<20} {'GROUP':<10} {'MEMBERS'}{cls.RESET}")
        print(f"  {cls.DIM}{'-' * 66}{cls.RESET}")
        for g in evaluation.groups:
            print(f"  {cls.priority_badge(g.priority)} {g.priority_score:>5}  "
                  f"{g.project_name:<20} {g.group_id:<10} {', '.join(g.members)}")
            if g.reasons:
                print(f"  {cls.DIM}             └─ {'; '.join(g.reasons)}{cls.RESET}")

    @classmethod
    def print_group_report(cls, report: PromotionGroupReport):
        """Print every audit-eligible group of a promotion."""
        cls.print_header(f"CODE REVIEWS: {report.promo_key.upper()}")
        print(f"  {cls.BOLD}Audited:{cls.RESET} {report.audited_count}   "
              f"{cls.BOLD}Pending:{cls.RESET} {report.pending_count}")

        cls.print_subheader("By track")
        for track, stats in report.stats_by_track.items():
            if not stats["total"]:
                continue
            print(f"    {track:<12} {stats['audited']:>3}/{stats['total']:<3} audited")

        cls.print_subheader("Groups")
        for row in report.rows:
            group = row.group
            if row.audited:
                detail = (f"audited, {row.audited_priority.validation_rate:.0f}% validated, "
                          f"{row.audited_priority.warnings_count} warning(s)")
            else:
                detail = f"pending, score {row.pending.priority_score}"
            print(f"  {cls.priority_badge(row.priority)} {group.project_name:<20} "
                  f"{group.group_id:<10} {cls.DIM}{detail}{cls.RESET}")
            print(f"  {cls.DIM}           └─ {cls.RESET}{cls._members_str(group)}")

    @classmethod
    def print_project_groups(cls, project_name: str, groups: list):
        """Print every group of one project with its status."""
        cls.print_header(f"GROUPS: {project_name.upper()}")
        if not groups:
            print(f"\n  {cls.DIM}No group found.{cls.RESET}")
            return

        print(f"\n  {cls.BOLD}{'GROUP':<10} {'STATUS':<15} {'MEMBERS'}{cls.RESET}")
        print(f"  {cls.DIM}{'-' * 66}{cls.RESET}")
        for group in groups:
            color = cls.GREEN if group.is_audit_eligible else cls.DIM
            print(f"  {color}{group.group_id:<10}{cls.RESET} {group.status:<15} {cls._members_str(group)}")
