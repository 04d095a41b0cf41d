"""
CSV Audit Import Engine.

This module imports the code reviews exported from the previous tool. The
export only names students in free text, so every row is reconciled with
the real groups of the progression API before an audit is written.
"""

import logging
from datetime import datetime
from typing import Optional

from ..config import DEFAULT_AUDITOR_NAME, FUZZY_MATCH_THRESHOLD
from ..data.catalog import ProjectCatalog
from ..data.client import ProgressionAPIError, ProgressionClient
from ..data.csv_reader import (
    extract_logins,
    extract_promo_id,
    normalize_project_name,
    parse_french_date,
)
from ..data.store import AuditStore
from ..models import (
    AuditInput,
    AuditResultInput,
    Group,
    ImportResult,
    MatchedRow,
    UnmatchedRow,
)
from .groups import GroupBuilder

logger = logging.getLogger(__name__)


def _group_id_key(group: Group) -> tuple:
    # Numeric ids sort numerically, before any non-numeric id
    if group.group_id.isdigit():
        return (0, int(group.group_id), "")
    return (1, 0, group.group_id)


def find_matching_group(logins, groups: list) -> Optional[Group]:
    """
    Canonical group matching a set of CSV logins.

    MATCHING STRATEGY:
    ------------------
    1. Exact: the group's login set equals the CSV login set. The first
       exact match is returned without looking at overlaps.
    2. Fuzzy: share of CSV logins found in the group. The best share wins
       if it is at least 0.5.

    TIE-BREAK:
    ----------
    Equal shares go to the larger group, then to the smallest group id, so
    the result never depends on the order of the feed or of the CSV.

    Args:
        logins: Logins extracted from the CSV (any case, any order)
        groups: Candidate Group list of the project

    Returns:
        The matching Group, or None when nothing reaches the threshold
    """
    wanted = {login.lower() for login in logins}
    if not wanted:
        return None

    for group in groups:
        if group.logins == wanted:
            return group

    best = None
    best_key = None
    for group in groups:
        score = len(wanted & group.logins) / len(wanted)
        if score < FUZZY_MATCH_THRESHOLD:
            continue
        key = (-score, -len(group.members), _group_id_key(group))
        if best_key is None or key < best_key:
            best, best_key = group, key
    return best


class AuditImporter:
    """
    Imports CSV audit rows as audits of real groups.

    ROW OUTCOMES:
    -------------
    - imported: a group matched and no audit existed for it
    - skipped with reason (listed in `unmatched`): no login in the Groupe
      column, unknown project, unknown promotion, no group found for the
      project, no group matching the logins
    - skipped silently: the matched group already has an audit, which makes
      importing the same file twice harmless
    - error: anything unexpected while writing, reported as "Ligne N: ..."

    Row numbers are file line numbers: the header is line 1, so the first
    data row is line 2.

    The audit is written for the canonical group members from the API, all
    validated; the CSV login list is only used for matching.

    Usage:
        importer = AuditImporter(loader.catalog, ProgressionClient(), AuditStore(db))
        result = importer.import_rows(read_audit_csv("audits.csv"))
    """

    def __init__(self, catalog: ProjectCatalog, client: ProgressionClient,
                 audit_store: AuditStore):
        self.catalog = catalog
        self.client = client
        self.audits = audit_store
        self.builder = GroupBuilder(catalog)
        # Per-run caches, reset by import_rows()
        self._entries = {}
        self._groups = {}

    def _reset_cache(self):
        self._entries = {}
        self._groups = {}

    def project_groups(self, promo_id: str, project_name: str) -> list:
        """
        Groups of a project, fetched once per (promotion, project) and run.

        A failed fetch is logged and yields an empty list so the row is
        reported as "no group found" instead of aborting the import.
        """
        cache_key = (str(promo_id), project_name)
        if cache_key in self._groups:
            return self._groups[cache_key]

        try:
            if promo_id not in self._entries:
                self._entries[promo_id] = self.client.fetch_promotion_progressions(promo_id)
            groups = self.builder.build_project_groups(self._entries[promo_id], project_name)
        except ProgressionAPIError as e:
            logger.error("Error fetching groups for %s/%s: %s", promo_id, project_name, e)
            return []

        self._groups[cache_key] = groups
        return groups

    def import_rows(self, rows: list, clear: bool = False) -> ImportResult:
        """
        Import parsed CSV rows.

        Args:
            rows: CsvAuditRow list, in file order
            clear: Delete every existing audit first

        Returns:
            ImportResult
        """
        result = ImportResult(total=len(rows))
        self._reset_cache()

        if clear:
            result.cleared_before = self.audits.clear_all()

        for i, row in enumerate(rows):
            line = i + 2
            try:
                self._import_row(line, row, result)
            except Exception as e:
                logger.exception("Unexpected error on CSV line %d", line)
                result.errors.append(f"Ligne {line}: {e}")

        logger.info("CSV import: %d rows, %d imported, %d skipped, %d errors",
                    result.total, result.imported, result.skipped, len(result.errors))
        return result

    def _skip(self, result: ImportResult, line: int, logins: list, reason: str):
        result.skipped += 1
        result.unmatched.append(UnmatchedRow(row=line, logins=logins, reason=reason))

    def _import_row(self, line: int, row, result: ImportResult):
        logins = extract_logins(row.group)
        if not logins:
            self._skip(result, line, [], f'Aucun étudiant trouvé dans "{row.group}"')
            return

        project_name = normalize_project_name(row.project)
        track = self.catalog.track_of(project_name)
        if track is None:
            self._skip(result, line, logins, f'Projet inconnu "{row.project}"')
            return
        # Use the catalog spelling from here on
        project_name = self.catalog.find(project_name).name

        promo_id = extract_promo_id(row.promotion)
        if not promo_id:
            self._skip(result, line, logins, f'Promotion inconnue "{row.promotion}"')
            return

        groups = self.project_groups(promo_id, project_name)
        if not groups:
            self._skip(result, line, logins, f"Aucun groupe Zone01 trouvé pour {project_name}")
            return

        group = find_matching_group(logins, groups)
        if group is None:
            self._skip(result, line, logins,
                       f"Aucun groupe Zone01 ne matche les étudiants [{', '.join(logins)}]")
            return

        audit_date = (
            parse_french_date(row.date)
            or parse_french_date(row.created)
            or datetime.now()
        )
        members = [m.login for m in group.members]

        _, created = self.audits.create_if_absent(AuditInput(
            promo_id=promo_id,
            track=track,
            project_name=project_name,
            group_id=group.group_id,
            auditor_name=row.auditor or DEFAULT_AUDITOR_NAME,
            summary=row.comment or None,
            results=[AuditResultInput(student_login=login, validated=True) for login in members],
            created_at=audit_date,
        ))
        if not created:
            result.skipped += 1
            return

        result.imported += 1
        result.matched.append(MatchedRow(row=line, group_id=group.group_id, logins=members))
