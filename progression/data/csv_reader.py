"""
Legacy code-review CSV reading.

This module reads the audit export produced by the previous tool and
extracts the pieces the importer needs: logins, project, promotion, date.
Everything in this file is text cleanup; no matching happens here.
"""

import csv
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..config import PROJECT_NAME_NORMALIZATION, PROMO_MAPPING
from ..models import CsvAuditRow

# "login (https://...)" inside the Groupe column
LOGIN_PATTERN = re.compile(r"([a-zA-Z0-9_-]+)\s*\(https?://[^)]+\)")

PROMO_PATTERN = re.compile(r"Promo\s+(\d{4})\s+P(\d)", re.IGNORECASE)

# "8 avril 2024" or "8 avril 2024 14:30"
FRENCH_DATE_PATTERN = re.compile(
    r"^(\d{1,2})\s+([^\W\d_]+)\s+(\d{4})(?:\s+(\d{1,2}):(\d{2}))?$"
)

FRENCH_MONTHS = {
    "janvier": 1,
    "février": 2,
    "fevrier": 2,
    "mars": 3,
    "avril": 4,
    "mai": 5,
    "juin": 6,
    "juillet": 7,
    "août": 8,
    "aout": 8,
    "septembre": 9,
    "octobre": 10,
    "novembre": 11,
    "décembre": 12,
    "decembre": 12,
}

# CSV header -> CsvAuditRow attribute
COLUMNS = {
    "Nom": "name",
    "Commentaire": "comment",
    "Date": "date",
    "Date de création": "created",
    "Effectuée par": "auditor",
    "Groupe": "group",
    "Projet": "project",
    "Promotion": "promotion",
}


def read_audit_csv(path) -> list:
    """
    Read the export into CsvAuditRow objects.

    Headers are stripped (the export pads some of them) and a leading BOM is
    tolerated. Blank lines are skipped. Unknown columns are ignored.
    """
    with open(Path(path), "r", encoding="utf-8-sig", newline="") as f:
        return parse_audit_csv(f)


def parse_audit_csv(lines) -> list:
    """Parse an iterable of CSV lines (file object, list of strings)."""
    reader = csv.DictReader(lines)
    rows = []
    for raw in reader:
        if not any((v or "").strip() for v in raw.values() if isinstance(v, str)):
            continue
        values = {}
        for header, value in raw.items():
            if header is None:
                continue
            attr = COLUMNS.get(header.strip())
            if attr:
                values[attr] = (value or "").strip()
        rows.append(CsvAuditRow(**values))
    return rows


def extract_logins(group_field: str) -> list:
    """
    Extract student logins from the Groupe column.

    Format: "login1 (https://...), login2 (https://...)". Logins are
    lowercased; free text without a profile URL is ignored.
    """
    if not group_field:
        return []
    return [m.group(1).lower() for m in LOGIN_PATTERN.finditer(group_field)]


def normalize_project_name(project_name: str) -> str:
    """Map a CSV project label onto its catalog spelling when known."""
    lower = project_name.strip().lower()
    return PROJECT_NAME_NORMALIZATION.get(lower, project_name.strip())


def extract_promo_id(promotion_field: str) -> Optional[str]:
    """
    First known promotion of the Promotion column, as an event id.

    The column may list several promotions separated by commas; the
    "Green IT" pseudo-promotion is not a cohort and is ignored.
    """
    if not promotion_field:
        return None

    for promo in (p.strip() for p in promotion_field.split(",")):
        if "green it" in promo.lower():
            continue
        if promo in PROMO_MAPPING:
            return PROMO_MAPPING[promo]
        match = PROMO_PATTERN.search(promo)
        if match:
            key = f"P{match.group(2)} {match.group(1)}"
            if key in PROMO_MAPPING:
                return PROMO_MAPPING[key]
    return None


def parse_french_date(date_str: str) -> Optional[datetime]:
    """Parse "8 avril 2024" (optionally followed by "HH:MM"), None if invalid."""
    if not date_str or not date_str.strip():
        return None

    match = FRENCH_DATE_PATTERN.match(date_str.strip())
    if not match:
        return None

    day, month_name, year, hour, minute = match.groups()
    month = FRENCH_MONTHS.get(month_name.lower())
    if month is None:
        return None
    try:
        return datetime(int(year), month, int(day), int(hour or 0), int(minute or 0))
    except ValueError:
        return None
