"""
Data loading and caching.

This module handles loading the catalog and promotion configuration files
with caching to prevent repeated file I/O during a resync run.
"""

import json
from pathlib import Path
from typing import Optional

from ..config import DATA_DIR, PROJECTS_FILE, PROMOTIONS_FILE, PROMO_STATUS_FILE
from ..models import Promotion
from .catalog import ProjectCatalog


class DataLoader:
    """
    Loads and caches all configuration files.

    WHY LAZY LOADING: Properties only load files when first accessed.
    A CSV import needs the catalog but never reads promo_status.json.

    DATA SOURCES:
    - projects.json: ordered projects per track (the catalog)
    - promotions.json: promotions with their event id, dates, archived flag
    - promo_status.json: promotion key -> expected current project. The
      value is a project name, "Fin", "spécialité" or
      {"rust": ..., "java": ...} once the promotion reached the elective slot.

    Usage:
        loader = DataLoader()
        loader.catalog.track_of("Lem-in")
        loader.expected_project("P1 2024")
    """

    def __init__(self, data_dir: Optional[Path] = None):
        self.data_dir = Path(data_dir) if data_dir else DATA_DIR
        # Private cache variables - None means "not loaded yet"
        self._catalog = None
        self._promotions = None
        self._promo_status = None

    def _read_json(self, filename: str):
        filepath = self.data_dir / filename
        if not filepath.exists():
            raise FileNotFoundError(f"Configuration file not found: {filepath}")
        with open(filepath, "r", encoding="utf-8") as f:
            return json.load(f)

    @property
    def catalog(self) -> ProjectCatalog:
        """Project catalog built from projects.json."""
        if self._catalog is None:
            self._catalog = ProjectCatalog.from_dict(self._read_json(PROJECTS_FILE))
        return self._catalog

    @property
    def promotions(self) -> list:
        """All promotions from promotions.json, in file order."""
        if self._promotions is None:
            raw = self._read_json(PROMOTIONS_FILE)
            self._promotions = [
                Promotion(
                    key=p["key"],
                    event_id=int(p["eventId"]),
                    title=p.get("title", ""),
                    archived=bool(p.get("archived", False)),
                    dates=p.get("dates", {}) or {},
                )
                for p in raw
            ]
        return self._promotions

    @property
    def promo_status(self) -> dict:
        """Expected current project per promotion key."""
        if self._promo_status is None:
            self._promo_status = self._read_json(PROMO_STATUS_FILE)
        return self._promo_status

    def expected_project(self, promotion_key: str):
        """Expected project config for a promotion, None if not configured."""
        return self.promo_status.get(promotion_key)

    def get_promotion_by_event_id(self, event_id) -> Optional[Promotion]:
        for promo in self.promotions:
            if str(promo.event_id) == str(event_id):
                return promo
        return None

    def get_promotion_by_key(self, key: str) -> Optional[Promotion]:
        for promo in self.promotions:
            if promo.key == key:
                return promo
        return None

    def parse_promo_id(self, promo_id: str) -> Optional[Promotion]:
        """Resolve an identifier that is either an event id or a key."""
        if str(promo_id).strip().isdigit():
            return self.get_promotion_by_event_id(int(promo_id))
        return self.get_promotion_by_key(promo_id)

    def active_promotions(self) -> list:
        return [p for p in self.promotions if p.is_active()]

    def archived_promotions(self) -> list:
        return [p for p in self.promotions if p.archived]
