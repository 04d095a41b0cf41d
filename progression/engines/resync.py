"""
Batch Resync Engine.

This module recomputes the denormalized progress of every student from the
progression API: per-track project, current project, delay level. It is
the job the dashboard runs on a schedule.
"""

import logging
import time
from typing import Optional

from ..data.client import ProgressionAPIError, ProgressionClient
from ..data.loader import DataLoader
from ..data.parser import ProgressionParser
from ..data.store import StudentStore
from ..models import PromoResyncResult, ResyncSummary, StudentProgress
from .delay import DelayClassifier
from .track_progress import TrackProgressResolver, TrackSelectionNormalizer

logger = logging.getLogger(__name__)


class ResyncEngine:
    """
    Resolves and stores the progress of every student of one or all
    promotions.

    PIPELINE (per student):
    -----------------------
    1. TrackProgressResolver   -> one TrackState per track
    2. TrackSelectionNormalizer -> Rust/Java elective settled
    3. last active project     -> current project and status
    4. DelayClassifier         -> delay level against promo_status.json
    5. StudentStore.upsert_progress

    ERROR ISOLATION:
    ----------------
    Students are processed independently. A failing student adds
    "Erreur pour <login>: <message>" to the promotion's errors and the loop
    goes on. A promotion whose feed cannot be fetched or processed gets a
    single error entry and the other promotions still run. Partial success is the normal
    outcome.

    Usage:
        engine = ResyncEngine(DataLoader(), ProgressionClient(), StudentStore(db))
        summary = engine.run()            # every non-archived promotion
        summary = engine.run("303")       # one promotion, by event id or key
    """

    def __init__(self, loader: DataLoader, client: ProgressionClient,
                 student_store: StudentStore, strict: bool = False):
        self.loader = loader
        self.client = client
        self.students = student_store
        self.parser = ProgressionParser()
        self.resolver = TrackProgressResolver(loader.catalog)
        self.normalizer = TrackSelectionNormalizer(loader.catalog)
        self.classifier = DelayClassifier(loader.catalog, strict=strict)

    def resolve_student(self, login: str, entries: list, expected) -> StudentProgress:
        """
        Derive everything stored for one student.

        Args:
            login: Student login
            entries: The student's ProgressionEntry list
            expected: The promotion's expected-project config
        """
        resolved = self.resolver.resolve(entries)
        # Completion is taken before the elective slot is settled
        completed = {track: state.all_finished for track, state in resolved.items()}

        states, conflict = self.normalizer.normalize(resolved)
        if conflict:
            logger.warning("%s has progress on both Rust and Java", login)

        current_project, current_status = self.resolver.last_active_project(states)
        delay = self.classifier.classify(expected, states)

        return StudentProgress(
            login=login,
            states=states,
            current_project=current_project,
            current_status=current_status,
            delay_level=delay,
            elective_conflict=conflict,
            completed=completed,
        )

    def update_promotion(self, event_id) -> PromoResyncResult:
        """Resync every student of one promotion."""
        result = PromoResyncResult(promo_id=str(event_id))

        promotion = self.loader.get_promotion_by_event_id(event_id)
        if promotion is None:
            result.errors.append(f"Promotion {event_id} non trouvée")
            return result

        try:
            raw = self.client.fetch_raw_progress(promotion.promo_id)
        except ProgressionAPIError as e:
            logger.error("Resync of %s aborted: %s", promotion.key, e)
            result.errors.append(f"Erreur API Zone01 pour {promotion.promo_id}: {e}")
            return result

        try:
            expected = self.loader.expected_project(promotion.key)
            if expected is None:
                logger.warning("No expected project configured for %s", promotion.key)

            for login, raw_entries in self.parser.group_by_login(raw).items():
                try:
                    entries = [self.parser.parse_entry(r) for r in raw_entries]
                    progress = self.resolve_student(login, entries, expected)
                    first = entries[0]
                    self.students.upsert_progress(
                        login,
                        promotion.key,
                        progress,
                        first_name=first.first_name,
                        last_name=first.last_name,
                    )
                    if progress.elective_conflict:
                        result.elective_conflicts.append(login)
                    result.updated += 1
                except Exception as e:
                    logger.exception("Resync failed for %s", login)
                    result.errors.append(f"Erreur pour {login}: {e}")
        except Exception as e:
            logger.exception("Resync of %s failed", promotion.key)
            result.errors.append(f"Erreur globale pour {promotion.promo_id}: {e}")
            return result

        logger.info("Promotion %s: %d students updated, %d errors",
                    promotion.key, result.updated, len(result.errors))
        return result

    def run(self, promo_id: Optional[str] = None) -> ResyncSummary:
        """
        Resync one promotion or every non-archived promotion.

        Args:
            promo_id: Event id or key of a single promotion; None for all

        Returns:
            ResyncSummary

        Raises:
            ValueError: if the requested promotion is unknown or archived
        """
        start = time.monotonic()
        summary = ResyncSummary(
            archived_promo_names=[p.key for p in self.loader.archived_promotions()]
        )

        if promo_id is not None:
            promotion = self.loader.parse_promo_id(promo_id)
            if promotion is None:
                raise ValueError(f"Invalid promoId: {promo_id}")
            if promotion.archived:
                raise ValueError(
                    f"La promotion {promotion.key} est archivée et ne peut pas être mise à jour"
                )
            targets = [promotion]
        else:
            targets = [p for p in self.loader.promotions if not p.archived]
            summary.archived_promos_skipped = len(self.loader.promotions) - len(targets)

        for promotion in targets:
            summary.results.append(self.update_promotion(promotion.event_id))

        self.students.record_update(targets[0].promo_id if promo_id is not None else "all")
        summary.duration_ms = int((time.monotonic() - start) * 1000)

        logger.info("Resync done: %d promotions, %d students, %d errors in %dms",
                    summary.total_promos, summary.total_students_updated,
                    summary.total_errors, summary.duration_ms)
        return summary

