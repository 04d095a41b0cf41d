"""
Delay Classification Engine.

This module compares a student's resolved tracks against the project their
promotion is expected to be on and emits a DelayLevel.
"""

import logging
from typing import Optional

from ..config import EXPECTED_END, EXPECTED_SPECIALTY
from ..data.catalog import ProjectCatalog
from ..models import DelayLevel, Track

logger = logging.getLogger(__name__)


class DelayClassifier:
    """
    Classifies a student as on track, late, ahead, in specialty or done.

    EXPECTED PROJECT CONFIG (promo_status.json):
    -------------------------------------------
    - "Lem-in":                  a single project name
    - "Fin":                     the promotion is over
    - "spécialité":              the promotion is in its specialty phase
    - {"rust": "RT", "java": "Buy-01"}: the promotion is in the elective
                                 slot; one expectation per elective track

    DECISION ORDER (first match wins):
    ---------------------------------
    1. "Fin"             -> Validé if every track is completed, else Non Validé
    2. all completed     -> spécialité, whatever the promotion expects
    3. "spécialité"      -> spécialité
    4. elective object   -> compare the elective the student chose with the
                            expectation for that elective
    5. project name      -> compare the student's project in that project's
                            track with the expectation

    "All completed" means Golang and Javascript finished, plus Rust OR Java.

    COMPARISON:
    -----------
    Same project name (case-insensitive) is on track. Otherwise global
    catalog indices decide: student index unknown -> late, greater -> ahead,
    smaller -> late, equal -> on track. The global index assumes the catalog
    order is the pedagogical order.

    UNKNOWN EXPECTED PROJECT:
    -------------------------
    If a plain expected name is not in the catalog, no comparison is
    possible. By default the student is reported on track and a warning is
    logged; with strict=True the classifier returns DelayLevel.UNKNOWN
    instead so the configuration error is visible on the dashboard.
    """

    def __init__(self, catalog: ProjectCatalog, strict: bool = False):
        self.catalog = catalog
        self.strict = strict

    @staticmethod
    def all_tracks_completed(states: dict) -> bool:
        def done(track):
            state = states.get(track)
            return bool(state and state.all_finished)

        return (
            done(Track.GOLANG)
            and done(Track.JAVASCRIPT)
            and (done(Track.RUST) or done(Track.JAVA))
        )

    def compare(self, student_project: Optional[str], expected_project: str) -> DelayLevel:
        """Compare a student's project with the expected one."""
        if student_project and student_project.lower() == expected_project.lower():
            return DelayLevel.ON_TRACK

        expected_index = self.catalog.global_index(expected_project)
        student_index = self.catalog.global_index(student_project)

        if student_index == -1:
            return DelayLevel.LATE
        if student_index > expected_index:
            return DelayLevel.AHEAD
        if student_index < expected_index:
            return DelayLevel.LATE
        return DelayLevel.ON_TRACK

    def _classify_elective(self, expected: dict, states: dict) -> DelayLevel:
        # Rust is checked first, then Java
        for track, key in ((Track.RUST, "rust"), (Track.JAVA, "java")):
            state = states.get(track)
            if state is not None and state.is_engaged:
                expected_project = expected.get(key)
                if not expected_project:
                    # The promotion set no target for the elective the student chose
                    return DelayLevel.LATE
                return self.compare(state.project_name, expected_project)
        return DelayLevel.LATE

    def _classify_project(self, expected: str, states: dict) -> DelayLevel:
        track = self.catalog.track_of(expected)
        if track is None:
            logger.warning("Expected project %r is not in the catalog", expected)
            return DelayLevel.UNKNOWN if self.strict else DelayLevel.ON_TRACK

        state = states.get(track)
        student_project = state.project_name if state else None
        return self.compare(student_project, expected)

    def classify(self, expected, states: dict) -> DelayLevel:
        """
        Classify one student.

        Args:
            expected: The promotion's expected-project config (str, dict or
                None when the promotion has none)
            states: {Track: TrackState} after elective normalization

        Returns:
            DelayLevel
        """
        if expected is None or expected == "":
            return DelayLevel.ON_TRACK

        completed = self.all_tracks_completed(states)

        if isinstance(expected, str) and expected.strip().lower() == EXPECTED_END:
            return DelayLevel.VALIDATED if completed else DelayLevel.NOT_VALIDATED
        if completed:
            return DelayLevel.SPECIALTY
        if isinstance(expected, str) and expected.strip().lower() == EXPECTED_SPECIALTY:
            return DelayLevel.SPECIALTY
        if isinstance(expected, dict):
            return self._classify_elective(expected, states)
        if isinstance(expected, str):
            return self._classify_project(expected.strip(), states)

        logger.warning("Unsupported expected project config: %r", expected)
        return DelayLevel.UNKNOWN if self.strict else DelayLevel.ON_TRACK
