"""
Track Progress Engine.

This module resolves, for each track, which project a student is on and
whether the track is finished, then settles the Rust/Java elective slot.
"""

from typing import Optional

from ..config import STATUS_FINISHED, STATUS_NOT_CHOSEN, STATUS_WITHOUT_GROUP
from ..data.catalog import ProjectCatalog
from ..models import Track, TrackState


class TrackProgressResolver:
    """
    Determines the active project of every track from a student's history.

    RESOLUTION RULES:
    -----------------
    Walk the catalog projects of the track in order and look up the
    student's entry for each (case-insensitive name):

    - entry "finished":     remember it as the last finished project
    - entry with any other status: the FIRST such project becomes the
                            active project, with the entry's status
    - no entry at all:      the FIRST such project is remembered as
                            "without group"

    When every project is finished the track resolves to the last project
    with all_finished=True. Otherwise it resolves to the active project, or
    failing that to the first project the student never joined.

    Example (Golang = Go-reloaded, Ascii-art, Lem-in):
        finished Go-reloaded, finished Ascii-art, working Lem-in
        -> TrackState(GOLANG, "Lem-in", "working", all_finished=False)

    A track with no project in the catalog resolves to all_finished=True
    with no project. It should not happen, but must not crash.
    """

    def __init__(self, catalog: ProjectCatalog):
        self.catalog = catalog

    @staticmethod
    def _index_entries(entries: list) -> dict:
        """
        Lowercased project name -> entry.

        The first entry wins when a student appears in several groups for
        the same project, matching a first-match lookup over the history.
        """
        by_name = {}
        for entry in entries:
            by_name.setdefault(entry.project_name.lower(), entry)
        return by_name

    def resolve_track(self, track: Track, entries_by_name: dict) -> TrackState:
        active = None
        first_unfinished = None
        last_finished = None
        all_done = True

        for project in self.catalog.projects(track):
            entry = entries_by_name.get(project.name.lower())

            if entry is not None:
                if entry.group_status == STATUS_FINISHED:
                    last_finished = project.name
                else:
                    if active is None:
                        active = (project.name, entry.group_status)
                    all_done = False
            else:
                if first_unfinished is None:
                    first_unfinished = project.name
                all_done = False

        if all_done:
            return TrackState(track, last_finished, STATUS_FINISHED, all_finished=True)
        if active is not None:
            return TrackState(track, active[0], active[1], all_finished=False)
        return TrackState(track, first_unfinished, STATUS_WITHOUT_GROUP, all_finished=False)

    def resolve(self, entries: list) -> dict:
        """
        Resolve every track.

        Args:
            entries: The student's ProgressionEntry list, in any order

        Returns:
            {Track: TrackState} for the four tracks
        """
        by_name = self._index_entries(entries)
        return {track: self.resolve_track(track, by_name) for track in Track}

    def last_active_project(self, states: dict) -> tuple:
        """
        Furthest project across tracks, by global index.

        Tracks without a project or marked not_chosen are ignored.

        Returns:
            (project_name, status), or (None, "without group") if no track
            qualifies
        """
        best_name: Optional[str] = None
        best_status = STATUS_WITHOUT_GROUP
        best_index = -1

        for track in Track:
            state = states.get(track)
            if state is None or not state.project_name or state.is_not_chosen:
                continue
            index = self.catalog.global_index(state.project_name)
            if index > best_index:
                best_name, best_status, best_index = state.project_name, state.status, index

        return best_name, best_status


class TrackSelectionNormalizer:
    """
    Settles the elective slot shared by Rust and Java.

    A student follows only one of the two. A track counts as touched when
    its resolved project is not the first project of the track, or when its
    status is not "without group" (the student has a group there).

    - Rust touched only  -> Java becomes not_chosen
    - Java touched only  -> Rust becomes not_chosen
    - neither            -> both not_chosen
    - both               -> left as resolved, flagged as a conflict
    """

    def __init__(self, catalog: ProjectCatalog):
        self.catalog = catalog

    def _is_active(self, track: Track, state: Optional[TrackState]) -> bool:
        first = self.catalog.first_project(track)
        first_name = first.name if first else None
        if state is None:
            return False
        return state.project_name != first_name or state.status != STATUS_WITHOUT_GROUP

    def normalize(self, states: dict) -> tuple:
        """
        Args:
            states: {Track: TrackState} from TrackProgressResolver

        Returns:
            (states, conflict) where states is a new dict and conflict is
            True when both electives are active
        """
        normalized = dict(states)
        rust_active = self._is_active(Track.RUST, states.get(Track.RUST))
        java_active = self._is_active(Track.JAVA, states.get(Track.JAVA))

        if rust_active and not java_active:
            normalized[Track.JAVA] = self._not_chosen(Track.JAVA, states.get(Track.JAVA))
        elif java_active and not rust_active:
            normalized[Track.RUST] = self._not_chosen(Track.RUST, states.get(Track.RUST))
        elif not rust_active and not java_active:
            normalized[Track.RUST] = self._not_chosen(Track.RUST, states.get(Track.RUST))
            normalized[Track.JAVA] = self._not_chosen(Track.JAVA, states.get(Track.JAVA))

        return normalized, rust_active and java_active

    @staticmethod
    def _not_chosen(track: Track, state: Optional[TrackState]) -> TrackState:
        # Completion is kept: it still counts towards "all tracks completed"
        completed = state.all_finished if state is not None else False
        return TrackState(track, None, STATUS_NOT_CHOSEN, all_finished=completed)
