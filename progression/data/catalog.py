"""
Project catalog.

This module turns the raw projects.json mapping into ordered Project
objects and answers every "which track / which position" question the
engines ask.
"""

from typing import Optional

from ..config import TRACKS
from ..models import Project, Track


class ProjectCatalog:
    """
    Ordered list of projects per track.

    ORDERING:
    ---------
    The order inside each track is the pedagogical sequence and is
    meaningful. The global index concatenates the tracks in a fixed order
    (Golang, Javascript, Rust, Java), whatever order the JSON file uses.
    It is only used for "ahead"/"behind" comparisons:

        Golang:     Go-reloaded(0)  Ascii-art(1)  ...  Forum(5)
        Javascript: Make-your-game(6) ...
        Rust:       ...
        Java:       ...

    All name lookups are case-insensitive.

    Usage:
        catalog = ProjectCatalog.from_dict(json.load(f))
        catalog.track_of("lem-in")        # Track.GOLANG
        catalog.global_index("Forum")     # 5
    """

    def __init__(self, projects: dict):
        # projects: Track -> list of Project, already indexed
        self._projects = {track: list(projects.get(track, [])) for track in Track}
        self._by_name = {}
        for track in Track:
            for project in self._projects[track]:
                self._by_name.setdefault(project.name.lower(), project)

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectCatalog":
        """
        Build a catalog from the projects.json structure.

        Args:
            data: {"Golang": [{"id": 1, "name": "Go-reloaded",
                   "project_time_week": 2}, ...], "Javascript": [...], ...}
                  Project entries may also be plain strings. Track keys are
                  case-insensitive; an unknown key raises ValueError.
        """
        by_track = {Track.from_name(key): value for key, value in data.items()}
        projects = {}
        global_index = 0
        for track_name in TRACKS:
            track = Track(track_name)
            entries = by_track.get(track, []) or []
            track_projects = []
            for track_index, raw in enumerate(entries):
                if isinstance(raw, str):
                    raw = {"name": raw}
                track_projects.append(Project(
                    name=raw["name"],
                    track=track,
                    track_index=track_index,
                    global_index=global_index,
                    weeks=raw.get("project_time_week", 0) or 0,
                    project_id=raw.get("id", 0) or 0,
                ))
                global_index += 1
            projects[track] = track_projects
        return cls(projects)

    @property
    def tracks(self) -> list:
        return list(Track)

    def projects(self, track: Track) -> list:
        """Projects of a track in catalog order (empty list if none)."""
        return list(self._projects.get(track, []))

    def project_names(self, track: Track) -> list:
        return [p.name for p in self._projects.get(track, [])]

    def first_project(self, track: Track) -> Optional[Project]:
        projects = self._projects.get(track, [])
        return projects[0] if projects else None

    def find(self, name: Optional[str]) -> Optional[Project]:
        if not name:
            return None
        return self._by_name.get(name.strip().lower())

    def track_of(self, name: Optional[str]) -> Optional[Track]:
        project = self.find(name)
        return project.track if project else None

    def global_index(self, name: Optional[str]) -> int:
        """Global position of a project, -1 if unknown."""
        project = self.find(name)
        return project.global_index if project else -1

    def is_project_in_track(self, name: str, track: Track) -> bool:
        project = self.find(name)
        return project is not None and project.track == track

    def track_duration_weeks(self, track: Track) -> int:
        return sum(p.weeks for p in self._projects.get(track, []))

    def __len__(self) -> int:
        return sum(len(p) for p in self._projects.values())
