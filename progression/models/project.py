"""
Project catalog data models.

Contains the Track enum and the Project dataclass that describe the
curriculum a student walks through.
"""

from dataclasses import dataclass
from enum import Enum


class Track(Enum):
    """
    The four parallel curricula.

    GOLANG and JAVASCRIPT are mandatory. RUST and JAVA share the elective
    slot: a student follows only one of them.
    """
    GOLANG = "Golang"
    JAVASCRIPT = "Javascript"
    RUST = "Rust"
    JAVA = "Java"

    @classmethod
    def from_name(cls, name: str) -> "Track":
        """Case-insensitive lookup ("rust" -> Track.RUST)."""
        for track in cls:
            if track.value.lower() == name.strip().lower():
                return track
        raise ValueError(f"Unknown track: {name}")


@dataclass(frozen=True)
class Project:
    """
    A single project of the catalog.

    Attributes:
        name: Project name as the progression API writes it (e.g., "Lem-in")
        track: Track the project belongs to
        track_index: Position inside its track (0 = first project)
        global_index: Position in the flattened Golang, Javascript, Rust,
            Java sequence. Only meaningful for "ahead"/"behind" comparisons.
        weeks: Planned duration in weeks
        project_id: Identifier from projects.json
    """
    name: str
    track: Track
    track_index: int
    global_index: int
    weeks: int = 0
    project_id: int = 0
