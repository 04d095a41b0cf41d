"""
Configuration constants for the progression system.

This module contains all configuration values and constants used throughout
the reconciliation engines. Centralizing these makes it easy to adjust
behavior as the curriculum changes.

A few values depend on the deployment (API host, database, data folder) and
can be overridden through environment variables.
"""

import os
from pathlib import Path

# =============================================================================
# FILE PATHS
# =============================================================================

# Base data directory (relative to this file's location)
BASE_DIR = Path(__file__).parent.parent
DATA_DIR = Path(os.environ.get("PROGRESSION_DATA_DIR", BASE_DIR / "data"))
PROJECTS_FILE = "projects.json"
PROMOTIONS_FILE = "promotions.json"
PROMO_STATUS_FILE = "promo_status.json"


# =============================================================================
# EXTERNAL SERVICES
# =============================================================================

ZONE01_API_BASE = os.environ.get(
    "PROGRESSION_API_BASE", "https://api-zone01-rouen.deno.dev/api/v1"
)
HTTP_TIMEOUT = 30
HTTP_RETRIES = 3
HTTP_BACKOFF = 1.0

DATABASE_URL = os.environ.get("PROGRESSION_DATABASE_URL", "sqlite:///progression.db")


# =============================================================================
# TRACKS
# =============================================================================

# Order matters: it defines the global project index.
TRACKS = ("Golang", "Javascript", "Rust", "Java")


# =============================================================================
# STATUS LITERALS
# =============================================================================
# These are the exact strings written by the progression API and stored on
# student records. "without group" keeps its space, like the source data.

STATUS_FINISHED = "finished"
STATUS_WITHOUT_GROUP = "without group"
STATUS_NOT_CHOSEN = "not_chosen"

# Expected-project markers in promo_status.json
EXPECTED_END = "fin"
EXPECTED_SPECIALTY = "spécialité"


# =============================================================================
# PRIORITY SCORING
# =============================================================================

# Pending groups (never audited yet)
SCORE_PER_NEW_MEMBER = 25
SCORE_ALL_NEW = 30
SCORE_MOSTLY_NEW = 15
SCORE_FEW_AUDITS = 20
SCORE_SOME_AUDITS = 10
SCORE_LARGE_GROUP = 5
LARGE_GROUP_SIZE = 3
SCORE_NO_DROPOUT = 5
TRACK_BONUS = {
    "Golang": 5,
    "Javascript": 10,
    "Rust": 15,
    "Java": 15,
}

# Staleness: days since the group finished its project
STALE_URGENT_DAYS = 14
STALE_WARNING_DAYS = 7
SCORE_STALE_URGENT = 20
SCORE_STALE_WARNING = 10

URGENT_SCORE = 50
WARNING_SCORE = 25

# Audited groups: validation rate thresholds (percent)
URGENT_VALIDATION_RATE = 30
WARNING_VALIDATION_RATE = 50


# =============================================================================
# CSV IMPORT
# =============================================================================

# Minimum share of CSV logins found in a group for a fuzzy match
FUZZY_MATCH_THRESHOLD = 0.5

# CSV promotion labels -> event ids
PROMO_MAPPING = {
    "Promo 2022 P1": "32",
    "Promo 2023 P1": "148",
    "Promo 2023 P2": "216",
    "Promo 2024 P1": "303",
    "Promo 2025 P1": "526",
    "Promo 2025 P2": "904",
    # Alternative spelling
    "P1 2022": "32",
    "P1 2023": "148",
    "P2 2023": "216",
    "P1 2024": "303",
    "P1 2025": "526",
    "P2 2025": "904",
}

# Lowercased CSV project labels -> catalog names
PROJECT_NAME_NORMALIZATION = {
    "go-reloaded": "Go-reloaded",
    "go reloaded": "Go-reloaded",
    "ascii-art": "Ascii-art",
    "ascii-art-web": "Ascii-art-web",
    "ascii art web": "Ascii-art-web",
    "groupie-tracker": "Groupie-tracker",
    "lem-in": "Lem-in",
    "forum": "Forum",
    "make-your-game": "Make-your-game",
    "real-time-forum": "Real-time-forum",
    "graphql": "Graphql",
    "social-network": "Social-network",
    "mini-framework": "Mini-framework",
    "bomberman-dom": "Bomberman-dom",
    "smart-road": "Smart-road",
    "filler": "Filler",
    "rt": "RT",
    "multiplayer-fps": "Multiplayer-fps",
    "0-shell": "0-shell",
    "lets-play": "Lets-Play",
    "angul-it": "Angul-It",
    "buy-01": "Buy-01",
    "mr-jenk": "MR-Jenk",
    "safe-zone": "Safe-Zone",
    "buy-02": "Buy-02",
    "nexus": "Nexus",
    "neo-4-flix": "Neo-4-Flix",
    "travel-plan": "Travel-Plan",
    "lets-travel": "Lets-Travel",
}

DEFAULT_AUDITOR_NAME = "Import CSV"
