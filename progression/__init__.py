"""
Zone01 Progression Package
==========================

Student progression reconciliation and code-review tooling for Zone01.

ARCHITECTURE OVERVIEW
---------------------

┌─────────────────────────────────────────────────────────────────────────┐
│                           ENGINE LAYER                                  │
│        (Pure logic - returns data structures, NO UI/printing)           │
│                                                                         │
│  ┌──────────────────────┐  ┌─────────────────┐  ┌───────────────────┐   │
│  │ TrackProgressResolver│  │ DelayClassifier │  │   GroupBuilder    │   │
│  │ TrackSelection-      │  │ (expected vs    │  │ (feed -> groups)  │   │
│  │   Normalizer         │  │  actual)        │  │                   │   │
│  └──────────────────────┘  └─────────────────┘  └───────────────────┘   │
│                                                                         │
│  ┌──────────────────────────┐ ┌─────────────────┐ ┌──────────────────┐  │
│  │ PendingPriorityEvaluator │ │  AuditImporter  │ │   ResyncEngine   │  │
│  │ audited_group_priority   │ │ (CSV -> audits) │ │ (batch update)   │  │
│  └──────────────────────────┘ └─────────────────┘ └──────────────────┘  │
└─────────────────────────────────────────────────────────────────────────┘
                                   │
                                   │ Returns dataclasses
                                   ▼
┌─────────────────────────────────────────────────────────────────────────┐
│                      PRESENTATION LAYER                                 │
│           (UI only - can be swapped without touching engines)           │
│                                                                         │
│  ┌─────────────────────────────────────────────────────────────────┐    │
│  │                    TerminalDisplay                              │    │
│  └─────────────────────────────────────────────────────────────────┘    │
└─────────────────────────────────────────────────────────────────────────┘
                                   │
                                   ▼
┌─────────────────────────────────────────────────────────────────────────┐
│                     ProgressionDashboard                                │
│          (Orchestrator - connects engines to presentation)              │
└─────────────────────────────────────────────────────────────────────────┘

PACKAGE STRUCTURE
-----------------

progression/
├── __init__.py          # This file - main exports
├── config.py            # Configuration constants
├── dashboard.py         # ProgressionDashboard orchestrator
├── cli.py               # Command-line interface
│
├── models/              # Data classes and enums
│   ├── project.py       # Project, Track
│   ├── promotion.py     # Promotion
│   ├── progression.py   # ProgressionEntry, TrackState, DelayLevel, StudentProgress
│   ├── group.py         # Group, GroupMember, Priority, priority results
│   ├── audit.py         # AuditInput, AuditResultInput, AuditHistory
│   └── report.py        # Resync, import and group report summaries
│
├── data/                # Data loading, parsing, API and persistence
│   ├── catalog.py       # ProjectCatalog
│   ├── loader.py        # DataLoader
│   ├── parser.py        # ProgressionParser
│   ├── client.py        # ProgressionClient, ProgressionCache
│   ├── csv_reader.py    # Legacy audit CSV reading
│   └── store.py         # SQLAlchemy models, AuditStore, StudentStore
│
├── engines/             # Reconciliation engines
│   ├── track_progress.py # TrackProgressResolver, TrackSelectionNormalizer
│   ├── delay.py         # DelayClassifier
│   ├── groups.py        # GroupBuilder and group statistics
│   ├── priority.py      # Pending and audited priorities
│   ├── csv_import.py    # find_matching_group, AuditImporter
│   └── resync.py        # ResyncEngine
│
└── ui/                  # User interface implementations
    └── terminal.py      # TerminalDisplay

USAGE
-----

Basic usage:

    from progression import ProgressionDashboard

    dashboard = ProgressionDashboard()
    dashboard.run_resync()                  # every non-archived promotion
    dashboard.run_import("audits.csv")
    report = dashboard.group_report("303")

Running from command line:

    python -m progression resync --promo 303
    python -m progression import-audits audits.csv
    python -m progression pending --promo "P1 2024"

"""

# Version
__version__ = "1.0.0"

# Main exports
from .dashboard import ProgressionDashboard
from .cli import main

# Model exports (for programmatic use)
from .models import (
    DelayLevel,
    Group,
    GroupMember,
    Priority,
    ProgressionEntry,
    Project,
    Promotion,
    StudentProgress,
    Track,
    TrackState,
)

# Engine exports (for advanced use)
from .engines import (
    AuditImporter,
    DelayClassifier,
    GroupBuilder,
    PendingPriorityEvaluator,
    ResyncEngine,
    TrackProgressResolver,
    TrackSelectionNormalizer,
    audited_group_priority,
    find_matching_group,
)

# Data exports
from .data import (
    AuditStore,
    Database,
    DataLoader,
    ProgressionClient,
    ProjectCatalog,
    StudentStore,
)

# UI exports
from .ui import TerminalDisplay

# Configuration exports
from .config import DATA_DIR, DATABASE_URL, TRACKS, ZONE01_API_BASE

__all__ = [
    # Version
    "__version__",
    # Main entry points
    "ProgressionDashboard",
    "main",
    # Models
    "DelayLevel",
    "Group",
    "GroupMember",
    "Priority",
    "ProgressionEntry",
    "Project",
    "Promotion",
    "StudentProgress",
    "Track",
    "TrackState",
    # Engines
    "AuditImporter",
    "DelayClassifier",
    "GroupBuilder",
    "PendingPriorityEvaluator",
    "ResyncEngine",
    "TrackProgressResolver",
    "TrackSelectionNormalizer",
    "audited_group_priority",
    "find_matching_group",
    # Data
    "AuditStore",
    "Database",
    "DataLoader",
    "ProgressionClient",
    "ProjectCatalog",
    "StudentStore",
    # UI
    "TerminalDisplay",
    # Config
    "DATA_DIR",
    "DATABASE_URL",
    "TRACKS",
    "ZONE01_API_BASE",
]
