"""
Data loading, parsing and persistence module.

This package handles all file I/O, the progression API and the database.
"""

from .catalog import ProjectCatalog
from .loader import DataLoader
from .parser import ProgressionParser
from .client import ProgressionAPIError, ProgressionCache, ProgressionClient
from .store import AuditAlreadyExistsError, AuditStore, Database, StudentStore

__all__ = [
    "ProjectCatalog",
    "DataLoader",
    "ProgressionParser",
    "ProgressionAPIError",
    "ProgressionCache",
    "ProgressionClient",
    "AuditAlreadyExistsError",
    "AuditStore",
    "Database",
    "StudentStore",
]
