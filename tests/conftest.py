"""
Pytest Configuration and Fixtures

Provides common fixtures for all tests including:
- A small project catalog and matching configuration files
- In-memory database and stores
- Progression entry factories
"""

import json

import pytest

from progression.data import AuditStore, Database, DataLoader, ProjectCatalog, StudentStore
from progression.models import Group, GroupMember, ProgressionEntry


CATALOG_DATA = {
    "Golang": [
        {"id": 1, "name": "Go-reloaded", "project_time_week": 2},
        {"id": 2, "name": "Ascii-art", "project_time_week": 1},
        {"id": 3, "name": "Lem-in", "project_time_week": 3},
    ],
    "Javascript": [
        {"id": 4, "name": "Make-your-game", "project_time_week": 3},
        {"id": 5, "name": "Graphql", "project_time_week": 2},
    ],
    "Rust": [
        {"id": 6, "name": "Smart-road", "project_time_week": 3},
        {"id": 7, "name": "RT", "project_time_week": 5},
    ],
    "Java": [
        {"id": 8, "name": "Lets-Play", "project_time_week": 2},
        {"id": 9, "name": "Buy-01", "project_time_week": 4},
    ],
}

PROMOTIONS_DATA = [
    {"key": "P1 2022", "eventId": 32, "title": "Promo 2022 P1", "archived": True,
     "dates": {"start": "2022-03-07", "end": "2024-03-29"}},
    {"key": "P1 2024", "eventId": 303, "title": "Promo 2024 P1",
     "dates": {"start": "2024-03-04", "end": "2099-03-27"}},
    {"key": "P1 2025", "eventId": 526, "title": "Promo 2025 P1",
     "dates": {"start": "2025-03-03", "end": "2099-03-26"}},
]

PROMO_STATUS_DATA = {
    "P1 2022": "Fin",
    "P1 2024": {"rust": "RT", "java": "Buy-01"},
    "P1 2025": "Lem-in",
}


@pytest.fixture
def catalog() -> ProjectCatalog:
    """Catalog with 3 Golang, 2 Javascript, 2 Rust and 2 Java projects"""
    return ProjectCatalog.from_dict(CATALOG_DATA)


@pytest.fixture
def data_dir(tmp_path):
    """Temporary data directory holding the three configuration files"""
    (tmp_path / "projects.json").write_text(json.dumps(CATALOG_DATA), encoding="utf-8")
    (tmp_path / "promotions.json").write_text(json.dumps(PROMOTIONS_DATA), encoding="utf-8")
    (tmp_path / "promo_status.json").write_text(
        json.dumps(PROMO_STATUS_DATA, ensure_ascii=False), encoding="utf-8"
    )
    return tmp_path


@pytest.fixture
def loader(data_dir) -> DataLoader:
    return DataLoader(data_dir)


@pytest.fixture
def database() -> Database:
    """Fresh in-memory SQLite database for each test"""
    db = Database("sqlite://")
    db.create_all()
    yield db
    db.drop_all()


@pytest.fixture
def audit_store(database) -> AuditStore:
    return AuditStore(database)


@pytest.fixture
def student_store(database) -> StudentStore:
    return StudentStore(database)


def make_entry(login, project, status="finished", group_id="1", **kwargs) -> ProgressionEntry:
    """ProgressionEntry factory"""
    return ProgressionEntry(
        login=login,
        project_name=project,
        group_status=status,
        group_id=str(group_id),
        **kwargs,
    )


def make_raw(login, project, status="finished", group_id=1, first_name=None, last_name=None) -> dict:
    """Raw progression API record factory"""
    return {
        "user": {"login": login, "firstName": first_name, "lastName": last_name},
        "object": {"name": project},
        "group": {"id": group_id, "status": status},
    }


def make_group(group_id, logins, project="Lem-in", status="finished", dropouts=(), track=None) -> Group:
    """Group factory"""
    return Group(
        group_id=str(group_id),
        project_name=project,
        status=status,
        members=[GroupMember(login=login, is_dropout=login in dropouts) for login in logins],
        track=track,
    )
