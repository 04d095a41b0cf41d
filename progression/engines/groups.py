"""
Group Building Engine.

This module rebuilds project groups from the flat progression feed of a
promotion. Groups are specific to a project: a student is usually in a
different group for each project, and group sizes vary.
"""

from collections import OrderedDict
from typing import Optional

from ..config import STATUS_FINISHED
from ..data.catalog import ProjectCatalog
from ..models import Group, GroupMember, Track


class GroupBuilder:
    """
    Aggregates progression entries into groups.

    The builder never filters on status: the code-review pages only show
    finished groups with at least one active member (Group.is_audit_eligible)
    but other reports count groups in every state, so the filtering stays
    with the caller.

    Dropout flags are joined from a set of lowercased logins maintained in
    the student table.

    Usage:
        builder = GroupBuilder(catalog, dropout_logins={"jdoe"})
        groups = builder.build_project_groups(entries, "Lem-in")
        eligible = [g for g in groups if g.is_audit_eligible]
    """

    def __init__(self, catalog: Optional[ProjectCatalog] = None,
                 dropout_logins: Optional[set] = None):
        self.catalog = catalog
        self.dropout_logins = {login.lower() for login in (dropout_logins or set())}

    def is_dropout(self, login: str) -> bool:
        return login.lower() in self.dropout_logins

    def build_project_groups(self, entries: list, project_name: str) -> list:
        """
        Groups of one project, in the order they first appear in the feed.

        Args:
            entries: ProgressionEntry list of a whole promotion
            project_name: Project to build groups for (case-insensitive)

        Returns:
            List of Group
        """
        target = project_name.lower()
        track = self.catalog.track_of(project_name) if self.catalog else None
        groups = OrderedDict()

        for entry in entries:
            if entry.project_name.lower() != target:
                continue

            group = groups.get(entry.group_id)
            if group is None:
                group = Group(
                    group_id=entry.group_id,
                    project_name=entry.project_name,
                    status=entry.group_status,
                    track=track,
                    finished_at=entry.finished_at,
                )
                groups[entry.group_id] = group

            group.members.append(GroupMember(
                login=entry.login,
                first_name=entry.first_name,
                last_name=entry.last_name,
                grade=entry.grade,
                is_dropout=self.is_dropout(entry.login),
            ))

        return list(groups.values())

    def build_track_groups(self, entries: list, track: Track) -> "OrderedDict":
        """
        Groups of every project of a track.

        Returns:
            {project_name: [Group, ...]} in catalog order; projects without
            any group are left out
        """
        result = OrderedDict()
        for project_name in self.catalog.project_names(track):
            groups = self.build_project_groups(entries, project_name)
            if groups:
                result[project_name] = groups
        return result

    def eligible_groups(self, entries: list, project_name: str) -> list:
        """Finished groups with at least one member still in the program."""
        return [g for g in self.build_project_groups(entries, project_name) if g.is_audit_eligible]


def filter_entries_by_track(entries: list, project_names: list) -> list:
    """Entries whose project belongs to the given list (case-insensitive)."""
    names = {p.lower() for p in project_names}
    return [e for e in entries if e.project_name.lower() in names]


def unique_students(entries: list) -> list:
    """
    Students of a promotion with their projects.

    Returns:
        [{"login", "first_name", "last_name", "projects": [{"name",
          "group_id", "status", "grade"}, ...]}, ...] in first-seen order
    """
    students = OrderedDict()
    for entry in entries:
        student = students.get(entry.login)
        if student is None:
            student = {
                "login": entry.login,
                "first_name": entry.first_name,
                "last_name": entry.last_name,
                "projects": [],
            }
            students[entry.login] = student
        student["projects"].append({
            "name": entry.project_name,
            "group_id": entry.group_id,
            "status": entry.group_status,
            "grade": entry.grade,
        })
    return list(students.values())


def count_groups_by_status(groups: list) -> dict:
    counts = {}
    for group in groups:
        counts[group.status] = counts.get(group.status, 0) + 1
    return counts


def track_stats(builder: GroupBuilder, entries: list, track: Track) -> dict:
    """
    Students and group counts of one track.

    Returns:
        {"track": "Golang", "total_students": 42, "projects": [{"name",
         "total_groups", "finished_groups", "in_progress_groups"}, ...]}
    """
    project_names = builder.catalog.project_names(track)
    track_entries = filter_entries_by_track(entries, project_names)

    projects = []
    for project_name in project_names:
        groups = builder.build_project_groups(entries, project_name)
        counts = count_groups_by_status(groups)
        projects.append({
            "name": project_name,
            "total_groups": len(groups),
            "finished_groups": counts.get(STATUS_FINISHED, 0),
            "in_progress_groups": len(groups) - counts.get(STATUS_FINISHED, 0),
        })

    return {
        "track": track.value,
        "total_students": len({e.login for e in track_entries}),
        "projects": projects,
    }


def unaudited_students(entries: list, project_names: list, audited: dict) -> list:
    """
    Logins of a track that never received an audit.

    Args:
        entries: ProgressionEntry list of the promotion
        project_names: Projects of the track
        audited: {group_id: set of audited logins}

    Returns:
        Logins in first-seen order
    """
    status = OrderedDict()
    for entry in filter_entries_by_track(entries, project_names):
        status.setdefault(entry.login, False)
        if entry.login in audited.get(entry.group_id, set()):
            status[entry.login] = True
    return [login for login, was_audited in status.items() if not was_audited]
