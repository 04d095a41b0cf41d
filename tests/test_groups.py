"""
Unit Tests for Group Building

Tests for:
- Grouping entries by group id for one project
- Dropout flags and audit eligibility
- Track-level helpers and statistics
"""

from progression.engines import GroupBuilder
from progression.engines.groups import (
    count_groups_by_status,
    filter_entries_by_track,
    track_stats,
    unaudited_students,
    unique_students,
)
from progression.models import Track

from conftest import make_entry, make_group


def promotion_entries():
    return [
        make_entry("alice", "Lem-in", "finished", 10, first_name="Alice", last_name="A"),
        make_entry("bob", "Lem-in", "finished", 10),
        make_entry("carol", "Lem-in", "working", 11),
        make_entry("alice", "Ascii-art", "finished", 5),
        make_entry("dave", "lem-in", "finished", 12),
        make_entry("eve", "Graphql", "setup", 20),
    ]


class TestGroupBuilder:
    """Tests for GroupBuilder"""

    def test_groups_by_id_in_first_seen_order(self, catalog):
        builder = GroupBuilder(catalog)

        groups = builder.build_project_groups(promotion_entries(), "Lem-in")

        assert [g.group_id for g in groups] == ["10", "11", "12"]
        assert [m.login for m in groups[0].members] == ["alice", "bob"]
        assert groups[0].members[0].first_name == "Alice"
        assert groups[0].track == Track.GOLANG

    def test_project_match_is_case_insensitive(self, catalog):
        builder = GroupBuilder(catalog)

        groups = builder.build_project_groups(promotion_entries(), "LEM-IN")

        assert "12" in [g.group_id for g in groups]

    def test_status_comes_from_the_group_record(self, catalog):
        builder = GroupBuilder(catalog)

        groups = {g.group_id: g for g in builder.build_project_groups(promotion_entries(), "Lem-in")}

        assert groups["10"].status == "finished"
        assert groups["11"].status == "working"

    def test_dropout_flags_are_case_insensitive(self, catalog):
        builder = GroupBuilder(catalog, dropout_logins={"BOB"})

        group = builder.build_project_groups(promotion_entries(), "Lem-in")[0]

        assert [m.is_dropout for m in group.members] == [False, True]
        assert group.dropout_count == 1
        assert [m.login for m in group.active_members] == ["alice"]

    def test_builder_does_not_filter(self, catalog):
        builder = GroupBuilder(catalog, dropout_logins={"dave"})

        groups = builder.build_project_groups(promotion_entries(), "Lem-in")

        assert len(groups) == 3

    def test_eligible_groups(self, catalog):
        builder = GroupBuilder(catalog, dropout_logins={"dave"})

        eligible = builder.eligible_groups(promotion_entries(), "Lem-in")

        # 11 is still working, 12 only has a dropout
        assert [g.group_id for g in eligible] == ["10"]

    def test_unknown_project_has_no_groups(self, catalog):
        assert GroupBuilder(catalog).build_project_groups(promotion_entries(), "Forum") == []

    def test_track_groups(self, catalog):
        builder = GroupBuilder(catalog)

        by_project = builder.build_track_groups(promotion_entries(), Track.GOLANG)

        assert list(by_project) == ["Ascii-art", "Lem-in"]


class TestGroupEligibility:

    def test_finished_with_active_member(self):
        assert make_group(1, ["a", "b"], dropouts={"a"}).is_audit_eligible

    def test_all_dropouts(self):
        assert not make_group(1, ["a", "b"], dropouts={"a", "b"}).is_audit_eligible

    def test_not_finished(self):
        assert not make_group(1, ["a"], status="audit").is_audit_eligible


class TestGroupHelpers:
    """Tests for track-level helpers"""

    def test_filter_entries_by_track(self, catalog):
        entries = filter_entries_by_track(promotion_entries(), catalog.project_names(Track.JAVASCRIPT))

        assert [e.login for e in entries] == ["eve"]

    def test_unique_students(self):
        students = unique_students(promotion_entries())

        assert [s["login"] for s in students] == ["alice", "bob", "carol", "dave", "eve"]
        assert [p["name"] for p in students[0]["projects"]] == ["Lem-in", "Ascii-art"]

    def test_count_groups_by_status(self, catalog):
        groups = GroupBuilder(catalog).build_project_groups(promotion_entries(), "Lem-in")

        assert count_groups_by_status(groups) == {"finished": 2, "working": 1}

    def test_track_stats(self, catalog):
        stats = track_stats(GroupBuilder(catalog), promotion_entries(), Track.GOLANG)

        assert stats["track"] == "Golang"
        assert stats["total_students"] == 4
        lem_in = next(p for p in stats["projects"] if p["name"] == "Lem-in")
        assert lem_in == {
            "name": "Lem-in",
            "total_groups": 3,
            "finished_groups": 2,
            "in_progress_groups": 1,
        }

    def test_unaudited_students(self, catalog):
        audited = {"10": {"alice", "bob"}}

        logins = unaudited_students(promotion_entries(), catalog.project_names(Track.GOLANG), audited)

        assert logins == ["carol", "dave"]
