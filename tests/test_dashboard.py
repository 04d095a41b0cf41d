"""
Unit Tests for the Dashboard and the Command Line

Tests for:
- Promotion group report (audited vs pending, ordering, track stats)
- Project group listing
- CLI parsing and exit codes
"""

import json
from datetime import datetime
from unittest.mock import Mock

import pytest

from progression import cli
from progression.dashboard import ProgressionDashboard
from progression.data import ProgressionClient
from progression.models import (
    AuditInput,
    AuditResultInput,
    DelayLevel,
    Priority,
    PromoResyncResult,
    ResyncSummary,
    StudentProgress,
    Track,
)

from conftest import make_entry

NOW = datetime(2026, 10, 19, 12, 0)


def feed_303():
    return [
        make_entry("alice", "Lem-in", "finished", 10),
        make_entry("bob", "Lem-in", "finished", 10),
        make_entry("carol", "Lem-in", "working", 11),
        make_entry("dave", "Lem-in", "finished", 12),
        make_entry("gone", "Lem-in", "finished", 13),
        make_entry("eve", "Graphql", "finished", 20),
        make_entry("frank", "Graphql", "finished", 20),
    ]


@pytest.fixture
def dashboard(database, loader):
    client = Mock(spec=ProgressionClient)
    client.fetch_promotion_progressions.return_value = feed_303()
    board = ProgressionDashboard(database=database, client=client, loader=loader, display=Mock())
    board.audits.create_audit(AuditInput(
        promo_id="303",
        track=Track.GOLANG,
        project_name="Lem-in",
        group_id="10",
        auditor_name="Marie",
        results=[AuditResultInput("alice", validated=True), AuditResultInput("bob", validated=True)],
    ))
    return board


def flag_dropout(board, login):
    board.students.upsert_progress(login, "P1 2024", StudentProgress(
        login=login, states={}, current_project=None, current_status="without group",
        delay_level=DelayLevel.LATE,
    ))
    board.students.set_dropout(login)


class TestGroupReport:
    """Tests for ProgressionDashboard.group_report"""

    def test_rows_are_ordered_by_urgency(self, dashboard):
        flag_dropout(dashboard, "gone")

        report = dashboard.group_report("303", now=NOW)

        assert [(r.group.group_id, r.audited) for r in report.rows] == [
            ("20", False), ("12", False), ("10", True),
        ]
        assert report.rows[0].priority == Priority.URGENT
        assert report.rows[-1].priority == Priority.NORMAL
        assert report.rows[-1].audit_id is not None
        assert report.audited_count == 1
        assert report.pending_count == 2

    def test_stats_by_track(self, dashboard):
        flag_dropout(dashboard, "gone")

        report = dashboard.group_report("P1 2024", now=NOW)

        assert report.stats_by_track["Golang"] == {"total": 2, "audited": 1, "pending": 1}
        assert report.stats_by_track["Javascript"] == {"total": 1, "audited": 0, "pending": 1}
        assert report.stats_by_track["Rust"] == {"total": 0, "audited": 0, "pending": 0}

    def test_evaluation_covers_pending_only(self, dashboard):
        flag_dropout(dashboard, "gone")

        evaluation = dashboard.show_pending("303")

        assert evaluation.total_pending == 2
        dashboard.display.print_pending_evaluation.assert_called_once_with(evaluation)

    def test_unknown_promotion(self, dashboard):
        with pytest.raises(ValueError):
            dashboard.group_report("999")


class TestProjectGroups:

    def test_every_state_is_listed(self, dashboard):
        groups = dashboard.show_groups("303", "lem-in")

        assert [g.group_id for g in groups] == ["10", "11", "12", "13"]
        dashboard.display.print_project_groups.assert_called_once()

    def test_unknown_project(self, dashboard):
        with pytest.raises(ValueError, match="Unknown project"):
            dashboard.project_groups("303", "Forum")


class TestCli:
    """Tests for the command line"""

    def test_parser(self):
        args = cli.build_parser().parse_args(["resync", "--promo", "303", "--strict"])

        assert args.command == "resync"
        assert args.promo == "303"
        assert args.strict is True
        assert args.json is False

    def test_command_is_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])

    def test_exit_code_on_errors(self, monkeypatch):
        board = Mock()
        board.run_resync.return_value = ResyncSummary()
        monkeypatch.setattr(cli, "ProgressionDashboard", lambda **kwargs: board)

        assert cli.main(["resync"]) == 0

        board.run_resync.return_value.results = [PromoResyncResult("303", errors=["boom"])]
        assert cli.main(["resync"]) == 1

    def test_exit_code_on_invalid_promotion(self, monkeypatch):
        board = Mock()
        board.run_resync.side_effect = ValueError("Invalid promoId: 999")
        monkeypatch.setattr(cli, "ProgressionDashboard", lambda **kwargs: board)

        assert cli.main(["resync", "--promo", "999"]) == 2

    def test_json_output(self, monkeypatch, capsys):
        board = Mock()
        board.run_resync.return_value = ResyncSummary()
        monkeypatch.setattr(cli, "ProgressionDashboard", lambda **kwargs: board)

        cli.main(["resync", "--json"])

        data = json.loads(capsys.readouterr().out)
        assert data["summary"]["totalPromos"] == 0

    def test_json_runs_the_dashboard_quietly(self, monkeypatch):
        board = Mock()
        board.run_resync.return_value = ResyncSummary()
        factory = Mock(return_value=board)
        monkeypatch.setattr(cli, "ProgressionDashboard", factory)

        cli.main(["resync", "--json"])
        assert factory.call_args.kwargs["quiet"] is True

        cli.main(["resync"])
        assert factory.call_args.kwargs["quiet"] is False


class TestQuietDashboard:

    def test_quiet_dashboard_prints_nothing(self, database, loader):
        client = Mock(spec=ProgressionClient)
        client.fetch_promotion_progressions.return_value = feed_303()
        display = Mock()
        board = ProgressionDashboard(database=database, client=client, loader=loader,
                                     display=display, quiet=True)

        report = board.show_groups("303")

        assert report.pending_count == 4
        assert display.method_calls == []
