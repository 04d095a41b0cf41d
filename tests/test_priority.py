"""
Unit Tests for Code-review Priorities

Tests for:
- Pending group scoring and buckets
- Staleness and roster bonuses
- Evaluation ordering and counts
- Audited group priority (urgent checked before warning)
"""

from datetime import datetime, timedelta

import pytest

from progression.engines import PendingPriorityEvaluator, audited_group_priority
from progression.engines.priority import score_to_priority
from progression.models import AuditHistory, Priority, Track

from conftest import make_group

NOW = datetime(2026, 10, 19, 12, 0)


def history(**counts):
    return {login: AuditHistory(audit_count=count) for login, count in counts.items()}


class TestPendingPriorityEvaluator:
    """Tests for PendingPriorityEvaluator"""

    def test_brand_new_group(self):
        group = make_group(1, ["alice", "bob"], track=Track.GOLANG)

        result = PendingPriorityEvaluator().score_group(group, {}, NOW)

        # 2 x 25 new members, +30 all new, +20 few audits, +5 Golang, +5 no dropout
        assert result.priority_score == 110
        assert result.priority == Priority.URGENT
        assert result.members_never_audited == 2
        assert result.reasons == [
            "2 membre(s) jamais audité(s)",
            "Groupe entièrement nouveau",
            "Peu d'audits précédents",
        ]

    def test_experienced_group(self):
        group = make_group(2, ["a", "b", "c"], track=Track.JAVA)

        result = PendingPriorityEvaluator().score_group(group, history(a=3, b=3, c=3), NOW)

        # +15 Java, +5 three members, +5 no dropout
        assert result.priority_score == 25
        assert result.priority == Priority.WARNING
        assert result.total_previous_audits == 9
        assert result.avg_audits_per_member == 3.0
        assert result.reasons == []

    def test_dropouts_are_not_scored(self):
        group = make_group(3, ["a", "b", "gone"], dropouts={"gone"}, track=Track.GOLANG)

        result = PendingPriorityEvaluator().score_group(group, history(a=2, b=2), NOW)

        assert result.members == ["a", "b"]
        assert result.active_members == 2
        # Only the Golang bonus: no new member, average 2, a dropout in the roster
        assert result.priority_score == 5
        assert result.priority == Priority.NORMAL

    def test_mostly_new_group(self):
        group = make_group(4, ["a", "b"], track=Track.GOLANG)

        result = PendingPriorityEvaluator().score_group(group, history(a=1), NOW)

        # +25 new member, +15 half new, +20 average below 1, +5 Golang, +5 no dropout
        assert "Majorité de nouveaux membres" in result.reasons
        assert result.priority_score == 25 + 15 + 20 + 5 + 5

    def test_history_lookup_is_case_insensitive(self):
        group = make_group(5, ["Alice"], track=Track.GOLANG)

        result = PendingPriorityEvaluator().score_group(group, history(alice=4), NOW)

        assert result.members_never_audited == 0

    @pytest.mark.parametrize("days, bonus", [(20, 20), (10, 10), (7, 0), (0, 0)])
    def test_staleness(self, days, bonus):
        evaluator = PendingPriorityEvaluator()
        fresh = make_group(6, ["a", "b", "c"], track=Track.RUST)
        stale = make_group(6, ["a", "b", "c"], track=Track.RUST)
        stale.finished_at = NOW - timedelta(days=days)
        known = history(a=3, b=3, c=3)

        base = evaluator.score_group(fresh, known, NOW).priority_score
        result = evaluator.score_group(stale, known, NOW)

        assert result.priority_score == base + bonus
        assert result.days_pending == days

    def test_more_active_members_scores_higher(self):
        evaluator = PendingPriorityEvaluator()
        small = make_group(7, ["a"], track=Track.GOLANG)
        large = make_group(8, ["a", "b", "c"], track=Track.GOLANG)

        assert evaluator.score_group(large, {}, NOW).priority_score > \
            evaluator.score_group(small, {}, NOW).priority_score

    def test_evaluate_sorts_and_counts(self):
        groups = [
            make_group("low", ["a", "b"], track=Track.GOLANG, dropouts={"b"}),
            make_group("high", ["x", "y"], track=Track.GOLANG),
            make_group("mid", ["p", "q", "r"], track=Track.JAVA),
        ]
        known = history(a=2, p=3, q=3, r=3)

        evaluation = PendingPriorityEvaluator().evaluate("303", groups, known, NOW)

        assert [g.group_id for g in evaluation.groups] == ["high", "mid", "low"]
        assert evaluation.total_pending == 3
        assert (evaluation.urgent_count, evaluation.warning_count, evaluation.normal_count) == (1, 1, 1)
        assert evaluation.evaluated_at == NOW

    def test_evaluate_empty(self):
        evaluation = PendingPriorityEvaluator().evaluate("303", [], {}, NOW)

        assert evaluation.groups == []
        assert evaluation.total_pending == 0

    def test_score_buckets(self):
        assert score_to_priority(50) == Priority.URGENT
        assert score_to_priority(49) == Priority.WARNING
        assert score_to_priority(25) == Priority.WARNING
        assert score_to_priority(24) == Priority.NORMAL


class TestAuditedGroupPriority:
    """Tests for audited_group_priority"""

    def test_low_validation_is_urgent_not_warning(self):
        result = audited_group_priority([], [[], [], [], []], validated_count=1, active_members=4)

        assert result.validation_rate == 25
        assert result.priority == Priority.URGENT

    def test_any_warning_is_urgent(self):
        result = audited_group_priority([], [[], ["late"]], validated_count=2, active_members=2)

        assert result.warnings_count == 1
        assert result.has_warnings
        assert result.priority == Priority.URGENT

    def test_global_and_member_warnings_add_up(self):
        result = audited_group_priority(["a", "b"], [["c"], []], validated_count=2, active_members=2)

        assert result.warnings_count == 3

    def test_warning_range(self):
        assert audited_group_priority([], [], 2, 5).priority == Priority.WARNING   # 40%
        assert audited_group_priority([], [], 3, 10).priority == Priority.WARNING  # 30%

    def test_normal(self):
        assert audited_group_priority([], [], 1, 2).priority == Priority.NORMAL    # 50%
        assert audited_group_priority([], [], 3, 3).priority == Priority.NORMAL

    def test_no_active_member_is_not_flagged(self):
        result = audited_group_priority([], [], validated_count=0, active_members=0)

        assert result.validation_rate == 100
        assert result.priority == Priority.NORMAL
