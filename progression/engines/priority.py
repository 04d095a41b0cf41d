"""
Code-review Priority Engine.

This module ranks groups in the code-review queue. Groups that have no
audit yet and groups that already have one are ranked by two independent
rules and must never be mixed up.
"""

from datetime import datetime
from typing import Optional

from ..config import (
    LARGE_GROUP_SIZE,
    SCORE_ALL_NEW,
    SCORE_FEW_AUDITS,
    SCORE_LARGE_GROUP,
    SCORE_MOSTLY_NEW,
    SCORE_NO_DROPOUT,
    SCORE_PER_NEW_MEMBER,
    SCORE_SOME_AUDITS,
    SCORE_STALE_URGENT,
    SCORE_STALE_WARNING,
    STALE_URGENT_DAYS,
    STALE_WARNING_DAYS,
    TRACK_BONUS,
    URGENT_SCORE,
    URGENT_VALIDATION_RATE,
    WARNING_SCORE,
    WARNING_VALIDATION_RATE,
)
from ..models import (
    AuditedGroupPriority,
    Group,
    PendingGroupPriority,
    Priority,
    PriorityEvaluation,
)


def score_to_priority(score: int) -> Priority:
    if score >= URGENT_SCORE:
        return Priority.URGENT
    if score >= WARNING_SCORE:
        return Priority.WARNING
    return Priority.NORMAL


class PendingPriorityEvaluator:
    """
    Scores finished groups that are still waiting for their audit.

    SCORING (higher = more urgent):
    -------------------------------
    - +25 per active member never audited in the promotion
    - never-audited share of the group: all new +30, at least half +15
    - average previous audits per active member: below 1 +20, below 2 +10
    - track bonus, later tracks first: Golang 5, Javascript 10, Rust/Java 15
    - 3 or more active members: +5
    - days since the group finished: over 14 +20, over 7 +10
    - nobody in the roster dropped out: +5

    BUCKETS:
    --------
    score >= 50 is urgent, >= 25 is warning, anything lower is normal.

    Only active members are scored; dropouts are kept on the group for
    record-keeping.
    """

    def score_group(self, group: Group, history: dict, now: Optional[datetime] = None) -> PendingGroupPriority:
        """
        Args:
            group: A finished Group without audit
            history: {lowercased login: AuditHistory} of the promotion
            now: Reference time for staleness (defaults to now)
        """
        now = now or datetime.now()
        active = [m.login for m in group.active_members]
        active_count = len(active)

        score = 0
        reasons = []

        never_audited = 0
        previous_audits = 0
        for login in active:
            entry = history.get(login.lower())
            if entry is None or entry.audit_count == 0:
                never_audited += 1
                score += SCORE_PER_NEW_MEMBER
            else:
                previous_audits += entry.audit_count

        if never_audited > 0:
            reasons.append(f"{never_audited} membre(s) jamais audité(s)")

        if active_count > 0:
            ratio = never_audited / active_count
            if ratio == 1:
                score += SCORE_ALL_NEW
                reasons.append("Groupe entièrement nouveau")
            elif ratio >= 0.5:
                score += SCORE_MOSTLY_NEW
                reasons.append("Majorité de nouveaux membres")

        avg_audits = previous_audits / active_count if active_count > 0 else 0.0
        if active_count > 0 and avg_audits < 1:
            score += SCORE_FEW_AUDITS
            reasons.append("Peu d'audits précédents")
        elif avg_audits < 2:
            score += SCORE_SOME_AUDITS

        track_name = group.track.value if group.track is not None else None
        score += TRACK_BONUS.get(track_name, 0)

        if active_count >= LARGE_GROUP_SIZE:
            score += SCORE_LARGE_GROUP

        days_pending = None
        if group.finished_at is not None:
            days_pending = (now - group.finished_at).days
            if days_pending > STALE_URGENT_DAYS:
                score += SCORE_STALE_URGENT
                reasons.append(f"En attente depuis {days_pending} jours")
            elif days_pending > STALE_WARNING_DAYS:
                score += SCORE_STALE_WARNING
                reasons.append(f"En attente depuis {days_pending} jours")

        if group.members and group.dropout_count == 0:
            score += SCORE_NO_DROPOUT

        return PendingGroupPriority(
            group_id=group.group_id,
            project_name=group.project_name,
            track=group.track,
            members=active,
            active_members=active_count,
            priority_score=score,
            priority=score_to_priority(score),
            reasons=reasons,
            members_never_audited=never_audited,
            total_previous_audits=previous_audits,
            avg_audits_per_member=round(avg_audits, 1),
            days_pending=days_pending,
        )

    def evaluate(self, promo_id: str, groups: list, history: dict,
                 now: Optional[datetime] = None) -> PriorityEvaluation:
        """
        Evaluate every pending group of a promotion.

        Returns:
            PriorityEvaluation with groups sorted by descending score. The
            sort is stable so equal scores keep their input order.
        """
        now = now or datetime.now()
        scored = [self.score_group(group, history, now) for group in groups]
        scored.sort(key=lambda g: g.priority_score, reverse=True)

        return PriorityEvaluation(
            promo_id=str(promo_id),
            evaluated_at=now,
            total_pending=len(groups),
            urgent_count=sum(1 for g in scored if g.priority == Priority.URGENT),
            warning_count=sum(1 for g in scored if g.priority == Priority.WARNING),
            normal_count=sum(1 for g in scored if g.priority == Priority.NORMAL),
            groups=scored,
        )


def audited_group_priority(global_warnings: list, member_warnings: list,
                           validated_count: int, active_members: int) -> AuditedGroupPriority:
    """
    Priority of a group that already has an audit.

    The urgent check runs before the warning check: a group with no warning
    and a 25% validation rate is urgent.

    Args:
        global_warnings: Warnings attached to the audit itself
        member_warnings: One warning list per audited member
        validated_count: Members whose audit is validated
        active_members: Members of the group still in the program

    Returns:
        AuditedGroupPriority
    """
    warnings_count = len(global_warnings or []) + sum(len(w or []) for w in member_warnings)
    # An empty group is not flagged
    rate = validated_count / active_members * 100 if active_members > 0 else 100.0

    if warnings_count > 0 or rate < URGENT_VALIDATION_RATE:
        priority = Priority.URGENT
    elif rate < WARNING_VALIDATION_RATE:
        priority = Priority.WARNING
    else:
        priority = Priority.NORMAL

    return AuditedGroupPriority(
        warnings_count=warnings_count,
        validated_count=validated_count,
        active_members=active_members,
        validation_rate=rate,
        priority=priority,
    )


def priority_for_audit(audit, group: Group) -> AuditedGroupPriority:
    """Audited priority from a stored Audit and the group it belongs to."""
    results = list(audit.results)
    return audited_group_priority(
        audit.warnings or [],
        [r.warnings or [] for r in results],
        sum(1 for r in results if r.validated),
        len(group.active_members),
    )
