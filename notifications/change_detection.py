"""
Notifications - Change Detection.

============================================================
PURPOSE
============================================================
Pure diff of (previous | None, current) composite scores into
candidate-facing events.

============================================================
RULES
============================================================
1. Score-change event only when previous exists and the
   overall score differs; the sign picks improvement/decline
2. New-recommendation event carries current - previous
   recommendations (exact string match, current order);
   suppressed when empty. With no previous score every
   current recommendation is new
3. No clock reads: created_at is the current score's
   timestamp, so repeated calls yield equal events

============================================================
"""

from datetime import datetime
from typing import Iterable, List, Optional

from platform_metrics.types import Platform, PlatformFamily
from scoring_engine.types import CompositeScore

from .types import ChangeSummary, NotificationEvent, NotificationType


TOP_RECOMMENDATIONS = 3


def _score_marker(score: Optional[CompositeScore]) -> str:
    if score is None:
        return "none"
    if score.snapshot_id is not None:
        return str(score.snapshot_id)
    return score.calculated_at.isoformat()


def _dedup_key(
    candidate_id: str,
    event_type: NotificationType,
    previous: Optional[CompositeScore],
    current: CompositeScore,
) -> str:
    return f"{candidate_id}:{event_type.value}:{_score_marker(previous)}->{_score_marker(current)}"


def affected_families(
    previous: Optional[CompositeScore],
    current: CompositeScore,
) -> List[PlatformFamily]:
    """Families whose score differs between the two snapshots."""
    if previous is None:
        return list(current.connected)
    return [
        family
        for family in PlatformFamily.all_families()
        if previous.family_score(family) != current.family_score(family)
    ]


def new_recommendations(
    previous: Optional[CompositeScore],
    current: CompositeScore,
) -> List[str]:
    if previous is None:
        return list(current.recommendations)
    seen = set(previous.recommendations)
    return [r for r in current.recommendations if r not in seen]


# ============================================================
# SCORE EVENTS
# ============================================================


def score_change_event(
    previous: Optional[CompositeScore],
    current: CompositeScore,
    candidate_id: Optional[str] = None,
) -> Optional[NotificationEvent]:
    """Improvement/decline event, or None when the overall did not change."""
    if previous is None or previous.overall == current.overall:
        return None

    candidate_id = candidate_id or current.candidate_id or ""
    change = current.overall - previous.overall

    if change > 0:
        event_type = NotificationType.SCORE_IMPROVEMENT
        title = f"Score Improved by {change} points!"
        message = (
            f"Great work! Your overall score increased from {previous.overall} "
            f"to {current.overall}. Keep up the momentum!"
        )
    else:
        event_type = NotificationType.SCORE_DECLINE
        title = f"Score Changed by {change} points"
        message = (
            f"Your score changed from {previous.overall} to {current.overall}. "
            f"Check your profile for improvement suggestions."
        )

    return NotificationEvent(
        event_type=event_type,
        candidate_id=candidate_id,
        title=title,
        message=message,
        created_at=current.calculated_at,
        dedup_key=_dedup_key(candidate_id, event_type, previous, current),
        data={
            "previous_score": previous.overall,
            "current_score": current.overall,
            "change_amount": change,
            "affected_families": [f.value for f in affected_families(previous, current)],
            "recommendations": list(current.recommendations[:TOP_RECOMMENDATIONS]),
        },
    )


def new_recommendations_event(
    previous: Optional[CompositeScore],
    current: CompositeScore,
    candidate_id: Optional[str] = None,
) -> Optional[NotificationEvent]:
    fresh = new_recommendations(previous, current)
    if not fresh:
        return None

    candidate_id = candidate_id or current.candidate_id or ""
    plural = "s" if len(fresh) > 1 else ""
    return NotificationEvent(
        event_type=NotificationType.NEW_RECOMMENDATION,
        candidate_id=candidate_id,
        title="New Improvement Suggestions",
        message=f"We have {len(fresh)} new recommendation{plural} to help improve your score.",
        created_at=current.calculated_at,
        dedup_key=_dedup_key(candidate_id, NotificationType.NEW_RECOMMENDATION, previous, current),
        data={"recommendations": fresh},
    )


def diff_scores(
    previous: Optional[CompositeScore],
    current: CompositeScore,
    candidate_id: Optional[str] = None,
) -> ChangeSummary:
    """
    Diff two scores into at most two events.

    Args:
        previous: Prior snapshot, or None for a first score
        current: New snapshot
        candidate_id: Defaults to current.candidate_id

    Returns:
        ChangeSummary with the score and recommendation events
    """
    return ChangeSummary(
        score_event=score_change_event(previous, current, candidate_id),
        recommendation_event=new_recommendations_event(previous, current, candidate_id),
    )


def initial_score_event(current: CompositeScore, candidate_id: Optional[str] = None) -> NotificationEvent:
    """Announces a candidate's first score."""
    candidate_id = candidate_id or current.candidate_id or ""
    return NotificationEvent(
        event_type=NotificationType.SCORE_UPDATE,
        candidate_id=candidate_id,
        title="Your Dare Score is Ready",
        message=f"Your first overall score is {current.overall}.",
        created_at=current.calculated_at,
        dedup_key=_dedup_key(candidate_id, NotificationType.SCORE_UPDATE, None, current),
        data={
            "current_score": current.overall,
            "change_amount": current.overall,
            "affected_families": [f.value for f in current.connected],
            "recommendations": list(current.recommendations[:TOP_RECOMMENDATIONS]),
        },
    )


# ============================================================
# PLATFORM EVENTS
# ============================================================


def platform_connected_event(
    candidate_id: str,
    platform: Platform,
    username: str,
    connected_at: datetime,
) -> NotificationEvent:
    name = platform.display_name
    return NotificationEvent(
        event_type=NotificationType.PLATFORM_CONNECTED,
        candidate_id=candidate_id,
        title=f"{name} Connected",
        message=(
            f"Your {name} account (@{username}) has been connected. "
            f"We'll start fetching your data soon."
        ),
        created_at=connected_at,
        dedup_key=f"{candidate_id}:{NotificationType.PLATFORM_CONNECTED.value}:{platform.value}:{username}",
        data={"platform": platform.value, "username": username},
    )


def data_refreshed_event(
    candidate_id: str,
    platforms: Iterable[Platform],
    refreshed_at: datetime,
) -> NotificationEvent:
    platforms = list(platforms)
    names = ", ".join(p.display_name for p in platforms)
    return NotificationEvent(
        event_type=NotificationType.PLATFORM_DATA_REFRESHED,
        candidate_id=candidate_id,
        title="Profile Data Updated",
        message=f"Your data from {names} has been refreshed. Your score may have changed.",
        created_at=refreshed_at,
        dedup_key=(
            f"{candidate_id}:{NotificationType.PLATFORM_DATA_REFRESHED.value}:"
            f"{refreshed_at.isoformat()}"
        ),
        data={"platforms": [p.value for p in platforms]},
    )
