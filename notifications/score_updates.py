"""
Notifications - Score Update Service.

============================================================
TRIGGERS
============================================================
- on_platform_data_changed: rescore from cache, notify diff
- on_platform_connected: announce, fetch that platform,
  rescore, notify diff
- refresh_and_notify: refresh every platform, rescore,
  announce refresh, notify diff
- run_periodic_update: refresh_and_notify only when stale
- run_sweep: run_periodic_update for every candidate

============================================================
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, List, Optional

from core.clock import ClockProtocol, ensure_utc, get_clock
from core.exceptions import CandidateNotFoundError, DareScoreException
from platform_metrics.types import Platform
from scoring_engine.engine import ScoringEngine
from scoring_engine.interfaces import Persistence
from scoring_engine.types import ScoreUpdateResult

from .change_detection import (
    data_refreshed_event,
    diff_scores,
    initial_score_event,
    platform_connected_event,
)
from .sinks import LoggingNotificationSink, NotificationSink
from .types import NotificationEvent


logger = logging.getLogger(__name__)


DEFAULT_STALE_AFTER = timedelta(hours=24)


@dataclass
class SweepSummary:
    """Counts from one run_sweep() pass."""

    checked: int = 0
    refreshed: int = 0
    failed: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, object]:
        return {"checked": self.checked, "refreshed": self.refreshed, "failed": dict(self.failed)}


class ScoreUpdateService:
    """
    Recalculates scores on data changes and publishes events.

    Publishing happens after the snapshot is stored; a sink
    failure never loses a score.
    """

    def __init__(
        self,
        engine: ScoringEngine,
        persistence: Persistence,
        sink: Optional[NotificationSink] = None,
        clock: Optional[ClockProtocol] = None,
        stale_after: timedelta = DEFAULT_STALE_AFTER,
    ):
        self._engine = engine
        self._persistence = persistence
        self._sink = sink or LoggingNotificationSink()
        self._clock = clock or get_clock()
        self._stale_after = stale_after

    # ============================================================
    # TRIGGERS
    # ============================================================

    async def on_platform_data_changed(self, candidate_id: str, platform: Platform) -> ScoreUpdateResult:
        """Rescore after a platform's cached data changed."""
        logger.debug(f"[ScoreUpdates] {platform.value} data changed for {candidate_id}")
        result = await self._engine.calculate_and_store_score(candidate_id)
        await self.publish_result(candidate_id, result)
        return result

    async def on_platform_connected(
        self,
        candidate_id: str,
        platform: Platform,
        username: str,
    ) -> ScoreUpdateResult:
        """Announce a new connection, fetch it, then rescore."""
        await self._publish(platform_connected_event(candidate_id, platform, username, self._clock.now()))
        await self._engine.aggregator.refresh_platform(candidate_id, platform)
        result = await self._engine.calculate_and_store_score(candidate_id)
        await self.publish_result(candidate_id, result)
        return result

    async def refresh_and_notify(self, candidate_id: str) -> ScoreUpdateResult:
        """
        Refresh all platforms, rescore and notify.

        Raises:
            CandidateNotFoundError: Unknown candidate
        """
        if await self._persistence.get_candidate_profile(candidate_id) is None:
            raise CandidateNotFoundError(candidate_id)

        connections = await self._persistence.list_connections(candidate_id)
        result = await self._engine.refresh_and_recalculate(candidate_id)

        if connections:
            await self._publish(
                data_refreshed_event(
                    candidate_id,
                    [c.platform for c in connections],
                    result.current.calculated_at,
                )
            )
        await self.publish_result(candidate_id, result)
        return result

    async def run_periodic_update(self, candidate_id: str) -> Optional[ScoreUpdateResult]:
        """
        Refresh only if the candidate's data is stale.

        Stale means: never scored, latest snapshot older than
        the staleness window, or any connection never synced or
        synced before the window.

        Returns:
            The update result, or None if nothing was stale
        """
        if not await self.is_stale(candidate_id):
            return None
        return await self.refresh_and_notify(candidate_id)

    async def is_stale(self, candidate_id: str) -> bool:
        if await self._persistence.get_candidate_profile(candidate_id) is None:
            return False

        latest = await self._persistence.get_latest_snapshot(candidate_id)
        if latest is None or self._clock.is_older_than(ensure_utc(latest.calculated_at), self._stale_after):
            return True

        for connection in await self._persistence.list_connections(candidate_id):
            if connection.last_synced_at is None:
                return True
            if self._clock.is_older_than(ensure_utc(connection.last_synced_at), self._stale_after):
                return True
        return False

    async def run_sweep(self) -> SweepSummary:
        """
        Periodic update across all candidates.

        A failing candidate is logged and counted; the sweep
        moves on to the next.
        """
        summary = SweepSummary()
        for candidate_id in await self._persistence.list_candidate_ids():
            summary.checked += 1
            try:
                if await self.run_periodic_update(candidate_id) is not None:
                    summary.refreshed += 1
            except DareScoreException as e:
                logger.error(f"[ScoreUpdates] Sweep failed for {candidate_id}: {e}", exc_info=True)
                summary.failed[candidate_id] = str(e)

        logger.info(
            f"[ScoreUpdates] Sweep complete: checked={summary.checked} "
            f"refreshed={summary.refreshed} failed={len(summary.failed)}"
        )
        return summary

    # ============================================================
    # PUBLISHING
    # ============================================================

    def events_for(self, candidate_id: str, result: ScoreUpdateResult) -> List[NotificationEvent]:
        """Events describing one ScoreUpdateResult."""
        events = diff_scores(result.previous, result.current, candidate_id).events
        if result.previous is None:
            events.insert(0, initial_score_event(result.current, candidate_id))
        return events

    async def publish_result(self, candidate_id: str, result: ScoreUpdateResult) -> None:
        for event in self.events_for(candidate_id, result):
            await self._publish(event)

    async def _publish(self, event: NotificationEvent) -> None:
        try:
            await self._sink.publish(event)
        except Exception as e:
            logger.error(
                f"[ScoreUpdates] Failed to publish {event.event_type.value} "
                f"for {event.candidate_id}: {e}",
                exc_info=True,
            )
