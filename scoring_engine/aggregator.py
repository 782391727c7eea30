"""
Scoring Engine - Profile Aggregator.

============================================================
PURPOSE
============================================================
Assemble a candidate's DigitalProfile from per-platform
PlatformMetrics, whichever platforms happen to be connected.

============================================================
MODES
============================================================
1. Cached read (aggregate_profile)
   - No network
   - Skips platforms whose cache is absent, expired, or older
     than the platform's last recorded fetch failure
2. Refresh (refresh_all_platform_data)
   - Re-fetches every connected platform concurrently
   - Stores fresh metrics in the cache with a TTL
   - A failing platform is logged, recorded and treated as
     missing; the others still aggregate
   - Persistence failures propagate

============================================================
"""

import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional

from core.clock import ClockProtocol, ensure_utc, get_clock
from core.exceptions import CandidateNotFoundError, PersistenceError
from platform_connectors.cache import CachePolicy
from platform_connectors.registry import ConnectorRegistry
from platform_metrics.calculators import calculate_platform_metrics
from platform_metrics.config import PlatformMetricsConfig, get_default_config
from platform_metrics.types import Platform, PlatformMetrics

from .interfaces import Persistence
from .types import CachedMetrics, DigitalProfile, PlatformConnection


logger = logging.getLogger(__name__)


class ProfileAggregator:
    """
    Builds DigitalProfiles from the metrics cache and connectors.

    Holds no per-candidate state; concurrent calls for different
    candidates are independent.
    """

    def __init__(
        self,
        persistence: Persistence,
        registry: Optional[ConnectorRegistry] = None,
        cache_policy: Optional[CachePolicy] = None,
        metrics_config: Optional[PlatformMetricsConfig] = None,
        clock: Optional[ClockProtocol] = None,
    ):
        self._persistence = persistence
        self._registry = registry or ConnectorRegistry()
        self._cache_policy = cache_policy or CachePolicy()
        self._metrics_config = metrics_config or get_default_config()
        self._clock = clock or get_clock()

    # ============================================================
    # CACHED READ
    # ============================================================

    async def aggregate_profile(self, candidate_id: str) -> DigitalProfile:
        """
        Assemble a DigitalProfile from cached metrics only.

        Raises:
            CandidateNotFoundError: Unknown candidate
            PersistenceError: Storage failure
        """
        await self._require_candidate(candidate_id)
        now = self._clock.now()

        platforms: Dict[Platform, PlatformMetrics] = {}
        failed: Dict[Platform, str] = {}

        for connection in await self._persistence.list_connections(candidate_id):
            cached = await self._persistence.get_cached_metrics(candidate_id, connection.platform)
            usable = self._usable_cache(connection, cached, now)
            if usable is not None:
                platforms[connection.platform] = usable
            elif connection.last_error:
                failed[connection.platform] = connection.last_error

        logger.debug(
            f"[Aggregator] {candidate_id}: cached platforms="
            f"{[p.value for p in platforms]} failed={[p.value for p in failed]}"
        )
        return DigitalProfile.from_metrics(candidate_id, platforms, failed, assembled_at=now)

    @staticmethod
    def _usable_cache(
        connection: PlatformConnection,
        cached: Optional[CachedMetrics],
        now: datetime,
    ) -> Optional[PlatformMetrics]:
        if cached is None or cached.is_expired(now):
            return None
        # A failure recorded after this fetch means the data is from before the failure
        if connection.last_error_at is not None and ensure_utc(connection.last_error_at) > ensure_utc(
            cached.fetched_at
        ):
            return None
        return cached.metrics

    # ============================================================
    # REFRESH
    # ============================================================

    async def refresh_all_platform_data(self, candidate_id: str) -> DigitalProfile:
        """
        Re-fetch every connected platform, then assemble.

        Fetches run concurrently. Any single platform failure is
        isolated: logged, recorded via record_fetch_failure and
        treated as missing.

        Raises:
            CandidateNotFoundError: Unknown candidate
            PersistenceError: Storage failure (never isolated)
        """
        await self._require_candidate(candidate_id)
        connections = await self._persistence.list_connections(candidate_id)
        now = self._clock.now()

        results = await asyncio.gather(
            *(self._refresh_connection(candidate_id, c, now) for c in connections),
            return_exceptions=True,
        )

        platforms: Dict[Platform, PlatformMetrics] = {}
        failed: Dict[Platform, str] = {}

        for connection, result in zip(connections, results):
            if isinstance(result, PersistenceError):
                raise result
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result
            if isinstance(result, Exception):
                failed[connection.platform] = await self._record_failure(
                    candidate_id, connection, result, now
                )
                continue
            platforms[connection.platform] = result

        logger.info(
            f"[Aggregator] Refreshed {candidate_id}: "
            f"{len(platforms)} ok, {len(failed)} failed"
        )
        return DigitalProfile.from_metrics(candidate_id, platforms, failed, assembled_at=now)

    async def refresh_platform(
        self,
        candidate_id: str,
        platform: Platform,
    ) -> Optional[PlatformMetrics]:
        """
        Re-fetch a single connected platform.

        Returns:
            Fresh metrics, or None if the platform is not connected
            or the fetch failed (failure is recorded)
        """
        await self._require_candidate(candidate_id)
        now = self._clock.now()

        connection = next(
            (c for c in await self._persistence.list_connections(candidate_id) if c.platform == platform),
            None,
        )
        if connection is None:
            logger.warning(f"[Aggregator] {candidate_id} has no {platform.value} connection")
            return None

        try:
            return await self._refresh_connection(candidate_id, connection, now)
        except PersistenceError:
            raise
        except Exception as e:
            await self._record_failure(candidate_id, connection, e, now)
            return None

    async def _refresh_connection(
        self,
        candidate_id: str,
        connection: PlatformConnection,
        now: datetime,
    ) -> PlatformMetrics:
        connector = self._registry.get(connection.platform)
        if connector is None:
            raise LookupError(f"No connector registered for {connection.platform.value}")

        data = await connector.fetch(connection.username, candidate_id=candidate_id)
        metrics = calculate_platform_metrics(data, self._metrics_config, now=now)

        # Cache entries are keyed by the connection's platform
        if metrics.platform != connection.platform:
            raise LookupError(
                f"Connector returned {metrics.platform.value} data for {connection.platform.value}"
            )

        await self._persistence.store_cached_metrics(
            candidate_id,
            metrics,
            fetched_at=now,
            expires_at=self._cache_policy.expires_at(connection.platform, now),
        )
        return metrics

    async def _record_failure(
        self,
        candidate_id: str,
        connection: PlatformConnection,
        error: Exception,
        now: datetime,
    ) -> str:
        message = str(error) or type(error).__name__
        logger.warning(
            f"[Aggregator] {connection.platform.value} fetch failed for {candidate_id}: {message}"
        )
        await self._persistence.record_fetch_failure(candidate_id, connection.platform, message, now)
        return message

    async def _require_candidate(self, candidate_id: str) -> None:
        if await self._persistence.get_candidate_profile(candidate_id) is None:
            raise CandidateNotFoundError(candidate_id)

    @property
    def supported_platforms(self) -> List[Platform]:
        """Platforms that have a registered connector."""
        return list(self._registry)
