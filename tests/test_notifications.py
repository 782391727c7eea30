"""
Tests for notification sinks and the score update service.

Tests cover:
- In-memory inbox (dedup, ordering, read flags, bounds)
- Fan-out failure isolation
- Telegram delivery
- Triggered rescoring and published events
- Staleness and the periodic sweep
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from notifications.change_detection import initial_score_event
from notifications.score_updates import ScoreUpdateService
from notifications.sinks import (
    FanOutNotificationSink,
    InMemoryNotificationSink,
    LoggingNotificationSink,
    TelegramNotificationSink,
)
from notifications.types import NotificationType
from platform_metrics.types import Platform

from tests.helpers import NOW, FakeConnector, github_data, make_metrics, make_score


def _event(overall: int, snapshot_id: int, candidate_id: str = "c1"):
    return initial_score_event(make_score(overall, snapshot_id=snapshot_id, candidate_id=candidate_id))


# =============================================================
# TEST: In-Memory Sink
# =============================================================

class TestInMemorySink:

    @pytest.mark.asyncio
    async def test_duplicates_dropped(self):
        sink = InMemoryNotificationSink()
        event = _event(60, 1)

        assert await sink.publish(event) is True
        assert await sink.publish(event) is False
        assert len(sink.get_notifications("c1")) == 1

    @pytest.mark.asyncio
    async def test_newest_first_and_bounded(self):
        sink = InMemoryNotificationSink(limit=2)
        for snapshot_id in (1, 2, 3):
            await sink.publish(_event(60, snapshot_id))

        keys = [n.dedup_key for n in sink.get_notifications("c1")]

        assert keys == ["c1:score_update:none->3", "c1:score_update:none->2"]

    @pytest.mark.asyncio
    async def test_read_flags(self):
        sink = InMemoryNotificationSink()
        first, second = _event(60, 1), _event(60, 2)
        await sink.publish(first)
        await sink.publish(second)

        assert sink.mark_read("c1", first.dedup_key) is True
        assert sink.unread_count("c1") == 1
        assert [n.event for n in sink.get_notifications("c1", unread_only=True)] == [second]
        assert sink.mark_all_read("c1") == 1
        assert sink.unread_count("c1") == 0

    @pytest.mark.asyncio
    async def test_per_candidate_inboxes(self):
        sink = InMemoryNotificationSink()
        await sink.publish(_event(60, 1, "c1"))
        await sink.publish(_event(60, 2, "c2"))

        assert len(sink.get_notifications("c1")) == 1
        assert sink.get_notifications("c3") == []

    @pytest.mark.asyncio
    async def test_delete_and_clear(self):
        sink = InMemoryNotificationSink()
        event = _event(60, 1)
        await sink.publish(event)
        await sink.publish(_event(60, 2))

        assert sink.delete("c1", event.dedup_key) is True
        assert sink.delete("c1", event.dedup_key) is False
        sink.clear("c1")
        assert sink.get_notifications("c1") == []


# =============================================================
# TEST: Fan-Out and Telegram
# =============================================================

class TestFanOutSink:

    @pytest.mark.asyncio
    async def test_failing_sink_is_isolated(self):
        broken = MagicMock()
        broken.publish = AsyncMock(side_effect=RuntimeError("boom"))
        inbox = InMemoryNotificationSink()
        sink = FanOutNotificationSink([broken, LoggingNotificationSink()])
        sink.add_sink(inbox)

        delivered = await sink.publish(_event(60, 1))

        assert delivered is True
        assert len(inbox.get_notifications("c1")) == 1
        assert len(sink.sinks) == 3


class TestTelegramSink:

    @staticmethod
    def _client(response=None, error=None):
        client = MagicMock()
        client.post = AsyncMock(return_value=response, side_effect=error)
        client_class = MagicMock()
        client_class.return_value.__aenter__.return_value = client
        return client_class, client

    @pytest.mark.asyncio
    async def test_sends_markdown(self):
        client_class, client = self._client(response=MagicMock(status_code=200))
        sink = TelegramNotificationSink("token", "chat-1")

        with patch("httpx.AsyncClient", client_class):
            assert await sink.publish(_event(60, 1)) is True

        url = client.post.call_args.args[0]
        payload = client.post.call_args.kwargs["json"]
        assert url == "https://api.telegram.org/bottoken/sendMessage"
        assert payload["chat_id"] == "chat-1"
        assert payload["parse_mode"] == "Markdown"

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        client_class, _ = self._client(response=MagicMock(status_code=403))

        with patch("httpx.AsyncClient", client_class):
            assert await TelegramNotificationSink("token", "chat").publish(_event(60, 1)) is False

    @pytest.mark.asyncio
    async def test_transport_error(self):
        client_class, _ = self._client(error=httpx.ConnectError("unreachable"))

        with patch("httpx.AsyncClient", client_class):
            assert await TelegramNotificationSink("token", "chat").publish(_event(60, 1)) is False


# =============================================================
# TEST: Score Update Service
# =============================================================

@pytest.fixture
def inbox():
    return InMemoryNotificationSink()


@pytest.fixture
def service(engine, persistence, inbox, clock):
    return ScoreUpdateService(engine, persistence, sink=inbox, clock=clock)


def _types(inbox, candidate_id="c1"):
    """Event types in publish order."""
    return [n.event.event_type for n in reversed(inbox.get_notifications(candidate_id, limit=100))]


class TestScoreUpdateService:

    @pytest.mark.asyncio
    async def test_first_score_announced(self, service, persistence, inbox):
        persistence.connect("c1", Platform.GITHUB, "octo")
        persistence.cache_metrics("c1", make_metrics(Platform.GITHUB, 60, ["Add a bio"]))

        await service.on_platform_data_changed("c1", Platform.GITHUB)

        assert _types(inbox) == [NotificationType.SCORE_UPDATE, NotificationType.NEW_RECOMMENDATION]

    @pytest.mark.asyncio
    async def test_change_announced(self, service, persistence, inbox, clock):
        persistence.connect("c1", Platform.GITHUB, "octo")
        persistence.cache_metrics("c1", make_metrics(Platform.GITHUB, 60))
        await service.on_platform_data_changed("c1", Platform.GITHUB)

        clock.advance(minutes=5)
        persistence.cache_metrics("c1", make_metrics(Platform.GITHUB, 75))
        result = await service.on_platform_data_changed("c1", Platform.GITHUB)

        assert result.change_amount == 15
        assert _types(inbox)[-1] == NotificationType.SCORE_IMPROVEMENT

    @pytest.mark.asyncio
    async def test_unchanged_score_is_silent(self, service, persistence, inbox):
        persistence.connect("c1", Platform.GITHUB, "octo")
        persistence.cache_metrics("c1", make_metrics(Platform.GITHUB, 60))
        await service.on_platform_data_changed("c1", Platform.GITHUB)
        published = len(inbox.get_notifications("c1"))

        await service.on_platform_data_changed("c1", Platform.GITHUB)

        assert len(inbox.get_notifications("c1")) == published

    @pytest.mark.asyncio
    async def test_platform_connected(self, service, persistence, registry, inbox):
        connector = FakeConnector(Platform.GITHUB, data=github_data(bio="hi"))
        registry.register(connector)
        persistence.connect("c1", Platform.GITHUB, "octo")

        result = await service.on_platform_connected("c1", Platform.GITHUB, "octo")

        assert connector.calls == ["octo"]
        assert result.current.connected
        assert _types(inbox)[:2] == [NotificationType.PLATFORM_CONNECTED, NotificationType.SCORE_UPDATE]

    @pytest.mark.asyncio
    async def test_refresh_and_notify(self, service, persistence, registry, inbox):
        registry.register(FakeConnector(Platform.GITHUB, data=github_data()))
        persistence.connect("c1", Platform.GITHUB, "octo")

        await service.refresh_and_notify("c1")

        assert _types(inbox)[0] == NotificationType.PLATFORM_DATA_REFRESHED
        assert NotificationType.SCORE_UPDATE in _types(inbox)

    @pytest.mark.asyncio
    async def test_republishing_is_idempotent(self, service, engine, persistence, inbox):
        result = await engine.calculate_and_store_score("c1")

        await service.publish_result("c1", result)
        count = len(inbox.get_notifications("c1"))
        await service.publish_result("c1", result)

        assert len(inbox.get_notifications("c1")) == count

    @pytest.mark.asyncio
    async def test_sink_failure_keeps_score(self, engine, persistence, clock):
        broken = MagicMock()
        broken.publish = AsyncMock(side_effect=RuntimeError("sink down"))
        service = ScoreUpdateService(engine, persistence, sink=broken, clock=clock)

        result = await service.on_platform_data_changed("c1", Platform.GITHUB)

        assert result.current.snapshot_id is not None
        assert len(persistence.snapshots["c1"]) == 1


class TestStalenessAndSweep:

    @pytest.mark.asyncio
    async def test_never_scored_is_stale(self, service):
        assert await service.is_stale("c1") is True

    @pytest.mark.asyncio
    async def test_fresh_score_and_sync(self, service, engine, persistence, clock):
        persistence.connect("c1", Platform.GITHUB, "octo", last_synced_at=NOW)
        await engine.calculate_and_store_score("c1")

        assert await service.is_stale("c1") is False

        clock.advance(hours=25)
        assert await service.is_stale("c1") is True

    @pytest.mark.asyncio
    async def test_unsynced_connection_is_stale(self, service, engine, persistence):
        persistence.connect("c1", Platform.GITHUB, "octo")
        await engine.calculate_and_store_score("c1")

        assert await service.is_stale("c1") is True

    @pytest.mark.asyncio
    async def test_unknown_candidate_is_not_stale(self, service):
        assert await service.is_stale("nobody") is False

    @pytest.mark.asyncio
    async def test_periodic_update_skips_fresh(self, service, engine, persistence):
        await engine.calculate_and_store_score("c1")

        assert await service.run_periodic_update("c1") is None
        assert len(persistence.snapshots["c1"]) == 1

    @pytest.mark.asyncio
    async def test_sweep_isolates_failures(self, service, persistence):
        persistence.add_candidate("c2")
        persistence.fail_append_for.add("c2")

        summary = await service.run_sweep()

        assert summary.checked == 2
        assert summary.refreshed == 1
        assert list(summary.failed) == ["c2"]
        assert len(persistence.snapshots["c1"]) == 1
