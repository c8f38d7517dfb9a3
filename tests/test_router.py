"""Tests for daily stream naming, rollover and the token cache."""

from datetime import date, datetime, timedelta, timezone

import pytest

from logship.router import StreamRouter
from logship.tokens import SequenceTokenCache
from logship.topology import TopologyManager


class TestSequenceTokenCache:
    def test_absent_token_is_none(self):
        assert SequenceTokenCache().get("g", "s") is None

    def test_last_token_wins(self):
        cache = SequenceTokenCache()
        cache.set("g", "s", "t1")
        cache.set("g", "s", "t2")

        assert cache.get("g", "s") == "t2"
        assert len(cache) == 1

    def test_keys_are_group_and_stream(self):
        cache = SequenceTokenCache()
        cache.set("g", "s", "t1")
        cache.set("g2", "s", "t2")

        assert cache.get("g", "s") == "t1"
        assert ("g2", "s") in cache

    def test_clear_and_discard(self):
        cache = SequenceTokenCache()
        cache.set("g", "a", "t1")
        cache.set("g", "b", "t2")
        cache.discard("g", "a")

        assert cache.get("g", "a") is None
        cache.clear()
        assert len(cache) == 0


class TestStreamRouter:
    @pytest.fixture
    def tokens(self):
        return SequenceTokenCache()

    @pytest.fixture
    def router(self, fake_client, tokens, clock):
        fake_client.groups["/app/api"] = {}
        return StreamRouter("api-logs", TopologyManager(fake_client), tokens, clock)

    def test_stream_name(self, router):
        assert router.stream_name("2024-03-09") == "api-logs-2024-03-09"
        assert router.stream_name(date(2024, 1, 2)) == "api-logs-2024-01-02"
        assert router.stream_name() == "api-logs-2024-03-09"

    def test_today_is_utc(self, router, clock):
        # 01:30 on the 10th in UTC+9 is still the 9th in UTC
        clock.now = datetime(2024, 3, 10, 1, 30, tzinfo=timezone(timedelta(hours=9)))

        assert router.today() == "2024-03-09"

    def test_starts_uninitialized(self, router):
        assert router.active_date is None

    @pytest.mark.asyncio
    async def test_resolve_creates_todays_stream(self, router, fake_client):
        name = await router.resolve_active_stream("/app/api")

        assert name == "api-logs-2024-03-09"
        assert name in fake_client.groups["/app/api"]
        assert router.active_date == "2024-03-09"

    @pytest.mark.asyncio
    async def test_same_day_keeps_tokens(self, router, tokens):
        await router.resolve_active_stream("/app/api")
        tokens.set("/app/api", "api-logs-2024-03-09", "t1")

        await router.resolve_active_stream("/app/api")

        assert tokens.get("/app/api", "api-logs-2024-03-09") == "t1"

    @pytest.mark.asyncio
    async def test_rollover_clears_tokens(self, router, tokens, clock, fake_client):
        await router.resolve_active_stream("/app/api")
        tokens.set("/app/api", "api-logs-2024-03-09", "t1")
        tokens.set("/app/errors", "api-logs-2024-03-09", "t2")

        clock.now += timedelta(days=1)
        name = await router.resolve_active_stream("/app/api")

        assert name == "api-logs-2024-03-10"
        assert router.active_date == "2024-03-10"
        assert len(tokens) == 0
        assert name in fake_client.groups["/app/api"]

    @pytest.mark.asyncio
    async def test_topology_failure_still_returns_name(self, router, fake_client, unreachable):
        fake_client.fail["describe_log_streams"] = unreachable

        name = await router.resolve_active_stream("/app/api")

        assert name == "api-logs-2024-03-09"
        assert router.active_date == "2024-03-09"
