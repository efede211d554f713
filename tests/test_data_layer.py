import asyncio
from datetime import datetime

import pytest

from bozo_bets.data.cache import CacheManager
from bozo_bets.data.sources import (
    BaseDataSource,
    CircuitBreakerConfig,
    DataSourceError,
    DataSourceStatus,
    RetryConfig,
    UsageCheck,
)
from bozo_bets.database.models import FanduelProp
from bozo_bets.props.fanduel import fetch_week_props

from .conftest import SEASON


class FlakySource(BaseDataSource):
    def __init__(self, **kwargs):
        super().__init__(
            "flaky",
            retry_config=RetryConfig(max_attempts=3, initial_delay_seconds=0, jitter=False),
            **kwargs,
        )

    async def health_check(self):
        return self.get_health()


def test_memory_cache_roundtrip_and_delete():
    cache = CacheManager.create_memory_cache()

    async def run():
        await cache.set("props:2025:2", [{"fanduel_id": "fd-1"}], data_type="props")
        await cache.set("odds:2025:2", {"line": 1.5})
        hit = await cache.get("props:2025:2")
        ttl = await cache.backend.get_ttl("bozo_bets:props:2025:2")
        await cache.delete("props:2025:2")
        return hit, ttl, await cache.get("props:2025:2"), await cache.get("odds:2025:2")

    hit, ttl, cleared, kept = asyncio.run(run())

    assert hit == [{"fanduel_id": "fd-1"}]
    assert 0 < ttl <= CacheManager.DEFAULT_TTLS["props"]
    assert cleared is None
    assert kept == {"line": 1.5}


def test_memory_cache_health_check():
    cache = CacheManager.create_memory_cache()

    health = asyncio.run(cache.health_check())

    assert health == {"status": "healthy", "backend": "InMemoryCache"}
    assert asyncio.run(cache.get("_health_check")) is None


def test_retry_until_success():
    source = FlakySource()
    attempts = []

    async def fetch():
        attempts.append(1)
        if len(attempts) < 3:
            raise DataSourceError("timeout", "flaky")
        return "ok"

    assert asyncio.run(source.call_with_retry(fetch)) == "ok"
    assert len(attempts) == 3
    assert source.get_health().status == DataSourceStatus.HEALTHY


def test_non_retryable_error_stops_immediately():
    source = FlakySource()
    attempts = []

    async def fetch():
        attempts.append(1)
        raise DataSourceError("bad key", "flaky", retry_allowed=False)

    with pytest.raises(DataSourceError, match="bad key"):
        asyncio.run(source.call_with_retry(fetch))
    assert len(attempts) == 1


def test_circuit_opens_after_repeated_failures():
    source = FlakySource(
        circuit_breaker_config=CircuitBreakerConfig(failure_threshold=2, recovery_timeout_seconds=60)
    )

    async def fetch():
        raise RuntimeError("down")

    for _ in range(2):
        with pytest.raises(DataSourceError, match="All 3 attempts failed"):
            asyncio.run(source.call_with_retry(fetch))

    assert not source.is_available
    assert source.get_health().status == DataSourceStatus.UNHEALTHY
    with pytest.raises(DataSourceError, match="not available"):
        asyncio.run(source.call_with_retry(fetch))

    source.reset_circuit_breaker()
    assert source.is_available


class FakeOddsClient:
    enabled = True

    def __init__(self, allowed=True, records=None, error=None):
        self.allowed = allowed
        self.records = records or []
        self.error = error
        self.fetches = 0

    def can_make_request(self, db):
        if self.allowed:
            return UsageCheck(allowed=True)
        return UsageCheck(allowed=False, reason="Monthly limit of 500 requests reached")

    async def fetch_nfl_odds(self, db, week, season):
        self.fetches += 1
        if self.error:
            raise self.error
        return self.records


def prop_record(fanduel_id, odds=-110):
    return {
        "fanduel_id": fanduel_id,
        "player": "Buffalo Bills vs New York Jets",
        "team": "Buffalo Bills",
        "prop": "Moneyline",
        "line": 0.0,
        "odds": odds,
        "week": 2,
        "season": SEASON,
        "game_time": datetime(2025, 9, 14, 17, 0),
    }


def test_fetch_week_props_stores_and_caches(db):
    client = FakeOddsClient(records=[prop_record("fd-ml", -250)])
    cache = CacheManager.create_memory_cache()

    async def run():
        first = await fetch_week_props(db, client, 2, SEASON, cache=cache)
        second = await fetch_week_props(db, client, 2, SEASON, cache=cache)
        return first, second

    first, second = asyncio.run(run())

    assert [p["fanduel_id"] for p in first] == ["fd-ml"]
    assert second == first
    assert client.fetches == 1
    assert db.query(FanduelProp).one().odds == -250


def test_fetch_week_props_falls_back_to_stored(db):
    db.add(FanduelProp(**prop_record("fd-stored")))
    db.commit()

    over_quota = FakeOddsClient(allowed=False)
    failing = FakeOddsClient(error=DataSourceError("boom", "odds_api", retry_allowed=False))

    from_quota = asyncio.run(fetch_week_props(db, over_quota, 2, SEASON))
    from_error = asyncio.run(fetch_week_props(db, failing, 2, SEASON))

    assert over_quota.fetches == 0
    assert [p["fanduel_id"] for p in from_quota] == ["fd-stored"]
    assert [p["fanduel_id"] for p in from_error] == ["fd-stored"]
