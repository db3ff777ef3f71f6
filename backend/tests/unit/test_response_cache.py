"""Unit tests for ResponseCache — keys, TTL, popularity, tenant scoping, degradation."""

import fnmatch
import json
from datetime import datetime, timedelta, timezone

import pytest

from onboard.application.services.response_cache import (
    ResponseCache,
    cache_key,
    popular_key,
    query_hash,
)
from onboard.domain.entities import ResourceDescriptor, SourceAttribution
from onboard.domain.exceptions import CacheBackendError

START = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


# ── Fakes ────────────────────────────────────────────────────────────


class FakeClock:
    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeCacheBackend:
    """In-memory stand-in for Redis with expiry driven by a FakeClock."""

    def __init__(self, clock: FakeClock):
        self._clock = clock
        self.values: dict[str, str] = {}
        self.expires: dict[str, datetime] = {}
        self.zsets: dict[str, dict[str, float]] = {}

    def _alive(self, key: str) -> bool:
        deadline = self.expires.get(key)
        if deadline is not None and self._clock() >= deadline:
            self.values.pop(key, None)
            self.expires.pop(key, None)
            return False
        return key in self.values or key in self.zsets

    async def get(self, key):
        return self.values.get(key) if self._alive(key) else None

    async def set(self, key, value, *, ttl_seconds):
        self.values[key] = value
        self.expires[key] = self._clock() + timedelta(seconds=ttl_seconds)

    async def incr(self, key):
        current = int(self.values[key]) if self._alive(key) else 0
        self.values[key] = str(current + 1)
        return current + 1

    async def expire(self, key, ttl_seconds):
        self.expires[key] = self._clock() + timedelta(seconds=ttl_seconds)

    async def zadd(self, key, member, score):
        self.zsets.setdefault(key, {})[member] = score

    async def zrevrange_with_scores(self, key, start, stop):
        ordered = sorted(self.zsets.get(key, {}).items(), key=lambda kv: (kv[1], kv[0]), reverse=True)
        return ordered[start : stop + 1]

    async def zcard(self, key):
        return len(self.zsets.get(key, {}))

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if key in self.values or key in self.zsets:
                removed += 1
            self.values.pop(key, None)
            self.expires.pop(key, None)
            self.zsets.pop(key, None)
        return removed

    async def scan_keys(self, pattern):
        keys = [k for k in list(self.values) if self._alive(k)] + list(self.zsets)
        return [k for k in keys if fnmatch.fnmatchcase(k, pattern)]

    async def ping(self):
        return True

    async def close(self):
        pass


class FailingCacheBackend:
    """Every call fails the way an unreachable Redis would."""

    def __getattr__(self, name):
        async def fail(*args, **kwargs):
            raise CacheBackendError(f"{name}: connection refused")

        return fail


def _sources() -> list[SourceAttribution]:
    return [
        SourceAttribution(
            resource_id="r1",
            score=0.91,
            preview="Vacation: 25 days.",
            resource=ResourceDescriptor(resource_id="r1", title="Handbook", kind="file", location="handbook.pdf"),
        )
    ]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def backend(clock) -> FakeCacheBackend:
    return FakeCacheBackend(clock)


@pytest.fixture
def cache(backend, clock) -> ResponseCache:
    return ResponseCache(backend, ttl_seconds=3600, clock=clock)


# ── Keys ─────────────────────────────────────────────────────────────


def test_keys_are_case_and_whitespace_insensitive():
    assert cache_key("What is PTO?", "t1") == cache_key("  what is pto?  ", "t1")
    assert cache_key("What is PTO?", "t1") != cache_key("What is PTO?", "t2")


def test_cache_key_layout():
    key = cache_key("Hello", "t1")

    assert key.startswith("ai:chat:t1:")
    assert key.rsplit(":", 1)[1] == query_hash("hello", "t1")
    assert len(query_hash("hello", "t1")) == 64


# ── Answers ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_put_then_get_round_trips_answer(cache):
    await cache.put("What is PTO?", "t1", "25 days.", _sources())

    cached = await cache.get("  WHAT IS PTO?", "t1")

    assert cached is not None
    assert cached.content == "25 days."
    assert cached.sources[0].resource.title == "Handbook"
    assert cached.cached_at == START


@pytest.mark.asyncio
async def test_entries_expire_after_ttl(cache, clock):
    await cache.put("What is PTO?", "t1", "25 days.", [])

    clock.advance(3599)
    assert await cache.get("What is PTO?", "t1") is not None

    clock.advance(2)
    assert await cache.get("What is PTO?", "t1") is None


@pytest.mark.asyncio
async def test_undecodable_entry_is_a_miss(cache, backend):
    backend.values[cache_key("q", "t1")] = "{not json"

    assert await cache.get("q", "t1") is None


@pytest.mark.asyncio
async def test_answers_are_tenant_scoped(cache):
    await cache.put("What is PTO?", "t1", "25 days.", [])

    assert await cache.get("What is PTO?", "t2") is None


# ── Popularity ───────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_track_ranks_questions_by_count(cache, clock):
    for _ in range(3):
        await cache.track("What is PTO?", "t1")
    clock.advance(60)
    await cache.track("  what is pto?", "t1")
    await cache.track("Where is the office?", "t1")

    top = await cache.top_n("t1", 10)

    assert [(q.query, q.count) for q in top] == [("what is pto?", 4), ("where is the office?", 1)]
    assert top[0].tenant_id == "t1"
    assert top[0].last_asked == START + timedelta(seconds=60)


@pytest.mark.asyncio
async def test_ranked_member_is_json_with_query_and_tenant(cache, backend):
    await cache.track("Hello", "t1")

    (member,) = backend.zsets[popular_key("t1")]
    assert json.loads(member) == {"query": "hello", "tenant_id": "t1"}


@pytest.mark.asyncio
async def test_top_n_limits_and_handles_non_positive(cache):
    for query in ("a", "b", "c"):
        await cache.track(query, "t1")

    assert len(await cache.top_n("t1", 2)) == 2
    assert await cache.top_n("t1", 0) == []


@pytest.mark.asyncio
async def test_blank_query_is_not_tracked(cache, backend):
    await cache.track("   ", "t1")

    assert backend.zsets == {}


# ── Maintenance ──────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_stats_count_only_the_tenant(cache):
    await cache.put("q1", "t1", "a1", [])
    await cache.put("q2", "t1", "a2", [])
    await cache.put("q1", "t2", "b1", [])
    await cache.track("q1", "t1")
    await cache.track("q1", "t2")
    await cache.track("q3", "t2")

    stats = await cache.stats("t1")

    assert stats.backend_available
    assert stats.total_questions == 1
    assert stats.cached_questions == 2
    assert [q.query for q in stats.popular_questions] == ["q1"]


@pytest.mark.asyncio
async def test_clear_is_tenant_scoped_and_idempotent(cache):
    await cache.put("q1", "t1", "a1", [])
    await cache.track("q1", "t1")
    await cache.put("q1", "t2", "b1", [])
    await cache.track("q1", "t2")

    removed = await cache.clear("t1")

    assert removed > 0
    assert await cache.get("q1", "t1") is None
    assert await cache.top_n("t1") == []
    assert (await cache.get("q1", "t2")).content == "b1"
    assert [q.query for q in await cache.top_n("t2")] == ["q1"]

    assert await cache.clear("t1") == 0


# ── Degradation ──────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_backend_failures_degrade_silently():
    cache = ResponseCache(FailingCacheBackend())

    assert await cache.get("q", "t1") is None
    await cache.put("q", "t1", "answer", [])
    await cache.track("q", "t1")
    assert await cache.top_n("t1") == []
    assert await cache.clear("t1") == 0

    stats = await cache.stats("t1")
    assert stats.backend_available is False
    assert stats.total_questions == 0
