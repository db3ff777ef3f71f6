"""Response cache & popularity tracker on top of a key-value backend.

Key layout (all keys carry the tenant id, so one tenant's operations never
touch another tenant's data):

    ai:chat:<tenant>:<hash>         cached answer JSON, expires after the cache TTL
    ai:stats:<tenant>:<hash>        per-question counter, expires after 30 days idle
    ai:stats:<tenant>:<hash>:last   ISO timestamp of the last time it was asked
    ai:popular:<tenant>             sorted set of {"query", "tenant_id"} by count

``<hash>`` is SHA-256 of ``normalized_query + ":" + tenant_id`` where the
query is trimmed and lowercased.

Every operation is best-effort: a backend failure is logged and degrades to a
miss / skipped write / empty result, never an exception for the caller.
"""

import hashlib
import json
import logging
import re
from collections.abc import Callable
from datetime import datetime, timezone

from onboard.application.interfaces.cache_backend import CacheBackend
from onboard.domain.entities import (
    CachedAnswer,
    CacheStats,
    PopularQuestion,
    SourceAttribution,
)
from onboard.domain.exceptions import CacheBackendError

logger = logging.getLogger(__name__)

CACHE_PREFIX = "ai:chat:"
STATS_PREFIX = "ai:stats:"
POPULAR_PREFIX = "ai:popular:"
LAST_ASKED_SUFFIX = ":last"

_DEFAULT_CACHE_TTL = 3600  # 1 hour, fixed from write time
_DEFAULT_STATS_TTL = 30 * 24 * 60 * 60  # 30 days of inactivity
_STATS_POPULAR_LIMIT = 10

_GLOB_SPECIAL_RE = re.compile(r"([*?\[\]\\])")


def normalize_query(query: str) -> str:
    return query.strip().lower()


def query_hash(query: str, tenant_id: str) -> str:
    """Stable digest of the normalized query scoped to a tenant."""
    return hashlib.sha256(f"{normalize_query(query)}:{tenant_id}".encode("utf-8")).hexdigest()


def cache_key(query: str, tenant_id: str) -> str:
    return f"{CACHE_PREFIX}{tenant_id}:{query_hash(query, tenant_id)}"


def stats_key(query: str, tenant_id: str) -> str:
    return f"{STATS_PREFIX}{tenant_id}:{query_hash(query, tenant_id)}"


def popular_key(tenant_id: str) -> str:
    return f"{POPULAR_PREFIX}{tenant_id}"


def _escape_glob(value: str) -> str:
    return _GLOB_SPECIAL_RE.sub(r"\\\1", value)


class ResponseCache:
    """Tenant-scoped answer cache with question popularity tracking."""

    def __init__(
        self,
        backend: CacheBackend,
        *,
        ttl_seconds: int = _DEFAULT_CACHE_TTL,
        stats_ttl_seconds: int = _DEFAULT_STATS_TTL,
        clock: Callable[[], datetime] | None = None,
    ):
        self._backend = backend
        self._ttl = ttl_seconds
        self._stats_ttl = stats_ttl_seconds
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    # ── Answers ──────────────────────────────────────────────────────

    async def get(self, query: str, tenant_id: str) -> CachedAnswer | None:
        """Return the cached answer for ``(query, tenant)`` or ``None`` on a miss."""
        key = cache_key(query, tenant_id)
        try:
            raw = await self._backend.get(key)
        except CacheBackendError as e:
            logger.warning("Cache lookup skipped for tenant %s: %s", tenant_id, e)
            return None

        if raw is None:
            logger.info("Cache MISS for query: %r (tenant %s)", query[:50], tenant_id)
            return None

        try:
            cached = CachedAnswer.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Discarding undecodable cache entry %s: %s", key, e)
            return None

        logger.info("Cache HIT for query: %r (tenant %s)", query[:50], tenant_id)
        return cached

    async def put(
        self,
        query: str,
        tenant_id: str,
        content: str,
        sources: list[SourceAttribution],
    ) -> None:
        """Store an answer; it expires a fixed TTL after this write."""
        entry = CachedAnswer(content=content, sources=list(sources), cached_at=self._clock())
        try:
            await self._backend.set(
                cache_key(query, tenant_id),
                json.dumps(entry.to_dict(), ensure_ascii=False),
                ttl_seconds=self._ttl,
            )
        except CacheBackendError as e:
            logger.warning("Cache write skipped for tenant %s: %s", tenant_id, e)
            return
        logger.info("Cached response for query: %r (tenant %s)", query[:50], tenant_id)

    # ── Popularity ───────────────────────────────────────────────────

    async def track(self, query: str, tenant_id: str) -> None:
        """Count one more ask of ``query`` and update the tenant's ranked set."""
        normalized = normalize_query(query)
        if not normalized:
            return
        key = stats_key(query, tenant_id)
        member = json.dumps({"query": normalized, "tenant_id": tenant_id}, ensure_ascii=False)
        try:
            count = await self._backend.incr(key)
            await self._backend.expire(key, self._stats_ttl)
            await self._backend.set(
                key + LAST_ASKED_SUFFIX,
                self._clock().isoformat(),
                ttl_seconds=self._stats_ttl,
            )
            # The ranked set has no expiry of its own; entries outlive
            # their counters until the tenant's cache is cleared.
            await self._backend.zadd(popular_key(tenant_id), member, float(count))
        except CacheBackendError as e:
            logger.warning("Query tracking skipped for tenant %s: %s", tenant_id, e)

    async def top_n(self, tenant_id: str, n: int = 10) -> list[PopularQuestion]:
        """Most frequently asked questions for a tenant, highest count first."""
        if n <= 0:
            return []
        try:
            entries = await self._backend.zrevrange_with_scores(popular_key(tenant_id), 0, n - 1)
        except CacheBackendError as e:
            logger.warning("Popular questions unavailable for tenant %s: %s", tenant_id, e)
            return []

        questions: list[PopularQuestion] = []
        for member, score in entries:
            try:
                data = json.loads(member)
                query = data["query"]
            except (ValueError, KeyError, TypeError) as e:
                logger.error("Error parsing popular question entry %r: %s", member, e)
                continue
            questions.append(
                PopularQuestion(
                    query=query,
                    tenant_id=data.get("tenant_id", tenant_id),
                    count=int(score),
                    last_asked=await self._last_asked(query, tenant_id),
                )
            )
        return questions

    async def _last_asked(self, query: str, tenant_id: str) -> datetime | None:
        try:
            raw = await self._backend.get(stats_key(query, tenant_id) + LAST_ASKED_SUFFIX)
        except CacheBackendError:
            return None
        if not raw:
            return None
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            return None

    # ── Maintenance ──────────────────────────────────────────────────

    async def stats(self, tenant_id: str) -> CacheStats:
        """Distinct tracked questions, cached answers and the top questions for a tenant."""
        try:
            total = await self._backend.zcard(popular_key(tenant_id))
            cached_keys = await self._backend.scan_keys(self._tenant_pattern(CACHE_PREFIX, tenant_id))
        except CacheBackendError as e:
            logger.warning("Cache stats unavailable for tenant %s: %s", tenant_id, e)
            return CacheStats(backend_available=False)

        return CacheStats(
            total_questions=total,
            cached_questions=len(cached_keys),
            popular_questions=await self.top_n(tenant_id, _STATS_POPULAR_LIMIT),
            backend_available=True,
        )

    async def clear(self, tenant_id: str) -> int:
        """Delete the tenant's cached answers, counters and ranked set.

        Idempotent: clearing an already-empty tenant deletes nothing.
        Returns the number of keys removed.
        """
        try:
            keys = [popular_key(tenant_id)]
            keys += await self._backend.scan_keys(self._tenant_pattern(CACHE_PREFIX, tenant_id))
            keys += await self._backend.scan_keys(self._tenant_pattern(STATS_PREFIX, tenant_id))
            removed = await self._backend.delete(*keys)
        except CacheBackendError as e:
            logger.warning("Cache clear failed for tenant %s: %s", tenant_id, e)
            return 0
        logger.info("Cleared cache for tenant %s (%d keys)", tenant_id, removed)
        return removed

    @staticmethod
    def _tenant_pattern(prefix: str, tenant_id: str) -> str:
        return f"{prefix}{_escape_glob(tenant_id)}:*"
