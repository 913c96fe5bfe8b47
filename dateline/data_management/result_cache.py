"""Process-lifetime memoization of backend calls.

Follows the same patterns as the other stores:
- In-memory dict keyed by a deterministic fingerprint
- asyncio locks for atomic read-then-write per key
- No eviction; the cache is discarded with the process

Keys are derived per operation kind from normalized request parts, so
repeated validation of the same event never re-issues an identical call:

    oracle-verdict   (title, month, day, year)
    digest           (month, day)
    entity-title     (external id)
    article          (page title)
    search           (query, option set)
    contents         (sorted ids)
    excerpt-judge    (question kind, title, month, day, excerpt digest)

Whitespace is collapsed in every string part. Only the oracle kinds, whose
parts are free-text titles, are also case-folded; article titles and
content ids are case-sensitive identities.

Entries are never invalidated by later mutation of the event they were
computed from.

Usage:
    from dateline.data_management.result_cache import ResultCache

    cache = ResultCache()
    verdict = await cache.get_or_compute("oracle-verdict", key_parts, fetch)
"""

import asyncio
import hashlib
import json
from collections import defaultdict
from typing import Any, Awaitable, Callable, Optional

import structlog

_MISSING = object()

CASE_INSENSITIVE_KINDS = frozenset({"oracle-verdict", "narrative-rewrite"})


def fingerprint(kind: str, *parts: Any) -> str:
    """Deterministic key for an operation kind and its request parts.

    Strings are whitespace-collapsed, and case-folded for the kinds in
    ``CASE_INSENSITIVE_KINDS``; dicts are serialized with sorted keys so
    option ordering does not matter.

    Args:
        kind: Operation kind, e.g. "search"
        *parts: JSON-serializable request parts

    Returns:
        "<kind>:<sha256 hex>"
    """
    fold = kind in CASE_INSENSITIVE_KINDS
    normalized = [_normalize(p, fold) for p in parts]
    payload = json.dumps(normalized, sort_keys=True, ensure_ascii=False, default=str)
    digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()
    return f"{kind}:{digest}"


def _normalize(value: Any, fold: bool) -> Any:
    if isinstance(value, str):
        collapsed = " ".join(value.split())
        return collapsed.casefold() if fold else collapsed
    if isinstance(value, dict):
        return {str(k): _normalize(v, fold) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize(v, fold) for v in value]
    if isinstance(value, (set, frozenset)):
        return sorted(_normalize(v, fold) for v in value)
    return value


class ResultCache:
    """Key/value memoization shared across tiers and validation passes.

    Data structure:
    {
        "<kind>:<digest>": value,
        ...
    }
    """

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}
        self._key_locks: dict[str, asyncio.Lock] = {}
        self._hits: dict[str, int] = defaultdict(int)
        self._misses: dict[str, int] = defaultdict(int)
        self._logger = structlog.get_logger().bind(component="ResultCache")

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value or ``default`` when absent."""
        return self._entries.get(key, default)

    def put(self, key: str, value: Any) -> None:
        """Store a value. Existing entries are overwritten."""
        self._entries[key] = value

    def clear(self) -> None:
        self._entries.clear()
        self._key_locks.clear()
        self._hits.clear()
        self._misses.clear()

    async def get_or_compute(
        self,
        kind: str,
        parts: tuple,
        compute: Callable[[], Awaitable[Any]],
        cache_if: Optional[Callable[[Any], bool]] = None,
    ) -> Any:
        """Return the cached value for (kind, parts), computing it on a miss.

        The lookup, the external call and the store happen under one per-key
        lock, so two validations sharing a key issue a single call.
        Exceptions from ``compute`` propagate and nothing is stored.

        Args:
            kind: Operation kind used for the fingerprint and stats
            parts: Request parts identifying the call
            compute: Zero-argument coroutine function performing the call
            cache_if: Optional predicate; values failing it are returned but not stored

        Returns:
            Cached or freshly computed value
        """
        key = fingerprint(kind, *parts)
        lock = self._key_locks.setdefault(key, asyncio.Lock())

        async with lock:
            value = self._entries.get(key, _MISSING)
            if value is not _MISSING:
                self._hits[kind] += 1
                self._logger.debug("cache_hit", kind=kind, key=key[-12:])
                return value

            self._misses[kind] += 1
            value = await compute()
            if cache_if is None or cache_if(value):
                self._entries[key] = value
            else:
                self._logger.debug("cache_skip", kind=kind, key=key[-12:])
            return value

    def stats(self) -> dict[str, dict[str, int]]:
        """Per-kind hit/miss counts. Misses equal external calls issued."""
        kinds = sorted(set(self._hits) | set(self._misses))
        return {
            kind: {"hits": self._hits.get(kind, 0), "misses": self._misses.get(kind, 0)}
            for kind in kinds
        }

    @property
    def total_hits(self) -> int:
        return sum(self._hits.values())

    @property
    def total_misses(self) -> int:
        return sum(self._misses.values())
