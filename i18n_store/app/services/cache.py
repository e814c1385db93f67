"""Cache-aside gateway for translation lookups.

The backend runs in exactly one of three modes, see ``CacheStrategy``:
no cache at all, the process-local snapshot kept by the resolver, or an
external key/value cache (redis) addressed through ``CacheGateway``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol, Union

from redis import Redis, RedisError

from i18n_store.app.core.config import Settings
from i18n_store.app.core.exceptions import CacheUnavailable
from i18n_store.app.models.translation import CACHE_NAMESPACE

logger = logging.getLogger(__name__)

MEMORY_SOURCE = "memory"


class CacheClient(Protocol):
    def get(self, key: str) -> bytes | str | None: ...

    def set(self, key: str, value: str) -> Any: ...

    def delete(self, key: str) -> Any: ...

    def delete_matching(self, pattern: str) -> int: ...


class RedisCache:
    """``CacheClient`` on top of a ``redis.Redis`` connection."""

    def __init__(self, client: Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> RedisCache:
        return cls(
            Redis.from_url(
                url,
                decode_responses=True,
                socket_timeout=5,
                socket_connect_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30,
            )
        )

    def get(self, key: str) -> str | None:
        return self._client.get(key)

    def set(self, key: str, value: str) -> None:
        self._client.set(key, value)

    def delete(self, key: str) -> None:
        self._client.delete(key)

    def delete_matching(self, pattern: str) -> int:
        removed = 0
        batch: list[str] = []
        for key in self._client.scan_iter(match=pattern, count=500):
            batch.append(key)
            if len(batch) >= 500:
                removed += self._client.delete(*batch)
                batch = []
        if batch:
            removed += self._client.delete(*batch)
        return removed


# ─── Cache strategy ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class NoCache:
    """Every lookup goes straight to the record store."""


@dataclass(frozen=True)
class Snapshot:
    """Lookups navigate the resolver's in-memory copy of the whole table."""


@dataclass(frozen=True)
class ExternalCache:
    """Lookups go through ``CacheGateway`` backed by *client*."""

    client: CacheClient


CacheStrategy = Union[NoCache, Snapshot, ExternalCache]


def strategy_from_settings(config: Settings) -> CacheStrategy:
    if not config.I18N_CACHE_TRANSLATIONS:
        return NoCache()
    if config.I18N_CACHE_SOURCE == MEMORY_SOURCE:
        return Snapshot()
    return ExternalCache(RedisCache.from_url(config.I18N_CACHE_SOURCE))


# ─── Gateway ──────────────────────────────────────────────────────────────────


class CacheGateway:
    """JSON-encoding cache-aside wrapper around a ``CacheClient``.

    Cache failures are raised as ``CacheUnavailable``; they are never turned
    into misses, so a broken cache fails the lookup instead of silently
    serving store results without the cache's consistency guarantees.
    """

    def __init__(self, client: CacheClient) -> None:
        self._client = client

    def fetch_or_load(self, cache_key: str, loader: Callable[[], Any]) -> Any:
        try:
            raw = self._client.get(cache_key)
        except RedisError as exc:
            raise CacheUnavailable(f"cache read failed for {cache_key}: {exc}") from exc
        if raw is not None:
            return json.loads(raw)

        value = loader()
        if value is not None:
            self.write_key(cache_key, value)
        return value

    def write_key(self, cache_key: str, value: Any) -> None:
        try:
            self._client.set(cache_key, json.dumps(value))
        except RedisError as exc:
            raise CacheUnavailable(f"cache write failed for {cache_key}: {exc}") from exc

    def delete_key(self, cache_key: str) -> None:
        try:
            self._client.delete(cache_key)
        except RedisError as exc:
            raise CacheUnavailable(f"cache delete failed for {cache_key}: {exc}") from exc

    def invalidate_all(self, name_prefix: str = CACHE_NAMESPACE) -> int:
        try:
            removed = self._client.delete_matching(f"{name_prefix}*")
        except RedisError as exc:
            raise CacheUnavailable(f"cache clear failed for {name_prefix}*: {exc}") from exc
        logger.info("Cleared %d cached translation entries", removed)
        return removed
