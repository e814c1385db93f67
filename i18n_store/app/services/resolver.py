"""Translation lookup against the record store.

A lookup walks ``normalize -> snapshot | cache -> store -> fallback ->
record missing``. Which of the snapshot and cache steps apply is fixed by
the ``CacheStrategy`` the resolver is built with.
"""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any

from i18n_store.app.core.exceptions import DuplicateRecord, MissingTranslation, StoreUnavailable
from i18n_store.app.models.translation import CACHE_NAMESPACE, cache_key_for
from i18n_store.app.services.cache import CacheGateway, CacheStrategy, ExternalCache, NoCache, Snapshot
from i18n_store.app.services.fallback import SimpleBackend
from i18n_store.app.services.keys import (
    FLATTEN_SEPARATOR,
    RESERVED_KEYS,
    expand_keys,
    flatten_translations,
    normalize_flat_keys,
)
from i18n_store.app.services.store import TranslationStore
from i18n_store.app.services.tree import (
    SUBTREE,
    build_snapshot,
    build_subtree,
    exact_lookup,
    split_key,
)

_logger = logging.getLogger(__name__)

# Called as handler(locale, key, **options) whenever the store misses.
MissingHandler = Callable[..., None]


class Resolver:
    def __init__(
        self,
        store: TranslationStore,
        strategy: CacheStrategy | None = None,
        fallback: SimpleBackend | None = None,
        missing_handler: MissingHandler | None = None,
        separator: str = FLATTEN_SEPARATOR,
        logger: logging.Logger | None = _logger,
    ) -> None:
        self.store = store
        self.strategy = strategy if strategy is not None else NoCache()
        self.fallback = fallback
        self.missing_handler = missing_handler
        self.separator = separator
        self.logger = logger
        self.gateway = (
            CacheGateway(self.strategy.client) if isinstance(self.strategy, ExternalCache) else None
        )
        self._translations: dict[str, dict[str, Any]] | None = None
        self._lock = threading.Lock()

    def _log(
        self, message: str, *args: Any, level: int = logging.INFO, exc_info: bool = False
    ) -> None:
        if self.logger is not None:
            self.logger.log(level, message, *args, exc_info=exc_info)

    # ─── Lookup ───────────────────────────────────────────────────────────────

    def lookup(self, locale: str, key: Any, scope: Any = None, **options: Any) -> Any:
        """Return a value, a nested mapping, or ``None`` when nothing is found."""
        separator = options.get("separator") or self.separator
        flat_key = normalize_flat_keys(key, scope, separator)

        if isinstance(self.strategy, Snapshot):
            return self._dig_snapshot(locale, flat_key)

        if self.gateway is not None:
            result = self.gateway.fetch_or_load(
                cache_key_for(locale, flat_key), lambda: self._load(locale, flat_key)
            )
        else:
            result = self.query_store(locale, flat_key)

        if result is not None:
            return result
        return self._handle_miss(locale, key, flat_key, scope, options)

    def _load(self, locale: str, flat_key: str) -> Any:
        self._log("Translation for (%s, %s) not found in cache", flat_key, locale)
        return self.query_store(locale, flat_key)

    def _dig_snapshot(self, locale: str, flat_key: str) -> Any:
        node: Any = self.translations()
        segments = [locale] + (split_key(flat_key) if flat_key else [])
        for segment in segments:
            if not isinstance(node, dict) or segment not in node:
                return None
            node = node[segment]
        return copy.deepcopy(node) if isinstance(node, dict) else node

    def query_store(self, locale: str, flat_key: str) -> Any:
        if flat_key == "":
            records = self.store.find_by_locale(locale)
        else:
            records = self.store.find_by_locale_and_key_prefix(locale, flat_key)

        if not records:
            return None
        entries = [(r.key, r.value) for r in records]
        value = exact_lookup(entries, flat_key)
        if value is not SUBTREE:
            return value
        return build_subtree(flat_key, entries)

    def _handle_miss(
        self, locale: str, key: Any, flat_key: str, scope: Any, options: dict[str, Any]
    ) -> Any:
        value = self.fallback.translate(locale, flat_key) if self.fallback else None
        if value is not None and flat_key:
            self._write_through(locale, flat_key, value)

        if self.missing_handler is not None:
            try:
                self.missing_handler(locale, key, scope=scope, **options)
            except Exception:
                self._log(
                    "Recording missing translation (%s, %s) failed", flat_key, locale,
                    level=logging.ERROR, exc_info=True,
                )
        return value

    def _write_through(self, locale: str, flat_key: str, value: Any) -> None:
        # A fallback subtree is stored leaf by leaf, like store_translations
        if isinstance(value, Mapping):
            leaves = {
                f"{flat_key}{FLATTEN_SEPARATOR}{key}": leaf
                for key, leaf in flatten_translations(value).items()
            }
        else:
            leaves = {flat_key: value}

        stored: dict[str, Any] = {}
        for key, leaf in leaves.items():
            try:
                self.store.replace(locale, expand_keys(key), key, leaf)
            except DuplicateRecord:
                # A concurrent miss already persisted it
                self._log("Translation for (%s, %s) stored concurrently", key, locale)
                continue
            stored[key] = leaf

        if self.gateway is not None:
            for key, leaf in stored.items():
                self._refresh_cache(self.gateway, locale, key, leaf)

    # ─── Caller-facing translate ─────────────────────────────────────────────

    def translate(
        self, locale: str, key: Any, scope: Any = None, default: Any = None, **options: Any
    ) -> Any:
        """Look up *key*, fall back to *default*, and interpolate string results.

        *default* is either a literal or a list of alternative keys tried in
        turn. Raises ``MissingTranslation`` when nothing resolves.
        """
        entry = self.lookup(locale, key, scope, **options)
        if entry is None and default is not None:
            entry = self._resolve_default(locale, scope, default, options)
        if entry is None:
            flat_key = normalize_flat_keys(key, scope, options.get("separator") or self.separator)
            raise MissingTranslation(locale, flat_key, {"scope": scope, **options})
        return self._interpolate(entry, options)

    def _resolve_default(
        self, locale: str, scope: Any, default: Any, options: dict[str, Any]
    ) -> Any:
        if not isinstance(default, (list, tuple)):
            return default
        for candidate in default:
            entry = self.lookup(locale, candidate, scope, **options)
            if entry is not None:
                return entry
        return None

    @staticmethod
    def _interpolate(entry: Any, options: Mapping[str, Any]) -> Any:
        values = {k: v for k, v in options.items() if k not in RESERVED_KEYS}
        if "count" in options:
            values["count"] = options["count"]
        if not isinstance(entry, str) or not values:
            return entry
        try:
            return entry.format(**values)
        except (KeyError, IndexError, ValueError):
            return entry

    # ─── Writes ───────────────────────────────────────────────────────────────

    def store_translations(self, locale: str, data: Mapping[str, Any], escape: bool = True) -> int:
        """Persist a nested catalog for *locale*; returns the number of leaves stored.

        Every leaf replaces whatever sat on its prefix chain or below it, so
        a value stored over a former branch (or a branch over a former leaf)
        leaves no decoy records behind.
        """
        flat = flatten_translations(data, escape)
        for key, value in flat.items():
            self.store.replace(locale, expand_keys(key), key, value)

        if isinstance(self.strategy, Snapshot):
            self.invalidate()
        elif self.gateway is not None:
            for key, value in flat.items():
                self._refresh_cache(self.gateway, locale, key, value)
        return len(flat)

    def _refresh_cache(self, gateway: CacheGateway, locale: str, key: str, value: Any) -> None:
        """Drop the root, ancestor and descendant entries of *key*, then cache *value*."""
        gateway.delete_key(cache_key_for(locale, ""))
        for ancestor in expand_keys(key)[:-1]:
            gateway.delete_key(cache_key_for(locale, ancestor))
        cache_key = cache_key_for(locale, key)
        gateway.invalidate_all(f"{cache_key}{FLATTEN_SEPARATOR}")
        self._log("Reloading %s in cache. Setting to %r", cache_key, value)
        gateway.write_key(cache_key, value)

    def reload_key(self, cache_key: str, value: Any) -> None:
        self._log("Reloading %s in cache. Setting to %r", cache_key, value)
        if self.gateway is None:
            self.invalidate()
            return
        self.gateway.write_key(cache_key, value)

    def invalidate(self) -> Resolver:
        """Drop the snapshot and every cached ``i18n*`` entry. Safe to repeat."""
        self._log("Reloading translations")
        with self._lock:
            self._translations = None
        if self.gateway is not None:
            self.gateway.invalidate_all(CACHE_NAMESPACE)
            self._log("Cleared cache")
        return self

    reload = invalidate

    # ─── Snapshot ─────────────────────────────────────────────────────────────

    @property
    def initialized(self) -> bool:
        return self._translations is not None

    def init_translations(self) -> dict[str, dict[str, Any]]:
        snapshot = build_snapshot((r.locale, r.key, r.value) for r in self.store.find_all())
        self._translations = snapshot
        return snapshot

    def translations(self, do_init: bool = False) -> dict[str, dict[str, Any]]:
        snapshot = self._translations
        if snapshot is not None and not do_init:
            return snapshot
        with self._lock:
            if do_init or self._translations is None:
                return self.init_translations()
            return self._translations

    def available_locales(self) -> list[str]:
        try:
            return self.store.available_locales()
        except StoreUnavailable:
            self._log("Could not list available locales", level=logging.ERROR)
            return []
