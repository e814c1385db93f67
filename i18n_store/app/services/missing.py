"""Stub records for translations that were looked up but never found.

Stubs make untranslated keys visible in the record store so a translator
can fill them in later. A lookup that carried a ``count`` gets one stub per
plural suffix of its locale (``item_count.one``, ``item_count.other``, ...)
instead of a stub for the bare key. Interpolation parameter names are kept
on each stub for translator reference.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from i18n_store.app.core.exceptions import DuplicateRecord, MissingTranslation
from i18n_store.app.services.fallback import PluralKeyRegistry
from i18n_store.app.services.keys import FLATTEN_SEPARATOR, RESERVED_KEYS, normalize_flat_keys
from i18n_store.app.services.store import TranslationStore

logger = logging.getLogger(__name__)


class MissingRecorder:
    def __init__(
        self,
        store: TranslationStore,
        plural_keys: PluralKeyRegistry,
        separator: str = FLATTEN_SEPARATOR,
    ) -> None:
        self.store = store
        self.plural_keys = plural_keys
        self.separator = separator

    def __call__(self, locale: str, key: Any, **options: Any) -> None:
        self.store_default_translations(locale, key, **options)

    def store_default_translations(self, locale: str, key: Any, **options: Any) -> None:
        """Create stubs for *key* unless anything is stored under it already.

        Never raises: recording is best-effort and must not break the lookup
        that triggered it.
        """
        try:
            separator = options.get("separator") or self.separator
            flat_key = normalize_flat_keys(key, options.get("scope"), separator)
            if not flat_key or self.store.exists_where(locale, flat_key):
                return

            interpolations = [k for k in options if k not in RESERVED_KEYS]
            if options.get("count") is not None:
                keys = [
                    f"{flat_key}{FLATTEN_SEPARATOR}{suffix}"
                    for suffix in self.plural_keys.plural_suffixes(locale)
                ]
            else:
                keys = [flat_key]

            for stub_key in keys:
                self.store_default_translation(locale, stub_key, interpolations)
        except Exception:
            logger.exception("Failed to store default translations for (%s, %s)", key, locale)

    def store_default_translation(
        self, locale: str, key: str, interpolations: list[str]
    ) -> None:
        try:
            self.store.create(locale, key, None, interpolations)
        except DuplicateRecord:
            # First writer wins
            logger.info("Stub for (%s, %s) already recorded", key, locale)
            return
        logger.info("Recorded missing translation (%s, %s)", key, locale)


class TranslationBackend(Protocol):
    def translate(self, locale: str, key: Any, scope: Any = None, default: Any = None, **options: Any) -> Any: ...


class MissRecordingResolver:
    """Wrap a backend so every ``MissingTranslation`` it raises is recorded.

    Meant for backends whose own lookup never reaches the store-miss path,
    such as a resolver running on the in-memory snapshot. All other
    attributes are delegated to the wrapped backend.
    """

    def __init__(self, backend: TranslationBackend, recorder: MissingRecorder) -> None:
        self.backend = backend
        self.recorder = recorder

    def translate(
        self, locale: str, key: Any, scope: Any = None, default: Any = None, **options: Any
    ) -> Any:
        try:
            return self.backend.translate(locale, key, scope=scope, default=default, **options)
        except MissingTranslation:
            self.recorder.store_default_translations(locale, key, scope=scope, **options)
            raise

    def __getattr__(self, name: str) -> Any:
        return getattr(self.backend, name)
