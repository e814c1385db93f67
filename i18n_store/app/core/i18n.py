"""Wiring of the database-backed translation backend.

``build_backend`` composes the resolver and its collaborators from
``Settings``; ``get_backend`` returns the process-wide instance.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from sqlalchemy.orm import Session, sessionmaker

from i18n_store.app.core.config import Settings, settings
from i18n_store.app.core.database import SessionLocal
from i18n_store.app.services.cache import CacheStrategy, Snapshot, strategy_from_settings
from i18n_store.app.services.fallback import PluralKeyRegistry, SimpleBackend
from i18n_store.app.services.missing import MissingRecorder, MissRecordingResolver
from i18n_store.app.services.resolver import Resolver
from i18n_store.app.services.store import TranslationStore

logger = logging.getLogger(__name__)


def build_backend(
    config: Settings = settings,
    session_factory: sessionmaker[Session] = SessionLocal,
    strategy: CacheStrategy | None = None,
) -> Resolver | MissRecordingResolver:
    """Compose a resolver for *config*.

    With missing-key recording on, the recorder is the resolver's miss
    handler; in snapshot mode, where lookups never reach the store, the
    resolver is wrapped in ``MissRecordingResolver`` instead.
    """
    strategy = strategy if strategy is not None else strategy_from_settings(config)
    store = TranslationStore(session_factory, cleanup_with_destroy=config.I18N_CLEANUP_WITH_DESTROY)
    fallback = SimpleBackend(config.I18N_LOCALES_DIR or None)
    recorder = (
        MissingRecorder(store, PluralKeyRegistry(fallback), separator=config.I18N_SEPARATOR)
        if config.I18N_RECORD_MISSING
        else None
    )
    snapshot = isinstance(strategy, Snapshot)

    resolver = Resolver(
        store,
        strategy=strategy,
        fallback=fallback,
        missing_handler=None if snapshot else recorder,
        separator=config.I18N_SEPARATOR,
    )
    logger.info("Translation backend ready (cache strategy: %s)", type(strategy).__name__)
    if snapshot and recorder is not None:
        return MissRecordingResolver(resolver, recorder)
    return resolver


@lru_cache(maxsize=1)
def get_backend() -> Resolver | MissRecordingResolver:
    return build_backend()
