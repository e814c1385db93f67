"""Seed the translations table from the bundled JSON catalogs.

Every ``<locales_dir>/<locale>/messages.json`` is stored through the
translation backend, so existing keys are replaced and caches refreshed.

Usage:
    python -m i18n_store.scripts.seed
"""

from __future__ import annotations

import logging

from i18n_store.app.core.config import settings
from i18n_store.app.core.database import Base, engine
from i18n_store.app.core.i18n import build_backend
from i18n_store.app.services.fallback import SimpleBackend
from i18n_store.app.services.missing import MissRecordingResolver
from i18n_store.app.services.resolver import Resolver

logger = logging.getLogger(__name__)


def seed(
    backend: Resolver | MissRecordingResolver,
    locales_dir: str | None = None,
) -> dict[str, int]:
    """Store every bundled catalog; returns the number of leaves per locale."""
    catalog = SimpleBackend(locales_dir or settings.I18N_LOCALES_DIR or None)
    stored: dict[str, int] = {}
    for locale in catalog.available_locales():
        messages = catalog.translate(locale, "") or {}
        stored[locale] = backend.store_translations(locale, messages)
        logger.info("Seeded %d translations for %s", stored[locale], locale)
    return stored


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    Base.metadata.create_all(bind=engine)
    for locale, count in seed(build_backend()).items():
        print(f"{locale}: {count} translations")
