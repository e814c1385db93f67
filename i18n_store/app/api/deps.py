from __future__ import annotations

from i18n_store.app.core.i18n import get_backend
from i18n_store.app.services.missing import MissRecordingResolver
from i18n_store.app.services.resolver import Resolver


def get_translation_backend() -> Resolver | MissRecordingResolver:
    """Dependency returning the process-wide translation backend."""
    return get_backend()
