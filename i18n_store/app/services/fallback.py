"""Static, file-backed translations consulted after the record store misses."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from i18n_store.app.core.exceptions import MissingTranslation
from i18n_store.app.services.keys import FLATTEN_SEPARATOR

logger = logging.getLogger(__name__)

DEFAULT_LOCALES_DIR = Path(__file__).resolve().parent.parent.parent / "locales"
DEFAULT_PLURAL_KEYS: tuple[str, ...] = ("zero", "one", "other")
PLURAL_KEYS_PATH = "i18n.plural.keys"


class SimpleBackend:
    """Read-only catalog from ``<locales_dir>/<locale>/messages.json``."""

    def __init__(self, locales_dir: str | Path | None = None) -> None:
        self._root = Path(locales_dir) if locales_dir else DEFAULT_LOCALES_DIR
        self._messages: dict[str, dict[str, Any]] = {}

    def _load_messages(self, locale: str) -> dict[str, Any]:
        if locale not in self._messages:
            path = self._root / locale / "messages.json"
            if not path.exists():
                logger.warning("Locale file not found: %s", path)
                self._messages[locale] = {}
            else:
                with open(path, encoding="utf-8") as f:
                    self._messages[locale] = json.load(f)
        return self._messages[locale]

    def translate(self, locale: str, key: str, raise_on_missing: bool = False) -> Any:
        """Return the value or subtree stored at dotted *key*, else ``None``."""
        node: Any = self._load_messages(locale)
        if key:
            for segment in key.split(FLATTEN_SEPARATOR):
                if not isinstance(node, dict) or segment not in node:
                    node = None
                    break
                node = node[segment]
        if node is None and raise_on_missing:
            raise MissingTranslation(locale, key)
        return node

    def available_locales(self) -> list[str]:
        if not self._root.is_dir():
            return []
        return sorted(p.name for p in self._root.iterdir() if (p / "messages.json").exists())

    def reload(self) -> None:
        self._messages.clear()


class PluralKeyRegistry:
    """Plural-form suffixes per locale, read from ``i18n.plural.keys``."""

    def __init__(self, source: SimpleBackend, default: tuple[str, ...] = DEFAULT_PLURAL_KEYS) -> None:
        self._source = source
        self._default = default

    def plural_suffixes(self, locale: str) -> list[str]:
        keys = self._source.translate(locale, PLURAL_KEYS_PATH)
        if not isinstance(keys, list) or not keys:
            return list(self._default)
        return [str(k) for k in keys]
