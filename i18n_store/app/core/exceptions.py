"""Error taxonomy for the translation backend.

``MissingTranslation`` is the NotFound signal: lookups themselves return
``None`` on a total miss, and only the caller-facing ``translate`` raises it.
"""

from __future__ import annotations

from typing import Any


class I18nStoreError(Exception):
    """Base class for every error raised by the translation backend."""


class InvalidKey(I18nStoreError, TypeError):
    """A lookup key or scope was neither a string, a number nor a sequence."""


class MissingTranslation(I18nStoreError, LookupError):
    """Key absent from both the record store and the fallback source."""

    def __init__(self, locale: str, key: Any, options: dict[str, Any] | None = None) -> None:
        self.locale = locale
        self.key = key
        self.options = dict(options or {})
        super().__init__(f"translation missing: {locale}.{key}")


class ConflictingKeyShape(I18nStoreError):
    """A subtree build found a leaf and a branch at the same path."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"conflicting leaf/branch at key path {path!r}")


class StoreUnavailable(I18nStoreError):
    """The translation record store failed to answer."""


class DuplicateRecord(I18nStoreError):
    """A record with the same (locale, key) already exists."""


class CacheUnavailable(I18nStoreError):
    """The external translation cache failed to answer."""
