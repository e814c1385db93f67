"""Record store for translations.

Each call opens its own session from the configured ``sessionmaker`` and
commits before returning. ``SQLAlchemyError`` is re-raised as
``StoreUnavailable``; unique-constraint violations as ``DuplicateRecord``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from i18n_store.app.core.exceptions import DuplicateRecord, StoreUnavailable
from i18n_store.app.models.translation import Translation
from i18n_store.app.services.keys import FLATTEN_SEPARATOR


def _key_filter(keys: str | Sequence[str]):
    """``key IN (keys)`` or key starts with ``<last key>.``, compared case-sensitively.

    SQLite's LIKE ignores ASCII case, so the prefix is compared with ``substr``.
    """
    keys = [keys] if isinstance(keys, str) else list(keys)
    prefix = f"{keys[-1]}{FLATTEN_SEPARATOR}"
    return or_(
        Translation.key.in_(keys),
        func.substr(Translation.key, 1, len(prefix)) == prefix,
    )


class TranslationStore:
    def __init__(
        self, session_factory: sessionmaker[Session], cleanup_with_destroy: bool = False
    ) -> None:
        self._sessions = session_factory
        self.cleanup_with_destroy = cleanup_with_destroy

    # ─── Reads ────────────────────────────────────────────────────────────────

    def find_by_locale_and_key_prefix(
        self, locale: str, key: str | Sequence[str]
    ) -> list[Translation]:
        """Records whose key equals *key* or lies below it, ordered by key."""
        stmt = (
            select(Translation)
            .where(Translation.locale == locale, _key_filter(key))
            .order_by(Translation.key)
        )
        return self._fetch(stmt)

    def find_by_locale(self, locale: str) -> list[Translation]:
        stmt = select(Translation).where(Translation.locale == locale).order_by(Translation.key)
        return self._fetch(stmt)

    def find_all(self) -> list[Translation]:
        return self._fetch(select(Translation).order_by(Translation.locale, Translation.key))

    def exists_where(self, locale: str, key: str) -> bool:
        stmt = select(Translation.id).where(Translation.locale == locale, _key_filter(key)).limit(1)
        try:
            with self._sessions() as db:
                return db.execute(stmt).first() is not None
        except SQLAlchemyError as exc:
            raise StoreUnavailable(str(exc)) from exc

    def available_locales(self) -> list[str]:
        stmt = select(Translation.locale).distinct().order_by(Translation.locale)
        try:
            with self._sessions() as db:
                return list(db.scalars(stmt))
        except SQLAlchemyError as exc:
            raise StoreUnavailable(str(exc)) from exc

    def _fetch(self, stmt) -> list[Translation]:
        try:
            with self._sessions(expire_on_commit=False) as db:
                rows = list(db.scalars(stmt))
                db.expunge_all()
                return rows
        except SQLAlchemyError as exc:
            raise StoreUnavailable(str(exc)) from exc

    # ─── Writes ───────────────────────────────────────────────────────────────

    def create(
        self,
        locale: str,
        key: str,
        value: Any = None,
        interpolations: Iterable[str] | None = None,
    ) -> Translation:
        translation = Translation(
            locale=locale,
            key=key,
            value=value,
            interpolations=list(interpolations) if interpolations is not None else None,
        )
        try:
            with self._sessions(expire_on_commit=False) as db, db.begin():
                db.add(translation)
        except IntegrityError as exc:
            raise DuplicateRecord(f"{locale}.{key} already exists") from exc
        except SQLAlchemyError as exc:
            raise StoreUnavailable(str(exc)) from exc
        return translation

    def delete_where(self, locale: str, keys: str | Sequence[str]) -> int:
        """Delete records matching *keys* (exact) or lying below the last of them."""
        try:
            with self._sessions() as db, db.begin():
                return self._delete(db, locale, keys)
        except SQLAlchemyError as exc:
            raise StoreUnavailable(str(exc)) from exc

    def replace(self, locale: str, keys: str | Sequence[str], key: str, value: Any) -> Translation:
        """Delete whatever matches *keys* and create a fresh *key* record, atomically."""
        translation = Translation(locale=locale, key=key, value=value)
        try:
            with self._sessions(expire_on_commit=False) as db, db.begin():
                self._delete(db, locale, keys)
                db.add(translation)
        except IntegrityError as exc:
            raise DuplicateRecord(f"{locale}.{key} already exists") from exc
        except SQLAlchemyError as exc:
            raise StoreUnavailable(str(exc)) from exc
        return translation

    def _delete(self, db: Session, locale: str, keys: str | Sequence[str]) -> int:
        condition = (Translation.locale == locale, _key_filter(keys))
        if self.cleanup_with_destroy:
            # ORM deletes fire mapper events for every row
            rows = db.scalars(select(Translation).where(*condition)).all()
            for row in rows:
                db.delete(row)
            db.flush()
            return len(rows)
        result = db.execute(
            delete(Translation).where(*condition).execution_options(synchronize_session=False)
        )
        db.flush()
        return result.rowcount
