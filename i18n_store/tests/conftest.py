"""Shared test fixtures.

Each test gets a fresh in-memory SQLite database, so tests never pollute
each other or a real database.
"""

from __future__ import annotations

import json
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from i18n_store.app.api.deps import get_translation_backend
from i18n_store.app.core.database import Base
from i18n_store.app.main import app
from i18n_store.app.services.cache import ExternalCache, Snapshot
from i18n_store.app.services.fallback import PluralKeyRegistry, SimpleBackend
from i18n_store.app.services.missing import MissingRecorder
from i18n_store.app.services.resolver import Resolver
from i18n_store.app.services.store import TranslationStore


# ─── In-memory cache client ──────────────────────────────────────────────────


class FakeCache:
    """Dict-backed ``CacheClient`` with redis-style glob deletes."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise RedisConnectionError("cache down")

    def get(self, key: str) -> str | None:
        self._check()
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self._check()
        self.data[key] = value

    def delete(self, key: str) -> None:
        self._check()
        self.data.pop(key, None)

    def delete_matching(self, pattern: str) -> int:
        self._check()
        doomed = [k for k in self.data if fnmatchcase(k, pattern)]
        for k in doomed:
            del self.data[k]
        return len(doomed)

    def decoded(self, key: str):
        return json.loads(self.data[key])


# ─── Database ────────────────────────────────────────────────────────────────


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def store(session_factory: sessionmaker[Session]) -> TranslationStore:
    return TranslationStore(session_factory)


@pytest.fixture()
def broken_store() -> Generator[TranslationStore, None, None]:
    """A store whose database has no ``translations`` table."""
    eng = create_engine("sqlite://", poolclass=StaticPool)
    yield TranslationStore(sessionmaker(bind=eng))
    eng.dispose()


# ─── Fallback catalog ────────────────────────────────────────────────────────


@pytest.fixture()
def locales_dir(tmp_path: Path) -> Path:
    catalogs = {
        "en": {
            "i18n": {"plural": {"keys": ["one", "other"]}},
            "missing": {"key": "Fallback"},
            "welcome": "Welcome {name}",
        },
        "pl": {
            "i18n": {"plural": {"keys": ["zero", "one", "few", "other"]}},
        },
    }
    for locale, messages in catalogs.items():
        (tmp_path / locale).mkdir()
        (tmp_path / locale / "messages.json").write_text(
            json.dumps(messages), encoding="utf-8"
        )
    return tmp_path


@pytest.fixture()
def fallback(locales_dir: Path) -> SimpleBackend:
    return SimpleBackend(locales_dir)


@pytest.fixture()
def recorder(store: TranslationStore, fallback: SimpleBackend) -> MissingRecorder:
    return MissingRecorder(store, PluralKeyRegistry(fallback))


# ─── Resolvers, one per cache strategy ───────────────────────────────────────


@pytest.fixture()
def resolver(
    store: TranslationStore, fallback: SimpleBackend, recorder: MissingRecorder
) -> Resolver:
    return Resolver(store, fallback=fallback, missing_handler=recorder)


@pytest.fixture()
def cache() -> FakeCache:
    return FakeCache()


@pytest.fixture()
def cached_resolver(
    store: TranslationStore,
    fallback: SimpleBackend,
    recorder: MissingRecorder,
    cache: FakeCache,
) -> Resolver:
    return Resolver(
        store, strategy=ExternalCache(cache), fallback=fallback, missing_handler=recorder
    )


@pytest.fixture()
def snapshot_resolver(store: TranslationStore, fallback: SimpleBackend) -> Resolver:
    return Resolver(store, strategy=Snapshot(), fallback=fallback)


@pytest.fixture()
def greetings(store: TranslationStore) -> None:
    store.create("en", "greeting.formal", "Hello")
    store.create("en", "greeting.casual", "Hi")


# ─── API ─────────────────────────────────────────────────────────────────────


@pytest.fixture()
def client(resolver: Resolver) -> Generator[TestClient, None, None]:
    """FastAPI TestClient wired to the test resolver."""
    app.dependency_overrides[get_translation_backend] = lambda: resolver
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
