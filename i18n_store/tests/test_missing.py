"""Tests for missing-translation stub recording."""

from __future__ import annotations

import pytest

from i18n_store.app.core.exceptions import MissingTranslation
from i18n_store.app.services.fallback import PluralKeyRegistry, SimpleBackend
from i18n_store.app.services.missing import MissingRecorder, MissRecordingResolver
from i18n_store.app.services.resolver import Resolver
from i18n_store.app.services.store import TranslationStore


def _rows(store: TranslationStore, locale: str = "en") -> list[tuple[str, object, object]]:
    return [(r.key, r.value, r.interpolations) for r in store.find_by_locale(locale)]


class TestMissingRecorder:
    def test_single_stub(self, recorder: MissingRecorder, store: TranslationStore) -> None:
        recorder.store_default_translations("en", "errors.gone")
        assert _rows(store) == [("errors.gone", None, [])]

    def test_interpolation_names_exclude_reserved(
        self, recorder: MissingRecorder, store: TranslationStore
    ) -> None:
        recorder.store_default_translations(
            "en", "welcome", name="Ada", city="Riyadh", default="Hi", separator="."
        )
        assert _rows(store) == [("welcome", None, ["name", "city"])]

    def test_scope_applied(self, recorder: MissingRecorder, store: TranslationStore) -> None:
        recorder.store_default_translations("en", "gone", scope=["errors", "http"])
        assert _rows(store) == [("errors.http.gone", None, [])]

    def test_count_expands_plural_suffixes(
        self, recorder: MissingRecorder, store: TranslationStore
    ) -> None:
        recorder.store_default_translations("pl", "item_count", count=5)
        assert [key for key, _, _ in _rows(store, "pl")] == [
            "item_count.few",
            "item_count.one",
            "item_count.other",
            "item_count.zero",
        ]

    def test_count_stubs_carry_interpolations(
        self, recorder: MissingRecorder, store: TranslationStore
    ) -> None:
        recorder.store_default_translations("en", "inbox", count=2, folder="Spam")
        assert _rows(store) == [
            ("inbox.one", None, ["folder"]),
            ("inbox.other", None, ["folder"]),
        ]

    def test_existing_record_is_noop(
        self, recorder: MissingRecorder, store: TranslationStore
    ) -> None:
        store.create("en", "title", "Catalog")
        recorder.store_default_translations("en", "title")
        assert _rows(store) == [("title", "Catalog", None)]

    def test_existing_subtree_is_noop(
        self, recorder: MissingRecorder, store: TranslationStore
    ) -> None:
        store.create("en", "item_count.one", "one item")
        recorder.store_default_translations("en", "item_count", count=3)
        assert [key for key, _, _ in _rows(store)] == ["item_count.one"]

    def test_root_key_ignored(self, recorder: MissingRecorder, store: TranslationStore) -> None:
        recorder.store_default_translations("en", "")
        assert _rows(store) == []

    def test_store_failure_swallowed(
        self,
        broken_store: TranslationStore,
        fallback: SimpleBackend,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        recorder = MissingRecorder(broken_store, PluralKeyRegistry(fallback))
        recorder.store_default_translations("en", "anything")
        assert "Failed to store default translations" in caplog.text

    def test_duplicate_create_tolerated(
        self, recorder: MissingRecorder, store: TranslationStore
    ) -> None:
        store.create("en", "race", None)
        recorder.store_default_translation("en", "race", [])
        assert _rows(store) == [("race", None, None)]


class TestMissRecordingResolver:
    def test_records_and_reraises(
        self,
        snapshot_resolver: Resolver,
        recorder: MissingRecorder,
        store: TranslationStore,
    ) -> None:
        backend = MissRecordingResolver(snapshot_resolver, recorder)

        with pytest.raises(MissingTranslation):
            backend.translate("en", "item_count", count=1)

        assert [key for key, _, _ in _rows(store)] == ["item_count.one", "item_count.other"]

    def test_hit_passes_through(
        self,
        snapshot_resolver: Resolver,
        recorder: MissingRecorder,
        store: TranslationStore,
        greetings: None,
    ) -> None:
        backend = MissRecordingResolver(snapshot_resolver, recorder)
        assert backend.translate("en", "casual", scope="greeting") == "Hi"
        assert len(_rows(store)) == 2

    def test_delegates_other_operations(
        self,
        snapshot_resolver: Resolver,
        recorder: MissingRecorder,
        greetings: None,
    ) -> None:
        backend = MissRecordingResolver(snapshot_resolver, recorder)

        backend.store_translations("en", {"title": "Catalog"})
        assert backend.lookup("en", "title") == "Catalog"
        assert backend.available_locales() == ["en"]


class TestPluralKeyRegistry:
    def test_reads_locale_keys(self, fallback: SimpleBackend) -> None:
        assert PluralKeyRegistry(fallback).plural_suffixes("en") == ["one", "other"]

    def test_default_when_locale_unknown(self, fallback: SimpleBackend) -> None:
        assert PluralKeyRegistry(fallback).plural_suffixes("fr") == ["zero", "one", "other"]
