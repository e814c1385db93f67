"""Rebuild nested mappings from flat ``(key, value)`` pairs."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from i18n_store.app.core.exceptions import ConflictingKeyShape
from i18n_store.app.services.keys import FLATTEN_SEPARATOR, SEPARATOR_ESCAPE_CHAR

logger = logging.getLogger(__name__)

# Returned by exact_lookup when the entries describe a subtree
SUBTREE = object()


def split_key(key: str) -> list[str]:
    """Split a flat key into segments, restoring dots escaped inside a segment."""
    return [
        segment.replace(SEPARATOR_ESCAPE_CHAR, FLATTEN_SEPARATOR)
        for segment in key.split(FLATTEN_SEPARATOR)
    ]


def _insert(tree: dict[str, Any], segments: list[str], value: Any, strict: bool) -> None:
    node = tree
    for index, segment in enumerate(segments):
        path = FLATTEN_SEPARATOR.join(segments[: index + 1])
        is_leaf = index == len(segments) - 1
        existing = node.get(segment)

        if is_leaf:
            if isinstance(existing, dict):
                _conflict(path, strict)
                return
            node[segment] = value
            return

        if segment in node and not isinstance(existing, dict):
            _conflict(path, strict)
            existing = None
        if existing is None:
            existing = node[segment] = {}
        node = existing


def _conflict(path: str, strict: bool) -> None:
    error = ConflictingKeyShape(path)
    if strict:
        raise error
    # Branch wins: a leaf never replaces a mapping, a mapping always replaces a leaf.
    logger.warning("%s; keeping the nested branch", error)


def build_subtree(
    prefix_key: str, entries: Iterable[tuple[str, Any]], strict: bool = False
) -> dict[str, Any]:
    """Nest *entries* below *prefix_key*.

    Every entry key is expected to start with ``prefix_key + "."`` (or, for
    an empty prefix, to be a full locale key). An entry equal to the prefix
    itself is a leaf sitting where a branch is being built and is treated as
    a conflict.
    """
    tree: dict[str, Any] = {}
    chop = len(prefix_key) + len(FLATTEN_SEPARATOR) if prefix_key else 0
    for key, value in entries:
        if prefix_key and key == prefix_key:
            _conflict(prefix_key, strict)
            continue
        _insert(tree, split_key(key[chop:]), value, strict)
    return tree


def exact_lookup(entries: list[tuple[str, Any]], key: str) -> Any:
    """Return the value of the single entry keyed exactly *key*, else ``SUBTREE``."""
    if len(entries) == 1 and entries[0][0] == key:
        return entries[0][1]
    return SUBTREE


def build_snapshot(records: Iterable[tuple[str, str, Any]]) -> dict[str, dict[str, Any]]:
    """Materialize ``locale -> nested mapping`` from ``(locale, key, value)`` rows."""
    snapshot: dict[str, dict[str, Any]] = {}
    for locale, key, value in records:
        _insert(snapshot.setdefault(locale, {}), split_key(key), value, False)
    return snapshot
