"""Key normalization and flattening.

Keys are persisted flat (``errors.not_found``) and consumed nested. A caller
may hand in a dotted string, a list of segments, a scope, and a custom
separator; everything is projected onto a single dotted string here.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from i18n_store.app.core.exceptions import InvalidKey

FLATTEN_SEPARATOR = "."
SEPARATOR_ESCAPE_CHAR = "\x01"

# Lookup options that are never interpolation parameters
RESERVED_KEYS = frozenset(
    {
        "count",
        "scope",
        "default",
        "separator",
        "resolve",
        "object",
        "fallback",
        "format",
        "cascade",
        "throw",
        "raise_on_missing",
        "deep_interpolation",
        "skip_interpolation",
    }
)


def _flatten_parts(parts: Any) -> Iterator[str]:
    if parts is None:
        return
    if isinstance(parts, bool):
        raise InvalidKey(f"invalid translation key segment: {parts!r}")
    if isinstance(parts, (str, int)):
        yield str(parts)
        return
    if isinstance(parts, (list, tuple)):
        for part in parts:
            yield from _flatten_parts(part)
        return
    raise InvalidKey(f"invalid translation key segment: {parts!r}")


def normalize_flat_keys(key: Any, scope: Any = None, separator: str | None = None) -> str:
    """Join *scope* and *key* into a canonical dotted key.

    With a custom *separator*, literal dots inside segments are escaped and
    the custom separator is translated to ``.``. One leading or trailing
    separator left over by an empty scope or key is stripped, so ``""``
    (the whole locale) stays a valid result.
    """
    keys = list(_flatten_parts([scope, key]))
    separator = separator or FLATTEN_SEPARATOR
    if separator != FLATTEN_SEPARATOR:
        keys = [
            k.replace(FLATTEN_SEPARATOR, SEPARATOR_ESCAPE_CHAR).replace(
                separator, FLATTEN_SEPARATOR
            )
            for k in keys
        ]
    result = FLATTEN_SEPARATOR.join(keys)
    if result.startswith(FLATTEN_SEPARATOR):
        result = result[1:]
    if result.endswith(FLATTEN_SEPARATOR):
        result = result[:-1]
    return result


def expand_keys(key: str) -> list[str]:
    """For ``"foo.bar.baz"`` return ``["foo", "foo.bar", "foo.bar.baz"]``."""
    chain: list[str] = []
    for segment in str(key).split(FLATTEN_SEPARATOR):
        chain.append(FLATTEN_SEPARATOR.join([chain[-1], segment]) if chain else segment)
    return chain


def escape_default_separator(segment: Any) -> str:
    return str(segment).replace(FLATTEN_SEPARATOR, SEPARATOR_ESCAPE_CHAR)


def flatten_keys(
    data: Mapping[Any, Any], escape: bool = True, prev_key: str | None = None
) -> Iterator[tuple[str, Any]]:
    """Yield ``(flat_key, value)`` for every node, branches included."""
    for key, value in data.items():
        segment = escape_default_separator(key) if escape else str(key)
        curr_key = f"{prev_key}{FLATTEN_SEPARATOR}{segment}" if prev_key else segment
        yield curr_key, value
        if isinstance(value, Mapping):
            yield from flatten_keys(value, escape, curr_key)


def flatten_translations(data: Mapping[Any, Any], escape: bool = True) -> dict[str, Any]:
    """Flatten a nested catalog to ``{flat_key: leaf_value}``."""
    return {
        key: value
        for key, value in flatten_keys(data, escape)
        if not isinstance(value, Mapping)
    }
