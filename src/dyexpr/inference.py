"""Legacy set inference and JSON document conversion.

Older versions of the tool treated JSON arrays of numbers or strings as sets.
That behaviour survives behind a flag as a separate rewrite pass over parsed
values, so the literal grammar itself stays context free.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Any

from dyexpr.errors import ValueTypeError
from dyexpr.values import (
    Binary,
    Bool,
    List,
    Map,
    Null,
    Number,
    String,
    Value,
    make_set,
)

_SCALARS = (Number, String, Binary)


def _set_candidate(items: tuple[Value, ...]) -> bool:
    if not items:
        return False
    first = type(items[0])
    if first not in _SCALARS or any(type(item) is not first for item in items):
        return False
    if first is Number:
        keys = [item.as_decimal() for item in items]  # type: ignore[union-attr]
    else:
        keys = [item.value for item in items]  # type: ignore[union-attr]
    return len(set(keys)) == len(keys)


def infer_sets(value: Value) -> Value:
    """Rewrite homogeneous scalar lists into sets, recursively.

    A non-empty list whose elements are all numbers, all strings or all binaries,
    with no duplicates, becomes the matching set. Any other list stays a list,
    with its elements rewritten.
    """
    return _rewrite_lists(value)


def _rewrite_lists(value: Value) -> Value:
    if isinstance(value, List):
        if _set_candidate(value.items):
            return make_set(value.items)
        return List(tuple(_rewrite_lists(item) for item in value.items))
    if isinstance(value, Map):
        return Map(tuple((key, _rewrite_lists(item)) for key, item in value.entries))
    return value


def _from_json(document: Any) -> Value:
    if document is None:
        return Null()
    if isinstance(document, bool):
        return Bool(document)
    if isinstance(document, int):
        return Number(str(document))
    if isinstance(document, float):
        if not math.isfinite(document):
            raise ValueTypeError(f"Not a valid number: {document}")
        return Number(repr(document))
    if isinstance(document, Decimal):
        if not document.is_finite():
            raise ValueTypeError(f"Not a valid number: {document}")
        return Number(str(document))
    if isinstance(document, str):
        return String(document)
    if isinstance(document, list):
        return List(tuple(_from_json(item) for item in document))
    if isinstance(document, dict):
        return Map(tuple((str(key), _from_json(item)) for key, item in document.items()))
    raise ValueTypeError(f"Cannot convert {type(document).__name__} to an attribute value")


def from_json(document: Any, infer_sets: bool = False) -> Value:
    """Convert a decoded JSON document (``json.loads`` output) into a ``Value``."""
    value = _from_json(document)
    if infer_sets:
        value = _rewrite_lists(value)
    return value
