"""Resolve sort key conditions against the table's sort key type.

Two policies exist:

* strict: every literal must already have the sort key's type. A mismatch
  raises SortKeyTypeMismatchError, suggesting the non-strict reading when
  there is one (``Did you intend '= "1"'?``).
* non-strict (the default): literals are coerced to the sort key's type when
  the reading is unambiguous. ``<= 1`` against a string key becomes
  ``<= "1"``, ``= "12"`` against a number key becomes ``= 12`` and a hex
  string against a binary key becomes the bytes it spells. Anything else
  raises AmbiguousCoercionError.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from dyexpr.errors import (
    AmbiguousCoercionError,
    LexError,
    ParseError,
    SemanticError,
    SortKeyTypeMismatchError,
    ValueTypeError,
)
from dyexpr.keys import NUMBER_RE, Key
from dyexpr.nodes import (
    BeginsWith,
    Between,
    Eq,
    Ge,
    Gt,
    Le,
    Lt,
    SortKeyCondition,
    condition_values,
    render_condition,
)
from dyexpr.parsing.sort_key_parser import parse_bare_sort_condition, parse_sort_condition
from dyexpr.placeholders import PlaceholderTable
from dyexpr.values import AttributeType, Binary, Number, String, Value, kind_of, render

logger = logging.getLogger(__name__)

_HEX_RE = re.compile(r"(?:[0-9a-fA-F]{2})+")


def coerce_value(value: Value, kind: AttributeType) -> Value:
    """Reinterpret a scalar literal as ``kind`` (non-strict policy)."""
    actual = kind_of(value)
    if actual == kind:
        return value
    if kind == AttributeType.S and isinstance(value, Number):
        return String(value.text)
    if kind == AttributeType.N and isinstance(value, String):
        text = value.value.strip()
        if NUMBER_RE.fullmatch(text):
            return Number(text[1:] if text.startswith("+") else text)
    if kind == AttributeType.B and isinstance(value, String):
        if _HEX_RE.fullmatch(value.value):
            return Binary(bytes.fromhex(value.value))
    raise AmbiguousCoercionError(
        f"Cannot interpret {actual} literal as {kind}: {render(value)}"
    )


def _map_values(
    condition: SortKeyCondition,
    fn: Callable[[Value], Value],
) -> SortKeyCondition:
    if isinstance(condition, (Eq, Lt, Le, Gt, Ge)):
        return type(condition)(fn(condition.value))
    if isinstance(condition, Between):
        return Between(fn(condition.low), fn(condition.high))
    if isinstance(condition, BeginsWith):
        return BeginsWith(fn(condition.prefix))
    raise TypeError(f"Not a sort key condition: {condition!r}")


def _suggest(condition: SortKeyCondition, key: Key) -> str | None:
    try:
        return render_condition(_map_values(condition, lambda v: coerce_value(v, key.kind)))
    except ValueTypeError:
        return None


def resolve_sort_condition(
    condition: SortKeyCondition,
    key: Key,
    strict: bool = False,
) -> SortKeyCondition:
    """Check or coerce the literals of ``condition`` against ``key``'s type."""
    if isinstance(condition, BeginsWith) and key.kind == AttributeType.N:
        raise SemanticError(
            f"begins_with cannot be used with sort key {key.display()}; "
            "it requires a string or binary sort key"
        )

    if strict:
        for value in condition_values(condition):
            actual = kind_of(value)
            if actual != key.kind:
                raise SortKeyTypeMismatchError(key.kind, actual, _suggest(condition, key))
        return condition

    resolved = _map_values(condition, lambda v: coerce_value(v, key.kind))
    if resolved != condition:
        logger.debug(
            "coerced sort key condition %r to %r",
            render_condition(condition), render_condition(resolved),
        )
    return resolved


def parse_and_resolve_sort_condition(
    text: str,
    key: Key,
    strict: bool = False,
) -> SortKeyCondition:
    """Parse ``text`` and resolve it against ``key``.

    For string sort keys, input the literal grammar rejects is read again with
    bare words as strings (``begins_with id#12``, ``between a b``). Non-strict
    mode uses that reading; strict mode only names it in the error message.
    """
    try:
        condition = parse_sort_condition(text)
    except (LexError, ParseError) as e:
        fallback = parse_bare_sort_condition(text) if key.kind == AttributeType.S else None
        if fallback is None:
            raise
        if strict:
            raise type(e)(
                f"{e.message}\nDid you intend '{render_condition(fallback)}'?", e.position
            ) from e
        logger.debug("read sort key condition %r with bare words", text)
        condition = fallback
    return resolve_sort_condition(condition, key, strict)


def compile_sort_condition(
    condition: SortKeyCondition,
    key: Key,
    table: PlaceholderTable,
) -> str:
    """Compile a resolved condition, e.g. ``#p1 BETWEEN :v1 AND :v2``."""
    name = table.allocate_name(key.name)
    if isinstance(condition, (Eq, Lt, Le, Gt, Ge)):
        return f"{name} {condition.operator} {table.allocate_value(condition.value)}"
    if isinstance(condition, Between):
        low = table.allocate_value(condition.low)
        return f"{name} BETWEEN {low} AND {table.allocate_value(condition.high)}"
    if isinstance(condition, BeginsWith):
        return f"begins_with({name}, {table.allocate_value(condition.prefix)})"
    raise TypeError(f"Not a sort key condition: {condition!r}")
