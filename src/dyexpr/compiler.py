"""Compile update actions into DynamoDB UpdateExpression text."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from dyexpr.errors import SemanticError
from dyexpr.nodes import (
    Arithmetic,
    Attribute,
    AttributePath,
    IfNotExists,
    Index,
    ListAppend,
    Literal,
    PathOperand,
    RemoveAction,
    Rhs,
    SetAction,
    UpdateAction,
)
from dyexpr.placeholders import CompiledExpression, PlaceholderTable

logger = logging.getLogger(__name__)

_KEYWORDS = {SetAction: "SET", RemoveAction: "REMOVE"}


def compile_path(path: AttributePath, table: PlaceholderTable) -> str:
    """Compile ``path`` to placeholder form, e.g. ``#p0.#p1[2]``."""
    if not path.segments:
        raise SemanticError("Attribute path must not be empty")
    parts: list[str] = []
    for i, segment in enumerate(path.segments):
        if isinstance(segment, Index):
            if i == 0:
                raise SemanticError("Attribute path must start with an attribute name")
            parts.append(f"[{segment.index}]")
        elif isinstance(segment, Attribute):
            if not segment.name:
                raise SemanticError(f"Attribute name must not be empty in path '{path}'")
            ref = table.allocate_name(segment.name)
            parts.append(ref if i == 0 else "." + ref)
        else:
            raise TypeError(f"Not a path segment: {segment!r}")
    return "".join(parts)


def compile_rhs(rhs: Rhs, table: PlaceholderTable) -> str:
    """Compile the right hand side of a SET action."""
    if isinstance(rhs, Literal):
        return table.allocate_value(rhs.value)
    if isinstance(rhs, PathOperand):
        return compile_path(rhs.path, table)
    if isinstance(rhs, Arithmetic):
        lhs = compile_rhs(rhs.lhs, table)
        return f"{lhs} {rhs.op} {compile_rhs(rhs.rhs, table)}"
    if isinstance(rhs, ListAppend):
        lhs = compile_rhs(rhs.lhs, table)
        return f"list_append({lhs}, {compile_rhs(rhs.rhs, table)})"
    if isinstance(rhs, IfNotExists):
        path = compile_path(rhs.path, table)
        return f"if_not_exists({path}, {compile_rhs(rhs.rhs, table)})"
    raise TypeError(f"Not an update operand: {rhs!r}")


def _check_actions(
    actions: Sequence[UpdateAction],
    kind: type,
    key_attributes: Iterable[str],
) -> None:
    if not actions:
        raise SemanticError(f"No {_KEYWORDS[kind]} actions to compile")
    keys = set(key_attributes)
    for action in actions:
        if not isinstance(action, kind):
            other = _KEYWORDS.get(type(action), type(action).__name__)
            raise SemanticError(
                f"Cannot mix {_KEYWORDS[kind]} and {other} actions in one update"
            )
        if not action.path.segments:
            raise SemanticError("Attribute path must not be empty")
        top = action.path.segments[0]
        if isinstance(top, Attribute) and top.name in keys:
            raise SemanticError(
                f"Cannot {_KEYWORDS[kind]} '{action.path}': "
                f"'{top.name}' is part of the primary key"
            )


def compile_set(
    actions: Sequence[SetAction],
    table: PlaceholderTable | None = None,
    key_attributes: Iterable[str] = (),
) -> CompiledExpression:
    """Compile SET actions to ``SET #p0 = #p0 + :v0, #p1 = :v1``.

    Placeholders are allocated left to right: each action's path first, then
    its right hand side. Pass ``table`` to share placeholders with other
    expressions of the same request.
    """
    _check_actions(actions, SetAction, key_attributes)
    if table is None:
        table = PlaceholderTable()
    clauses = []
    for action in actions:
        path = compile_path(action.path, table)
        clauses.append(f"{path} = {compile_rhs(action.rhs, table)}")
    result = table.compiled("SET " + ", ".join(clauses))
    logger.debug(
        "compiled update expression %r names=%r values=%r",
        result.expression, result.names, result.values,
    )
    return result


def compile_remove(
    actions: Sequence[RemoveAction],
    table: PlaceholderTable | None = None,
    key_attributes: Iterable[str] = (),
) -> CompiledExpression:
    """Compile REMOVE actions to ``REMOVE #p0, #p1[0]``."""
    _check_actions(actions, RemoveAction, key_attributes)
    if table is None:
        table = PlaceholderTable()
    paths = [compile_path(action.path, table) for action in actions]
    result = table.compiled("REMOVE " + ", ".join(paths))
    logger.debug("compiled update expression %r names=%r", result.expression, result.names)
    return result
