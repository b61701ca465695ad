"""Build request parameters for item, update and query calls.

These helpers sit between the command line and the database client: they turn
user supplied text into wire-format keys and compiled expressions.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from dyexpr.compiler import compile_remove, compile_set
from dyexpr.errors import SemanticError
from dyexpr.identifiers import quote_name
from dyexpr.keys import KeySchema, scalar_value
from dyexpr.parsing.update_parser import parse_remove, parse_set
from dyexpr.parsing.value_parser import parse_item
from dyexpr.placeholders import CompiledExpression, PlaceholderTable
from dyexpr.sort_key import compile_sort_condition, parse_and_resolve_sort_condition
from dyexpr.values import Map, to_wire

logger = logging.getLogger(__name__)


def build_key(
    schema: KeySchema,
    partition_value: str,
    sort_value: str | None = None,
) -> dict[str, dict[str, Any]]:
    """Build the wire-format primary key that identifies one item."""
    key = {schema.partition.name: to_wire(scalar_value(schema.partition.kind, partition_value))}
    if sort_value is not None:
        if schema.sort is None:
            raise SemanticError(
                "Partition and sort keys are given to identify an item, "
                f"but the table uses partition key {schema.partition.display()} only"
            )
        key[schema.sort.name] = to_wire(scalar_value(schema.sort.kind, sort_value))
    elif schema.sort is not None:
        raise SemanticError(f"Sort key {schema.sort.display()} is required to identify an item")
    logger.debug("generated primary key: %r", key)
    return key


def build_item(
    schema: KeySchema,
    partition_value: str,
    sort_value: str | None = None,
    item_text: str | None = None,
    infer_sets: bool = False,
) -> dict[str, dict[str, Any]]:
    """Build a wire-format item from its key values and an optional item body.

    Key attributes given in the body must agree with the key values.
    """
    item = build_key(schema, partition_value, sort_value)
    body = parse_item(item_text, infer_sets=infer_sets) if item_text else Map()
    for name, value in body.entries:
        envelope = to_wire(value)
        if name in item and item[name] != envelope:
            raise SemanticError(f"Item body sets key attribute '{name}' to a different value")
        item[name] = envelope
    return item


def compile_key_condition(
    schema: KeySchema,
    partition_value: str,
    sort_condition: str | None = None,
    strict: bool = False,
    table: PlaceholderTable | None = None,
) -> CompiledExpression:
    """Compile a KeyConditionExpression: ``#p0 = :v0`` plus an optional sort clause."""
    if table is None:
        table = PlaceholderTable()
    partition = scalar_value(schema.partition.kind, partition_value)
    expression = (
        f"{table.allocate_name(schema.partition.name)} = {table.allocate_value(partition)}"
    )
    if sort_condition is not None:
        if schema.sort is None:
            raise SemanticError(
                f"A sort key condition was given, but the table has no sort key "
                f"(partition key {schema.partition.display()})"
            )
        condition = parse_and_resolve_sort_condition(sort_condition, schema.sort, strict)
        expression += " AND " + compile_sort_condition(condition, schema.sort, table)
    result = table.compiled(expression)
    logger.debug(
        "compiled key condition %r names=%r values=%r",
        result.expression, result.names, result.values,
    )
    return result


def build_update_params(
    set_text: str | None = None,
    remove_text: str | None = None,
    key_attributes: Iterable[str] = (),
) -> dict[str, Any]:
    """Compile exactly one of ``set_text`` and ``remove_text`` into update parameters."""
    if (set_text is None) == (remove_text is None):
        raise SemanticError(
            "One of --set or --remove is required. Passing both options is invalid."
        )
    if set_text is not None:
        compiled = compile_set(parse_set(set_text), key_attributes=key_attributes)
    else:
        compiled = compile_remove(parse_remove(remove_text), key_attributes=key_attributes)  # type: ignore[arg-type]
    return compiled.as_params("UpdateExpression")


def atomic_counter(attribute: str) -> str:
    """Return the SET clause that increments ``attribute`` by one."""
    name = quote_name(attribute)
    return f"{name} = {name} + 1"


def compile_projection(
    schema: KeySchema,
    attributes: Sequence[str] | None = None,
    keys_only: bool = False,
    table: PlaceholderTable | None = None,
) -> CompiledExpression | None:
    """Compile a ProjectionExpression that always returns the primary key.

    Returns None when neither ``attributes`` nor ``keys_only`` is given, in which
    case every attribute is returned.
    """
    if not keys_only and attributes is None:
        return None
    if table is None:
        table = PlaceholderTable()
    refs = [table.allocate_name(name) for name in schema.key_attributes]
    if not keys_only:
        for name in attributes or ():
            name = name.strip()
            if name and name not in schema.key_attributes:
                refs.append(table.allocate_name(name))
    result = table.compiled(", ".join(dict.fromkeys(refs)))
    logger.debug("compiled projection %r names=%r", result.expression, result.names)
    return result
