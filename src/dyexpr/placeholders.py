"""Placeholder allocation for expression attribute names and values.

Compiled expressions never embed raw attribute names or values. Each name is
replaced by ``#pN`` and each value by ``:vN``; the table records the mapping so
the request layer can send ``ExpressionAttributeNames`` and
``ExpressionAttributeValues`` alongside the expression.

Allocation is memoized: asking twice for the same name (or an equal value)
returns the same placeholder. Counters start at zero for every table, so
compiling the same input twice yields identical output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from dyexpr.values import Value, to_wire


@dataclass
class CompiledExpression:
    """An expression string plus the placeholder maps it references."""

    expression: str
    names: dict[str, str] = field(default_factory=dict)
    values: dict[str, dict[str, Any]] = field(default_factory=dict)

    def as_params(self, expression_key: str) -> dict[str, Any]:
        """Return request parameters, omitting empty placeholder maps."""
        params: dict[str, Any] = {expression_key: self.expression}
        if self.names:
            params["ExpressionAttributeNames"] = dict(self.names)
        if self.values:
            params["ExpressionAttributeValues"] = dict(self.values)
        return params


class PlaceholderTable:
    """Memoizing allocator for ``#pN`` name and ``:vN`` value placeholders."""

    def __init__(self) -> None:
        self.names: dict[str, str] = {}
        self.values: dict[str, dict[str, Any]] = {}
        self._name_refs: dict[str, str] = {}
        self._value_refs: dict[Value, str] = {}

    def allocate_name(self, raw: str) -> str:
        ref = self._name_refs.get(raw)
        if ref is None:
            ref = f"#p{len(self.names)}"
            self._name_refs[raw] = ref
            self.names[ref] = raw
        return ref

    def allocate_value(self, value: Value) -> str:
        ref = self._value_refs.get(value)
        if ref is None:
            ref = f":v{len(self.values)}"
            self.values[ref] = to_wire(value)
            self._value_refs[value] = ref
        return ref

    def compiled(self, expression: str) -> CompiledExpression:
        """Bundle ``expression`` with copies of the current maps."""
        return CompiledExpression(expression, dict(self.names), dict(self.values))
