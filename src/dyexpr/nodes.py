"""AST nodes for attribute paths, update actions and sort key conditions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

from dyexpr.identifiers import quote_name
from dyexpr.values import Value, render


# ---- Attribute paths ----


@dataclass(frozen=True)
class Attribute:
    """A named path segment."""
    name: str


@dataclass(frozen=True)
class Index:
    """A list index path segment."""
    index: int


Segment = Union[Attribute, Index]


@dataclass(frozen=True)
class AttributePath:
    """A document path such as ``a.b[0].c``; the first segment is always an Attribute."""
    segments: tuple[Segment, ...]

    def __str__(self) -> str:
        parts: list[str] = []
        for segment in self.segments:
            if isinstance(segment, Index):
                parts.append(f"[{segment.index}]")
            elif parts:
                parts.append("." + quote_name(segment.name))
            else:
                parts.append(quote_name(segment.name))
        return "".join(parts)


def path_of(*segments: str | int) -> AttributePath:
    """Shorthand constructor: ``path_of("a", 0, "b")`` is ``a[0].b``."""
    return AttributePath(tuple(
        Index(s) if isinstance(s, int) else Attribute(s) for s in segments
    ))


# ---- Update right hand sides ----


@dataclass(frozen=True)
class Literal:
    value: Value


@dataclass(frozen=True)
class PathOperand:
    path: AttributePath


@dataclass(frozen=True)
class Arithmetic:
    """``lhs + rhs`` or ``lhs - rhs``."""
    op: str
    lhs: Rhs
    rhs: Rhs


@dataclass(frozen=True)
class ListAppend:
    lhs: Rhs
    rhs: Rhs


@dataclass(frozen=True)
class IfNotExists:
    path: AttributePath
    rhs: Rhs


Rhs = Union[Literal, PathOperand, Arithmetic, ListAppend, IfNotExists]


# ---- Update actions ----


@dataclass(frozen=True)
class SetAction:
    path: AttributePath
    rhs: Rhs


@dataclass(frozen=True)
class RemoveAction:
    path: AttributePath


UpdateAction = Union[SetAction, RemoveAction]


# ---- Sort key conditions ----


@dataclass(frozen=True)
class Eq:
    value: Value
    operator: ClassVar[str] = "="


@dataclass(frozen=True)
class Lt:
    value: Value
    operator: ClassVar[str] = "<"


@dataclass(frozen=True)
class Le:
    value: Value
    operator: ClassVar[str] = "<="


@dataclass(frozen=True)
class Gt:
    value: Value
    operator: ClassVar[str] = ">"


@dataclass(frozen=True)
class Ge:
    value: Value
    operator: ClassVar[str] = ">="


@dataclass(frozen=True)
class Between:
    low: Value
    high: Value


@dataclass(frozen=True)
class BeginsWith:
    prefix: Value


Comparison = Union[Eq, Lt, Le, Gt, Ge]
SortKeyCondition = Union[Eq, Lt, Le, Gt, Ge, Between, BeginsWith]

COMPARISONS: dict[str, type] = {
    "=": Eq,
    "==": Eq,
    "<": Lt,
    "<=": Le,
    ">": Gt,
    ">=": Ge,
}


def condition_values(condition: SortKeyCondition) -> tuple[Value, ...]:
    """Return the literal operands of ``condition`` in source order."""
    if isinstance(condition, (Eq, Lt, Le, Gt, Ge)):
        return (condition.value,)
    if isinstance(condition, Between):
        return (condition.low, condition.high)
    if isinstance(condition, BeginsWith):
        return (condition.prefix,)
    raise TypeError(f"Not a sort key condition: {condition!r}")


def render_condition(condition: SortKeyCondition) -> str:
    """Render a condition as dynein text, e.g. ``= "1"`` or ``between 1 and 2``."""
    if isinstance(condition, (Eq, Lt, Le, Gt, Ge)):
        return f"{condition.operator} {render(condition.value)}"
    if isinstance(condition, Between):
        return f"between {render(condition.low)} and {render(condition.high)}"
    if isinstance(condition, BeginsWith):
        return f"begins_with {render(condition.prefix)}"
    raise TypeError(f"Not a sort key condition: {condition!r}")
