"""Typed attribute values and their text and wire representations.

A ``Value`` is one of the frozen dataclasses below. Values are produced by the
value parser (``dyexpr.parsing.value_parser``), by ``dyexpr.inference.from_json``
or by ``from_wire``, and are consumed by the compilers and request builders.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable, Union

from dyexpr.errors import (
    DuplicateSetElementError,
    EmptySetError,
    HeterogeneousSetError,
    InvalidNumberError,
    ValueTypeError,
)
from dyexpr.escapes import render_base64, render_string


class AttributeType(Enum):
    """DynamoDB attribute type descriptors."""

    S = "S"
    N = "N"
    B = "B"
    BOOL = "BOOL"
    NULL = "NULL"
    L = "L"
    M = "M"
    NS = "NS"
    SS = "SS"
    BS = "BS"

    def __str__(self) -> str:
        return f"{_TYPE_NAMES[self]} ({self.value})"

    @property
    def is_scalar(self) -> bool:
        return self in (AttributeType.S, AttributeType.N, AttributeType.B)


_TYPE_NAMES = {
    AttributeType.S: "String",
    AttributeType.N: "Number",
    AttributeType.B: "Binary",
    AttributeType.BOOL: "Boolean",
    AttributeType.NULL: "Null",
    AttributeType.L: "List",
    AttributeType.M: "Map",
    AttributeType.NS: "Number Set",
    AttributeType.SS: "String Set",
    AttributeType.BS: "Binary Set",
}


# ---- Scalars ----


@dataclass(frozen=True)
class Null:
    pass


@dataclass(frozen=True)
class Bool:
    value: bool


@dataclass(frozen=True)
class Number:
    """A decimal number kept as its literal text (no leading ``+``)."""
    text: str

    def as_decimal(self) -> Decimal:
        return Decimal(self.text)


@dataclass(frozen=True)
class String:
    value: str


@dataclass(frozen=True)
class Binary:
    value: bytes


# ---- Documents ----


@dataclass(frozen=True)
class List:
    items: tuple[Value, ...] = ()


@dataclass(frozen=True, eq=False)
class Map:
    """Attribute map; entries keep their literal order, equality ignores it."""
    entries: tuple[tuple[str, Value], ...] = ()

    def as_dict(self) -> dict[str, Value]:
        return dict(self.entries)

    def get(self, key: str) -> Value | None:
        return self.as_dict().get(key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Map):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __hash__(self) -> int:
        return hash(frozenset(self.entries))


# ---- Sets ----


class _SetBase:
    """Shared behaviour for the three set types: unordered equality."""

    elements: tuple[Any, ...]

    def _keys(self) -> frozenset[Any]:
        return frozenset(_set_key(e) for e in self.elements)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._keys() == other._keys()  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._keys()))

    def __len__(self) -> int:
        return len(self.elements)


@dataclass(frozen=True, eq=False)
class NumberSet(_SetBase):
    elements: tuple[Number, ...]


@dataclass(frozen=True, eq=False)
class StringSet(_SetBase):
    elements: tuple[String, ...]


@dataclass(frozen=True, eq=False)
class BinarySet(_SetBase):
    elements: tuple[Binary, ...]


Value = Union[Null, Bool, Number, String, Binary, List, Map, NumberSet, StringSet, BinarySet]

_SET_TYPES = {
    Number: NumberSet,
    String: StringSet,
    Binary: BinarySet,
}


def _set_key(element: Number | String | Binary) -> Any:
    if isinstance(element, Number):
        return element.as_decimal()
    return element.value


def kind_of(value: Value) -> AttributeType:
    """Return the attribute type of ``value``."""
    if isinstance(value, Null):
        return AttributeType.NULL
    if isinstance(value, Bool):
        return AttributeType.BOOL
    if isinstance(value, Number):
        return AttributeType.N
    if isinstance(value, String):
        return AttributeType.S
    if isinstance(value, Binary):
        return AttributeType.B
    if isinstance(value, List):
        return AttributeType.L
    if isinstance(value, Map):
        return AttributeType.M
    if isinstance(value, NumberSet):
        return AttributeType.NS
    if isinstance(value, StringSet):
        return AttributeType.SS
    if isinstance(value, BinarySet):
        return AttributeType.BS
    raise TypeError(f"Not a dynein value: {value!r}")


def make_set(elements: Iterable[Value]) -> NumberSet | StringSet | BinarySet:
    """Build a set from scalar elements.

    Raises EmptySetError for no elements, HeterogeneousSetError when elements are
    not all Number, all String or all Binary, and DuplicateSetElementError when
    two elements are equal (numbers compare by value).
    """
    items = tuple(elements)
    if not items:
        raise EmptySetError("Empty set is not allowed")

    first = type(items[0])
    set_type = _SET_TYPES.get(first)
    if set_type is None:
        raise HeterogeneousSetError(
            f"Set elements must be numbers, strings or binaries, found {kind_of(items[0])}"
        )
    for item in items:
        if type(item) is not first:
            raise HeterogeneousSetError(
                "Set elements must all be numbers, all strings or all binaries, "
                f"but found {kind_of(items[0])} and {kind_of(item)}"
            )

    seen: set[Any] = set()
    for item in items:
        key = _set_key(item)  # type: ignore[arg-type]
        if key in seen:
            raise DuplicateSetElementError(f"Duplicate element in set: {render(item)}")
        seen.add(key)
    return set_type(items)  # type: ignore[arg-type]


# ---- Dynein text ----


def render(value: Value) -> str:
    """Render ``value`` as dynein-format text that parses back to an equal value."""
    if isinstance(value, Null):
        return "null"
    if isinstance(value, Bool):
        return "true" if value.value else "false"
    if isinstance(value, Number):
        return value.text
    if isinstance(value, String):
        return render_string(value.value)
    if isinstance(value, Binary):
        return render_base64(value.value)
    if isinstance(value, List):
        return "[" + ", ".join(render(v) for v in value.items) + "]"
    if isinstance(value, Map):
        return "{" + ", ".join(
            f"{render_string(k)}: {render(v)}" for k, v in value.entries
        ) + "}"
    if isinstance(value, (NumberSet, StringSet, BinarySet)):
        return "<<" + ", ".join(render(v) for v in value.elements) + ">>"
    raise TypeError(f"Not a dynein value: {value!r}")


# ---- Wire envelopes ----

# Positive magnitudes DynamoDB accepts: 1E-130 up to 9.99...E+125
_MIN_EXPONENT = -130
_MAX_EXPONENT = 125
_MAX_PRECISION = 38


def check_number(text: str) -> Decimal:
    """Validate a number against DynamoDB's precision and range limits."""
    try:
        number = Decimal(text)
    except InvalidOperation as e:
        raise InvalidNumberError(f"Not a valid number: {text}") from e
    if not number.is_finite():
        raise InvalidNumberError(f"Not a valid number: {text}")
    if number.is_zero():
        return number

    digits = "".join(str(d) for d in number.as_tuple().digits).strip("0")
    if len(digits) > _MAX_PRECISION:
        raise InvalidNumberError(
            f"Number {text} has more than {_MAX_PRECISION} significant digits"
        )
    exponent = number.adjusted()
    if exponent < _MIN_EXPONENT or exponent > _MAX_EXPONENT:
        raise InvalidNumberError(f"Number {text} is out of the supported range")
    return number


def to_wire(value: Value) -> dict[str, Any]:
    """Encode ``value`` as a typed attribute envelope such as ``{"S": "abc"}``.

    Binary payloads are base64 text, as in DynamoDB's JSON protocol.
    """
    if isinstance(value, Null):
        return {"NULL": True}
    if isinstance(value, Bool):
        return {"BOOL": value.value}
    if isinstance(value, Number):
        check_number(value.text)
        return {"N": value.text}
    if isinstance(value, String):
        return {"S": value.value}
    if isinstance(value, Binary):
        return {"B": _b64(value.value)}
    if isinstance(value, List):
        return {"L": [to_wire(v) for v in value.items]}
    if isinstance(value, Map):
        return {"M": {k: to_wire(v) for k, v in value.entries}}
    if isinstance(value, NumberSet):
        for element in value.elements:
            check_number(element.text)
        return {"NS": [e.text for e in value.elements]}
    if isinstance(value, StringSet):
        return {"SS": [e.value for e in value.elements]}
    if isinstance(value, BinarySet):
        return {"BS": [_b64(e.value) for e in value.elements]}
    raise TypeError(f"Not a dynein value: {value!r}")


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _unb64(data: str | bytes) -> bytes:
    if isinstance(data, bytes):
        return data
    try:
        return base64.b64decode(data, validate=True)
    except binascii.Error as e:
        raise ValueTypeError(f"Invalid base64 in binary attribute: {data!r}") from e


def from_wire(envelope: dict[str, Any]) -> Value:
    """Decode a typed attribute envelope back into a ``Value``."""
    if not isinstance(envelope, dict) or len(envelope) != 1:
        raise ValueTypeError(f"Not an attribute value envelope: {envelope!r}")
    (tag, payload), = envelope.items()
    if tag == "NULL":
        return Null()
    if tag == "BOOL":
        return Bool(bool(payload))
    if tag == "N":
        return Number(str(payload))
    if tag == "S":
        return String(payload)
    if tag == "B":
        return Binary(_unb64(payload))
    if tag == "L":
        return List(tuple(from_wire(v) for v in payload))
    if tag == "M":
        return Map(tuple((k, from_wire(v)) for k, v in payload.items()))
    if tag == "NS":
        return make_set(Number(str(v)) for v in payload)
    if tag == "SS":
        return make_set(String(v) for v in payload)
    if tag == "BS":
        return make_set(Binary(_unb64(v)) for v in payload)
    raise ValueTypeError(f"Unknown attribute type: {tag}")
