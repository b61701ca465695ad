"""Primary key definitions of a table."""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass

from dyexpr.errors import SemanticError, ValueTypeError
from dyexpr.values import AttributeType, Binary, Number, String, Value

_KEY_TYPES = {
    "S": AttributeType.S,
    "N": AttributeType.N,
    "B": AttributeType.B,
}

NUMBER_RE = re.compile(r"[+-]?[0-9]+(?:\.[0-9]*)?(?:[eE][+-]?[0-9]+)?")


def parse_key_type(text: str) -> AttributeType:
    """Parse a key type letter (``S``, ``N`` or ``B``)."""
    try:
        return _KEY_TYPES[text]
    except KeyError:
        raise SemanticError(f"Not a valid DynamoDB primary key type: {text}") from None


@dataclass(frozen=True)
class Key:
    """A partition or sort key: attribute name plus scalar type."""

    name: str
    kind: AttributeType = AttributeType.S

    def __post_init__(self) -> None:
        if not self.kind.is_scalar:
            raise SemanticError(f"Not a valid DynamoDB primary key type: {self.kind.value}")
        if not self.name:
            raise SemanticError("Key attribute name must not be empty")

    def display(self) -> str:
        return f"{self.name} ({self.kind.value})"

    @classmethod
    def parse(cls, text: str) -> Key:
        """Parse ``name`` or ``name:TYPE``; the type defaults to S."""
        name, sep, kind = text.strip().rpartition(":")
        if not sep:
            return cls(kind)
        return cls(name.strip(), parse_key_type(kind.strip().upper()))


@dataclass(frozen=True)
class KeySchema:
    """Primary key of a table: a partition key and an optional sort key."""

    partition: Key
    sort: Key | None = None

    @property
    def key_attributes(self) -> tuple[str, ...]:
        if self.sort is None:
            return (self.partition.name,)
        return (self.partition.name, self.sort.name)

    @classmethod
    def parse(cls, text: str) -> KeySchema:
        """Parse ``pk:S`` or ``pk:S,sk:N``."""
        parts = [p for p in text.split(",") if p.strip()]
        if not 1 <= len(parts) <= 2:
            raise SemanticError(
                f"Key schema must name a partition key and an optional sort key, got '{text}'"
            )
        partition = Key.parse(parts[0])
        sort = Key.parse(parts[1]) if len(parts) == 2 else None
        return cls(partition, sort)


def scalar_value(kind: AttributeType, text: str) -> Value:
    """Build a key value of type ``kind`` from command line text.

    Numbers are syntax checked; binary values are given as base64.
    """
    if kind == AttributeType.S:
        return String(text)
    if kind == AttributeType.N:
        if not NUMBER_RE.fullmatch(text):
            raise ValueTypeError(f"Not a valid number for a key of type N: {text}")
        return Number(text[1:] if text.startswith("+") else text)
    if kind == AttributeType.B:
        try:
            return Binary(base64.b64decode(text, validate=True))
        except binascii.Error as e:
            raise ValueTypeError(f"Not valid base64 for a key of type B: {text}") from e
    raise SemanticError(f"Not a valid DynamoDB primary key type: {kind.value}")
