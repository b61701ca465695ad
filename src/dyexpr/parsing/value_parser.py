"""Parser for dynein-format literal values (a superset of JSON)."""

from __future__ import annotations

import logging

from dyexpr.errors import ValueTypeError
from dyexpr.inference import infer_sets as apply_set_inference
from dyexpr.parsing.grammar import GrammarParser, LiteralGrammar
from dyexpr.values import Map, Value, kind_of

logger = logging.getLogger(__name__)


class ValueParser(LiteralGrammar, GrammarParser):
    """Parser for a single literal value."""

    start = "literal"


def parse_value(text: str, infer_sets: bool = False) -> Value:
    """Parse ``text`` into a ``Value``.

    With ``infer_sets``, lists whose elements are all numbers, all strings or
    all binaries become sets (legacy array-as-set behaviour).
    """
    value = ValueParser().parse(text)
    if infer_sets:
        value = apply_set_inference(value)
    return value


def parse_item(text: str, infer_sets: bool = False) -> Map:
    """Parse an item body, which must be a map literal."""
    value = parse_value(text, infer_sets=infer_sets)
    if not isinstance(value, Map):
        raise ValueTypeError(f"Item must be a map literal, but got {kind_of(value)}")
    logger.debug("parsed item with %d attributes", len(value.entries))
    return value
