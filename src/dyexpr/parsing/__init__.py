"""Parsers for dynein-format values, paths, update clauses and sort key conditions."""

from dyexpr.parsing.lexer import ExpressionLexer, tokenize
from dyexpr.parsing.path_parser import PathParser, parse_path
from dyexpr.parsing.sort_key_parser import (
    SortKeyParser,
    parse_bare_sort_condition,
    parse_sort_condition,
)
from dyexpr.parsing.update_parser import RemoveParser, SetParser, parse_remove, parse_set
from dyexpr.parsing.value_parser import ValueParser, parse_item, parse_value

__all__ = [
    "ExpressionLexer",
    "PathParser",
    "RemoveParser",
    "SetParser",
    "SortKeyParser",
    "ValueParser",
    "parse_bare_sort_condition",
    "parse_item",
    "parse_path",
    "parse_remove",
    "parse_set",
    "parse_sort_condition",
    "parse_value",
    "tokenize",
]
