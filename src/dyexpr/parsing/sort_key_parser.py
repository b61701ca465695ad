"""Parser for sort key conditions (``--sort-key`` style).

Accepted forms, keywords case-insensitive::

    = V   == V   < V   <= V   > V   >= V
    BETWEEN A AND B   BETWEEN A B
    BEGINS_WITH V
    V                 (shorthand for = V)

where V, A and B are number, string or binary literals.
"""

from __future__ import annotations

import re

import ply.yacc as yacc

from dyexpr.nodes import COMPARISONS, BeginsWith, Between, Eq, SortKeyCondition
from dyexpr.parsing.grammar import GrammarParser, reject
from dyexpr.values import Binary, Number, String

# Bare word readings for string sort keys, e.g. "begins_with id#12" or "<= abc"
_BARE_WORD = r"(\S+)"
_BARE_PATTERNS = [
    (re.compile(r"\s*(==|=|<=|<|>=|>)\s*" + _BARE_WORD + r"\s*", re.DOTALL), "comparison"),
    (
        re.compile(
            r"\s*between\s+" + _BARE_WORD + r"\s+(?:and\s+)?" + _BARE_WORD + r"\s*",
            re.IGNORECASE | re.DOTALL,
        ),
        "between",
    ),
    (re.compile(r"\s*begins_with\s+" + _BARE_WORD + r"\s*", re.IGNORECASE | re.DOTALL), "begins_with"),
    (re.compile(r"\s*" + _BARE_WORD + r"\s*", re.DOTALL), "bare"),
]


class SortKeyParser(GrammarParser):
    """Parser for a single sort key condition."""

    start = "sort_condition"

    def p_sort_condition_bare(self, p: yacc.YaccProduction) -> None:
        """sort_condition : scalar"""
        p[0] = Eq(p[1])

    def p_sort_condition_comparison(self, p: yacc.YaccProduction) -> None:
        """sort_condition : EQ scalar
                          | EQEQ scalar
                          | LT scalar
                          | LTE scalar
                          | GT scalar
                          | GTE scalar"""
        p[0] = COMPARISONS[p[1]](p[2])

    def p_sort_condition_between(self, p: yacc.YaccProduction) -> None:
        """sort_condition : BETWEEN scalar AND scalar
                          | BETWEEN scalar scalar"""
        p[0] = Between(p[2], p[len(p) - 1])

    def p_sort_condition_begins_with(self, p: yacc.YaccProduction) -> None:
        """sort_condition : BEGINS_WITH scalar"""
        p[0] = BeginsWith(p[2])

    def p_scalar_number(self, p: yacc.YaccProduction) -> None:
        """scalar : NUMBER"""
        p[0] = Number(p[1])

    def p_scalar_signed_number(self, p: yacc.YaccProduction) -> None:
        """scalar : MINUS NUMBER
                  | PLUS NUMBER"""
        # "between 1 -5" lexes the second sign as an operator
        if p[2][0] in "+-":
            reject(f"Unexpected token '{p[2]}' at position {p.lexpos(2)}", p.lexpos(2))
        p[0] = Number(p[2] if p[1] == "+" else "-" + p[2])

    def p_scalar_string(self, p: yacc.YaccProduction) -> None:
        """scalar : STRING"""
        p[0] = String(p[1])

    def p_scalar_binary(self, p: yacc.YaccProduction) -> None:
        """scalar : BINARY"""
        p[0] = Binary(p[1])


def parse_sort_condition(text: str) -> SortKeyCondition:
    """Parse a sort key condition such as ``<= 1`` or ``between "a" and "b"``."""
    return SortKeyParser().parse(text)


def parse_bare_sort_condition(text: str) -> SortKeyCondition | None:
    """Read ``text`` with unquoted words as string operands.

    Returns None when ``text`` does not have the shape of a condition. Used as
    the non-strict fallback for string sort keys when the literal grammar rejects
    the input.
    """
    for pattern, form in _BARE_PATTERNS:
        m = pattern.fullmatch(text)
        if not m:
            continue
        if form == "comparison":
            return COMPARISONS[m.group(1)](String(m.group(2)))
        if form == "between":
            return Between(String(m.group(1)), String(m.group(2)))
        if form == "begins_with":
            return BeginsWith(String(m.group(1)))
        return Eq(String(m.group(1)))
    return None
