"""Parser for ``--set`` and ``--remove`` update clauses.

SET clauses are comma separated assignments whose right hand side is a
literal, a path, ``operand + operand`` / ``operand - operand``, or one of the
functions ``list_append(a, b)`` and ``if_not_exists(path, value)``::

    pi = pi + 10, tags = list_append(tags, ["new"]), n = if_not_exists(n, 0) + 1

REMOVE clauses are comma separated paths::

    Category, Rank, items[0]
"""

from __future__ import annotations

import ply.yacc as yacc

from dyexpr.errors import ValueTypeError
from dyexpr.nodes import (
    Arithmetic,
    IfNotExists,
    ListAppend,
    Literal,
    PathOperand,
    RemoveAction,
    SetAction,
)
from dyexpr.parsing.grammar import GrammarParser, LiteralGrammar, PathGrammar, reject
from dyexpr.values import Number, kind_of

_FUNCTIONS = ("list_append", "if_not_exists")


class UpdateGrammar(LiteralGrammar, PathGrammar):
    """Rules for SET and REMOVE action lists."""

    def p_set_actions_single(self, p: yacc.YaccProduction) -> None:
        """set_actions : set_action"""
        p[0] = [p[1]]

    def p_set_actions_multiple(self, p: yacc.YaccProduction) -> None:
        """set_actions : set_actions COMMA set_action"""
        p[0] = p[1] + [p[3]]

    def p_set_action(self, p: yacc.YaccProduction) -> None:
        """set_action : path EQ rhs"""
        p[0] = SetAction(path=p[1], rhs=p[3])

    def p_rhs_operand(self, p: yacc.YaccProduction) -> None:
        """rhs : operand"""
        p[0] = p[1]

    def p_rhs_arithmetic(self, p: yacc.YaccProduction) -> None:
        """rhs : operand PLUS operand
               | operand MINUS operand"""
        for index in (1, 3):
            operand = p[index]
            if isinstance(operand, Literal) and not isinstance(operand.value, Number):
                raise ValueTypeError(
                    f"Operand of '{p[2]}' must be a number or a path, "
                    f"but got {kind_of(operand.value)}"
                )
        p[0] = Arithmetic(op=p[2], lhs=p[1], rhs=p[3])

    def p_operand_path(self, p: yacc.YaccProduction) -> None:
        """operand : path"""
        p[0] = PathOperand(p[1])

    def p_operand_literal(self, p: yacc.YaccProduction) -> None:
        """operand : literal"""
        p[0] = Literal(p[1])

    def p_operand_function(self, p: yacc.YaccProduction) -> None:
        """operand : IDENTIFIER LPAREN rhs COMMA rhs RPAREN"""
        name = p[1]
        if name not in _FUNCTIONS:
            reject(
                f"Unsupported function '{name}' at position {p.lexpos(1)}; "
                f"expected one of {', '.join(_FUNCTIONS)}",
                p.lexpos(1),
            )
        if name == "list_append":
            p[0] = ListAppend(lhs=p[3], rhs=p[5])
            return
        if not isinstance(p[3], PathOperand):
            reject(
                f"First argument of if_not_exists must be a path (position {p.lexpos(1)})",
                p.lexpos(1),
            )
        p[0] = IfNotExists(path=p[3].path, rhs=p[5])

    def p_remove_actions_single(self, p: yacc.YaccProduction) -> None:
        """remove_actions : path"""
        p[0] = [RemoveAction(p[1])]

    def p_remove_actions_multiple(self, p: yacc.YaccProduction) -> None:
        """remove_actions : remove_actions COMMA path"""
        p[0] = p[1] + [RemoveAction(p[3])]


class SetParser(UpdateGrammar, GrammarParser):
    start = "set_actions"


class RemoveParser(UpdateGrammar, GrammarParser):
    start = "remove_actions"


def parse_set(text: str) -> list[SetAction]:
    """Parse a SET clause list such as ``pi = pi + 10, name = "x"``."""
    return SetParser().parse(text)


def parse_remove(text: str) -> list[RemoveAction]:
    """Parse a REMOVE clause list such as ``Category, Rank``."""
    return RemoveParser().parse(text)
