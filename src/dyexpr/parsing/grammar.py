"""Shared PLY grammar rules for literals and attribute paths.

Each parser class combines the rule mixins it needs with ``GrammarParser``,
which owns the lexer, builds the LALR tables in memory and reports errors.
"""

from __future__ import annotations

import re
from typing import Any, NoReturn

import ply.yacc as yacc

from dyexpr.errors import SemanticError, UnexpectedTokenError
from dyexpr.nodes import Attribute, AttributePath, Index
from dyexpr.parsing.lexer import ExpressionLexer
from dyexpr.values import Binary, Bool, List, Map, Null, Number, String, make_set

_INDEX_RE = re.compile(r"[0-9]+")

_UNSUPPORTED_OPERATORS = {"STAR": "*", "SLASH": "/"}


class RuleRejected(Exception):
    """Carries an error out of a grammar action.

    PLY treats a SyntaxError raised inside a rule as a request for error
    recovery, so rules raise this instead and ``GrammarParser.parse`` unwraps it.
    """

    def __init__(self, error: Exception) -> None:
        super().__init__(str(error))
        self.error = error


def reject(message: str, position: int) -> NoReturn:
    """Abort the parse from inside a rule with an UnexpectedTokenError."""
    raise RuleRejected(UnexpectedTokenError(message, position))


class GrammarParser:
    """Base class for the PLY parsers; subclasses set ``start``."""

    tokens = ExpressionLexer.tokens
    start: str = ""

    def __init__(self) -> None:
        self.lexer = ExpressionLexer(check_balance=True)
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def build(self, **kwargs: Any) -> None:
        """Build the parser tables in memory."""
        kwargs.setdefault("debug", False)
        kwargs.setdefault("write_tables", False)
        kwargs.setdefault("errorlog", yacc.NullLogger())
        self.parser = yacc.yacc(module=self, start=self.start, **kwargs)

    def parse(self, text: str) -> Any:
        """Parse ``text`` from the start symbol and return the AST."""
        if self.parser is None:
            self.build()
        try:
            return self.parser.parse(text, lexer=self.lexer)
        except RuleRejected as e:
            raise e.error from None

    def p_error(self, p: yacc.YaccProduction) -> None:
        if not p:
            raise UnexpectedTokenError("Unexpected end of input")
        if p.type in _UNSUPPORTED_OPERATORS:
            raise UnexpectedTokenError(
                f"Unsupported operator '{_UNSUPPORTED_OPERATORS[p.type]}' at position {p.lexpos}",
                p.lexpos,
            )
        raise UnexpectedTokenError(f"Unexpected token '{_describe(p)}' at position {p.lexpos}", p.lexpos)


def _describe(tok: Any) -> str:
    if tok.type in ("STRING", "IDENTIFIER"):
        return str(tok.value)
    if tok.type == "BINARY":
        return "binary literal"
    return str(tok.value)


class LiteralGrammar:
    """Rules for dynein-format literal values."""

    def p_literal_null(self, p: yacc.YaccProduction) -> None:
        """literal : NULL"""
        p[0] = Null()

    def p_literal_bool(self, p: yacc.YaccProduction) -> None:
        """literal : TRUE
                   | FALSE"""
        p[0] = Bool(p.slice[1].type == "TRUE")

    def p_literal_number(self, p: yacc.YaccProduction) -> None:
        """literal : NUMBER"""
        p[0] = Number(p[1])

    def p_literal_string(self, p: yacc.YaccProduction) -> None:
        """literal : STRING"""
        p[0] = String(p[1])

    def p_literal_binary(self, p: yacc.YaccProduction) -> None:
        """literal : BINARY"""
        p[0] = Binary(p[1])

    def p_literal_document(self, p: yacc.YaccProduction) -> None:
        """literal : list
                   | map
                   | set"""
        p[0] = p[1]

    def p_list_empty(self, p: yacc.YaccProduction) -> None:
        """list : LBRACKET RBRACKET"""
        p[0] = List(())

    def p_list(self, p: yacc.YaccProduction) -> None:
        """list : LBRACKET literal_list RBRACKET"""
        p[0] = List(tuple(p[2]))

    def p_literal_list_single(self, p: yacc.YaccProduction) -> None:
        """literal_list : literal"""
        p[0] = [p[1]]

    def p_literal_list_multiple(self, p: yacc.YaccProduction) -> None:
        """literal_list : literal_list COMMA literal"""
        p[0] = p[1] + [p[3]]

    def p_map_empty(self, p: yacc.YaccProduction) -> None:
        """map : LBRACE RBRACE"""
        p[0] = Map(())

    def p_map(self, p: yacc.YaccProduction) -> None:
        """map : LBRACE entry_list RBRACE"""
        seen: set[str] = set()
        for key, _value in p[2]:
            if key in seen:
                raise SemanticError(
                    f"Duplicate key '{key}' in map at position {p.lexpos(1)}", p.lexpos(1)
                )
            seen.add(key)
        p[0] = Map(tuple(p[2]))

    def p_entry_list_single(self, p: yacc.YaccProduction) -> None:
        """entry_list : entry"""
        p[0] = [p[1]]

    def p_entry_list_multiple(self, p: yacc.YaccProduction) -> None:
        """entry_list : entry_list COMMA entry"""
        p[0] = p[1] + [p[3]]

    def p_entry(self, p: yacc.YaccProduction) -> None:
        """entry : map_key COLON literal"""
        p[0] = (p[1], p[3])

    def p_map_key(self, p: yacc.YaccProduction) -> None:
        """map_key : STRING
                   | IDENTIFIER
                   | TRUE
                   | FALSE
                   | NULL
                   | BETWEEN
                   | AND
                   | BEGINS_WITH"""
        p[0] = p[1]

    def p_set(self, p: yacc.YaccProduction) -> None:
        """set : LSET literal_list RSET"""
        p[0] = make_set(p[2])

    def p_set_empty(self, p: yacc.YaccProduction) -> None:
        """set : LSET RSET"""
        # make_set raises EmptySetError
        p[0] = make_set(())


class PathGrammar:
    """Rules for attribute paths such as ``a.b[0].c``."""

    def p_path_name(self, p: yacc.YaccProduction) -> None:
        """path : name"""
        p[0] = AttributePath((Attribute(p[1]),))

    def p_path_member(self, p: yacc.YaccProduction) -> None:
        """path : path DOT name"""
        p[0] = AttributePath(p[1].segments + (Attribute(p[3]),))

    def p_path_index(self, p: yacc.YaccProduction) -> None:
        """path : path LBRACKET NUMBER RBRACKET"""
        if not _INDEX_RE.fullmatch(p[3]):
            reject(
                f"List index must be a non-negative integer, got '{p[3]}' at position {p.lexpos(3)}",
                p.lexpos(3),
            )
        p[0] = AttributePath(p[1].segments + (Index(int(p[3])),))

    def p_name(self, p: yacc.YaccProduction) -> None:
        """name : IDENTIFIER
                | BETWEEN
                | AND
                | BEGINS_WITH"""
        p[0] = p[1]
