"""Lexer for the dynein literal and expression language."""

from __future__ import annotations

import ply.lex as lex

from dyexpr.errors import (
    UnbalancedDelimiterError,
    UnexpectedCharError,
    UnterminatedBinaryError,
    UnterminatedStringError,
)
from dyexpr.escapes import decode_base64, decode_binary, decode_string
from dyexpr.identifiers import invalid_identifier_offset

# Tokens after which a sign is an operator rather than part of a number
_OPERAND_END = frozenset({
    "IDENTIFIER",
    "NUMBER",
    "STRING",
    "BINARY",
    "TRUE",
    "FALSE",
    "NULL",
    "RBRACE",
    "RBRACKET",
    "RPAREN",
    "RSET",
})

_OPENERS = {"LBRACE": "{", "LBRACKET": "[", "LPAREN": "(", "LSET": "<<"}
_CLOSERS = {"RBRACE": "LBRACE", "RBRACKET": "LBRACKET", "RPAREN": "LPAREN", "RSET": "LSET"}


class ExpressionLexer:
    """Lexer for tokenizing dynein-format values, paths and expressions.

    With ``check_balance`` set, ``token()`` also verifies that brackets, braces,
    parentheses and set delimiters nest properly and raises
    UnbalancedDelimiterError at the first stray or unclosed delimiter.
    """

    # Reserved keywords, matched case-insensitively
    reserved = {
        "between": "BETWEEN",
        "and": "AND",
        "begins_with": "BEGINS_WITH",
        "true": "TRUE",
        "false": "FALSE",
        "null": "NULL",
    }

    # Token list
    tokens = [
        "IDENTIFIER",
        "STRING",
        "BINARY",
        "NUMBER",
        "LBRACE",
        "RBRACE",
        "LBRACKET",
        "RBRACKET",
        "LSET",
        "RSET",
        "LPAREN",
        "RPAREN",
        "COMMA",
        "DOT",
        "COLON",
        "EQ",
        "EQEQ",
        "LT",
        "LTE",
        "GT",
        "GTE",
        "PLUS",
        "MINUS",
        # Recognized only to report them as unsupported operators
        "STAR",
        "SLASH",
    ] + list(reserved.values())

    # Simple tokens; PLY sorts string-defined tokens longest-first
    t_LBRACE = r"\{"
    t_RBRACE = r"\}"
    t_LBRACKET = r"\["
    t_RBRACKET = r"\]"
    t_LSET = r"<<"
    t_RSET = r">>"
    t_LPAREN = r"\("
    t_RPAREN = r"\)"
    t_COMMA = r","
    t_DOT = r"\."
    t_COLON = r":"
    t_EQEQ = r"=="
    t_EQ = r"="
    t_LTE = r"<="
    t_LT = r"<"
    t_GTE = r">="
    t_GT = r">"
    t_PLUS = r"\+"
    t_MINUS = r"-"
    t_STAR = r"\*"
    t_SLASH = r"/"

    t_ignore = " \t\r"

    def __init__(self, check_balance: bool = False) -> None:
        self.lexer: lex.Lexer = None  # type: ignore
        self.check_balance = check_balance
        self._last: lex.LexToken | None = None
        self._open: list[lex.LexToken] = []

    # --- Binary literals (must precede IDENTIFIER so "b" is not taken as a name) ---

    def t_B64_BINARY(self, t: lex.LexToken) -> lex.LexToken:
        r"b64\"[^\"]*\"|b64'[^']*'"
        t.value = decode_base64(t.value[4:-1], t.lexpos)
        t.type = "BINARY"
        return t

    def t_BINARY(self, t: lex.LexToken) -> lex.LexToken:
        r"b\"(?:[^\"\\]|\\[\s\S])*\""
        t.lexer.lineno += t.value.count("\n")
        t.value = decode_binary(t.value[2:-1], t.lexpos + 2)
        return t

    def t_SINGLE_LINE_BINARY(self, t: lex.LexToken) -> lex.LexToken:
        r"b'(?:[^'\\\n]|\\.)*'"
        t.value = decode_binary(t.value[2:-1], t.lexpos + 2, allow_continuation=False)
        t.type = "BINARY"
        return t

    # --- Strings ---

    def t_STRING(self, t: lex.LexToken) -> lex.LexToken:
        r"\"(?:[^\"\\]|\\[\s\S])*\""
        t.lexer.lineno += t.value.count("\n")
        t.value = decode_string(t.value[1:-1], t.lexpos + 1)
        return t

    def t_SINGLE_QUOTED_STRING(self, t: lex.LexToken) -> lex.LexToken:
        r"'(?:[^'\\]|\\[\s\S])*'"
        # Taken as is: backslashes are kept, \' only stops the quote from closing
        t.lexer.lineno += t.value.count("\n")
        t.value = t.value[1:-1]
        t.type = "STRING"
        return t

    # --- Names and numbers ---

    def t_BACKTICK_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"`(?:[^`]|``)*`"
        # Always an IDENTIFIER, bypassing keyword lookup
        t.value = t.value[1:-1].replace("``", "`")
        t.type = "IDENTIFIER"
        return t

    def t_NUMBER(self, t: lex.LexToken) -> lex.LexToken:
        r"[+-]?[0-9]+(?:\.[0-9]*)?(?:[eE][+-]?[0-9]+)?"
        sign = t.value[0]
        if sign in "+-" and self._last is not None and self._last.type in _OPERAND_END:
            # "a -1" is a subtraction: emit the operator and rescan the digits
            t.type = "PLUS" if sign == "+" else "MINUS"
            t.value = sign
            t.lexer.lexpos = t.lexpos + 1
            return t
        if sign == "+":
            t.value = t.value[1:]
        return t

    def t_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"(?:[A-Za-z_]|[^\x00-\x7f\s])(?:[0-9A-Za-z_]|[^\x00-\x7f\s])*"
        bad = invalid_identifier_offset(t.value)
        if bad is not None:
            position = t.lexpos + bad
            raise UnexpectedCharError(
                f"Unexpected character '{t.value[bad]}' at position {position}", position
            )
        t.type = self.reserved.get(t.value.lower(), "IDENTIFIER")
        return t

    def t_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_error(self, t: lex.LexToken) -> None:
        ch = t.value[0]
        position = t.lexpos
        last = self._last
        if ch in "\"'":
            if (
                last is not None
                and last.type == "IDENTIFIER"
                and t.lexer.lexdata[last.lexpos:position] in ("b", "b64")
            ):
                raise UnterminatedBinaryError(
                    f"Unterminated binary literal at position {last.lexpos}", last.lexpos
                )
            raise UnterminatedStringError(
                f"Unterminated string literal at position {position}", position
            )
        if ch == "`":
            raise UnterminatedStringError(
                f"Unterminated quoted identifier at position {position}", position
            )
        raise UnexpectedCharError(f"Unexpected character '{ch}' at position {position}", position)

    # --- Lexer methods ---

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        kwargs.setdefault("errorlog", lex.NullLogger())
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Set the input string to tokenize."""
        if self.lexer is None:
            self.build()
        self._last = None
        self._open = []
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        tok = self.lexer.token()
        if self.check_balance:
            self._track(tok)
        if tok is not None:
            self._last = tok
        return tok

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens

    def _track(self, tok: lex.LexToken | None) -> None:
        if tok is None:
            if self._open:
                opener = self._open[-1]
                raise UnbalancedDelimiterError(
                    f"Unclosed '{_OPENERS[opener.type]}' at position {opener.lexpos}",
                    opener.lexpos,
                )
            return
        if tok.type in _OPENERS:
            self._open.append(tok)
        elif tok.type in _CLOSERS:
            if not self._open or self._open[-1].type != _CLOSERS[tok.type]:
                raise UnbalancedDelimiterError(
                    f"Unexpected '{tok.value}' at position {tok.lexpos}", tok.lexpos
                )
            self._open.pop()


def tokenize(text: str) -> list[lex.LexToken]:
    """Tokenize ``text`` with a fresh lexer."""
    lexer = ExpressionLexer()
    lexer.build()
    return lexer.tokenize(text)
