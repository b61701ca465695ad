"""Unicode identifier classification (UAX #31 ID_Start / ID_Continue)."""

from __future__ import annotations

import unicodedata

_ID_START_CATEGORIES = frozenset({"Lu", "Ll", "Lt", "Lm", "Lo", "Nl"})
_ID_CONTINUE_CATEGORIES = _ID_START_CATEGORIES | {"Mn", "Mc", "Nd", "Pc"}

# Other_ID_Start and Other_ID_Continue from PropList.txt
_OTHER_ID_START = frozenset("\u1885\u1886\u2118\u212e\u309b\u309c")
_OTHER_ID_CONTINUE = frozenset(
    "\u00b7\u0387\u1369\u136a\u136b\u136c\u136d\u136e\u136f\u1370\u1371"
    "\u19da\u200c\u200d\u30fb\uff65"
)

# Words that must be backtick-quoted to be used as attribute names
QUOTED_KEYWORDS = frozenset({"true", "false", "null"})


def is_id_start(ch: str) -> bool:
    return ch in _OTHER_ID_START or unicodedata.category(ch) in _ID_START_CATEGORIES


def is_id_continue(ch: str) -> bool:
    return (
        ch in _OTHER_ID_START
        or ch in _OTHER_ID_CONTINUE
        or unicodedata.category(ch) in _ID_CONTINUE_CATEGORIES
    )


def invalid_identifier_offset(text: str) -> int | None:
    """Return the index of the first character that breaks the identifier rules.

    Returns None when ``text`` is a valid unquoted identifier.
    """
    if not text:
        return 0
    if not is_id_start(text[0]):
        return 0
    for i, ch in enumerate(text[1:], start=1):
        if not is_id_continue(ch):
            return i
    return None


def is_identifier(text: str) -> bool:
    return invalid_identifier_offset(text) is None


def quote_name(name: str) -> str:
    """Return ``name`` as a path segment, backtick-quoting it when needed."""
    if is_identifier(name) and name.lower() not in QUOTED_KEYWORDS:
        return name
    return "`" + name.replace("`", "``") + "`"
