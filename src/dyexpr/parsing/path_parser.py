"""Parser for attribute paths."""

from __future__ import annotations

from dyexpr.nodes import AttributePath
from dyexpr.parsing.grammar import GrammarParser, PathGrammar


class PathParser(PathGrammar, GrammarParser):
    start = "path"


def parse_path(text: str) -> AttributePath:
    """Parse a path such as ``a.b[0]`` or ``map.`Do you have spaces?```."""
    return PathParser().parse(text)
