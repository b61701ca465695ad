"""Tests for sort key condition parsing, resolution and compilation."""

import pytest

from dyexpr.errors import (
    AmbiguousCoercionError,
    LexError,
    SemanticError,
    SortKeyTypeMismatchError,
    UnexpectedTokenError,
)
from dyexpr.keys import Key
from dyexpr.nodes import BeginsWith, Between, Eq, Ge, Gt, Le, Lt, render_condition
from dyexpr.parsing.sort_key_parser import parse_bare_sort_condition, parse_sort_condition
from dyexpr.placeholders import PlaceholderTable
from dyexpr.sort_key import (
    coerce_value,
    compile_sort_condition,
    parse_and_resolve_sort_condition,
    resolve_sort_condition,
)
from dyexpr.values import AttributeType, Binary, Number, String

STRING_KEY = Key("sk", AttributeType.S)
NUMBER_KEY = Key("ts", AttributeType.N)
BINARY_KEY = Key("raw", AttributeType.B)


class TestSortKeyParser:
    """Tests for parsing sort key conditions."""

    def test_comparisons(self):
        """Test each comparison operator."""
        assert parse_sort_condition("= 1") == Eq(Number("1"))
        assert parse_sort_condition("== 1") == Eq(Number("1"))
        assert parse_sort_condition("< 1") == Lt(Number("1"))
        assert parse_sort_condition("<= 1") == Le(Number("1"))
        assert parse_sort_condition("> 1") == Gt(Number("1"))
        assert parse_sort_condition(">= -1") == Ge(Number("-1"))

    def test_bare_value_is_equality(self):
        """Test that a value on its own means equality."""
        assert parse_sort_condition('"abc"') == Eq(String("abc"))

    def test_between(self):
        """Test BETWEEN with and without AND."""
        expected = Between(Number("1"), Number("5"))

        assert parse_sort_condition("between 1 and 5") == expected
        assert parse_sort_condition("BETWEEN 1 5") == expected

    def test_between_negative_bounds(self):
        """Test that a signed upper bound without AND is read as a number."""
        assert parse_sort_condition("between -10 -5") == Between(Number("-10"), Number("-5"))
        assert parse_sort_condition("between 1 -5") == Between(Number("1"), Number("-5"))
        assert parse_sort_condition("between 1 +5") == Between(Number("1"), Number("5"))

    def test_between_double_sign(self):
        """Test that a bound cannot carry two signs."""
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_sort_condition("between 1 - -5")

        assert exc_info.value.position == 12

    def test_begins_with(self):
        """Test begins_with with a string."""
        assert parse_sort_condition('begins_with "0"') == BeginsWith(String("0"))

    def test_binary_operand(self):
        """Test a binary literal operand."""
        assert parse_sort_condition('>= b64"AQ=="') == Ge(Binary(b"\x01"))

    def test_documents_rejected(self):
        """Test that lists are not sort key values."""
        with pytest.raises(UnexpectedTokenError):
            parse_sort_condition("< [1]")

    def test_incomplete_between(self):
        """Test BETWEEN with one operand."""
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_sort_condition("between 1")

        assert str(exc_info.value) == "Unexpected end of input"

    def test_bare_words(self):
        """Test the bare word reading used for string keys."""
        assert parse_bare_sort_condition("abc") == Eq(String("abc"))
        assert parse_bare_sort_condition("<= abc-1") == Le(String("abc-1"))
        assert parse_bare_sort_condition("begins_with id#12") == BeginsWith(String("id#12"))
        assert parse_bare_sort_condition("between a and b") == Between(String("a"), String("b"))
        assert parse_bare_sort_condition("Between a b") == Between(String("a"), String("b"))
        assert parse_bare_sort_condition("a b c") is None


class TestCoercion:
    """Tests for non-strict literal coercion."""

    def test_same_kind_unchanged(self):
        """Test that matching literals are returned as they are."""
        assert coerce_value(String("a"), AttributeType.S) == String("a")

    def test_number_to_string(self):
        """Test that numbers keep their text as strings."""
        assert coerce_value(Number("1.50"), AttributeType.S) == String("1.50")

    def test_string_to_number(self):
        """Test that numeric strings become numbers."""
        assert coerce_value(String("12"), AttributeType.N) == Number("12")
        assert coerce_value(String("+3"), AttributeType.N) == Number("3")

    def test_hex_string_to_binary(self):
        """Test that hex strings become bytes."""
        assert coerce_value(String("0aFF"), AttributeType.B) == Binary(b"\x0a\xff")

    def test_ambiguous(self):
        """Test readings that cannot be coerced."""
        with pytest.raises(AmbiguousCoercionError):
            coerce_value(String("abc"), AttributeType.N)
        with pytest.raises(AmbiguousCoercionError):
            coerce_value(String("abc"), AttributeType.B)
        with pytest.raises(AmbiguousCoercionError):
            coerce_value(Number("1"), AttributeType.B)


class TestResolve:
    """Tests for the strict and non-strict policies."""

    def test_strict_rejects_number_for_string_key(self):
        """Test strict rejection with a suggestion."""
        with pytest.raises(SortKeyTypeMismatchError) as exc_info:
            resolve_sort_condition(parse_sort_condition("<= 1"), STRING_KEY, strict=True)

        error = exc_info.value
        assert str(error) == (
            "Invalid type detected. Expected type is String (S), "
            "but actual type is Number (N).\n"
            "Did you intend '<= \"1\"'?"
        )
        assert error.suggestion == '<= "1"'
        assert isinstance(error, TypeError)

    def test_strict_without_suggestion(self):
        """Test strict rejection when no coercion exists."""
        with pytest.raises(SortKeyTypeMismatchError) as exc_info:
            resolve_sort_condition(Eq(String("abc")), NUMBER_KEY, strict=True)

        assert exc_info.value.suggestion is None
        assert "Did you intend" not in str(exc_info.value)

    def test_strict_accepts_matching(self):
        """Test that matching literals pass strict mode unchanged."""
        condition = Between(Number("1"), Number("2"))

        assert resolve_sort_condition(condition, NUMBER_KEY, strict=True) == condition

    def test_non_strict_coerces(self):
        """Test non-strict coercion of a number to a string key."""
        resolved = resolve_sort_condition(parse_sort_condition("<= 1"), STRING_KEY)

        assert resolved == Le(String("1"))

    def test_non_strict_between(self):
        """Test coercion of each BETWEEN operand."""
        resolved = resolve_sort_condition(
            parse_sort_condition('between 1 and "5"'), NUMBER_KEY
        )

        assert resolved == Between(Number("1"), Number("5"))

    def test_negative_between_for_number_key(self):
        """Test resolving BETWEEN with a negative bound and no AND."""
        condition = parse_and_resolve_sort_condition("between -10 -5", NUMBER_KEY, strict=True)

        assert condition == Between(Number("-10"), Number("-5"))

    def test_non_strict_binary(self):
        """Test coercion of a hex string for a binary key."""
        resolved = resolve_sort_condition(parse_sort_condition('= "00ff"'), BINARY_KEY)

        assert resolved == Eq(Binary(b"\x00\xff"))

    def test_non_strict_ambiguous(self):
        """Test that non-strict mode still rejects meaningless readings."""
        with pytest.raises(AmbiguousCoercionError):
            resolve_sort_condition(parse_sort_condition('= "abc"'), NUMBER_KEY)

    def test_begins_with_number_key(self):
        """Test that begins_with needs a string or binary key."""
        with pytest.raises(SemanticError):
            resolve_sort_condition(BeginsWith(Number("1")), NUMBER_KEY)

    def test_begins_with_string_key_either_mode(self):
        """Test begins_with against a string key in both modes."""
        for strict in (True, False):
            resolved = parse_and_resolve_sort_condition('begins_with "0"', STRING_KEY, strict)

            assert resolved == BeginsWith(String("0"))


class TestBareWordFallback:
    """Tests for reading unquoted words for string keys."""

    def test_non_strict_reads_bare_words(self):
        """Test that non-strict mode accepts unquoted strings."""
        assert parse_and_resolve_sort_condition("abc", STRING_KEY) == Eq(String("abc"))
        assert parse_and_resolve_sort_condition("begins_with id#12", STRING_KEY) == (
            BeginsWith(String("id#12"))
        )
        assert parse_and_resolve_sort_condition("between a b", STRING_KEY) == (
            Between(String("a"), String("b"))
        )

    def test_strict_suggests_bare_reading(self):
        """Test that strict mode names the bare reading in its error."""
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_and_resolve_sort_condition("abc", STRING_KEY, strict=True)

        assert str(exc_info.value) == (
            "Unexpected token 'abc' at position 0\nDid you intend '= \"abc\"'?"
        )
        assert exc_info.value.position == 0

    def test_strict_suggests_for_lex_errors(self):
        """Test the suggestion when the input does not even lex."""
        with pytest.raises(LexError) as exc_info:
            parse_and_resolve_sort_condition("begins_with #a", STRING_KEY, strict=True)

        assert "Did you intend 'begins_with \"#a\"'?" in str(exc_info.value)

    def test_no_fallback_for_number_key(self):
        """Test that bare words are only read for string keys."""
        with pytest.raises(UnexpectedTokenError):
            parse_and_resolve_sort_condition("abc", NUMBER_KEY)


class TestCompileSortCondition:
    """Tests for sort key clause compilation."""

    def test_comparison(self):
        """Test a comparison clause."""
        table = PlaceholderTable()

        clause = compile_sort_condition(Le(Number("9")), NUMBER_KEY, table)

        assert clause == "#p0 <= :v0"
        assert table.names == {"#p0": "ts"}
        assert table.values == {":v0": {"N": "9"}}

    def test_between(self):
        """Test a BETWEEN clause."""
        table = PlaceholderTable()

        clause = compile_sort_condition(Between(Number("1"), Number("5")), NUMBER_KEY, table)

        assert clause == "#p0 BETWEEN :v0 AND :v1"

    def test_between_same_bounds(self):
        """Test that equal bounds share a placeholder."""
        table = PlaceholderTable()

        clause = compile_sort_condition(Between(Number("1"), Number("1")), NUMBER_KEY, table)

        assert clause == "#p0 BETWEEN :v0 AND :v0"

    def test_begins_with(self):
        """Test a begins_with clause."""
        table = PlaceholderTable()

        clause = compile_sort_condition(BeginsWith(String("0")), STRING_KEY, table)

        assert clause == "begins_with(#p0, :v0)"
        assert table.values == {":v0": {"S": "0"}}


class TestRenderCondition:
    """Tests for rendering conditions as text."""

    def test_render(self):
        """Test each condition form."""
        assert render_condition(Eq(String("1"))) == '= "1"'
        assert render_condition(Between(Number("1"), Number("2"))) == "between 1 and 2"
        assert render_condition(BeginsWith(String("a"))) == 'begins_with "a"'
