"""Property-based tests for parsing, rendering and compilation."""

import pytest
from hypothesis import given, settings

from dyexpr.compiler import compile_remove, compile_set
from dyexpr.errors import EmptySetError, HeterogeneousSetError, SortKeyTypeMismatchError
from dyexpr.keys import Key
from dyexpr.nodes import BeginsWith, Le, path_of
from dyexpr.parsing.path_parser import parse_path
from dyexpr.parsing.sort_key_parser import parse_sort_condition
from dyexpr.parsing.update_parser import parse_remove, parse_set
from dyexpr.parsing.value_parser import parse_value
from dyexpr.sort_key import parse_and_resolve_sort_condition, resolve_sort_condition
from dyexpr.values import AttributeType, Map, Number, String, render

from .strategies import (
    attribute_name_strategy,
    identifier_strategy,
    number_text_strategy,
    value_strategy,
)

STRING_KEY = Key("sk", AttributeType.S)


class TestValueRoundtrip:
    """Rendering then parsing gives back the value."""

    @settings(max_examples=50, deadline=None)
    @given(value_strategy)
    def test_roundtrip(self, value):
        """parse_value(render(value)) == value for any value."""
        assert parse_value(render(value)) == value

    @settings(max_examples=50, deadline=None)
    @given(value_strategy)
    def test_parse_is_deterministic(self, value):
        """Parsing the same text twice gives equal values."""
        text = render(value)

        assert parse_value(text) == parse_value(text)


class TestPathRoundtrip:
    """Rendered paths parse back to the same segments."""

    @settings(max_examples=50, deadline=None)
    @given(attribute_name_strategy, attribute_name_strategy)
    def test_any_name(self, first, second):
        """Names are quoted exactly when needed."""
        path = path_of(first, 0, second)

        assert parse_path(str(path)) == path


class TestPlaceholderProperties:
    """Placeholder allocation invariants."""

    @settings(deadline=None)
    @given(identifier_strategy, number_text_strategy)
    def test_same_path_one_placeholder(self, name, number):
        """A path used twice gets one name placeholder."""
        compiled = compile_set(parse_set(f"{name} = {name} + {number}"))

        assert compiled.expression == "SET #p0 = #p0 + :v0"
        assert compiled.names == {"#p0": name}

    @settings(deadline=None)
    @given(identifier_strategy, identifier_strategy)
    def test_remove_names(self, first, second):
        """Each distinct name is allocated once, in order."""
        compiled = compile_remove(parse_remove(f"{first}, {second}, {first}"))

        assert list(compiled.names.values()) == list(dict.fromkeys([first, second]))

    @settings(deadline=None)
    @given(identifier_strategy, value_strategy)
    def test_compile_is_deterministic(self, name, value):
        """Compiling the same text twice gives identical output."""
        text = f"{name} = {render(value)}"

        assert compile_set(parse_set(text)) == compile_set(parse_set(text))


class TestSortKeyPolicy:
    """Strict and non-strict resolution against a string sort key."""

    @settings(deadline=None)
    @given(number_text_strategy)
    def test_strict_rejects_numbers(self, number):
        """Strict mode refuses number literals for string keys."""
        condition = parse_sort_condition(f"<= {number}")

        with pytest.raises(SortKeyTypeMismatchError):
            resolve_sort_condition(condition, STRING_KEY, strict=True)

    @settings(deadline=None)
    @given(number_text_strategy)
    def test_non_strict_keeps_text(self, number):
        """Non-strict mode reads the number's text as a string."""
        condition = parse_sort_condition(f"<= {number}")

        assert resolve_sort_condition(condition, STRING_KEY) == Le(String(number))


class TestSetHomogeneity:
    """Set literals contain one kind of scalar."""

    def test_mixed_set(self):
        """<<1, "a">> is rejected."""
        with pytest.raises(HeterogeneousSetError):
            parse_value('<<1, "a">>')

    def test_empty_set(self):
        """<<>> is rejected."""
        with pytest.raises(EmptySetError):
            parse_value("<<>>")


class TestScenarios:
    """End-to-end examples."""

    def test_item_body(self):
        """A JSON object parses to a map."""
        assert parse_value('{"a": 9, "b": "str"}') == Map((
            ("a", Number("9")),
            ("b", String("str")),
        ))

    def test_set_increment(self):
        """An increment compiles to name and value placeholders."""
        compiled = compile_set(parse_set("pi = pi + 10"))

        assert compiled.expression == "SET #p0 = #p0 + :v0"
        assert compiled.names == {"#p0": "pi"}
        assert compiled.values == {":v0": {"N": "10"}}

    def test_remove(self):
        """A remove list compiles to one placeholder per name."""
        compiled = compile_remove(parse_remove("Category, Rank"))

        assert compiled.expression == "REMOVE #p0, #p1"
        assert compiled.names == {"#p0": "Category", "#p1": "Rank"}

    def test_begins_with(self):
        """begins_with resolves the same way in both modes."""
        for strict in (True, False):
            condition = parse_and_resolve_sort_condition('begins_with "0"', STRING_KEY, strict)

            assert condition == BeginsWith(String("0"))

    def test_backtick_segment(self):
        """A backtick-quoted segment is taken literally."""
        actions = parse_set('map.`Do you have spaces?` = "Allowed"')

        assert actions[0].path == path_of("map", "Do you have spaces?")
