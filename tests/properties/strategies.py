"""Hypothesis strategies for dynein values and expressions."""

from hypothesis import strategies as st

from dyexpr.values import (
    Binary,
    BinarySet,
    Bool,
    List,
    Map,
    Null,
    Number,
    NumberSet,
    String,
    StringSet,
)

_KEYWORDS = {"between", "and", "begins_with", "true", "false", "null"}

# Number texts the lexer accepts as one token
number_text_strategy = st.one_of(
    st.integers(min_value=-(10**20), max_value=10**20).map(str),
    st.decimals(
        min_value=-(10**6), max_value=10**6, places=3, allow_nan=False, allow_infinity=False
    ).map(str),
)

number_strategy = number_text_strategy.map(Number)
string_strategy = st.text(max_size=20).map(String)
binary_strategy = st.binary(max_size=16).map(Binary)

scalar_strategy = st.one_of(
    st.just(Null()),
    st.booleans().map(Bool),
    number_strategy,
    string_strategy,
    binary_strategy,
)

set_strategy = st.one_of(
    st.sets(st.integers(min_value=-(10**20), max_value=10**20), min_size=1, max_size=5).map(
        lambda ns: NumberSet(tuple(Number(str(n)) for n in ns))
    ),
    st.sets(st.text(max_size=10), min_size=1, max_size=5).map(
        lambda ss: StringSet(tuple(String(s) for s in ss))
    ),
    st.sets(st.binary(max_size=8), min_size=1, max_size=5).map(
        lambda bs: BinarySet(tuple(Binary(b) for b in bs))
    ),
)

# Value strategy (recursive, bounded size)
value_strategy = st.recursive(
    st.one_of(scalar_strategy, set_strategy),
    lambda children: st.one_of(
        st.lists(children, max_size=4).map(lambda items: List(tuple(items))),
        st.dictionaries(st.text(max_size=10), children, max_size=4).map(
            lambda d: Map(tuple(d.items()))
        ),
    ),
    max_leaves=20,
)

# Attribute names usable without quoting
identifier_strategy = st.from_regex(r"[A-Za-z][A-Za-z0-9_]{0,8}", fullmatch=True).filter(
    lambda s: s.lower() not in _KEYWORDS
)

# Any attribute name; quoting is up to the renderer
attribute_name_strategy = st.text(
    alphabet=st.characters(blacklist_categories=("Cs",)), min_size=1, max_size=12
)
