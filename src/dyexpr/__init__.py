"""dyexpr - the dynein literal language and DynamoDB expression compiler."""

from dyexpr.compiler import compile_remove, compile_set
from dyexpr.config import Config, QueryConfig, load_config, resolve_strict_mode
from dyexpr.errors import (
    AmbiguousCoercionError,
    ConfigurationError,
    DuplicateSetElementError,
    EmptySetError,
    ExpressionError,
    HeterogeneousSetError,
    InvalidBase64Error,
    InvalidEscapeError,
    InvalidNumberError,
    LexError,
    ParseError,
    SemanticError,
    SortKeyTypeMismatchError,
    UnbalancedDelimiterError,
    UnexpectedCharError,
    UnexpectedTokenError,
    UnterminatedBinaryError,
    UnterminatedStringError,
    ValueTypeError,
)
from dyexpr.inference import from_json, infer_sets
from dyexpr.keys import Key, KeySchema
from dyexpr.nodes import (
    Arithmetic,
    Attribute,
    AttributePath,
    BeginsWith,
    Between,
    Eq,
    Ge,
    Gt,
    IfNotExists,
    Index,
    Le,
    ListAppend,
    Literal,
    Lt,
    PathOperand,
    RemoveAction,
    SetAction,
    render_condition,
)
from dyexpr.parsing import (
    parse_item,
    parse_path,
    parse_remove,
    parse_set,
    parse_sort_condition,
    parse_value,
    tokenize,
)
from dyexpr.placeholders import CompiledExpression, PlaceholderTable
from dyexpr.requests import (
    atomic_counter,
    build_item,
    build_key,
    build_update_params,
    compile_key_condition,
    compile_projection,
)
from dyexpr.sort_key import (
    compile_sort_condition,
    parse_and_resolve_sort_condition,
    resolve_sort_condition,
)
from dyexpr.values import (
    AttributeType,
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
    from_wire,
    render,
    to_wire,
)

__all__ = [
    # Parsing
    "tokenize",
    "parse_value",
    "parse_item",
    "parse_path",
    "parse_set",
    "parse_remove",
    "parse_sort_condition",
    # Compilation
    "compile_set",
    "compile_remove",
    "resolve_sort_condition",
    "parse_and_resolve_sort_condition",
    "compile_sort_condition",
    "render_condition",
    "PlaceholderTable",
    "CompiledExpression",
    # Values
    "AttributeType",
    "Null",
    "Bool",
    "Number",
    "String",
    "Binary",
    "List",
    "Map",
    "NumberSet",
    "StringSet",
    "BinarySet",
    "render",
    "to_wire",
    "from_wire",
    "infer_sets",
    "from_json",
    # AST
    "Attribute",
    "Index",
    "AttributePath",
    "Literal",
    "PathOperand",
    "Arithmetic",
    "ListAppend",
    "IfNotExists",
    "SetAction",
    "RemoveAction",
    "Eq",
    "Lt",
    "Le",
    "Gt",
    "Ge",
    "Between",
    "BeginsWith",
    # Keys and requests
    "Key",
    "KeySchema",
    "build_key",
    "build_item",
    "compile_key_condition",
    "build_update_params",
    "atomic_counter",
    "compile_projection",
    # Configuration
    "Config",
    "QueryConfig",
    "load_config",
    "resolve_strict_mode",
    # Errors
    "ExpressionError",
    "LexError",
    "UnterminatedStringError",
    "UnterminatedBinaryError",
    "InvalidEscapeError",
    "InvalidBase64Error",
    "UnexpectedCharError",
    "ParseError",
    "UnexpectedTokenError",
    "UnbalancedDelimiterError",
    "ValueTypeError",
    "HeterogeneousSetError",
    "EmptySetError",
    "DuplicateSetElementError",
    "InvalidNumberError",
    "SortKeyTypeMismatchError",
    "AmbiguousCoercionError",
    "SemanticError",
    "ConfigurationError",
]

__version__ = "0.1.0"
