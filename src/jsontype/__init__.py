"""jsontype — structural and type matching for decoded JSON data.

All public types are exported from this module for flat imports:

    from jsontype import JsonType, FilterRegistry, contains
"""

__version__ = "0.1.0"

# Containment
from jsontype._contains import ContainmentMatcher, contains, is_equal_value

# Grammar
from jsontype._expression import (
    MAX_EXPRESSION_LENGTH,
    Alternative,
    ExpressionError,
    Filter,
    MatcherError,
    PatternTooLongError,
    TypeExpression,
    parse_filter,
    parse_type_expression,
)

# Built-in filters
from jsontype._filters import (
    MAX_REGEX_PATTERN_LENGTH,
    ComparisonFilter,
    DateFilter,
    EmailFilter,
    EmptyFilter,
    ExactFilter,
    InvalidFilterError,
    RegexFilter,
    UrlFilter,
    compile_builtin,
)

# Type matching
from jsontype._json_type import JsonType, evaluate_filter, match_filter, matches

# Registry — see jsontype._registry for details
from jsontype._registry import CustomFilter, FilterRegistry

# Specifications — see jsontype._spec for details
from jsontype._spec import (
    MAX_DEPTH,
    DepthExceededError,
    Specification,
    SpecificationError,
    load_specification,
    parse_specification,
)
from jsontype._types import (
    FilterPredicate,
    TypeTag,
    Value,
    export_literal,
    runtime_type_name,
    stringify,
)

__all__ = [
    # Types
    "Value",
    "TypeTag",
    "FilterPredicate",
    "runtime_type_name",
    "stringify",
    "export_literal",
    # Type matching
    "JsonType",
    "matches",
    "match_filter",
    "evaluate_filter",
    # Grammar
    "TypeExpression",
    "Alternative",
    "Filter",
    "parse_type_expression",
    "parse_filter",
    "MAX_EXPRESSION_LENGTH",
    # Built-in filters
    "ExactFilter",
    "EmptyFilter",
    "DateFilter",
    "EmailFilter",
    "UrlFilter",
    "ComparisonFilter",
    "RegexFilter",
    "compile_builtin",
    "MAX_REGEX_PATTERN_LENGTH",
    # Registry
    "FilterRegistry",
    "CustomFilter",
    # Specifications
    "Specification",
    "parse_specification",
    "load_specification",
    "MAX_DEPTH",
    # Containment
    "ContainmentMatcher",
    "contains",
    "is_equal_value",
    # Errors
    "MatcherError",
    "ExpressionError",
    "PatternTooLongError",
    "InvalidFilterError",
    "SpecificationError",
    "DepthExceededError",
]
