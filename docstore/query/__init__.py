"""
Condition matching over schema-less records.
"""

from .engine import (
    LIMIT_KEY,
    OPERATORS,
    check_operator,
    evaluate,
    field_entries,
    get_limit,
    matches,
    strict_equal,
)

__all__ = [
    "LIMIT_KEY",
    "OPERATORS",
    "check_operator",
    "evaluate",
    "field_entries",
    "get_limit",
    "matches",
    "strict_equal",
]
