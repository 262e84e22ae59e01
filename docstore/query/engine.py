"""
Query engine - match records against condition mappings.

A condition maps field names to either a plain value (equality) or an
operator mapping such as {"$gte": 28}. All field entries, and all
operators under one field, must hold for a record to match. The reserved
"limit" key caps the number of results and is never treated as a field.

Malformed conditions never raise; they simply match nothing.
"""

from __future__ import annotations

import operator
from collections.abc import Mapping
from typing import Any, Callable, Iterable, Iterator, Optional

LIMIT_KEY = "limit"

_COMPARATORS: dict[str, Callable[[Any, Any], bool]] = {
    "$gt": operator.gt,
    "$lt": operator.lt,
    "$gte": operator.ge,
    "$lte": operator.le,
}

OPERATORS = ("$gt", "$lt", "$gte", "$lte", "$ne", "$in")

# Distinguishes "field absent" from a stored None
_MISSING = object()


def strict_equal(left: Any, right: Any) -> bool:
    """
    Equality without cross-type coercion.

    Booleans only equal booleans, ints and floats compare numerically,
    sequences and mappings compare element by element.
    """
    if left is _MISSING or right is _MISSING:
        return False
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        return len(left) == len(right) and all(
            strict_equal(a, b) for a, b in zip(left, right)
        )
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        return left.keys() == right.keys() and all(
            strict_equal(left[k], right[k]) for k in left
        )
    if isinstance(left, (list, tuple, Mapping)) or isinstance(right, (list, tuple, Mapping)):
        return False
    try:
        return bool(left == right)
    except (TypeError, ValueError):
        return False


def _compare(op: str, value: Any, operand: Any) -> bool:
    if value is _MISSING or value is None:
        return False
    try:
        return bool(_COMPARATORS[op](value, operand))
    except TypeError:
        return False


def _contains_any(value: Any, operand: Any) -> bool:
    if not isinstance(operand, (list, tuple)):
        return False
    if isinstance(value, str):
        value = (value,)
    elif not isinstance(value, (list, tuple)):
        return False
    return any(strict_equal(item, wanted) for item in value for wanted in operand)


def check_operator(op: str, value: Any, operand: Any) -> bool:
    """
    Evaluate a single operator against a record value.

    Args:
        op: Operator symbol ($gt, $lt, $gte, $lte, $ne, $in)
        value: Record value (or the internal missing marker)
        operand: Right-hand side from the condition

    Returns:
        True if satisfied; unknown operators are never satisfied
    """
    if op in _COMPARATORS:
        return _compare(op, value, operand)
    if op == "$ne":
        if value is _MISSING or value is None:
            return False
        return not strict_equal(value, operand)
    if op == "$in":
        return _contains_any(value, operand)
    return False


def field_entries(condition: Optional[Mapping]) -> Iterator[tuple[Any, Any]]:
    """Yield (field, operand) pairs, skipping the reserved limit key."""
    if not condition:
        return
    for field, operand in condition.items():
        if field == LIMIT_KEY:
            continue
        yield field, operand


def get_limit(condition: Optional[Mapping]) -> Optional[int]:
    """Return the positive integer limit of a condition, if any."""
    if not isinstance(condition, Mapping):
        return None
    limit = condition.get(LIMIT_KEY)
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        return None
    return limit


def matches(record: Mapping, condition: Optional[Mapping]) -> bool:
    """
    Check whether a record satisfies every entry of a condition.

    An empty or absent condition matches every record.
    """
    if condition is None:
        return True
    if not isinstance(condition, Mapping) or not isinstance(record, Mapping):
        return False

    for field, operand in field_entries(condition):
        value = record.get(field, _MISSING)
        if isinstance(operand, Mapping):
            for op, op_operand in operand.items():
                if not check_operator(op, value, op_operand):
                    return False
        elif not strict_equal(value, operand):
            return False

    return True


def evaluate(
    records: Iterable[Mapping],
    condition: Optional[Mapping] = None,
    return_index: bool = False,
    limit: Optional[int] = None,
) -> list:
    """
    Scan records in order and collect the matches.

    Args:
        records: Records in insertion order
        condition: Query condition
        return_index: Collect positions instead of records
        limit: Stop after this many matches (defaults to the condition's limit)

    Returns:
        Matching records (or their positions) in ascending insertion order
    """
    if limit is None:
        limit = get_limit(condition)

    result = []
    for index, record in enumerate(records):
        if not matches(record, condition):
            continue
        result.append(index if return_index else record)
        if limit and len(result) >= limit:
            break

    return result
