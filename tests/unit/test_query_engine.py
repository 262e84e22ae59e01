"""
Unit tests for docstore/query/engine.py

Tests per-record matching, operator dispatch and ordered evaluation.
"""
import pytest

from docstore.query.engine import (
    check_operator,
    evaluate,
    field_entries,
    get_limit,
    matches,
    strict_equal,
)


RECORDS = [
    {"name": "A", "age": 28, "code": ["js", "html"]},
    {"name": "B", "age": 20, "code": ["html", "java"]},
    {"name": "C", "age": 28},
    {"name": "D", "age": 38, "code": ["python", "ruby"]},
    {"name": "E", "code": ["js", "css", "java"]},
    {"name": "F", "age": 16},
]


def _names(records):
    return [r["name"] for r in records]


# ============================================================================
# Strict equality
# ============================================================================

def test_strict_equal_numbers():
    """Ints and floats compare numerically."""
    assert strict_equal(28, 28)
    assert strict_equal(28, 28.0)
    assert not strict_equal(28, 29)


def test_strict_equal_no_bool_coercion():
    """Booleans never equal numbers."""
    assert not strict_equal(True, 1)
    assert not strict_equal(0, False)
    assert strict_equal(True, True)


def test_strict_equal_no_string_coercion():
    """Strings never equal numbers."""
    assert not strict_equal("28", 28)


def test_strict_equal_sequences_and_mappings():
    """Containers compare element by element."""
    assert strict_equal(["a", 1], ("a", 1))
    assert not strict_equal([1], [True])
    assert strict_equal({"city": "munich"}, {"city": "munich"})
    assert not strict_equal({"n": 1}, {"n": True})
    assert not strict_equal(["a"], "a")


# ============================================================================
# Equality conditions
# ============================================================================

def test_equality_match():
    """Scalar operand means strict equality."""
    assert matches({"age": 28}, {"age": 28})
    assert not matches({"age": 20}, {"age": 28})


def test_missing_field_fails_equality():
    """A field absent from the record is a non-match, not an error."""
    assert not matches({"name": "E"}, {"age": 28})


def test_none_operand_does_not_match_missing_field():
    """A stored None differs from an absent field."""
    assert matches({"age": None}, {"age": None})
    assert not matches({}, {"age": None})


def test_empty_condition_matches_everything():
    """Empty or absent conditions match every record."""
    assert matches({"a": 1}, {})
    assert matches({"a": 1}, None)
    assert matches({}, {"limit": 2})


def test_conjunction_across_fields():
    """Every field entry must hold."""
    condition = {"name": "C", "age": {"$gte": 28}}
    assert matches({"name": "C", "age": 28}, condition)
    assert not matches({"name": "A", "age": 28}, condition)
    assert not matches({"name": "C", "age": 20}, condition)


# ============================================================================
# Comparison operators
# ============================================================================

@pytest.mark.parametrize("op,operand,expected", [
    ("$gt", 28, ["D"]),
    ("$gte", 28, ["A", "C", "D"]),
    ("$lt", 28, ["B", "F"]),
    ("$lte", 28, ["A", "B", "C", "F"]),
    ("$ne", 28, ["B", "D", "F"]),
])
def test_comparison_operators(op, operand, expected):
    """Comparison operators over the reference records."""
    result = evaluate(RECORDS, {"age": {op: operand}})
    assert _names(result) == expected


def test_range_requires_both_operators():
    """Operators under one field are conjunctive."""
    result = evaluate(RECORDS, {"age": {"$gt": 16, "$lt": 38}})
    assert _names(result) == ["A", "B", "C"]


def test_comparison_on_missing_or_none_fails():
    """Comparisons need a defined record value."""
    assert not check_operator("$gt", None, 1)
    assert not matches({}, {"age": {"$lt": 100}})
    assert not matches({"age": None}, {"age": {"$lt": 100}})


def test_comparison_with_zero_value():
    """A falsy but defined value still compares."""
    assert matches({"age": 0}, {"age": {"$lt": 1}})
    assert matches({"age": 0}, {"age": {"$gte": 0}})


def test_lexicographic_comparison():
    """Strings compare lexicographically."""
    assert matches({"name": "beta"}, {"name": {"$gt": "alpha"}})
    assert not matches({"name": "alpha"}, {"name": {"$gt": "beta"}})


def test_incomparable_types_do_not_match():
    """Mixed-type comparisons are non-matches, not errors."""
    assert not matches({"age": "28"}, {"age": {"$gt": 20}})
    assert not matches({"age": [1]}, {"age": {"$lt": 5}})


def test_operand_is_never_evaluated_as_code():
    """Operands are compared as values, never spliced into expressions."""
    condition = {"age": {"$gt": "0 or __import__('os')"}}
    assert not matches({"age": 28}, condition)


# ============================================================================
# $in operator
# ============================================================================

def test_in_matches_string_values():
    """String field matches if it is one of the operand values."""
    result = evaluate(RECORDS, {"name": {"$in": ["A", "B", "G"]}})
    assert _names(result) == ["A", "B"]


def test_in_any_overlap_for_sequences():
    """Sequence field matches if any element overlaps the operand."""
    result = evaluate(RECORDS, {"code": {"$in": ["java", "ruby"]}})
    assert _names(result) == ["B", "D", "E"]


def test_in_multiple_overlaps_still_match():
    """Several overlapping elements count as one satisfied operator."""
    assert matches({"code": ["js", "css", "java"]}, {"code": {"$in": ["js", "java"]}})


def test_in_non_sequence_field_fails():
    """Numbers, mappings and missing fields never satisfy $in."""
    assert not matches({"age": 28}, {"age": {"$in": [28]}})
    assert not matches({"d": {"a": 1}}, {"d": {"$in": ["a"]}})
    assert not matches({}, {"code": {"$in": ["js"]}})


def test_in_non_sequence_operand_fails():
    """A non-list operand is malformed and never matches."""
    assert not matches({"name": "A"}, {"name": {"$in": "A"}})
    assert not matches({"name": "A"}, {"name": {"$in": None}})


# ============================================================================
# Malformed conditions
# ============================================================================

def test_unknown_operator_never_matches():
    """Unknown operators make the condition fail silently."""
    assert not matches({"age": 28}, {"age": {"$regex": "2"}})


def test_non_mapping_condition_never_matches():
    """A condition that is not a mapping matches nothing."""
    assert not matches({"age": 28}, ["age"])
    assert evaluate(RECORDS, "age") == []


# ============================================================================
# Limit and evaluation
# ============================================================================

def test_get_limit():
    """Only positive integers count as a limit."""
    assert get_limit({"limit": 3}) == 3
    assert get_limit({"limit": 0}) is None
    assert get_limit({"limit": -1}) is None
    assert get_limit({"limit": True}) is None
    assert get_limit({"limit": "3"}) is None
    assert get_limit(None) is None


def test_limit_is_not_a_field():
    """The limit key is excluded from field entries."""
    assert list(field_entries({"name": "A", "limit": 2})) == [("name", "A")]


def test_limit_caps_results_in_insertion_order():
    """Limit returns the first matches."""
    result = evaluate(RECORDS, {"limit": 3})
    assert _names(result) == ["A", "B", "C"]


def test_limit_larger_than_matches():
    """Result size is min(limit, total matches)."""
    result = evaluate(RECORDS, {"age": 28, "limit": 10})
    assert _names(result) == ["A", "C"]


def test_limit_with_conjunction():
    """Limit applies after all conditions."""
    condition = {"name": {"$in": ["C", "A", "D"]}, "age": {"$gte": 28}, "limit": 2}
    assert _names(evaluate(RECORDS, condition)) == ["A", "C"]


def test_evaluate_return_index():
    """Index form returns ascending positions."""
    assert evaluate(RECORDS, {"age": 28}, return_index=True) == [0, 2]


def test_explicit_limit_argument():
    """An explicit limit overrides the condition."""
    assert evaluate(RECORDS, None, return_index=True, limit=2) == [0, 1]
