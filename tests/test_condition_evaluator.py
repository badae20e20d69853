"""
Tests for DocPilot Condition Evaluator

Tests cover:
- Field path resolution
- Strict comparison (no bool/int coercion)
- TriBool evaluation with Kleene logic
- Missing field tracking
"""
import pytest

from docpilot.models import (
    AND,
    CONTAINS,
    EQ,
    IN,
    IS_NOT_EMPTY,
    NE,
    NOT,
    OR,
    PRED,
    ConditionOperator,
    TriBool,
)
from docpilot.engine.condition_evaluator import (
    ConditionEvaluator,
    check_condition,
    compare_values,
    evaluate_condition,
    resolve_field_path,
    strict_equals,
)


@pytest.fixture
def scope():
    return {
        "app_name": "Cal AI",
        "features": {"uses_camera": True, "has_health_data": False},
        "third_parties": [],
        "data_types": [{"type": "Location"}],
        "custom_answers": {"camera_storage": "not-stored", "count": 1},
    }


@pytest.fixture
def evaluator():
    return ConditionEvaluator()


# =============================================================================
# TriBool
# =============================================================================

class TestTriBool:
    def test_and_false_dominates(self):
        assert (TriBool.UNKNOWN & TriBool.FALSE) == TriBool.FALSE
        assert (TriBool.TRUE & TriBool.UNKNOWN) == TriBool.UNKNOWN

    def test_or_true_dominates(self):
        assert (TriBool.UNKNOWN | TriBool.TRUE) == TriBool.TRUE
        assert (TriBool.FALSE | TriBool.UNKNOWN) == TriBool.UNKNOWN

    def test_invert_keeps_unknown(self):
        assert ~TriBool.UNKNOWN == TriBool.UNKNOWN
        assert ~TriBool.TRUE == TriBool.FALSE

    def test_unknown_refuses_bool_conversion(self):
        with pytest.raises(ValueError):
            bool(TriBool.UNKNOWN)


# =============================================================================
# Field Resolution
# =============================================================================

class TestResolveFieldPath:
    def test_nested_dict(self, scope):
        assert resolve_field_path(scope, "features.uses_camera") == (True, True)

    def test_missing_path(self, scope):
        assert resolve_field_path(scope, "features.uses_teleport") == (None, False)
        assert resolve_field_path(scope, "moderation.level") == (None, False)

    def test_falsy_values_are_found(self, scope):
        assert resolve_field_path(scope, "features.has_health_data") == (False, True)
        assert resolve_field_path(scope, "third_parties") == ([], True)

    def test_object_attributes(self):
        class Item:
            type = "Location"

        assert resolve_field_path({"item": Item()}, "item.type") == ("Location", True)


# =============================================================================
# Comparisons
# =============================================================================

class TestStrictEquality:
    def test_bool_never_equals_int(self):
        assert strict_equals(True, 1) is False
        assert strict_equals(1, True) is False
        assert strict_equals(False, 0) is False

    def test_bool_equals_bool(self):
        assert strict_equals(True, True) is True
        assert strict_equals(False, True) is False

    def test_other_values(self):
        assert strict_equals("4+", "4+") is True
        assert strict_equals(1, 1) is True


class TestCompareValues:
    def test_eq_strict(self):
        assert compare_values(True, ConditionOperator.EQ, 1) == TriBool.FALSE
        assert compare_values(True, ConditionOperator.EQ, True) == TriBool.TRUE

    def test_none_is_unknown_for_comparisons(self):
        assert compare_values(None, ConditionOperator.EQ, True) == TriBool.UNKNOWN
        assert compare_values(None, ConditionOperator.IN, ["a"]) == TriBool.UNKNOWN

    def test_in_and_not_in(self):
        assert compare_values("9+", ConditionOperator.IN, ["9+", "12+"]) == TriBool.TRUE
        assert compare_values("4+", ConditionOperator.NOT_IN, ["9+", "12+"]) == TriBool.TRUE
        assert compare_values(True, ConditionOperator.IN, [1, 2]) == TriBool.FALSE

    def test_contains(self):
        assert compare_values(["firebase", "sentry"], ConditionOperator.CONTAINS, "sentry") == TriBool.TRUE
        assert compare_values("Cal AI", ConditionOperator.CONTAINS, "AI") == TriBool.TRUE
        assert compare_values(5, ConditionOperator.CONTAINS, "5") == TriBool.FALSE

    def test_presence_operators(self):
        assert compare_values(None, ConditionOperator.IS_NULL, None) == TriBool.TRUE
        assert compare_values(False, ConditionOperator.IS_NOT_NULL, None) == TriBool.TRUE
        assert compare_values("  ", ConditionOperator.IS_EMPTY, None) == TriBool.TRUE
        assert compare_values([], ConditionOperator.IS_NOT_EMPTY, None) == TriBool.FALSE
        assert compare_values(False, ConditionOperator.IS_EMPTY, None) == TriBool.FALSE


# =============================================================================
# Evaluator
# =============================================================================

class TestConditionEvaluator:
    def test_simple_predicate(self, evaluator, scope):
        result = evaluator.evaluate(EQ("features.uses_camera", True), scope)
        assert result.value == TriBool.TRUE
        assert result.evaluated_fields == ["features.uses_camera"]

    def test_missing_field_is_unknown(self, evaluator, scope):
        result = evaluator.evaluate(EQ("features.uses_teleport", True), scope)
        assert result.value == TriBool.UNKNOWN
        assert result.missing_fields == ["features.uses_teleport"]

    def test_presence_on_missing_field_is_decided(self, evaluator, scope):
        result = evaluator.evaluate(PRED("moderation", ConditionOperator.IS_NULL), scope)
        assert result.value == TriBool.TRUE
        assert result.missing_fields == []

    def test_and_short_circuits_on_false(self, evaluator, scope):
        condition = AND(EQ("features.has_health_data", True), EQ("missing.field", 1))
        result = evaluator.evaluate(condition, scope)
        assert result.value == TriBool.FALSE

    def test_or_with_unknown(self, evaluator, scope):
        condition = OR(EQ("missing.field", 1), EQ("features.has_health_data", True))
        result = evaluator.evaluate(condition, scope)
        assert result.value == TriBool.UNKNOWN
        assert "missing.field" in result.missing_fields

    def test_not(self, evaluator, scope):
        assert evaluator.evaluate(NOT(EQ("features.uses_camera", True)), scope).value == TriBool.FALSE

    def test_nested(self, evaluator, scope):
        condition = AND(
            IS_NOT_EMPTY("data_types"),
            OR(NE("custom_answers.camera_storage", "stored-permanently"), CONTAINS("app_name", "Pro")),
            IN("custom_answers.camera_storage", ["not-stored", "user-choice"]),
        )
        assert evaluator.evaluate(condition, scope).is_satisfied


class TestConvenienceFunctions:
    def test_evaluate_condition(self, scope):
        assert evaluate_condition(EQ("app_name", "Cal AI"), scope).value == TriBool.TRUE

    def test_check_condition_unknown_is_false(self, scope):
        assert check_condition(EQ("missing", True), scope) is False

    def test_check_condition_int_does_not_match_true(self, scope):
        assert check_condition(EQ("custom_answers.count", True), scope) is False
