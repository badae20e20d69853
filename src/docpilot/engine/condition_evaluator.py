"""
DocPilot Condition Evaluator

Evaluates composable conditions against a render scope (the schema as a
plain mapping, plus per-section lookups and the current collection item)
using three-valued logic.

Key features:
- TriBool evaluation (TRUE, FALSE, UNKNOWN)
- Field path resolution (e.g., "features.uses_camera")
- Strict equality: booleans never equal numbers or strings
- Presence operators (is_null, is_empty, ...) treat a missing field as None
- Tracks missing fields for UNKNOWN results
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ..exceptions import ConditionEvaluationError
from ..models import (
    Condition,
    ConditionOperator,
    EvaluationResult,
    TriBool,
)


PRESENCE_OPERATORS = frozenset({
    ConditionOperator.IS_NULL,
    ConditionOperator.IS_NOT_NULL,
    ConditionOperator.IS_EMPTY,
    ConditionOperator.IS_NOT_EMPTY,
})


# =============================================================================
# Field Path Resolution
# =============================================================================

def resolve_field_path(obj: Any, path: str) -> tuple[Any, bool]:
    """
    Resolve a dot-notation field path to a value.

    Supports dictionary keys and object attributes at every level.

    Returns:
        Tuple of (resolved_value, found). If not found, returns (None, False).
    """
    current = obj
    for part in path.split("."):
        if isinstance(current, dict):
            if part not in current:
                return (None, False)
            current = current[part]
        elif current is not None and hasattr(current, part):
            current = getattr(current, part)
        else:
            return (None, False)
    return (current, True)


# =============================================================================
# Comparison Operators
# =============================================================================

def strict_equals(actual: Any, expected: Any) -> bool:
    """
    Equality without Python's bool/int coercion.

    strict_equals(True, 1) is False; strict_equals(True, True) is True.
    """
    if isinstance(actual, bool) or isinstance(expected, bool):
        return isinstance(actual, bool) and isinstance(expected, bool) and actual is expected
    return actual == expected


def _strict_member(actual: Any, collection: Any) -> bool:
    return any(strict_equals(actual, candidate) for candidate in collection)


def compare_values(actual: Any, operator: ConditionOperator, expected: Any) -> TriBool:
    """
    Compare two values using the specified operator.

    Args:
        actual: The value resolved from the scope (None when missing)
        operator: Comparison operator
        expected: The value to compare against

    Returns:
        TriBool result of the comparison
    """
    if operator == ConditionOperator.IS_NULL:
        return TriBool.from_bool(actual is None)
    if operator == ConditionOperator.IS_NOT_NULL:
        return TriBool.from_bool(actual is not None)
    if operator == ConditionOperator.IS_EMPTY:
        if actual is None:
            return TriBool.TRUE
        if isinstance(actual, str):
            return TriBool.from_bool(actual.strip() == "")
        if isinstance(actual, (list, tuple, dict, set)):
            return TriBool.from_bool(len(actual) == 0)
        return TriBool.FALSE
    if operator == ConditionOperator.IS_NOT_EMPTY:
        return ~compare_values(actual, ConditionOperator.IS_EMPTY, expected)

    if actual is None:
        return TriBool.UNKNOWN

    if operator == ConditionOperator.EQ:
        return TriBool.from_bool(strict_equals(actual, expected))
    if operator == ConditionOperator.NE:
        return TriBool.from_bool(not strict_equals(actual, expected))
    if operator == ConditionOperator.IN:
        if isinstance(expected, (list, tuple, set, frozenset)):
            return TriBool.from_bool(_strict_member(actual, expected))
        return TriBool.FALSE
    if operator == ConditionOperator.NOT_IN:
        if isinstance(expected, (list, tuple, set, frozenset)):
            return TriBool.from_bool(not _strict_member(actual, expected))
        return TriBool.TRUE
    if operator == ConditionOperator.CONTAINS:
        if isinstance(actual, str) and isinstance(expected, str):
            return TriBool.from_bool(expected in actual)
        if isinstance(actual, (list, tuple, set)):
            return TriBool.from_bool(_strict_member(expected, actual))
        return TriBool.FALSE

    return TriBool.UNKNOWN


# =============================================================================
# Condition Evaluator
# =============================================================================

@dataclass
class ConditionEvaluator:
    """
    Evaluates composable conditions against a scope mapping.

    Usage:
        evaluator = ConditionEvaluator()
        result = evaluator.evaluate(EQ("features.uses_camera", True), scope)

        if result.value == TriBool.UNKNOWN:
            print(f"Missing fields: {result.missing_fields}")
    """

    def evaluate(self, condition: Condition, scope: Any) -> EvaluationResult:
        if condition.is_logical:
            return self._evaluate_logical(condition, scope)
        return self._evaluate_predicate(condition, scope)

    def _evaluate_logical(self, condition: Condition, scope: Any) -> EvaluationResult:
        op = condition.op
        if op == ConditionOperator.NOT:
            return ~self.evaluate(condition.children[0], scope)
        if op not in (ConditionOperator.AND, ConditionOperator.OR):
            raise ConditionEvaluationError(
                message=f"Unknown logical operator: {op}",
                details={"operator": op.value},
            )

        # FALSE settles an AND and TRUE settles an OR; later children are not read
        decisive = TriBool.FALSE if op == ConditionOperator.AND else TriBool.TRUE
        result: Optional[EvaluationResult] = None
        for child in condition.children:
            child_result = self.evaluate(child, scope)
            if result is None:
                result = child_result
            elif op == ConditionOperator.AND:
                result = result & child_result
            else:
                result = result | child_result
            if result.value is decisive:
                break
        return result

    def _evaluate_predicate(self, condition: Condition, scope: Any) -> EvaluationResult:
        predicate = condition.predicate
        if predicate is None:
            raise ConditionEvaluationError(
                message="Predicate condition missing predicate",
                details={"operator": condition.op.value},
            )

        actual, found = resolve_field_path(scope, predicate.field)
        value = compare_values(actual, predicate.operator, predicate.value)

        missing: list[str] = []
        if not found and predicate.operator not in PRESENCE_OPERATORS:
            value = TriBool.UNKNOWN
            missing.append(predicate.field)

        label = f"{predicate.field} {predicate.operator.value} {predicate.value!r}"
        if value == TriBool.TRUE:
            explanation = f"{label}: PASSED"
        elif value == TriBool.FALSE:
            explanation = f"{label}: FAILED (actual: {actual!r})"
        else:
            explanation = f"{label}: UNKNOWN (missing field)"

        return EvaluationResult(
            value=value,
            explanation=explanation,
            missing_fields=missing,
            evaluated_fields=[predicate.field],
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def evaluate_condition(condition: Condition, scope: Any) -> EvaluationResult:
    return ConditionEvaluator().evaluate(condition, scope)


def check_condition(condition: Condition, scope: Any) -> bool:
    """
    Check if a condition is satisfied (TRUE).

    Returns False for both FALSE and UNKNOWN results.
    """
    return evaluate_condition(condition, scope).value == TriBool.TRUE
