"""
DocPilot Composable Conditions

A template decides whether an optional section is emitted (and which
sentences a section keeps) with a small condition tree over the render
scope. Leaves compare one dotted field path; inner nodes combine leaves
with AND/OR/NOT.

A leaf whose field path does not resolve evaluates to UNKNOWN rather than
False, so a typo in a template cannot silently read as "feature absent".
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .enums import ConditionOperator


LOGICAL_OPERATORS = frozenset({
    ConditionOperator.AND,
    ConditionOperator.OR,
    ConditionOperator.NOT,
})


# =============================================================================
# TriBool
# =============================================================================

_RANK = {False: 0, None: 1, True: 2}
_BY_RANK = {0: False, 1: None, 2: True}


class TriBool(Enum):
    """
    True / False / Unknown.

    Values are ordered FALSE < UNKNOWN < TRUE; `&` takes the lower of the
    two, `|` the higher, and `~` mirrors the order. Truth testing an
    UNKNOWN raises ValueError so callers have to decide what it means.
    """
    TRUE = True
    FALSE = False
    UNKNOWN = None

    @property
    def rank(self) -> int:
        return _RANK[self.value]

    @classmethod
    def _from_rank(cls, rank: int) -> TriBool:
        return cls(_BY_RANK[rank])

    def __and__(self, other: TriBool) -> TriBool:
        if not isinstance(other, TriBool):
            return NotImplemented
        return TriBool._from_rank(min(self.rank, other.rank))

    def __or__(self, other: TriBool) -> TriBool:
        if not isinstance(other, TriBool):
            return NotImplemented
        return TriBool._from_rank(max(self.rank, other.rank))

    def __invert__(self) -> TriBool:
        return TriBool._from_rank(2 - self.rank)

    def __bool__(self) -> bool:
        if self.value is None:
            raise ValueError("TriBool.UNKNOWN has no truth value; compare against TriBool.TRUE instead")
        return self.value

    @classmethod
    def from_bool(cls, value: Optional[bool]) -> TriBool:
        return cls(None if value is None else bool(value))


# =============================================================================
# Evaluation Result
# =============================================================================

@dataclass
class EvaluationResult:
    """Outcome of one condition, with the field paths it read and could not resolve."""
    value: TriBool
    explanation: str
    missing_fields: list[str] = field(default_factory=list)
    evaluated_fields: list[str] = field(default_factory=list)

    @property
    def is_satisfied(self) -> bool:
        return self.value is TriBool.TRUE

    def _merge(self, other: EvaluationResult, value: TriBool, joiner: str) -> EvaluationResult:
        return EvaluationResult(
            value=value,
            explanation=f"{self.explanation} {joiner} {other.explanation}",
            missing_fields=sorted({*self.missing_fields, *other.missing_fields}),
            evaluated_fields=[*self.evaluated_fields, *other.evaluated_fields],
        )

    def __and__(self, other: EvaluationResult) -> EvaluationResult:
        return self._merge(other, self.value & other.value, "and")

    def __or__(self, other: EvaluationResult) -> EvaluationResult:
        return self._merge(other, self.value | other.value, "or")

    def __invert__(self) -> EvaluationResult:
        return EvaluationResult(
            value=~self.value,
            explanation=f"not [{self.explanation}]",
            missing_fields=list(self.missing_fields),
            evaluated_fields=list(self.evaluated_fields),
        )


# =============================================================================
# Condition Tree
# =============================================================================

@dataclass(frozen=True)
class Predicate:
    """
    Leaf comparison.

    Attributes:
        field: Dotted path into the render scope, e.g. "features.uses_camera"
            or "custom_answers.camera_storage"
        operator: One of the comparison operators
        value: Right-hand side; unused by the presence operators
    """
    field: str
    operator: ConditionOperator
    value: Any = None

    def __post_init__(self) -> None:
        if self.operator in LOGICAL_OPERATORS:
            raise ValueError(f"'{self.operator.value}' combines conditions and cannot be a leaf comparison")


@dataclass(frozen=True)
class Condition:
    """
    Node of a condition tree: either a leaf holding a `predicate` or an
    AND/OR/NOT node holding `children`.

        AND(EQ("features.has_user_generated_content", True),
            NOT(EQ("compliance.age_gating", "17+")))
    """
    op: ConditionOperator
    children: tuple[Condition, ...] = ()
    predicate: Optional[Predicate] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        if self.is_logical:
            if self.predicate is not None or not self.children:
                raise ValueError(f"'{self.op.value}' node needs child conditions and no predicate")
            if self.op == ConditionOperator.NOT and len(self.children) > 1:
                raise ValueError("'not' takes a single child condition")
        elif self.predicate is None or self.children:
            raise ValueError(f"'{self.op.value}' node needs a predicate and no children")

    @property
    def is_logical(self) -> bool:
        return self.op in LOGICAL_OPERATORS

    def fields(self) -> set[str]:
        """Every field path the tree reads."""
        if self.predicate is not None:
            return {self.predicate.field}
        return set().union(*(child.fields() for child in self.children))


# =============================================================================
# Builders
# =============================================================================

def AND(*conditions: Condition) -> Condition:
    return Condition(op=ConditionOperator.AND, children=conditions)


def OR(*conditions: Condition) -> Condition:
    return Condition(op=ConditionOperator.OR, children=conditions)


def NOT(condition: Condition) -> Condition:
    return Condition(op=ConditionOperator.NOT, children=(condition,))


def PRED(path: str, operator: ConditionOperator, value: Any = None) -> Condition:
    return Condition(
        op=operator,
        predicate=Predicate(field=path, operator=operator, value=value),
        description=f"{path} {operator.value} {value!r}",
    )


def EQ(path: str, value: Any) -> Condition:
    return PRED(path, ConditionOperator.EQ, value)


def NE(path: str, value: Any) -> Condition:
    return PRED(path, ConditionOperator.NE, value)


def IN(path: str, values: list[Any]) -> Condition:
    return PRED(path, ConditionOperator.IN, list(values))


def CONTAINS(path: str, value: Any) -> Condition:
    """Substring for strings, membership for lists."""
    return PRED(path, ConditionOperator.CONTAINS, value)


def IS_NOT_EMPTY(path: str) -> Condition:
    return PRED(path, ConditionOperator.IS_NOT_EMPTY)
