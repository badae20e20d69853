"""
Question visibility and answer emptiness.

Shared by the interview engine (what to show, what blocks a step) and the
schema builder (which answers flow into the schema).
"""
from __future__ import annotations

from typing import Any

from ..models import AnswerMap, Question
from .condition_evaluator import strict_equals


def is_visible(question: Question, answers: AnswerMap) -> bool:
    """
    A question is visible when it has no dependency, or when the answer to
    its dependency target equals the expected value.

    Equality is strict (True never matches 1 or "true"). A list-valued
    expectation matches when the answer is one of its members; a list
    answer matches when it contains the expected value.
    """
    dependency = question.depends_on
    if dependency is None:
        return True
    if dependency.question_id not in answers:
        return False

    answer = answers[dependency.question_id]
    expected = dependency.value
    if isinstance(expected, (list, tuple)):
        if isinstance(answer, list):
            return any(strict_equals(a, e) for a in answer for e in expected)
        return any(strict_equals(answer, e) for e in expected)
    if isinstance(answer, list):
        return any(strict_equals(a, expected) for a in answer)
    return strict_equals(answer, expected)


def is_empty_answer(value: Any) -> bool:
    """None, blank strings and empty lists are empty; False is an answer."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False
