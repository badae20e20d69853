"""
DocPilot Interview Engine

Walks a user through a template's steps, tracking answers and deciding
which questions are visible and when a step may be left.

Key components:
- InterviewEngine: pure operations over (template, step index, answers)
- InterviewSession: one user's interview; owns the step index and the
  answer map, compiles the document when the last step is completed and
  hands off to a DocumentEditingSession

Rules:
- Hidden questions keep their answers and never block completion
- False is a valid answer; None, blank strings and [] are not
- Advancing past the last step compiles; retreating before the first
  step cancels
"""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Union

from ..exceptions import InterviewClosedError, InterviewError, StepIndexError
from ..models import (
    AnswerMap,
    AnswerValue,
    DocumentSchema,
    DocumentType,
    GeneratedDocument,
    InterviewTemplate,
    Question,
    QuestionType,
    Step,
)
from .compiler import DocumentCompiler
from .diff_engine import DocumentEditingSession
from .registry import TemplateRegistry
from .schema_builder import SchemaBuilder, utc_now
from .visibility import is_empty_answer, is_visible


logger = logging.getLogger(__name__)


# =============================================================================
# Results
# =============================================================================

class AdvanceOutcome(str, Enum):
    MOVED = "moved"
    BLOCKED = "blocked"         # Current step has unanswered visible questions
    COMPLETED = "completed"     # Last step done; document compiled


class RetreatOutcome(str, Enum):
    MOVED = "moved"
    CANCELLED = "cancelled"     # Retreated before the first step


class InterviewStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class AdvanceResult:
    """
    Outcome of trying to leave the current step.

    Attributes:
        outcome: moved / blocked / completed
        step_index: Step index after the attempt
        missing: Visible question ids still unanswered (when blocked)
        document: Compiled document (when completed)
    """
    outcome: AdvanceOutcome
    step_index: int
    missing: tuple[str, ...] = ()
    schema: Optional[DocumentSchema] = None
    document: Optional[GeneratedDocument] = None

    @property
    def is_blocked(self) -> bool:
        return self.outcome == AdvanceOutcome.BLOCKED

    @property
    def is_completed(self) -> bool:
        return self.outcome == AdvanceOutcome.COMPLETED


# =============================================================================
# Interview Engine (pure operations)
# =============================================================================

@dataclass
class InterviewEngine:
    """
    Stateless interview operations.

    Usage:
        engine = InterviewEngine(registry)
        step = engine.current_step(DocumentType.PRIVACY_POLICY, 0)
        visible = engine.visible_questions(step, answers)
        answers = engine.record_answer(answers, "has-ugc", True)
        if engine.is_step_complete(step, answers):
            ...
    """

    registry: TemplateRegistry = field(default_factory=TemplateRegistry.default)

    def current_step(self, template_type: Union[DocumentType, str], step_index: int) -> Step:
        """
        Raises:
            TemplateNotFoundError: If the template type is not registered
            StepIndexError: If the step index is out of range
        """
        return step_at(self.registry.get(template_type), step_index)

    @staticmethod
    def visible_questions(step: Step, answers: AnswerMap) -> list[Question]:
        return [q for q in step.questions if is_visible(q, answers)]

    @staticmethod
    def record_answer(answers: AnswerMap, question_id: str, value: AnswerValue) -> AnswerMap:
        """Return a new answer map with one answer set. The input is not modified."""
        updated = dict(answers)
        updated[question_id] = copy.deepcopy(value)
        return updated

    @staticmethod
    def missing_answers(step: Step, answers: AnswerMap) -> list[str]:
        return [
            q.id for q in step.questions
            if is_visible(q, answers) and is_empty_answer(answers.get(q.id))
        ]

    @classmethod
    def is_step_complete(cls, step: Step, answers: AnswerMap) -> bool:
        return not cls.missing_answers(step, answers)

    @staticmethod
    def next_step_index(template: InterviewTemplate, step_index: int) -> Optional[int]:
        """
        Index to move to from a complete step, or None when it was the last.

        Raises:
            StepIndexError: If step_index is out of range
        """
        step_at(template, step_index)
        if step_index + 1 >= template.step_count:
            return None
        return step_index + 1

    @staticmethod
    def previous_step_index(template: InterviewTemplate, step_index: int) -> Optional[int]:
        """Index to move back to, or None when retreating cancels."""
        step_at(template, step_index)
        return step_index - 1 if step_index > 0 else None


def step_at(template: InterviewTemplate, step_index: int) -> Step:
    try:
        return template.get_step(step_index)
    except IndexError as e:
        raise StepIndexError(
            message=str(e),
            details={"step_index": step_index, "step_count": template.step_count},
            document_type=template.type.value,
        )


def validate_answer(question: Question, value: Any) -> None:
    """
    Check an answer's shape against its question type.

    Raises:
        InterviewError: If the value does not fit the question
    """
    problem: Optional[str] = None
    if question.type == QuestionType.CONFIRM:
        if not isinstance(value, bool):
            problem = "expects true or false"
    elif question.type == QuestionType.SELECT_ONE:
        if not isinstance(value, str) or value not in question.option_values:
            problem = f"expects one of {question.option_values}"
    elif question.type == QuestionType.SELECT_MANY:
        if not isinstance(value, list) or any(v not in question.option_values for v in value):
            problem = f"expects a list drawn from {question.option_values}"
    elif not isinstance(value, str):
        problem = "expects text"

    if problem:
        raise InterviewError(
            message=f"Invalid answer for {question.id}: {problem}",
            details={"question_id": question.id, "value": value},
        )


# =============================================================================
# Interview Session
# =============================================================================

@dataclass
class InterviewSession:
    """
    One user's pass through a template.

    Usage:
        session = InterviewSession(template, defaults={"app_name": "Cal AI"})
        session.answer("has-ugc", False)
        result = session.advance()
        if result.is_blocked:
            print("Still needed:", result.missing)

    On completion `document` and `schema` are set and `on_complete` (if
    any) is called with the document. Retreating from step 0 cancels the
    interview and calls `on_cancel`.
    """

    template: InterviewTemplate
    defaults: Mapping[str, Any] = field(default_factory=dict)
    answers: AnswerMap = field(default_factory=dict)
    step_index: int = 0
    status: InterviewStatus = InterviewStatus.ACTIVE
    schema: Optional[DocumentSchema] = None
    document: Optional[GeneratedDocument] = None
    on_complete: Optional[Callable[[GeneratedDocument], None]] = None
    on_cancel: Optional[Callable[[], None]] = None
    clock: Callable = utc_now
    compiler: DocumentCompiler = field(default_factory=DocumentCompiler)

    def __post_init__(self) -> None:
        step_at(self.template, self.step_index)

    @property
    def current_step(self) -> Step:
        return step_at(self.template, self.step_index)

    @property
    def visible_questions(self) -> list[Question]:
        return InterviewEngine.visible_questions(self.current_step, self.answers)

    @property
    def is_step_complete(self) -> bool:
        return InterviewEngine.is_step_complete(self.current_step, self.answers)

    @property
    def is_last_step(self) -> bool:
        return self.step_index == self.template.step_count - 1

    @property
    def progress(self) -> float:
        """Fraction of steps passed, 0.0 to 1.0."""
        if self.status == InterviewStatus.COMPLETED:
            return 1.0
        return self.step_index / self.template.step_count

    def answer(self, question_id: str, value: AnswerValue) -> None:
        """
        Record an answer. Questions on other steps may be pre-filled.

        Raises:
            InterviewClosedError: If the interview is completed or cancelled
            InterviewError: If the question is unknown or the value does not fit
        """
        self._require_active()
        question = self.template.get_question(question_id)
        if question is None:
            raise InterviewError(
                message=f"Unknown question: {question_id}",
                details={"question_id": question_id},
                document_type=self.template.type.value,
            )
        validate_answer(question, value)
        self.answers = InterviewEngine.record_answer(self.answers, question_id, value)

    def advance(self) -> AdvanceResult:
        self._require_active()
        missing = InterviewEngine.missing_answers(self.current_step, self.answers)
        if missing:
            return AdvanceResult(
                outcome=AdvanceOutcome.BLOCKED,
                step_index=self.step_index,
                missing=tuple(missing),
            )

        next_index = InterviewEngine.next_step_index(self.template, self.step_index)
        if next_index is not None:
            self.step_index = next_index
            return AdvanceResult(outcome=AdvanceOutcome.MOVED, step_index=next_index)

        self.schema = SchemaBuilder(self.template, clock=self.clock).build(self.defaults, self.answers)
        self.document = self.compiler.compile(self.template, self.schema)
        self.status = InterviewStatus.COMPLETED
        logger.info("Interview for %s completed", self.template.type.value)
        if self.on_complete is not None:
            self.on_complete(self.document)
        return AdvanceResult(
            outcome=AdvanceOutcome.COMPLETED,
            step_index=self.step_index,
            schema=self.schema,
            document=self.document,
        )

    def retreat(self) -> RetreatOutcome:
        self._require_active()
        previous = InterviewEngine.previous_step_index(self.template, self.step_index)
        if previous is None:
            self.status = InterviewStatus.CANCELLED
            logger.info("Interview for %s cancelled", self.template.type.value)
            if self.on_cancel is not None:
                self.on_cancel()
            return RetreatOutcome.CANCELLED
        self.step_index = previous
        return RetreatOutcome.MOVED

    def start_editing(self, suggester: Any = None) -> DocumentEditingSession:
        """
        Hand the compiled document to a DocumentEditingSession.

        Raises:
            InterviewError: If the interview has not completed
        """
        if self.status != InterviewStatus.COMPLETED or self.document is None:
            raise InterviewError(
                message="Interview has not completed",
                details={"status": self.status.value},
                document_type=self.template.type.value,
            )
        return DocumentEditingSession(document=self.document, suggester=suggester)

    def _require_active(self) -> None:
        if self.status != InterviewStatus.ACTIVE:
            raise InterviewClosedError(
                message=f"Interview is {self.status.value}",
                details={"status": self.status.value},
                document_type=self.template.type.value,
            )
