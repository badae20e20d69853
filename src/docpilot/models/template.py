"""
DocPilot Template Models

Immutable definitions of an interview template: the ordered steps of
questions a user answers, and the declarative section definitions the
compiler turns into a document.

A template is authored once (as a YAML pack) and never mutated; sessions
hold references to it.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Union

from .conditions import Condition
from .enums import DocumentType, QuestionType, RiskLevel


AnswerValue = Union[str, list[str], bool]
AnswerMap = dict[str, AnswerValue]

# {field.path} placeholders in section text
PLACEHOLDER_PATTERN = re.compile(r"\{([A-Za-z_][A-Za-z0-9_.\-]*)\}")


# =============================================================================
# Questions and Steps
# =============================================================================

@dataclass(frozen=True)
class QuestionOption:
    """One selectable value of a select-one / select-many question."""
    value: str
    label: str
    description: Optional[str] = None
    risk_flag: Optional[str] = None     # Warning shown when selected


@dataclass(frozen=True)
class DependsOn:
    """
    Visibility dependency on an earlier answer.

    `value` may be a primitive or a list; with a list the question is
    visible when the answer is one of its members.
    """
    question_id: str
    value: Any


@dataclass(frozen=True)
class Question:
    """
    A single interview question.

    Attributes:
        id: Unique within the template (e.g., "has-ugc")
        type: Input kind
        prompt: Question text shown to the user
        schema_key: Dotted schema path the answer is written to
        also_sets: Extra schema paths that receive the same answer
        default: Value used by the schema builder when unanswered
        platform_tip: App Store review guidance shown with the question
    """
    id: str
    type: QuestionType
    prompt: str
    schema_key: str
    options: tuple[QuestionOption, ...] = ()
    depends_on: Optional[DependsOn] = None
    description: Optional[str] = None
    platform_tip: Optional[str] = None
    risk_level: Optional[RiskLevel] = None
    default: Optional[AnswerValue] = None
    also_sets: tuple[str, ...] = ()

    @property
    def option_values(self) -> list[str]:
        return [o.value for o in self.options]

    def get_option(self, value: str) -> Optional[QuestionOption]:
        for option in self.options:
            if option.value == value:
                return option
        return None


@dataclass(frozen=True)
class Step:
    """Ordered group of questions shown together."""
    id: str
    title: str
    description: str = ""
    icon: Optional[str] = None
    questions: tuple[Question, ...] = ()

    @property
    def question_ids(self) -> list[str]:
        return [q.id for q in self.questions]


# =============================================================================
# Section Definitions (content assembly rules)
# =============================================================================

@dataclass(frozen=True)
class Lookup:
    """
    Static value map over a schema field, exposed to text as {lookup.<name>}.

    Missing fields and values absent from `values` both resolve to `default`.
    """
    name: str
    field: str
    values: dict[str, str] = field(default_factory=dict)
    default: str = ""


@dataclass(frozen=True)
class ContentPart:
    """A sentence that is included only when `when` holds."""
    text: str
    when: Optional[Condition] = None


@dataclass(frozen=True)
class ContentBlock:
    """
    One paragraph of section content.

    Exactly one of the three forms is used:
    - text: a format string with {field.path} placeholders
    - parts: conditional sentences joined with `joiner`
    - each: a collection path; `item` is rendered per entry (as {item.*}),
      `empty` is rendered when the collection is empty

    Blocks that render to an empty string are dropped.
    """
    text: Optional[str] = None
    parts: tuple[ContentPart, ...] = ()
    joiner: str = " "
    each: Optional[str] = None
    item: Optional[str] = None
    empty: Optional[str] = None
    item_joiner: str = "\n"
    when: Optional[Condition] = None

    @property
    def kind(self) -> str:
        if self.each is not None:
            return "each"
        if self.parts:
            return "parts"
        return "text"


@dataclass(frozen=True)
class SectionDefinition:
    """
    Declarative rule producing one document section.

    Non-required sections carry an `include_when` trigger and are omitted
    entirely when it does not hold. Title, risk level and tags are static.
    """
    id: str
    title: str
    required: bool = True
    include_when: Optional[Condition] = None
    schema_keys: tuple[str, ...] = ()
    risk_level: Optional[RiskLevel] = None
    tags: tuple[str, ...] = ()
    lookups: tuple[Lookup, ...] = ()
    blocks: tuple[ContentBlock, ...] = ()
    block_joiner: str = "\n\n"


# =============================================================================
# Interview Template
# =============================================================================

@dataclass(frozen=True)
class InterviewTemplate:
    """
    A complete document template: interview steps plus section rules.

    Usage:
        template = registry.get(DocumentType.PRIVACY_POLICY)
        step = template.get_step(0)
        question = template.get_question("has-ugc")
    """
    type: DocumentType
    name: str
    description: str
    title: str                              # Format string, e.g. "{app_name} Privacy Policy"
    steps: tuple[Step, ...] = ()
    sections: tuple[SectionDefinition, ...] = ()
    schema_defaults: dict[str, Any] = field(default_factory=dict)
    version: str = "1.0.0"

    @property
    def step_count(self) -> int:
        return len(self.steps)

    def iter_questions(self) -> Iterator[Question]:
        """Yield every question in step order."""
        for step in self.steps:
            yield from step.questions

    def get_step(self, index: int) -> Step:
        """
        Get a step by index.

        Raises:
            IndexError: If the index is out of range
        """
        if index < 0 or index >= len(self.steps):
            raise IndexError(f"Step index {index} out of range (0..{len(self.steps) - 1})")
        return self.steps[index]

    def get_question(self, question_id: str) -> Optional[Question]:
        for question in self.iter_questions():
            if question.id == question_id:
                return question
        return None

    def get_section(self, section_id: str) -> Optional[SectionDefinition]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def step_of(self, question_id: str) -> Optional[int]:
        """Index of the step containing a question, or None."""
        for index, step in enumerate(self.steps):
            if question_id in step.question_ids:
                return index
        return None
