"""Response schemas for the API."""

from pydantic import BaseModel
from typing import Any, Optional


# =============================================================================
# Templates
# =============================================================================

class TemplateSummary(BaseModel):
    """Template listing entry."""
    type: str
    name: str
    description: str
    version: str
    step_count: int
    section_count: int
    status: str  # not_created|draft|ready


class OptionView(BaseModel):
    value: str
    label: str
    description: Optional[str] = None
    risk_flag: Optional[str] = None


class QuestionView(BaseModel):
    """A question as shown to the user."""
    id: str
    type: str  # confirm|select-one|select-many|text|text-long
    prompt: str
    description: Optional[str] = None
    platform_tip: Optional[str] = None
    risk_level: Optional[str] = None
    options: list[OptionView] = []
    depends_on: Optional[dict[str, Any]] = None
    default: Optional[Any] = None


class StepView(BaseModel):
    id: str
    title: str
    description: str
    icon: Optional[str] = None
    questions: list[QuestionView]


class SectionRuleView(BaseModel):
    id: str
    title: str
    required: bool
    risk_level: Optional[str] = None
    tags: list[str] = []


class TemplateDetail(BaseModel):
    """Full template: steps, questions and section rules."""
    type: str
    name: str
    description: str
    version: str
    steps: list[StepView]
    sections: list[SectionRuleView]


# =============================================================================
# Interviews
# =============================================================================

class InterviewState(BaseModel):
    """Current state of an interview."""
    interview_id: str
    document_type: str
    status: str  # active|completed|cancelled
    step_index: int
    step_count: int
    progress: float
    step: StepView
    visible_question_ids: list[str]
    step_complete: bool
    answers: dict[str, Any]


class AdvanceResponse(BaseModel):
    outcome: str  # moved|blocked|completed
    missing: list[str] = []
    interview: InterviewState
    document: Optional[dict[str, Any]] = None


class RetreatResponse(BaseModel):
    outcome: str  # moved|cancelled
    interview: InterviewState


# =============================================================================
# Documents
# =============================================================================

class EditorState(BaseModel):
    """Document plus its editing session."""
    document: dict[str, Any]
    messages: list[dict[str, Any]]
    pending_diff: Optional[dict[str, Any]] = None
    can_propose: bool
    has_unsaved_changes: bool
    selected_section_id: Optional[str] = None
    status: str  # not_created|draft|ready


class StoredDocumentResponse(BaseModel):
    type: str
    status: str
    saved_at: str
    fingerprint: str


class ConflictView(BaseModel):
    section_id: str
    schema_key: str
    message: str
    old_value: Optional[Any] = None
    new_value: Optional[Any] = None
