"""
DocPilot Models

All domain models for guided document generation, re-exported for
convenient imports:

    from docpilot.models import (
        # Enums
        DocumentType, QuestionType, RiskLevel, DiffStatus,
        # Conditions
        TriBool, Condition, Predicate, AND, OR, NOT, EQ,
        # Template
        InterviewTemplate, Step, Question, SectionDefinition,
        # Schema
        DocumentSchema, Features, Compliance, UserControls,
        # Document
        GeneratedDocument, Section,
        # Editing
        ProposedDiff, ChatMessage, Clarification,
    )
"""
from __future__ import annotations

# =============================================================================
# Enums
# =============================================================================
from .enums import (
    AgeRating,
    ArtifactStatus,
    ChatRole,
    ConditionOperator,
    DiffStatus,
    DocumentType,
    ModerationLevel,
    QuestionType,
    RiskLevel,
    UserControl,
)

# =============================================================================
# Conditions
# =============================================================================
from .conditions import (
    AND,
    CONTAINS,
    EQ,
    IN,
    IS_NOT_EMPTY,
    NE,
    NOT,
    OR,
    PRED,
    Condition,
    EvaluationResult,
    Predicate,
    TriBool,
)

# =============================================================================
# Template
# =============================================================================
from .template import (
    AnswerMap,
    AnswerValue,
    ContentBlock,
    ContentPart,
    DependsOn,
    InterviewTemplate,
    Lookup,
    PLACEHOLDER_PATTERN,
    Question,
    QuestionOption,
    SectionDefinition,
    Step,
)

# =============================================================================
# Schema
# =============================================================================
from .schema import (
    Compliance,
    DataType,
    DocumentSchema,
    Features,
    Moderation,
    ThirdParty,
    UserControls,
    is_schema_key,
)

# =============================================================================
# Document and Editing
# =============================================================================
from .document import GeneratedDocument, Section
from .editing import (
    ChatMessage,
    Clarification,
    ProposedDiff,
    SchemaConflict,
    Suggestion,
    SuggestionResult,
)


__all__ = [
    # Enums
    "AgeRating",
    "ArtifactStatus",
    "ChatRole",
    "ConditionOperator",
    "DiffStatus",
    "DocumentType",
    "ModerationLevel",
    "QuestionType",
    "RiskLevel",
    "UserControl",
    # Conditions
    "AND",
    "CONTAINS",
    "EQ",
    "IN",
    "IS_NOT_EMPTY",
    "NE",
    "NOT",
    "OR",
    "PRED",
    "Condition",
    "EvaluationResult",
    "Predicate",
    "TriBool",
    # Template
    "AnswerMap",
    "AnswerValue",
    "ContentBlock",
    "ContentPart",
    "DependsOn",
    "InterviewTemplate",
    "Lookup",
    "PLACEHOLDER_PATTERN",
    "Question",
    "QuestionOption",
    "SectionDefinition",
    "Step",
    # Schema
    "Compliance",
    "DataType",
    "DocumentSchema",
    "Features",
    "Moderation",
    "ThirdParty",
    "UserControls",
    "is_schema_key",
    # Document and Editing
    "ChatMessage",
    "Clarification",
    "GeneratedDocument",
    "ProposedDiff",
    "SchemaConflict",
    "Section",
    "Suggestion",
    "SuggestionResult",
]
