"""
DocPilot Engine

Core services for guided document generation and conversational editing.

Services:
- TemplateRegistry: Available interview templates by document type
- InterviewEngine / InterviewSession: Step through questions
- SchemaBuilder: Project answers onto a DocumentSchema
- DocumentCompiler: Render a schema into a sectioned document
- DiffEngine / DocumentEditingSession: Propose, apply and dismiss edits
- KeywordSuggester: Built-in suggestion collaborator

Usage:
    from docpilot.engine import (
        TemplateRegistry,
        InterviewSession,
        DocumentEditingSession,
    )

    registry = TemplateRegistry.default()
    session = InterviewSession(registry.get("privacy-policy"))
"""
from __future__ import annotations

from .condition_evaluator import (
    ConditionEvaluator,
    check_condition,
    compare_values,
    evaluate_condition,
    resolve_field_path,
    strict_equals,
)
from .registry import TemplateRegistry
from .schema_builder import (
    FEATURE_DATA_TYPES,
    THIRD_PARTY_SERVICES,
    SchemaBuilder,
    assign_schema_key,
    build_schema,
)
from .compiler import (
    DocumentCompiler,
    compile_document,
    missing_placeholder,
)
from .suggest import KeywordSuggester, SuggestEdit
from .diff_engine import DiffEngine, DocumentEditingSession
from .interview import (
    AdvanceOutcome,
    AdvanceResult,
    InterviewEngine,
    InterviewSession,
    InterviewStatus,
    RetreatOutcome,
)
from .visibility import is_empty_answer, is_visible
from .conflicts import detect_conflicts
from .rendering import render_markdown


__all__ = [
    # Conditions
    "ConditionEvaluator",
    "check_condition",
    "compare_values",
    "evaluate_condition",
    "resolve_field_path",
    "strict_equals",
    # Templates
    "TemplateRegistry",
    # Interview
    "AdvanceOutcome",
    "AdvanceResult",
    "InterviewEngine",
    "InterviewSession",
    "InterviewStatus",
    "RetreatOutcome",
    "is_empty_answer",
    "is_visible",
    # Schema
    "FEATURE_DATA_TYPES",
    "THIRD_PARTY_SERVICES",
    "SchemaBuilder",
    "assign_schema_key",
    "build_schema",
    # Compiler
    "DocumentCompiler",
    "compile_document",
    "missing_placeholder",
    # Editing
    "DiffEngine",
    "DocumentEditingSession",
    "KeywordSuggester",
    "SuggestEdit",
    "detect_conflicts",
    "render_markdown",
]
