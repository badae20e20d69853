"""
DocPilot - Guided Legal Document Generation

DocPilot walks an app developer through a short interview, compiles the
answers into a structured schema, renders a sectioned legal document
(privacy policy, terms of service, FAQ) and then accepts plain-language
edit requests as proposed, section-scoped diffs.

Core Principle: "The user decides. DocPilot drafts and proposes."
Nothing DocPilot produces is legal advice.

Quick Start:
    from docpilot import TemplateRegistry, InterviewSession

    registry = TemplateRegistry.default()
    session = InterviewSession(registry.get("privacy-policy"))
    session.answer("has-ugc", False)
    ...
    result = session.advance()
    if result.is_completed:
        editor = session.start_editing()
        reply = editor.propose("Make this stricter for Apple review")
        editor.apply()

Version: 0.1.0
"""
from __future__ import annotations

__version__ = "0.1.0"
__author__ = "DocPilot Team"

# =============================================================================
# Core Models (Re-exported for convenience)
# =============================================================================
from .models import (
    AgeRating,
    ArtifactStatus,
    ChatMessage,
    Clarification,
    DiffStatus,
    DocumentSchema,
    DocumentType,
    GeneratedDocument,
    InterviewTemplate,
    ProposedDiff,
    Question,
    QuestionType,
    Section,
    Step,
    Suggestion,
    TriBool,
)

# =============================================================================
# Engine
# =============================================================================
from .engine import (
    AdvanceOutcome,
    AdvanceResult,
    DiffEngine,
    DocumentCompiler,
    DocumentEditingSession,
    InterviewEngine,
    InterviewSession,
    KeywordSuggester,
    SchemaBuilder,
    SuggestEdit,
    TemplateRegistry,
    detect_conflicts,
    render_markdown,
)

# =============================================================================
# Infrastructure
# =============================================================================
from .config import Settings
from .exceptions import DocPilotError
from .storage import (
    DocumentStore,
    FileDocumentStore,
    InMemoryDocumentStore,
    StoredDocument,
    create_store,
)


__all__ = [
    "__version__",
    # Models
    "AgeRating",
    "ArtifactStatus",
    "ChatMessage",
    "Clarification",
    "DiffStatus",
    "DocumentSchema",
    "DocumentType",
    "GeneratedDocument",
    "InterviewTemplate",
    "ProposedDiff",
    "Question",
    "QuestionType",
    "Section",
    "Step",
    "Suggestion",
    "TriBool",
    # Engine
    "AdvanceOutcome",
    "AdvanceResult",
    "DiffEngine",
    "DocumentCompiler",
    "DocumentEditingSession",
    "InterviewEngine",
    "InterviewSession",
    "KeywordSuggester",
    "SchemaBuilder",
    "SuggestEdit",
    "TemplateRegistry",
    "detect_conflicts",
    "render_markdown",
    # Infrastructure
    "DocPilotError",
    "DocumentStore",
    "FileDocumentStore",
    "InMemoryDocumentStore",
    "Settings",
    "StoredDocument",
    "create_store",
]
