"""
DocPilot Exception Hierarchy

Domain-specific exceptions for guided document generation.
All exceptions include error codes for tracking and logging.

Exception codes follow the pattern: DP_<CATEGORY>_<SPECIFIC>

Flow outcomes that the caller is expected to handle as ordinary control
flow (an incomplete step, a stale diff) are NOT exceptions; they are
reported through return values by the engine.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class DocPilotError(Exception):
    """
    Base exception for all DocPilot errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (DP_*)
        details: Additional context about the error
        document_type: Associated document type if applicable
    """
    message: str
    code: str = "DP_INTERNAL_ERROR"
    details: dict[str, Any] = field(default_factory=dict)
    document_type: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.document_type:
            parts.append(f"(document: {self.document_type})")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logging/API responses."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.document_type:
            result["document_type"] = self.document_type
        return result


# =============================================================================
# Template Errors (fatal at load time)
# =============================================================================

@dataclass
class TemplateLoadError(DocPilotError):
    """Failed to read a template pack from disk."""
    code: str = "DP_TEMPLATE_LOAD_ERROR"


@dataclass
class TemplateValidationError(DocPilotError):
    """Template pack is structurally invalid or has broken references."""
    code: str = "DP_TEMPLATE_VALIDATION_ERROR"


@dataclass
class TemplateVersionMismatch(DocPilotError):
    """Template pack schema version is incompatible."""
    code: str = "DP_TEMPLATE_VERSION_MISMATCH"


@dataclass
class TemplateNotFoundError(DocPilotError):
    """No template is registered for the requested document type."""
    code: str = "DP_TEMPLATE_NOT_FOUND"


# =============================================================================
# Interview Errors
# =============================================================================

@dataclass
class InterviewError(DocPilotError):
    """Interview session used incorrectly."""
    code: str = "DP_INTERVIEW_ERROR"


@dataclass
class StepIndexError(InterviewError):
    """Step index outside the template's range (programmer error)."""
    code: str = "DP_STEP_INDEX_OUT_OF_RANGE"


@dataclass
class InterviewClosedError(InterviewError):
    """Interview already completed or cancelled."""
    code: str = "DP_INTERVIEW_CLOSED"


# =============================================================================
# Compilation Errors
# =============================================================================

@dataclass
class CompilationError(DocPilotError):
    """Section content could not be assembled."""
    code: str = "DP_COMPILATION_ERROR"


@dataclass
class ConditionEvaluationError(DocPilotError):
    """Condition evaluation failed."""
    code: str = "DP_CONDITION_EVAL_ERROR"


# =============================================================================
# Editing / Suggestion Errors
# =============================================================================

@dataclass
class EditingError(DocPilotError):
    """Document editing session used incorrectly."""
    code: str = "DP_EDITING_ERROR"


@dataclass
class DiffPendingError(EditingError):
    """A proposed diff is still awaiting apply or dismiss."""
    code: str = "DP_DIFF_PENDING"


@dataclass
class SuggestionInFlightError(EditingError):
    """A suggestion request is already outstanding for this document."""
    code: str = "DP_SUGGESTION_IN_FLIGHT"


@dataclass
class SuggestionContractError(EditingError):
    """Suggestion collaborator returned a diff for a section not in the document."""
    code: str = "DP_SUGGESTION_CONTRACT_VIOLATION"


@dataclass
class SectionNotFoundError(EditingError):
    """Manual edit targeted a section that does not exist."""
    code: str = "DP_SECTION_NOT_FOUND"


# =============================================================================
# Storage Errors
# =============================================================================

@dataclass
class StorageError(DocPilotError):
    """Document store read or write failed."""
    code: str = "DP_STORAGE_ERROR"


@dataclass
class DocumentNotFoundError(StorageError):
    """No saved document exists for the requested type."""
    code: str = "DP_DOCUMENT_NOT_FOUND"
