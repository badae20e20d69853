"""
DocPilot Enumerations

All enumeration types used throughout the DocPilot system.

All enums inherit from (str, Enum) for JSON serialization compatibility.
"""
from __future__ import annotations

from enum import Enum


# =============================================================================
# Document Types
# =============================================================================

class DocumentType(str, Enum):
    """Documents that can be produced by a guided interview."""
    PRIVACY_POLICY = "privacy-policy"
    TERMS_OF_SERVICE = "terms-of-service"
    FAQ = "faq"


# =============================================================================
# Questions
# =============================================================================

class QuestionType(str, Enum):
    """Input kinds a question can ask for."""
    CONFIRM = "confirm"            # Yes/No
    SELECT_ONE = "select-one"
    SELECT_MANY = "select-many"
    TEXT = "text"
    TEXT_LONG = "text-long"

    @property
    def has_options(self) -> bool:
        return self in {QuestionType.SELECT_ONE, QuestionType.SELECT_MANY}


class RiskLevel(str, Enum):
    """Review risk attached to a question or section."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# =============================================================================
# Schema Values
# =============================================================================

class AgeRating(str, Enum):
    """App Store age rating tiers."""
    FOUR_PLUS = "4+"
    NINE_PLUS = "9+"
    TWELVE_PLUS = "12+"
    SEVENTEEN_PLUS = "17+"
    NONE = "none"


class ModerationLevel(str, Enum):
    """Strength of content moderation for UGC apps."""
    NONE = "none"
    BASIC = "basic"
    ADVANCED = "advanced"


class UserControl(str, Enum):
    """What a user can do with a collected data type."""
    DELETABLE = "deletable"
    EXPORTABLE = "exportable"
    OPT_OUT = "opt-out"
    NONE = "none"


# =============================================================================
# Conditions
# =============================================================================

class ConditionOperator(str, Enum):
    """Operators for section and block conditions."""
    # Logical
    AND = "and"
    OR = "or"
    NOT = "not"

    # Comparison
    EQ = "eq"
    NE = "ne"
    IN = "in"
    NOT_IN = "not_in"
    CONTAINS = "contains"

    # Presence
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"
    IS_EMPTY = "is_empty"
    IS_NOT_EMPTY = "is_not_empty"


# =============================================================================
# Editing
# =============================================================================

class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class DiffStatus(str, Enum):
    """
    Lifecycle of a proposed diff.

    PENDING moves to exactly one of APPLIED or DISMISSED; both are terminal.
    """
    PENDING = "pending"
    APPLIED = "applied"
    DISMISSED = "dismissed"


class ArtifactStatus(str, Enum):
    """Publication state of a stored document."""
    NOT_CREATED = "not_created"
    DRAFT = "draft"
    READY = "ready"
