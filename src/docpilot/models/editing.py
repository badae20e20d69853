"""
DocPilot Editing Models

Value types exchanged during conversational editing: proposed diffs, the
suggestion collaborator's clarification reply, chat messages and schema
conflicts.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional, Union

from .enums import ChatRole, DiffStatus


@dataclass(frozen=True)
class ProposedDiff:
    """
    A suggested replacement of one section's content.

    Lifecycle: PENDING -> APPLIED | DISMISSED (both terminal). Transitions
    return new values; a diff is never mutated in place.
    """
    id: str
    section_id: str
    old_content: str
    new_content: str
    status: DiffStatus = DiffStatus.PENDING

    @property
    def applied(self) -> bool:
        return self.status == DiffStatus.APPLIED

    @property
    def is_pending(self) -> bool:
        return self.status == DiffStatus.PENDING

    def mark_applied(self) -> ProposedDiff:
        if self.status == DiffStatus.DISMISSED:
            return self
        return replace(self, status=DiffStatus.APPLIED)

    def mark_dismissed(self) -> ProposedDiff:
        if self.status == DiffStatus.APPLIED:
            return self
        return replace(self, status=DiffStatus.DISMISSED)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "section_id": self.section_id,
            "old_content": self.old_content,
            "new_content": self.new_content,
            "status": self.status.value,
            "applied": self.applied,
        }


@dataclass(frozen=True)
class Suggestion:
    """Diff returned by a suggestion collaborator, with its chat reply."""
    section_id: str
    new_content: str
    message: str


@dataclass(frozen=True)
class Clarification:
    """Suggestion collaborator could not map the instruction to an edit."""
    message: str


SuggestionResult = Union[Suggestion, Clarification]


@dataclass(frozen=True)
class ChatMessage:
    """One entry of the editing session's append-only chat history."""
    id: str
    role: ChatRole
    content: str
    timestamp: str
    diff: Optional[ProposedDiff] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role.value,
            "content": self.content,
            "timestamp": self.timestamp,
            "diff": self.diff.to_dict() if self.diff else None,
        }


@dataclass(frozen=True)
class SchemaConflict:
    """A section built from a schema value that has since changed."""
    section_id: str
    schema_key: str
    message: str
    old_value: Any = None
    new_value: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "section_id": self.section_id,
            "schema_key": self.schema_key,
            "message": self.message,
            "old_value": self.old_value,
            "new_value": self.new_value,
        }
