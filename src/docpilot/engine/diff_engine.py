"""
DocPilot Diff Engine

Conversational editing of a generated document. Instructions become
proposed, section-scoped diffs that the user explicitly applies or
dismisses; nothing touches the document until then.

Key components:
- DiffEngine: pure diff operations (apply, dismiss) plus `propose`
- DocumentEditingSession: one document's editing state (chat history,
  the single pending diff, selection, unsaved-changes flag)

Rules:
- At most one pending diff per document; proposing while one is pending
  or while a suggestion is in flight is rejected
- Applying replaces exactly the target section's content
- Applying is idempotent; a diff whose section no longer exists is a
  no-op and is dismissed
- Chat history is append-only except for an explicit reset
"""
from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Optional
from uuid import uuid4

from ..exceptions import (
    DiffPendingError,
    EditingError,
    SectionNotFoundError,
    SuggestionContractError,
    SuggestionInFlightError,
)
from ..models import (
    ChatMessage,
    ChatRole,
    Clarification,
    DiffStatus,
    GeneratedDocument,
    ProposedDiff,
    Suggestion,
)
from .schema_builder import utc_now
from .suggest import KeywordSuggester, SuggestEdit


logger = logging.getLogger(__name__)


def greeting_for(document: GeneratedDocument) -> str:
    kind = document.type.value.replace("-", " ")
    return (
        f"I've generated your {kind} based on your answers. You can edit any section "
        "directly, or ask me to make changes like:\n\n"
        "• \"Make the data collection section more detailed\"\n"
        "• \"Add a section about cookies\"\n"
        "• \"Make this stricter for Apple review\""
    )


# =============================================================================
# Diff Engine (pure operations)
# =============================================================================

class DiffEngine:
    """
    Pure diff operations.

    Usage:
        message = DiffEngine.propose(session, "Make this stricter for Apple review")
        document, diff = DiffEngine.apply(document, message.diff)
        diff = DiffEngine.dismiss(message.diff)
    """

    @staticmethod
    def apply(document: GeneratedDocument, diff: ProposedDiff) -> tuple[GeneratedDocument, ProposedDiff]:
        """
        Replace the target section's content with the diff's new content.

        Returns the new document and the settled diff (status APPLIED).
        A diff that is no longer pending comes back untouched with the same
        document. A diff whose section no longer exists leaves the document
        unchanged and comes back DISMISSED, so it cannot stay pending.
        """
        if not diff.is_pending:
            return document, diff
        if not document.has_section(diff.section_id):
            logger.info("Diff %s targets missing section %s; dismissed", diff.id, diff.section_id)
            return document, diff.mark_dismissed()
        return document.with_section_content(diff.section_id, diff.new_content), diff.mark_applied()

    @staticmethod
    def dismiss(diff: ProposedDiff) -> ProposedDiff:
        return diff.mark_dismissed()

    @staticmethod
    def propose(session: DocumentEditingSession, instruction: str) -> ChatMessage:
        return session.propose(instruction)


# =============================================================================
# Document Editing Session
# =============================================================================

@dataclass
class DocumentEditingSession:
    """
    Editing state for one generated document.

    Usage:
        session = DocumentEditingSession(document)
        reply = session.propose("Make this stricter for Apple review")
        if reply.diff:
            session.apply()

    `suggester` defaults to KeywordSuggester. Async collaborators must be
    driven through `apropose`.
    """

    document: GeneratedDocument
    suggester: Optional[SuggestEdit] = None
    clock: Callable[[], datetime] = utc_now
    messages: list[ChatMessage] = field(default_factory=list)
    selected_section_id: Optional[str] = None
    has_unsaved_changes: bool = False
    _pending: Optional[ProposedDiff] = None
    _in_flight: bool = False

    def __post_init__(self) -> None:
        if self.suggester is None:
            self.suggester = KeywordSuggester()
        if not self.messages:
            self.messages.append(self._message(ChatRole.ASSISTANT, greeting_for(self.document)))

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def pending_diff(self) -> Optional[ProposedDiff]:
        return self._pending

    @property
    def is_suggestion_in_flight(self) -> bool:
        return self._in_flight

    @property
    def can_propose(self) -> bool:
        return self._pending is None and not self._in_flight

    def pending_content(self, section_id: str) -> Optional[str]:
        """New content of the pending diff if it targets this section."""
        if self._pending is not None and self._pending.section_id == section_id:
            return self._pending.new_content
        return None

    # -------------------------------------------------------------------------
    # Proposals
    # -------------------------------------------------------------------------

    def propose(self, instruction: str) -> ChatMessage:
        """
        Ask the suggester for an edit and record the exchange.

        Returns:
            The assistant's reply; `reply.diff` is set when an edit was proposed

        Raises:
            DiffPendingError: If a diff is waiting to be applied or dismissed
            SuggestionInFlightError: If an async suggestion is outstanding
            SuggestionContractError: If the suggester names an unknown section
        """
        self._begin(instruction)
        try:
            result = self.suggester.suggest(self.document, instruction)
            if inspect.isawaitable(result):
                if hasattr(result, "close"):
                    result.close()
                raise EditingError(
                    message="Suggester is asynchronous; use apropose()",
                    document_type=self.document.type.value,
                )
            return self._accept(result)
        finally:
            self._in_flight = False

    async def apropose(self, instruction: str) -> ChatMessage:
        """Async variant of `propose` for collaborators that await a model."""
        self._begin(instruction)
        try:
            result = self.suggester.suggest(self.document, instruction)
            if inspect.isawaitable(result):
                result = await result
            return self._accept(result)
        finally:
            self._in_flight = False

    def _begin(self, instruction: str) -> None:
        if self._in_flight:
            raise SuggestionInFlightError(
                message="A suggestion is already being prepared",
                document_type=self.document.type.value,
            )
        if self._pending is not None:
            raise DiffPendingError(
                message="Apply or dismiss the pending change first",
                details={"diff_id": self._pending.id, "section_id": self._pending.section_id},
                document_type=self.document.type.value,
            )
        if not instruction or not instruction.strip():
            raise EditingError(
                message="Instruction is empty",
                document_type=self.document.type.value,
            )
        self.messages.append(self._message(ChatRole.USER, instruction))
        self._in_flight = True

    def _accept(self, result: Any) -> ChatMessage:
        if isinstance(result, Clarification):
            reply = self._message(ChatRole.ASSISTANT, result.message)
            self.messages.append(reply)
            logger.info("Suggester asked for clarification")
            return reply

        if not isinstance(result, Suggestion):
            raise SuggestionContractError(
                message=f"Suggester returned {type(result).__name__}",
                document_type=self.document.type.value,
            )

        section = self.document.get_section(result.section_id)
        if section is None:
            raise SuggestionContractError(
                message=f"Suggestion targets unknown section {result.section_id}",
                details={"section_id": result.section_id, "sections": self.document.section_ids},
                document_type=self.document.type.value,
            )

        diff = ProposedDiff(
            id=str(uuid4()),
            section_id=section.id,
            old_content=section.content,
            new_content=result.new_content,
        )
        reply = self._message(ChatRole.ASSISTANT, result.message, diff=diff)
        self.messages.append(reply)
        self._pending = diff
        logger.info("Proposed diff %s on section %s", diff.id, diff.section_id)
        return reply

    # -------------------------------------------------------------------------
    # Apply / Dismiss
    # -------------------------------------------------------------------------

    def apply(self, diff_id: Optional[str] = None) -> GeneratedDocument:
        """
        Apply the pending diff (or the diff with `diff_id`).

        Applying an already applied or dismissed diff changes nothing. A
        diff whose section has since disappeared is dismissed and the
        document is left as it is.

        Raises:
            EditingError: If `diff_id` names no diff in this session
        """
        diff = self._find_diff(diff_id)
        if diff is None or not diff.is_pending:
            return self.document

        updated, settled = DiffEngine.apply(self.document, diff)
        self._settle(settled)
        if not settled.applied:
            return self.document

        self.document = updated
        self.has_unsaved_changes = True
        logger.info("Applied diff %s to section %s", diff.id, diff.section_id)
        return self.document

    def dismiss(self, diff_id: Optional[str] = None) -> Optional[ProposedDiff]:
        """Dismiss the pending diff (or the diff with `diff_id`)."""
        diff = self._find_diff(diff_id)
        if diff is None:
            return None
        if not diff.is_pending:
            return diff
        dismissed = DiffEngine.dismiss(diff)
        self._settle(dismissed)
        logger.info("Dismissed diff %s", diff.id)
        return dismissed

    def _find_diff(self, diff_id: Optional[str]) -> Optional[ProposedDiff]:
        if diff_id is None:
            return self._pending
        if self._pending is not None and self._pending.id == diff_id:
            return self._pending
        for message in self.messages:
            if message.diff is not None and message.diff.id == diff_id:
                return message.diff
        raise EditingError(
            message=f"Unknown diff: {diff_id}",
            details={"diff_id": diff_id},
            document_type=self.document.type.value,
        )

    def _settle(self, diff: ProposedDiff) -> None:
        self.messages = [
            replace(m, diff=diff) if m.diff is not None and m.diff.id == diff.id else m
            for m in self.messages
        ]
        if self._pending is not None and self._pending.id == diff.id:
            self._pending = None

    # -------------------------------------------------------------------------
    # Direct editing
    # -------------------------------------------------------------------------

    def edit_section(self, section_id: str, content: str) -> GeneratedDocument:
        """Replace a section's content directly (no diff)."""
        self._require_section(section_id)
        self.document = self.document.with_section_content(section_id, content)
        self.has_unsaved_changes = True
        return self.document

    def select_section(self, section_id: Optional[str]) -> None:
        if section_id is not None:
            self._require_section(section_id)
        self.selected_section_id = section_id

    def mark_saved(self) -> None:
        self.has_unsaved_changes = False

    def save(self, store: Any) -> Any:
        """Persist the document as a draft and clear the unsaved flag."""
        stored = store.save(self.document.type, self.document, self.document.schema)
        self.mark_saved()
        return stored

    def reset(self) -> None:
        """Clear the chat history back to the greeting and drop any pending diff."""
        self._pending = None
        self.messages = [self._message(ChatRole.ASSISTANT, greeting_for(self.document))]

    def _require_section(self, section_id: str) -> None:
        if not self.document.has_section(section_id):
            raise SectionNotFoundError(
                message=f"Unknown section: {section_id}",
                details={"section_id": section_id, "sections": self.document.section_ids},
                document_type=self.document.type.value,
            )

    def _message(self, role: ChatRole, content: str, diff: Optional[ProposedDiff] = None) -> ChatMessage:
        return ChatMessage(
            id=str(uuid4()),
            role=role,
            content=content,
            timestamp=self.clock().isoformat(),
            diff=diff,
        )
