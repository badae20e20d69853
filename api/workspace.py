"""
Shared service state.

One Workspace per running app: the template registry, the document store,
live interviews, and one editing session plus one asyncio.Lock per
document type. Document mutations hold the type's lock.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Optional
from uuid import uuid4

from docpilot.config import Settings
from docpilot.engine import (
    DocumentEditingSession,
    InterviewSession,
    TemplateRegistry,
)
from docpilot.engine.suggest import KeywordSuggester, SuggestEdit
from docpilot.exceptions import DocumentNotFoundError, InterviewError
from docpilot.models import ArtifactStatus, DocumentType
from docpilot.storage import DocumentStore


logger = logging.getLogger("docpilot.api")


@dataclass
class Workspace:
    settings: Settings
    registry: TemplateRegistry
    store: DocumentStore
    suggester: SuggestEdit = field(default_factory=KeywordSuggester)
    interviews: dict[str, InterviewSession] = field(default_factory=dict)
    editors: dict[DocumentType, DocumentEditingSession] = field(default_factory=dict)
    locks: dict[DocumentType, asyncio.Lock] = field(default_factory=dict)

    def lock_for(self, document_type: DocumentType) -> asyncio.Lock:
        if document_type not in self.locks:
            self.locks[document_type] = asyncio.Lock()
        return self.locks[document_type]

    # -------------------------------------------------------------------------
    # Interviews
    # -------------------------------------------------------------------------

    def start_interview(self, document_type: str, defaults: dict[str, Any]) -> tuple[str, InterviewSession]:
        template = self.registry.get(document_type)
        identity = {**self.settings.identity_defaults(), **defaults}
        session = InterviewSession(template, defaults=identity)
        interview_id = str(uuid4())
        self.interviews[interview_id] = session
        logger.info("Started interview %s for %s", interview_id, template.type.value)
        return interview_id, session

    def get_interview(self, interview_id: str) -> InterviewSession:
        session = self.interviews.get(interview_id)
        if session is None:
            raise InterviewError(
                message=f"Interview '{interview_id}' not found",
                code="DP_INTERVIEW_NOT_FOUND",
                details={"interview_id": interview_id},
            )
        return session

    def open_editor_from_interview(self, session: InterviewSession) -> DocumentEditingSession:
        editor = session.start_editing(self.suggester)
        self.editors[session.template.type] = editor
        return editor

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    def get_editor(self, document_type: str) -> DocumentEditingSession:
        """
        Editing session for a type, reopened from the store when needed.

        Raises:
            TemplateNotFoundError: Unknown document type
            DocumentNotFoundError: Nothing generated or saved yet
        """
        key = self.registry.get(document_type).type
        editor = self.editors.get(key)
        if editor is not None:
            return editor

        stored = self.store.load(key)
        if stored is None:
            raise DocumentNotFoundError(
                message=f"No {key.value} has been generated yet",
                document_type=key.value,
            )
        editor = DocumentEditingSession(document=stored.document, suggester=self.suggester)
        self.editors[key] = editor
        return editor

    def status(self, document_type: DocumentType) -> ArtifactStatus:
        if self.store.load(document_type) is not None:
            return self.store.status(document_type)
        if document_type in self.editors:
            return ArtifactStatus.DRAFT
        return ArtifactStatus.NOT_CREATED


_workspace: Optional[Workspace] = None


def set_workspace(workspace: Workspace) -> None:
    global _workspace
    _workspace = workspace


def get_workspace() -> Workspace:
    if _workspace is None:
        raise RuntimeError("Workspace not initialised; start the app through its lifespan")
    return _workspace
