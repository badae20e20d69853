"""Document editing endpoints."""

from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse

from api.errors import to_http
from api.schemas.requests import (
    ConflictsRequest,
    DiffActionRequest,
    ProposeRequest,
    SectionEditRequest,
    SelectSectionRequest,
)
from api.schemas.responses import ConflictView, EditorState, StoredDocumentResponse
from api.views import editor_state
from api.workspace import get_workspace
from docpilot.engine import SchemaBuilder, detect_conflicts, render_markdown
from docpilot.exceptions import DocPilotError, SuggestionInFlightError

router = APIRouter(prefix="/documents", tags=["Documents"])


def _state(document_type: str) -> EditorState:
    workspace = get_workspace()
    editor = workspace.get_editor(document_type)
    return editor_state(editor, workspace.status(editor.document.type))


@router.get("/{document_type}", response_model=EditorState)
async def get_document(document_type: str):
    """Current document, chat history and pending diff."""
    try:
        return _state(document_type)
    except DocPilotError as e:
        raise to_http(e)


@router.get("/{document_type}/markdown", response_class=PlainTextResponse)
async def get_markdown(document_type: str):
    """Document as Markdown, with the Not Legal Advice notice."""
    try:
        editor = get_workspace().get_editor(document_type)
    except DocPilotError as e:
        raise to_http(e)
    return render_markdown(editor.document)


@router.put("/{document_type}/sections/{section_id}", response_model=EditorState)
async def edit_section(document_type: str, section_id: str, request: SectionEditRequest):
    """Replace a section's content directly."""
    workspace = get_workspace()
    try:
        editor = workspace.get_editor(document_type)
        async with workspace.lock_for(editor.document.type):
            editor.edit_section(section_id, request.content)
        return _state(document_type)
    except DocPilotError as e:
        raise to_http(e)


@router.post("/{document_type}/select", response_model=EditorState)
async def select_section(document_type: str, request: SelectSectionRequest):
    try:
        get_workspace().get_editor(document_type).select_section(request.section_id)
        return _state(document_type)
    except DocPilotError as e:
        raise to_http(e)


@router.post("/{document_type}/propose", response_model=EditorState)
async def propose(document_type: str, request: ProposeRequest):
    """
    Ask for an edit in plain language.

    The reply (and its diff, if any) is appended to the chat. Rejected with
    409 while a diff is pending or another suggestion is being prepared.
    """
    workspace = get_workspace()
    try:
        editor = workspace.get_editor(document_type)
        lock = workspace.lock_for(editor.document.type)
        if lock.locked():
            raise SuggestionInFlightError(
                message="Another request for this document is in progress",
                document_type=editor.document.type.value,
            )
        async with lock:
            await editor.apropose(request.instruction)
        return _state(document_type)
    except DocPilotError as e:
        raise to_http(e)


@router.post("/{document_type}/apply", response_model=EditorState)
async def apply_diff(document_type: str, request: DiffActionRequest):
    """Apply the pending diff. Applying twice changes nothing."""
    workspace = get_workspace()
    try:
        editor = workspace.get_editor(document_type)
        async with workspace.lock_for(editor.document.type):
            editor.apply(request.diff_id)
        return _state(document_type)
    except DocPilotError as e:
        raise to_http(e)


@router.post("/{document_type}/dismiss", response_model=EditorState)
async def dismiss_diff(document_type: str, request: DiffActionRequest):
    workspace = get_workspace()
    try:
        editor = workspace.get_editor(document_type)
        async with workspace.lock_for(editor.document.type):
            editor.dismiss(request.diff_id)
        return _state(document_type)
    except DocPilotError as e:
        raise to_http(e)


@router.post("/{document_type}/reset", response_model=EditorState)
async def reset_chat(document_type: str):
    """Clear the chat history and drop any pending diff."""
    workspace = get_workspace()
    try:
        editor = workspace.get_editor(document_type)
        async with workspace.lock_for(editor.document.type):
            editor.reset()
        return _state(document_type)
    except DocPilotError as e:
        raise to_http(e)


@router.post("/{document_type}/save", response_model=StoredDocumentResponse)
async def save_document(document_type: str):
    """Save the current document as a draft."""
    workspace = get_workspace()
    try:
        editor = workspace.get_editor(document_type)
        async with workspace.lock_for(editor.document.type):
            stored = editor.save(workspace.store)
    except DocPilotError as e:
        raise to_http(e)
    return StoredDocumentResponse(
        type=stored.type.value,
        status=stored.status.value,
        saved_at=stored.saved_at,
        fingerprint=stored.fingerprint,
    )


@router.post("/{document_type}/publish", response_model=StoredDocumentResponse)
async def publish_document(document_type: str):
    """Mark the saved document as ready. Unsaved changes are rejected."""
    workspace = get_workspace()
    try:
        editor = workspace.get_editor(document_type)
        async with workspace.lock_for(editor.document.type):
            if editor.has_unsaved_changes:
                raise HTTPException(
                    status_code=409,
                    detail={"code": "DP_UNSAVED_CHANGES", "message": "Save the document before publishing"},
                )
            stored = workspace.store.publish(editor.document.type)
    except DocPilotError as e:
        raise to_http(e)
    return StoredDocumentResponse(
        type=stored.type.value,
        status=stored.status.value,
        saved_at=stored.saved_at,
        fingerprint=stored.fingerprint,
    )


@router.post("/{document_type}/conflicts", response_model=list[ConflictView])
async def find_conflicts(document_type: str, request: ConflictsRequest):
    """
    Compare the document with the schema built from newer answers.

    Lists the sections whose source values changed. Nothing is recompiled.
    """
    workspace = get_workspace()
    try:
        editor = workspace.get_editor(document_type)
        template = workspace.registry.get(editor.document.type)
        defaults = {**workspace.settings.identity_defaults(), **request.defaults}
        schema = SchemaBuilder(template).build(defaults, request.answers)
    except DocPilotError as e:
        raise to_http(e)
    return [ConflictView(**c.to_dict()) for c in detect_conflicts(editor.document, schema)]
