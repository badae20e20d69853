"""Interview endpoints."""

from fastapi import APIRouter

from api.errors import to_http
from api.schemas.requests import AnswerRequest, StartInterviewRequest
from api.schemas.responses import AdvanceResponse, InterviewState, RetreatResponse
from api.views import interview_state
from api.workspace import get_workspace
from docpilot.exceptions import DocPilotError

router = APIRouter(prefix="/interviews", tags=["Interviews"])


@router.post("", response_model=InterviewState, status_code=201)
async def start_interview(request: StartInterviewRequest):
    """
    Start an interview for a document type.

    Identity fields left out fall back to the DP_APP_NAME, DP_COMPANY_NAME
    and DP_CONTACT_EMAIL settings.
    """
    workspace = get_workspace()
    defaults = {
        key: value
        for key, value in (
            ("app_name", request.app_name),
            ("company_name", request.company_name),
            ("contact_email", request.contact_email),
        )
        if value
    }
    try:
        interview_id, session = workspace.start_interview(request.document_type, defaults)
        for question_id, value in request.answers.items():
            session.answer(question_id, value)
    except DocPilotError as e:
        raise to_http(e)
    return interview_state(interview_id, session)


@router.get("/{interview_id}", response_model=InterviewState)
async def get_interview(interview_id: str):
    try:
        session = get_workspace().get_interview(interview_id)
    except DocPilotError as e:
        raise to_http(e)
    return interview_state(interview_id, session)


@router.post("/{interview_id}/answers", response_model=InterviewState)
async def record_answer(interview_id: str, request: AnswerRequest):
    """Record an answer. Questions on later steps may be pre-filled."""
    try:
        session = get_workspace().get_interview(interview_id)
        session.answer(request.question_id, request.value)
    except DocPilotError as e:
        raise to_http(e)
    return interview_state(interview_id, session)


@router.post("/{interview_id}/advance", response_model=AdvanceResponse)
async def advance(interview_id: str):
    """
    Leave the current step.

    Returns outcome "blocked" with the missing question ids when visible
    questions are unanswered. Advancing from the last step compiles the
    document and opens its editing session.
    """
    workspace = get_workspace()
    try:
        session = workspace.get_interview(interview_id)
        async with workspace.lock_for(session.template.type):
            result = session.advance()
            if result.is_completed:
                workspace.open_editor_from_interview(session)
    except DocPilotError as e:
        raise to_http(e)

    return AdvanceResponse(
        outcome=result.outcome.value,
        missing=list(result.missing),
        interview=interview_state(interview_id, session),
        document=result.document.to_dict() if result.document else None,
    )


@router.post("/{interview_id}/retreat", response_model=RetreatResponse)
async def retreat(interview_id: str):
    """Go back one step; from the first step this cancels the interview."""
    try:
        session = get_workspace().get_interview(interview_id)
        outcome = session.retreat()
    except DocPilotError as e:
        raise to_http(e)
    return RetreatResponse(outcome=outcome.value, interview=interview_state(interview_id, session))
