"""Mapping of DocPilot errors to HTTP errors."""

from fastapi import HTTPException

from docpilot.exceptions import (
    DiffPendingError,
    DocPilotError,
    DocumentNotFoundError,
    EditingError,
    InterviewClosedError,
    InterviewError,
    SectionNotFoundError,
    StepIndexError,
    StorageError,
    SuggestionContractError,
    SuggestionInFlightError,
    TemplateNotFoundError,
)


# Most specific first
STATUS_CODES: list[tuple[type, int]] = [
    (TemplateNotFoundError, 404),
    (DocumentNotFoundError, 404),
    (SectionNotFoundError, 404),
    (StepIndexError, 400),
    (InterviewClosedError, 409),
    (DiffPendingError, 409),
    (SuggestionInFlightError, 409),
    (SuggestionContractError, 502),
    (InterviewError, 422),
    (EditingError, 422),
    (StorageError, 500),
]


def to_http(error: DocPilotError) -> HTTPException:
    status_code = 500
    for error_type, code in STATUS_CODES:
        if isinstance(error, error_type):
            status_code = code
            break
    if error.code == "DP_INTERVIEW_NOT_FOUND":
        status_code = 404
    return HTTPException(status_code=status_code, detail=error.to_dict())
