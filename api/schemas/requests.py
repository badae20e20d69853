"""Request schemas for the API."""

from pydantic import BaseModel, Field
from typing import Any, Optional, Union


AnswerInput = Union[bool, str, list[str]]


class StartInterviewRequest(BaseModel):
    """Start an interview for one document type."""
    document_type: str = Field(..., description="privacy-policy|terms-of-service|faq")
    app_name: Optional[str] = Field(default=None, description="Overrides DP_APP_NAME")
    company_name: Optional[str] = Field(default=None, description="Overrides DP_COMPANY_NAME")
    contact_email: Optional[str] = Field(default=None, description="Overrides DP_CONTACT_EMAIL")
    answers: dict[str, AnswerInput] = Field(default={}, description="Pre-filled answers by question id")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "document_type": "privacy-policy",
                    "app_name": "Cal AI",
                    "company_name": "Cal AI Inc.",
                    "contact_email": "privacy@calai.app",
                }
            ]
        }
    }


class AnswerRequest(BaseModel):
    """Record one answer."""
    question_id: str = Field(..., description="Question id, e.g., 'has-ugc'")
    value: AnswerInput = Field(..., description="true/false, an option value, a list of option values, or text")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"question_id": "has-ugc", "value": False},
                {"question_id": "health-data-types", "value": ["weight", "calories"]},
            ]
        }
    }


class SectionEditRequest(BaseModel):
    """Replace a section's content directly."""
    content: str


class SelectSectionRequest(BaseModel):
    section_id: Optional[str] = None


class ProposeRequest(BaseModel):
    """Natural-language edit instruction."""
    instruction: str = Field(..., min_length=1, description="e.g., 'Make this stricter for Apple review'")


class DiffActionRequest(BaseModel):
    """Apply or dismiss a diff (the pending one when diff_id is omitted)."""
    diff_id: Optional[str] = None


class ConflictsRequest(BaseModel):
    """Answers for a newer schema to compare the document against."""
    answers: dict[str, AnswerInput] = Field(default={})
    defaults: dict[str, Any] = Field(default={}, description="Identity overrides and dotted schema keys")
