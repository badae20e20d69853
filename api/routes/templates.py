"""Template endpoints."""

from fastapi import APIRouter

from api.errors import to_http
from api.schemas.responses import TemplateDetail, TemplateSummary
from api.views import template_detail
from api.workspace import get_workspace
from docpilot.exceptions import DocPilotError

router = APIRouter(prefix="/templates", tags=["Templates"])


@router.get("", response_model=list[TemplateSummary])
async def list_templates():
    """List the available document templates with their artifact status."""
    workspace = get_workspace()
    return [
        TemplateSummary(
            type=t.type.value,
            name=t.name,
            description=t.description,
            version=t.version,
            step_count=t.step_count,
            section_count=len(t.sections),
            status=workspace.status(t.type).value,
        )
        for t in workspace.registry.list_templates()
    ]


@router.get("/{document_type}", response_model=TemplateDetail)
async def get_template(document_type: str):
    """Get a template's steps, questions and section rules."""
    try:
        template = get_workspace().registry.get(document_type)
    except DocPilotError as e:
        raise to_http(e)
    return template_detail(template)
