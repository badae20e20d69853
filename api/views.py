"""Conversion of engine objects into API response models."""

from docpilot.engine import DocumentEditingSession, InterviewSession
from docpilot.models import ArtifactStatus, InterviewTemplate, Question, Step

from api.schemas.responses import (
    EditorState,
    InterviewState,
    OptionView,
    QuestionView,
    SectionRuleView,
    StepView,
    TemplateDetail,
)


def question_view(question: Question) -> QuestionView:
    return QuestionView(
        id=question.id,
        type=question.type.value,
        prompt=question.prompt,
        description=question.description,
        platform_tip=question.platform_tip,
        risk_level=question.risk_level.value if question.risk_level else None,
        options=[
            OptionView(value=o.value, label=o.label, description=o.description, risk_flag=o.risk_flag)
            for o in question.options
        ],
        depends_on=(
            {"question_id": question.depends_on.question_id, "value": question.depends_on.value}
            if question.depends_on else None
        ),
        default=question.default,
    )


def step_view(step: Step) -> StepView:
    return StepView(
        id=step.id,
        title=step.title,
        description=step.description,
        icon=step.icon,
        questions=[question_view(q) for q in step.questions],
    )


def template_detail(template: InterviewTemplate) -> TemplateDetail:
    return TemplateDetail(
        type=template.type.value,
        name=template.name,
        description=template.description,
        version=template.version,
        steps=[step_view(s) for s in template.steps],
        sections=[
            SectionRuleView(
                id=s.id,
                title=s.title,
                required=s.required,
                risk_level=s.risk_level.value if s.risk_level else None,
                tags=list(s.tags),
            )
            for s in template.sections
        ],
    )


def interview_state(interview_id: str, session: InterviewSession) -> InterviewState:
    step = session.current_step
    return InterviewState(
        interview_id=interview_id,
        document_type=session.template.type.value,
        status=session.status.value,
        step_index=session.step_index,
        step_count=session.template.step_count,
        progress=session.progress,
        step=step_view(step),
        visible_question_ids=[q.id for q in session.visible_questions],
        step_complete=session.is_step_complete,
        answers=dict(session.answers),
    )


def editor_state(editor: DocumentEditingSession, status: ArtifactStatus) -> EditorState:
    pending = editor.pending_diff
    return EditorState(
        document=editor.document.to_dict(),
        messages=[m.to_dict() for m in editor.messages],
        pending_diff=pending.to_dict() if pending else None,
        can_propose=editor.can_propose,
        has_unsaved_changes=editor.has_unsaved_changes,
        selected_section_id=editor.selected_section_id,
        status=status.value,
    )
