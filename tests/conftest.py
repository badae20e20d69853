"""
Pytest configuration and fixtures for DocPilot tests.

Provides helper factories and common fixtures matching actual model definitions.
"""
import pytest
from datetime import datetime, timezone

from docpilot.engine import TemplateRegistry
from docpilot.models import (
    ContentBlock,
    DependsOn,
    DocumentSchema,
    DocumentType,
    GeneratedDocument,
    InterviewTemplate,
    Question,
    QuestionOption,
    QuestionType,
    Section,
    SectionDefinition,
    Step,
)


FIXED_NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


IDENTITY = {
    "app_name": "Cal AI",
    "company_name": "Cal AI Inc.",
    "contact_email": "privacy@calai.app",
    "effective_date": "2026-01-15",
}


# =============================================================================
# Factory Helpers
# =============================================================================

def make_question(
    id: str,
    type: QuestionType = QuestionType.CONFIRM,
    schema_key: str = None,
    depends_on: tuple = None,
    options: list = None,
    default=None,
    also_sets: tuple = (),
) -> Question:
    """Create a Question; `depends_on` is a (question_id, value) pair."""
    return Question(
        id=id,
        type=type,
        prompt=f"{id}?",
        schema_key=schema_key or f"custom_answers.{id.replace('-', '_')}",
        options=tuple(QuestionOption(value=v, label=v.title()) for v in (options or [])),
        depends_on=DependsOn(*depends_on) if depends_on else None,
        default=default,
        also_sets=tuple(also_sets),
    )


def make_step(id: str, *questions: Question) -> Step:
    return Step(id=id, title=id.replace("-", " ").title(), questions=tuple(questions))


def make_section_definition(
    id: str,
    text: str = "Content for {app_name}.",
    required: bool = True,
    include_when=None,
    schema_keys: tuple = (),
    blocks: tuple = None,
) -> SectionDefinition:
    return SectionDefinition(
        id=id,
        title=id.replace("-", " ").title(),
        required=required,
        include_when=include_when,
        schema_keys=tuple(schema_keys),
        blocks=blocks if blocks is not None else (ContentBlock(text=text),),
    )


def make_template(
    steps: list = None,
    sections: list = None,
    type: DocumentType = DocumentType.FAQ,
    schema_defaults: dict = None,
) -> InterviewTemplate:
    """
    Create a template. Defaults to two steps: has-ugc (+ dependent
    has-livestream) then has-dms.
    """
    if steps is None:
        steps = [
            make_step(
                "classification",
                make_question("has-ugc", schema_key="features.has_user_generated_content"),
                make_question(
                    "has-livestream",
                    schema_key="features.has_livestreaming",
                    depends_on=("has-ugc", True),
                ),
            ),
            make_step(
                "messaging",
                make_question("has-dms", schema_key="features.has_direct_messaging"),
            ),
        ]
    if sections is None:
        sections = [make_section_definition("introduction", schema_keys=("app_name",))]
    return InterviewTemplate(
        type=type,
        name="Test Template",
        description="Template used in tests",
        title="{app_name} Test Document",
        steps=tuple(steps),
        sections=tuple(sections),
        schema_defaults=schema_defaults or {},
    )


def make_section(id: str, content: str = None, title: str = None, schema_keys: tuple = ()) -> Section:
    return Section(
        id=id,
        title=title or id.replace("-", " ").title(),
        content=content if content is not None else f"Original {id} content.",
        schema_keys=tuple(schema_keys),
    )


def make_document(
    sections: list = None,
    type: DocumentType = DocumentType.PRIVACY_POLICY,
    schema: DocumentSchema = None,
) -> GeneratedDocument:
    """Create a document; defaults to introduction + data-collection sections."""
    if sections is None:
        sections = [
            make_section("introduction", "Cal AI Inc. operates Cal AI."),
            make_section(
                "data-collection",
                "We may collect the following types of information:",
                title="Information We Collect",
            ),
        ]
    return GeneratedDocument(
        type=type,
        title="Cal AI Privacy Policy",
        last_updated="2026-01-15",
        sections=tuple(sections),
        schema=schema or DocumentSchema(app_name="Cal AI", company_name="Cal AI Inc."),
    )


def make_pack_data(**overrides) -> dict:
    """A minimal valid template pack dict; top-level keys can be overridden."""
    data = {
        "schema_version": "1.0.0",
        "type": "faq",
        "name": "Test FAQ",
        "description": "Minimal pack",
        "title": "{app_name} FAQ",
        "steps": [
            {
                "id": "basics",
                "title": "Basics",
                "questions": [
                    {
                        "id": "has-ugc",
                        "type": "confirm",
                        "prompt": "Does your app have user-generated content?",
                        "schema_key": "features.has_user_generated_content",
                    },
                    {
                        "id": "has-livestream",
                        "type": "confirm",
                        "prompt": "Does your app include livestreaming?",
                        "schema_key": "features.has_livestreaming",
                        "depends_on": {"question_id": "has-ugc", "value": True},
                    },
                ],
            },
        ],
        "sections": [
            {
                "id": "introduction",
                "title": "Introduction",
                "blocks": [{"text": "{app_name} is operated by {company_name}."}],
            },
        ],
    }
    data.update(overrides)
    return data


def make_privacy_answers(**overrides) -> dict:
    """
    Answers completing every step of the built-in privacy policy.

    Keyword overrides use underscores (has_ugc=True sets "has-ugc").
    """
    answers = {
        "has-ugc": False,
        "has-dms": False,
        "has-public-profiles": False,
        "has-iap": False,
        "collects-health": False,
        "uses-camera": False,
        "uses-location": False,
        "uses-analytics": True,
        "third-party-services": ["firebase"],
        "shares-data-advertising": False,
        "can-delete-account": True,
        "can-export-data": False,
        "data-retention": "30-days",
        "age-rating": "4+",
        "targets-children": False,
        "has-eu-users": False,
    }
    answers.update({key.replace("_", "-"): value for key, value in overrides.items()})
    return answers


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def registry():
    """Registry with the built-in packs."""
    return TemplateRegistry.default()


@pytest.fixture
def privacy_template(registry):
    return registry.get(DocumentType.PRIVACY_POLICY)


@pytest.fixture
def faq_template(registry):
    return registry.get(DocumentType.FAQ)


@pytest.fixture
def template():
    return make_template()
