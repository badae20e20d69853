"""
Tests for the DocPilot Document Compiler

Tests cover:
- Required and optional section emission (TRUE / FALSE / UNKNOWN triggers)
- Block kinds: text, parts, each (with empty fallback), lookups
- Missing placeholders rendered as visible markers
- Determinism of compiled output
- Built-in privacy policy, terms and FAQ scenarios
"""
from datetime import datetime, timezone

import pytest

from docpilot.canon import canonical_json, document_fingerprint
from docpilot.engine import DocumentCompiler, SchemaBuilder, compile_document, missing_placeholder, render_markdown
from docpilot.engine.compiler import format_value
from docpilot.models import (
    EQ,
    ContentBlock,
    ContentPart,
    DataType,
    DocumentSchema,
    DocumentType,
    Features,
    Lookup,
    SectionDefinition,
)

from tests.conftest import IDENTITY, fixed_clock, make_privacy_answers, make_section_definition, make_template


def _schema(**kwargs) -> DocumentSchema:
    return DocumentSchema(app_name="Cal AI", company_name="Cal AI Inc.", effective_date="2026-01-15", **kwargs)


def _compile_privacy(template, answers):
    schema = SchemaBuilder(template, clock=fixed_clock).build(IDENTITY, answers)
    return DocumentCompiler().compile(template, schema)


# =============================================================================
# Section emission
# =============================================================================

class TestSectionEmission:
    def test_required_sections_always_emitted(self):
        template = make_template(sections=[make_section_definition("introduction")])
        document = compile_document(template, _schema())
        assert document.section_ids == ["introduction"]
        assert document.sections[0].content == "Content for Cal AI."

    def test_optional_section_true_false(self):
        camera = make_section_definition(
            "camera-usage", required=False, include_when=EQ("features.uses_camera", True),
        )
        template = make_template(sections=[make_section_definition("introduction"), camera])

        assert compile_document(template, _schema()).section_ids == ["introduction"]
        with_camera = compile_document(template, _schema(features=Features(uses_camera=True)))
        assert with_camera.section_ids == ["introduction", "camera-usage"]

    def test_unknown_trigger_omits_section(self, caplog):
        section = make_section_definition(
            "mystery", required=False, include_when=EQ("custom_answers.never_asked", True),
        )
        template = make_template(sections=[make_section_definition("introduction"), section])
        with caplog.at_level("INFO", logger="docpilot.engine.compiler"):
            document = compile_document(template, _schema())
        assert document.section_ids == ["introduction"]
        assert "UNKNOWN" in caplog.text

    def test_section_metadata_copied(self):
        template = make_template(sections=[make_section_definition("contact", schema_keys=("contact_email",))])
        section = compile_document(template, _schema()).sections[0]
        assert section.schema_keys == ("contact_email",)
        assert section.is_required is True

    def test_last_updated_is_effective_date(self):
        document = compile_document(make_template(), _schema())
        assert document.last_updated == "2026-01-15"

    def test_clock_overrides_last_updated(self):
        compiler = DocumentCompiler(clock=lambda: datetime(2026, 3, 1, tzinfo=timezone.utc))
        assert compiler.compile(make_template(), _schema()).last_updated.startswith("2026-03-01")


# =============================================================================
# Blocks
# =============================================================================

class TestBlocks:
    def _render(self, *blocks, schema=None, lookups=()):
        definition = SectionDefinition(id="s", title="S", blocks=tuple(blocks), lookups=tuple(lookups))
        return DocumentCompiler().compile_section(definition, (schema or _schema()).to_dict()).content

    def test_parts_filtered_by_condition(self):
        block = ContentBlock(parts=(
            ContentPart("Camera on.", when=EQ("features.uses_camera", True)),
            ContentPart("Camera off.", when=EQ("features.uses_camera", False)),
            ContentPart("Always."),
        ))
        assert self._render(block) == "Camera off. Always."

    def test_each_renders_items(self):
        schema = _schema(data_types=[DataType("Location", "Maps"), DataType("Usage Data", "Analytics")])
        block = ContentBlock(each="data_types", item="• **{item.type}**: {item.purpose}")
        assert self._render(block, schema=schema) == "• **Location**: Maps\n• **Usage Data**: Analytics"

    def test_each_empty_fallback(self):
        block = ContentBlock(each="data_types", item="{item.type}", empty="• Basic account information")
        assert self._render(block) == "• Basic account information"

    def test_block_when_and_empty_blocks_dropped(self):
        blocks = (
            ContentBlock(text="First."),
            ContentBlock(text="Hidden.", when=EQ("features.uses_location", True)),
            ContentBlock(each="third_parties", item="{item.name}"),
            ContentBlock(text="Last."),
        )
        assert self._render(*blocks) == "First.\n\nLast."

    def test_lookup_with_default(self):
        lookup = Lookup(
            name="storage",
            field="custom_answers.camera_storage",
            values={"not-stored": "Images stay on your device."},
            default="You choose where images are stored.",
        )
        block = ContentBlock(text="{lookup.storage}")
        stored = _schema(custom_answers={"camera_storage": "not-stored"})
        assert self._render(block, schema=stored, lookups=[lookup]) == "Images stay on your device."
        assert self._render(block, lookups=[lookup]) == "You choose where images are stored."

    def test_missing_placeholder_marker(self):
        block = ContentBlock(text="Governed by {custom_answers.governing_law}.")
        assert self._render(block) == "Governed by [custom_answers.governing_law]."
        assert missing_placeholder("x.y") == "[x.y]"

    def test_format_value(self):
        assert format_value(True) == "Yes"
        assert format_value(["a", "b"]) == "a, b"


# =============================================================================
# Determinism
# =============================================================================

class TestDeterminism:
    def test_same_inputs_same_document(self, privacy_template):
        answers = make_privacy_answers(has_ugc=True, uses_camera=True, camera_storage="stored-temporary")
        first = _compile_privacy(privacy_template, answers)
        second = _compile_privacy(privacy_template, answers)
        assert canonical_json(first.to_dict()) == canonical_json(second.to_dict())
        assert document_fingerprint(first) == document_fingerprint(second)

    def test_fingerprint_ignores_last_updated(self, privacy_template):
        schema = SchemaBuilder(privacy_template, clock=fixed_clock).build(IDENTITY, {})
        early = DocumentCompiler(clock=lambda: datetime(2026, 1, 1, tzinfo=timezone.utc)).compile(privacy_template, schema)
        late = DocumentCompiler(clock=lambda: datetime(2026, 6, 1, tzinfo=timezone.utc)).compile(privacy_template, schema)
        assert early.last_updated != late.last_updated
        assert document_fingerprint(early) == document_fingerprint(late)


# =============================================================================
# Built-in templates
# =============================================================================

class TestPrivacyPolicy:
    def test_camera_without_ugc(self, privacy_template):
        document = _compile_privacy(
            privacy_template, {"has-ugc": False, "uses-camera": True, "age-rating": "4+"},
        )
        assert document.type == DocumentType.PRIVACY_POLICY
        assert document.title == "Cal AI Privacy Policy"
        assert "Photos and Camera" in document.get_section("data-collection").content
        assert document.has_section("camera-usage")
        assert not document.has_section("content-moderation")
        assert document.schema.compliance.age_gating.value == "4+"

    def test_ugc_includes_moderation(self, privacy_template):
        document = _compile_privacy(privacy_template, make_privacy_answers(has_ugc=True, has_livestream=True))
        moderation = document.get_section("content-moderation")
        assert moderation is not None
        assert "Report content" in moderation.content
        assert "Livestreams" in moderation.content

    def test_section_order_follows_template(self, privacy_template):
        document = _compile_privacy(privacy_template, make_privacy_answers(targets_children=True))
        expected = [s.id for s in privacy_template.sections if document.has_section(s.id)]
        assert document.section_ids == expected
        assert document.section_ids[0] == "introduction"
        assert document.section_ids[-1] == "contact"

    def test_empty_answers_still_compile(self, privacy_template):
        document = _compile_privacy(privacy_template, {})
        assert "Basic account information" in document.get_section("data-collection").content
        assert "90 days after account deletion" in document.get_section("data-retention").content

    def test_third_parties_listed(self, privacy_template):
        document = _compile_privacy(privacy_template, make_privacy_answers())
        assert "**Firebase**: Analytics and infrastructure" in document.get_section("third-parties").content

    def test_no_unresolved_placeholders(self, privacy_template):
        document = _compile_privacy(privacy_template, make_privacy_answers())
        for section in document.sections:
            assert "{" not in section.content


class TestOtherTemplates:
    def test_faq(self, faq_template):
        schema = SchemaBuilder(faq_template, clock=fixed_clock).build(
            IDENTITY, {"app-purpose": "Cal AI counts calories from photos.", "is-free": True},
        )
        document = compile_document(faq_template, schema)
        assert document.get_section("what-is").title == "What is Cal AI?"
        assert document.get_section("what-is").content == "Cal AI counts calories from photos."
        assert document.get_section("is-free").content == "Yes, Cal AI is free to download."

    def test_faq_unanswered_is_free_omitted(self, faq_template):
        schema = SchemaBuilder(faq_template, clock=fixed_clock).build(IDENTITY, {})
        document = compile_document(faq_template, schema)
        assert not document.has_section("is-free")
        assert document.get_section("what-is").content == "Cal AI is a mobile application."

    def test_terms_of_service(self, registry):
        template = registry.get(DocumentType.TERMS_OF_SERVICE)
        schema = SchemaBuilder(template, clock=fixed_clock).build(IDENTITY, {})
        document = compile_document(template, schema)
        assert document.type == DocumentType.TERMS_OF_SERVICE
        assert document.section_ids[0] == "agreement"


class TestMarkdown:
    def test_render_includes_disclaimer(self, privacy_template):
        document = _compile_privacy(privacy_template, make_privacy_answers())
        markdown = render_markdown(document)
        assert markdown.startswith("# Cal AI Privacy Policy\n")
        assert "Not Legal Advice" in markdown
        assert "## Information We Collect" in markdown

    def test_render_without_disclaimer(self, privacy_template):
        document = _compile_privacy(privacy_template, {})
        assert "Not Legal Advice" not in render_markdown(document, include_disclaimer=False)
