"""
Tests for template pack loading and the template registry.

Tests cover:
- Built-in packs load and validate
- Structural (pydantic) errors
- Reference integrity errors (duplicate ids, dependency graph, schema keys)
- Version checks
- Registry lookup and directory overrides
"""
import copy
import json

import pytest
import yaml

from docpilot.engine import TemplateRegistry
from docpilot.exceptions import (
    TemplateLoadError,
    TemplateNotFoundError,
    TemplateValidationError,
    TemplateVersionMismatch,
)
from docpilot.models import DocumentType, QuestionType
from docpilot.templates import (
    DependencyGraph,
    TemplateLoader,
    load_builtin_templates,
    load_template_pack_from_string,
)

from tests.conftest import make_pack_data, make_question, make_step, make_template


def _questions(data: dict) -> list:
    return data["steps"][0]["questions"]


# =============================================================================
# Built-in packs
# =============================================================================

class TestBuiltinPacks:
    def test_all_document_types_load(self):
        templates = load_builtin_templates()
        assert set(templates) == set(DocumentType)

    def test_privacy_policy_structure(self):
        template = load_builtin_templates()[DocumentType.PRIVACY_POLICY]
        assert template.step_count == 5
        livestream = template.get_question("has-livestream")
        assert livestream.depends_on.question_id == "has-ugc"
        assert livestream.depends_on.value is True
        assert template.get_question("third-party-services").type == QuestionType.SELECT_MANY

    def test_optional_sections_have_triggers(self):
        for template in load_builtin_templates().values():
            for section in template.sections:
                assert section.required == (section.include_when is None)

    def test_section_ids_unique(self):
        for template in load_builtin_templates().values():
            ids = [s.id for s in template.sections]
            assert len(ids) == len(set(ids))


# =============================================================================
# Loader
# =============================================================================

class TestTemplateLoader:
    def test_valid_pack(self):
        template = TemplateLoader().load_data(make_pack_data())
        assert template.type == DocumentType.FAQ
        assert template.title == "{app_name} FAQ"
        assert [q.id for q in template.iter_questions()] == ["has-ugc", "has-livestream"]

    def test_load_yaml_file(self, tmp_path):
        path = tmp_path / "faq.yaml"
        path.write_text(yaml.safe_dump(make_pack_data()), encoding="utf-8")
        template = TemplateLoader().load(path)
        assert template.name == "Test FAQ"

    def test_missing_file(self, tmp_path):
        with pytest.raises(TemplateLoadError):
            TemplateLoader().load(tmp_path / "missing.yaml")

    def test_malformed_yaml(self):
        with pytest.raises(TemplateLoadError):
            load_template_pack_from_string("steps: [unclosed")

    def test_non_mapping(self):
        with pytest.raises(TemplateLoadError):
            TemplateLoader().load_data(["not", "a", "pack"])

    def test_version_mismatch(self):
        with pytest.raises(TemplateVersionMismatch):
            TemplateLoader().load_data(make_pack_data(schema_version="2.0.0"))

    def test_version_mismatch_allowed_when_not_strict(self):
        template = TemplateLoader(strict_version=False).load_data(make_pack_data(schema_version="2.0.0"))
        assert template.type == DocumentType.FAQ

    def test_json_string(self):
        template = load_template_pack_from_string(json.dumps(make_pack_data()), format="json")
        assert template.step_count == 1


class TestStructuralValidation:
    def test_unknown_top_level_key(self):
        with pytest.raises(TemplateValidationError):
            TemplateLoader().load_data(make_pack_data(colour="blue"))

    def test_select_without_options(self):
        data = make_pack_data()
        _questions(data).append({
            "id": "age-rating", "type": "select-one", "prompt": "Age?",
            "schema_key": "compliance.age_gating",
        })
        with pytest.raises(TemplateValidationError):
            TemplateLoader().load_data(data)

    def test_confirm_with_non_boolean_default(self):
        data = make_pack_data()
        _questions(data)[0]["default"] = "yes"
        with pytest.raises(TemplateValidationError):
            TemplateLoader().load_data(data)

    def test_required_section_with_trigger(self):
        data = make_pack_data()
        data["sections"][0]["include_when"] = {"op": "eq", "field": "features.uses_camera", "value": True}
        with pytest.raises(TemplateValidationError):
            TemplateLoader().load_data(data)

    def test_optional_section_without_trigger(self):
        data = make_pack_data()
        data["sections"][0]["required"] = False
        with pytest.raises(TemplateValidationError):
            TemplateLoader().load_data(data)

    def test_block_with_two_forms(self):
        data = make_pack_data()
        data["sections"][0]["blocks"] = [{"text": "x", "each": "data_types", "item": "{item.type}"}]
        with pytest.raises(TemplateValidationError):
            TemplateLoader().load_data(data)


class TestReferenceIntegrity:
    def _load(self, data):
        return TemplateLoader().load_data(data)

    def test_duplicate_question_id(self):
        data = make_pack_data()
        duplicate = copy.deepcopy(_questions(data)[0])
        _questions(data).append(duplicate)
        with pytest.raises(TemplateValidationError) as exc:
            self._load(data)
        assert "Duplicate question ID" in exc.value.details["errors"]

    def test_dependency_on_unknown_question(self):
        data = make_pack_data()
        _questions(data)[1]["depends_on"]["question_id"] = "has-teleport"
        with pytest.raises(TemplateValidationError) as exc:
            self._load(data)
        assert "non-existent" in exc.value.details["errors"]

    def test_dependency_on_later_question(self):
        data = make_pack_data()
        _questions(data)[0]["depends_on"] = {"question_id": "has-livestream", "value": True}
        del _questions(data)[1]["depends_on"]
        with pytest.raises(TemplateValidationError) as exc:
            self._load(data)
        assert "asked later" in exc.value.details["errors"]

    def test_dependency_cycle(self):
        data = make_pack_data()
        _questions(data)[0]["depends_on"] = {"question_id": "has-livestream", "value": True}
        with pytest.raises(TemplateValidationError) as exc:
            self._load(data)
        assert "cycle" in exc.value.details["errors"]

    def test_dependency_value_not_boolean_for_confirm(self):
        data = make_pack_data()
        _questions(data)[1]["depends_on"]["value"] = "true"
        with pytest.raises(TemplateValidationError):
            self._load(data)

    def test_unknown_schema_key(self):
        data = make_pack_data()
        _questions(data)[0]["schema_key"] = "features.uses_teleport"
        with pytest.raises(TemplateValidationError) as exc:
            self._load(data)
        assert "features.uses_teleport" in exc.value.details["errors"]

    def test_custom_answers_keys_are_free_form(self):
        data = make_pack_data()
        _questions(data)[0]["schema_key"] = "custom_answers.anything_goes"
        assert self._load(data).get_question("has-ugc").schema_key == "custom_answers.anything_goes"

    def test_unknown_placeholder(self):
        data = make_pack_data()
        data["sections"][0]["blocks"] = [{"text": "{app_nmae}"}]
        with pytest.raises(TemplateValidationError):
            self._load(data)

    def test_undeclared_lookup(self):
        data = make_pack_data()
        data["sections"][0]["blocks"] = [{"text": "{lookup.storage}"}]
        with pytest.raises(TemplateValidationError):
            self._load(data)

    def test_item_placeholder_outside_each(self):
        data = make_pack_data()
        data["sections"][0]["blocks"] = [{"text": "{item.type}"}]
        with pytest.raises(TemplateValidationError):
            self._load(data)


class TestDependencyGraph:
    def test_dependents_of(self):
        graph = DependencyGraph.from_template(make_template())
        assert graph.dependents_of("has-ugc") == ["has-livestream"]
        assert graph.validate() == []

    def test_self_dependency(self):
        template = make_template(steps=[
            make_step("one", make_question("loop", depends_on=("loop", True))),
        ])
        errors = DependencyGraph.from_template(template).validate()
        assert any("itself" in e for e in errors)


# =============================================================================
# Registry
# =============================================================================

class TestTemplateRegistry:
    def test_get_by_enum_and_string(self, registry):
        assert registry.get("privacy-policy") is registry.get(DocumentType.PRIVACY_POLICY)

    def test_unknown_type(self, registry):
        with pytest.raises(TemplateNotFoundError):
            registry.get("cookie-policy")

    def test_unregistered_type(self):
        with pytest.raises(TemplateNotFoundError) as exc:
            TemplateRegistry().get(DocumentType.FAQ)
        assert exc.value.document_type == "faq"

    def test_list_types_in_declaration_order(self, registry):
        assert registry.list_types() == list(DocumentType)

    def test_extra_directory_overrides_builtin(self, tmp_path):
        (tmp_path / "faq.json").write_text(json.dumps(make_pack_data()), encoding="utf-8")
        registry = TemplateRegistry.default(extra_dir=tmp_path)
        assert registry.get(DocumentType.FAQ).name == "Test FAQ"
        assert registry.has("privacy-policy")

    def test_invalid_pack_in_directory_is_fatal(self, tmp_path):
        (tmp_path / "broken.yaml").write_text("type: faq\nname: Broken\n", encoding="utf-8")
        with pytest.raises(TemplateValidationError):
            TemplateRegistry.default(extra_dir=tmp_path)
