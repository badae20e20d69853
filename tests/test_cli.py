"""
Tests for the docpilot command-line interface.
"""
import json

import pytest
import yaml

from docpilot.cli import ExitCode, main
from docpilot.templates import BUILTIN_PACKS_DIR

from tests.conftest import make_pack_data


@pytest.fixture(autouse=True)
def identity_env(monkeypatch):
    monkeypatch.setenv("DP_APP_NAME", "Snap Calories")
    monkeypatch.setenv("DP_COMPANY_NAME", "Snap Inc.")
    monkeypatch.setenv("DP_CONTACT_EMAIL", "help@snap.app")
    monkeypatch.delenv("DP_TEMPLATES_DIR", raising=False)


def _write_answers(tmp_path, answers, name="answers.json"):
    path = tmp_path / name
    if name.endswith(".json"):
        path.write_text(json.dumps(answers), encoding="utf-8")
    else:
        path.write_text(yaml.safe_dump(answers), encoding="utf-8")
    return path


class TestTemplateCommands:
    def test_list_templates(self, capsys):
        assert main(["list-templates"]) == ExitCode.OK
        out = capsys.readouterr().out
        assert "privacy-policy" in out
        assert "terms-of-service" in out
        assert "faq" in out

    def test_validate_builtin_pack(self, capsys):
        code = main(["validate-template", "--template", str(BUILTIN_PACKS_DIR / "privacy_policy.yaml")])
        assert code == ExitCode.OK
        assert "Template is valid!" in capsys.readouterr().out

    def test_validate_missing_file(self, tmp_path):
        assert main(["validate-template", "-t", str(tmp_path / "nope.yaml")]) == ExitCode.INPUT_INVALID

    def test_validate_broken_pack(self, tmp_path, capsys):
        data = make_pack_data()
        data["steps"][0]["questions"][0]["schema_key"] = "features.uses_teleport"
        path = tmp_path / "broken.yaml"
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        assert main(["validate-template", "-t", str(path)]) == ExitCode.TEMPLATE_ERROR
        assert "features.uses_teleport" in capsys.readouterr().out

    def test_template_info(self, capsys):
        assert main(["template-info", "--type", "privacy-policy"]) == ExitCode.OK
        out = capsys.readouterr().out
        assert "has-livestream (confirm) -> features.has_livestreaming  [if has-ugc = True]" in out
        assert "content-moderation (optional)" in out

    def test_template_info_unknown_type(self):
        assert main(["template-info", "--type", "cookie-policy"]) == ExitCode.INPUT_INVALID


class TestCompile:
    def test_markdown_to_stdout(self, tmp_path, capsys):
        answers = _write_answers(tmp_path, {"app-purpose": "Counts calories.", "is-free": True})
        assert main(["compile", "--type", "faq", "--answers", str(answers)]) == ExitCode.OK
        out = capsys.readouterr().out
        assert out.startswith("# Snap Calories FAQ")
        assert "Not Legal Advice" in out
        assert "Email us at help@snap.app" in out

    def test_json_to_file(self, tmp_path):
        answers = _write_answers(tmp_path, {"has-ugc": True, "uses-camera": True}, name="answers.yaml")
        out_path = tmp_path / "policy.json"
        code = main([
            "compile", "--type", "privacy-policy", "-a", str(answers),
            "--format", "json", "--out", str(out_path),
        ])
        assert code == ExitCode.OK
        document = json.loads(out_path.read_text(encoding="utf-8"))
        section_ids = [s["id"] for s in document["sections"]]
        assert "content-moderation" in section_ids
        assert "camera-usage" in section_ids
        assert document["schema"]["company_name"] == "Snap Inc."

    def test_unknown_question(self, tmp_path):
        answers = _write_answers(tmp_path, {"has-teleport": True})
        assert main(["compile", "--type", "privacy-policy", "-a", str(answers)]) == ExitCode.INPUT_INVALID

    def test_invalid_answer_value(self, tmp_path):
        answers = _write_answers(tmp_path, {"age-rating": "21+"})
        assert main(["compile", "--type", "privacy-policy", "-a", str(answers)]) == ExitCode.INPUT_INVALID

    def test_answers_not_a_mapping(self, tmp_path):
        path = tmp_path / "answers.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert main(["compile", "--type", "faq", "-a", str(path)]) == ExitCode.INPUT_INVALID

    def test_missing_answers_file(self, tmp_path):
        assert main(["compile", "--type", "faq", "-a", str(tmp_path / "none.json")]) == ExitCode.INPUT_INVALID


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage:" in capsys.readouterr().out
