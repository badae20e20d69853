"""
DocPilot CLI

Command-line access to the template registry and the document compiler.

Usage:
    docpilot list-templates
    docpilot validate-template --template my_pack.yaml
    docpilot template-info --type privacy-policy
    docpilot compile --type privacy-policy --answers answers.json [--format markdown|json]

Exit Codes:
    0   OK              - Command succeeded
    10  INPUT_INVALID   - Invalid input (answers file, document type)
    11  TEMPLATE_ERROR  - Template pack failed to load or validate
    20  INTERNAL_ERROR  - Unexpected internal error

Environment:
    DP_TEMPLATES_DIR, DP_APP_NAME, DP_COMPANY_NAME, DP_CONTACT_EMAIL and
    DP_LOG_LEVEL are honoured (see docpilot.config).
"""
from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

import yaml

from . import __version__
from .config import Settings
from .engine import DocumentCompiler, SchemaBuilder, TemplateRegistry, render_markdown
from .engine.interview import validate_answer
from .exceptions import DocPilotError, InterviewError, TemplateNotFoundError
from .logging_config import configure_logging
from .templates import TemplateLoader


class ExitCode:
    """Deterministic exit codes for pipeline integration."""
    OK = 0
    INPUT_INVALID = 10
    TEMPLATE_ERROR = 11
    INTERNAL_ERROR = 20


def print_error(message: str) -> None:
    print(f"[ERROR] {message}", file=sys.stderr)


def print_kv(key: str, value: Any, width: int = 14) -> None:
    print(f"  {key + ':':<{width}} {value}")


def _registry(settings: Settings) -> TemplateRegistry:
    return TemplateRegistry.default(extra_dir=settings.templates_dir)


# =============================================================================
# Commands
# =============================================================================

def cmd_list_templates(args, settings: Settings) -> int:
    """List the registered templates."""
    registry = _registry(settings)
    for template in registry.list_templates():
        print(f"{template.type.value:<18} {template.name} (v{template.version})")
        print(f"{'':<18} {template.description}")
    return ExitCode.OK


def cmd_validate_template(args, settings: Settings) -> int:
    """Validate a template pack file."""
    path = Path(args.template)
    if not path.exists():
        print_error(f"Template file not found: {path}")
        return ExitCode.INPUT_INVALID

    try:
        template = TemplateLoader().load(path)
    except DocPilotError as e:
        print_error(f"Validation failed: {e.message}")
        errors = e.details.get("errors")
        if isinstance(errors, list):
            for error in errors:
                print(f"  [X] {error}")
        elif errors:
            for line in str(errors).splitlines():
                print(f"  {line}")
        return ExitCode.TEMPLATE_ERROR

    print("Template is valid!")
    print_kv("Type", template.type.value)
    print_kv("Name", template.name)
    print_kv("Version", template.version)
    print_kv("Steps", template.step_count)
    print_kv("Questions", sum(1 for _ in template.iter_questions()))
    print_kv("Sections", len(template.sections))
    return ExitCode.OK


def cmd_template_info(args, settings: Settings) -> int:
    """Show the steps, questions and sections of a template."""
    try:
        template = _registry(settings).get(args.type)
    except TemplateNotFoundError as e:
        print_error(e.message)
        return ExitCode.INPUT_INVALID

    print(f"{template.name} ({template.type.value}, v{template.version})")
    print(template.description)
    print()
    for index, step in enumerate(template.steps, start=1):
        print(f"Step {index}: {step.title}")
        for question in step.questions:
            condition = ""
            if question.depends_on is not None:
                condition = f"  [if {question.depends_on.question_id} = {question.depends_on.value!r}]"
            print(f"  - {question.id} ({question.type.value}) -> {question.schema_key}{condition}")
    print()
    print("Sections:")
    for section in template.sections:
        marker = "required" if section.required else "optional"
        print(f"  - {section.id} ({marker})")
    return ExitCode.OK


def cmd_compile(args, settings: Settings) -> int:
    """Compile a document from an answers file."""
    try:
        template = _registry(settings).get(args.type)
    except TemplateNotFoundError as e:
        print_error(e.message)
        return ExitCode.INPUT_INVALID

    try:
        answers = _load_answers(Path(args.answers))
        for question_id, value in answers.items():
            question = template.get_question(question_id)
            if question is None:
                raise InterviewError(message=f"Unknown question: {question_id}")
            validate_answer(question, value)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print_error(f"Cannot read answers: {e}")
        return ExitCode.INPUT_INVALID
    except InterviewError as e:
        print_error(e.message)
        return ExitCode.INPUT_INVALID

    schema = SchemaBuilder(template).build(settings.identity_defaults(), answers)
    document = DocumentCompiler().compile(template, schema)

    if args.format == "json":
        output = json.dumps(document.to_dict(), indent=2, ensure_ascii=False)
    else:
        output = render_markdown(document)

    if args.out:
        Path(args.out).write_text(output, encoding="utf-8")
    else:
        print(output)
    return ExitCode.OK


def _load_answers(path: Path) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f) if path.suffix.lower() == ".json" else yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("answers file must contain a mapping of question id to answer")
    return data


# =============================================================================
# Main
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docpilot",
        description="DocPilot CLI - guided legal document generation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit Codes:
  0   OK              Command succeeded
  10  INPUT_INVALID   Invalid input files or document type
  11  TEMPLATE_ERROR  Template pack failed validation
  20  INTERNAL_ERROR  Unexpected error

Examples:
  docpilot list-templates
  docpilot validate-template --template packs/privacy_policy.yaml
  docpilot compile --type privacy-policy --answers answers.json --format markdown
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    list_parser = subparsers.add_parser("list-templates", help="List available templates")
    list_parser.set_defaults(func=cmd_list_templates)

    validate_parser = subparsers.add_parser("validate-template", help="Validate a template pack file")
    validate_parser.add_argument("--template", "-t", required=True, help="Template pack YAML/JSON file")
    validate_parser.set_defaults(func=cmd_validate_template)

    info_parser = subparsers.add_parser("template-info", help="Show template steps and sections")
    info_parser.add_argument("--type", required=True, help="Document type (e.g. privacy-policy)")
    info_parser.set_defaults(func=cmd_template_info)

    compile_parser = subparsers.add_parser("compile", help="Compile a document from answers")
    compile_parser.add_argument("--type", required=True, help="Document type (e.g. privacy-policy)")
    compile_parser.add_argument("--answers", "-a", required=True, help="Answers JSON/YAML file")
    compile_parser.add_argument("--format", "-f", choices=["markdown", "json"], default="markdown")
    compile_parser.add_argument("--out", "-o", help="Write output to a file instead of stdout")
    compile_parser.set_defaults(func=cmd_compile)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    settings = Settings.from_env()
    configure_logging(os.environ.get("DP_LOG_LEVEL", "WARNING"))

    try:
        return args.func(args, settings)
    except DocPilotError as e:
        print_error(str(e))
        return ExitCode.TEMPLATE_ERROR
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        return ExitCode.INTERNAL_ERROR


if __name__ == "__main__":
    sys.exit(main())
