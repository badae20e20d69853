"""
DocPilot Template Pack Loader

Loads and validates template packs from YAML or JSON files.

Converts Pydantic schema models to immutable DocPilot domain models, then
runs a reference integrity pass over the whole template. A template that
fails any check is refused: no interview may start against a template with
undefined visibility behaviour.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional, Union

import yaml
from pydantic import ValidationError

from ..exceptions import TemplateLoadError, TemplateValidationError, TemplateVersionMismatch
from ..models import (
    PLACEHOLDER_PATTERN,
    Condition,
    ConditionOperator,
    ContentBlock,
    ContentPart,
    DependsOn,
    DocumentType,
    InterviewTemplate,
    Lookup,
    Predicate,
    Question,
    QuestionOption,
    QuestionType,
    RiskLevel,
    SectionDefinition,
    Step,
    is_schema_key,
)
from .dependencies import DependencyGraph
from .schema import (
    SCHEMA_VERSION,
    ConditionSchema,
    ContentBlockSchema,
    QuestionSchema,
    SectionSchema,
    StepSchema,
    TemplatePackSchema,
    check_schema_version,
    validate_template_pack,
)


logger = logging.getLogger(__name__)

BUILTIN_PACKS_DIR = Path(__file__).parent / "packs"

# Path roots that are not schema fields
_ITEM_ROOT = "item"
_LOOKUP_ROOT = "lookup"


# =============================================================================
# Reference Integrity Validation
# =============================================================================

def validate_reference_integrity(template: InterviewTemplate, path: str = "") -> None:
    """
    Validate internal references are consistent.

    Catches:
    - Duplicate step, question and section ids
    - depends_on targets that are missing, later, or cyclic
    - depends_on values that the target question can never produce
    - Schema keys, default keys and condition fields outside DocumentSchema
    - Text placeholders naming undeclared lookups

    Raises:
        ValueError: If reference integrity errors are found
    """
    errors: list[str] = []

    errors.extend(_duplicates("step", [s.id for s in template.steps]))
    errors.extend(_duplicates("question", [q.id for q in template.iter_questions()]))
    errors.extend(_duplicates("section", [s.id for s in template.sections]))

    errors.extend(DependencyGraph.from_template(template).validate())

    for question in template.iter_questions():
        for key in (question.schema_key, *question.also_sets):
            if not is_schema_key(key):
                errors.append(f"Question '{question.id}' maps to unknown schema key '{key}'")
        if question.depends_on is not None:
            target = template.get_question(question.depends_on.question_id)
            if target is not None:
                errors.extend(_check_dependency_value(question, target))

    for key in template.schema_defaults:
        if not is_schema_key(key):
            errors.append(f"schema_defaults names unknown schema key '{key}'")

    errors.extend(_text_errors(template.title, "Document title", set(), allow_item=False))
    for section in template.sections:
        errors.extend(_check_section(section))

    if errors:
        path_str = f" in {path}" if path else ""
        raise ValueError(
            f"Reference integrity errors{path_str}:\n" +
            "\n".join(f"  - {e}" for e in errors)
        )


def _duplicates(kind: str, ids: list[str]) -> list[str]:
    seen: set[str] = set()
    errors = []
    for item_id in ids:
        if item_id in seen:
            errors.append(f"Duplicate {kind} ID: '{item_id}'")
        seen.add(item_id)
    return errors


def _check_dependency_value(question: Question, target: Question) -> list[str]:
    expected = question.depends_on.value if question.depends_on else None
    values = expected if isinstance(expected, list) else [expected]
    errors = []
    for value in values:
        if target.type == QuestionType.CONFIRM and not isinstance(value, bool):
            errors.append(
                f"Question '{question.id}' depends on confirm question '{target.id}' "
                f"with non-boolean value {value!r}"
            )
        elif target.type.has_options and value not in target.option_values:
            errors.append(
                f"Question '{question.id}' depends on '{target.id}' = {value!r}, "
                f"which is not one of its options"
            )
    return errors


def _check_path(path: str, owner: str, lookups: set[str], allow_item: bool) -> Optional[str]:
    root, _, rest = path.partition(".")
    if root == _ITEM_ROOT:
        return None if allow_item else f"{owner} uses '{path}' outside an 'each' block"
    if root == _LOOKUP_ROOT:
        return None if rest in lookups else f"{owner} references undeclared lookup '{rest}'"
    if not is_schema_key(path):
        return f"{owner} references unknown schema field '{path}'"
    return None


def _condition_errors(
    condition: Optional[Condition], owner: str, lookups: set[str], allow_item: bool
) -> list[str]:
    if condition is None:
        return []
    errors = []
    for path in sorted(condition.fields()):
        error = _check_path(path, owner, lookups, allow_item)
        if error:
            errors.append(error)
    return errors


def _text_errors(text: Optional[str], owner: str, lookups: set[str], allow_item: bool) -> list[str]:
    if not text:
        return []
    errors = []
    for path in PLACEHOLDER_PATTERN.findall(text):
        error = _check_path(path, owner, lookups, allow_item)
        if error:
            errors.append(error)
    return errors


def _check_section(section: SectionDefinition) -> list[str]:
    owner = f"Section '{section.id}'"
    lookups = {lookup.name for lookup in section.lookups}
    errors: list[str] = []

    for key in section.schema_keys:
        if not is_schema_key(key):
            errors.append(f"{owner} lists unknown schema key '{key}'")
    for lookup in section.lookups:
        if not is_schema_key(lookup.field):
            errors.append(f"{owner} lookup '{lookup.name}' reads unknown field '{lookup.field}'")

    errors.extend(_text_errors(section.title, owner, lookups, allow_item=False))
    errors.extend(_condition_errors(section.include_when, owner, lookups, allow_item=False))

    for block in section.blocks:
        errors.extend(_condition_errors(block.when, owner, lookups, allow_item=False))
        if block.each is not None:
            if not is_schema_key(block.each):
                errors.append(f"{owner} iterates unknown collection '{block.each}'")
            errors.extend(_text_errors(block.item, owner, lookups, allow_item=True))
            errors.extend(_text_errors(block.empty, owner, lookups, allow_item=False))
        errors.extend(_text_errors(block.text, owner, lookups, allow_item=False))
        for part in block.parts:
            errors.extend(_text_errors(part.text, owner, lookups, allow_item=False))
            errors.extend(_condition_errors(part.when, owner, lookups, allow_item=False))
    return errors


# =============================================================================
# Schema to Model Converters
# =============================================================================

def _convert_condition(schema: Optional[ConditionSchema]) -> Optional[Condition]:
    """Convert ConditionSchema to Condition model."""
    if schema is None:
        return None
    op = ConditionOperator(schema.op)

    if op in {ConditionOperator.AND, ConditionOperator.OR, ConditionOperator.NOT}:
        return Condition(
            op=op,
            children=tuple(_convert_condition(c) for c in schema.children),
            description=schema.description,
        )
    return Condition(
        op=op,
        predicate=Predicate(field=schema.field or "", operator=op, value=schema.value),
        description=schema.description,
    )


def _convert_question(schema: QuestionSchema) -> Question:
    return Question(
        id=schema.id,
        type=QuestionType(schema.type),
        prompt=schema.prompt,
        schema_key=schema.schema_key,
        options=tuple(
            QuestionOption(
                value=o.value,
                label=o.label,
                description=o.description,
                risk_flag=o.risk_flag,
            )
            for o in schema.options
        ),
        depends_on=(
            DependsOn(question_id=schema.depends_on.question_id, value=schema.depends_on.value)
            if schema.depends_on else None
        ),
        description=schema.description,
        platform_tip=schema.platform_tip,
        risk_level=RiskLevel(schema.risk_level) if schema.risk_level else None,
        default=schema.default,
        also_sets=tuple(schema.also_sets),
    )


def _convert_step(schema: StepSchema) -> Step:
    return Step(
        id=schema.id,
        title=schema.title,
        description=schema.description,
        icon=schema.icon,
        questions=tuple(_convert_question(q) for q in schema.questions),
    )


def _convert_block(schema: ContentBlockSchema) -> ContentBlock:
    return ContentBlock(
        text=schema.text,
        parts=tuple(
            ContentPart(text=p.text, when=_convert_condition(p.when))
            for p in (schema.parts or [])
        ),
        joiner=schema.joiner,
        each=schema.each,
        item=schema.item,
        empty=schema.empty,
        item_joiner=schema.item_joiner,
        when=_convert_condition(schema.when),
    )


def _convert_section(schema: SectionSchema) -> SectionDefinition:
    return SectionDefinition(
        id=schema.id,
        title=schema.title,
        required=schema.required,
        include_when=_convert_condition(schema.include_when),
        schema_keys=tuple(schema.schema_keys),
        risk_level=RiskLevel(schema.risk_level) if schema.risk_level else None,
        tags=tuple(schema.tags),
        lookups=tuple(
            Lookup(name=name, field=lookup.field, values=dict(lookup.values), default=lookup.default)
            for name, lookup in sorted(schema.lookups.items())
        ),
        blocks=tuple(_convert_block(b) for b in schema.blocks),
        block_joiner=schema.block_joiner,
    )


def _convert_template_pack(schema: TemplatePackSchema) -> InterviewTemplate:
    return InterviewTemplate(
        type=DocumentType(schema.type),
        name=schema.name,
        description=schema.description,
        title=schema.title,
        steps=tuple(_convert_step(s) for s in schema.steps),
        sections=tuple(_convert_section(s) for s in schema.sections),
        schema_defaults=dict(schema.schema_defaults),
        version=schema.version,
    )


# =============================================================================
# Template Loader
# =============================================================================

class TemplateLoader:
    """
    Loads template packs from YAML or JSON files.

    Usage:
        loader = TemplateLoader()
        template = loader.load("packs/privacy_policy.yaml")
        templates = loader.load_directory(BUILTIN_PACKS_DIR)
    """

    def __init__(self, strict_version: bool = True):
        """
        Initialize the loader.

        Args:
            strict_version: If True, reject packs with incompatible schema versions
        """
        self.strict_version = strict_version
        self._templates: dict[DocumentType, InterviewTemplate] = {}

    def load(self, path: Union[str, Path]) -> InterviewTemplate:
        """
        Load a template pack from a file.

        Raises:
            TemplateLoadError: If the file cannot be read or parsed
            TemplateVersionMismatch: If the schema version is incompatible
            TemplateValidationError: If schema or reference validation fails
        """
        path = Path(path)
        try:
            data = self._load_file(path)
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise TemplateLoadError(
                message=f"Failed to load template pack: {e}",
                details={"path": str(path), "error": str(e)},
            )
        template = self.load_data(data, source=str(path))
        logger.info(
            "Loaded template %s from %s (%d steps, %d sections)",
            template.type.value, path.name, template.step_count, len(template.sections),
        )
        return template

    def load_data(self, data: Any, source: str = "<data>") -> InterviewTemplate:
        """Validate and convert an already-parsed pack."""
        if not isinstance(data, dict):
            raise TemplateLoadError(
                message="Template pack must be a mapping",
                details={"path": source, "type": type(data).__name__},
            )

        if self.strict_version and not check_schema_version(data):
            pack_version = data.get("schema_version", "unknown")
            raise TemplateVersionMismatch(
                message=f"Schema version mismatch: pack has {pack_version}, expected {SCHEMA_VERSION}",
                details={"pack_version": pack_version, "expected_version": SCHEMA_VERSION},
            )

        try:
            schema = validate_template_pack(data)
        except ValidationError as e:
            raise TemplateValidationError(
                message=f"Template pack validation failed: {e.error_count()} errors",
                details={"errors": e.errors(include_url=False, include_context=False, include_input=False), "path": source},
            )

        try:
            template = _convert_template_pack(schema)
        except ValueError as e:
            raise TemplateValidationError(
                message=f"Template pack structure is invalid: {e}",
                details={"path": source},
            )

        try:
            validate_reference_integrity(template, source)
        except ValueError as e:
            raise TemplateValidationError(
                message="Reference integrity validation failed",
                details={"errors": str(e), "path": source},
                document_type=template.type.value,
            )

        self._templates[template.type] = template
        return template

    def load_directory(self, directory: Union[str, Path]) -> dict[DocumentType, InterviewTemplate]:
        """Load every *.yaml / *.yml / *.json pack in a directory, in name order."""
        directory = Path(directory)
        loaded: dict[DocumentType, InterviewTemplate] = {}
        for path in sorted(_pack_files(directory)):
            template = self.load(path)
            loaded[template.type] = template
        return loaded

    def _load_file(self, path: Path) -> Any:
        """Load data from YAML or JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                return json.load(f)
            return yaml.safe_load(f)

    def get_template(self, document_type: DocumentType) -> Optional[InterviewTemplate]:
        """Get a previously loaded template by type."""
        return self._templates.get(document_type)

    def list_types(self) -> list[DocumentType]:
        return list(self._templates.keys())


def _pack_files(directory: Path) -> Iterable[Path]:
    for pattern in ("*.yaml", "*.yml", "*.json"):
        yield from directory.glob(pattern)


# =============================================================================
# Convenience Functions
# =============================================================================

def load_template_pack(path: Union[str, Path]) -> InterviewTemplate:
    """Load a template pack from a file with a temporary loader."""
    return TemplateLoader().load(path)


def load_template_pack_from_string(content: str, format: str = "yaml") -> InterviewTemplate:
    """
    Load a template pack from a string.

    Args:
        content: YAML or JSON string
        format: "yaml" or "json"
    """
    try:
        data = json.loads(content) if format.lower() == "json" else yaml.safe_load(content)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise TemplateLoadError(message=f"Failed to parse template pack: {e}")
    return TemplateLoader().load_data(data)


def load_builtin_templates() -> dict[DocumentType, InterviewTemplate]:
    """Load the packs shipped with DocPilot."""
    return TemplateLoader().load_directory(BUILTIN_PACKS_DIR)
