"""
DocPilot Document Compiler

Renders a DocumentSchema into a GeneratedDocument by walking a template's
section definitions.

Key features:
- Optional sections emitted only when their trigger evaluates TRUE
  (FALSE and UNKNOWN both omit; UNKNOWN is logged)
- Block kinds: text, conditional parts, per-item collections
- {field.path} placeholders resolved against the schema; unresolvable
  paths render as a visible "[field.path]" marker instead of raising
- Pure and deterministic for a fixed clock
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from ..exceptions import ConditionEvaluationError
from ..models import (
    PLACEHOLDER_PATTERN,
    Condition,
    ContentBlock,
    DocumentSchema,
    GeneratedDocument,
    InterviewTemplate,
    Lookup,
    Section,
    SectionDefinition,
    TriBool,
)
from .condition_evaluator import ConditionEvaluator, resolve_field_path


logger = logging.getLogger(__name__)

ITEM_SCOPE = "item"
LOOKUP_SCOPE = "lookup"


def missing_placeholder(path: str) -> str:
    """Visible marker rendered in place of an unresolvable field."""
    return f"[{path}]"


def format_value(value: Any) -> str:
    """Render a scope value as document text."""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (list, tuple)):
        return ", ".join(format_value(v) for v in value)
    return str(value)


# =============================================================================
# Document Compiler
# =============================================================================

@dataclass
class DocumentCompiler:
    """
    Compiles templates and schemas into documents.

    Usage:
        compiler = DocumentCompiler()
        document = compiler.compile(template, schema)

    `last_updated` is the schema's effective date unless a clock is given,
    in which case it is the clock's current time in ISO 8601.
    """

    clock: Optional[Callable[[], datetime]] = None
    _evaluator: ConditionEvaluator = field(default_factory=ConditionEvaluator)

    def compile(self, template: InterviewTemplate, schema: DocumentSchema) -> GeneratedDocument:
        scope = schema.to_dict()
        sections: list[Section] = []
        omitted: list[str] = []

        for definition in template.sections:
            if self._should_include(definition, scope):
                sections.append(self.compile_section(definition, scope))
            else:
                omitted.append(definition.id)

        last_updated = self.clock().isoformat() if self.clock else schema.effective_date
        document = GeneratedDocument(
            type=template.type,
            title=self._render_text(template.title, scope, owner=template.type.value),
            last_updated=last_updated,
            sections=tuple(sections),
            schema=schema,
        )
        logger.info(
            "Compiled %s: %d sections, omitted %s",
            template.type.value, len(sections), omitted or "none",
        )
        return document

    def compile_section(self, definition: SectionDefinition, scope: dict[str, Any]) -> Section:
        """Render one section definition (ignores its include trigger)."""
        section_scope = dict(scope)
        section_scope[LOOKUP_SCOPE] = {
            lookup.name: self._resolve_lookup(lookup, scope) for lookup in definition.lookups
        }

        rendered = [self._render_block(block, section_scope, definition.id) for block in definition.blocks]
        content = definition.block_joiner.join(text for text in rendered if text)

        return Section(
            id=definition.id,
            title=self._render_text(definition.title, section_scope, owner=definition.id),
            content=content,
            schema_keys=definition.schema_keys,
            is_required=definition.required,
            risk_level=definition.risk_level,
            tags=definition.tags,
        )

    # -------------------------------------------------------------------------
    # Conditions
    # -------------------------------------------------------------------------

    def _should_include(self, definition: SectionDefinition, scope: dict[str, Any]) -> bool:
        if definition.required or definition.include_when is None:
            return True
        value = self._evaluate(definition.include_when, scope, definition.id)
        if value == TriBool.UNKNOWN:
            logger.info(
                "Section %s omitted: trigger is UNKNOWN (fields %s)",
                definition.id, sorted(definition.include_when.fields()),
            )
        return value == TriBool.TRUE

    def _holds(self, condition: Optional[Condition], scope: dict[str, Any], owner: str) -> bool:
        if condition is None:
            return True
        return self._evaluate(condition, scope, owner) == TriBool.TRUE

    def _evaluate(self, condition: Condition, scope: dict[str, Any], owner: str) -> TriBool:
        try:
            return self._evaluator.evaluate(condition, scope).value
        except ConditionEvaluationError as e:
            logger.warning("Condition in %s could not be evaluated: %s", owner, e)
            return TriBool.UNKNOWN

    # -------------------------------------------------------------------------
    # Blocks
    # -------------------------------------------------------------------------

    def _render_block(self, block: ContentBlock, scope: dict[str, Any], owner: str) -> str:
        if not self._holds(block.when, scope, owner):
            return ""

        if block.kind == "each":
            return self._render_each(block, scope, owner)

        if block.kind == "parts":
            texts = [
                self._render_text(part.text, scope, owner)
                for part in block.parts
                if self._holds(part.when, scope, owner)
            ]
            return block.joiner.join(text for text in texts if text)

        return self._render_text(block.text or "", scope, owner)

    def _render_each(self, block: ContentBlock, scope: dict[str, Any], owner: str) -> str:
        collection, found = resolve_field_path(scope, block.each or "")
        if not found:
            logger.warning("Collection %s not found while rendering %s", block.each, owner)
        items = collection if isinstance(collection, list) else []

        if not items:
            return self._render_text(block.empty, scope, owner) if block.empty else ""

        rendered = []
        for item in items:
            item_scope = dict(scope)
            item_scope[ITEM_SCOPE] = item
            rendered.append(self._render_text(block.item or "", item_scope, owner))
        return block.item_joiner.join(rendered)

    # -------------------------------------------------------------------------
    # Text
    # -------------------------------------------------------------------------

    def _render_text(self, text: str, scope: dict[str, Any], owner: str) -> str:
        def replace(match: Any) -> str:
            path = match.group(1)
            value, found = resolve_field_path(scope, path)
            if not found or value is None:
                logger.warning("Placeholder {%s} unresolved in %s", path, owner)
                return missing_placeholder(path)
            return format_value(value)

        return PLACEHOLDER_PATTERN.sub(replace, text)

    def _resolve_lookup(self, lookup: Lookup, scope: dict[str, Any]) -> str:
        value, found = resolve_field_path(scope, lookup.field)
        if found and isinstance(value, str) and value in lookup.values:
            return lookup.values[value]
        return lookup.default


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_document(template: InterviewTemplate, schema: DocumentSchema) -> GeneratedDocument:
    return DocumentCompiler().compile(template, schema)
