"""
DocPilot Template Packs

Declarative interview templates loaded from YAML:

    from docpilot.templates import TemplateLoader, load_builtin_templates

    templates = load_builtin_templates()
    privacy = templates[DocumentType.PRIVACY_POLICY]
"""
from __future__ import annotations

from .dependencies import DependencyGraph
from .loader import (
    BUILTIN_PACKS_DIR,
    TemplateLoader,
    load_builtin_templates,
    load_template_pack,
    load_template_pack_from_string,
    validate_reference_integrity,
)
from .schema import SCHEMA_VERSION, TemplatePackSchema, validate_template_pack


__all__ = [
    "BUILTIN_PACKS_DIR",
    "DependencyGraph",
    "SCHEMA_VERSION",
    "TemplateLoader",
    "TemplatePackSchema",
    "load_builtin_templates",
    "load_template_pack",
    "load_template_pack_from_string",
    "validate_reference_integrity",
    "validate_template_pack",
]
