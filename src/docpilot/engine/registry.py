"""
DocPilot Template Registry

Holds the interview templates available to a host, keyed by document type.

Key features:
- Built-in packs loaded from the package data directory
- Optional extra pack directory that overrides built-ins by type
- Lookup by DocumentType or its string value
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from ..exceptions import TemplateNotFoundError
from ..models import DocumentType, InterviewTemplate
from ..templates import BUILTIN_PACKS_DIR, TemplateLoader


logger = logging.getLogger(__name__)


@dataclass
class TemplateRegistry:
    """
    Registry of interview templates.

    Usage:
        registry = TemplateRegistry.default()
        template = registry.get(DocumentType.PRIVACY_POLICY)

        # Add packs from a host directory (same type replaces the built-in)
        registry.load_directory("my_packs/")
    """

    _loader: TemplateLoader = field(default_factory=TemplateLoader)
    _templates: dict[DocumentType, InterviewTemplate] = field(default_factory=dict)

    @classmethod
    def default(cls, extra_dir: Optional[Union[str, Path]] = None) -> TemplateRegistry:
        """Registry with the built-in packs, plus `extra_dir` when given."""
        registry = cls()
        registry.load_directory(BUILTIN_PACKS_DIR)
        if extra_dir is not None:
            registry.load_directory(extra_dir)
        return registry

    def register(self, template: InterviewTemplate) -> None:
        if template.type in self._templates:
            logger.info("Replacing template %s", template.type.value)
        self._templates[template.type] = template

    def load(self, path: Union[str, Path]) -> InterviewTemplate:
        template = self._loader.load(path)
        self.register(template)
        return template

    def load_directory(self, directory: Union[str, Path]) -> list[InterviewTemplate]:
        loaded = self._loader.load_directory(directory)
        for template in loaded.values():
            self.register(template)
        return list(loaded.values())

    def get(self, document_type: Union[DocumentType, str]) -> InterviewTemplate:
        """
        Get the template for a document type.

        Raises:
            TemplateNotFoundError: If no template is registered for the type
        """
        try:
            key = DocumentType(document_type)
        except ValueError:
            raise TemplateNotFoundError(
                message=f"Unknown document type: {document_type}",
                details={"available": [t.value for t in self.list_types()]},
            )
        template = self._templates.get(key)
        if template is None:
            raise TemplateNotFoundError(
                message=f"No template registered for {key.value}",
                details={"available": [t.value for t in self.list_types()]},
                document_type=key.value,
            )
        return template

    def has(self, document_type: Union[DocumentType, str]) -> bool:
        try:
            return DocumentType(document_type) in self._templates
        except ValueError:
            return False

    def list_types(self) -> list[DocumentType]:
        """Registered document types in declaration order of DocumentType."""
        return [t for t in DocumentType if t in self._templates]

    def list_templates(self) -> list[InterviewTemplate]:
        return [self._templates[t] for t in self.list_types()]
