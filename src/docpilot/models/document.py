"""
DocPilot Generated Document

The compiled, sectioned document produced from a schema. Documents are
immutable values: edits produce a new document with one section's content
replaced, so callers can compare before/after and never observe a
half-applied change.

Section ids are stable across recompilation of the same template.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional

from .enums import DocumentType, RiskLevel
from .schema import DocumentSchema


@dataclass(frozen=True)
class Section:
    """
    One titled section of a generated document.

    Attributes:
        id: Stable identifier from the section definition
        content: Rendered text (markdown-flavoured bullets and bold)
        schema_keys: Schema paths this section was built from
        is_required: Whether the template always emits it
        risk_level: Static review risk of the section
        tags: Static platform review tags (e.g. "COPPA", "Camera")
    """
    id: str
    title: str
    content: str
    schema_keys: tuple[str, ...] = ()
    is_required: bool = True
    risk_level: Optional[RiskLevel] = None
    tags: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "schema_keys": list(self.schema_keys),
            "is_required": self.is_required,
            "risk_level": self.risk_level.value if self.risk_level else None,
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Section:
        risk = data.get("risk_level")
        return cls(
            id=data["id"],
            title=data["title"],
            content=data["content"],
            schema_keys=tuple(data.get("schema_keys", ())),
            is_required=data.get("is_required", True),
            risk_level=RiskLevel(risk) if risk else None,
            tags=tuple(data.get("tags", ())),
        )


@dataclass(frozen=True)
class GeneratedDocument:
    """
    A compiled document plus the schema it was compiled from.

    The retained schema is what conflict detection compares against when
    the host later supplies a newer schema.
    """
    type: DocumentType
    title: str
    last_updated: str
    sections: tuple[Section, ...] = ()
    schema: DocumentSchema = field(default_factory=DocumentSchema)

    @property
    def section_ids(self) -> list[str]:
        return [s.id for s in self.sections]

    def get_section(self, section_id: str) -> Optional[Section]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def has_section(self, section_id: str) -> bool:
        return self.get_section(section_id) is not None

    def with_section_content(self, section_id: str, content: str) -> GeneratedDocument:
        """
        Return a copy with one section's content replaced.

        An unknown section id returns this document unchanged.
        """
        if not self.has_section(section_id):
            return self
        sections = tuple(
            replace(s, content=content) if s.id == section_id else s
            for s in self.sections
        )
        return replace(self, sections=sections)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "title": self.title,
            "last_updated": self.last_updated,
            "sections": [s.to_dict() for s in self.sections],
            "schema": self.schema.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GeneratedDocument:
        return cls(
            type=DocumentType(data["type"]),
            title=data["title"],
            last_updated=data["last_updated"],
            sections=tuple(Section.from_dict(s) for s in data.get("sections", [])),
            schema=DocumentSchema.from_dict(data.get("schema") or {}),
        )
