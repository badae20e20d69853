"""
DocPilot Template Pack Schemas

Pydantic models for validating template pack YAML/JSON files.

These schemas define the structure of a template pack (interview steps
plus section content rules). They map to the immutable domain models in
docpilot.models.template; cross-reference checks that need the whole
pack (dependency graph, schema key resolution) live in the loader.

Schema versioning:
- schema_version field tracks breaking changes
- Loaders check major version compatibility
"""
from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


# =============================================================================
# Schema Version
# =============================================================================

SCHEMA_VERSION = "1.0.0"


# =============================================================================
# Enums as Literals (for YAML validation)
# =============================================================================

DocumentTypeValue = Literal["privacy-policy", "terms-of-service", "faq"]

QuestionTypeValue = Literal["confirm", "select-one", "select-many", "text", "text-long"]

RiskLevelValue = Literal["low", "medium", "high"]

ConditionOperatorValue = Literal[
    "and", "or", "not",
    "eq", "ne", "in", "not_in", "contains",
    "is_null", "is_not_null", "is_empty", "is_not_empty",
]

_STRICT = {"extra": "forbid"}


# =============================================================================
# Conditions
# =============================================================================

class ConditionSchema(BaseModel):
    """
    One node of an `include_when` / `when` tree in a pack.

        include_when:
          op: and
          children:
            - {op: eq, field: features.uses_camera, value: true}
            - {op: ne, field: custom_answers.camera_storage, value: not-stored}
    """
    op: ConditionOperatorValue
    children: Optional[list["ConditionSchema"]] = Field(None, description="Operands of and/or/not")
    field: Optional[str] = Field(None, description="Dotted path the comparison reads")
    value: Optional[Any] = Field(None, description="Right-hand side of the comparison")
    description: Optional[str] = None

    model_config = _STRICT

    @model_validator(mode="after")
    def check_shape(self) -> "ConditionSchema":
        if self.op in {"and", "or", "not"}:
            if not self.children or self.field is not None:
                raise ValueError(f"'{self.op}' takes 'children' and no 'field'")
            if self.op == "not" and len(self.children) > 1:
                raise ValueError("'not' takes a single child")
        elif self.field is None or self.children:
            raise ValueError(f"'{self.op}' takes a 'field' and no 'children'")
        return self


# =============================================================================
# Questions and Steps
# =============================================================================

class QuestionOptionSchema(BaseModel):
    value: str
    label: str
    description: Optional[str] = None
    risk_flag: Optional[str] = None

    model_config = _STRICT


class DependsOnSchema(BaseModel):
    question_id: str = Field(..., description="Id of an earlier question")
    value: Any = Field(..., description="Answer (or list of answers) that shows the question")

    model_config = _STRICT


class QuestionSchema(BaseModel):
    """Schema for one interview question."""
    id: str = Field(..., min_length=1)
    type: QuestionTypeValue
    prompt: str = Field(..., min_length=1)
    schema_key: str = Field(..., description="Dotted schema path, e.g. 'features.uses_camera'")
    options: list[QuestionOptionSchema] = Field(default_factory=list)
    depends_on: Optional[DependsOnSchema] = None
    description: Optional[str] = None
    platform_tip: Optional[str] = Field(None, description="App Store review guidance")
    risk_level: Optional[RiskLevelValue] = None
    default: Optional[Any] = Field(None, description="Value used when unanswered")
    also_sets: list[str] = Field(default_factory=list)

    model_config = _STRICT

    @model_validator(mode="after")
    def validate_options(self) -> "QuestionSchema":
        """Select questions need options; other types must not have them."""
        if self.type in {"select-one", "select-many"}:
            if not self.options:
                raise ValueError(f"Question '{self.id}' of type {self.type} requires options")
            values = [o.value for o in self.options]
            if len(values) != len(set(values)):
                raise ValueError(f"Question '{self.id}' has duplicate option values")
        elif self.options:
            raise ValueError(f"Question '{self.id}' of type {self.type} cannot have options")

        if self.default is not None:
            if self.type == "confirm" and not isinstance(self.default, bool):
                raise ValueError(f"Question '{self.id}' default must be a boolean")
            if self.type == "select-one" and self.default not in [o.value for o in self.options]:
                raise ValueError(f"Question '{self.id}' default is not one of its options")
        return self


class StepSchema(BaseModel):
    id: str = Field(..., min_length=1)
    title: str
    description: str = ""
    icon: Optional[str] = None
    questions: list[QuestionSchema] = Field(..., min_length=1)

    model_config = _STRICT


# =============================================================================
# Section Content Rules
# =============================================================================

class LookupSchema(BaseModel):
    """Static value map exposed to section text as {lookup.<name>}."""
    field: str
    values: dict[str, str] = Field(default_factory=dict)
    default: str = ""

    model_config = _STRICT


class ContentPartSchema(BaseModel):
    text: str
    when: Optional[ConditionSchema] = None

    model_config = _STRICT


class ContentBlockSchema(BaseModel):
    """
    One paragraph of section content.

    Exactly one of `text`, `parts` or `each` must be given.
    """
    text: Optional[str] = None
    parts: Optional[list[ContentPartSchema]] = None
    joiner: str = " "
    each: Optional[str] = Field(None, description="Collection path, e.g. 'data_types'")
    item: Optional[str] = Field(None, description="Per-entry text using {item.*}")
    empty: Optional[str] = Field(None, description="Text when the collection is empty")
    item_joiner: str = "\n"
    when: Optional[ConditionSchema] = None

    model_config = _STRICT

    @model_validator(mode="after")
    def validate_form(self) -> "ContentBlockSchema":
        forms = [self.text is not None, bool(self.parts), self.each is not None]
        if sum(forms) != 1:
            raise ValueError("Content block needs exactly one of 'text', 'parts' or 'each'")
        if self.each is not None and self.item is None:
            raise ValueError(f"Content block over '{self.each}' requires 'item'")
        return self


class SectionSchema(BaseModel):
    """Schema for a section definition."""
    id: str = Field(..., min_length=1)
    title: str
    required: bool = True
    include_when: Optional[ConditionSchema] = None
    schema_keys: list[str] = Field(default_factory=list)
    risk_level: Optional[RiskLevelValue] = None
    tags: list[str] = Field(default_factory=list)
    lookups: dict[str, LookupSchema] = Field(default_factory=dict)
    blocks: list[ContentBlockSchema] = Field(..., min_length=1)
    block_joiner: str = "\n\n"

    model_config = _STRICT

    @model_validator(mode="after")
    def validate_trigger(self) -> "SectionSchema":
        """Only optional sections may be conditional, and they must be."""
        if self.required and self.include_when is not None:
            raise ValueError(f"Required section '{self.id}' cannot have 'include_when'")
        if not self.required and self.include_when is None:
            raise ValueError(f"Optional section '{self.id}' requires 'include_when'")
        return self


# =============================================================================
# Template Pack (root)
# =============================================================================

class TemplatePackSchema(BaseModel):
    """Root schema of a template pack file."""
    schema_version: str = Field(SCHEMA_VERSION)
    type: DocumentTypeValue
    name: str
    description: str = ""
    title: str = Field(..., description="Document title format, e.g. '{app_name} FAQ'")
    version: str = "1.0.0"
    schema_defaults: dict[str, Any] = Field(
        default_factory=dict,
        description="Dotted schema key -> value applied before answers",
    )
    steps: list[StepSchema] = Field(..., min_length=1)
    sections: list[SectionSchema] = Field(..., min_length=1)

    model_config = _STRICT

    @field_validator("schema_version")
    @classmethod
    def validate_schema_version(cls, v: str) -> str:
        if not v.split(".")[0].isdigit():
            raise ValueError(f"Invalid schema_version '{v}'")
        return v


# =============================================================================
# Validation Helpers
# =============================================================================

def validate_template_pack(data: dict[str, Any]) -> TemplatePackSchema:
    """
    Validate a template pack dictionary against the schema.

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return TemplatePackSchema.model_validate(data)


def check_schema_version(data: dict[str, Any]) -> bool:
    """Check if a pack's schema version has the supported major version."""
    pack_version = str(data.get("schema_version", SCHEMA_VERSION))
    return pack_version.split(".")[0] == SCHEMA_VERSION.split(".")[0]
