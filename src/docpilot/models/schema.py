"""
DocPilot Document Schema

The normalized, typed projection of an interview's answers plus
interview-independent defaults. Every field has a default, so a schema
built from an empty answer map is complete.

Schema keys used by templates are dotted snake_case paths into this
structure, e.g. "features.uses_camera" or "compliance.age_gating".
Paths under "custom_answers." are free-form.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, Optional

from .enums import AgeRating, ModerationLevel, UserControl


CUSTOM_ANSWERS_PREFIX = "custom_answers"


# =============================================================================
# Derived Collections
# =============================================================================

@dataclass
class DataType:
    """A category of personal data the app collects."""
    type: str
    purpose: str
    retention: str = "90-days"
    user_control: UserControl = UserControl.DELETABLE
    is_required: bool = False


@dataclass
class ThirdParty:
    """An external service that receives user data."""
    name: str
    purpose: str
    data_shared: list[str] = field(default_factory=list)
    privacy_url: Optional[str] = None


# =============================================================================
# Flag Groups
# =============================================================================

@dataclass
class Features:
    """App capabilities that drive conditional document content."""
    has_user_generated_content: bool = False
    has_livestreaming: bool = False
    has_direct_messaging: bool = False
    has_public_profiles: bool = False
    has_in_app_purchases: bool = False
    has_subscriptions: bool = False
    has_health_data: bool = False
    uses_camera: bool = False
    uses_location: bool = False
    uses_analytics: bool = False
    uses_crash_reporting: bool = False
    uses_ai: bool = False


@dataclass
class Compliance:
    age_gating: AgeRating = AgeRating.FOUR_PLUS
    gdpr_compliant: bool = False
    ccpa_compliant: bool = False
    coppa_compliant: bool = False
    hipaa_relevant: bool = False


@dataclass
class UserControls:
    can_delete_account: bool = False
    can_export_data: bool = False
    can_opt_out_analytics: bool = False
    can_report_content: bool = False
    can_block_users: bool = False


@dataclass
class Moderation:
    """Moderation setup; only present for apps with user-generated content."""
    level: ModerationLevel = ModerationLevel.NONE
    has_report_button: bool = False
    has_block_mute: bool = False
    content_review_process: str = ""
    response_time: str = ""


# =============================================================================
# Document Schema
# =============================================================================

@dataclass
class DocumentSchema:
    """
    Structured input to the document compiler.

    Attributes:
        app_name / company_name / contact_email: Host identity
        effective_date: ISO date the document takes effect
        data_types / third_parties: Collections derived from lookups
        custom_answers: Raw answers keyed by question id, plus any values
            mapped through "custom_answers.<name>" schema keys
    """
    app_name: str = ""
    company_name: str = ""
    contact_email: str = ""
    effective_date: str = ""
    data_types: list[DataType] = field(default_factory=list)
    third_parties: list[ThirdParty] = field(default_factory=list)
    features: Features = field(default_factory=Features)
    compliance: Compliance = field(default_factory=Compliance)
    user_controls: UserControls = field(default_factory=UserControls)
    moderation: Optional[Moderation] = None
    custom_answers: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Plain-JSON representation (enums as values)."""
        return _plain(asdict(self))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DocumentSchema:
        """Rebuild a schema from `to_dict` output."""
        moderation = data.get("moderation")
        compliance = dict(data.get("compliance") or {})
        if "age_gating" in compliance:
            compliance["age_gating"] = AgeRating(compliance["age_gating"])
        return cls(
            app_name=data.get("app_name", ""),
            company_name=data.get("company_name", ""),
            contact_email=data.get("contact_email", ""),
            effective_date=data.get("effective_date", ""),
            data_types=[
                DataType(
                    type=d["type"],
                    purpose=d["purpose"],
                    retention=d.get("retention", "90-days"),
                    user_control=UserControl(d.get("user_control", "deletable")),
                    is_required=d.get("is_required", False),
                )
                for d in data.get("data_types", [])
            ],
            third_parties=[ThirdParty(**t) for t in data.get("third_parties", [])],
            features=Features(**(data.get("features") or {})),
            compliance=Compliance(**compliance),
            user_controls=UserControls(**(data.get("user_controls") or {})),
            moderation=(
                Moderation(**{**moderation, "level": ModerationLevel(moderation.get("level", "none"))})
                if moderation else None
            ),
            custom_answers=dict(data.get("custom_answers") or {}),
        )


def _plain(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    return value


# =============================================================================
# Schema Key Paths
# =============================================================================

_GROUPS: dict[str, type] = {
    "features": Features,
    "compliance": Compliance,
    "user_controls": UserControls,
    "moderation": Moderation,
}


def is_schema_key(path: str) -> bool:
    """
    Check that a dotted path names a field of DocumentSchema.

    Examples:
        is_schema_key("features.uses_camera")          -> True
        is_schema_key("custom_answers.camera_storage") -> True
        is_schema_key("features.uses_teleport")        -> False
    """
    head, _, rest = path.partition(".")
    if head == CUSTOM_ANSWERS_PREFIX:
        return bool(rest)
    top_level = {f.name for f in fields(DocumentSchema)}
    if head not in top_level:
        return False
    if not rest:
        return True
    group = _GROUPS.get(head)
    if group is None:
        return False
    return rest in {f.name for f in fields(group)}
