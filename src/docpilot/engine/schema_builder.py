"""
DocPilot Schema Builder

Projects an interview's answers onto a DocumentSchema.

Build order (later steps win):
1. DocumentSchema() with every flag False
2. Host defaults (identity, effective date, any dotted schema keys)
3. The template's schema_defaults
4. Every question, visible or not: the answer, or the question default
   when unanswered, written to schema_key and every also_sets key. A
   question hidden by its depends_on still contributes, so packs give
   hidden questions safe defaults and gate sections on the parent flag
5. Collection expansions through the static lookup tables below
6. Derived moderation setup for apps with user-generated content

The result is a total function of (defaults, answers): an empty answer
map produces a complete schema, and the same inputs always produce an
equal schema.
"""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from ..config import DEFAULT_APP_NAME, DEFAULT_COMPANY_NAME, DEFAULT_CONTACT_EMAIL
from ..models import (
    AnswerMap,
    DataType,
    DocumentSchema,
    InterviewTemplate,
    Moderation,
    ModerationLevel,
    ThirdParty,
    UserControl,
)
from ..models.schema import CUSTOM_ANSWERS_PREFIX
from .visibility import is_empty_answer


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Lookup Tables
# =============================================================================

THIRD_PARTY_SERVICES: dict[str, tuple[str, str]] = {
    "apple-healthkit": ("Apple HealthKit", "Sync health and fitness data"),
    "apple-sign-in": ("Sign in with Apple", "User authentication"),
    "google-sign-in": ("Sign in with Google", "User authentication"),
    "stripe": ("Stripe", "Payment processing"),
    "revenuecat": ("RevenueCat", "Subscription management"),
    "mixpanel": ("Mixpanel", "Product analytics"),
    "amplitude": ("Amplitude", "Product analytics"),
    "firebase": ("Firebase", "Analytics and infrastructure"),
    "sentry": ("Sentry", "Crash reporting and monitoring"),
    "openai": ("OpenAI", "AI-powered features"),
    "cloudflare": ("Cloudflare", "Content delivery and security"),
    "aws": ("AWS", "Cloud infrastructure and storage"),
}

HEALTH_DATA_PURPOSE = "Health and fitness tracking"
DEFAULT_RETENTION = "90-days"

# (feature flag, data type, purpose) added when the flag is set
FEATURE_DATA_TYPES: tuple[tuple[str, str, str], ...] = (
    ("uses_camera", "Photos and Camera", "Capturing photos and videos within the App"),
    ("uses_location", "Location", "Providing location-based features"),
    ("uses_analytics", "Usage Data", "Understanding how the App is used and fixing crashes"),
)

HEALTH_DATA_TYPES_KEY = "health_data_types"
THIRD_PARTY_SERVICES_KEY = "third_party_services"
DATA_RETENTION_KEY = "data_retention"


# =============================================================================
# Schema Builder
# =============================================================================

@dataclass
class SchemaBuilder:
    """
    Builds the DocumentSchema for one template.

    Usage:
        builder = SchemaBuilder(template)
        schema = builder.build({"app_name": "Cal AI"}, answers)

    `defaults` accepts the identity fields (app_name, company_name,
    contact_email), an explicit effective_date, and any other dotted
    schema key. The effective date falls back to the clock's current date.
    """

    template: InterviewTemplate
    clock: Clock = field(default=utc_now)

    def build(
        self,
        defaults: Optional[Mapping[str, Any]],
        answers: AnswerMap,
    ) -> DocumentSchema:
        defaults = dict(defaults or {})
        schema = DocumentSchema(
            app_name=defaults.pop("app_name", DEFAULT_APP_NAME),
            company_name=defaults.pop("company_name", DEFAULT_COMPANY_NAME),
            contact_email=defaults.pop("contact_email", DEFAULT_CONTACT_EMAIL),
            effective_date=defaults.pop("effective_date", None) or self.clock().date().isoformat(),
        )

        for key, value in sorted(defaults.items()):
            assign_schema_key(schema, key, value)
        for key, value in sorted(self.template.schema_defaults.items()):
            assign_schema_key(schema, key, value)

        schema.custom_answers.update(copy.deepcopy(dict(answers)))

        for question in self.template.iter_questions():
            value = answers.get(question.id)
            if is_empty_answer(value):
                if question.default is None:
                    continue
                value = question.default
            for key in (question.schema_key, *question.also_sets):
                assign_schema_key(schema, key, copy.deepcopy(value))

        _expand_data_types(schema)
        _expand_third_parties(schema)
        _derive_moderation(schema)
        return schema


def build_schema(
    template: InterviewTemplate,
    answers: AnswerMap,
    defaults: Optional[Mapping[str, Any]] = None,
    clock: Clock = utc_now,
) -> DocumentSchema:
    """Build a schema with a temporary SchemaBuilder."""
    return SchemaBuilder(template, clock=clock).build(defaults, answers)


# =============================================================================
# Key Assignment
# =============================================================================

def assign_schema_key(schema: DocumentSchema, key: str, value: Any) -> bool:
    """
    Write a value to a dotted schema path.

    Values are coerced into enum-typed fields; values whose type does not
    match the target field are skipped with a warning.

    Returns:
        True if the value was written
    """
    head, _, rest = key.partition(".")
    if head == CUSTOM_ANSWERS_PREFIX and rest:
        schema.custom_answers[rest] = value
        return True

    if not rest:
        return _set_field(schema, head, value, key)

    group = getattr(schema, head, None)
    if head == "moderation" and group is None:
        group = Moderation()
        schema.moderation = group
    if group is None or not is_dataclass(group):
        logger.warning("Schema key %s does not name a field group; skipped", key)
        return False
    return _set_field(group, rest, value, key)


def _set_field(target: Any, name: str, value: Any, key: str) -> bool:
    if name not in {f.name for f in fields(target)}:
        logger.warning("Unknown schema key %s; skipped", key)
        return False

    current = getattr(target, name)
    if isinstance(current, Enum):
        try:
            value = type(current)(value)
        except ValueError:
            logger.warning("Invalid value %r for %s; skipped", value, key)
            return False
    elif isinstance(current, bool):
        if not isinstance(value, bool):
            logger.warning("Schema key %s expects a boolean, got %r; skipped", key, value)
            return False
    elif isinstance(current, str):
        if not isinstance(value, str):
            logger.warning("Schema key %s expects text, got %r; skipped", key, value)
            return False
    elif isinstance(current, list):
        logger.warning("Schema key %s is a derived collection; skipped", key)
        return False

    setattr(target, name, value)
    return True


# =============================================================================
# Collection Expansion
# =============================================================================

def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str)]


def _capitalize(value: str) -> str:
    return value[:1].upper() + value[1:]


def _expand_data_types(schema: DocumentSchema) -> None:
    if schema.features.has_health_data:
        retention = schema.custom_answers.get(DATA_RETENTION_KEY)
        if not isinstance(retention, str) or not retention:
            retention = DEFAULT_RETENTION
        for value in _string_list(schema.custom_answers.get(HEALTH_DATA_TYPES_KEY)):
            schema.data_types.append(DataType(
                type=_capitalize(value),
                purpose=HEALTH_DATA_PURPOSE,
                retention=retention,
                user_control=UserControl.DELETABLE,
            ))

    for flag, data_type, purpose in FEATURE_DATA_TYPES:
        if getattr(schema.features, flag):
            schema.data_types.append(DataType(type=data_type, purpose=purpose))


def _expand_third_parties(schema: DocumentSchema) -> None:
    for value in _string_list(schema.custom_answers.get(THIRD_PARTY_SERVICES_KEY)):
        entry = THIRD_PARTY_SERVICES.get(value)
        if entry is None:
            logger.debug("No third-party entry for %r; skipped", value)
            continue
        name, purpose = entry
        schema.third_parties.append(ThirdParty(name=name, purpose=purpose))


def _derive_moderation(schema: DocumentSchema) -> None:
    if not schema.features.has_user_generated_content or schema.moderation is not None:
        return
    schema.moderation = Moderation(
        level=ModerationLevel.BASIC,
        has_report_button=schema.user_controls.can_report_content,
        has_block_mute=schema.user_controls.can_block_users,
    )
