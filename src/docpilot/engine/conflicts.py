"""
Schema conflict detection.

A document keeps the schema it was compiled from. When the host later has
a newer schema (the user re-ran the interview, or edited settings), the
sections built from changed values are reported so the user can review
them. Nothing is recompiled and no edit is overwritten.
"""
from __future__ import annotations

import logging

from ..models import DocumentSchema, GeneratedDocument, SchemaConflict
from .condition_evaluator import resolve_field_path


logger = logging.getLogger(__name__)


def detect_conflicts(document: GeneratedDocument, schema: DocumentSchema) -> list[SchemaConflict]:
    """
    List (section, schema key) pairs whose value differs in `schema`.

    Returns:
        Conflicts in section order, then schema_keys order
    """
    before = document.schema.to_dict()
    after = schema.to_dict()
    conflicts: list[SchemaConflict] = []

    for section in document.sections:
        for key in section.schema_keys:
            old_value, _ = resolve_field_path(before, key)
            new_value, _ = resolve_field_path(after, key)
            if old_value == new_value:
                continue
            conflicts.append(SchemaConflict(
                section_id=section.id,
                schema_key=key,
                message=f'"{section.title}" was written when {key} was {old_value!r}; it is now {new_value!r}',
                old_value=old_value,
                new_value=new_value,
            ))

    if conflicts:
        logger.info("%d schema conflicts in %s", len(conflicts), document.type.value)
    return conflicts
