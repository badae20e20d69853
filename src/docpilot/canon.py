"""
Canonical JSON and document fingerprints.

Keys are sorted and separators carry no whitespace, so equal documents
serialize to equal strings. The compiler's determinism tests and the
document store's fingerprints both compare these strings.
"""
from __future__ import annotations

import hashlib
import json
from enum import Enum
from typing import Any


def _encode_extra(obj: Any) -> Any:
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=str)
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"{type(obj).__name__} has no canonical JSON form")


def canonical_json(obj: Any) -> str:
    """
    >>> canonical_json({"b": 1, "a": [True, None]})
    '{"a":[true,null],"b":1}'
    """
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=_encode_extra)


def content_hash(obj: Any) -> str:
    """Hex SHA-256 of the canonical JSON form."""
    return hashlib.sha256(canonical_json(obj).encode("utf-8")).hexdigest()


def document_fingerprint(document: Any) -> str:
    """
    Hash of a document's title and sections.

    `last_updated` and the retained schema are left out, so compiling the
    same answers on different days fingerprints identically.
    """
    return content_hash({
        "type": document.type,
        "title": document.title,
        "sections": [section.to_dict() for section in document.sections],
    })
