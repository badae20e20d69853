"""
Markdown export of generated documents.
"""
from __future__ import annotations

from ..models import GeneratedDocument


LEGAL_DISCLAIMER = (
    "> **Not Legal Advice**: This document is generated based on your inputs and "
    "templates. For legal compliance, consult with a qualified attorney."
)


def render_markdown(document: GeneratedDocument, include_disclaimer: bool = True) -> str:
    lines = [f"# {document.title}", "", f"_Last updated: {document.last_updated}_", ""]
    if include_disclaimer:
        lines += [LEGAL_DISCLAIMER, ""]
    for section in document.sections:
        lines += [f"## {section.title}", "", section.content, ""]
    return "\n".join(lines).rstrip() + "\n"
