"""
DocPilot Suggestion Collaborators

A suggestion collaborator turns a natural-language instruction into either
a section-scoped Suggestion or a Clarification. The editing session owns
everything else (ids, old content, chat history, the pending slot).

KeywordSuggester is the built-in heuristic collaborator. Any object with a
`suggest(document, instruction)` method, sync or async, can replace it.
"""
from __future__ import annotations

import logging
from typing import Awaitable, Protocol, Union, runtime_checkable

from ..models import Clarification, GeneratedDocument, Section, Suggestion, SuggestionResult


logger = logging.getLogger(__name__)


@runtime_checkable
class SuggestEdit(Protocol):
    """
    Protocol for suggestion collaborators.

    A returned Suggestion must name a section present in `document`.
    """

    def suggest(
        self, document: GeneratedDocument, instruction: str
    ) -> Union[SuggestionResult, Awaitable[SuggestionResult]]:
        ...


# =============================================================================
# Keyword Suggester
# =============================================================================

SECURITY_PARAGRAPH = (
    "We implement industry-standard security measures to protect your data. "
    "All data transmission is encrypted using TLS 1.3, and we regularly audit "
    "our security practices."
)

DETAIL_FIND = "We may collect"
DETAIL_REPLACE = "To provide you with the best experience, we may collect"
DETAIL_PARAGRAPH = "This data helps us personalize your experience and improve our services."

CLARIFICATION_MESSAGE = (
    "I understand you want to make changes. Could you be more specific? For example:\n\n"
    "• \"Make the data collection section more detailed\"\n"
    "• \"Add stronger language about security\"\n"
    "• \"Simplify the introduction\""
)

DATA_COLLECTION_SECTION = "data-collection"


class KeywordSuggester:
    """
    Deterministic keyword heuristics.

    - "stricter" / "apple": append security language to data-collection
    - "detail" / "more": expand data-collection with purpose language
    - "simplify" / "simple": rewrite the first section as a short intro
    - anything else: ask for clarification

    data-collection falls back to the first section when absent.
    """

    def suggest(self, document: GeneratedDocument, instruction: str) -> SuggestionResult:
        if not document.sections:
            return Clarification(message=CLARIFICATION_MESSAGE)

        text = instruction.lower()
        if "stricter" in text or "apple" in text:
            result = self._stricter(document)
        elif "detail" in text or "more" in text:
            result = self._more_detail(document)
        elif "simplify" in text or "simple" in text:
            result = self._simplify(document)
        else:
            result = Clarification(message=CLARIFICATION_MESSAGE)

        logger.debug(
            "Keyword suggestion for %r: %s",
            instruction, getattr(result, "section_id", "clarification"),
        )
        return result

    def _target(self, document: GeneratedDocument) -> Section:
        return document.get_section(DATA_COLLECTION_SECTION) or document.sections[0]

    def _stricter(self, document: GeneratedDocument) -> Suggestion:
        section = self._target(document)
        return Suggestion(
            section_id=section.id,
            new_content=f"{section.content}\n\n{SECURITY_PARAGRAPH}",
            message=(
                f'I\'ve strengthened the "{section.title}" section with additional security '
                "language that Apple reviewers like to see. This includes encryption details "
                "and security audit mentions."
            ),
        )

    def _more_detail(self, document: GeneratedDocument) -> Suggestion:
        section = self._target(document)
        expanded = section.content.replace(DETAIL_FIND, DETAIL_REPLACE, 1)
        return Suggestion(
            section_id=section.id,
            new_content=f"{expanded}\n\n{DETAIL_PARAGRAPH}",
            message=(
                f'I\'ve added more context to the "{section.title}" section explaining why '
                "we collect data and how it benefits users."
            ),
        )

    def _simplify(self, document: GeneratedDocument) -> Suggestion:
        section = document.sections[0]
        schema = document.schema
        return Suggestion(
            section_id=section.id,
            new_content=(
                f'{schema.company_name} ("we") operates {schema.app_name}. '
                "This policy explains how we handle your data."
            ),
            message="I've simplified the introduction to be more concise and user-friendly.",
        )
