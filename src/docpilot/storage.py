"""
DocPilot Document Storage

Persistence of the current saved version of each document type. Only the
latest version is kept.

Implementations:
- InMemoryDocumentStore: process-local, used by tests and the default host
- FileDocumentStore: one JSON file per document type under a directory

Saving marks the artifact as a draft; publishing marks it ready.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional, Protocol, Union, runtime_checkable

from .canon import document_fingerprint
from .exceptions import DocumentNotFoundError, StorageError
from .models import ArtifactStatus, DocumentSchema, DocumentType, GeneratedDocument


logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class StoredDocument:
    """A saved document with its schema and publication status."""
    type: DocumentType
    document: GeneratedDocument
    schema: DocumentSchema
    status: ArtifactStatus
    saved_at: str
    fingerprint: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "document": self.document.to_dict(),
            "schema": self.schema.to_dict(),
            "status": self.status.value,
            "saved_at": self.saved_at,
            "fingerprint": self.fingerprint,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StoredDocument:
        return cls(
            type=DocumentType(data["type"]),
            document=GeneratedDocument.from_dict(data["document"]),
            schema=DocumentSchema.from_dict(data["schema"]),
            status=ArtifactStatus(data["status"]),
            saved_at=data["saved_at"],
            fingerprint=data["fingerprint"],
        )


@runtime_checkable
class DocumentStore(Protocol):
    """
    Protocol for document stores.

    `load` returns None when nothing was saved for the type.
    """

    def save(self, document_type: DocumentType, document: GeneratedDocument, schema: DocumentSchema) -> StoredDocument:
        ...

    def load(self, document_type: DocumentType) -> Optional[StoredDocument]:
        ...

    def publish(self, document_type: DocumentType) -> StoredDocument:
        ...

    def status(self, document_type: DocumentType) -> ArtifactStatus:
        ...


# =============================================================================
# In-memory store
# =============================================================================

class InMemoryDocumentStore:
    """Process-local store."""

    def __init__(self, clock: Callable[[], datetime] = _utc_now):
        self._clock = clock
        self._documents: dict[DocumentType, StoredDocument] = {}

    def save(self, document_type: DocumentType, document: GeneratedDocument, schema: DocumentSchema) -> StoredDocument:
        stored = _make_stored(document_type, document, schema, self._clock)
        self._documents[stored.type] = stored
        logger.info("Saved %s draft (%s)", stored.type.value, stored.fingerprint[:12])
        return stored

    def load(self, document_type: DocumentType) -> Optional[StoredDocument]:
        return self._documents.get(DocumentType(document_type))

    def publish(self, document_type: DocumentType) -> StoredDocument:
        stored = _require(self.load(document_type), document_type)
        published = replace(stored, status=ArtifactStatus.READY)
        self._documents[published.type] = published
        logger.info("Published %s", published.type.value)
        return published

    def status(self, document_type: DocumentType) -> ArtifactStatus:
        stored = self.load(document_type)
        return stored.status if stored else ArtifactStatus.NOT_CREATED


# =============================================================================
# File store
# =============================================================================

class FileDocumentStore:
    """
    JSON-file store: `<directory>/<document-type>.json`.

    Writes go to a temporary file first and are moved into place, so a
    crash never leaves a half-written document.
    """

    def __init__(self, directory: Union[str, Path], clock: Callable[[], datetime] = _utc_now):
        self.directory = Path(directory)
        self._clock = clock
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(
                message=f"Cannot create store directory: {e}",
                details={"directory": str(self.directory)},
            )

    def path_for(self, document_type: DocumentType) -> Path:
        return self.directory / f"{DocumentType(document_type).value}.json"

    def save(self, document_type: DocumentType, document: GeneratedDocument, schema: DocumentSchema) -> StoredDocument:
        stored = _make_stored(document_type, document, schema, self._clock)
        self._write(stored)
        logger.info("Saved %s draft to %s", stored.type.value, self.path_for(stored.type))
        return stored

    def load(self, document_type: DocumentType) -> Optional[StoredDocument]:
        path = self.path_for(document_type)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return StoredDocument.from_dict(json.load(f))
        except (OSError, ValueError, KeyError) as e:
            raise StorageError(
                message=f"Cannot read stored document: {e}",
                details={"path": str(path)},
                document_type=DocumentType(document_type).value,
            )

    def publish(self, document_type: DocumentType) -> StoredDocument:
        stored = _require(self.load(document_type), document_type)
        published = replace(stored, status=ArtifactStatus.READY)
        self._write(published)
        logger.info("Published %s", published.type.value)
        return published

    def status(self, document_type: DocumentType) -> ArtifactStatus:
        stored = self.load(document_type)
        return stored.status if stored else ArtifactStatus.NOT_CREATED

    def _write(self, stored: StoredDocument) -> None:
        path = self.path_for(stored.type)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(stored.to_dict(), f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except OSError as e:
            raise StorageError(
                message=f"Cannot write stored document: {e}",
                details={"path": str(path)},
                document_type=stored.type.value,
            )


# =============================================================================
# Helpers
# =============================================================================

def _make_stored(
    document_type: DocumentType,
    document: GeneratedDocument,
    schema: DocumentSchema,
    clock: Callable[[], datetime],
) -> StoredDocument:
    return StoredDocument(
        type=DocumentType(document_type),
        document=document,
        schema=schema,
        status=ArtifactStatus.DRAFT,
        saved_at=clock().isoformat(),
        fingerprint=document_fingerprint(document),
    )


def _require(stored: Optional[StoredDocument], document_type: DocumentType) -> StoredDocument:
    if stored is None:
        raise DocumentNotFoundError(
            message=f"No saved {DocumentType(document_type).value} to publish",
            document_type=DocumentType(document_type).value,
        )
    return stored


def create_store(directory: Optional[Union[str, Path]] = None) -> DocumentStore:
    """File store when a directory is given, otherwise in-memory."""
    if directory is None:
        return InMemoryDocumentStore()
    return FileDocumentStore(directory)
