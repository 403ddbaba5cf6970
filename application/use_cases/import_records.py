"""Import and export of documents as JSON lines."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from domain.entities import Document, TenantInfo
from domain.errors import ContextRecordsError
from domain.interfaces import DocumentRepository
from application.use_cases.add_documents import store_documents
from infrastructure.serialization.record_codec import document_from_json, document_to_json

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ImportFailure:
    line: int
    reason: str


@dataclass(slots=True)
class ImportReport:
    total: int
    imported: int
    errors: list[ImportFailure] = field(default_factory=list)


def import_documents(
    lines: Iterable[str],
    *,
    repository: DocumentRepository,
    tenant: TenantInfo | None = None,
) -> ImportReport:
    """Store every decodable line; bad lines are reported, not raised."""

    report = ImportReport(total=0, imported=0)
    for number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        report.total += 1
        try:
            document = document_from_json(line)
            store_documents([document], repository=repository, tenant=tenant)
        except ContextRecordsError as exc:
            logger.warning("Skipping line %d: %s", number, exc)
            report.errors.append(ImportFailure(line=number, reason=str(exc)))
            continue
        report.imported += 1
    return report


def export_documents(repository: DocumentRepository, collection: str | None = None) -> Iterator[str]:
    documents: list[Document] = repository.list(collection)
    for document in documents:
        yield document_to_json(document)


__all__ = ["ImportFailure", "ImportReport", "import_documents", "export_documents"]
