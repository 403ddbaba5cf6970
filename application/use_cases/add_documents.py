"""Use cases for submitting documents to a store or repository."""
from __future__ import annotations

import copy
import logging
from typing import Iterable

from domain.collections import resolve_collection
from domain.entities import Document, TenantInfo
from domain.errors import InvalidDocumentError
from domain.filters import TENANT_FILTER_KEYS
from domain.interfaces import DocumentRepository, VectorStore

logger = logging.getLogger(__name__)


def prepare_documents(
    documents: Iterable[Document],
    *,
    default_collection: str,
    tenant: TenantInfo | None = None,
) -> list[Document]:
    """Validate documents and return copies bound to a concrete collection.

    An empty ``collection`` means the caller's default collection. When a tenant
    is given its scope is written into each document's metadata, replacing any
    tenant fields the caller set.
    """

    documents = list(documents)
    if not documents:
        raise InvalidDocumentError("no documents to add")
    if tenant is not None:
        tenant.validate()

    prepared: list[Document] = []
    seen: set[tuple[str, str]] = set()
    for document in documents:
        document.validate()
        collection = resolve_collection(document.collection, default_collection)
        key = (collection, document.id)
        if key in seen:
            raise InvalidDocumentError(f"duplicate document id {document.id!r} in collection {collection!r}")
        seen.add(key)

        metadata = copy.deepcopy(document.metadata)
        if tenant is not None:
            for field_name in TENANT_FILTER_KEYS:
                metadata.pop(field_name, None)
            metadata.update(tenant.tenant_metadata())
        prepared.append(
            Document(id=document.id, content=document.content, metadata=metadata, collection=collection)
        )
    return prepared


def add_documents(
    documents: Iterable[Document],
    *,
    store: VectorStore,
    default_collection: str,
    tenant: TenantInfo | None = None,
) -> list[str]:
    """Add documents to a vector store and return the ids it reports."""

    prepared = prepare_documents(documents, default_collection=default_collection, tenant=tenant)
    by_collection: dict[str, list[Document]] = {}
    for document in prepared:
        by_collection.setdefault(document.collection, []).append(document)

    added: list[str] = []
    for collection, batch in by_collection.items():
        logger.debug("Adding %d documents to collection %s", len(batch), collection)
        added.extend(store.add_documents(batch))
    return added


def store_documents(
    documents: Iterable[Document],
    *,
    repository: DocumentRepository,
    tenant: TenantInfo | None = None,
) -> list[Document]:
    """Persist documents in a repository, using its default collection."""

    prepared = prepare_documents(
        documents,
        default_collection=repository.default_collection,
        tenant=tenant,
    )
    for document in prepared:
        repository.add(document)
    logger.debug("Stored %d documents", len(prepared))
    return prepared


__all__ = ["prepare_documents", "add_documents", "store_documents"]
