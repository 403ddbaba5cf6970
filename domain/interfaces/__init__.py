"""Abstract interfaces for the ContextRecords system."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Sequence

from domain.entities import CollectionInfo, Document, SearchResult

Filters = Mapping[str, Any]


class VectorStore(ABC):
    """Vector index backend that documents are stored in and searched from.

    Documents with an empty ``collection`` go to the store's default
    collection. Every search returns results ordered by score, highest first.
    """

    @abstractmethod
    def add_documents(self, documents: Sequence[Document]) -> list[str]:
        """Embed and store documents, returning their ids."""

    @abstractmethod
    def search(self, query: str, k: int) -> list[SearchResult]:
        """Search the default collection."""

    @abstractmethod
    def search_with_filters(self, query: str, k: int, filters: Filters | None) -> list[SearchResult]:
        """Search the default collection; results must match ALL filters."""

    @abstractmethod
    def search_in_collection(
        self,
        collection: str,
        query: str,
        k: int,
        filters: Filters | None = None,
    ) -> list[SearchResult]:
        """Search a named collection."""

    @abstractmethod
    def delete_documents(self, ids: Sequence[str]) -> None:
        """Delete documents from the default collection."""

    @abstractmethod
    def delete_documents_from_collection(self, collection: str, ids: Sequence[str]) -> None:
        """Delete documents from a named collection."""

    @abstractmethod
    def create_collection(self, name: str, vector_size: int) -> None:
        """Create a collection; raises ``CollectionExistsError`` if present."""

    @abstractmethod
    def delete_collection(self, name: str) -> None:
        """Delete a collection and every document in it."""

    @abstractmethod
    def collection_exists(self, name: str) -> bool:
        """Return True if the collection exists."""

    @abstractmethod
    def list_collections(self) -> list[str]:
        """Return all collection names."""

    @abstractmethod
    def get_collection_info(self, name: str) -> CollectionInfo:
        """Return collection facts; raises ``CollectionNotFoundError``."""

    @abstractmethod
    def close(self) -> None:
        """Release connections held by the store."""


class DocumentRepository(ABC):
    """Persists documents by collection."""

    default_collection: str

    @abstractmethod
    def add(self, document: Document) -> None:
        """Store a document record."""

    @abstractmethod
    def get(self, collection: str, document_id: str) -> Document | None:
        """Retrieve a document by collection and id."""

    @abstractmethod
    def list(self, collection: str | None = None) -> list[Document]:
        """Return stored documents, optionally for one collection."""

    @abstractmethod
    def delete(self, collection: str, ids: Sequence[str]) -> int:
        """Delete documents and return how many were removed."""

    @abstractmethod
    def list_collections(self) -> list[str]:
        """Return the names of collections holding documents."""

    @abstractmethod
    def get_collection_info(self, name: str) -> CollectionInfo:
        """Return collection facts; raises ``CollectionNotFoundError``."""


__all__ = [
    "Filters",
    "VectorStore",
    "DocumentRepository",
]
