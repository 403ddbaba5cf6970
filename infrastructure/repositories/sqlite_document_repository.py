"""SQLite-репозиторий для документов, разбитых по коллекциям."""
from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Sequence

from domain.collections import resolve_collection, validate_collection_name
from domain.entities import CollectionInfo, Document, check_metadata
from domain.errors import CollectionNotFoundError, InvalidDocumentError
from domain.interfaces import DocumentRepository

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
DEFAULT_COLLECTION = "org_documents"


class SqliteDocumentRepository(DocumentRepository):
    """Хранит документы в лёгкой SQLite-базе."""

    def __init__(
        self,
        db_path: str | Path = "contextrecords.db",
        *,
        default_collection: str = DEFAULT_COLLECTION,
    ) -> None:
        validate_collection_name(default_collection)
        self.default_collection = default_collection
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS schema_version (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    version INTEGER NOT NULL
                )
                """
            )
            conn.execute(
                "INSERT OR IGNORE INTO schema_version (id, version) VALUES (1, ?)",
                (SCHEMA_VERSION,),
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    collection TEXT NOT NULL,
                    id TEXT NOT NULL,
                    content TEXT NOT NULL,
                    metadata TEXT NOT NULL,
                    PRIMARY KEY (collection, id)
                )
                """
            )

    def add(self, document: Document) -> None:
        if not document.id:
            raise InvalidDocumentError("document id must not be empty")
        check_metadata(document.metadata)
        collection = resolve_collection(document.collection, self.default_collection)
        with self._connect() as conn:
            conn.execute(
                """
                REPLACE INTO documents (collection, id, content, metadata)
                VALUES (?, ?, ?, ?)
                """,
                (collection, document.id, document.content, json.dumps(document.metadata)),
            )

    def get(self, collection: str, document_id: str) -> Document | None:
        collection = resolve_collection(collection, self.default_collection)
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT collection, id, content, metadata
                FROM documents WHERE collection = ? AND id = ?
                """,
                (collection, document_id),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_document(row)

    def list(self, collection: str | None = None) -> list[Document]:
        with self._connect() as conn:
            if collection is None:
                rows = conn.execute(
                    "SELECT collection, id, content, metadata FROM documents ORDER BY collection, id"
                ).fetchall()
            else:
                collection = resolve_collection(collection, self.default_collection)
                rows = conn.execute(
                    """
                    SELECT collection, id, content, metadata
                    FROM documents WHERE collection = ? ORDER BY id
                    """,
                    (collection,),
                ).fetchall()
                if not rows:
                    raise CollectionNotFoundError(f"collection not found: {collection}")
        return [self._row_to_document(row) for row in rows]

    def delete(self, collection: str, ids: Sequence[str]) -> int:
        collection = resolve_collection(collection, self.default_collection)
        if not ids:
            return 0
        with self._connect() as conn:
            cursor = conn.executemany(
                "DELETE FROM documents WHERE collection = ? AND id = ?",
                [(collection, document_id) for document_id in ids],
            )
            removed = cursor.rowcount
        logger.debug("Removed %d documents from %s", removed, collection)
        return removed

    def list_collections(self) -> list[str]:
        with self._connect() as conn:
            rows = conn.execute("SELECT DISTINCT collection FROM documents ORDER BY collection").fetchall()
        return [row[0] for row in rows]

    def get_collection_info(self, name: str) -> CollectionInfo:
        validate_collection_name(name)
        with self._connect() as conn:
            row = conn.execute("SELECT COUNT(*) FROM documents WHERE collection = ?", (name,)).fetchone()
        count = int(row[0]) if row is not None else 0
        if count == 0:
            raise CollectionNotFoundError(f"collection not found: {name}")
        return CollectionInfo(name=name, point_count=count, vector_size=0)

    @staticmethod
    def _row_to_document(row: tuple) -> Document:
        return Document(
            id=row[1],
            content=row[2],
            metadata=json.loads(row[3]),
            collection=row[0],
        )


__all__ = ["SqliteDocumentRepository", "DEFAULT_COLLECTION"]
