from infrastructure.repositories.sqlite_document_repository import DEFAULT_COLLECTION, SqliteDocumentRepository

__all__ = [
    "DEFAULT_COLLECTION",
    "SqliteDocumentRepository",
]
