import tempfile
import unittest
from pathlib import Path
from typing import Sequence

from application.use_cases.add_documents import add_documents, prepare_documents, store_documents
from application.use_cases.search import search
from domain.entities import CollectionInfo, Document, SearchResult, TenantInfo
from domain.errors import (
    CollectionExistsError,
    CollectionNotFoundError,
    InvalidCollectionNameError,
    InvalidDocumentError,
    TenantFilterInjectionError,
)
from domain.filters import matches_filters
from domain.interfaces import VectorStore
from infrastructure.repositories.sqlite_document_repository import SqliteDocumentRepository

DEFAULT = "org_memories"


class RecordingStore(VectorStore):
    """Keeps documents per collection and scores them by word overlap."""

    def __init__(self, default_collection: str = DEFAULT) -> None:
        self.default_collection = default_collection
        self.collections: dict[str, dict[str, Document]] = {}
        self.add_calls: list[list[Document]] = []
        self.search_calls: list[tuple[str, str, int, dict | None]] = []

    def add_documents(self, documents: Sequence[Document]) -> list[str]:
        self.add_calls.append(list(documents))
        for document in documents:
            collection = document.collection or self.default_collection
            self.collections.setdefault(collection, {})[document.id] = document
        return [document.id for document in documents]

    def search(self, query: str, k: int) -> list[SearchResult]:
        return self.search_in_collection(self.default_collection, query, k)

    def search_with_filters(self, query, k, filters):
        return self.search_in_collection(self.default_collection, query, k, filters)

    def search_in_collection(self, collection, query, k, filters=None):
        self.search_calls.append((collection, query, k, filters))
        words = set(query.lower().split())
        results = [
            SearchResult.from_document(document, len(words & set(document.content.lower().split())))
            for document in self.collections.get(collection, {}).values()
            if matches_filters(document.metadata, filters)
        ]
        return results

    def delete_documents(self, ids):
        self.delete_documents_from_collection(self.default_collection, ids)

    def delete_documents_from_collection(self, collection, ids):
        for document_id in ids:
            self.collections.get(collection, {}).pop(document_id, None)

    def create_collection(self, name, vector_size):
        if name in self.collections:
            raise CollectionExistsError(name)
        self.collections[name] = {}

    def delete_collection(self, name):
        if self.collections.pop(name, None) is None:
            raise CollectionNotFoundError(name)

    def collection_exists(self, name):
        return name in self.collections

    def list_collections(self):
        return sorted(self.collections)

    def get_collection_info(self, name):
        if name not in self.collections:
            raise CollectionNotFoundError(name)
        return CollectionInfo(name=name, point_count=len(self.collections[name]), vector_size=3)

    def close(self):
        self.collections.clear()


class TestPrepareDocuments(unittest.TestCase):
    def test_empty_batch_rejected(self) -> None:
        with self.assertRaises(InvalidDocumentError):
            prepare_documents([], default_collection=DEFAULT)

    def test_empty_collection_resolved_to_default(self) -> None:
        original = Document(id="doc-1", content="alpha")
        prepared = prepare_documents([original], default_collection=DEFAULT)
        self.assertEqual(prepared[0].collection, DEFAULT)
        self.assertEqual(original.collection, "")

    def test_duplicate_ids_in_same_collection_rejected(self) -> None:
        documents = [
            Document(id="doc-1", content="a"),
            Document(id="doc-1", content="b", collection=DEFAULT),
        ]
        with self.assertRaises(InvalidDocumentError):
            prepare_documents(documents, default_collection=DEFAULT)

    def test_same_id_in_different_collections_allowed(self) -> None:
        documents = [
            Document(id="doc-1", content="a"),
            Document(id="doc-1", content="b", collection="platform_memories"),
        ]
        prepared = prepare_documents(documents, default_collection=DEFAULT)
        self.assertEqual([document.collection for document in prepared], [DEFAULT, "platform_memories"])

    def test_tenant_metadata_overrides_caller_values(self) -> None:
        document = Document(id="doc-1", content="a", metadata={"tenant_id": "spoofed", "owner": "alice"})
        prepared = prepare_documents([document], default_collection=DEFAULT, tenant=TenantInfo("org-1"))
        self.assertEqual(prepared[0].metadata, {"owner": "alice", "tenant_id": "org-1"})
        self.assertEqual(document.metadata["tenant_id"], "spoofed")

    def test_prepared_metadata_does_not_share_nested_values(self) -> None:
        document = Document(id="doc-1", content="a", metadata={"extra": {"n": 1}, "tags": ["go"]})
        prepared = prepare_documents([document], default_collection=DEFAULT)
        document.metadata["extra"]["n"] = 2
        document.metadata["tags"].append("cli")
        self.assertEqual(prepared[0].metadata, {"extra": {"n": 1}, "tags": ["go"]})


class TestAddDocuments(unittest.TestCase):
    def test_documents_grouped_by_collection(self) -> None:
        store = RecordingStore()
        ids = add_documents(
            [
                Document(id="a", content="alpha"),
                Document(id="b", content="beta", collection="platform_memories"),
                Document(id="c", content="gamma"),
            ],
            store=store,
            default_collection=DEFAULT,
        )
        self.assertEqual(ids, ["a", "c", "b"])
        self.assertEqual(len(store.add_calls), 2)
        self.assertEqual(sorted(store.collections[DEFAULT]), ["a", "c"])
        self.assertEqual(list(store.collections["platform_memories"]), ["b"])

    def test_invalid_document_stops_batch(self) -> None:
        store = RecordingStore()
        with self.assertRaises(InvalidCollectionNameError):
            add_documents(
                [Document(id="a", content="alpha"), Document(id="b", content="beta", collection="Bad Name")],
                store=store,
                default_collection=DEFAULT,
            )
        self.assertEqual(store.add_calls, [])


class TestSearch(unittest.TestCase):
    def setUp(self) -> None:
        self.store = RecordingStore()
        add_documents(
            [
                Document(id="a", content="vector search basics", metadata={"owner": "alice"}),
                Document(id="b", content="vector search with filters and search tips", metadata={"owner": "bob"}),
                Document(id="c", content="cooking recipes", metadata={"owner": "alice"}),
            ],
            store=self.store,
            default_collection=DEFAULT,
            tenant=TenantInfo("org-1"),
        )

    def test_results_ranked_and_limited(self) -> None:
        results = search("vector search filters", store=self.store, default_collection=DEFAULT, k=2)
        self.assertEqual([result.id for result in results], ["b", "a"])
        self.assertGreaterEqual(results[0].score, results[1].score)

    def test_none_collection_uses_default(self) -> None:
        search("vector", store=self.store, default_collection=DEFAULT)
        self.assertEqual(self.store.search_calls[-1][0], DEFAULT)

    def test_tenant_filters_applied(self) -> None:
        search(
            "vector",
            store=self.store,
            default_collection=DEFAULT,
            filters={"owner": "alice"},
            tenant=TenantInfo("org-1"),
        )
        self.assertEqual(self.store.search_calls[-1][3], {"owner": "alice", "tenant_id": "org-1"})

    def test_other_tenant_sees_nothing(self) -> None:
        results = search("vector", store=self.store, default_collection=DEFAULT, tenant=TenantInfo("org-2"))
        self.assertEqual(results, [])

    def test_filter_injection_rejected(self) -> None:
        with self.assertRaises(TenantFilterInjectionError):
            search(
                "vector",
                store=self.store,
                default_collection=DEFAULT,
                filters={"tenant_id": "org-2"},
                tenant=TenantInfo("org-1"),
            )

    def test_non_positive_k(self) -> None:
        self.assertEqual(search("vector", store=self.store, default_collection=DEFAULT, k=0), [])
        self.assertEqual(self.store.search_calls, [])


class TestStoreDocuments(unittest.TestCase):
    def test_uses_repository_default_collection(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            repository = SqliteDocumentRepository(Path(tmp) / "records.db", default_collection="platform_memories")
            stored = store_documents([Document(id="doc-1", content="alpha")], repository=repository)
            self.assertEqual(stored[0].collection, "platform_memories")
            self.assertIsNotNone(repository.get("platform_memories", "doc-1"))


if __name__ == "__main__":
    unittest.main()
