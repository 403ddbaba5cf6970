import contextlib
import importlib.util
import io
import json
import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from application.use_cases.import_records import export_documents, import_documents
from domain.entities import Document, TenantInfo
from infrastructure.repositories.sqlite_document_repository import SqliteDocumentRepository
from infrastructure.serialization.record_codec import document_from_json

SCRIPT_PATH = Path(__file__).resolve().parents[1] / "scripts" / "inspect_records.py"


class TestImportDocuments(unittest.TestCase):
    def test_import_reports_bad_lines(self) -> None:
        lines = [
            json.dumps({"id": "doc-1", "content": "alpha", "metadata": {"owner": "alice"}}),
            "",
            "{broken",
            json.dumps({"id": "doc-2", "content": "beta", "collection": "platform_memories"}),
            json.dumps({"id": "doc-3", "content": "gamma", "collection": "Bad Name"}),
        ]
        with tempfile.TemporaryDirectory() as tmp:
            repo = SqliteDocumentRepository(Path(tmp) / "records.db")
            report = import_documents(lines, repository=repo, tenant=TenantInfo("org-1"))

            self.assertEqual(report.total, 4)
            self.assertEqual(report.imported, 2)
            self.assertEqual([failure.line for failure in report.errors], [3, 5])
            stored = repo.get(repo.default_collection, "doc-1")
            self.assertEqual(stored.metadata, {"owner": "alice", "tenant_id": "org-1"})

    def test_export_roundtrip(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            repo = SqliteDocumentRepository(Path(tmp) / "records.db")
            repo.add(Document(id="doc-1", content="alpha", metadata={"n": 1}, collection="platform_memories"))
            exported = list(export_documents(repo, "platform_memories"))
            self.assertEqual(
                [document_from_json(line) for line in exported],
                [Document(id="doc-1", content="alpha", metadata={"n": 1}, collection="platform_memories")],
            )


class TestInspectRecordsScript(unittest.TestCase):
    def _load_script(self):
        spec = importlib.util.spec_from_file_location("inspect_records", SCRIPT_PATH)
        module = importlib.util.module_from_spec(spec)
        assert spec.loader is not None
        spec.loader.exec_module(module)
        return module

    def test_import_then_list_and_export(self) -> None:
        script = self._load_script()
        with tempfile.TemporaryDirectory() as tmp:
            source = Path(tmp) / "docs.jsonl"
            source.write_text(
                json.dumps({"id": "doc-1", "content": "alpha"}) + "\n"
                + json.dumps({"id": "doc-2", "content": "beta", "collection": "platform_memories"}) + "\n",
                encoding="utf-8",
            )
            env = {"CONTEXTRECORDS_LOG_FILE": str(Path(tmp) / "records.log")}
            with mock.patch.dict(os.environ, env), mock.patch.object(logging.getLogger(), "handlers", [logging.NullHandler()]):
                out = io.StringIO()
                with contextlib.redirect_stdout(out):
                    self.assertEqual(script.main(["--data-root", tmp, "import", str(source), "--tenant-id", "org-1"]), 0)
                    self.assertEqual(script.main(["--data-root", tmp, "collections"]), 0)
                    self.assertEqual(script.main(["--data-root", tmp, "export", "--collection", "platform_memories"]), 0)

            lines = out.getvalue().splitlines()
            self.assertEqual(lines[0], "imported 2 of 2")
            self.assertEqual(lines[1:3], ["org_documents\t1", "platform_memories\t1"])
            exported = document_from_json(lines[3])
            self.assertEqual(exported.id, "doc-2")
            self.assertEqual(exported.metadata, {"tenant_id": "org-1"})

    def test_bad_input_exits_with_message(self) -> None:
        script = self._load_script()
        with tempfile.TemporaryDirectory() as tmp:
            source = Path(tmp) / "latin1.jsonl"
            source.write_bytes(b'{"id": "doc-1", "content": "caf\xe9"}\n')
            env = {"CONTEXTRECORDS_LOG_FILE": str(Path(tmp) / "records.log")}
            with mock.patch.dict(os.environ, env), mock.patch.object(logging.getLogger(), "handlers", [logging.NullHandler()]):
                err = io.StringIO()
                with contextlib.redirect_stderr(err), contextlib.redirect_stdout(io.StringIO()):
                    bad_collection = script.main(["--data-root", tmp, "--default-collection", "Bad-Name", "collections"])
                    bad_encoding = script.main(["--data-root", tmp, "import", str(source)])

            self.assertEqual(bad_collection, 2)
            self.assertEqual(bad_encoding, 2)
            messages = err.getvalue().splitlines()
            self.assertEqual(len(messages), 2)
            self.assertTrue(all(message.startswith("error: ") for message in messages))


if __name__ == "__main__":
    unittest.main()
