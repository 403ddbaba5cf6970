"""Inspect, export and import documents in a ContextRecords database."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from application.use_cases.import_records import export_documents, import_documents
from domain.entities import TenantInfo
from domain.errors import ContextRecordsError
from infrastructure.config import ContainerConfig, build_default_container
from ui.logging_utils import setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--data-root",
        help="Directory holding the SQLite database (default: $CONTEXTRECORDS_DATA_ROOT or data)",
    )
    parser.add_argument(
        "--default-collection",
        help="Collection used for documents without one",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("collections", help="List collections and their document counts.")

    export_parser = subparsers.add_parser("export", help="Print documents as JSON lines.")
    export_parser.add_argument("--collection", help="Only export this collection.")

    import_parser = subparsers.add_parser("import", help="Import documents from a JSON lines file.")
    import_parser.add_argument("path", type=Path, help="File with one JSON document per line.")
    import_parser.add_argument("--tenant-id", help="Write this tenant into every document's metadata.")
    import_parser.add_argument("--team-id", default="")
    import_parser.add_argument("--project-id", default="")
    return parser.parse_args(argv)


def _run(args: argparse.Namespace) -> int:
    config = ContainerConfig.from_env()
    if args.data_root:
        config.data_root = args.data_root
    if args.default_collection:
        config.default_collection = args.default_collection
    setup_logging(config.log_level, config.log_file)
    container = build_default_container(config)
    repository = container.document_repository

    if args.command == "collections":
        for name in repository.list_collections():
            info = repository.get_collection_info(name)
            print(f"{info.name}\t{info.point_count}")
        return 0

    if args.command == "export":
        for line in export_documents(repository, args.collection):
            print(line)
        return 0

    tenant = None
    if args.tenant_id:
        tenant = TenantInfo(tenant_id=args.tenant_id, team_id=args.team_id, project_id=args.project_id)
    with args.path.open(encoding="utf-8") as handle:
        report = import_documents(handle, repository=repository, tenant=tenant)
    print(f"imported {report.imported} of {report.total}")
    for failure in report.errors:
        print(f"line {failure.line}: {failure.reason}", file=sys.stderr)
    return 1 if report.errors else 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        return _run(args)
    except (ContextRecordsError, UnicodeDecodeError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
