"""Dependency wiring for the ContextRecords application."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from domain.collections import validate_collection_name
from domain.interfaces import DocumentRepository
from infrastructure.repositories.sqlite_document_repository import (
    DEFAULT_COLLECTION,
    SqliteDocumentRepository,
)

ENV_PREFIX = "CONTEXTRECORDS_"


@dataclass(slots=True)
class ContainerConfig:
    """Configuration for storage location and defaults."""

    data_root: str = "data"
    db_name: str = "contextrecords.db"
    default_collection: str = DEFAULT_COLLECTION
    log_level: str = "INFO"
    log_file: str = "contextrecords.log"

    @property
    def db_path(self) -> Path:
        return Path(self.data_root).expanduser() / self.db_name

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ContainerConfig":
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            data_root=env.get(f"{ENV_PREFIX}DATA_ROOT", defaults.data_root),
            db_name=env.get(f"{ENV_PREFIX}DB_NAME", defaults.db_name),
            default_collection=env.get(f"{ENV_PREFIX}DEFAULT_COLLECTION", defaults.default_collection),
            log_level=env.get(f"{ENV_PREFIX}LOG_LEVEL", defaults.log_level).upper(),
            log_file=env.get(f"{ENV_PREFIX}LOG_FILE", defaults.log_file),
        )


@dataclass(slots=True)
class Container:
    """Simple container bundling concrete infrastructure implementations."""

    config: ContainerConfig
    document_repository: DocumentRepository

    @property
    def default_collection(self) -> str:
        return self.config.default_collection


def build_default_container(config: ContainerConfig | None = None) -> Container:
    """Instantiate the default infrastructure stack."""

    cfg = config or ContainerConfig.from_env()
    validate_collection_name(cfg.default_collection)
    document_repository = SqliteDocumentRepository(
        db_path=cfg.db_path,
        default_collection=cfg.default_collection,
    )
    return Container(config=cfg, document_repository=document_repository)


__all__ = ["ContainerConfig", "Container", "build_default_container"]
