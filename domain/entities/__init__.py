"""Domain entities for the ContextRecords system."""
from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Union

from domain.collections import validate_collection_name
from domain.errors import (
    InvalidCompressionError,
    InvalidDocumentError,
    InvalidMetadataError,
    InvalidTenantError,
)

MetadataValue = Union[str, int, float, bool, None, list["MetadataValue"], dict[str, "MetadataValue"]]
Metadata = dict[str, MetadataValue]

RATIO_TOLERANCE = 1e-6


def check_metadata(metadata: Mapping[str, Any], path: str = "metadata") -> None:
    """Raise ``InvalidMetadataError`` if ``metadata`` is not a plain JSON-like mapping."""

    if not isinstance(metadata, Mapping):
        raise InvalidMetadataError(f"{path} must be a mapping, got {type(metadata).__name__}")
    for key, value in metadata.items():
        if not isinstance(key, str):
            raise InvalidMetadataError(f"{path} keys must be strings, got {key!r}")
        _check_metadata_value(value, f"{path}.{key}")


def _check_metadata_value(value: Any, path: str) -> None:
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidMetadataError(f"{path} must be a finite number, got {value!r}")
        return
    if value is None or isinstance(value, (str, bool, int)):
        return
    if isinstance(value, dict):
        check_metadata(value, path)
        return
    if isinstance(value, list):
        for index, item in enumerate(value):
            _check_metadata_value(item, f"{path}[{index}]")
        return
    raise InvalidMetadataError(f"{path} has unsupported type {type(value).__name__}")


@dataclass(slots=True)
class Document:
    """Unit of content submitted for storage in a collection."""

    id: str
    content: str
    metadata: Metadata = field(default_factory=dict)
    collection: str = ""

    def uses_default_collection(self) -> bool:
        return not self.collection

    def validate(self) -> None:
        if not self.id:
            raise InvalidDocumentError("document id must not be empty")
        if self.collection:
            validate_collection_name(self.collection)
        check_metadata(self.metadata)


@dataclass(slots=True)
class SearchResult:
    """A ranked record returned from a similarity query.

    ``score`` is a relative ranking signal: higher means more similar, and it is
    not bounded to ``[0, 1]``.
    """

    id: str
    content: str
    score: float
    metadata: Metadata = field(default_factory=dict)

    @classmethod
    def from_document(cls, document: Document, score: float) -> "SearchResult":
        return cls(
            id=document.id,
            content=document.content,
            score=float(score),
            metadata=copy.deepcopy(document.metadata),
        )


class CompressionLevel(str, Enum):
    """How far a document's content has been reduced."""

    NONE = "none"
    FOLDED = "folded"
    SUMMARY = "summary"

    @property
    def rank(self) -> int:
        return _LEVEL_RANKS[self]

    def can_transition_to(self, target: "CompressionLevel") -> bool:
        return target.rank >= self.rank


_LEVEL_RANKS = {
    CompressionLevel.NONE: 0,
    CompressionLevel.FOLDED: 1,
    CompressionLevel.SUMMARY: 2,
}


def _coerce_level(level: CompressionLevel | str) -> CompressionLevel:
    try:
        return CompressionLevel(level)
    except ValueError as exc:
        raise InvalidCompressionError(f"unknown compression level {level!r}") from exc


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _ratio(original_size: int, compressed_size: int) -> float | None:
    if original_size > 0 and compressed_size > 0:
        return original_size / compressed_size
    return None


@dataclass(slots=True)
class CompressionMetadata:
    """Describes how a document's content has been compressed."""

    level: CompressionLevel = CompressionLevel.NONE
    algorithm: str = ""
    original_size: int = 0
    compressed_size: int = 0
    compression_ratio: float = 0.0
    compressed_at: datetime | None = None

    def __post_init__(self) -> None:
        self.level = _coerce_level(self.level)

    @classmethod
    def uncompressed(cls, size: int) -> "CompressionMetadata":
        if size < 0:
            raise InvalidCompressionError(f"size must not be negative, got {size}")
        return cls(
            level=CompressionLevel.NONE,
            original_size=size,
            compressed_size=size,
            compression_ratio=1.0 if size > 0 else 0.0,
        )

    @classmethod
    def for_sizes(
        cls,
        level: CompressionLevel,
        original_size: int,
        compressed_size: int,
        algorithm: str = "",
        compressed_at: datetime | None = None,
    ) -> "CompressionMetadata":
        """Build metadata with the ratio derived from the two sizes."""

        level = _coerce_level(level)
        if level is not CompressionLevel.NONE and compressed_at is None:
            compressed_at = _utcnow()
        ratio = _ratio(original_size, compressed_size)
        return cls(
            level=level,
            algorithm=algorithm,
            original_size=original_size,
            compressed_size=compressed_size,
            compression_ratio=ratio if ratio is not None else 0.0,
            compressed_at=compressed_at,
        )

    def expected_ratio(self) -> float | None:
        return _ratio(self.original_size, self.compressed_size)

    def validate(self) -> None:
        if self.original_size < 0 or self.compressed_size < 0:
            raise InvalidCompressionError("sizes must not be negative")
        if self.level is CompressionLevel.NONE:
            if self.algorithm:
                raise InvalidCompressionError("uncompressed content must not name an algorithm")
            if self.compressed_at is not None:
                raise InvalidCompressionError("uncompressed content must not carry compressed_at")
        elif self.compressed_at is None:
            raise InvalidCompressionError(f"compressed_at is required for level {self.level.value!r}")
        expected = self.expected_ratio()
        if expected is not None and not math.isclose(
            self.compression_ratio, expected, rel_tol=RATIO_TOLERANCE
        ):
            raise InvalidCompressionError(
                f"compression_ratio {self.compression_ratio} does not match "
                f"{self.original_size}/{self.compressed_size}"
            )

    def advance(
        self,
        level: CompressionLevel,
        compressed_size: int,
        algorithm: str = "",
        compressed_at: datetime | None = None,
    ) -> "CompressionMetadata":
        """Return the metadata for a further compression step of the same content."""

        level = _coerce_level(level)
        if not self.level.can_transition_to(level):
            raise InvalidCompressionError(
                f"cannot move compression level from {self.level.value!r} to {level.value!r}"
            )
        return CompressionMetadata.for_sizes(
            level,
            self.original_size,
            compressed_size,
            algorithm=algorithm,
            compressed_at=compressed_at,
        )


@dataclass(slots=True)
class CollectionInfo:
    """Basic facts about a collection."""

    name: str
    point_count: int = 0
    vector_size: int = 0


@dataclass(slots=True)
class TenantInfo:
    """Tenant scope: organization, and optionally team and project."""

    tenant_id: str
    team_id: str = ""
    project_id: str = ""

    def validate(self) -> None:
        if not isinstance(self.tenant_id, str) or not self.tenant_id:
            raise InvalidTenantError("tenant_id must be a non-empty string")

    def tenant_metadata(self) -> Metadata:
        return self._scope()

    def tenant_filter(self) -> Metadata:
        return self._scope()

    def _scope(self) -> Metadata:
        scope: Metadata = {"tenant_id": self.tenant_id}
        if self.team_id:
            scope["team_id"] = self.team_id
        if self.project_id:
            scope["project_id"] = self.project_id
        return scope


__all__ = [
    "MetadataValue",
    "Metadata",
    "RATIO_TOLERANCE",
    "check_metadata",
    "Document",
    "SearchResult",
    "CompressionLevel",
    "CompressionMetadata",
    "CollectionInfo",
    "TenantInfo",
]
