"""JSON codecs for documents, search results and compression metadata."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from domain.entities import (
    CompressionLevel,
    CompressionMetadata,
    Document,
    SearchResult,
    check_metadata,
)
from domain.errors import InvalidCompressionError, InvalidDocumentError, InvalidMetadataError


class DocumentPayload(BaseModel):
    id: str
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    collection: str = ""


class SearchResultPayload(BaseModel):
    id: str
    content: str
    score: float
    metadata: dict[str, Any] = Field(default_factory=dict)


class CompressionMetadataPayload(BaseModel):
    """Wire shape of :class:`CompressionMetadata`."""

    model_config = ConfigDict(populate_by_name=True)

    level: CompressionLevel = Field(alias="compression_level")
    algorithm: str = Field(default="", alias="compression_algorithm")
    original_size: int
    compressed_size: int
    compression_ratio: float
    compressed_at: Optional[datetime] = None


def document_to_dict(document: Document) -> dict[str, Any]:
    check_metadata(document.metadata)
    payload = DocumentPayload(
        id=document.id,
        content=document.content,
        metadata=document.metadata,
        collection=document.collection,
    )
    return payload.model_dump(mode="json")


def document_from_dict(data: Mapping[str, Any]) -> Document:
    try:
        payload = DocumentPayload.model_validate(data)
    except ValidationError as exc:
        raise InvalidDocumentError(f"malformed document: {exc}") from exc
    try:
        check_metadata(payload.metadata)
    except InvalidMetadataError as exc:
        raise InvalidDocumentError(str(exc)) from exc
    return Document(
        id=payload.id,
        content=payload.content,
        metadata=payload.metadata,
        collection=payload.collection,
    )


def document_to_json(document: Document) -> str:
    check_metadata(document.metadata)
    return DocumentPayload(
        id=document.id,
        content=document.content,
        metadata=document.metadata,
        collection=document.collection,
    ).model_dump_json()


def document_from_json(raw: str | bytes) -> Document:
    try:
        payload = DocumentPayload.model_validate_json(raw)
    except ValidationError as exc:
        raise InvalidDocumentError(f"malformed document: {exc}") from exc
    return document_from_dict(payload.model_dump())


def search_result_to_dict(result: SearchResult) -> dict[str, Any]:
    return SearchResultPayload(
        id=result.id,
        content=result.content,
        score=result.score,
        metadata=result.metadata,
    ).model_dump(mode="json")


def search_result_from_dict(data: Mapping[str, Any]) -> SearchResult:
    try:
        payload = SearchResultPayload.model_validate(data)
    except ValidationError as exc:
        raise InvalidDocumentError(f"malformed search result: {exc}") from exc
    return SearchResult(
        id=payload.id,
        content=payload.content,
        score=payload.score,
        metadata=payload.metadata,
    )


def search_result_to_json(result: SearchResult) -> str:
    return SearchResultPayload(
        id=result.id,
        content=result.content,
        score=result.score,
        metadata=result.metadata,
    ).model_dump_json()


def search_result_from_json(raw: str | bytes) -> SearchResult:
    try:
        payload = SearchResultPayload.model_validate_json(raw)
    except ValidationError as exc:
        raise InvalidDocumentError(f"malformed search result: {exc}") from exc
    return search_result_from_dict(payload.model_dump())


def _compression_payload(metadata: CompressionMetadata) -> CompressionMetadataPayload:
    return CompressionMetadataPayload(
        level=metadata.level,
        algorithm=metadata.algorithm,
        original_size=metadata.original_size,
        compressed_size=metadata.compressed_size,
        compression_ratio=metadata.compression_ratio,
        compressed_at=metadata.compressed_at,
    )


def _compression_from_payload(payload: CompressionMetadataPayload) -> CompressionMetadata:
    metadata = CompressionMetadata(
        level=payload.level,
        algorithm=payload.algorithm,
        original_size=payload.original_size,
        compressed_size=payload.compressed_size,
        compression_ratio=payload.compression_ratio,
        compressed_at=payload.compressed_at,
    )
    metadata.validate()
    return metadata


def compression_metadata_to_dict(metadata: CompressionMetadata) -> dict[str, Any]:
    """Encode with wire names; empty algorithm and unset timestamp are omitted."""

    metadata.validate()
    data = _compression_payload(metadata).model_dump(mode="json", by_alias=True, exclude_none=True)
    if not data.get("compression_algorithm"):
        data.pop("compression_algorithm", None)
    return data


def compression_metadata_from_dict(data: Mapping[str, Any]) -> CompressionMetadata:
    try:
        payload = CompressionMetadataPayload.model_validate(data)
    except ValidationError as exc:
        raise InvalidCompressionError(f"malformed compression metadata: {exc}") from exc
    return _compression_from_payload(payload)


def compression_metadata_to_json(metadata: CompressionMetadata) -> str:
    metadata.validate()
    payload = _compression_payload(metadata)
    exclude = {"algorithm"} if not metadata.algorithm else None
    return payload.model_dump_json(by_alias=True, exclude_none=True, exclude=exclude)


def compression_metadata_from_json(raw: str | bytes) -> CompressionMetadata:
    try:
        payload = CompressionMetadataPayload.model_validate_json(raw)
    except ValidationError as exc:
        raise InvalidCompressionError(f"malformed compression metadata: {exc}") from exc
    return _compression_from_payload(payload)


__all__ = [
    "DocumentPayload",
    "SearchResultPayload",
    "CompressionMetadataPayload",
    "document_to_dict",
    "document_from_dict",
    "document_to_json",
    "document_from_json",
    "search_result_to_dict",
    "search_result_from_dict",
    "search_result_to_json",
    "search_result_from_json",
    "compression_metadata_to_dict",
    "compression_metadata_from_dict",
    "compression_metadata_to_json",
    "compression_metadata_from_json",
]
