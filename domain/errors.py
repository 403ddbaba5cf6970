"""Errors raised by the ContextRecords domain and its adapters."""
from __future__ import annotations


class ContextRecordsError(Exception):
    """Base class for every error raised by this package."""


class InvalidDocumentError(ContextRecordsError, ValueError):
    """A document (or a batch of documents) cannot be stored."""


class InvalidMetadataError(ContextRecordsError, ValueError):
    """Metadata holds a key or value outside the supported types."""


class InvalidCollectionNameError(ContextRecordsError, ValueError):
    """Collection name is empty or does not match the naming rules."""


class CollectionNotFoundError(ContextRecordsError, LookupError):
    """Named collection does not exist."""


class CollectionExistsError(ContextRecordsError):
    """Collection with the same name already exists."""


class InvalidCompressionError(ContextRecordsError, ValueError):
    """Compression metadata is inconsistent."""


class InvalidTenantError(ContextRecordsError, ValueError):
    """Tenant identifier is empty or not a string."""


class MissingTenantError(ContextRecordsError):
    """Tenant information is required but missing."""


class TenantFilterInjectionError(ContextRecordsError, ValueError):
    """User supplied filters try to set tenant fields."""


__all__ = [
    "ContextRecordsError",
    "InvalidDocumentError",
    "InvalidMetadataError",
    "InvalidCollectionNameError",
    "CollectionNotFoundError",
    "CollectionExistsError",
    "InvalidCompressionError",
    "InvalidTenantError",
    "MissingTenantError",
    "TenantFilterInjectionError",
]
