"""Collection naming rules.

Collections partition stored documents by scope:

* organization: ``org_{type}`` (``org_memories``)
* team: ``{team}_{type}`` (``platform_memories``)
* project: ``{team}_{project}_{type}`` (``platform_contextd_memories``)

Every name must match ``^[a-z0-9_]{1,64}$``.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import TYPE_CHECKING

from domain.errors import InvalidCollectionNameError

if TYPE_CHECKING:
    from domain.entities import TenantInfo

MAX_COLLECTION_NAME_LENGTH = 64
COLLECTION_NAME_PATTERN = re.compile(r"[a-z0-9_]{1,64}")
ORG_PREFIX = "org"

_UNSAFE_CHARS = re.compile(r"[^a-z0-9]+")


class CollectionScope(str, Enum):
    ORG = "org"
    TEAM = "team"
    PROJECT = "project"


def validate_collection_name(name: str) -> None:
    if not name:
        raise InvalidCollectionNameError("collection name cannot be empty")
    if not COLLECTION_NAME_PATTERN.fullmatch(name):
        raise InvalidCollectionNameError(
            f"collection name must match pattern ^[a-z0-9_]{{1,64}}$, got {name!r}"
        )


def is_valid_collection_name(name: str) -> bool:
    try:
        validate_collection_name(name)
    except InvalidCollectionNameError:
        return False
    return True


def sanitize_component(value: str) -> str:
    """Lowercase ``value`` and squash anything outside ``[a-z0-9]`` into ``_``."""

    cleaned = _UNSAFE_CHARS.sub("_", value.lower()).strip("_")
    if not cleaned:
        raise InvalidCollectionNameError(f"name component {value!r} has no usable characters")
    return cleaned


def _join(*parts: str) -> str:
    name = "_".join(sanitize_component(part) for part in parts)
    validate_collection_name(name)
    return name


def org_collection(collection_type: str) -> str:
    return _join(ORG_PREFIX, collection_type)


def team_collection(team: str, collection_type: str) -> str:
    return _join(team, collection_type)


def project_collection(team: str, project: str, collection_type: str) -> str:
    return _join(team, project, collection_type)


def collection_for_tenant(tenant: "TenantInfo", collection_type: str) -> tuple[CollectionScope, str]:
    """Pick the most specific collection the tenant scope allows.

    A project scope needs a team; a tenant with only a project id falls back to
    the organization collection.
    """

    tenant.validate()
    if tenant.team_id and tenant.project_id:
        return CollectionScope.PROJECT, project_collection(tenant.team_id, tenant.project_id, collection_type)
    if tenant.team_id:
        return CollectionScope.TEAM, team_collection(tenant.team_id, collection_type)
    return CollectionScope.ORG, org_collection(collection_type)


def resolve_collection(name: str | None, default: str) -> str:
    """Return ``name`` or, when it is empty, the ``default`` collection."""

    resolved = name or default
    validate_collection_name(resolved)
    return resolved


__all__ = [
    "MAX_COLLECTION_NAME_LENGTH",
    "COLLECTION_NAME_PATTERN",
    "CollectionScope",
    "validate_collection_name",
    "is_valid_collection_name",
    "sanitize_component",
    "org_collection",
    "team_collection",
    "project_collection",
    "collection_for_tenant",
    "resolve_collection",
]
