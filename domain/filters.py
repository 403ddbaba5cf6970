"""Metadata filters and tenant scoping for queries.

Tenant fields always come from the isolation layer. User supplied filters may
not set them, and a missing tenant is an error rather than an empty result.
"""
from __future__ import annotations

from typing import Any, Mapping, cast

from domain.entities import Metadata, TenantInfo
from domain.errors import InvalidTenantError, MissingTenantError, TenantFilterInjectionError

TENANT_FILTER_KEYS = ("tenant_id", "team_id", "project_id")


def apply_tenant_filters(
    user_filters: Mapping[str, Any] | None,
    tenant_filters: Mapping[str, Any] | None,
) -> dict[str, Any] | None:
    """Merge user filters with tenant filters; tenant values win."""

    if user_filters is None and tenant_filters is None:
        return None
    if user_filters is None:
        return dict(tenant_filters)

    injected = [key for key in TENANT_FILTER_KEYS if key in user_filters]
    if injected:
        raise TenantFilterInjectionError(
            f"user filters cannot contain tenant fields: {', '.join(injected)}"
        )

    merged = dict(user_filters)
    if tenant_filters:
        merged.update(tenant_filters)
    return merged


def merge_filters(
    base: Mapping[str, Any] | None,
    override: Mapping[str, Any] | None,
) -> dict[str, Any] | None:
    """Plain merge where ``override`` wins. Does not check tenant fields."""

    if base is None and override is None:
        return None
    merged = dict(base or {})
    merged.update(override or {})
    return merged


class _MappingBuilder:
    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def with_value(self, key: str, value: Any):
        self._values[key] = value
        return self

    def with_mapping(self, values: Mapping[str, Any] | None):
        if values:
            self._values.update(values)
        return self

    def build(self) -> dict[str, Any] | None:
        if not self._values:
            return None
        return dict(self._values)


class FilterBuilder(_MappingBuilder):
    """Fluent builder for query filters."""

    def with_tenant(self, tenant: TenantInfo | None) -> "FilterBuilder":
        if tenant is not None:
            self._values.update(tenant.tenant_filter())
        return self


class MetadataBuilder(_MappingBuilder):
    """Fluent builder for document metadata."""

    def with_tenant(self, tenant: TenantInfo | None) -> "MetadataBuilder":
        if tenant is not None:
            self._values.update(tenant.tenant_metadata())
        return self


def validate_filter_has_tenant(filters: Mapping[str, Any] | None) -> None:
    if not filters or "tenant_id" not in filters:
        raise MissingTenantError("filters do not carry tenant_id")
    tenant_id = filters["tenant_id"]
    if not isinstance(tenant_id, str) or not tenant_id:
        raise InvalidTenantError("tenant_id must be a non-empty string")


def extract_tenant_from_filters(filters: Mapping[str, Any] | None) -> TenantInfo:
    validate_filter_has_tenant(filters)
    filters = cast(Mapping[str, Any], filters)
    team_id = filters.get("team_id")
    project_id = filters.get("project_id")
    return TenantInfo(
        tenant_id=filters["tenant_id"],
        team_id=team_id if isinstance(team_id, str) else "",
        project_id=project_id if isinstance(project_id, str) else "",
    )


def matches_filters(metadata: Metadata, filters: Mapping[str, Any] | None) -> bool:
    """Return True when every filter key is present in ``metadata`` with an equal value."""

    if not filters:
        return True
    for key, expected in filters.items():
        if key not in metadata or metadata[key] != expected:
            return False
    return True


__all__ = [
    "TENANT_FILTER_KEYS",
    "apply_tenant_filters",
    "merge_filters",
    "FilterBuilder",
    "MetadataBuilder",
    "validate_filter_has_tenant",
    "extract_tenant_from_filters",
    "matches_filters",
]
