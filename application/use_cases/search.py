"""Use case that runs a similarity query against a vector store."""
from __future__ import annotations

import logging
from typing import Any, Mapping

from application.services.ranking import rank_results
from domain.collections import resolve_collection
from domain.entities import SearchResult, TenantInfo
from domain.filters import apply_tenant_filters
from domain.interfaces import VectorStore

logger = logging.getLogger(__name__)


def search(
    query_text: str,
    *,
    store: VectorStore,
    default_collection: str,
    collection: str | None = None,
    k: int = 5,
    filters: Mapping[str, Any] | None = None,
    tenant: TenantInfo | None = None,
) -> list[SearchResult]:
    """Search a collection and return at most ``k`` results, best first."""

    if k <= 0:
        return []
    tenant_filters = None
    if tenant is not None:
        tenant.validate()
        tenant_filters = tenant.tenant_filter()
    merged_filters = apply_tenant_filters(filters, tenant_filters)
    target = resolve_collection(collection, default_collection)

    logger.debug("Searching collection %s (k=%d, filters=%s)", target, k, merged_filters)
    results = store.search_in_collection(target, query_text, k, merged_filters)
    return rank_results(results, top_k=k)


__all__ = ["search"]
