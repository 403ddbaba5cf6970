"""Ordering of search results."""
from __future__ import annotations

from typing import Iterable

from domain.entities import SearchResult


def rank_results(results: Iterable[SearchResult], top_k: int | None = None) -> list[SearchResult]:
    """Sort results by score, highest first, keeping input order for ties."""

    ranked = sorted(results, key=lambda result: result.score, reverse=True)
    if top_k is None:
        return ranked
    if top_k <= 0:
        return []
    return ranked[:top_k]


def deduplicate_results(results: Iterable[SearchResult], top_k: int | None = None) -> list[SearchResult]:
    """Keep the best scoring result for each id, then rank."""

    best: dict[str, SearchResult] = {}
    for result in results:
        current = best.get(result.id)
        if current is None or result.score > current.score:
            best[result.id] = result
    return rank_results(best.values(), top_k=top_k)


__all__ = ["rank_results", "deduplicate_results"]
