"""
Policy search engine.

Resolves a typed query (keyword, scenario, technology, category) against a
PolicyIndex and returns the matching policies, ranked:

1. level (MUST before SHOULD before MAY)
2. category priority (security, database, then index declaration order)
3. original index order

The sort is stable, so ties keep the order the index lists them in.

A key missing from the index is not an error: the result comes back empty
with not_found set, and callers fall back to the default categories
(search_with_fallback does this for them).
"""

import difflib
import logging
from dataclasses import dataclass
from typing import Iterable

from steward.lib.constants import (
    DEFAULT_FALLBACK_CATEGORIES,
    LEVEL_RANK,
    PRIORITY_CATEGORIES,
    QUERY_MAPPINGS,
)
from steward.lib.types import PolicyRecord, Query, QueryType

from .index import PolicyIndex, PolicyNotFound, normalize_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchResult:
    """Ranked policies for one or more queries."""
    records: tuple[PolicyRecord, ...] = ()
    not_found: bool = False
    query: Query | None = None
    suggestions: tuple[str, ...] = ()  # Close index keys when not_found
    fallback: bool = False  # True if records came from the default categories

    @property
    def ids(self) -> list[str]:
        return [r.id for r in self.records]

    def raise_for_missing(self) -> None:
        """Raise PolicyNotFound if the query key was absent."""
        if self.not_found:
            mapping = QUERY_MAPPINGS[self.query.type.value] if self.query else "index"
            key = self.query.value if self.query else ""
            raise PolicyNotFound(mapping, key)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)


def _category_ranks(index: PolicyIndex) -> dict[str, int]:
    """Map category -> rank. Priority categories first, then declaration order."""
    ranks: dict[str, int] = {}
    for category in (*PRIORITY_CATEGORIES, *index.category_order()):
        ranks.setdefault(category, len(ranks))
    return ranks


def rank_records(records: Iterable[PolicyRecord], index: PolicyIndex) -> list[PolicyRecord]:
    """Sort records by level, then category priority. Stable."""
    category_ranks = _category_ranks(index)
    unknown = len(category_ranks)
    return sorted(
        records,
        key=lambda r: (LEVEL_RANK[r.level.value], category_ranks.get(r.category, unknown)),
    )


def search(query: Query, index: PolicyIndex, limit: int | None = None) -> SearchResult:
    """
    Look up query.value in the index mapping named by query.type.

    Args:
        query: Typed query
        index: Loaded PolicyIndex
        limit: Optional maximum number of records, applied after ranking

    Returns:
        SearchResult; not_found=True (with suggestions) if the key is absent
    """
    mapping = QUERY_MAPPINGS[query.type.value]
    key = normalize_key(query.value)
    ids = index.mapping(mapping).get(key)

    if ids is None:
        suggestions = tuple(difflib.get_close_matches(key, list(index.mapping(mapping)), n=3))
        logger.info(f"[SEARCH] {query.type.value} '{key}' not in index")
        return SearchResult(not_found=True, query=query, suggestions=suggestions)

    # Dangling ids are rejected when the index loads, so every id resolves
    ranked = rank_records((index.records[i] for i in ids), index)
    if limit is not None:
        ranked = ranked[:limit]

    logger.debug(f"[SEARCH] {query.type.value} '{key}' -> {[r.id for r in ranked]}")
    return SearchResult(records=tuple(ranked), query=query)


def merge_results(*results: SearchResult) -> SearchResult:
    """Union result sets, dropping duplicate ids.

    Each policy keeps the position of its first occurrence. The merged
    result is not_found only if every input was.
    """
    seen: dict[str, PolicyRecord] = {}
    for result in results:
        for record in result.records:
            seen.setdefault(record.id, record)
    return SearchResult(
        records=tuple(seen.values()),
        not_found=bool(results) and all(r.not_found for r in results),
        fallback=any(r.fallback for r in results),
    )


def fallback_result(
    index: PolicyIndex,
    categories: Iterable[str] = DEFAULT_FALLBACK_CATEGORIES,
    limit: int | None = None,
) -> SearchResult:
    """Policies from the default categories, in the order given."""
    parts = [search(Query(QueryType.CATEGORY, c), index) for c in categories]
    merged = merge_results(*parts)
    records = merged.records[:limit] if limit is not None else merged.records
    return SearchResult(records=records, fallback=True)


def search_with_fallback(
    query: Query,
    index: PolicyIndex,
    categories: Iterable[str] = DEFAULT_FALLBACK_CATEGORIES,
    limit: int | None = None,
) -> SearchResult:
    """search(), falling back to the default categories when the key is absent.

    The returned result keeps not_found and suggestions from the original
    query so callers can still tell the user the key was unknown.
    """
    result = search(query, index, limit=limit)
    if not result.not_found:
        return result

    categories = tuple(categories)
    logger.info(f"[SEARCH] Falling back to categories: {', '.join(categories)}")
    fallback = fallback_result(index, categories, limit=limit)
    return SearchResult(
        records=fallback.records,
        not_found=True,
        query=query,
        suggestions=result.suggestions,
        fallback=True,
    )
