"""Policy index loading and search."""

from steward.policy.index import (
    DanglingPolicyReference,
    PolicyIndex,
    PolicyNotFound,
    build_policy_index,
    load_policy_index,
    normalize_key,
)
from steward.policy.search import (
    SearchResult,
    fallback_result,
    merge_results,
    rank_records,
    search,
    search_with_fallback,
)

__all__ = [
    "DanglingPolicyReference",
    "PolicyIndex",
    "PolicyNotFound",
    "SearchResult",
    "build_policy_index",
    "fallback_result",
    "load_policy_index",
    "merge_results",
    "normalize_key",
    "rank_records",
    "search",
    "search_with_fallback",
]
