"""
Query interface for callers.

Steward bundles a loaded PolicyIndex with its configuration and exposes the
operations an embedding system needs for one unit of work:

    steward = Steward.from_config(load_config(project_dir))
    policies = steward.scenario("new api endpoint")
    scope = steward.validate_scope(["app/checkout/pay.ts"], sprint)
    verdict = steward.compare_regression(baseline, current)

Every operation is a pure function of its arguments and the (immutable)
index, so one Steward may be shared freely.
"""

import logging
from typing import Iterable, Mapping

from steward.lib.config import StewardConfig
from steward.lib.constants import DEFAULT_FALLBACK_CATEGORIES, DEFAULT_IMPACT_THRESHOLD
from steward.lib.types import (
    Classification,
    Query,
    QueryType,
    Recommendation,
    Sprint,
    TestRunSummary,
    Verdict,
)
from steward.policy.index import PolicyIndex, load_policy_index
from steward.policy.search import (
    SearchResult,
    fallback_result,
    merge_results,
    search,
    search_with_fallback,
)
from steward.regression.detector import compare
from steward.scope.impact import ImpactAnalyzer
from steward.scope.validator import classify

logger = logging.getLogger(__name__)


class Steward:
    """Policy search, scope validation, impact analysis, and regression checks."""

    def __init__(
        self,
        index: PolicyIndex,
        impact_threshold: int = DEFAULT_IMPACT_THRESHOLD,
        fallback_categories: Iterable[str] = DEFAULT_FALLBACK_CATEGORIES,
    ):
        self.index = index
        self.impact = ImpactAnalyzer(impact_threshold)
        self.fallback_categories = tuple(fallback_categories)

    @classmethod
    def from_config(cls, config: StewardConfig) -> "Steward":
        """Load the configured policy index. Index errors are fatal here."""
        index = load_policy_index(config.policy_index)
        return cls(
            index,
            impact_threshold=config.impact_threshold,
            fallback_categories=config.fallback_categories,
        )

    # Policy search

    def query(
        self,
        query_type: QueryType,
        value: str,
        limit: int | None = None,
        fallback: bool = True,
    ) -> SearchResult:
        query = Query(query_type, value)
        if fallback:
            return search_with_fallback(query, self.index, self.fallback_categories, limit=limit)
        return search(query, self.index, limit=limit)

    def search(self, keyword: str, **kwargs) -> SearchResult:
        return self.query(QueryType.KEYWORD, keyword, **kwargs)

    def scenario(self, scenario: str, **kwargs) -> SearchResult:
        return self.query(QueryType.SCENARIO, scenario, **kwargs)

    def tech(self, technology: str, **kwargs) -> SearchResult:
        return self.query(QueryType.TECHNOLOGY, technology, **kwargs)

    def category(self, category: str, **kwargs) -> SearchResult:
        return self.query(QueryType.CATEGORY, category, **kwargs)

    def policies_for(self, queries: Iterable[Query], limit: int | None = None) -> SearchResult:
        """Union several queries (e.g. scenario + technology), first occurrence wins.

        Falls back to the default categories only if every query missed.
        """
        results = [search(q, self.index) for q in queries]
        merged = merge_results(*results)
        if merged.not_found or not merged.records:
            logger.info("[SEARCH] No query matched, using fallback categories")
            return fallback_result(self.index, self.fallback_categories, limit=limit)
        if limit is not None:
            return SearchResult(records=merged.records[:limit])
        return merged

    # Scope

    def validate_scope(self, paths: Iterable[str], sprint: Sprint) -> dict[str, Classification]:
        return classify(paths, sprint)

    def analyze_impact(self, path: str, usage_count: int, breaking: bool) -> Recommendation:
        return self.impact.analyze(path, usage_count, breaking)

    def analyze_unscoped(
        self,
        classification: Mapping[str, Classification],
        usage_counts: Mapping[str, int],
        breaking_paths: Iterable[str] = (),
    ) -> dict[str, Recommendation]:
        return self.impact.analyze_unscoped(classification, usage_counts, breaking_paths)

    # Regression

    def compare_regression(self, baseline: TestRunSummary, current: TestRunSummary) -> Verdict:
        return compare(baseline, current)
