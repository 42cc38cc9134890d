"""
Impact analysis for shared (unscoped) code.

Decides how a change to a file outside the sprint's explicit scope should
proceed, from how many places use it and whether the change breaks them:

    usage <= 1                          -> MODIFY_IN_PLACE
    usage > 1, non-breaking             -> MODIFY_IN_PLACE
    usage > 1, breaking, <= threshold   -> CREATE_VARIANT
    usage > threshold, breaking         -> REQUEST_PERMISSION

The usage count comes from the caller (e.g. a reference search); nothing
here searches code.
"""

import logging
from typing import Iterable, Mapping

from steward.lib.constants import DEFAULT_IMPACT_THRESHOLD
from steward.lib.types import Classification, Recommendation

logger = logging.getLogger(__name__)


def analyze(
    path: str,
    usage_count: int,
    breaking: bool,
    threshold: int = DEFAULT_IMPACT_THRESHOLD,
) -> Recommendation:
    """Recommend a strategy for modifying a shared file.

    Raises:
        ValueError: If usage_count is negative or threshold < 1
    """
    if usage_count < 0:
        raise ValueError(f"usage_count must be >= 0, got {usage_count}")
    if threshold < 1:
        raise ValueError(f"threshold must be >= 1, got {threshold}")

    if usage_count <= 1 or not breaking:
        recommendation = Recommendation.MODIFY_IN_PLACE
    elif usage_count <= threshold:
        recommendation = Recommendation.CREATE_VARIANT
    else:
        recommendation = Recommendation.REQUEST_PERMISSION

    logger.debug(
        f"[IMPACT] {path}: usage={usage_count} breaking={breaking} "
        f"threshold={threshold} -> {recommendation.value}"
    )
    return recommendation


class ImpactAnalyzer:
    """Impact analysis bound to a configured threshold."""

    def __init__(self, threshold: int = DEFAULT_IMPACT_THRESHOLD):
        if threshold < 1:
            raise ValueError(f"threshold must be >= 1, got {threshold}")
        self.threshold = threshold

    def analyze(self, path: str, usage_count: int, breaking: bool) -> Recommendation:
        return analyze(path, usage_count, breaking, self.threshold)

    def analyze_unscoped(
        self,
        classification: Mapping[str, Classification],
        usage_counts: Mapping[str, int],
        breaking_paths: Iterable[str] = (),
    ) -> dict[str, Recommendation]:
        """Run analysis for every UNSCOPED path of a classify() result.

        A path with no usage count is assessed REQUEST_PERMISSION: an
        unknown blast radius is never treated as safe.
        """
        breaking = set(breaking_paths)
        result: dict[str, Recommendation] = {}
        for path, outcome in classification.items():
            if outcome is not Classification.UNSCOPED:
                continue
            if path not in usage_counts:
                logger.warning(f"[IMPACT] {path}: no usage count supplied, requesting permission")
                result[path] = Recommendation.REQUEST_PERMISSION
                continue
            result[path] = self.analyze(path, usage_counts[path], path in breaking)
        return result
