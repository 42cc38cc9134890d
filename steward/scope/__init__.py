"""Sprint scope matching, classification, and impact analysis."""

from steward.scope.matcher import (
    CompiledPattern,
    InvalidPattern,
    compile_pattern,
    first_match,
    matches,
    matches_any,
    validate_patterns,
)
from steward.scope.validator import (
    ScopeFinding,
    ScopeReport,
    build_report,
    classify,
    explain,
)
from steward.scope.impact import ImpactAnalyzer, analyze

__all__ = [
    "CompiledPattern",
    "ImpactAnalyzer",
    "InvalidPattern",
    "ScopeFinding",
    "ScopeReport",
    "analyze",
    "build_report",
    "classify",
    "compile_pattern",
    "explain",
    "first_match",
    "matches",
    "matches_any",
    "validate_patterns",
]
