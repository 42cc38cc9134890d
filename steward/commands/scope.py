"""
steward scope / impact - Check files against the active sprint's scope.
"""

from steward.lib.sprint_file import load_sprint
from steward.lib.types import Recommendation
from steward.scope.impact import ImpactAnalyzer
from steward.scope.validator import build_report, explain


def cmd_scope(args, config) -> int:
    """Classify paths against the sprint scope.

    Returns 0 if every path is in scope (or approved), 1 otherwise.
    """
    sprint = load_sprint(config.sprint_file)

    findings = [explain(path, sprint) for path in dict.fromkeys(args.paths)]
    report = build_report({f.path: f.classification for f in findings}, args.approve or ())

    print(f"Sprint: {sprint.id} - {sprint.goal}")
    print("-" * 60)
    for finding in findings:
        via = f"  ({finding.pattern})" if finding.pattern else ""
        approved = " [approved]" if finding.path in report.approved else ""
        print(f"  {finding.classification.value:<11} {finding.path}{via}{approved}")
    print()

    if report.is_clear:
        print("All paths permitted.")
        return 0

    off_limits = [p for p in report.off_limits if p not in report.approved]
    unscoped = [p for p in report.unscoped if p not in report.approved]
    if off_limits:
        print("BLOCKED: off-limits paths need a scope amendment or explicit permission:")
        for path in off_limits:
            print(f"  {path}")
    if unscoped:
        print("Shared code outside scope - run impact analysis before modifying:")
        for path in unscoped:
            print(f"  steward impact {path} --usage N [--breaking]")
    return 1


def cmd_impact(args, config) -> int:
    """Recommend a strategy for changing one shared file.

    Returns 1 when the change needs permission.
    """
    threshold = args.threshold if args.threshold is not None else config.impact_threshold
    analyzer = ImpactAnalyzer(threshold)
    recommendation = analyzer.analyze(args.path, args.usage, args.breaking)

    print(f"{args.path}: used in {args.usage} place(s), "
          f"{'breaking' if args.breaking else 'non-breaking'} change, threshold {analyzer.threshold}")
    print(f"Recommendation: {recommendation.value}")
    return 1 if recommendation is Recommendation.REQUEST_PERMISSION else 0
