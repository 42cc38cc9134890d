"""
steward search / scenario / tech / category - Look up applicable policies.
"""

from steward.lib.types import QueryType
from steward.policy.search import SearchResult


def print_result(result: SearchResult, label: str, value: str) -> None:
    """Print a ranked policy list."""
    if result.not_found:
        print(f"No policies indexed for {label} '{value}'.")
        if result.suggestions:
            print(f"  Did you mean: {', '.join(result.suggestions)}?")
        if result.fallback:
            print("Showing policies from the default categories:")
        print()

    if not result.records:
        return

    print(f"{'ID':<8} {'LEVEL':<7} {'CATEGORY':<16} TITLE")
    print("-" * 60)
    for record in result.records:
        print(f"{record.id:<8} {record.level.value:<7} {record.category:<16} {record.title}")
    print()
    print(f"{len(result.records)} polic{'y' if len(result.records) == 1 else 'ies'}")


def cmd_query(args, steward, query_type: QueryType) -> int:
    """Run one typed query and print the ranked result.

    Returns 1 if the key is unknown and --no-fallback was given.
    """
    result = steward.query(
        query_type,
        args.value,
        limit=args.limit,
        fallback=not args.no_fallback,
    )
    print_result(result, query_type.value, args.value)
    if result.not_found and not result.records:
        return 1
    return 0
