"""Shared constants for steward."""

# Lower rank = higher priority
LEVEL_RANK = {
    "MUST": 0,
    "SHOULD": 1,
    "MAY": 2,
}

# Categories ranked ahead of everything else, in this order.
# Remaining categories follow in their declaration order in the index.
PRIORITY_CATEGORIES = ("security", "database")

# Categories searched when a query key is not in the index
DEFAULT_FALLBACK_CATEGORIES = ("code-quality", "security", "testing")

# Usage count above which a breaking change to shared code needs permission
DEFAULT_IMPACT_THRESHOLD = 5

# Query types map to PolicyIndex mapping names
QUERY_MAPPINGS = {
    "keyword": "keywords",
    "scenario": "scenarios",
    "technology": "technologies",
    "category": "categories",
}
