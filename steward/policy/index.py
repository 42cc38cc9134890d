"""
Policy search index.

Loads the policy index document once and exposes it read-only. The document
has four lookup mappings (keywords, scenarios, technologies, categories),
each from a key to an ordered list of policy ids, plus policy_details
mapping each id to its title, level, and category.

Loading fails hard on anything malformed: a schema mismatch raises
ValidationError and an id referenced by a lookup but missing from
policy_details raises DanglingPolicyReference. There is no degraded mode.

Usage:
    from steward.policy.index import load_policy_index

    index = load_policy_index(Path("policy-index.yaml"))
    index.lookup("keywords", "validation")  # -> ("4.1", "5.9", "17.1")
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from steward.lib import validate
from steward.lib.constants import QUERY_MAPPINGS
from steward.lib.types import Level, PolicyRecord

logger = logging.getLogger(__name__)

MAPPING_NAMES = tuple(QUERY_MAPPINGS.values())


class PolicyNotFound(Exception):
    """A query key is not present in the index.

    Not fatal: search() reports this as SearchResult.not_found and callers
    fall back to a default set. Raised only on request via
    SearchResult.raise_for_missing().
    """

    def __init__(self, mapping: str, key: str):
        self.mapping = mapping
        self.key = key
        super().__init__(f"No policies for {mapping} '{key}'")


class DanglingPolicyReference(Exception):
    """A lookup references a policy id that has no policy_details entry."""

    def __init__(self, mapping: str, key: str, policy_id: str):
        self.mapping = mapping
        self.key = key
        self.policy_id = policy_id
        super().__init__(
            f"{mapping}['{key}'] references policy {policy_id}, "
            "which is not in policy_details"
        )


def normalize_key(value: str) -> str:
    """Normalize a lookup key or query value: trimmed and case-folded."""
    return value.strip().casefold()


@dataclass(frozen=True)
class PolicyIndex:
    """Immutable policy catalogue.

    Mappings are read-only views; lookup keys are normalized.
    """
    keywords: Mapping[str, tuple[str, ...]]
    scenarios: Mapping[str, tuple[str, ...]]
    technologies: Mapping[str, tuple[str, ...]]
    categories: Mapping[str, tuple[str, ...]]
    records: Mapping[str, PolicyRecord]

    def mapping(self, name: str) -> Mapping[str, tuple[str, ...]]:
        """Return the lookup mapping called name ("keywords", ...)."""
        if name not in MAPPING_NAMES:
            raise ValueError(f"Unknown index mapping: {name}")
        return getattr(self, name)

    def lookup(self, name: str, key: str) -> tuple[str, ...] | None:
        """Policy ids for key in mapping name, or None if the key is absent."""
        return self.mapping(name).get(normalize_key(key))

    def get(self, policy_id: str) -> PolicyRecord | None:
        return self.records.get(policy_id)

    def category_order(self) -> tuple[str, ...]:
        """Categories in declaration order (drives ranking)."""
        return tuple(self.categories)

    def __len__(self) -> int:
        return len(self.records)


def _policy_ids(entry: Any) -> list[str]:
    """A lookup entry is either a list of ids or a mapping with a policies list."""
    if isinstance(entry, dict):
        return list(entry["policies"])
    return list(entry)


def _check_string_keys(data: dict) -> None:
    """Reject non-string keys.

    YAML turns an unquoted `4.1:` into a float, which would silently
    collide "17.1" with "17.10".
    """
    for name in (*MAPPING_NAMES, "policy_details"):
        section = data.get(name)
        if not isinstance(section, dict):
            continue
        for key in section:
            if not isinstance(key, str):
                raise validate.ValidationError(
                    "policy_index",
                    f"Key {key!r} must be a quoted string",
                    name,
                )


def build_policy_index(data: dict) -> PolicyIndex:
    """
    Build a PolicyIndex from a parsed index document.

    Raises:
        ValidationError: If data doesn't match the policy_index schema
        DanglingPolicyReference: If a lookup references an unknown policy id
    """
    if isinstance(data, dict):
        _check_string_keys(data)
    validate.validate(data, "policy_index")

    records: dict[str, PolicyRecord] = {}
    for policy_id, details in data["policy_details"].items():
        records[policy_id] = PolicyRecord(
            id=policy_id,
            title=details["title"],
            level=Level(details["level"].upper()),
            category=normalize_key(details["category"]),
        )

    mappings: dict[str, MappingProxyType] = {}
    for name in MAPPING_NAMES:
        lookup: dict[str, tuple[str, ...]] = {}
        for raw_key, entry in data[name].items():
            key = normalize_key(raw_key)
            ids = _policy_ids(entry)
            for policy_id in ids:
                if policy_id not in records:
                    raise DanglingPolicyReference(name, raw_key, policy_id)
            if key in lookup:
                # Keys differing only in case/whitespace merge, first order kept
                logger.warning(f"[INDEX] {name}: duplicate key '{raw_key}' after normalization, merging")
                lookup[key] = tuple(dict.fromkeys((*lookup[key], *ids)))
            else:
                lookup[key] = tuple(dict.fromkeys(ids))
        mappings[name] = MappingProxyType(lookup)

    index = PolicyIndex(
        keywords=mappings["keywords"],
        scenarios=mappings["scenarios"],
        technologies=mappings["technologies"],
        categories=mappings["categories"],
        records=MappingProxyType(records),
    )
    logger.info(
        f"[INDEX] Loaded {len(records)} policies "
        f"({len(index.keywords)} keywords, {len(index.scenarios)} scenarios, "
        f"{len(index.technologies)} technologies, {len(index.categories)} categories)"
    )
    return index


def load_policy_index(filepath: Path) -> PolicyIndex:
    """
    Load and validate the policy index file (YAML or JSON).

    Raises:
        ValidationError: If the file is missing, unparseable, or malformed
        DanglingPolicyReference: If a lookup references an unknown policy id
    """
    data = validate.read_document(filepath, "policy_index")
    return build_policy_index(data)
