"""
Path-glob matching for sprint scope patterns.

Patterns are split on "/" and matched segment by segment:
- a literal segment must equal the path segment exactly
- "*" as a whole segment matches exactly one segment
- "*" inside a segment ("*.ts", "test_*") matches any run of characters
  within that one segment
- "**" matches zero or more whole segments

No other character is special and paths are compared as given, so a
pattern without "*" matches only the identical path. Anchors and directory
suffixes ("/app", "./app", "app/auth/") are rejected; write "app/auth/**".

When a pattern holds several "**", they are matched left to right, each
trying the longest span first and giving segments back when the rest of the
pattern fails.

Compiled patterns are cached; compilation is the only place InvalidPattern
is raised, so callers compile every sprint pattern at load time.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable

DOUBLE_STAR = "**"


class InvalidPattern(Exception):
    """A scope pattern cannot be compiled."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid scope pattern '{pattern}': {reason}")


@dataclass(frozen=True)
class _Segment:
    text: str
    regex: re.Pattern | None = None  # Set when the segment contains "*"

    @property
    def is_double_star(self) -> bool:
        return self.text == DOUBLE_STAR

    def matches(self, segment: str) -> bool:
        if self.regex is None:
            return segment == self.text
        return self.regex.fullmatch(segment) is not None


@dataclass(frozen=True)
class CompiledPattern:
    """A validated, pre-split scope pattern."""
    source: str
    segments: tuple[_Segment, ...]

    def matches(self, path: str) -> bool:
        return _match_segments(self.segments, tuple(path.split("/")))


def _compile_segment(pattern: str, text: str) -> _Segment:
    if text in (".", ".."):
        raise InvalidPattern(pattern, f"relative segment '{text}' not allowed")
    if DOUBLE_STAR in text and text != DOUBLE_STAR:
        raise InvalidPattern(pattern, f"'**' must be a whole segment, got '{text}'")
    if text == DOUBLE_STAR or "*" not in text:
        return _Segment(text)
    regex = re.compile("[^/]*".join(re.escape(part) for part in text.split("*")))
    return _Segment(text, regex)


@lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> CompiledPattern:
    """
    Compile a scope pattern.

    Raises:
        InvalidPattern: empty pattern, leading or trailing "/", empty segment
            ("a//b"), "." or ".." segment, or "**" mixed with other
            characters in one segment
    """
    if not isinstance(pattern, str) or not pattern.strip():
        raise InvalidPattern(str(pattern), "empty pattern")
    if pattern.startswith("/"):
        raise InvalidPattern(pattern, "patterns are relative to the repository root")
    if pattern.endswith("/"):
        raise InvalidPattern(pattern, "trailing '/' not allowed, use '**' for a directory")

    parts = pattern.split("/")
    if any(part == "" for part in parts):
        raise InvalidPattern(pattern, "empty path segment")

    return CompiledPattern(
        source=pattern,
        segments=tuple(_compile_segment(pattern, part) for part in parts),
    )


def _match_segments(pattern: tuple[_Segment, ...], path: tuple[str, ...]) -> bool:
    """Backtracking segment match, memoized on (pattern pos, path pos)."""
    memo: dict[tuple[int, int], bool] = {}

    def match(pi: int, si: int) -> bool:
        key = (pi, si)
        if key in memo:
            return memo[key]

        if pi == len(pattern):
            result = si == len(path)
        elif pattern[pi].is_double_star:
            # Greedy: longest span first
            result = any(match(pi + 1, k) for k in range(len(path), si - 1, -1))
        elif si < len(path) and pattern[pi].matches(path[si]):
            result = match(pi + 1, si + 1)
        else:
            result = False

        memo[key] = result
        return result

    return match(0, 0)


def validate_patterns(patterns: Iterable[str]) -> list[CompiledPattern]:
    """Compile every pattern, raising InvalidPattern on the first bad one."""
    return [compile_pattern(p) for p in patterns]


def matches(path: str, pattern: str) -> bool:
    """True if path matches pattern."""
    return compile_pattern(pattern).matches(path)


def first_match(path: str, patterns: Iterable[str]) -> str | None:
    """Return the first pattern (in declaration order) matching path, or None."""
    for pattern in patterns:
        if matches(path, pattern):
            return pattern
    return None


def matches_any(path: str, patterns: Iterable[str]) -> bool:
    """True iff any pattern matches path."""
    return first_match(path, patterns) is not None
