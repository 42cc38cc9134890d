"""
Configuration loader for steward.

Reads steward.env from the config directory. Every key is optional; a
missing file yields the defaults. The impact threshold is the one setting
the embedding system may also override through the environment.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from . import envparse
from .constants import DEFAULT_FALLBACK_CATEGORIES, DEFAULT_IMPACT_THRESHOLD

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "steward.env"
THRESHOLD_ENV_VAR = "STEWARD_IMPACT_THRESHOLD"


@dataclass
class StewardConfig:
    """Settings from steward.env"""
    root: Path  # Directory relative paths are resolved against
    policy_index: Path
    sprint_file: Path
    impact_threshold: int = DEFAULT_IMPACT_THRESHOLD
    fallback_categories: tuple[str, ...] = DEFAULT_FALLBACK_CATEGORIES


def _parse_threshold(raw: str, source: str) -> int | None:
    """Parse a threshold value, warning and returning None if unusable."""
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Invalid impact threshold '{raw}' in {source}, using default {DEFAULT_IMPACT_THRESHOLD}")
        return None
    if value < 1:
        logger.warning(f"Impact threshold must be >= 1, got {value} in {source}, using default {DEFAULT_IMPACT_THRESHOLD}")
        return None
    return value


def _parse_categories(raw: str) -> tuple[str, ...]:
    categories = tuple(c.strip().casefold() for c in raw.split(",") if c.strip())
    if not categories:
        logger.warning(f"Empty FALLBACK_CATEGORIES, using defaults {', '.join(DEFAULT_FALLBACK_CATEGORIES)}")
        return DEFAULT_FALLBACK_CATEGORIES
    return categories


def load_config(config_dir: Path | None = None) -> StewardConfig:
    """Load steward.env from config_dir (default: cwd) and return StewardConfig."""
    root = Path(config_dir) if config_dir is not None else Path.cwd()
    env_path = root / CONFIG_FILENAME

    env: dict[str, str] = {}
    if env_path.exists():
        env = envparse.load_env(env_path)
    else:
        logger.debug(f"No {CONFIG_FILENAME} in {root}, using defaults")

    threshold = DEFAULT_IMPACT_THRESHOLD
    if "IMPACT_THRESHOLD" in env:
        threshold = _parse_threshold(env["IMPACT_THRESHOLD"], CONFIG_FILENAME) or threshold

    override = os.environ.get(THRESHOLD_ENV_VAR)
    if override:
        threshold = _parse_threshold(override, THRESHOLD_ENV_VAR) or threshold

    fallback = DEFAULT_FALLBACK_CATEGORIES
    if "FALLBACK_CATEGORIES" in env:
        fallback = _parse_categories(env["FALLBACK_CATEGORIES"])

    return StewardConfig(
        root=root,
        policy_index=root / env.get("POLICY_INDEX", "policy-index.yaml"),
        sprint_file=root / env.get("SPRINT_FILE", "sprint.yaml"),
        impact_threshold=threshold,
        fallback_categories=fallback,
    )
