"""Experience-point rewards for scored attempts."""

from __future__ import annotations

from .config import DEFAULT_CONFIG, ScoringConfig
from .models import Level


def base_xp_for_level(level: Level | int, config: ScoringConfig = DEFAULT_CONFIG) -> int:
    """XP for a perfect attempt at *level*; strictly increasing with level."""
    return config.base_xp_for(level)


def calculate_xp(
    overall_score: float,
    level: Level | int,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> int:
    """``round(base_xp(level) * overall_score / 100)``, never negative."""
    score = min(100.0, max(0.0, overall_score))
    return max(0, round(base_xp_for_level(level, config) * score / 100.0))
