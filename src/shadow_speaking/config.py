"""Scoring configuration: tolerance windows, weights and rewards.

The defaults are tuning constants, not measured values. Deployments can
override any of them from a YAML file::

    emphasis_window: 0.15
    delay_tolerances: {1: 0.5, 2: 0.4, 3: 0.3, 4: 0.2}
    weights:
      emphasis: 0.5
      syllable: 0.5
      tempo: 0.5
      delay: 0.5
      rhythm: 0.5
      timing: 0.5
    level_up_threshold: 80
    base_xp: {1: 100, 2: 200, 3: 300, 4: 400}
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from .exceptions import ConfigError
from .models import Level, LevelSettings


def _per_level(values: tuple[float, float, float, float]) -> dict[Level, float]:
    return dict(zip(Level, values))


@dataclass(frozen=True)
class ScoringConfig:
    """Constants used by the scoring engine, reward calculator and progression."""

    emphasis_window: float = 0.15
    delay_tolerances: Mapping[Level, float] = field(
        default_factory=lambda: _per_level((0.5, 0.4, 0.3, 0.2))
    )
    emphasis_weight: float = 0.5
    syllable_weight: float = 0.5
    tempo_weight: float = 0.5
    delay_weight: float = 0.5
    rhythm_weight: float = 0.5
    timing_weight: float = 0.5
    level_up_threshold: float = 80.0
    base_xp: Mapping[Level, int] = field(
        default_factory=lambda: {level: 100 * level.value for level in Level}
    )

    def __post_init__(self) -> None:
        # Stored as read-only views.
        object.__setattr__(self, "delay_tolerances", MappingProxyType(dict(self.delay_tolerances)))
        object.__setattr__(self, "base_xp", MappingProxyType(dict(self.base_xp)))

    def delay_tolerance(self, level: Level | int) -> float:
        return self.delay_tolerances[Level(level)]

    def base_xp_for(self, level: Level | int) -> int:
        return self.base_xp[Level(level)]

    def validate(self) -> None:
        """Raise :class:`ConfigError` if the constants are inconsistent."""
        if not self.emphasis_window > 0:
            raise ConfigError("emphasis_window must be positive")

        for name, (a, b) in {
            "emphasis/syllable": (self.emphasis_weight, self.syllable_weight),
            "tempo/delay": (self.tempo_weight, self.delay_weight),
            "rhythm/timing": (self.rhythm_weight, self.timing_weight),
        }.items():
            if a < 0 or b < 0 or not math.isclose(a + b, 1.0):
                raise ConfigError(f"{name} weights must be non-negative and sum to 1.0")

        if set(self.delay_tolerances) != set(Level):
            raise ConfigError("delay_tolerances must define every level 1-4")
        tolerances = [self.delay_tolerances[level] for level in Level]
        if any(not t > 0 for t in tolerances):
            raise ConfigError("delay_tolerances must be positive")
        if any(later > earlier for earlier, later in zip(tolerances, tolerances[1:])):
            raise ConfigError("delay_tolerances must not loosen as the level increases")

        if set(self.base_xp) != set(Level):
            raise ConfigError("base_xp must define every level 1-4")
        rewards = [self.base_xp[level] for level in Level]
        if rewards[0] < 0 or any(later <= earlier for earlier, later in zip(rewards, rewards[1:])):
            raise ConfigError("base_xp must be non-negative and strictly increasing by level")

        if not 0 < self.level_up_threshold <= 100:
            raise ConfigError("level_up_threshold must be in (0, 100]")


DEFAULT_CONFIG = ScoringConfig()

# Default playback modes when content does not define its own.
DEFAULT_LEVEL_SETTINGS: Mapping[Level, LevelSettings] = MappingProxyType({
    Level.LEVEL_1: LevelSettings(speed=0.7, delay=1.0, pause=True),
    Level.LEVEL_2: LevelSettings(speed=0.85, delay=0.7, pause=True),
    Level.LEVEL_3: LevelSettings(speed=1.0, delay=0.5, pause=False),
    Level.LEVEL_4: LevelSettings(speed=1.0, delay=0.3, pause=False),
})


def _level_map(raw: Any, name: str) -> dict[Level, Any]:
    if not isinstance(raw, dict):
        raise ConfigError(f"'{name}' must be a mapping of level to value")
    result: dict[Level, Any] = {}
    for key, value in raw.items():
        text = str(key).removeprefix("level")
        try:
            level = Level(int(text))
        except ValueError as exc:
            raise ConfigError(f"'{name}' has unknown level key {key!r}") from exc
        if not isinstance(value, (int, float)):
            raise ConfigError(f"'{name}.{key}' must be a number")
        result[level] = value
    return result


def config_from_dict(raw: dict[str, Any]) -> ScoringConfig:
    """Build a validated :class:`ScoringConfig`; absent keys keep defaults."""
    if not isinstance(raw, dict):
        raise ConfigError(f"Config must be a mapping, got {type(raw).__name__}")

    try:
        config = ScoringConfig(**_config_kwargs(raw))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid scoring config: {exc}") from exc
    config.validate()
    return config


def _config_kwargs(raw: dict[str, Any]) -> dict[str, Any]:
    kwargs: dict[str, Any] = {}
    if "emphasis_window" in raw:
        kwargs["emphasis_window"] = float(raw["emphasis_window"])
    if "level_up_threshold" in raw:
        kwargs["level_up_threshold"] = float(raw["level_up_threshold"])
    if "delay_tolerances" in raw:
        tolerances = dict(DEFAULT_CONFIG.delay_tolerances)
        tolerances.update(
            {k: float(v) for k, v in _level_map(raw["delay_tolerances"], "delay_tolerances").items()}
        )
        kwargs["delay_tolerances"] = tolerances
    if "base_xp" in raw:
        rewards = dict(DEFAULT_CONFIG.base_xp)
        rewards.update({k: int(v) for k, v in _level_map(raw["base_xp"], "base_xp").items()})
        kwargs["base_xp"] = rewards

    weights = raw.get("weights", {})
    if not isinstance(weights, dict):
        raise ConfigError("'weights' must be a mapping")
    for name in ("emphasis", "syllable", "tempo", "delay", "rhythm", "timing"):
        if name in weights:
            kwargs[f"{name}_weight"] = float(weights[name])
    return kwargs


def load_scoring_config(path: str | Path) -> ScoringConfig:
    """Load and validate a scoring configuration from a YAML file.

    Raises
    ------
    ConfigError
        If the file is missing, is not a YAML mapping, or holds
        inconsistent values.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if raw is None:
        return DEFAULT_CONFIG
    return config_from_dict(raw)
