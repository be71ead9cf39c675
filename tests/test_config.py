"""Tests for shadow_speaking.config."""

from __future__ import annotations

import math
from pathlib import Path

import pytest

from shadow_speaking.config import (
    DEFAULT_CONFIG,
    DEFAULT_LEVEL_SETTINGS,
    ScoringConfig,
    config_from_dict,
    load_scoring_config,
)
from shadow_speaking.exceptions import ConfigError
from shadow_speaking.models import Level


class TestDefaults:
    def test_default_values(self) -> None:
        assert DEFAULT_CONFIG.emphasis_window == 0.15
        assert DEFAULT_CONFIG.level_up_threshold == 80.0
        assert [DEFAULT_CONFIG.delay_tolerance(level) for level in Level] == [0.5, 0.4, 0.3, 0.2]
        assert [DEFAULT_CONFIG.base_xp_for(level) for level in Level] == [100, 200, 300, 400]

    def test_defaults_validate(self) -> None:
        DEFAULT_CONFIG.validate()

    def test_default_level_settings_cover_every_level(self) -> None:
        assert set(DEFAULT_LEVEL_SETTINGS) == set(Level)
        assert DEFAULT_LEVEL_SETTINGS[Level.LEVEL_1].pause
        assert not DEFAULT_LEVEL_SETTINGS[Level.LEVEL_4].pause


class TestLoadScoringConfig:
    def test_custom_file(self, config_dir: Path) -> None:
        config = load_scoring_config(config_dir / "custom.yaml")
        assert config.emphasis_window == 0.2
        assert config.delay_tolerance(Level.LEVEL_1) == 0.6
        assert config.delay_tolerance(Level.LEVEL_2) == 0.4
        assert config.delay_tolerance(Level.LEVEL_4) == 0.25
        assert config.rhythm_weight == 0.6
        assert config.timing_weight == 0.4
        assert config.emphasis_weight == 0.5
        assert config.level_up_threshold == 85.0
        assert config.base_xp_for(4) == 250

    def test_invalid_weights(self, config_dir: Path) -> None:
        with pytest.raises(ConfigError, match="emphasis/syllable"):
            load_scoring_config(config_dir / "invalid_weights.yaml")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_scoring_config(tmp_path / "nope.yaml")

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_scoring_config(path) == DEFAULT_CONFIG

    def test_bad_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("weights: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_scoring_config(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="mapping"):
            load_scoring_config(path)


class TestConfigFromDict:
    def test_unknown_level_key(self) -> None:
        with pytest.raises(ConfigError, match="unknown level key"):
            config_from_dict({"delay_tolerances": {"level9": 0.1}})

    def test_non_numeric_value(self) -> None:
        with pytest.raises(ConfigError, match="must be a number"):
            config_from_dict({"base_xp": {1: "lots"}})

    def test_unparseable_weight(self) -> None:
        with pytest.raises(ConfigError, match="Invalid scoring config"):
            config_from_dict({"weights": {"tempo": "fast"}})

    def test_loosening_tolerances(self) -> None:
        with pytest.raises(ConfigError, match="loosen"):
            config_from_dict({"delay_tolerances": {4: 0.9}})

    def test_non_increasing_rewards(self) -> None:
        with pytest.raises(ConfigError, match="strictly increasing"):
            config_from_dict({"base_xp": {2: 100}})


class TestValidate:
    def test_non_positive_window(self) -> None:
        with pytest.raises(ConfigError, match="emphasis_window"):
            ScoringConfig(emphasis_window=0.0).validate()

    def test_negative_weight(self) -> None:
        with pytest.raises(ConfigError, match="tempo/delay"):
            ScoringConfig(tempo_weight=-0.5, delay_weight=1.5).validate()

    def test_threshold_out_of_range(self) -> None:
        with pytest.raises(ConfigError, match="level_up_threshold"):
            ScoringConfig(level_up_threshold=120.0).validate()

    def test_missing_level(self) -> None:
        with pytest.raises(ConfigError, match="every level"):
            ScoringConfig(delay_tolerances={Level.LEVEL_1: 0.5}).validate()

    def test_nan_tolerance(self) -> None:
        tolerances = {level: 0.3 for level in Level}
        tolerances[Level.LEVEL_2] = math.nan
        with pytest.raises(ConfigError, match="positive"):
            ScoringConfig(delay_tolerances=tolerances).validate()


class TestImmutability:
    def test_default_mappings_are_read_only(self) -> None:
        with pytest.raises(TypeError):
            DEFAULT_CONFIG.delay_tolerances[Level.LEVEL_1] = 9.0  # type: ignore[index]
        with pytest.raises(TypeError):
            DEFAULT_CONFIG.base_xp[Level.LEVEL_1] = 0  # type: ignore[index]
        with pytest.raises(TypeError):
            DEFAULT_LEVEL_SETTINGS[Level.LEVEL_1] = DEFAULT_LEVEL_SETTINGS[Level.LEVEL_2]  # type: ignore[index]

    def test_caller_dict_is_copied(self) -> None:
        rewards = {level: 10 * level.value for level in Level}
        config = ScoringConfig(base_xp=rewards)
        rewards[Level.LEVEL_4] = 0
        assert config.base_xp_for(Level.LEVEL_4) == 40

    def test_equal_configs_compare_equal(self) -> None:
        assert ScoringConfig() == DEFAULT_CONFIG
