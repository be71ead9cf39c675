"""Shared test fixtures for the shadow_speaking test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from shadow_speaking.config import DEFAULT_CONFIG, ScoringConfig
from shadow_speaking.content import ContentCatalog
from shadow_speaking.models import LevelSettings, ObservedAttempt, ReferenceSentence

FIXTURES_DIR = Path(__file__).parent / "fixtures"
CONTENT_DIR = FIXTURES_DIR / "content"
CONFIG_DIR = FIXTURES_DIR / "config"


# ---------------------------------------------------------------------------
# Sample references
# ---------------------------------------------------------------------------

# Three units at 0.0 / 0.5 / 1.0 with the middle one stressed.
SCENARIO_SENTENCE = ReferenceSentence(
    text="나 정말 좋아",
    start_time=0.0,
    end_time=1.5,
    speed=1.0,
    emphasis=(1,),
    tone="happy",
)

FOUR_UNIT_SENTENCE = ReferenceSentence(
    text="우리 내일 다시 만나요",
    start_time=2.0,
    end_time=4.0,
    speed=1.0,
    emphasis=(0, 3),
    tone="hopeful",
)

# Played as recorded: no stretch, no lead time.
FLAT_SETTINGS = LevelSettings(speed=1.0, delay=0.0, pause=False)


@pytest.fixture()
def scenario_sentence() -> ReferenceSentence:
    return SCENARIO_SENTENCE


@pytest.fixture()
def four_unit_sentence() -> ReferenceSentence:
    return FOUR_UNIT_SENTENCE


@pytest.fixture()
def flat_settings() -> LevelSettings:
    return FLAT_SETTINGS


@pytest.fixture()
def perfect_scenario_attempt() -> ObservedAttempt:
    return ObservedAttempt(onsets=(0.0, 0.5, 1.0))


@pytest.fixture()
def config() -> ScoringConfig:
    return DEFAULT_CONFIG


@pytest.fixture()
def catalog() -> ContentCatalog:
    return ContentCatalog.from_file(CONTENT_DIR / "valid.json")


@pytest.fixture()
def content_dir() -> Path:
    return CONTENT_DIR


@pytest.fixture()
def config_dir() -> Path:
    return CONFIG_DIR
