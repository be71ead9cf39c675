"""Tests for shadow_speaking.normalizer.

Covers:
- Reference onsets: even spacing and explicit onsets
- Expected onsets rescaled by level speed and shifted by delay
- Positional alignment: missing tail, ignored extra onsets
- average_delay over matched units only
- InvalidInputError for malformed references and settings
"""

from __future__ import annotations

import math

import pytest

from shadow_speaking.exceptions import InvalidInputError
from shadow_speaking.models import LevelSettings, ObservedAttempt, ReferenceSentence
from shadow_speaking.normalizer import (
    expected_onsets,
    normalize_attempt,
    reference_onsets,
    validate_sentence,
)


# ---------------------------------------------------------------------------
# Reference and expected onsets
# ---------------------------------------------------------------------------


class TestReferenceOnsets:
    def test_even_spacing(self, scenario_sentence: ReferenceSentence) -> None:
        assert reference_onsets(scenario_sentence) == pytest.approx((0.0, 0.5, 1.0))

    def test_even_spacing_offset_start(self, four_unit_sentence: ReferenceSentence) -> None:
        assert reference_onsets(four_unit_sentence) == pytest.approx((2.0, 2.5, 3.0, 3.5))

    def test_explicit_onsets_used(self) -> None:
        s = ReferenceSentence(
            text="나 지금 너무 행복해",
            start_time=0.0,
            end_time=2.2,
            speed=1.1,
            onsets=(0.0, 0.4, 0.9, 1.4),
        )
        assert reference_onsets(s) == (0.0, 0.4, 0.9, 1.4)


class TestExpectedOnsets:
    def test_flat_settings_relative_to_sentence_start(
        self, four_unit_sentence: ReferenceSentence, flat_settings: LevelSettings
    ) -> None:
        assert expected_onsets(four_unit_sentence, flat_settings) == pytest.approx(
            (0.0, 0.5, 1.0, 1.5)
        )

    def test_slow_playback_stretches(self, scenario_sentence: ReferenceSentence) -> None:
        settings = LevelSettings(speed=0.5, delay=0.0, pause=True)
        assert expected_onsets(scenario_sentence, settings) == pytest.approx((0.0, 1.0, 2.0))

    def test_delay_shifts_every_onset(self, scenario_sentence: ReferenceSentence) -> None:
        settings = LevelSettings(speed=1.0, delay=0.7, pause=True)
        assert expected_onsets(scenario_sentence, settings) == pytest.approx((0.7, 1.2, 1.7))


# ---------------------------------------------------------------------------
# Alignment
# ---------------------------------------------------------------------------


class TestAlignment:
    def test_equal_length(
        self, scenario_sentence: ReferenceSentence, flat_settings: LevelSettings
    ) -> None:
        alignment = normalize_attempt(
            scenario_sentence, ObservedAttempt((0.05, 0.52, 1.40)), flat_settings
        )
        assert len(alignment) == 3
        assert [u.observed for u in alignment.units] == [0.05, 0.52, 1.40]
        assert [u.index for u in alignment.units] == [0, 1, 2]
        assert [u.emphasized for u in alignment.units] == [False, True, False]

    def test_average_delay(
        self, scenario_sentence: ReferenceSentence, flat_settings: LevelSettings
    ) -> None:
        alignment = normalize_attempt(
            scenario_sentence, ObservedAttempt((0.05, 0.52, 1.40)), flat_settings
        )
        assert alignment.average_delay == pytest.approx((0.05 + 0.02 + 0.40) / 3)

    def test_early_learner_has_negative_delay(
        self, scenario_sentence: ReferenceSentence, flat_settings: LevelSettings
    ) -> None:
        alignment = normalize_attempt(
            scenario_sentence, ObservedAttempt((-0.1, 0.4, 0.9)), flat_settings
        )
        assert alignment.average_delay == pytest.approx(-0.1)

    def test_short_attempt_marks_tail_missing(
        self, scenario_sentence: ReferenceSentence, flat_settings: LevelSettings
    ) -> None:
        alignment = normalize_attempt(scenario_sentence, ObservedAttempt((0.1,)), flat_settings)
        assert len(alignment) == 3
        assert alignment.units[0].matched
        assert not alignment.units[1].matched
        assert not alignment.units[2].matched
        assert alignment.units[2].deviation is None
        # Only the matched unit counts toward the delay.
        assert alignment.average_delay == pytest.approx(0.1)

    def test_extra_onsets_ignored(
        self, scenario_sentence: ReferenceSentence, flat_settings: LevelSettings
    ) -> None:
        alignment = normalize_attempt(
            scenario_sentence, ObservedAttempt((0.0, 0.5, 1.0, 1.6, 9.0)), flat_settings
        )
        assert len(alignment) == 3
        assert alignment.average_delay == pytest.approx(0.0)

    def test_empty_attempt(
        self, scenario_sentence: ReferenceSentence, flat_settings: LevelSettings
    ) -> None:
        alignment = normalize_attempt(scenario_sentence, ObservedAttempt.empty(), flat_settings)
        assert len(alignment) == 3
        assert alignment.matched == ()
        assert alignment.average_delay == 0.0

    def test_deterministic(
        self, scenario_sentence: ReferenceSentence, flat_settings: LevelSettings
    ) -> None:
        attempt = ObservedAttempt((0.05, 0.52, 1.40))
        assert normalize_attempt(scenario_sentence, attempt, flat_settings) == normalize_attempt(
            scenario_sentence, attempt, flat_settings
        )


# ---------------------------------------------------------------------------
# Invalid input
# ---------------------------------------------------------------------------


class TestInvalidInput:
    def test_empty_text(self, flat_settings: LevelSettings) -> None:
        s = ReferenceSentence(text="   ", start_time=0.0, end_time=1.0, speed=1.0)
        with pytest.raises(InvalidInputError, match="no units"):
            normalize_attempt(s, ObservedAttempt(), flat_settings)

    def test_end_before_start(self, flat_settings: LevelSettings) -> None:
        s = ReferenceSentence(text="하나 둘", start_time=2.0, end_time=2.0, speed=1.0)
        with pytest.raises(InvalidInputError, match="end_time"):
            normalize_attempt(s, ObservedAttempt(), flat_settings)

    def test_non_positive_sentence_speed(self) -> None:
        s = ReferenceSentence(text="하나 둘", start_time=0.0, end_time=1.0, speed=0.0)
        with pytest.raises(InvalidInputError, match="speed"):
            validate_sentence(s)

    def test_non_positive_level_speed(self, scenario_sentence: ReferenceSentence) -> None:
        settings = LevelSettings(speed=0.0, delay=0.0, pause=True)
        with pytest.raises(InvalidInputError, match="speed"):
            normalize_attempt(scenario_sentence, ObservedAttempt(), settings)

    def test_negative_delay(self, scenario_sentence: ReferenceSentence) -> None:
        settings = LevelSettings(speed=1.0, delay=-0.5, pause=True)
        with pytest.raises(InvalidInputError, match="delay"):
            normalize_attempt(scenario_sentence, ObservedAttempt(), settings)

    def test_emphasis_out_of_range(self, flat_settings: LevelSettings) -> None:
        s = ReferenceSentence(
            text="하나 둘", start_time=0.0, end_time=1.0, speed=1.0, emphasis=(2,)
        )
        with pytest.raises(InvalidInputError, match="Emphasis index 2"):
            normalize_attempt(s, ObservedAttempt(), flat_settings)

    def test_onset_count_mismatch(self) -> None:
        s = ReferenceSentence(
            text="하나 둘 셋", start_time=0.0, end_time=1.5, speed=1.0, onsets=(0.0, 0.5)
        )
        with pytest.raises(InvalidInputError, match="onsets"):
            validate_sentence(s)

    def test_onsets_not_increasing(self) -> None:
        s = ReferenceSentence(
            text="하나 둘", start_time=0.0, end_time=1.5, speed=1.0, onsets=(0.5, 0.5)
        )
        with pytest.raises(InvalidInputError, match="strictly increasing"):
            validate_sentence(s)

    def test_non_finite_observed(
        self, scenario_sentence: ReferenceSentence, flat_settings: LevelSettings
    ) -> None:
        with pytest.raises(InvalidInputError, match="finite"):
            normalize_attempt(scenario_sentence, ObservedAttempt((0.0, math.nan)), flat_settings)

    def test_invalid_input_carries_field(self, flat_settings: LevelSettings) -> None:
        s = ReferenceSentence(text="하나", start_time=1.0, end_time=0.5, speed=1.0)
        with pytest.raises(InvalidInputError) as excinfo:
            normalize_attempt(s, ObservedAttempt(), flat_settings)
        assert excinfo.value.field == "end_time"
