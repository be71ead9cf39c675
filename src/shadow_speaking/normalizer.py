"""Attempt normalizer -- align observed onsets with reference units.

Alignment is positional: observed onset *i* is paired with reference
unit *i* up to the shorter of the two sequences.  Reference units past
the end of the attempt are kept as missing; observed onsets past the
last reference unit are dropped.  There is no edit-distance search, so
a skipped word shifts every later pairing.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .exceptions import InvalidInputError
from .models import LevelSettings, ObservedAttempt, ReferenceSentence


@dataclass(frozen=True)
class AlignedUnit:
    """One reference unit and the learner onset paired with it."""

    index: int
    expected: float
    observed: float | None
    emphasized: bool = False

    @property
    def matched(self) -> bool:
        return self.observed is not None

    @property
    def deviation(self) -> float | None:
        """``observed - expected``; negative when the learner was early."""
        if self.observed is None:
            return None
        return self.observed - self.expected


@dataclass(frozen=True)
class Alignment:
    """Ordered unit pairs for one sentence plus the mean signed delay."""

    units: tuple[AlignedUnit, ...]
    average_delay: float

    @property
    def matched(self) -> tuple[AlignedUnit, ...]:
        return tuple(u for u in self.units if u.matched)

    @property
    def emphasized(self) -> tuple[AlignedUnit, ...]:
        return tuple(u for u in self.units if u.emphasized)

    def __len__(self) -> int:
        return len(self.units)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_sentence(sentence: ReferenceSentence) -> None:
    """Raise :class:`InvalidInputError` if *sentence* cannot be scored."""
    units = sentence.units
    if not units:
        raise InvalidInputError("Reference sentence has no units", field="text")
    if not (math.isfinite(sentence.start_time) and math.isfinite(sentence.end_time)):
        raise InvalidInputError("Reference times must be finite", field="start_time")
    if sentence.start_time < 0:
        raise InvalidInputError("start_time must be non-negative", field="start_time")
    if sentence.end_time <= sentence.start_time:
        raise InvalidInputError(
            f"end_time ({sentence.end_time}) must be after start_time ({sentence.start_time})",
            field="end_time",
        )
    if not sentence.speed > 0:
        raise InvalidInputError("Reference speed must be positive", field="speed")

    for idx in sentence.emphasis:
        if not 0 <= idx < len(units):
            raise InvalidInputError(
                f"Emphasis index {idx} outside 0..{len(units) - 1}", field="emphasis"
            )

    if sentence.onsets is not None:
        if len(sentence.onsets) != len(units):
            raise InvalidInputError(
                f"Expected {len(units)} onsets, got {len(sentence.onsets)}", field="onsets"
            )
        if any(b <= a for a, b in zip(sentence.onsets, sentence.onsets[1:])):
            raise InvalidInputError("Reference onsets must be strictly increasing", field="onsets")
        if sentence.onsets[0] < sentence.start_time or sentence.onsets[-1] >= sentence.end_time:
            raise InvalidInputError(
                "Reference onsets must fall within [start_time, end_time)", field="onsets"
            )


def validate_settings(settings: LevelSettings) -> None:
    """Raise :class:`InvalidInputError` for unusable level settings."""
    if not (math.isfinite(settings.speed) and settings.speed > 0):
        raise InvalidInputError("Level speed must be positive", field="speed")
    if not (math.isfinite(settings.delay) and settings.delay >= 0):
        raise InvalidInputError("Level delay must be non-negative", field="delay")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def reference_onsets(sentence: ReferenceSentence) -> tuple[float, ...]:
    """Per-unit onsets on the content timeline.

    Uses the explicit ``onsets`` when present, otherwise spaces the units
    evenly across the sentence.
    """
    if sentence.onsets is not None:
        return tuple(sentence.onsets)
    n = len(sentence.units)
    step = sentence.duration / n
    return tuple(sentence.start_time + i * step for i in range(n))


def expected_onsets(
    sentence: ReferenceSentence, settings: LevelSettings
) -> tuple[float, ...]:
    """Onsets the learner should hit, relative to the sentence's playback start.

    Reference offsets are stretched by the level's playback ``speed`` and
    shifted by its ``delay`` lead time.
    """
    return tuple(
        settings.delay + (onset - sentence.start_time) / settings.speed
        for onset in reference_onsets(sentence)
    )


def normalize_attempt(
    sentence: ReferenceSentence,
    attempt: ObservedAttempt,
    settings: LevelSettings,
) -> Alignment:
    """Pair each reference unit of *sentence* with an observed onset.

    Raises
    ------
    InvalidInputError
        If the reference or level settings are malformed, or an observed
        onset is not a finite number.
    """
    validate_sentence(sentence)
    validate_settings(settings)
    if any(not math.isfinite(t) for t in attempt.onsets):
        raise InvalidInputError("Observed onsets must be finite", field="onsets")

    expected = expected_onsets(sentence, settings)
    emphasis = frozenset(sentence.emphasis)
    observed = attempt.onsets

    units = tuple(
        AlignedUnit(
            index=i,
            expected=exp,
            observed=observed[i] if i < len(observed) else None,
            emphasized=i in emphasis,
        )
        for i, exp in enumerate(expected)
    )

    deviations = [u.deviation for u in units if u.deviation is not None]
    average_delay = sum(deviations) / len(deviations) if deviations else 0.0
    return Alignment(units=units, average_delay=average_delay)
