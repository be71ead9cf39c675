"""Scoring engine -- rhythm, timing and overall accuracy of an attempt.

Pure functions over an :class:`~shadow_speaking.normalizer.Alignment`.
Every per-unit term treats a missing unit as 0 and keeps it in the
denominator, so silence always lowers the score.

Score composition (weights from :class:`~shadow_speaking.config.ScoringConfig`)::

    rhythm  = 100 * (w_emphasis * emphasis_ratio + w_syllable * syllable_accuracy)
    timing  = 100 * (w_tempo * tempo_accuracy + w_delay * delay_term)
    overall = w_rhythm * rhythm + w_timing * timing
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from .config import DEFAULT_CONFIG, ScoringConfig
from .exceptions import InvalidInputError
from .models import Level, LevelSettings, ObservedAttempt, ReferenceSentence, ShadowAnalysis
from .normalizer import Alignment, normalize_attempt

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Component terms
# ---------------------------------------------------------------------------


def _relative_accuracy(observed: float, expected: float) -> float:
    """``1 - min(1, |observed - expected| / expected)`` for ``expected > 0``."""
    return 1.0 - min(1.0, abs(observed - expected) / expected)


def emphasis_matches(alignment: Alignment, window: float) -> tuple[int, int]:
    """Return ``(matches, total)`` for the emphasized units.

    A stressed unit counts when its observed onset lies within *window*
    seconds of the expected onset.
    """
    emphasized = alignment.emphasized
    matches = sum(
        1
        for u in emphasized
        if u.deviation is not None and abs(u.deviation) <= window
    )
    return matches, len(emphasized)


def syllable_length_accuracy(alignment: Alignment) -> float:
    """Mean inter-onset interval accuracy over every reference interval.

    The interval ending at unit *i* is scored only when units *i - 1* and
    *i* are both matched; otherwise it contributes 0.
    """
    units = alignment.units
    if len(units) == 1:
        return 1.0 if units[0].matched else 0.0

    scores = np.zeros(len(units) - 1, dtype=np.float64)
    for i, (prev, cur) in enumerate(zip(units, units[1:])):
        if prev.observed is None or cur.observed is None:
            continue
        expected_interval = cur.expected - prev.expected
        scores[i] = _relative_accuracy(cur.observed - prev.observed, expected_interval)
    return float(np.mean(scores))


def tempo_accuracy(alignment: Alignment) -> float:
    """Compare the observed span of matched onsets with the expected span."""
    matched = alignment.matched
    if len(matched) < 2:
        if len(alignment.units) == 1 and matched:
            return 1.0
        return 0.0

    first, last = matched[0], matched[-1]
    observed_span = last.observed - first.observed  # type: ignore[operator]
    expected_span = last.expected - first.expected
    return _relative_accuracy(observed_span, expected_span)


def delay_term(average_delay: float, tolerance: float) -> float:
    """``max(0, 1 - |average_delay| / tolerance)``."""
    return max(0.0, 1.0 - abs(average_delay) / tolerance)


def _clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return float(min(hi, max(lo, value)))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def score_alignment(
    alignment: Alignment,
    level: Level | int,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> ShadowAnalysis:
    """Compute a :class:`ShadowAnalysis` for one aligned sentence.

    An attempt with no matched units returns the zero floor rather than
    raising: a silent learner still gets a result.
    """
    level = Level(level)
    matches, total_emphasis = emphasis_matches(alignment, config.emphasis_window)
    matched_units = len(alignment.matched)

    if matched_units == 0:
        logger.debug("No matched units in %d-unit attempt; scoring floor", len(alignment))
        return ShadowAnalysis(
            rhythm_score=0.0,
            timing_score=0.0,
            overall_score=0.0,
            emphasis_matches=0,
            total_emphasis=total_emphasis,
            syllable_length_accuracy=0.0,
            tempo_accuracy=0.0,
            average_delay=0.0,
            matched_units=0,
            total_units=len(alignment),
        )

    emphasis_ratio = matches / total_emphasis if total_emphasis else 1.0
    syllable = syllable_length_accuracy(alignment)
    tempo = tempo_accuracy(alignment)
    delay = delay_term(alignment.average_delay, config.delay_tolerance(level))

    rhythm = _clamp(100.0 * (config.emphasis_weight * emphasis_ratio + config.syllable_weight * syllable))
    timing = _clamp(100.0 * (config.tempo_weight * tempo + config.delay_weight * delay))
    overall = _clamp(config.rhythm_weight * rhythm + config.timing_weight * timing)

    logger.debug(
        "Scored level %d attempt: rhythm=%.1f timing=%.1f overall=%.1f (%d/%d units)",
        level, rhythm, timing, overall, matched_units, len(alignment),
    )
    return ShadowAnalysis(
        rhythm_score=rhythm,
        timing_score=timing,
        overall_score=overall,
        emphasis_matches=matches,
        total_emphasis=total_emphasis,
        syllable_length_accuracy=syllable,
        tempo_accuracy=tempo,
        average_delay=alignment.average_delay,
        matched_units=matched_units,
        total_units=len(alignment),
    )


def score_sentence(
    sentence: ReferenceSentence,
    attempt: ObservedAttempt,
    settings: LevelSettings,
    level: Level | int,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> ShadowAnalysis:
    """Normalize and score one sentence attempt."""
    alignment = normalize_attempt(sentence, attempt, settings)
    return score_alignment(alignment, level, config)


def combine_analyses(analyses: Sequence[ShadowAnalysis]) -> ShadowAnalysis:
    """Merge per-sentence analyses, weighting each by its unit count.

    Emphasis and unit counts are summed; ``average_delay`` is averaged
    over matched units only.
    """
    if not analyses:
        raise ValueError("combine_analyses() needs at least one analysis")
    if len(analyses) == 1:
        return analyses[0]

    weights = np.array([max(a.total_units, 1) for a in analyses], dtype=np.float64)

    def weighted(attr: str) -> float:
        values = np.array([getattr(a, attr) for a in analyses], dtype=np.float64)
        return float(np.average(values, weights=weights))

    matched = sum(a.matched_units for a in analyses)
    if matched:
        average_delay = sum(a.average_delay * a.matched_units for a in analyses) / matched
    else:
        average_delay = 0.0

    return ShadowAnalysis(
        rhythm_score=_clamp(weighted("rhythm_score")),
        timing_score=_clamp(weighted("timing_score")),
        overall_score=_clamp(weighted("overall_score")),
        emphasis_matches=sum(a.emphasis_matches for a in analyses),
        total_emphasis=sum(a.total_emphasis for a in analyses),
        syllable_length_accuracy=weighted("syllable_length_accuracy"),
        tempo_accuracy=weighted("tempo_accuracy"),
        average_delay=average_delay,
        matched_units=matched,
        total_units=sum(a.total_units for a in analyses),
    )


def score_content(
    sentences: Sequence[ReferenceSentence],
    attempts: Sequence[ObservedAttempt],
    settings: LevelSettings,
    level: Level | int,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> ShadowAnalysis:
    """Score a multi-sentence item, one attempt per sentence.

    Sentences without an attempt are scored as silent; attempts beyond
    the last sentence are ignored.
    """
    if not sentences:
        raise InvalidInputError("Content has no sentences", field="sentences")

    analyses = []
    for i, sentence in enumerate(sentences):
        attempt = attempts[i] if i < len(attempts) else ObservedAttempt.empty()
        analyses.append(score_sentence(sentence, attempt, settings, level, config))
    return combine_analyses(analyses)
