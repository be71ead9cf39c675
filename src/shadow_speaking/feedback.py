"""Feedback for a scored attempt.

Three layers, coarsest first:

* :func:`classify_feedback` -- the fixed label ladder on the overall score.
* :func:`feedback_messages` -- coaching lines for rhythm, timing and level.
* :func:`sync_status` -- how far the learner's lead time drifted from the
  level's target delay.

:func:`build_result` assembles these with the XP award into a
:class:`~shadow_speaking.models.ShadowResult`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .config import DEFAULT_CONFIG, ScoringConfig
from .models import Feedback, Level, ShadowAnalysis, ShadowResult, ShadowScores
from .rewards import calculate_xp

# (minimum overall score, label), evaluated top-down.
FEEDBACK_LADDER: tuple[tuple[float, Feedback], ...] = (
    (90.0, Feedback.EXCELLENT),
    (75.0, Feedback.GOOD),
    (60.0, Feedback.FAIR),
    (40.0, Feedback.NEEDS_PRACTICE),
)

_RHYTHM_MESSAGES = (
    "Perfect rhythm! You sound just like a native speaker.",
    "Good rhythm! A little more practice and it will be perfect.",
    "Your rhythm needs more work. Focus on stress and intonation.",
)

_TIMING_MESSAGES = (
    "Perfect timing! Your delay is spot on.",
    "Good timing! Try to follow a little faster or slower.",
    "Timing needs practice. Listen to the original and repeat right away.",
)

_LEVEL_TIPS = {
    Level.LEVEL_1: "Tip: accuracy matters more than speed. Follow slowly and carefully.",
    Level.LEVEL_4: "Tip: this is native speed! Sync perfectly for the top score.",
}

# Seconds of drift from the target delay.
IN_SYNC_WINDOW = 0.1
SLIGHTLY_OFF_WINDOW = 0.3


def classify_feedback(overall_score: float) -> Feedback:
    for minimum, label in FEEDBACK_LADDER:
        if overall_score >= minimum:
            return label
    return Feedback.TRY_AGAIN


def _band(score: float, messages: tuple[str, str, str]) -> str:
    if score > 90:
        return messages[0]
    if score > 70:
        return messages[1]
    return messages[2]


def feedback_messages(analysis: ShadowAnalysis, level: Level | int) -> tuple[str, ...]:
    """Coaching lines for the learner, most specific last."""
    lines = [
        _band(analysis.rhythm_score, _RHYTHM_MESSAGES),
        _band(analysis.timing_score, _TIMING_MESSAGES),
    ]
    tip = _LEVEL_TIPS.get(Level(level))
    if tip:
        lines.append(tip)
    return tuple(lines)


@dataclass(frozen=True)
class SyncStatus:
    """Lead-time drift relative to the level's target delay."""

    state: Literal["in_sync", "slightly_off", "off"]
    direction: Literal["early", "late", "exact"]
    drift: float


def sync_status(target_delay: float, actual_delay: float) -> SyncStatus:
    drift = actual_delay - target_delay
    if abs(drift) <= IN_SYNC_WINDOW:
        state: Literal["in_sync", "slightly_off", "off"] = "in_sync"
    elif abs(drift) <= SLIGHTLY_OFF_WINDOW:
        state = "slightly_off"
    else:
        state = "off"

    if drift < 0:
        direction: Literal["early", "late", "exact"] = "early"
    elif drift > 0:
        direction = "late"
    else:
        direction = "exact"
    return SyncStatus(state=state, direction=direction, drift=drift)


def build_result(
    analysis: ShadowAnalysis,
    level: Level | int,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> ShadowResult:
    """Attach the feedback label, coaching lines and XP to *analysis*.

    Scores are rounded to one decimal for display. The label and the XP
    use the rounded overall score.
    """
    level = Level(level)
    overall = round(analysis.overall_score, 1)
    return ShadowResult(
        scores=ShadowScores(
            rhythm=round(analysis.rhythm_score, 1),
            timing=round(analysis.timing_score, 1),
            overall=overall,
        ),
        feedback=classify_feedback(overall),
        xp=calculate_xp(overall, level, config),
        level=level,
        messages=feedback_messages(analysis, level),
        analysis=analysis,
    )
