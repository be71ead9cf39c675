"""Progression controller -- the four-level mastery state machine.

States are the :class:`~shadow_speaking.models.Level` values.  An attempt
scoring at least ``level_up_threshold`` at the learner's current level
unlocks the next level for the *following* attempt.  Levels never go
down.  An attempt at level 4 that reaches the threshold marks the item
mastered; archiving mastered items is left to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from .config import DEFAULT_CONFIG, ScoringConfig
from .exceptions import LevelLockedError
from .models import MAX_LEVEL, Level, ShadowProgress, ShadowResult

logger = logging.getLogger(__name__)


def next_level(level: Level | int, overall_score: float, threshold: float) -> Level:
    """Pure transition: the level unlocked after scoring *overall_score* at *level*."""
    level = Level(level)
    if overall_score >= threshold and level < MAX_LEVEL:
        return Level(level + 1)
    return level


@dataclass(frozen=True)
class ProgressUpdate:
    """Outcome of recording one attempt."""

    progress: ShadowProgress
    attempted_level: Level
    leveled_up: bool
    newly_mastered: bool


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProgressionController:
    """Apply scored attempts to a learner's :class:`ShadowProgress`.

    The controller never persists anything.  Callers must serialize
    :meth:`record` calls for the same (learner, content) pair, e.g. via
    :class:`~shadow_speaking.store.InMemoryProgressStore`.
    """

    def __init__(
        self,
        config: ScoringConfig = DEFAULT_CONFIG,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.config = config
        self._clock = clock

    def check_level(self, progress: ShadowProgress | None, requested: Level | int) -> Level:
        """Return *requested* as a :class:`Level` if the learner has unlocked it."""
        requested = Level(requested)
        unlocked = progress.level if progress is not None else Level.LEVEL_1
        if requested > unlocked:
            raise LevelLockedError(int(requested), int(unlocked))
        return requested

    def record(
        self,
        progress: ShadowProgress | None,
        result: ShadowResult,
        content_id: str | None = None,
    ) -> ProgressUpdate:
        """Return the progress after *result*; *progress* is ``None`` on a first attempt."""
        if progress is None:
            if content_id is None:
                raise ValueError("content_id is required for a first attempt")
            progress = ShadowProgress.initial(content_id)

        overall = result.scores.overall
        attempted = result.level
        threshold = self.config.level_up_threshold

        new_level = max(progress.level, next_level(attempted, overall, threshold))
        reached_mastery = attempted == MAX_LEVEL and overall >= threshold
        updated = progress.evolve(
            attempts=progress.attempts + 1,
            best_score=max(progress.best_score, overall),
            rhythm_accuracy=result.scores.rhythm,
            timing_accuracy=result.scores.timing,
            level=Level(new_level),
            last_practiced=self._clock(),
            mastered=progress.mastered or reached_mastery,
        )

        leveled_up = updated.level > progress.level
        newly_mastered = updated.mastered and not progress.mastered
        if leveled_up:
            logger.info(
                "Content %s: level %d unlocked after scoring %.1f",
                updated.content_id, updated.level, overall,
            )
        if newly_mastered:
            logger.info("Content %s mastered with %.1f", updated.content_id, overall)

        return ProgressUpdate(
            progress=updated,
            attempted_level=attempted,
            leveled_up=leveled_up,
            newly_mastered=newly_mastered,
        )
