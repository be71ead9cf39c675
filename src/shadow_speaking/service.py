"""Practice service -- one call from raw attempt to persisted progress.

Wires the pipeline together for a request handler::

    catalogue -> normalize/score -> feedback + xp -> progression -> store

Scoring runs outside the store lock; only the progress read-modify-write
is serialized per (learner, content).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from .config import DEFAULT_CONFIG, ScoringConfig
from .content import ContentCatalog
from .feedback import build_result
from .models import Level, ObservedAttempt, ShadowContent, ShadowProgress, ShadowResult
from .progression import ProgressionController, ProgressUpdate
from .scoring import score_content
from .store import InMemoryProgressStore, ProgressStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PracticeOutcome:
    """The result to show and the progress the caller now holds."""

    result: ShadowResult
    progress: ShadowProgress
    leveled_up: bool = False
    newly_mastered: bool = False


class ShadowPracticeService:
    """Score attempts against catalogue content and track progress."""

    def __init__(
        self,
        catalog: ContentCatalog,
        store: ProgressStore | None = None,
        config: ScoringConfig = DEFAULT_CONFIG,
        controller: ProgressionController | None = None,
    ) -> None:
        self.catalog = catalog
        self.store: ProgressStore = store if store is not None else InMemoryProgressStore()
        self.config = config
        self.controller = controller or ProgressionController(config)

    def get_content(self, content_id: str) -> ShadowContent:
        return self.catalog.get_content(content_id)

    def get_progress(self, learner_id: str, content_id: str) -> ShadowProgress:
        """Current progress, or the initial record if never practised."""
        content = self.catalog.get_content(content_id)
        progress = self.store.get(learner_id, content.id)
        return progress if progress is not None else ShadowProgress.initial(content.id)

    def score(
        self,
        content: ShadowContent,
        level: Level | int,
        attempts: Sequence[ObservedAttempt],
    ) -> ShadowResult:
        """Score without touching progress."""
        level = Level(level)
        analysis = score_content(
            content.sentences, attempts, content.settings_for(level), level, self.config
        )
        return build_result(analysis, level, self.config)

    def submit(
        self,
        learner_id: str,
        content_id: str,
        level: Level | int,
        attempts: Sequence[ObservedAttempt],
    ) -> PracticeOutcome:
        """Score *attempts* at *level* and record them against the learner.

        Raises
        ------
        ContentNotFoundError
            Unknown *content_id*.
        LevelLockedError
            *level* is above the learner's unlocked level when the
            record is updated.
        InvalidInputError
            The content cannot be scored at *level*.
        """
        content = self.catalog.get_content(content_id)
        level = Level(level)
        result = self.score(content, level, attempts)

        def apply(current: ShadowProgress | None) -> tuple[ShadowProgress, ProgressUpdate]:
            self.controller.check_level(current, level)
            update = self.controller.record(current, result, content_id=content.id)
            return update.progress, update

        update = self.store.update(learner_id, content.id, apply)
        logger.debug(
            "Learner %s scored %.1f on %s at level %d (%s)",
            learner_id, result.scores.overall, content.id, level, result.feedback.value,
        )
        return PracticeOutcome(
            result=result,
            progress=update.progress,
            leveled_up=update.leveled_up,
            newly_mastered=update.newly_mastered,
        )
