"""Data models for shadow-speaking practice.

Immutable dataclasses describing reference content, a learner's observed
attempt, the scoring output, and the per-content progress record.
Times are in seconds throughout.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum, IntEnum
from typing import NewType

# Validated catalogue key; build with ``shadow_speaking.content.content_id``.
ContentId = NewType("ContentId", str)


class Level(IntEnum):
    """The four practice levels, from most scaffolded to native speed."""

    LEVEL_1 = 1
    LEVEL_2 = 2
    LEVEL_3 = 3
    LEVEL_4 = 4

    @property
    def key(self) -> str:
        """Key used by the content store (``"level1"`` ... ``"level4"``)."""
        return f"level{self.value}"


MAX_LEVEL = Level.LEVEL_4


class Feedback(str, Enum):
    """Feedback ladder labels, best first."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    NEEDS_PRACTICE = "needs_practice"
    TRY_AGAIN = "try_again"


class ShadowCategory(str, Enum):
    DAILY = "daily"
    BUSINESS = "business"
    CASUAL = "casual"
    DRAMA = "drama"


# ---------------------------------------------------------------------------
# Reference content
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReferenceSentence:
    """One reference utterance with its timing and stress profile."""

    text: str
    start_time: float
    end_time: float
    speed: float
    emphasis: tuple[int, ...] = ()
    tone: str = "neutral"
    romanization: str | None = None
    translation: str | None = None
    # Explicit per-unit onsets on the content timeline; evenly spaced if None.
    onsets: tuple[float, ...] | None = None

    @property
    def units(self) -> tuple[str, ...]:
        """Word-level segmentation of :attr:`text`."""
        return tuple(self.text.split())

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class LevelSettings:
    """Playback mode for one practice level."""

    speed: float
    delay: float
    pause: bool


@dataclass(frozen=True)
class ShadowContent:
    """A practice item: audio, transcript, sentences and level settings."""

    id: ContentId
    title: str
    category: ShadowCategory
    difficulty: Level
    duration: float
    audio_url: str
    transcript: str
    sentences: tuple[ReferenceSentence, ...]
    settings: dict[Level, LevelSettings]
    learning_points: tuple[str, ...] = ()

    def settings_for(self, level: Level | int) -> LevelSettings:
        return self.settings[Level(level)]

    def sentence_at(self, t: float) -> ReferenceSentence | None:
        """Return the sentence playing at content time *t*, if any."""
        for sentence in self.sentences:
            if sentence.start_time <= t <= sentence.end_time:
                return sentence
        return None


# ---------------------------------------------------------------------------
# Attempt and scoring output
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ObservedAttempt:
    """Onsets the learner produced, measured from the sentence's playback start."""

    onsets: tuple[float, ...] = ()

    @classmethod
    def empty(cls) -> ObservedAttempt:
        return cls()

    def __len__(self) -> int:
        return len(self.onsets)


@dataclass(frozen=True)
class ShadowAnalysis:
    """Multi-axis accuracy of one attempt. Scores are on a 0-100 scale."""

    rhythm_score: float
    timing_score: float
    overall_score: float
    emphasis_matches: int
    total_emphasis: int
    syllable_length_accuracy: float
    tempo_accuracy: float
    average_delay: float
    matched_units: int = 0
    total_units: int = 0

    @property
    def emphasis_ratio(self) -> float:
        if self.total_emphasis == 0:
            return 1.0
        return self.emphasis_matches / self.total_emphasis


@dataclass(frozen=True)
class ShadowScores:
    rhythm: float
    timing: float
    overall: float


@dataclass(frozen=True)
class ShadowResult:
    """What the caller shows the learner after an attempt."""

    scores: ShadowScores
    feedback: Feedback
    xp: int
    level: Level = Level.LEVEL_1
    messages: tuple[str, ...] = ()
    analysis: ShadowAnalysis | None = field(default=None, repr=False)


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ShadowProgress:
    """Per learner x content progress. Owned and persisted by the caller."""

    content_id: str
    attempts: int = 0
    best_score: float = 0.0
    rhythm_accuracy: float = 0.0
    timing_accuracy: float = 0.0
    level: Level = Level.LEVEL_1
    last_practiced: datetime | None = None
    mastered: bool = False

    @classmethod
    def initial(cls, content_id: str) -> ShadowProgress:
        return cls(content_id=content_id)

    def evolve(self, **changes: object) -> ShadowProgress:
        return replace(self, **changes)  # type: ignore[arg-type]
