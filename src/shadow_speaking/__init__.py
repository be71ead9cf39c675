"""Shadow Speaking SDK -- scoring and progression for shadowing practice.

Public API re-exports for convenient access::

    from shadow_speaking import normalize_attempt, score_alignment, build_result
"""

from ._version import __version__
from .config import DEFAULT_CONFIG, ScoringConfig, load_scoring_config
from .content import ContentCatalog, ContentLoader, ValidationIssue, ValidationResult, content_id
from .exceptions import (
    ConfigError,
    ContentError,
    ContentNotFoundError,
    InvalidInputError,
    LevelLockedError,
    ShadowSpeakingError,
)
from .feedback import SyncStatus, build_result, classify_feedback, feedback_messages, sync_status
from .models import (
    ContentId,
    Feedback,
    Level,
    LevelSettings,
    ObservedAttempt,
    ReferenceSentence,
    ShadowAnalysis,
    ShadowCategory,
    ShadowContent,
    ShadowProgress,
    ShadowResult,
    ShadowScores,
)
from .normalizer import AlignedUnit, Alignment, expected_onsets, normalize_attempt
from .progression import ProgressionController, ProgressUpdate, next_level
from .rewards import base_xp_for_level, calculate_xp
from .scoring import combine_analyses, score_alignment, score_content, score_sentence
from .service import PracticeOutcome, ShadowPracticeService
from .store import InMemoryProgressStore, ProgressStore

__all__ = [
    "__version__",
    # Models
    "ContentId",
    "Feedback",
    "Level",
    "LevelSettings",
    "ObservedAttempt",
    "ReferenceSentence",
    "ShadowAnalysis",
    "ShadowCategory",
    "ShadowContent",
    "ShadowProgress",
    "ShadowResult",
    "ShadowScores",
    # Normalizer
    "AlignedUnit",
    "Alignment",
    "expected_onsets",
    "normalize_attempt",
    # Scoring
    "score_alignment",
    "score_sentence",
    "score_content",
    "combine_analyses",
    # Feedback and rewards
    "build_result",
    "classify_feedback",
    "feedback_messages",
    "sync_status",
    "SyncStatus",
    "base_xp_for_level",
    "calculate_xp",
    # Progression
    "next_level",
    "ProgressionController",
    "ProgressUpdate",
    "ProgressStore",
    "InMemoryProgressStore",
    # Content
    "content_id",
    "ContentCatalog",
    "ContentLoader",
    "ValidationIssue",
    "ValidationResult",
    # Service
    "ShadowPracticeService",
    "PracticeOutcome",
    # Configuration
    "ScoringConfig",
    "DEFAULT_CONFIG",
    "load_scoring_config",
    # Exceptions
    "ShadowSpeakingError",
    "InvalidInputError",
    "ContentError",
    "ContentNotFoundError",
    "ConfigError",
    "LevelLockedError",
]
