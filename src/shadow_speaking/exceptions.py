"""Custom exception hierarchy for the shadow_speaking package."""


class ShadowSpeakingError(Exception):
    """Base exception for all shadow_speaking errors."""


class InvalidInputError(ShadowSpeakingError):
    """Raised when a reference sentence or level settings cannot be scored."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        location = f" ({field})" if field else ""
        super().__init__(f"{message}{location}")


class ContentError(ShadowSpeakingError):
    """Raised when shadow content cannot be loaded or has the wrong shape."""


class ContentNotFoundError(ContentError):
    """Raised when a content id is not present in the catalogue."""

    def __init__(self, content_id: str) -> None:
        self.content_id = content_id
        super().__init__(f"Unknown content id: {content_id!r}")


class ConfigError(ShadowSpeakingError):
    """Raised when a scoring configuration cannot be loaded or is invalid."""


class LevelLockedError(ShadowSpeakingError):
    """Raised when a learner asks to practise above their unlocked level."""

    def __init__(self, requested: int, unlocked: int) -> None:
        self.requested = requested
        self.unlocked = unlocked
        super().__init__(
            f"Level {requested} is locked (highest unlocked level is {unlocked})"
        )
