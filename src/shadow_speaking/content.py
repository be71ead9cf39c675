"""Shadow content loader, validator and catalogue.

The content store is a JSON object keyed by content id.  Field names
follow the store's camelCase convention::

    {
      "daily_001": {
        "title": "...", "category": "daily", "difficulty": 1,
        "duration": 9.5, "audioUrl": "...", "transcript": "...",
        "learningPoints": ["..."],
        "sentences": [
          {"text": "...", "startTime": 0.0, "endTime": 2.4, "speed": 1.0,
           "emphasis": [1], "tone": "friendly", "romanization": "...",
           "translation": "...", "onsets": [0.0, 0.9]}
        ],
        "settings": {
          "level1": {"speed": 0.7, "delay": 1.0, "pause": true},
          ...
        }
      }
    }

Validation rules reported by :meth:`ContentLoader.validate`:

  C1  Sentences ordered by start time and non-overlapping        ERROR
  C2  Level settings get strictly harder from level 1 to 4       ERROR
  C3  At least one sentence                                      ERROR
  C4  Each sentence is scorable (units, times, emphasis, onsets) ERROR
  C5  Sentences end within the content duration                  WARNING
  C6  Level speed positive and delay non-negative                ERROR
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Literal

from .config import DEFAULT_LEVEL_SETTINGS
from .exceptions import ContentError, ContentNotFoundError, InvalidInputError
from .models import (
    ContentId,
    Level,
    LevelSettings,
    ReferenceSentence,
    ShadowCategory,
    ShadowContent,
)
from .normalizer import validate_sentence, validate_settings

logger = logging.getLogger(__name__)

_CONTENT_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_\-]{0,63}$")

DEFAULT_CONTENT_RESOURCE = "shadow_content.json"


def content_id(value: object) -> ContentId:
    """Validate *value* as a catalogue key.

    Raises :class:`ContentNotFoundError` for anything that cannot name
    an item, so malformed ids are rejected the same way as unknown ones.
    """
    if not isinstance(value, str) or not _CONTENT_ID_RE.match(value):
        raise ContentNotFoundError(str(value))
    return ContentId(value)


# ---------------------------------------------------------------------------
# Validation results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationIssue:
    """A single validation finding."""

    severity: Literal["error", "warning"]
    rule: str
    message: str


@dataclass
class ValidationResult:
    valid: bool
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == "warning"]


# ---------------------------------------------------------------------------
# ContentLoader
# ---------------------------------------------------------------------------


def _require(data: Mapping[str, Any], key: str, kind: type | tuple[type, ...], where: str) -> Any:
    value = data.get(key)
    if not isinstance(value, kind) or isinstance(value, bool) and kind is not bool:
        raise ContentError(f"Missing or invalid '{key}' in {where}")
    return value


def _optional_str(data: Mapping[str, Any], key: str, where: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ContentError(f"'{key}' must be a string in {where}")
    return value


class ContentLoader:
    """Parse and validate shadow content JSON."""

    def load(self, path: str | Path) -> dict[ContentId, ShadowContent]:
        """Load every item from a content JSON file.

        Raises :class:`~shadow_speaking.exceptions.ContentError`
        if the file cannot be read or an item is malformed.
        """
        p = Path(path)
        try:
            text = p.read_text(encoding="utf-8")
        except OSError as exc:
            raise ContentError(f"Cannot read content file: {exc}") from exc
        return self.loads(text)

    def loads(self, text: str) -> dict[ContentId, ShadowContent]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ContentError(f"Invalid JSON in content file: {exc}") from exc

        if not isinstance(data, dict):
            raise ContentError("Content file must be a JSON object keyed by content id")

        items: dict[ContentId, ShadowContent] = {}
        for key, raw in data.items():
            try:
                cid = content_id(key)
            except ContentNotFoundError as exc:
                raise ContentError(f"Invalid content id {key!r}") from exc
            items[cid] = self.load_json(raw, cid)
        return items

    def load_json(self, data: Any, cid: str) -> ShadowContent:
        """Build one :class:`ShadowContent` from its parsed JSON object."""
        where = f"content {cid!r}"
        if not isinstance(data, dict):
            raise ContentError(f"{where} must be a JSON object")

        if "id" in data and data["id"] != cid:
            raise ContentError(f"{where} declares mismatched id {data['id']!r}")

        try:
            category = ShadowCategory(data.get("category", "daily"))
        except ValueError as exc:
            raise ContentError(f"Unknown category {data.get('category')!r} in {where}") from exc

        difficulty = data.get("difficulty", 1)
        if difficulty not in (1, 2, 3, 4) or isinstance(difficulty, bool):
            raise ContentError(f"'difficulty' must be 1-4 in {where}")

        raw_sentences = _require(data, "sentences", list, where)
        sentences = tuple(
            self._parse_sentence(raw, f"{where} sentences[{i}]")
            for i, raw in enumerate(raw_sentences)
        )

        learning_points = data.get("learningPoints", [])
        if not isinstance(learning_points, list) or not all(
            isinstance(p, str) for p in learning_points
        ):
            raise ContentError(f"'learningPoints' must be a list of strings in {where}")

        return ShadowContent(
            id=ContentId(cid),
            title=_require(data, "title", str, where),
            category=category,
            difficulty=Level(difficulty),
            duration=float(_require(data, "duration", (int, float), where)),
            audio_url=_optional_str(data, "audioUrl", where) or "",
            transcript=_optional_str(data, "transcript", where) or "",
            sentences=sentences,
            settings=self._parse_settings(data.get("settings", {}), where),
            learning_points=tuple(learning_points),
        )

    def validate(self, content: ShadowContent) -> ValidationResult:
        """Check *content* against rules C1-C6."""
        issues: list[ValidationIssue] = []

        if not content.sentences:
            issues.append(ValidationIssue("error", "C3", "content has no sentences"))

        for i, (prev, cur) in enumerate(zip(content.sentences, content.sentences[1:]), start=1):
            if cur.start_time < prev.start_time:
                issues.append(ValidationIssue(
                    "error", "C1", f"sentences[{i}] starts before sentences[{i - 1}]",
                ))
            elif cur.start_time < prev.end_time:
                issues.append(ValidationIssue(
                    "error", "C1", f"sentences[{i}] overlaps sentences[{i - 1}]",
                ))

        for i, sentence in enumerate(content.sentences):
            try:
                validate_sentence(sentence)
            except InvalidInputError as exc:
                issues.append(ValidationIssue("error", "C4", f"sentences[{i}]: {exc}"))
            if sentence.end_time > content.duration:
                issues.append(ValidationIssue(
                    "warning", "C5",
                    f"sentences[{i}] ends at {sentence.end_time}s, after duration {content.duration}s",
                ))

        for level in Level:
            try:
                validate_settings(content.settings[level])
            except InvalidInputError as exc:
                issues.append(ValidationIssue("error", "C6", f"{level.key}: {exc}"))

        for lower, higher in zip(Level, list(Level)[1:]):
            if not _harder(content.settings[higher], content.settings[lower]):
                issues.append(ValidationIssue(
                    "error", "C2",
                    f"{higher.key} is not harder than {lower.key}",
                ))

        valid = not any(issue.severity == "error" for issue in issues)
        return ValidationResult(valid=valid, issues=issues)

    @staticmethod
    def _parse_sentence(raw: Any, where: str) -> ReferenceSentence:
        if not isinstance(raw, dict):
            raise ContentError(f"{where} must be an object")

        emphasis = raw.get("emphasis", [])
        if not isinstance(emphasis, list) or not all(
            isinstance(i, int) and not isinstance(i, bool) for i in emphasis
        ):
            raise ContentError(f"{where}.emphasis must be a list of integers")

        onsets = raw.get("onsets")
        if onsets is not None and (
            not isinstance(onsets, list)
            or not all(isinstance(t, (int, float)) for t in onsets)
        ):
            raise ContentError(f"{where}.onsets must be a list of numbers")

        return ReferenceSentence(
            text=_require(raw, "text", str, where),
            start_time=float(_require(raw, "startTime", (int, float), where)),
            end_time=float(_require(raw, "endTime", (int, float), where)),
            speed=float(_require(raw, "speed", (int, float), where)) if "speed" in raw else 1.0,
            emphasis=tuple(emphasis),
            tone=_require(raw, "tone", str, where) if "tone" in raw else "neutral",
            romanization=_optional_str(raw, "romanization", where),
            translation=_optional_str(raw, "translation", where),
            onsets=tuple(float(t) for t in onsets) if onsets is not None else None,
        )

    @staticmethod
    def _parse_settings(raw: Any, where: str) -> dict[Level, LevelSettings]:
        if not isinstance(raw, dict):
            raise ContentError(f"'settings' must be an object in {where}")

        settings = dict(DEFAULT_LEVEL_SETTINGS)
        for level in Level:
            entry = raw.get(level.key)
            if entry is None:
                continue
            if not isinstance(entry, dict):
                raise ContentError(f"settings.{level.key} must be an object in {where}")
            pause = entry.get("pause", settings[level].pause)
            if not isinstance(pause, bool):
                raise ContentError(f"settings.{level.key}.pause must be a boolean in {where}")
            settings[level] = LevelSettings(
                speed=float(_require(entry, "speed", (int, float), where)),
                delay=float(_require(entry, "delay", (int, float), where)),
                pause=pause,
            )
        return settings


def _harder(higher: LevelSettings, lower: LevelSettings) -> bool:
    """True if *higher* is no easier than *lower* on every axis and harder on one."""
    no_easier = (
        higher.speed >= lower.speed
        and higher.delay <= lower.delay
        and (lower.pause or not higher.pause)
    )
    strictly = (
        higher.speed > lower.speed
        or higher.delay < lower.delay
        or (lower.pause and not higher.pause)
    )
    return no_easier and strictly


# ---------------------------------------------------------------------------
# ContentCatalog
# ---------------------------------------------------------------------------


class ContentCatalog(Mapping[ContentId, ShadowContent]):
    """Read-only mapping of validated content ids to content items."""

    def __init__(self, items: Mapping[ContentId, ShadowContent]) -> None:
        self._items = dict(items)

    @classmethod
    def from_file(cls, path: str | Path, loader: ContentLoader | None = None) -> ContentCatalog:
        """Load and validate a catalogue file.

        Items failing validation raise :class:`ContentError`; warnings are
        logged and the item is kept.
        """
        loader = loader or ContentLoader()
        return cls._validated(loader.load(path), loader)

    @classmethod
    def default(cls) -> ContentCatalog:
        """The sample catalogue bundled with the package."""
        loader = ContentLoader()
        text = (
            resources.files("shadow_speaking")
            .joinpath("data").joinpath(DEFAULT_CONTENT_RESOURCE)
            .read_text(encoding="utf-8")
        )
        return cls._validated(loader.loads(text), loader)

    @classmethod
    def _validated(
        cls, items: dict[ContentId, ShadowContent], loader: ContentLoader
    ) -> ContentCatalog:
        for cid, item in items.items():
            result = loader.validate(item)
            for issue in result.warnings:
                logger.warning("Content %s: [%s] %s", cid, issue.rule, issue.message)
            if not result.valid:
                details = "; ".join(f"[{i.rule}] {i.message}" for i in result.errors)
                raise ContentError(f"Content {cid!r} failed validation: {details}")
        return cls(items)

    def get_content(self, value: object) -> ShadowContent:
        """Return the item for *value*, raising :class:`ContentNotFoundError`."""
        cid = content_id(value)
        try:
            return self._items[cid]
        except KeyError:
            raise ContentNotFoundError(cid) from None

    def ids(self) -> list[ContentId]:
        return sorted(self._items)

    def __getitem__(self, key: ContentId) -> ShadowContent:
        return self.get_content(key)

    def get(self, key: object, default: ShadowContent | None = None) -> ShadowContent | None:  # type: ignore[override]
        return self._items.get(key, default)  # type: ignore[call-overload]

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __iter__(self) -> Iterator[ContentId]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)
