"""Shadow-speaking endpoints: content lookup, attempt analysis, progress."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from shadow_speaking import (
    Level,
    ObservedAttempt,
    ShadowContent,
    ShadowPracticeService,
    ShadowProgress,
)

router = APIRouter()


def _service(request: Request) -> ShadowPracticeService:
    return request.app.state.service


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


class ContentSummary(BaseModel):
    id: str
    title: str
    category: str
    difficulty: int


class SentenceResponse(BaseModel):
    text: str
    start_time: float
    end_time: float
    speed: float
    emphasis: list[int]
    tone: str
    romanization: str | None = None
    translation: str | None = None


class LevelSettingsResponse(BaseModel):
    speed: float
    delay: float
    pause: bool


class ContentResponse(ContentSummary):
    duration: float
    audio_url: str
    transcript: str
    learning_points: list[str]
    sentences: list[SentenceResponse]
    settings: dict[str, LevelSettingsResponse]


class AnalyzeRequest(BaseModel):
    learner_id: str = Field(min_length=1)
    content_id: str
    level: int = Field(default=1, ge=1, le=4)
    # One list of onset timestamps (seconds) per sentence.
    attempts: list[list[float]] = Field(default_factory=list)


class ScoresResponse(BaseModel):
    rhythm: float
    timing: float
    overall: float


class ProgressResponse(BaseModel):
    content_id: str
    attempts: int
    best_score: float
    rhythm_accuracy: float
    timing_accuracy: float
    level: int
    last_practiced: datetime | None = None
    mastered: bool


class AnalyzeResponse(BaseModel):
    scores: ScoresResponse
    feedback: str
    messages: list[str]
    xp: int
    level: int
    leveled_up: bool
    newly_mastered: bool
    progress: ProgressResponse


def _summary(content: ShadowContent) -> ContentSummary:
    return ContentSummary(
        id=content.id,
        title=content.title,
        category=content.category.value,
        difficulty=int(content.difficulty),
    )


def _progress(progress: ShadowProgress) -> ProgressResponse:
    return ProgressResponse(
        content_id=progress.content_id,
        attempts=progress.attempts,
        best_score=progress.best_score,
        rhythm_accuracy=progress.rhythm_accuracy,
        timing_accuracy=progress.timing_accuracy,
        level=int(progress.level),
        last_practiced=progress.last_practiced,
        mastered=progress.mastered,
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/content", response_model=list[ContentSummary])
async def list_content(request: Request) -> list[ContentSummary]:
    catalog = _service(request).catalog
    return [_summary(catalog.get_content(cid)) for cid in catalog.ids()]


@router.get("/content/{content_id}", response_model=ContentResponse)
async def get_content(content_id: str, request: Request) -> ContentResponse:
    content = _service(request).get_content(content_id)
    return ContentResponse(
        **_summary(content).model_dump(),
        duration=content.duration,
        audio_url=content.audio_url,
        transcript=content.transcript,
        learning_points=list(content.learning_points),
        sentences=[
            SentenceResponse(
                text=s.text,
                start_time=s.start_time,
                end_time=s.end_time,
                speed=s.speed,
                emphasis=list(s.emphasis),
                tone=s.tone,
                romanization=s.romanization,
                translation=s.translation,
            )
            for s in content.sentences
        ],
        settings={
            level.key: LevelSettingsResponse(
                speed=content.settings[level].speed,
                delay=content.settings[level].delay,
                pause=content.settings[level].pause,
            )
            for level in Level
        },
    )


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(body: AnalyzeRequest, request: Request) -> AnalyzeResponse:
    outcome = _service(request).submit(
        learner_id=body.learner_id,
        content_id=body.content_id,
        level=body.level,
        attempts=[ObservedAttempt(onsets=tuple(onsets)) for onsets in body.attempts],
    )
    result = outcome.result
    return AnalyzeResponse(
        scores=ScoresResponse(
            rhythm=result.scores.rhythm,
            timing=result.scores.timing,
            overall=result.scores.overall,
        ),
        feedback=result.feedback.value,
        messages=list(result.messages),
        xp=result.xp,
        level=int(result.level),
        leveled_up=outcome.leveled_up,
        newly_mastered=outcome.newly_mastered,
        progress=_progress(outcome.progress),
    )


@router.get("/progress/{learner_id}/{content_id}", response_model=ProgressResponse)
async def get_progress(learner_id: str, content_id: str, request: Request) -> ProgressResponse:
    return _progress(_service(request).get_progress(learner_id, content_id))
