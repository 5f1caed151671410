"""Pydantic models for web API."""

from pydantic import BaseModel, Field


class WordIn(BaseModel):
    """Word with its own timing."""

    word: str
    start: float
    end: float
    probability: float = 0.8


class SegmentIn(BaseModel):
    """Transcript segment, Whisper style."""

    text: str
    start: float
    end: float
    confidence: float = 1.0
    avg_logprob: float | None = None
    words: list[WordIn] = []


class DiarizeRequest(BaseModel):
    """Diarization request body."""

    segments: list[SegmentIn]
    language: str = "en"
    strategies: list[str] | None = None
    workers: int = Field(default=1, ge=1)


class LabeledSegmentOut(BaseModel):
    """One labeled span."""

    text: str
    start: float
    end: float
    speaker_id: int
    speaker: str
    confidence: float


class DiarizeResponse(BaseModel):
    """Diarization result."""

    strategy: str
    cancelled: bool = False
    num_speakers: int
    summary: str
    dialogue: str
    segments: list[LabeledSegmentOut] = []


class LanguageInfo(BaseModel):
    """Localized labels for one language."""

    code: str
    speaker: str
    rate: str
    rate_unit: str
