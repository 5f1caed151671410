"""Timed transcript spans, labeled output spans and transcript parsing."""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

logger = logging.getLogger(__name__)

DEFAULT_WORD_PROBABILITY = 0.8


class MalformedInputError(ValueError):
    """Raised when transcript spans are structurally invalid (fatal for a run)."""


@dataclass(frozen=True)
class TimedSpan:
    """Transcribed text with its timing in seconds.

    ``confidence`` is a probability in [0, 1]. ``log_prob`` carries the
    recognizer's average log-probability when it was supplied.
    """

    text: str
    start: float
    end: float
    confidence: float = 1.0
    log_prob: float | None = None
    words: tuple["TimedSpan", ...] = ()

    @property
    def duration(self) -> float:
        return self.end - self.start

    @property
    def word_count(self) -> int:
        return len(self.text.split())

    @property
    def recognizer_log_prob(self) -> float:
        """Log-probability, derived from ``confidence`` when not supplied."""
        if self.log_prob is not None:
            return self.log_prob
        return math.log(max(1e-6, min(1.0, self.confidence)))

    @property
    def recognizer_probability(self) -> float:
        """Recognizer confidence as a probability in [0, 1]."""
        if self.log_prob is not None:
            return min(1.0, math.exp(min(0.0, self.log_prob)))
        return max(0.0, min(1.0, self.confidence))


@dataclass
class LabeledSpan:
    """Span with its assigned speaker. ``speaker_id`` is rewritten by merging."""

    span: TimedSpan
    speaker_id: int
    confidence: float
    label: str = ""

    @property
    def text(self) -> str:
        return self.span.text

    @property
    def start(self) -> float:
        return self.span.start

    @property
    def end(self) -> float:
        return self.span.end


def validate_span(span: TimedSpan) -> None:
    """Check timing sanity.

    Raises:
        MalformedInputError: If times are not finite or end precedes start.
    """
    if not (math.isfinite(span.start) and math.isfinite(span.end)):
        raise MalformedInputError(f"Non-finite timing in span {span.text!r}")
    if span.end < span.start:
        raise MalformedInputError(
            f"Span {span.text!r} ends before it starts ({span.start:.2f} > {span.end:.2f})"
        )


def _number(entry: Mapping[str, Any], key: str, default: float | None = None) -> float:
    value = entry.get(key, default)
    if value is None:
        raise MalformedInputError(f"Missing {key!r} in transcript entry: {dict(entry)!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise MalformedInputError(f"Invalid {key!r} value: {value!r}") from e


def _parse_word(entry: Mapping[str, Any]) -> TimedSpan:
    text = str(entry.get("word", entry.get("text", ""))).strip()
    word = TimedSpan(
        text=text,
        start=_number(entry, "start"),
        end=_number(entry, "end"),
        confidence=_number(entry, "probability", DEFAULT_WORD_PROBABILITY),
    )
    validate_span(word)
    return word


def parse_segment(entry: Mapping[str, Any]) -> TimedSpan:
    """Build a span from one Whisper-style segment dict."""
    if not isinstance(entry, Mapping):
        raise MalformedInputError(f"Segment must be an object, got {type(entry).__name__}")

    log_prob = entry.get("avg_logprob")
    words = tuple(_parse_word(w) for w in entry.get("words") or ())
    span = TimedSpan(
        text=str(entry.get("text", "")).strip(),
        start=_number(entry, "start"),
        end=_number(entry, "end"),
        confidence=_number(entry, "confidence", 1.0),
        log_prob=None if log_prob is None else _number(entry, "avg_logprob"),
        words=words,
    )
    validate_span(span)
    return span


def parse_segments(data: Any) -> list[TimedSpan]:
    """Parse Whisper-style output: a list of segments or ``{"segments": [...]}``.

    Raises:
        MalformedInputError: If the structure or any timing is invalid.
    """
    if isinstance(data, Mapping):
        data = data.get("segments", [])
    if not isinstance(data, list):
        raise MalformedInputError("Transcript must be a list of segments")

    spans = [parse_segment(entry) for entry in data]
    logger.debug("Parsed %d segments (%d with word timings)", len(spans), sum(1 for s in spans if s.words))
    return spans


def estimate_words(span: TimedSpan) -> list[TimedSpan]:
    """Split a segment into evenly timed words when no word timings exist."""
    tokens = span.text.split()
    if not tokens:
        return []

    step = span.duration / len(tokens)
    confidence = span.recognizer_probability
    return [
        TimedSpan(
            text=token,
            start=span.start + i * step,
            end=span.start + (i + 1) * step,
            confidence=confidence,
        )
        for i, token in enumerate(tokens)
    ]


def flatten_words(spans: Iterable[TimedSpan]) -> list[TimedSpan]:
    """Collect word-level spans, estimating timings for segments without them."""
    words: list[TimedSpan] = []
    for span in spans:
        source = span.words if span.words else estimate_words(span)
        words.extend(w for w in source if w.text.strip())
    return words
