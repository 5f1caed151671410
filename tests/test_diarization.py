from __future__ import annotations

import threading

import pytest

from voicetrace.config import DiarizationConfig
from voicetrace.pipeline.audio import AudioDecodeError, WaveformSource
from voicetrace.pipeline.diarization import Diarizer, OutcomeStatus
from voicetrace.pipeline.spans import MalformedInputError, TimedSpan


class FailingSource:
    def read(self, start: float, end: float, sample_rate: int):
        raise AudioDecodeError("no audio")


def test_without_audio_enhanced_strategy_labels_spans(alternating_spans) -> None:
    outcome = Diarizer().diarize(alternating_spans)

    assert outcome.status is OutcomeStatus.OK
    assert outcome.strategy == "enhanced"
    assert [s.speaker_id for s in outcome.spans] == [1, 2, 1, 2]
    assert [s.label for s in outcome.spans] == ["Speaker 1", "Speaker 2"] * 2
    assert [p.label for p in outcome.profiles] == ["Speaker 1", "Speaker 2"]


def test_gated_segment_strategy(alternating_spans) -> None:
    outcome = Diarizer(DiarizationConfig(strategies=("segment",))).diarize(alternating_spans)
    assert outcome.strategy == "segment"
    assert [s.speaker_id for s in outcome.spans] == [1, 2, 1, 2]


def test_localized_labels(alternating_spans) -> None:
    outcome = Diarizer(DiarizationConfig(language="es")).diarize(alternating_spans)
    assert outcome.spans[1].label == "Hablante 2"


def test_word_strategy_used_when_audio_is_available(two_voice_audio) -> None:
    spans = [TimedSpan("alpha beta gamma delta", float(i), i + 1.0) for i in range(3)]
    outcome = Diarizer(audio=WaveformSource(two_voice_audio, 16000)).diarize(spans)

    assert outcome.strategy == "word"
    assert len(outcome.spans) == 12
    assert outcome.num_speakers == 2


def test_unusable_audio_falls_through_to_segments(alternating_spans) -> None:
    outcome = Diarizer(audio=FailingSource()).diarize(alternating_spans)
    assert outcome.strategy == "enhanced"
    assert len(outcome.spans) == 4


def test_single_speaker_strategy(alternating_spans) -> None:
    outcome = Diarizer(DiarizationConfig(strategies=("single",))).diarize(alternating_spans)
    assert outcome.strategy == "single"
    assert {s.speaker_id for s in outcome.spans} == {1}
    assert outcome.profiles[0].sample_count == 4


def test_empty_transcript_is_not_an_error() -> None:
    outcome = Diarizer().diarize([TimedSpan("", 0.0, 1.0)])
    assert not outcome.ok
    assert outcome.spans == []
    assert Diarizer().diarize([]).spans == []


def test_empty_text_spans_are_dropped(alternating_spans) -> None:
    spans = alternating_spans[:2] + [TimedSpan("   ", 11.5, 11.8)]
    outcome = Diarizer().diarize(spans)
    assert len(outcome.spans) == 2


def test_unsorted_input_is_ordered(alternating_spans) -> None:
    outcome = Diarizer().diarize(list(reversed(alternating_spans)))
    assert [s.start for s in outcome.spans] == [0.0, 6.0, 12.0, 18.0]
    assert [s.speaker_id for s in outcome.spans] == [1, 2, 1, 2]


def test_malformed_span_is_fatal(alternating_spans) -> None:
    with pytest.raises(MalformedInputError):
        Diarizer().diarize(alternating_spans + [TimedSpan("bad", 30.0, 29.0)])


def test_cancelled_run_returns_partial_result(alternating_spans) -> None:
    cancel = threading.Event()
    cancel.set()
    outcome = Diarizer().diarize(alternating_spans, cancel=cancel)
    assert outcome.cancelled
    assert outcome.strategy == "enhanced"
    assert outcome.spans == []


def test_malformed_nested_word_is_fatal(two_voice_audio) -> None:
    words = (TimedSpan("alpha", 0.0, 0.5), TimedSpan("beta", float("nan"), 1.0))
    span = TimedSpan("alpha beta", 0.0, 1.0, words=words)
    with pytest.raises(MalformedInputError):
        Diarizer(audio=WaveformSource(two_voice_audio, 16000)).diarize([span])
