from __future__ import annotations

from voicetrace.pipeline.spans import LabeledSpan, TimedSpan
from voicetrace.transcript import format_dialogue, format_ts, group_turns, speaker_summary


def _spans() -> list[LabeledSpan]:
    return [
        LabeledSpan(TimedSpan("one two three four five", 0.0, 5.0), 1, 1.0),
        LabeledSpan(TimedSpan("and six", 5.0, 6.0), 1, 1.0),
        LabeledSpan(TimedSpan("hi there", 65.0, 66.0), 2, 0.9),
    ]


def test_format_ts() -> None:
    assert format_ts(0.0) == "00:00"
    assert format_ts(65.9) == "01:05"


def test_group_turns() -> None:
    assert [len(turn) for turn in group_turns(_spans())] == [2, 1]


def test_format_dialogue() -> None:
    dialogue = format_dialogue(_spans(), "en")
    assert dialogue == (
        "**Speaker 1** [00:00] _rate: 1.2 w/s_\n"
        "one two three four five and six\n\n"
        "**Speaker 2** [01:05] _rate: 2.0 w/s_\n"
        "hi there"
    )


def test_format_dialogue_uses_assigned_labels() -> None:
    spans = _spans()
    spans[2].label = "Hablante 2"
    dialogue = format_dialogue(spans, "es", show_rate=False)
    assert dialogue.startswith("**Hablante 1** [00:00]\n")
    assert "**Hablante 2** [01:05]\nhi there" in dialogue


def test_speaker_summary() -> None:
    assert speaker_summary(_spans()) == "2 speakers detected: Speaker 1, Speaker 2"
    assert speaker_summary(_spans()[:1]) == "1 speaker detected: Speaker 1"
    assert speaker_summary([]) == "No speakers detected"
