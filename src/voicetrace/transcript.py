"""Rendering of labeled spans as a readable dialogue."""

from typing import Sequence

from .labels import DEFAULT_CATALOG, LabelCatalog, format_rate_label, format_speaker_label
from .pipeline.spans import LabeledSpan


def format_ts(seconds: float) -> str:
    """Format seconds as MM:SS."""
    total = int(max(0.0, seconds))
    return f"{total // 60:02d}:{total % 60:02d}"


def _label(span: LabeledSpan, language: str, catalog: LabelCatalog) -> str:
    return span.label or format_speaker_label(language, span.speaker_id, catalog)


def group_turns(spans: Sequence[LabeledSpan]) -> list[list[LabeledSpan]]:
    """Group consecutive spans that share a speaker id."""
    turns: list[list[LabeledSpan]] = []
    for span in spans:
        if turns and turns[-1][-1].speaker_id == span.speaker_id:
            turns[-1].append(span)
        else:
            turns.append([span])
    return turns


def format_dialogue(
    spans: Sequence[LabeledSpan],
    language: str = "en",
    show_rate: bool = True,
    catalog: LabelCatalog = DEFAULT_CATALOG,
) -> str:
    """Render spans as Markdown, with a speaker header on every change.

    Each turn looks like::

        **Speaker 1** [00:05] _rate: 2.4 w/s_
        Hello there. How are you?
    """
    blocks = []
    for turn in group_turns(spans):
        first, last = turn[0], turn[-1]
        header = f"**{_label(first, language, catalog)}** [{format_ts(first.start)}]"
        if show_rate:
            words = sum(s.span.word_count for s in turn)
            duration = last.end - first.start
            if duration > 0:
                header += f" _{format_rate_label(language, words / duration, catalog)}_"
        text = " ".join(s.text.strip() for s in turn)
        blocks.append(f"{header}\n{text}")
    return "\n\n".join(blocks)


def speaker_summary(
    spans: Sequence[LabeledSpan],
    language: str = "en",
    catalog: LabelCatalog = DEFAULT_CATALOG,
) -> str:
    """One-line summary, e.g. ``"2 speakers detected: Speaker 1, Speaker 2"``."""
    labels: dict[int, str] = {}
    for span in spans:
        labels.setdefault(span.speaker_id, _label(span, language, catalog))
    count = len(labels)
    if count == 0:
        return "No speakers detected"
    noun = "speaker" if count == 1 else "speakers"
    names = ", ".join(labels[i] for i in sorted(labels))
    return f"{count} {noun} detected: {names}"
