from __future__ import annotations

import numpy as np
import pytest

from helpers import sine
from voicetrace.pipeline.spans import TimedSpan


@pytest.fixture
def alternating_spans() -> list[TimedSpan]:
    """Four 5s segments alternating a slow and a fast talker, 1s apart."""
    slow = "one two three four five"
    fast = " ".join(["word"] * 20)
    spans = []
    for i in range(4):
        start = i * 6.0
        spans.append(TimedSpan(slow if i % 2 == 0 else fast, start, start + 5.0))
    return spans


@pytest.fixture
def two_voice_audio() -> np.ndarray:
    """3s recording: quiet 120 Hz voice, loud 250 Hz voice, quiet voice again."""
    return np.concatenate([sine(120, 1.0, 0.05), sine(250, 1.0, 0.8), sine(120, 1.0, 0.05)])
