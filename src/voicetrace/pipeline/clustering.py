"""Online speaker clustering over time-ordered spans."""

import logging
import math
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, Protocol

import numpy as np

from ..config import MODE_GATED, ClusterConfig
from .features import AcousticFeatureVector
from .profiles import SpeakerProfile
from .similarity import SimilarityMetric, build_metric
from .spans import LabeledSpan, MalformedInputError, TimedSpan

logger = logging.getLogger(__name__)


class CancelFlag(Protocol):
    """Cooperative cancellation flag, e.g. ``threading.Event``."""

    def is_set(self) -> bool: ...


@dataclass
class ClusterResult:
    """Labeled spans with the profiles they reference."""

    spans: list[LabeledSpan] = field(default_factory=list)
    profiles: list[SpeakerProfile] = field(default_factory=list)
    cancelled: bool = False

    @property
    def num_speakers(self) -> int:
        return len({s.speaker_id for s in self.spans})


class OnlineClusterer:
    """Assign each incoming span to an existing or new speaker profile.

    Spans must arrive in non-decreasing start-time order. Spans with empty
    text are skipped. Spans below ``min_words``, and spans whose feature
    vector is neutral (silent or unreadable audio), are attached to the
    active speaker without touching any profile statistics.
    """

    def __init__(self, config: ClusterConfig, metric: SimilarityMetric | None = None):
        self.config = config
        self.metric = metric or build_metric(config.metric)
        self.reset()

    def reset(self) -> None:
        """Drop all state and start a new run."""
        self._profiles: dict[int, SpeakerProfile] = {}
        self._labeled: list[LabeledSpan] = []
        self._active: SpeakerProfile | None = None
        self._recent: deque[AcousticFeatureVector] = deque(maxlen=self.config.rolling_window)
        self._last_start = -math.inf
        self._last_end: float | None = None

    @property
    def profiles(self) -> list[SpeakerProfile]:
        return list(self._profiles.values())

    @property
    def labeled(self) -> list[LabeledSpan]:
        return list(self._labeled)

    def push(self, span: TimedSpan, vector: AcousticFeatureVector | None) -> LabeledSpan | None:
        """Process one span; returns its LabeledSpan, or None if it was skipped.

        Raises:
            MalformedInputError: If the span ends before it starts or arrives
                out of start-time order.
        """
        if span.end < span.start:
            raise MalformedInputError(
                f"Span {span.text!r} ends before it starts ({span.start:.2f} > {span.end:.2f})"
            )
        if span.start < self._last_start:
            raise MalformedInputError(
                f"Span at {span.start:.2f}s arrived after a span starting at {self._last_start:.2f}s"
            )
        self._last_start = span.start

        if not span.text.strip():
            return None

        if vector is None or vector.is_neutral or span.word_count < self.config.min_words:
            labeled = self._attach(span)
        else:
            labeled = self._assign(span, vector)
            self._last_end = span.end

        self._labeled.append(labeled)
        return labeled

    def run(
        self,
        items: Iterable[tuple[TimedSpan, AcousticFeatureVector | None]],
        cancel: CancelFlag | None = None,
    ) -> ClusterResult:
        """Cluster a sequence of (span, vector) pairs.

        ``cancel`` is checked before each span. Once it is set, processing
        stops and the result holds exactly the spans labeled so far.
        """
        for span, vector in items:
            if cancel is not None and cancel.is_set():
                logger.info("Clustering cancelled after %d labeled spans", len(self._labeled))
                return ClusterResult(self.labeled, self.profiles, cancelled=True)
            self.push(span, vector)
        return self.finish()

    def finish(self) -> ClusterResult:
        logger.debug(
            "Clustering (%s) complete: %d spans, %d profiles",
            self.config.name,
            len(self._labeled),
            len(self._profiles),
        )
        return ClusterResult(self.labeled, self.profiles)

    # === Assignment ===

    def _new_profile(self) -> SpeakerProfile:
        profile = SpeakerProfile(len(self._profiles) + 1, self.metric)
        self._profiles[profile.speaker_id] = profile
        return profile

    def _attach(self, span: TimedSpan) -> LabeledSpan:
        if self._active is None:
            # Placeholder adopted by the first span that carries features
            self._active = self._new_profile()
        return LabeledSpan(span, self._active.speaker_id, span.recognizer_probability)

    def _assign(self, span: TimedSpan, vector: AcousticFeatureVector) -> LabeledSpan:
        active = self._active
        confidence = span.recognizer_probability

        if active is not None and active.sample_count == 0:
            profile = active
        elif active is None:
            profile = self._new_profile()
            logger.debug("Initial speaker %d established at %.2fs", profile.speaker_id, span.start)
        elif self.config.mode == MODE_GATED:
            profile, score = self._gated_match(span, vector, active)
            if score is not None:
                confidence = score
        else:
            profile, score = self._nearest_match(span, vector)
            if score is not None:
                confidence = score

        profile.add_sample(vector)
        if profile is not active:
            self._recent.clear()
        self._recent.append(vector)
        self._active = profile

        return LabeledSpan(span, profile.speaker_id, min(1.0, max(0.0, confidence)))

    def _best_match(
        self, vector: AcousticFeatureVector
    ) -> tuple[SpeakerProfile | None, float]:
        best, best_score = None, -1.0
        for profile in self._profiles.values():
            if profile.sample_count == 0:
                continue
            score = profile.match_probability(vector)
            if score > best_score:
                best, best_score = profile, score
        return best, best_score

    def _nearest_match(
        self, span: TimedSpan, vector: AcousticFeatureVector
    ) -> tuple[SpeakerProfile, float | None]:
        best, score = self._best_match(vector)
        if best is not None and score > self.config.match_threshold:
            return best, score

        profile = self._new_profile()
        logger.debug(
            "New speaker %d at %.2fs (best similarity %.2f)", profile.speaker_id, span.start, score
        )
        return profile, None

    def _gated_match(
        self, span: TimedSpan, vector: AcousticFeatureVector, active: SpeakerProfile
    ) -> tuple[SpeakerProfile, float | None]:
        rolling = AcousticFeatureVector.from_array(
            np.mean([v.as_array() for v in self._recent], axis=0)
        )
        current = self.metric.similarity(rolling, vector)
        gap = span.start - (self._last_end if self._last_end is not None else span.start)

        if gap <= self.config.min_pause_sec or current >= self.config.match_threshold:
            return active, active.match_probability(vector)

        best, score = self._best_match(vector)
        if best is not None and score >= self.config.match_threshold:
            if best is not active:
                logger.debug("Returning speaker %d at %.2fs", best.speaker_id, span.start)
            return best, score

        profile = self._new_profile()
        logger.debug(
            "New speaker %d at %.2fs (similarity to current %.2f, pause %.2fs)",
            profile.speaker_id,
            span.start,
            current,
            gap,
        )
        return profile, None
