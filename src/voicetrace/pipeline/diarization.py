"""Speaker diarization: ordered strategy chain over the clustering pipeline."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from ..config import (
    STRATEGY_ENHANCED,
    STRATEGY_SEGMENT,
    STRATEGY_SINGLE,
    STRATEGY_WORD,
    DiarizationConfig,
)
from ..labels import DEFAULT_CATALOG, LabelCatalog, format_speaker_label
from .audio import AudioSource
from .clustering import CancelFlag, ClusterResult, OnlineClusterer
from .features import AcousticFeatureVector, FeatureExtractor, map_in_order
from .merging import ProfileMerger
from .profiles import SpeakerProfile
from .similarity import SegmentMetric
from .spans import LabeledSpan, TimedSpan, validate_span
from .words import WordLevelAnalyzer

logger = logging.getLogger(__name__)


class OutcomeStatus(str, Enum):
    """Result tag of one strategy."""

    OK = "ok"
    EMPTY = "empty"


@dataclass
class DiarizationOutcome:
    """Tagged result of a strategy: labeled spans on OK, a reason on EMPTY."""

    status: OutcomeStatus
    strategy: str
    spans: list[LabeledSpan] = field(default_factory=list)
    profiles: list[SpeakerProfile] = field(default_factory=list)
    cancelled: bool = False
    reason: str = ""

    @classmethod
    def empty(cls, strategy: str, reason: str) -> "DiarizationOutcome":
        return cls(OutcomeStatus.EMPTY, strategy, reason=reason)

    @classmethod
    def from_result(cls, strategy: str, result: ClusterResult) -> "DiarizationOutcome":
        if not result.spans and not result.cancelled:
            return cls.empty(strategy, "no spans were labeled")
        return cls(
            OutcomeStatus.OK,
            strategy,
            spans=result.spans,
            profiles=result.profiles,
            cancelled=result.cancelled,
        )

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.OK

    @property
    def num_speakers(self) -> int:
        return len({s.speaker_id for s in self.spans})


Strategy = Callable[[list[TimedSpan], CancelFlag | None], DiarizationOutcome]


class Diarizer:
    """Run the configured strategies in order until one labels the transcript.

    Default order: word-level (needs audio), enhanced segment-level,
    gated segment-level, then single speaker, which always succeeds on a
    non-empty transcript. Structurally invalid input raises
    ``MalformedInputError`` before any strategy runs.
    """

    def __init__(
        self,
        config: DiarizationConfig | None = None,
        audio: AudioSource | None = None,
        catalog: LabelCatalog = DEFAULT_CATALOG,
    ):
        self.config = config or DiarizationConfig()
        self.audio = audio
        self.catalog = catalog
        self.extractor = FeatureExtractor(self.config.features)
        self._strategies: dict[str, Strategy] = {
            STRATEGY_WORD: self._word_level,
            STRATEGY_ENHANCED: self._segment_level(STRATEGY_ENHANCED),
            STRATEGY_SEGMENT: self._segment_level(STRATEGY_SEGMENT),
            STRATEGY_SINGLE: self._single_speaker,
        }

    def diarize(
        self, spans: list[TimedSpan], cancel: CancelFlag | None = None
    ) -> DiarizationOutcome:
        """Label every non-empty span with a speaker.

        Raises:
            MalformedInputError: If any span is structurally invalid.
        """
        for span in spans:
            validate_span(span)
            for word in span.words:
                validate_span(word)

        ordered = sorted(spans, key=lambda s: s.start)
        if not any(s.text.strip() for s in ordered):
            logger.info("No segments to diarize")
            return DiarizationOutcome.empty("", "no segments")

        for name in self.config.strategies:
            outcome = self._strategies[name](ordered, cancel)
            if outcome.ok:
                self._assign_labels(outcome)
                logger.info(
                    "Strategy %r labeled %d spans with %d speaker(s)%s",
                    name,
                    len(outcome.spans),
                    outcome.num_speakers,
                    " (cancelled)" if outcome.cancelled else "",
                )
                return outcome
            logger.info("Strategy %r produced no result: %s", name, outcome.reason)

        return DiarizationOutcome.empty("", "no strategy produced a result")

    def _assign_labels(self, outcome: DiarizationOutcome) -> None:
        """Give each profile its localized label; ids are already 1..M by first appearance."""
        labels = {}
        for profile in outcome.profiles:
            profile.label = format_speaker_label(
                self.config.language, profile.speaker_id, self.catalog
            )
            labels[profile.speaker_id] = profile.label
        for labeled in outcome.spans:
            labeled.label = labels[labeled.speaker_id]

    # === Strategies ===

    def _segment_vector(self, span: TimedSpan) -> AcousticFeatureVector | None:
        if not span.text.strip():
            return None
        return self.extractor.extract(span)

    def _segment_level(self, name: str) -> Strategy:
        cluster_config = self.config.cluster_config(name)

        def run(spans: list[TimedSpan], cancel: CancelFlag | None) -> DiarizationOutcome:
            vectors = map_in_order(
                self._segment_vector,
                spans,
                workers=self.config.workers,
                show_progress=self.config.show_progress,
                desc="  Segment features",
            )
            result = OnlineClusterer(cluster_config).run(zip(spans, vectors), cancel)
            if not result.cancelled:
                result = ProfileMerger(cluster_config.merge_threshold).merge(result)
            return DiarizationOutcome.from_result(name, result)

        return run

    def _word_level(
        self, spans: list[TimedSpan], cancel: CancelFlag | None
    ) -> DiarizationOutcome:
        if self.audio is None:
            return DiarizationOutcome.empty(STRATEGY_WORD, "no audio available")

        analyzer = WordLevelAnalyzer(
            self.audio,
            extractor=self.extractor,
            config=self.config.word,
            sample_rate=self.config.sample_rate,
            workers=self.config.workers,
            show_progress=self.config.show_progress,
        )
        features = analyzer.extract_features(spans)
        if not features.words:
            return DiarizationOutcome.empty(STRATEGY_WORD, "no words in transcript")
        if features.usable == 0:
            return DiarizationOutcome.empty(STRATEGY_WORD, "no usable audio windows")

        return DiarizationOutcome.from_result(STRATEGY_WORD, analyzer.cluster(features, cancel))

    def _single_speaker(
        self, spans: list[TimedSpan], cancel: CancelFlag | None
    ) -> DiarizationOutcome:
        profile = SpeakerProfile(1, SegmentMetric())
        labeled = []
        for span in spans:
            if cancel is not None and cancel.is_set():
                return DiarizationOutcome(
                    OutcomeStatus.OK, STRATEGY_SINGLE, labeled, [profile], cancelled=True
                )
            if not span.text.strip():
                continue
            profile.add_sample(self.extractor.extract(span))
            labeled.append(LabeledSpan(span, 1, span.recognizer_probability))
        return DiarizationOutcome.from_result(STRATEGY_SINGLE, ClusterResult(labeled, [profile]))
