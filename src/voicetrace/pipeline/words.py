"""Word-level speaker analysis driven by per-word audio windows."""

import logging
from dataclasses import dataclass

import numpy as np

from ..config import WORD_LEVEL, ClusterConfig
from .audio import AudioDecodeError, AudioSource
from .clustering import CancelFlag, ClusterResult, OnlineClusterer
from .features import AcousticFeatureVector, FeatureExtractor, map_in_order
from .merging import ProfileMerger
from .spans import TimedSpan, flatten_words

logger = logging.getLogger(__name__)


@dataclass
class WordFeatures:
    """Extracted word vectors plus how many audio windows were usable."""

    words: list[TimedSpan]
    vectors: list[AcousticFeatureVector]

    @property
    def usable(self) -> int:
        return sum(1 for v in self.vectors if not v.is_neutral)


class WordLevelAnalyzer:
    """Cluster individual words using features computed from their audio.

    Segments without word timings are split into evenly timed words. A
    window that cannot be read or is empty yields the neutral vector; the
    word is then attached to the active speaker instead of aborting the run.
    """

    def __init__(
        self,
        audio: AudioSource,
        extractor: FeatureExtractor | None = None,
        config: ClusterConfig = WORD_LEVEL,
        sample_rate: int = 16000,
        workers: int = 1,
        show_progress: bool = False,
    ):
        self.audio = audio
        self.extractor = extractor or FeatureExtractor()
        self.config = config
        self.sample_rate = sample_rate
        self.workers = workers
        self.show_progress = show_progress

    def read_window(self, word: TimedSpan) -> np.ndarray:
        """Audio for one word; empty on decode failure."""
        try:
            return self.audio.read(word.start, word.end, self.sample_rate)
        except AudioDecodeError as e:
            logger.warning("Audio window %.2f-%.2fs unreadable: %s", word.start, word.end, e)
            return np.empty(0, dtype=np.float32)

    def word_vector(self, word: TimedSpan) -> AcousticFeatureVector:
        samples = self.read_window(word)
        if samples.size == 0:
            logger.debug("Empty audio window for %r at %.2fs", word.text, word.start)
        return self.extractor.extract(word, samples, self.sample_rate)

    def extract_features(self, spans: list[TimedSpan]) -> WordFeatures:
        """Flatten spans to words and compute one vector per word."""
        words = sorted(flatten_words(spans), key=lambda w: w.start)
        vectors = map_in_order(
            self.word_vector,
            words,
            workers=self.workers,
            show_progress=self.show_progress,
            desc="  Word features",
            unit="word",
        )
        features = WordFeatures(words, vectors)
        logger.debug("Extracted %d word vectors (%d with usable audio)", len(words), features.usable)
        return features

    def cluster(self, features: WordFeatures, cancel: CancelFlag | None = None) -> ClusterResult:
        """Sequential clustering pass, followed by merging unless cancelled."""
        clusterer = OnlineClusterer(self.config)
        result = clusterer.run(zip(features.words, features.vectors), cancel)
        if result.cancelled:
            return result
        return ProfileMerger(self.config.merge_threshold).merge(result)

    def analyze(self, spans: list[TimedSpan], cancel: CancelFlag | None = None) -> ClusterResult:
        """Extract word features and cluster them."""
        return self.cluster(self.extract_features(spans), cancel)
