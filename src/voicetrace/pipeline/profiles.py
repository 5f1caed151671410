"""Speaker profiles: running centroids of assigned feature vectors."""

import numpy as np

from .features import AcousticFeatureVector
from .similarity import SimilarityMetric


class SpeakerProfile:
    """Aggregate voice fingerprint for one speaker id within a run.

    The centroid is kept as a running sum so each update is O(1); it always
    equals the component-wise mean of ``history``.
    """

    def __init__(self, speaker_id: int, metric: SimilarityMetric, label: str = ""):
        self.speaker_id = speaker_id
        self.label = label
        self.metric = metric
        self._history: list[AcousticFeatureVector] = []
        self._sum: np.ndarray | None = None
        self._centroid: AcousticFeatureVector | None = None

    def __repr__(self) -> str:
        return f"SpeakerProfile(id={self.speaker_id}, samples={self.sample_count})"

    @property
    def sample_count(self) -> int:
        return len(self._history)

    @property
    def history(self) -> tuple[AcousticFeatureVector, ...]:
        return tuple(self._history)

    @property
    def centroid(self) -> AcousticFeatureVector | None:
        """Mean feature vector, or None before the first sample."""
        return self._centroid

    def add_sample(self, vector: AcousticFeatureVector) -> None:
        """Append a vector and update the centroid."""
        values = vector.as_array()
        if self._sum is None:
            self._sum = values.copy()
        elif values.shape != self._sum.shape:
            raise ValueError(
                f"Feature shape {values.shape} does not match profile shape {self._sum.shape}"
            )
        else:
            self._sum += values
        self._history.append(vector)
        self._centroid = AcousticFeatureVector.from_array(self._sum / len(self._history))

    def absorb(self, other: "SpeakerProfile") -> None:
        """Fold another profile's samples into this one."""
        for vector in other.history:
            self.add_sample(vector)

    def recompute_centroid(self) -> AcousticFeatureVector | None:
        """From-scratch mean of the history, independent of the running sum."""
        if not self._history:
            return None
        stacked = np.stack([v.as_array() for v in self._history])
        return AcousticFeatureVector.from_array(stacked.mean(axis=0))

    def match_probability(self, vector: AcousticFeatureVector) -> float:
        """Similarity between the centroid and ``vector``; 0 without samples."""
        if self._centroid is None:
            return 0.0
        return self.metric.similarity(self._centroid, vector)

    def similarity_to(self, other: "SpeakerProfile") -> float:
        """Centroid-to-centroid similarity; 0 if either profile is empty."""
        if self._centroid is None or other.centroid is None:
            return 0.0
        return self.metric.similarity(self._centroid, other.centroid)
