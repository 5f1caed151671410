"""Distance and similarity between acoustic feature vectors."""

import numpy as np

from ..config import METRIC_SEGMENT, METRIC_WORD
from .features import AcousticFeatureVector

EPSILON = 1e-9


def _relative_diff(a: float, b: float) -> float:
    """|a - b| scaled by the larger magnitude; 0 when both are 0."""
    return abs(a - b) / max(EPSILON, max(abs(a), abs(b)))


class SimilarityMetric:
    """Symmetric, non-negative distance with a similarity in [0, 1].

    ``similarity = 1 - normalize(distance)``, so it decreases monotonically
    as vectors drift apart.
    """

    name = "base"

    def distance(self, a: AcousticFeatureVector, b: AcousticFeatureVector) -> float:
        raise NotImplementedError

    def normalize(self, distance: float) -> float:
        raise NotImplementedError

    def similarity(self, a: AcousticFeatureVector, b: AcousticFeatureVector) -> float:
        return 1.0 - self.normalize(self.distance(a, b))


class SegmentMetric(SimilarityMetric):
    """Weighted relative differences of pitch, energy, rate and pauses.

    Each term lies in [0, 1] and the weights sum to 1, so the distance is
    already normalized.
    """

    name = METRIC_SEGMENT

    WEIGHTS = {
        "pitch_hz": 0.35,
        "energy": 0.15,
        "speaking_rate": 0.25,
        "pause_ratio": 0.25,
    }

    def __init__(self, weights: dict[str, float] | None = None):
        self.weights = dict(weights or self.WEIGHTS)

    def distance(self, a: AcousticFeatureVector, b: AcousticFeatureVector) -> float:
        return float(
            sum(
                weight * _relative_diff(getattr(a, name), getattr(b, name))
                for name, weight in self.weights.items()
            )
        )

    def normalize(self, distance: float) -> float:
        return min(1.0, max(0.0, distance))


class WordMetric(SimilarityMetric):
    """Euclidean distance dominated by the cepstral coefficients.

    Pitch, energy and formants add smaller weighted terms. The distance is
    unbounded; ``normalize`` maps it onto [0, 1) as ``d / (d + scale)``.
    The default scale puts a distance of 5.0 at similarity 0.7.
    """

    name = METRIC_WORD

    PITCH_WEIGHT = 5.0
    PITCH_UNIT_HZ = 100.0
    ENERGY_WEIGHT = 3.0
    FORMANT_WEIGHT = 2.0
    FORMANT_UNIT_HZ = 1000.0
    DISTANCE_SCALE = 35.0 / 3.0

    def __init__(self, scale: float = DISTANCE_SCALE):
        if scale <= 0:
            raise ValueError("scale must be > 0")
        self.scale = scale

    def distance(self, a: AcousticFeatureVector, b: AcousticFeatureVector) -> float:
        cep_a = np.asarray(a.cepstral_coeffs, dtype=np.float64)
        cep_b = np.asarray(b.cepstral_coeffs, dtype=np.float64)
        k = min(cep_a.size, cep_b.size)
        total = float(np.sum((cep_a[:k] - cep_b[:k]) ** 2))

        total += self.PITCH_WEIGHT * ((a.pitch_hz - b.pitch_hz) / self.PITCH_UNIT_HZ) ** 2
        total += self.ENERGY_WEIGHT * _relative_diff(a.energy, b.energy) ** 2

        form_a = np.asarray(a.formants, dtype=np.float64)
        form_b = np.asarray(b.formants, dtype=np.float64)
        total += self.FORMANT_WEIGHT * float(np.sum(((form_a - form_b) / self.FORMANT_UNIT_HZ) ** 2))

        return float(np.sqrt(total))

    def normalize(self, distance: float) -> float:
        distance = max(0.0, distance)
        return distance / (distance + self.scale)


def build_metric(name: str) -> SimilarityMetric:
    """Metric instance for a ``ClusterConfig.metric`` name."""
    if name == METRIC_SEGMENT:
        return SegmentMetric()
    if name == METRIC_WORD:
        return WordMetric()
    raise ValueError(f"Unknown metric: {name}")
