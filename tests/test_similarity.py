from __future__ import annotations

import pytest

from helpers import make_vector
from voicetrace.pipeline.similarity import SegmentMetric, WordMetric, build_metric


@pytest.mark.parametrize("metric", [SegmentMetric(), WordMetric()])
def test_identical_vectors_are_fully_similar(metric) -> None:
    vector = make_vector(pitch=140.0, energy=3.0, rate=2.0, pause=0.2)
    assert metric.distance(vector, vector) == pytest.approx(0.0)
    assert metric.similarity(vector, vector) == pytest.approx(1.0)


@pytest.mark.parametrize("metric", [SegmentMetric(), WordMetric()])
def test_similarity_is_symmetric_and_bounded(metric) -> None:
    a = make_vector(pitch=100.0, energy=1.0, rate=1.0, pause=0.5, cepstral=(1.0,) * 13)
    b = make_vector(pitch=300.0, energy=3.0, rate=4.0, pause=0.1, cepstral=(4.0,) * 13)
    assert metric.similarity(a, b) == pytest.approx(metric.similarity(b, a))
    assert 0.0 <= metric.similarity(a, b) < 1.0


def test_segment_metric_weights() -> None:
    a = make_vector(pitch=100.0, energy=1.0, rate=1.0, pause=0.5)
    b = make_vector(pitch=300.0, energy=3.0, rate=4.0, pause=0.1)
    # 0.35 * 2/3 + 0.15 * 2/3 + 0.25 * 3/4 + 0.25 * 0.8 = 173/240
    assert SegmentMetric().distance(a, b) == pytest.approx(173 / 240)
    assert SegmentMetric().similarity(a, b) == pytest.approx(67 / 240)


def test_segment_metric_handles_zero_features() -> None:
    zero = make_vector(pitch=0.0, energy=0.0, rate=0.0, pause=0.0)
    assert SegmentMetric().similarity(zero, zero) == pytest.approx(1.0)


def test_word_metric_distance_five_is_threshold() -> None:
    metric = WordMetric()
    assert 1.0 - metric.normalize(5.0) == pytest.approx(0.7)
    a = make_vector(pitch=100.0)
    b = make_vector(pitch=200.0)
    # Only the pitch term differs: sqrt(5 * 1^2)
    assert metric.distance(a, b) == pytest.approx(5**0.5)


def test_word_metric_is_monotonic_in_cepstral_gap() -> None:
    metric = WordMetric()
    base = make_vector(cepstral=(5.0,) * 13)
    near = make_vector(cepstral=(5.5,) * 13)
    far = make_vector(cepstral=(8.0,) * 13)
    assert metric.similarity(base, near) > metric.similarity(base, far)


def test_build_metric() -> None:
    assert isinstance(build_metric("segment"), SegmentMetric)
    assert isinstance(build_metric("word"), WordMetric)
    with pytest.raises(ValueError):
        build_metric("cosine")
