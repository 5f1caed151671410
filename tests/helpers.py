"""Shared builders for synthetic vectors and signals."""

from __future__ import annotations

import numpy as np

from voicetrace.pipeline.features import AcousticFeatureVector


def make_vector(
    pitch: float = 100.0,
    energy: float = 1.0,
    rate: float = 1.0,
    pause: float = 0.5,
    cepstral: tuple[float, ...] = (0.0,) * 13,
) -> AcousticFeatureVector:
    return AcousticFeatureVector(
        pitch_hz=pitch,
        energy=energy,
        speaking_rate=rate,
        pause_ratio=pause,
        spectral_centroid=0.0,
        zero_crossing_rate=0.0,
        formants=(0.0, 0.0, 0.0),
        cepstral_coeffs=cepstral,
    )


def sine(freq: float, seconds: float, amplitude: float = 0.5, sr: int = 16000) -> np.ndarray:
    t = np.arange(int(seconds * sr)) / sr
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)
