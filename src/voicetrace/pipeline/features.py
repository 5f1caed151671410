"""Acoustic feature extraction from timed spans and raw audio windows.

Features are simple proxies. Without audio, timing and
recognizer confidence stand in for voice characteristics. With audio,
time-domain statistics replace the spectral analysis a real system would
run: the formants are placed inside typical bands rather than measured with
linear prediction, and the cepstral coefficients are band-averaged log
magnitudes rather than MFCCs.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Sequence, TypeVar

import numpy as np
from tqdm import tqdm

from ..config import FeatureConfig
from .spans import MalformedInputError, TimedSpan

logger = logging.getLogger(__name__)

EPSILON = 1e-9
INT16_SCALE = 32768.0

T = TypeVar("T")
R = TypeVar("R")


def map_in_order(
    fn: Callable[[T], R],
    items: Sequence[T],
    workers: int = 1,
    show_progress: bool = False,
    desc: str = "  Features",
    unit: str = "span",
) -> list[R]:
    """Apply ``fn`` to every item, optionally on a thread pool, keeping input order."""
    pbar = tqdm(total=len(items), desc=desc, unit=unit, leave=False, disable=not show_progress)
    try:
        if workers <= 1 or len(items) < 2:
            results = []
            for item in items:
                results.append(fn(item))
                pbar.update(1)
            return results

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = []
            for result in pool.map(fn, items):
                results.append(result)
                pbar.update(1)
            return results
    finally:
        pbar.close()


@dataclass(frozen=True)
class AcousticFeatureVector:
    """Fixed-shape acoustic fingerprint of one span."""

    pitch_hz: float
    energy: float
    speaking_rate: float
    pause_ratio: float
    spectral_centroid: float
    zero_crossing_rate: float
    formants: tuple[float, float, float]
    cepstral_coeffs: tuple[float, ...]

    SCALAR_FIELDS = (
        "pitch_hz",
        "energy",
        "speaking_rate",
        "pause_ratio",
        "spectral_centroid",
        "zero_crossing_rate",
    )

    @classmethod
    def zeros(cls, num_cepstral: int = 13) -> "AcousticFeatureVector":
        """Neutral vector used for silence and unreadable audio."""
        return cls(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, (0.0, 0.0, 0.0), (0.0,) * num_cepstral)

    @classmethod
    def from_array(cls, values: np.ndarray) -> "AcousticFeatureVector":
        """Inverse of :meth:`as_array`."""
        values = np.asarray(values, dtype=np.float64)
        if values.ndim != 1 or values.size < 10:
            raise ValueError(f"Expected a flat array of at least 10 values, got shape {values.shape}")
        scalars = [float(v) for v in values[:6]]
        formants = tuple(float(v) for v in values[6:9])
        cepstral = tuple(float(v) for v in values[9:])
        return cls(*scalars, formants, cepstral)

    def as_array(self) -> np.ndarray:
        """Flatten to ``[scalars..., formants..., cepstral...]`` (float64)."""
        return np.array(
            [getattr(self, name) for name in self.SCALAR_FIELDS]
            + list(self.formants)
            + list(self.cepstral_coeffs),
            dtype=np.float64,
        )

    @property
    def is_neutral(self) -> bool:
        return not np.any(self.as_array())


class FeatureExtractor:
    """Turn a span, plus optional raw samples, into an AcousticFeatureVector."""

    def __init__(self, config: FeatureConfig | None = None):
        self.config = config or FeatureConfig()

    def extract(
        self,
        span: TimedSpan,
        samples: np.ndarray | None = None,
        sample_rate: int = 16000,
    ) -> AcousticFeatureVector:
        """Extract features for one span.

        Args:
            span: Span with non-empty text and ``start <= end``.
            samples: Mono PCM window for the span (int16 or float in [-1, 1]).
                ``None`` selects the text/timing proxies; an empty or
                all-zero array yields the neutral vector.
            sample_rate: Sample rate of ``samples``.

        Raises:
            MalformedInputError: If the span has no text or ends before it starts.
        """
        if not span.text.strip():
            raise MalformedInputError("Cannot extract features from an empty span")
        if span.end < span.start:
            raise MalformedInputError(
                f"Span {span.text!r} ends before it starts ({span.start:.2f} > {span.end:.2f})"
            )

        timing = self._timing_features(span)
        if samples is None:
            return self._segment_vector(timing)

        audio = self._normalize(samples)
        if not np.any(audio):
            return AcousticFeatureVector.zeros(self.config.num_cepstral)
        return self._audio_vector(audio, sample_rate, timing)

    # === Text / timing proxies ===

    def _timing_features(self, span: TimedSpan) -> dict[str, float]:
        cfg = self.config
        duration = span.duration
        word_count = span.word_count
        floor = max(cfg.min_duration_sec, duration)

        speaking_rate = word_count / floor
        energy = len(span.text.strip()) / floor
        if duration > 0:
            pause_ratio = max(0.0, (duration - word_count * cfg.avg_word_duration_sec) / duration)
        else:
            pause_ratio = 0.0

        pitch = cfg.pitch_proxy_base + (span.recognizer_log_prob + 1.0) * cfg.pitch_proxy_scale
        pitch = min(cfg.max_pitch_hz, max(cfg.min_pitch_hz, pitch))

        return {
            "pitch_hz": pitch,
            "energy": energy,
            "speaking_rate": speaking_rate,
            "pause_ratio": pause_ratio,
        }

    def _segment_vector(self, timing: dict[str, float]) -> AcousticFeatureVector:
        return AcousticFeatureVector(
            pitch_hz=timing["pitch_hz"],
            energy=timing["energy"],
            speaking_rate=timing["speaking_rate"],
            pause_ratio=timing["pause_ratio"],
            spectral_centroid=timing["pitch_hz"] * (1.0 + timing["speaking_rate"] / 10.0),
            zero_crossing_rate=0.0,
            formants=(0.0, 0.0, 0.0),
            cepstral_coeffs=(0.0,) * self.config.num_cepstral,
        )

    # === Audio features ===

    @staticmethod
    def _normalize(samples: np.ndarray) -> np.ndarray:
        """Convert to float64 in [-1, 1], replacing non-finite values."""
        audio = np.asarray(samples)
        if audio.ndim > 1:
            # Channels-first, as torchaudio returns it
            audio = audio.mean(axis=0)
        if np.issubdtype(audio.dtype, np.integer):
            audio = audio.astype(np.float64) / INT16_SCALE
        else:
            audio = audio.astype(np.float64)
        return np.nan_to_num(audio.ravel(), nan=0.0, posinf=0.0, neginf=0.0)

    def _audio_vector(
        self, audio: np.ndarray, sample_rate: int, timing: dict[str, float]
    ) -> AcousticFeatureVector:
        energy = float(np.sqrt(np.mean(audio**2)))
        zcr = self.zero_crossing_rate(audio)
        pitch = self.estimate_pitch(audio, sample_rate)
        centroid = self.spectral_centroid(audio, sample_rate)

        return AcousticFeatureVector(
            pitch_hz=pitch,
            energy=energy,
            speaking_rate=timing["speaking_rate"],
            pause_ratio=timing["pause_ratio"],
            spectral_centroid=centroid,
            zero_crossing_rate=zcr,
            formants=self.estimate_formants(zcr, centroid, pitch, sample_rate),
            cepstral_coeffs=self.band_log_magnitudes(audio),
        )

    @staticmethod
    def zero_crossing_rate(audio: np.ndarray) -> float:
        """Sign changes per sample."""
        if audio.size < 2:
            return 0.0
        signs = audio >= 0
        return float(np.count_nonzero(signs[1:] != signs[:-1])) / audio.size

    def estimate_pitch(self, audio: np.ndarray, sample_rate: int) -> float:
        """Autocorrelation peak restricted to the human voice period range.

        Returns 0.0 when the window is too short or has no positive correlation.
        """
        n = audio.size
        min_period = max(1, int(sample_rate / self.config.max_pitch_hz))
        max_period = min(int(sample_rate / self.config.min_pitch_hz), n // 2)
        if max_period <= min_period:
            return 0.0

        # Linear (not circular) autocorrelation via zero-padded FFT
        size = 1 << (2 * n - 1).bit_length()
        spectrum = np.fft.rfft(audio, size)
        autocorr = np.fft.irfft(spectrum * np.conj(spectrum), size)[:n]

        lags = autocorr[min_period:max_period]
        best = int(np.argmax(lags))
        if lags[best] <= EPSILON:
            return 0.0
        return float(sample_rate) / (min_period + best)

    @staticmethod
    def spectral_centroid(audio: np.ndarray, sample_rate: int) -> float:
        """Amplitude-weighted mean over the sample-index frequency axis.

        A coarse stand-in for the FFT centroid: index ``i`` maps to
        ``i * sr / (2n)``.
        """
        magnitude = np.abs(audio)
        total = magnitude.sum()
        if total <= EPSILON:
            return 0.0
        freqs = np.arange(audio.size) * sample_rate / (2.0 * audio.size)
        return float((freqs * magnitude).sum() / total)

    def estimate_formants(
        self, zcr: float, centroid: float, pitch: float, sample_rate: int
    ) -> tuple[float, float, float]:
        """Place F1/F2/F3 inside typical speech bands.

        F1 follows the zero-crossing rate, F2 the spectral centroid relative
        to Nyquist and F3 the pitch within the voice range.
        """
        cfg = self.config
        nyquist = sample_rate / 2.0
        positions = (
            min(1.0, zcr * 4.0),
            min(1.0, centroid / nyquist) if nyquist > 0 else 0.0,
            min(1.0, max(0.0, (pitch - cfg.min_pitch_hz) / (cfg.max_pitch_hz - cfg.min_pitch_hz))),
        )
        return tuple(
            low + (high - low) * pos for (low, high), pos in zip(cfg.formant_bands, positions)
        )

    def band_log_magnitudes(self, audio: np.ndarray) -> tuple[float, ...]:
        """K log-magnitudes averaged over contiguous sample chunks (int16 scale)."""
        chunks = np.array_split(np.abs(audio), self.config.num_cepstral)
        return tuple(
            float(np.log1p(chunk.mean() * INT16_SCALE)) if chunk.size else 0.0 for chunk in chunks
        )
