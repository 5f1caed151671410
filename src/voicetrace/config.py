"""Configuration, thresholds and paths management."""

import os
import sys
from dataclasses import dataclass, field, replace
from pathlib import Path


def get_data_dir() -> Path:
    """Get platform-specific data directory for VoiceTrace.

    Windows: %LOCALAPPDATA%/voicetrace
    macOS: ~/Library/Application Support/voicetrace
    Linux: ~/.local/share/voicetrace (XDG_DATA_HOME)
    """
    if sys.platform == "win32":
        base = Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local"))
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))

    return base / "voicetrace"


def get_cache_dir() -> Path:
    """Get platform-specific cache directory for VoiceTrace.

    Windows: %LOCALAPPDATA%/voicetrace/cache
    macOS: ~/Library/Caches/voicetrace
    Linux: ~/.cache/voicetrace (XDG_CACHE_HOME)
    """
    if sys.platform == "win32":
        base = Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local"))
        return base / "voicetrace" / "cache"
    elif sys.platform == "darwin":
        return Path.home() / "Library" / "Caches" / "voicetrace"
    else:
        base = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
        return base / "voicetrace"


# Directory paths
DATA_DIR = get_data_dir()
CACHE_DIR = get_cache_dir()
LOGS_DIR = DATA_DIR / "logs"


def ensure_dirs() -> None:
    """Create all necessary directories."""
    for d in [DATA_DIR, CACHE_DIR, LOGS_DIR]:
        d.mkdir(parents=True, exist_ok=True)


# === Diarization thresholds ===

SAMPLE_RATE = 16000
DEFAULT_LANGUAGE = "en"

STRATEGY_WORD = "word"
STRATEGY_ENHANCED = "enhanced"
STRATEGY_SEGMENT = "segment"
STRATEGY_SINGLE = "single"
STRATEGIES = (STRATEGY_WORD, STRATEGY_ENHANCED, STRATEGY_SEGMENT, STRATEGY_SINGLE)

MODE_GATED = "gated"
MODE_NEAREST = "nearest"

METRIC_SEGMENT = "segment"
METRIC_WORD = "word"


@dataclass(frozen=True)
class FeatureConfig:
    """Constants for acoustic feature extraction."""

    num_cepstral: int = 13
    min_duration_sec: float = 0.1  # Floor for rate/energy denominators
    avg_word_duration_sec: float = 0.15
    pitch_proxy_base: float = 100.0  # Hz at log-probability -1
    pitch_proxy_scale: float = 50.0  # Hz per unit of log-probability
    min_pitch_hz: float = 50.0
    max_pitch_hz: float = 400.0
    # Formant bands (low, high) in Hz: F1, F2, F3
    formant_bands: tuple[tuple[float, float], ...] = (
        (600.0, 900.0),
        (1200.0, 1800.0),
        (2100.0, 2900.0),
    )

    def __post_init__(self) -> None:
        if self.num_cepstral < 1:
            raise ValueError("num_cepstral must be >= 1")
        if self.min_duration_sec <= 0.0:
            raise ValueError("min_duration_sec must be > 0")
        if not (0.0 < self.min_pitch_hz < self.max_pitch_hz):
            raise ValueError("pitch range must satisfy 0 < min_pitch_hz < max_pitch_hz")
        if len(self.formant_bands) != 3:
            raise ValueError("formant_bands must hold exactly three (low, high) pairs")


@dataclass(frozen=True)
class ClusterConfig:
    """Clustering behaviour for one granularity.

    ``gated`` mode only considers a speaker change after a pause longer than
    ``min_pause_sec`` combined with a drop in similarity to the rolling
    profile; ``nearest`` mode always picks the most similar profile.
    Both modes compare similarities (1.0 = identical) against thresholds.
    """

    name: str
    mode: str = MODE_NEAREST
    metric: str = METRIC_SEGMENT
    match_threshold: float = 0.7
    merge_threshold: float = 0.85
    min_words: int = 1
    min_pause_sec: float = 0.3
    rolling_window: int = 3

    def __post_init__(self) -> None:
        if self.mode not in (MODE_GATED, MODE_NEAREST):
            raise ValueError(f"mode must be one of {[MODE_GATED, MODE_NEAREST]}")
        if self.metric not in (METRIC_SEGMENT, METRIC_WORD):
            raise ValueError(f"metric must be one of {[METRIC_SEGMENT, METRIC_WORD]}")
        if not (0.0 <= self.match_threshold <= 1.0):
            raise ValueError("match_threshold must be between 0.0 and 1.0")
        if not (0.0 <= self.merge_threshold <= 1.0):
            raise ValueError("merge_threshold must be between 0.0 and 1.0")
        if self.min_words < 0:
            raise ValueError("min_words must be >= 0")
        if self.min_pause_sec < 0.0:
            raise ValueError("min_pause_sec must be >= 0")
        if self.rolling_window < 1:
            raise ValueError("rolling_window must be >= 1")


# Divergence 0.25 on the segment metric is similarity 0.75.
SEGMENT_BASIC = ClusterConfig(
    name=STRATEGY_SEGMENT,
    mode=MODE_GATED,
    metric=METRIC_SEGMENT,
    match_threshold=0.75,
    min_words=2,
    min_pause_sec=0.3,
)

SEGMENT_ENHANCED = ClusterConfig(
    name=STRATEGY_ENHANCED,
    mode=MODE_NEAREST,
    metric=METRIC_SEGMENT,
    match_threshold=0.7,
    min_words=1,
)

WORD_LEVEL = ClusterConfig(
    name=STRATEGY_WORD,
    mode=MODE_NEAREST,
    metric=METRIC_WORD,
    match_threshold=0.7,
    min_words=1,
)


@dataclass(frozen=True)
class DiarizationConfig:
    """Complete, immutable configuration for one diarization run."""

    language: str = DEFAULT_LANGUAGE
    strategies: tuple[str, ...] = STRATEGIES
    workers: int = 1
    sample_rate: int = SAMPLE_RATE
    show_progress: bool = False
    features: FeatureConfig = field(default_factory=FeatureConfig)
    segment: ClusterConfig = SEGMENT_BASIC
    enhanced: ClusterConfig = SEGMENT_ENHANCED
    word: ClusterConfig = WORD_LEVEL

    def __post_init__(self) -> None:
        strategies = tuple(s.lower() for s in self.strategies)
        unknown = [s for s in strategies if s not in STRATEGIES]
        if unknown:
            raise ValueError(f"Unknown strategies {unknown}; expected any of {list(STRATEGIES)}")
        if not strategies:
            raise ValueError("At least one strategy is required")
        object.__setattr__(self, "strategies", strategies)
        if self.workers < 1:
            raise ValueError("workers must be >= 1")
        if self.sample_rate <= 0:
            raise ValueError("sample_rate must be > 0")

    def cluster_config(self, strategy: str) -> ClusterConfig:
        """Return the clustering preset for a strategy name."""
        return {
            STRATEGY_SEGMENT: self.segment,
            STRATEGY_ENHANCED: self.enhanced,
            STRATEGY_WORD: self.word,
        }[strategy]

    def with_overrides(self, **overrides) -> "DiarizationConfig":
        """Return a copy with the given fields replaced; None values are ignored."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
