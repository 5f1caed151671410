"""VoiceTrace - Speaker diarization for timed transcripts."""

__version__ = "0.1.0"

from .pipeline import (
    Diarizer,
    DiarizationOutcome,
    FeatureExtractor,
    OnlineClusterer,
    ProfileMerger,
)

__all__ = [
    "__version__",
    "Diarizer",
    "DiarizationOutcome",
    "FeatureExtractor",
    "OnlineClusterer",
    "ProfileMerger",
]
