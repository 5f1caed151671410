"""Pipeline modules for transcript diarization."""

from . import audio
from .features import AcousticFeatureVector, FeatureExtractor
from .similarity import SegmentMetric, WordMetric
from .profiles import SpeakerProfile
from .clustering import OnlineClusterer
from .merging import ProfileMerger
from .words import WordLevelAnalyzer
from .diarization import Diarizer, DiarizationOutcome

__all__ = [
    "audio",
    "AcousticFeatureVector",
    "FeatureExtractor",
    "SegmentMetric",
    "WordMetric",
    "SpeakerProfile",
    "OnlineClusterer",
    "ProfileMerger",
    "WordLevelAnalyzer",
    "Diarizer",
    "DiarizationOutcome",
]
