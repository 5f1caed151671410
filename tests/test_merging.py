from __future__ import annotations

from helpers import make_vector
from voicetrace.pipeline.clustering import ClusterResult
from voicetrace.pipeline.merging import ProfileMerger
from voicetrace.pipeline.profiles import SpeakerProfile
from voicetrace.pipeline.similarity import SegmentMetric
from voicetrace.pipeline.spans import LabeledSpan, TimedSpan


def _profile(speaker_id: int, pitch: float, **features) -> SpeakerProfile:
    profile = SpeakerProfile(speaker_id, SegmentMetric())
    profile.add_sample(make_vector(pitch=pitch, **features))
    return profile


def _labeled(ids: list[int]) -> list[LabeledSpan]:
    return [LabeledSpan(TimedSpan(f"span {i}", float(i), i + 1.0), sid, 1.0) for i, sid in enumerate(ids)]


def test_near_duplicates_merge_and_ids_are_renumbered() -> None:
    profiles = [
        _profile(1, 100.0),
        _profile(2, 102.0),
        _profile(3, 300.0, energy=3.0, rate=4.0, pause=0.1),
    ]

    result = ProfileMerger().merge(ClusterResult(_labeled([1, 3, 2]), profiles))

    assert [s.speaker_id for s in result.spans] == [1, 2, 1]
    assert [p.speaker_id for p in result.profiles] == [1, 2]
    assert result.profiles[0].sample_count == 2
    assert result.id_map == {1: 1, 2: 1, 3: 2}


def test_chains_collapse_onto_earliest_profile() -> None:
    # 1~2 and 2~3 are above the threshold, 1~3 on its own is not
    profiles = [_profile(1, 100.0), _profile(2, 150.0), _profile(3, 225.0)]
    assert profiles[0].similarity_to(profiles[2]) < 0.85

    result = ProfileMerger(0.85).merge(ClusterResult(_labeled([1, 2, 3]), profiles))

    assert [s.speaker_id for s in result.spans] == [1, 1, 1]
    assert len(result.profiles) == 1
    assert result.profiles[0].sample_count == 3


def test_ids_follow_first_appearance() -> None:
    profiles = [_profile(1, 100.0), _profile(2, 300.0)]
    result = ProfileMerger().merge(ClusterResult(_labeled([2, 1, 2]), profiles))
    assert [s.speaker_id for s in result.spans] == [1, 2, 1]


def test_distinct_profiles_are_untouched() -> None:
    profiles = [_profile(1, 100.0), _profile(2, 300.0)]
    result = ProfileMerger().merge(ClusterResult(_labeled([1, 2]), profiles))
    assert [p.sample_count for p in result.profiles] == [1, 1]
    assert result.id_map == {1: 1, 2: 2}
