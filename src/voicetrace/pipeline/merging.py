"""Post-pass merging of near-duplicate speaker profiles."""

import logging
from dataclasses import dataclass, field

from .clustering import ClusterResult
from .profiles import SpeakerProfile

logger = logging.getLogger(__name__)


class _DisjointSet:
    """Union-find over profile ids; the smallest id is always the root."""

    def __init__(self, ids):
        self.parent = {i: i for i in ids}

    def find(self, x: int) -> int:
        root = x
        while self.parent[root] != root:
            root = self.parent[root]
        while self.parent[x] != root:
            self.parent[x], x = root, self.parent[x]
        return root

    def union(self, a: int, b: int) -> None:
        ra, rb = self.find(a), self.find(b)
        if ra != rb:
            self.parent[max(ra, rb)] = min(ra, rb)


@dataclass
class MergeResult(ClusterResult):
    """Cluster result after merging; ``id_map`` maps original ids to final ids."""

    id_map: dict[int, int] = field(default_factory=dict)


class ProfileMerger:
    """Merge profiles whose centroids are more similar than ``threshold``.

    Later profiles fold into earlier ones. Similarities are computed once on
    the pre-merge centroids and resolved to a fixed point with union-find,
    so chains collapse onto the earliest profile. Surviving ids are then
    renumbered 1..M by first appearance in the span list.
    """

    DEFAULT_THRESHOLD = 0.85

    def __init__(self, threshold: float = DEFAULT_THRESHOLD):
        self.threshold = threshold

    def merge(self, result: ClusterResult) -> MergeResult:
        profiles = {p.speaker_id: p for p in result.profiles}
        groups = _DisjointSet(profiles)

        ordered = sorted(profiles)
        for i, first in enumerate(ordered):
            for second in ordered[i + 1 :]:
                similarity = profiles[first].similarity_to(profiles[second])
                if similarity > self.threshold:
                    logger.debug(
                        "Merging speaker %d into %d (similarity %.2f)", second, first, similarity
                    )
                    groups.union(first, second)

        survivors: dict[int, SpeakerProfile] = {}
        for speaker_id in ordered:
            root = groups.find(speaker_id)
            if root == speaker_id:
                survivors[root] = profiles[root]
            else:
                survivors[root].absorb(profiles[speaker_id])

        # Renumber by first appearance; profiles never referenced go last
        order: list[int] = []
        for labeled in result.spans:
            root = groups.find(labeled.speaker_id)
            if root not in order:
                order.append(root)
        order.extend(root for root in survivors if root not in order)
        renumber = {root: n for n, root in enumerate(order, start=1)}

        id_map = {speaker_id: renumber[groups.find(speaker_id)] for speaker_id in ordered}
        for labeled in result.spans:
            labeled.speaker_id = id_map[labeled.speaker_id]
        for root, profile in survivors.items():
            profile.speaker_id = renumber[root]

        merged = sorted(survivors.values(), key=lambda p: p.speaker_id)
        if len(merged) < len(profiles):
            logger.info("Merged %d profiles into %d speakers", len(profiles), len(merged))

        return MergeResult(
            spans=result.spans,
            profiles=merged,
            cancelled=result.cancelled,
            id_map=id_map,
        )
