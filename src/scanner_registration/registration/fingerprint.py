"""
Relative Fingerprints

The fingerprint of an anchor point within a point set is the set of vectors
from the anchor to every other point. Two copies of the same points seen from
different origins (but in the same orientation) share fingerprint vectors for
corresponding anchors, which makes overlap matching translation invariant.

FingerprintIndex keeps the fingerprint of every point of a growing map and
updates it incrementally: when points are added, only the new anchors are
fingerprinted in full, and existing anchors gain the vectors to the new points.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, List, Literal, Set

from ..geometry.vectors import Point, subtract

AnchorSampling = Literal["extremes", "exhaustive"]


def fingerprint(points: Iterable[Point], anchor: Point) -> FrozenSet[Point]:
    """Vectors from `anchor` to every other point in `points` (anchor excluded)."""
    return frozenset(subtract(p, anchor) for p in points if p != anchor)


def extreme_points(points: Iterable[Point]) -> Set[Point]:
    """
    Minimum and maximum point along each axis (at most 6 points).

    Ties are broken by full coordinate order so the sample is deterministic.
    """
    pts = list(points)
    if not pts:
        return set()
    sample: Set[Point] = set()
    for axis in range(3):
        sample.add(min(pts, key=lambda p: (p[axis], p)))
        sample.add(max(pts, key=lambda p: (p[axis], p)))
    return sample


class FingerprintIndex:
    """
    Map points plus the fingerprint of each point against the rest of the map.

    The point set only grows. Adding points that are already present is a
    no-op, so merging the same scan twice leaves the index unchanged.
    """

    def __init__(self, points: Iterable[Point] = ()):
        self._points: Set[Point] = set()
        self._fingerprints: Dict[Point, Set[Point]] = {}
        self.add(points)

    def __len__(self) -> int:
        return len(self._points)

    def __contains__(self, point: object) -> bool:
        return point in self._points

    @property
    def points(self) -> FrozenSet[Point]:
        return frozenset(self._points)

    @property
    def fingerprint_count(self) -> int:
        return len(self._fingerprints)

    def fingerprint_of(self, anchor: Point) -> Set[Point]:
        return self._fingerprints[anchor]

    def add(self, points: Iterable[Point]) -> Set[Point]:
        """
        Merge points into the index.

        Returns:
            The subset of `points` that was not already present
        """
        new = {p for p in points if p not in self._points}
        if not new:
            return new
        for anchor, vectors in self._fingerprints.items():
            vectors.update(subtract(p, anchor) for p in new)
        self._points |= new
        for anchor in new:
            self._fingerprints[anchor] = {subtract(p, anchor) for p in self._points if p != anchor}
        return new

    def anchors(self, sampling: AnchorSampling = "exhaustive") -> List[Point]:
        """
        Anchor candidates for matching, in sorted order.

        "extremes" only offers the per-axis extreme points. It is a speed
        heuristic: overlapping scans usually share one, but not always, so a
        caller must fall back to "exhaustive" before giving up on a scan.
        """
        if sampling == "extremes":
            return sorted(extreme_points(self._points))
        if sampling == "exhaustive":
            return sorted(self._points)
        raise ValueError(f"Unknown anchor sampling '{sampling}'")

    def snapshot(self, sampling: AnchorSampling = "exhaustive") -> "AnchorSnapshot":
        """
        Read-only view holding only what one matching pass reads.

        Under "extremes" this is the point set plus at most 6 fingerprints,
        instead of one fingerprint per map point, so it is cheap to send to
        worker processes.
        """
        anchors = self.anchors(sampling)
        return AnchorSnapshot(
            points=frozenset(self._points),
            sampling=sampling,
            fingerprints={a: frozenset(self._fingerprints[a]) for a in anchors},
        )


class AnchorSnapshot:
    """
    Frozen subset of a FingerprintIndex for one anchor sampling.

    Offers the same read interface the matcher uses on a FingerprintIndex.
    """

    def __init__(
        self,
        points: FrozenSet[Point],
        sampling: AnchorSampling,
        fingerprints: Dict[Point, FrozenSet[Point]],
    ):
        self._points = points
        self.sampling = sampling
        self._fingerprints = fingerprints

    def __len__(self) -> int:
        return len(self._points)

    def __contains__(self, point: object) -> bool:
        return point in self._points

    @property
    def points(self) -> FrozenSet[Point]:
        return self._points

    @property
    def fingerprint_count(self) -> int:
        return len(self._fingerprints)

    def fingerprint_of(self, anchor: Point) -> FrozenSet[Point]:
        return self._fingerprints[anchor]

    def anchors(self, sampling: AnchorSampling = "exhaustive") -> List[Point]:
        if sampling != self.sampling:
            raise ValueError(
                f"Snapshot was taken for '{self.sampling}' anchors, not '{sampling}'"
            )
        return sorted(self._fingerprints)
