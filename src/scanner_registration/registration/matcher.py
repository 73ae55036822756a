"""
Overlap Matcher

Decides whether an unresolved scan can be placed into the current map.

For every orientation of the scan and every point b of that orientation, the
fingerprint of b is intersected with the fingerprint of each candidate map
anchor g. When the two share at least `min_overlap - 1` vectors (the anchors
themselves make up the last common point) the scan is accepted with translation
g - b, which is also the sensor position in the global frame.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional, Union

from ..geometry.orientation import Rotation, rotation_table
from ..geometry.vectors import Point, add, subtract
from ..utils.logging import setup_logger
from .errors import RegistrationError
from .fingerprint import AnchorSampling, AnchorSnapshot, FingerprintIndex, fingerprint
from .scan import Scan

logger = setup_logger(__name__)

MapView = Union[FingerprintIndex, AnchorSnapshot]


@dataclass(frozen=True)
class Match:
    """
    Placement of one scan in the global frame.

    Attributes:
        scan_id: Id of the placed scan
        rotation: Rotation applied to the scan's local points
        translation: Offset added after rotation; equals the sensor position
        overlap: Number of transformed points already present in the map
        points: The scan's points in the global frame
    """

    scan_id: int
    rotation: Rotation
    translation: Point
    overlap: int
    points: FrozenSet[Point]

    @property
    def sensor_position(self) -> Point:
        return self.translation


def count_overlap(points: Iterable[Point], index: MapView) -> int:
    return sum(1 for p in points if p in index)


@dataclass
class OverlapMatcher:
    min_overlap: int = 12
    include_mirrored: bool = False

    def __post_init__(self) -> None:
        if self.min_overlap < 2:
            raise ValueError(f"min_overlap must be at least 2, got {self.min_overlap}")

    @property
    def fingerprint_threshold(self) -> int:
        return self.min_overlap - 1

    def find_match(
        self,
        scan: Scan,
        index: MapView,
        anchor_sampling: AnchorSampling = "exhaustive",
    ) -> Optional[Match]:
        """
        Search every orientation x anchor pair for a qualifying overlap.

        Args:
            scan: Unresolved scan in its local frame
            index: Current map with per-point fingerprints, or a snapshot of it
                taken for `anchor_sampling`
            anchor_sampling: Which map points to try as anchors

        Returns:
            The first Match found in (rotation, local point, map anchor) order,
            or None when no pair reaches the threshold. None is expected while
            the map is still missing this scan's neighbours.
        """
        threshold = self.fingerprint_threshold
        if len(scan) < self.min_overlap or len(index) < self.min_overlap:
            return None

        anchors = index.anchors(anchor_sampling)
        logger.debug(
            "Matching scan %d (%d points) against %d anchors of %d map points",
            scan.scan_id, len(scan), len(anchors), len(index),
        )
        for rotation in rotation_table(self.include_mirrored):
            variant = scan.oriented(rotation)
            for local_anchor in sorted(variant.points):
                relatives = fingerprint(variant.points, local_anchor)
                for map_anchor in anchors:
                    shared = relatives & index.fingerprint_of(map_anchor)
                    if len(shared) < threshold:
                        continue
                    return self._accept(variant.points, rotation, scan.scan_id, local_anchor, map_anchor, index)
        return None

    def _accept(
        self,
        variant_points: FrozenSet[Point],
        rotation: Rotation,
        scan_id: int,
        local_anchor: Point,
        map_anchor: Point,
        index: MapView,
    ) -> Match:
        translation = subtract(map_anchor, local_anchor)
        placed = frozenset(add(p, translation) for p in variant_points)
        overlap = count_overlap(placed, index)
        if overlap < self.min_overlap:
            raise RegistrationError(
                f"Scan {scan_id}: accepted transform overlaps the map in only "
                f"{overlap} points (< {self.min_overlap})"
            )
        logger.debug(
            "Scan %d matched with rotation %d, translation %s (%d shared points)",
            scan_id, rotation.index, translation, overlap,
        )
        return Match(
            scan_id=scan_id,
            rotation=rotation,
            translation=translation,
            overlap=overlap,
            points=placed,
        )


def match_scan(
    scan: Scan,
    index: MapView,
    matcher: OverlapMatcher,
    anchor_sampling: AnchorSampling = "exhaustive",
) -> Optional[Match]:
    """Module-level entry point so the matcher can run in worker processes."""
    return matcher.find_match(scan, index, anchor_sampling)
