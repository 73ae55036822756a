"""
Scan Model

A Scan is one sensor's report: an id plus the set of points it observed in its
own local frame, with the sensor at the local origin. Scans are immutable;
orientation variants are new OrientedScan values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List

from ..geometry.orientation import Rotation, rotate_points, rotation_table
from ..geometry.vectors import Point, as_point


@dataclass(frozen=True)
class OrientedScan:
    """A scan's points after applying one rotation from the table."""

    scan_id: int
    rotation: Rotation
    points: FrozenSet[Point]


@dataclass(frozen=True)
class Scan:
    scan_id: int
    points: FrozenSet[Point]

    @classmethod
    def from_points(cls, scan_id: int, points: Iterable[Iterable[int]]) -> "Scan":
        """
        Build a Scan from raw coordinate triples.

        Args:
            scan_id: Non-negative integer identifying the sensor
            points: Iterable of 3-component integer sequences

        Returns:
            Scan with duplicate points collapsed

        Raises:
            ValueError: If the id is not a non-negative int or a point is malformed
        """
        if isinstance(scan_id, bool) or not isinstance(scan_id, int) or scan_id < 0:
            raise ValueError(f"Scan id must be a non-negative integer, got {scan_id!r}")
        return cls(scan_id=scan_id, points=frozenset(as_point(p) for p in points))

    def __len__(self) -> int:
        return len(self.points)

    def oriented(self, rotation: Rotation) -> OrientedScan:
        return OrientedScan(self.scan_id, rotation, frozenset(rotate_points(self.points, rotation)))

    def orientations(self, *, include_mirrored: bool = False) -> List[OrientedScan]:
        """Every orientation variant of this scan, identity first."""
        return [self.oriented(r) for r in rotation_table(include_mirrored)]
