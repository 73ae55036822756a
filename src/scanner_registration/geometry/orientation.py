"""
Discrete Orientation Table

Enumerates the rigid rotations a scan may need to be brought into the global
frame. Every candidate is a signed permutation matrix: pick which local axis
feeds each global axis, then negate any subset of the resulting axes.

There are 48 signed permutations of three axes. Half of them have determinant
-1 and mirror the scan, which a physical sensor can never do, so only the 24
proper rotations (determinant +1) are used unless mirrored variants are
explicitly requested.

Rotations are stored as 3x3 integer numpy arrays. Applying one to a point set
stays in exact integer arithmetic.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from itertools import permutations, product
from typing import Iterable, List, Set, Tuple

import numpy as np

from .vectors import Point


@dataclass(frozen=True, eq=False)
class Rotation:
    """One entry of the rotation table.

    Attributes:
        index: Position in the table it was taken from (identity is always 0)
        matrix: 3x3 int64 signed permutation matrix (read-only)
        include_mirrored: Whether that table is the 48-entry one
    """

    index: int
    matrix: np.ndarray
    include_mirrored: bool = False

    @property
    def determinant(self) -> int:
        return int(round(np.linalg.det(self.matrix)))

    @property
    def is_proper(self) -> bool:
        return self.determinant == 1

    def apply(self, point: Point) -> Point:
        m = self.matrix
        x, y, z = point
        return (
            int(m[0, 0] * x + m[0, 1] * y + m[0, 2] * z),
            int(m[1, 0] * x + m[1, 1] * y + m[1, 2] * z),
            int(m[2, 0] * x + m[2, 1] * y + m[2, 2] * z),
        )

    def __repr__(self) -> str:
        return f"Rotation(index={self.index}, rows={self.matrix.tolist()}, include_mirrored={self.include_mirrored})"


def _build(include_mirrored: bool) -> Tuple[Rotation, ...]:
    matrices: List[np.ndarray] = []
    for perm in permutations(range(3)):
        for signs in product((1, -1), repeat=3):
            m = np.zeros((3, 3), dtype=np.int64)
            for row, (axis, sign) in enumerate(zip(perm, signs)):
                m[row, axis] = sign
            if not include_mirrored and round(np.linalg.det(m)) != 1:
                continue
            m.setflags(write=False)
            matrices.append(m)
    # permutations() yields the identity permutation first and product() the
    # all-positive signs first, so index 0 is the identity
    return tuple(
        Rotation(index=i, matrix=m, include_mirrored=include_mirrored) for i, m in enumerate(matrices)
    )


@lru_cache(maxsize=None)
def rotation_table(include_mirrored: bool = False) -> Tuple[Rotation, ...]:
    """Return the cached rotation table (24 entries, or 48 with mirrors)."""
    return _build(include_mirrored)


def proper_rotations() -> Tuple[Rotation, ...]:
    return rotation_table(False)


def signed_permutations() -> Tuple[Rotation, ...]:
    return rotation_table(True)


def inverse(rotation: Rotation) -> Rotation:
    """Inverse of a signed permutation is its transpose.

    The inverse is taken from the same table as `rotation`, so its index
    refers to that table too.
    """
    inv = rotation.matrix.T
    table = rotation_table(rotation.include_mirrored or not rotation.is_proper)
    for candidate in table:
        if np.array_equal(candidate.matrix, inv):
            return candidate
    raise ValueError(f"Inverse of {rotation!r} not found in rotation table")


def rotate_points(points: Iterable[Point], rotation: Rotation) -> Set[Point]:
    """Apply a rotation to every point, returning a new set."""
    pts = list(points)
    if not pts:
        return set()
    arr = np.asarray(pts, dtype=np.int64)
    rotated = arr @ rotation.matrix.T
    return {(int(x), int(y), int(z)) for x, y, z in rotated.tolist()}
