"""
Geometry Module

Exact integer 3-vector helpers and the discrete rotation table used to
enumerate candidate scan orientations.
"""

from .vectors import Point, add, subtract, manhattan_distance
from .orientation import (
    Rotation,
    proper_rotations,
    signed_permutations,
    rotation_table,
    rotate_points,
    inverse,
)

__all__ = [
    "Point",
    "add",
    "subtract",
    "manhattan_distance",
    "Rotation",
    "proper_rotations",
    "signed_permutations",
    "rotation_table",
    "rotate_points",
    "inverse",
]
