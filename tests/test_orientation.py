"""
Unit tests for the discrete rotation table.

These tests verify:
- 24 proper rotations, 48 with mirrored variants
- Identity first, all entries distinct
- Rotate -> inverse round trip
"""

import numpy as np
import pytest

from scanner_registration.geometry import (
    inverse,
    proper_rotations,
    rotate_points,
    rotation_table,
    signed_permutations,
)
from scanner_registration.geometry.vectors import as_point, manhattan_distance


POINTS = {(1, 2, 3), (-4, 5, -6), (7, -8, 9), (0, 0, 1)}


class TestRotationTable:
    def test_proper_rotation_count(self):
        rotations = proper_rotations()
        assert len(rotations) == 24
        assert all(r.is_proper for r in rotations)

    def test_mirrored_table(self):
        table = signed_permutations()
        assert len(table) == 48
        assert sum(1 for r in table if r.is_proper) == 24
        assert sum(1 for r in table if not r.is_proper) == 24

    def test_identity_is_first(self):
        assert np.array_equal(proper_rotations()[0].matrix, np.eye(3, dtype=np.int64))
        assert np.array_equal(signed_permutations()[0].matrix, np.eye(3, dtype=np.int64))

    def test_entries_distinct(self):
        seen = {tuple(r.matrix.flatten().tolist()) for r in signed_permutations()}
        assert len(seen) == 48

    def test_indices_match_positions(self):
        for i, r in enumerate(rotation_table(False)):
            assert r.index == i

    def test_matrices_read_only(self):
        with pytest.raises(ValueError):
            proper_rotations()[0].matrix[0, 0] = 5


class TestRotationApplication:
    def test_apply_matches_matrix_product(self):
        for rotation in proper_rotations():
            for p in POINTS:
                expected = tuple(int(v) for v in rotation.matrix @ np.array(p))
                assert rotation.apply(p) == expected

    @pytest.mark.parametrize("include_mirrored", [False, True])
    def test_round_trip(self, include_mirrored):
        """Applying a rotation then its inverse returns the original set."""
        for rotation in rotation_table(include_mirrored):
            back = rotate_points(rotate_points(POINTS, rotation), inverse(rotation))
            assert back == POINTS

    def test_inverse_composes_to_identity(self):
        for rotation in proper_rotations():
            product = rotation.matrix @ inverse(rotation).matrix
            assert np.array_equal(product, np.eye(3, dtype=np.int64))

    def test_rotation_preserves_distance_from_origin(self):
        for rotation in proper_rotations():
            for p in POINTS:
                assert manhattan_distance(rotation.apply(p), (0, 0, 0)) == manhattan_distance(p, (0, 0, 0))

    def test_rotate_empty(self):
        assert rotate_points([], proper_rotations()[3]) == set()


class TestAsPoint:
    def test_accepts_integer_sequences(self):
        assert as_point([1, -2, 3]) == (1, -2, 3)
        assert as_point(np.array([4, 5, 6])) == (4, 5, 6)

    @pytest.mark.parametrize("bad", [(1, 2), (1, 2, 3, 4), (1.5, 2, 3), (True, 0, 0), ("1", 2, 3)])
    def test_rejects_malformed(self, bad):
        with pytest.raises(ValueError):
            as_point(bad)


class TestInverseTable:
    @pytest.mark.parametrize("include_mirrored", [False, True])
    def test_inverse_index_refers_to_source_table(self, include_mirrored):
        table = rotation_table(include_mirrored)
        for rotation in table:
            inv = inverse(rotation)
            assert inv.include_mirrored is include_mirrored
            assert table[inv.index] is inv

    def test_proper_rotation_from_mirrored_table(self):
        proper = next(r for r in signed_permutations() if r.is_proper and r.index > 0)
        inv = inverse(proper)
        assert np.array_equal(signed_permutations()[inv.index].matrix, proper.matrix.T)
