"""
Tests for relative fingerprints and the incremental fingerprint index.
"""

import pickle

import numpy as np
import pytest

from scanner_registration.registration.fingerprint import (
    AnchorSnapshot,
    FingerprintIndex,
    extreme_points,
    fingerprint,
)


def _random_points(seed: int, n: int):
    rng = np.random.default_rng(seed)
    return {tuple(int(v) for v in row) for row in rng.integers(-1000, 1001, size=(n, 3))}


def test_fingerprint_excludes_anchor():
    points = {(0, 0, 0), (1, 2, 3), (-1, 0, 5)}
    fp = fingerprint(points, (0, 0, 0))
    assert fp == {(1, 2, 3), (-1, 0, 5)}
    assert (0, 0, 0) not in fp


def test_fingerprint_is_translation_invariant():
    points = _random_points(0, 20)
    shift = (123, -456, 789)
    moved = {(x + shift[0], y + shift[1], z + shift[2]) for x, y, z in points}
    for p in list(points)[:5]:
        q = (p[0] + shift[0], p[1] + shift[1], p[2] + shift[2])
        assert fingerprint(points, p) == fingerprint(moved, q)


def test_extreme_points():
    points = {(0, 0, 0), (10, 1, 1), (-10, 2, 2), (0, 20, 0), (0, -20, 0), (0, 0, 30), (0, 0, -30), (1, 1, 1)}
    assert extreme_points(points) == points - {(0, 0, 0), (1, 1, 1)}
    assert extreme_points([]) == set()


def test_extreme_points_tie_break_is_deterministic():
    points = [(5, 0, 0), (5, 1, 0), (0, 0, 0)]
    assert (5, 1, 0) in extreme_points(points)
    assert extreme_points(points) == extreme_points(list(reversed(points)))


class TestFingerprintIndex:
    def test_incremental_matches_full_recompute(self):
        first = _random_points(1, 25)
        second = _random_points(2, 25)
        index = FingerprintIndex(first)
        added = index.add(second)

        assert added == second - first
        everything = first | second
        assert index.points == everything
        for p in everything:
            assert index.fingerprint_of(p) == fingerprint(everything, p)

    def test_re_adding_points_is_a_no_op(self):
        points = _random_points(3, 15)
        index = FingerprintIndex(points)
        snapshot = {p: set(index.fingerprint_of(p)) for p in points}

        assert index.add(points) == set()
        assert len(index) == len(points)
        assert {p: index.fingerprint_of(p) for p in points} == snapshot

    def test_contains_and_len(self):
        index = FingerprintIndex([(1, 1, 1), (1, 1, 1), (2, 2, 2)])
        assert len(index) == 2
        assert (1, 1, 1) in index
        assert (3, 3, 3) not in index

    def test_anchor_sampling(self):
        points = _random_points(4, 30)
        index = FingerprintIndex(points)
        assert index.anchors("exhaustive") == sorted(points)
        assert set(index.anchors("extremes")) == extreme_points(points)
        assert len(index.anchors("extremes")) <= 6
        with pytest.raises(ValueError):
            index.anchors("random")


class TestAnchorSnapshot:
    def test_extremes_snapshot_is_bounded(self):
        index = FingerprintIndex(_random_points(5, 200))
        snapshot = index.snapshot("extremes")

        assert isinstance(snapshot, AnchorSnapshot)
        assert snapshot.fingerprint_count <= 6
        assert index.fingerprint_count == len(index)
        assert len(pickle.dumps(snapshot)) * 5 < len(pickle.dumps(index))

    def test_snapshot_reads_like_the_index(self):
        index = FingerprintIndex(_random_points(6, 40))
        snapshot = index.snapshot("extremes")

        assert len(snapshot) == len(index)
        assert snapshot.points == index.points
        assert snapshot.anchors("extremes") == index.anchors("extremes")
        for anchor in snapshot.anchors("extremes"):
            assert snapshot.fingerprint_of(anchor) == index.fingerprint_of(anchor)
            assert anchor in snapshot

    def test_snapshot_is_frozen(self):
        points = _random_points(7, 20)
        index = FingerprintIndex(points)
        snapshot = index.snapshot("exhaustive")
        index.add({(5000, 5000, 5000)})

        assert (5000, 5000, 5000) not in snapshot
        assert snapshot.fingerprint_count == len(points)
        assert snapshot.points == points

    def test_snapshot_rejects_other_sampling(self):
        snapshot = FingerprintIndex(_random_points(8, 10)).snapshot("extremes")
        with pytest.raises(ValueError, match="extremes"):
            snapshot.anchors("exhaustive")
