"""
Tests for the cycle and path enumerators.

Both enumerators are checked against a brute force over permutations on
small generated graphs.
"""

from itertools import permutations

import numpy as np
import pytest

from openkep.core.enumeration import (
    CycleEnumerator,
    PathEnumerator,
    canonical_cycle,
    cycle_arcs,
    path_arcs,
    successor_lists,
)
from openkep.core.instance import generate_instance


def brute_force_cycles(A, max_length):
    """Every simple cycle with at most max_length nodes, smallest node first."""
    n = len(A)
    cycles = set()
    for length in range(2, max_length + 1):
        for nodes in permutations(range(n), length):
            if nodes[0] != min(nodes):
                continue
            if all(A[i][j] for i, j in cycle_arcs(nodes)):
                cycles.add(nodes)
    return cycles


def brute_force_paths(A, length):
    n = len(A)
    return {
        nodes
        for nodes in permutations(range(n), length)
        if all(A[i][j] for i, j in path_arcs(nodes))
    }


# =============================================================================
# CycleEnumerator
# =============================================================================


class TestCycleEnumerator:
    """Tests for CycleEnumerator."""

    def test_triangle(self, triangle):
        assert list(CycleEnumerator(triangle.A, 3)) == [(0, 1, 2)]

    def test_too_short(self, triangle):
        assert list(CycleEnumerator(triangle.A, 2)) == []

    def test_complete_graph_counts(self):
        A = ~np.eye(4, dtype=bool)
        cycles = list(CycleEnumerator(A, 4))
        by_length = {length: sum(1 for c in cycles if len(c) == length) for length in (2, 3, 4)}
        assert by_length == {2: 6, 3: 8, 4: 6}

    def test_two_cycle(self, competing_pairs):
        assert list(CycleEnumerator(competing_pairs.A, 2)) == [(0, 1), (1, 2)]

    def test_canonical_and_unique(self):
        instance = generate_instance(9, 0.4, seed=5)
        cycles = list(CycleEnumerator(instance.A, 4))
        assert len(cycles) == len(set(cycles))
        for cycle in cycles:
            assert cycle[0] == min(cycle)
            assert len(set(cycle)) == len(cycle)

    @pytest.mark.parametrize("seed", [42, 43, 44])
    @pytest.mark.parametrize("max_length", [2, 3, 4])
    def test_matches_brute_force(self, seed, max_length):
        instance = generate_instance(7, 0.35, seed=seed)
        A = instance.A.tolist()
        found = list(CycleEnumerator(instance.A, max_length))
        assert set(found) == brute_force_cycles(A, max_length)

    def test_max_length_one(self, triangle):
        assert list(CycleEnumerator(triangle.A, 1)) == []

    def test_empty_graph(self):
        assert list(CycleEnumerator(np.zeros((0, 0), dtype=bool), 3)) == []

    def test_invalid_length(self, triangle):
        with pytest.raises(ValueError):
            CycleEnumerator(triangle.A, 0)

    def test_single_use(self, triangle):
        enumerator = CycleEnumerator(triangle.A, 3)
        assert list(enumerator) == [(0, 1, 2)]
        assert list(enumerator) == []

    def test_accepts_nested_lists(self):
        A = [[False, True], [True, False]]
        assert list(CycleEnumerator(A, 2)) == [(0, 1)]


# =============================================================================
# PathEnumerator
# =============================================================================


class TestPathEnumerator:
    """Tests for PathEnumerator."""

    def test_triangle(self, triangle):
        assert list(PathEnumerator(triangle.A, 3)) == [(0, 1, 2), (1, 2, 0), (2, 0, 1)]

    def test_length_one(self, triangle):
        assert list(PathEnumerator(triangle.A, 1)) == [(0,), (1,), (2,)]

    def test_longer_than_graph(self, triangle):
        assert list(PathEnumerator(triangle.A, 4)) == []

    @pytest.mark.parametrize("seed", [42, 43])
    @pytest.mark.parametrize("length", [2, 3, 4])
    def test_matches_brute_force(self, seed, length):
        instance = generate_instance(7, 0.35, seed=seed)
        found = list(PathEnumerator(instance.A, length))
        assert len(found) == len(set(found))
        assert set(found) == brute_force_paths(instance.A.tolist(), length)

    def test_exact_length(self):
        instance = generate_instance(8, 0.5, seed=2)
        assert all(len(path) == 3 for path in PathEnumerator(instance.A, 3))

    def test_invalid_length(self, triangle):
        with pytest.raises(ValueError):
            PathEnumerator(triangle.A, 0)


# =============================================================================
# Helpers
# =============================================================================


class TestHelpers:
    """Tests for the cycle and path helpers."""

    def test_canonical_cycle(self):
        assert canonical_cycle([3, 1, 2]) == (1, 2, 3)
        assert canonical_cycle([0, 2, 1]) == (0, 2, 1)
        assert canonical_cycle([]) == ()

    def test_cycle_arcs(self):
        assert cycle_arcs((0, 1, 2)) == [(2, 0), (0, 1), (1, 2)]

    def test_path_arcs(self):
        assert path_arcs((0, 1, 2)) == [(0, 1), (1, 2)]
        assert path_arcs((5,)) == []

    def test_successor_lists(self, triangle):
        assert successor_lists(triangle.A) == [(1,), (2,), (0,)]
