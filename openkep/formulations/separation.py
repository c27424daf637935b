"""
Separation of long cycles for the row-generation formulations.

A separator is called by the solver adapter at every integer-feasible
candidate. It reads the value of every arc variable, keeps the arcs set to
one (the support graph) and enumerates, inside that support graph only,
the structures a valid solution cannot contain:

- PathSeparator: every path with k+1 nodes
- CycleSeparator: every cycle with more than k nodes

For each of them it returns the same inequality the static formulation
would contain. The cuts are globally valid: a union of disjoint cycles of
length at most k contains neither a long cycle nor a (k+1)-node path, so no
feasible solution is ever cut off.

Separators hold only the arc-variable map and k. Calling one twice with the
same candidate returns the same cuts, and it can be called any number of
times during one solve.
"""

from collections.abc import Mapping
from enum import Enum, auto

import numpy as np

from openkep.core.enumeration import CycleEnumerator, PathEnumerator
from openkep.core.model import LinearConstraint
from openkep.formulations.base import ArcVars, long_cycle_cut, long_path_cut

# Binary values above this count as 1
SUPPORT_THRESHOLD = 0.5


class SeparatorState(Enum):
    IDLE = auto()
    SEPARATING = auto()


class _Separator:
    """Common state and support-graph extraction."""

    def __init__(self, arc_vars: ArcVars, k: int, num_nodes: int):
        self._x = arc_vars
        self._k = k
        self._num_nodes = num_nodes
        self._state = SeparatorState.IDLE

    @property
    def k(self) -> int:
        return self._k

    @property
    def state(self) -> SeparatorState:
        return self._state

    def support_adjacency(self, values: Mapping[int, float]) -> np.ndarray:
        """Adjacency matrix of the arcs whose variable is set to one."""
        support = np.zeros((self._num_nodes, self._num_nodes), dtype=bool)
        for (i, j), var in self._x.items():
            if values.get(var, 0.0) > SUPPORT_THRESHOLD:
                support[i, j] = True
        return support

    def __call__(self, values: Mapping[int, float]) -> list[LinearConstraint]:
        """
        Return the cuts violated by an integer candidate.

        Args:
            values: Variable index -> value for (at least) every arc variable

        Returns:
            Violated cuts, empty when the candidate is feasible
        """
        self._state = SeparatorState.SEPARATING
        try:
            return self._separate(self.support_adjacency(values))
        finally:
            self._state = SeparatorState.IDLE

    def _separate(self, support: np.ndarray) -> list[LinearConstraint]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(arcs={len(self._x)}, k={self._k})"


class PathSeparator(_Separator):
    """Cut every (k+1)-node path of the support graph."""

    def _separate(self, support: np.ndarray) -> list[LinearConstraint]:
        return [
            long_path_cut(self._x, path, self._k)
            for path in PathEnumerator(support, self._k + 1)
        ]


class CycleSeparator(_Separator):
    """Cut every cycle of the support graph with more than k nodes."""

    def _separate(self, support: np.ndarray) -> list[LinearConstraint]:
        if self._num_nodes == 0:
            return []
        return [
            long_cycle_cut(self._x, cycle)
            for cycle in CycleEnumerator(support, self._num_nodes)
            if len(cycle) > self._k
        ]
