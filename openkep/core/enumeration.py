"""
Enumeration module - bounded cycles and exact-length paths.

Both enumerators are depth-first traversals driven by an explicit stack
of successor iterators, exposed through the iterator protocol. They are
single-use: once exhausted, iterating again yields nothing. Construct a
new enumerator for a second traversal.

CycleEnumerator:
---------------
Yields every simple directed cycle with at most ``max_length`` nodes,
exactly once, in canonical form (smallest node first). From a root i the
search only moves to nodes with index > i, so a cycle is found from its
smallest node only and never in a rotated form. Whenever the last node of
the current path has an arc back to the root, the path is yielded; the
search then continues deeper from the same path.

PathEnumerator:
--------------
Yields every simple directed path with exactly ``length`` nodes, starting
from every node. Paths are not canonicalised.

Example:
    >>> A = [[False, True, False],
    ...      [False, False, True],
    ...      [True, False, False]]
    >>> list(CycleEnumerator(A, 3))
    [(0, 1, 2)]
    >>> list(PathEnumerator(A, 3))
    [(0, 1, 2), (1, 2, 0), (2, 0, 1)]
"""

from collections.abc import Iterator, Sequence
from typing import Union

import numpy as np

Adjacency = Union[np.ndarray, Sequence[Sequence[bool]]]

Cycle = tuple[int, ...]
Path = tuple[int, ...]


def successor_lists(adjacency: Adjacency) -> list[tuple[int, ...]]:
    """Sorted successor tuple of every node of a square boolean matrix."""
    A = np.asarray(adjacency, dtype=bool)
    if A.size == 0:
        return []
    return [tuple(int(j) for j in np.flatnonzero(row)) for row in A]


class _DepthFirstEnumerator:
    """
    Shared explicit-stack traversal.

    The stack holds one successor iterator per node on the current path;
    ``_path`` and ``_on_path`` mirror it. Subclasses decide which successors
    are candidates, whether an entered path is emitted, and whether it may
    be extended further.
    """

    def __init__(self, adjacency: Adjacency):
        self._successors = successor_lists(adjacency)
        self._adjacency = np.asarray(adjacency, dtype=bool)
        self._roots = iter(range(len(self._successors)))
        self._path: list[int] = []
        self._on_path: set[int] = set()
        self._stack: list[Iterator[int]] = []

    def __iter__(self):
        return self

    def __next__(self) -> tuple[int, ...]:
        while True:
            if not self._stack:
                # StopIteration from the root iterator ends the traversal
                if self._enter(next(self._roots)):
                    return tuple(self._path)
                continue

            for node in self._stack[-1]:
                if node in self._on_path:
                    continue
                if self._enter(node):
                    return tuple(self._path)
                break
            else:
                self._leave()

    def _enter(self, node: int) -> bool:
        """Push node onto the path; return whether the new path is emitted."""
        self._path.append(node)
        self._on_path.add(node)
        if self._can_extend():
            self._stack.append(self._candidates(node))
        else:
            self._stack.append(iter(()))
        return self._emits()

    def _leave(self) -> None:
        self._stack.pop()
        self._on_path.discard(self._path.pop())

    def _candidates(self, node: int) -> Iterator[int]:
        raise NotImplementedError

    def _can_extend(self) -> bool:
        raise NotImplementedError

    def _emits(self) -> bool:
        raise NotImplementedError


class CycleEnumerator(_DepthFirstEnumerator):
    """
    Enumerate simple directed cycles with at most ``max_length`` nodes.

    Args:
        adjacency: Square boolean matrix
        max_length: Maximum number of nodes in a cycle (>= 1)

    Raises:
        ValueError: If max_length < 1
    """

    def __init__(self, adjacency: Adjacency, max_length: int):
        if max_length < 1:
            raise ValueError(f"Maximum cycle length must be at least 1, got {max_length}")
        super().__init__(adjacency)
        self._max_length = max_length

    @property
    def max_length(self) -> int:
        return self._max_length

    def _candidates(self, node: int) -> Iterator[int]:
        root = self._path[0]
        return (j for j in self._successors[node] if j > root)

    def _can_extend(self) -> bool:
        return len(self._path) < self._max_length

    def _emits(self) -> bool:
        return bool(self._adjacency[self._path[-1], self._path[0]])


class PathEnumerator(_DepthFirstEnumerator):
    """
    Enumerate simple directed paths with exactly ``length`` nodes.

    Args:
        adjacency: Square boolean matrix
        length: Number of nodes on each path (>= 1)

    Raises:
        ValueError: If length < 1
    """

    def __init__(self, adjacency: Adjacency, length: int):
        if length < 1:
            raise ValueError(f"Path length must be at least 1, got {length}")
        super().__init__(adjacency)
        self._length = length

    @property
    def length(self) -> int:
        return self._length

    def _candidates(self, node: int) -> Iterator[int]:
        return iter(self._successors[node])

    def _can_extend(self) -> bool:
        return len(self._path) < self._length

    def _emits(self) -> bool:
        return len(self._path) == self._length


# =============================================================================
# Helpers
# =============================================================================

def canonical_cycle(nodes: Sequence[int]) -> Cycle:
    """Rotate a cycle so that its smallest node comes first."""
    if not nodes:
        return ()
    start = min(range(len(nodes)), key=nodes.__getitem__)
    return tuple(nodes[start:]) + tuple(nodes[:start])


def cycle_arcs(cycle: Sequence[int]) -> list[tuple[int, int]]:
    """Arcs of a cycle, starting with the closing arc last -> first."""
    return [(cycle[i - 1], cycle[i]) for i in range(len(cycle))]


def path_arcs(path: Sequence[int]) -> list[tuple[int, int]]:
    """Arcs between consecutive nodes of a path."""
    return list(zip(path[:-1], path[1:]))
