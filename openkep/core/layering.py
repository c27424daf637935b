"""
Layering module - shortest-path filter for the extended edge formulation.

In the extended edge formulation every cycle is assigned to a layer l, the
smallest node of the cycle. An arc (i, j) can only be used in layer l when
some cycle through l, i and j has at most k arcs:

    d[l][i] + 1 + d[j][l] <= k

where d holds all-pairs shortest path lengths with unit arc lengths.
"""

import numpy as np

from openkep.core.enumeration import Adjacency

# Large enough to never pass the feasibility test, small enough that the
# sum of two of them still fits in an int64
UNREACHABLE = np.iinfo(np.int64).max // 2


def shortest_path_distances(adjacency: Adjacency) -> np.ndarray:
    """
    All-pairs shortest path lengths, counting every arc as length 1.

    Relaxes d[i][k] = min(d[i][k], d[i][j] + d[j][k]) over all triples
    until a full pass makes no improvement.

    Args:
        adjacency: Square boolean matrix

    Returns:
        n x n int64 matrix; 0 on the diagonal, UNREACHABLE where no path
        exists
    """
    A = np.asarray(adjacency, dtype=bool)
    n = A.shape[0] if A.ndim == 2 else 0

    dist = np.full((n, n), UNREACHABLE, dtype=np.int64)
    dist[A] = 1
    np.fill_diagonal(dist, 0)

    changed = True
    while changed:
        changed = False
        for j in range(n):
            via = dist[:, j, None] + dist[None, j, :]
            better = via < dist
            if better.any():
                dist[better] = via[better]
                changed = True

    return dist


def is_layer_feasible(dist: np.ndarray, i: int, j: int, layer: int, k: int) -> bool:
    """Whether arc (i, j) can lie on a cycle of at most k arcs through layer."""
    return int(dist[layer, i]) + 1 + int(dist[j, layer]) <= k


def feasible_layered_arcs(adjacency: Adjacency, k: int) -> list[tuple[int, int, int]]:
    """
    All (i, j, l) triples that get a variable in the extended edge model.

    A triple is kept when (i, j) is an arc, both endpoints are >= l (l is
    the smallest node of its cycle) and the shortest-path test holds.

    Args:
        adjacency: Square boolean matrix
        k: Maximum cycle length

    Returns:
        Triples ordered by layer, then i, then j
    """
    A = np.asarray(adjacency, dtype=bool)
    n = A.shape[0] if A.ndim == 2 else 0
    dist = shortest_path_distances(A)

    triples = []
    for layer in range(n):
        for i in range(layer, n):
            for j in np.flatnonzero(A[i, layer:]) + layer:
                j = int(j)
                if is_layer_feasible(dist, i, j, layer, k):
                    triples.append((i, j, layer))

    return triples
