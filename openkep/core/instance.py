"""
Instance module - the compatibility graph of a kidney exchange.

An instance is a directed graph on nodes 0..n-1 (one node per
incompatible donor-patient pair). An arc i -> j means that the donor of
pair i can give to the patient of pair j. Arcs carry a weight.

This module provides:
- Instance: Read-only adjacency and weight matrices
- generate_instance: Deterministic pseudo-random instance generator

Generator Notes:
---------------
Index pairs are visited in L-shaped order (row i, then every j < i), so the
pairs of an n-node instance are a prefix of the pairs of an (n+1)-node
instance. For every pair four uniforms are drawn, in order:

    A[i, j], w[i, j], A[j, i], w[j, i]

The weights are drawn even when they end up unused (missing arc or unit
weights). The draw sequence therefore does not depend on the density or on
the weight mode, and raising the density only adds arcs.
"""

from collections.abc import Iterator
from typing import Optional

import numpy as np


class Instance:
    """
    A kidney exchange compatibility graph.

    Attributes:
        A: n x n boolean adjacency matrix (A[i, i] is always False)
        w: n x n weight matrix, meaningful only where A is True
        name: Optional instance name

    Example:
        >>> instance = Instance.from_arcs(3, [(0, 1), (1, 2), (2, 0)])
        >>> instance.num_arcs
        3
        >>> list(instance.successors(0))
        [1]

    Note:
        Both matrices are copied and marked read-only on construction.
    """

    def __init__(
        self,
        A: np.ndarray,
        w: Optional[np.ndarray] = None,
        name: Optional[str] = None,
    ):
        """
        Create an instance from its matrices.

        Args:
            A: Square boolean adjacency matrix
            w: Square weight matrix (defaults to unit weights on arcs)
            name: Optional name

        Raises:
            ValueError: If the matrices are not square, differ in shape,
                or A contains a self-arc
        """
        A = np.array(A, dtype=bool)
        if A.ndim != 2 or A.shape[0] != A.shape[1]:
            raise ValueError(f"Adjacency matrix must be square, got shape {A.shape}")
        if A.shape[0] > 0 and A.diagonal().any():
            raise ValueError("Adjacency matrix must not contain self-arcs")

        if w is None:
            w = A.astype(float)
        else:
            w = np.array(w, dtype=float)
            if w.shape != A.shape:
                raise ValueError(
                    f"Weight matrix shape {w.shape} does not match adjacency {A.shape}"
                )

        A.setflags(write=False)
        w.setflags(write=False)

        self._A = A
        self._w = w
        self._name = name
        self._successors = [
            tuple(int(j) for j in np.flatnonzero(A[i])) for i in range(A.shape[0])
        ]

    # =========================================================================
    # Construction helpers
    # =========================================================================

    @classmethod
    def from_arcs(
        cls,
        n: int,
        arcs: list[tuple[int, int]],
        weights: Optional[dict[tuple[int, int], float]] = None,
        name: Optional[str] = None,
    ) -> 'Instance':
        """
        Build an instance from an explicit arc list.

        Args:
            n: Number of nodes
            arcs: (i, j) pairs
            weights: Optional arc weights (missing arcs default to 1.0)
            name: Optional name

        Returns:
            The instance
        """
        A = np.zeros((n, n), dtype=bool)
        w = np.zeros((n, n), dtype=float)
        for i, j in arcs:
            A[i, j] = True
            w[i, j] = 1.0 if weights is None else weights.get((i, j), 1.0)
        return cls(A, w, name=name)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def A(self) -> np.ndarray:
        """Boolean adjacency matrix (read-only)."""
        return self._A

    @property
    def w(self) -> np.ndarray:
        """Weight matrix (read-only)."""
        return self._w

    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def num_nodes(self) -> int:
        """Number of nodes (pairs)."""
        return self._A.shape[0]

    @property
    def num_arcs(self) -> int:
        """Number of arcs."""
        return int(self._A.sum())

    @property
    def density(self) -> float:
        """Fraction of the n(n-1) possible arcs that exist."""
        n = self.num_nodes
        if n < 2:
            return 0.0
        return self.num_arcs / (n * (n - 1))

    # =========================================================================
    # Graph access
    # =========================================================================

    def arcs(self) -> Iterator[tuple[int, int]]:
        """Iterate over all arcs (i, j) in row-major order."""
        for i, successors in enumerate(self._successors):
            for j in successors:
                yield i, j

    def successors(self, i: int) -> tuple[int, ...]:
        """Nodes j with an arc i -> j, in increasing order."""
        return self._successors[i]

    def has_arc(self, i: int, j: int) -> bool:
        return bool(self._A[i, j])

    def weight(self, i: int, j: int) -> float:
        return float(self._w[i, j])

    def __repr__(self) -> str:
        label = f"'{self._name}', " if self._name else ""
        return f"Instance({label}n={self.num_nodes}, arcs={self.num_arcs})"


def generate_instance(
    n: int,
    density: float,
    real_weights: bool = False,
    seed: int = 42,
) -> Instance:
    """
    Generate a pseudo-random compatibility graph.

    Identical arguments always produce identical matrices.

    Args:
        n: Number of nodes (>= 1)
        density: Probability that any given arc exists, in [0, 1]
        real_weights: If True use the drawn weights, otherwise unit weights
        seed: Random seed

    Returns:
        The generated instance

    Raises:
        ValueError: If n < 1 or density is outside [0, 1]
    """
    if n < 1:
        raise ValueError(f"Number of nodes must be at least 1, got {n}")
    if not 0.0 <= density <= 1.0:
        raise ValueError(f"Density must be in [0, 1], got {density}")

    rng = np.random.default_rng(seed)

    # One row of four uniforms per pair (i, j < i), in L-shaped order
    rows, cols = np.tril_indices(n, k=-1)
    draws = rng.random((len(rows), 4))

    A = np.zeros((n, n), dtype=bool)
    w = np.zeros((n, n), dtype=float)

    A[rows, cols] = draws[:, 0] < density
    w[rows, cols] = draws[:, 1]
    A[cols, rows] = draws[:, 2] < density
    w[cols, rows] = draws[:, 3]

    if not real_weights:
        w = A.astype(float)

    name = f"kep_n{n}_d{int(round(100 * density))}_s{seed}"
    return Instance(A, w, name=name)
