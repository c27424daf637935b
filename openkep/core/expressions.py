"""
Reduction helpers over sparse variable maps.

Arc variables live in maps keyed by (i, j); layered arc variables in maps
keyed by (i, j, l). The constraint families of the formulations are sums of
these variables over one or two of the key axes. Each helper returns a map
from the remaining key(s) to a linear expression (``dict[int, float]``).
Only keys that have at least one variable appear in the result; callers use
``.get(key, {})`` for the rest.

Naming follows the summed axes:

    inflow(x)              sum over i of x[i, j]          -> per j
    outflow(x)             sum over j of x[i, j]          -> per i
    sum_over_i(x3)         sum over i of x[i, j, l]       -> per (j, l)
    sum_over_j(x3)         sum over j of x[i, j, l]       -> per (i, l)
    sum_over_layers(x3)    sum over l of x[i, j, l]       -> per (i, j)
    sum_over_jl(x3)        sum over j, l of x[i, j, l]    -> per i
    sum_over_ij(x3)        sum over i, j of x[i, j, l]    -> per l
"""

from collections import defaultdict
from collections.abc import Callable, Hashable, Mapping

import numpy as np

from openkep.core.model import LinearExpr


def _reduce(
    variables: Mapping[tuple, int],
    key: Callable[[tuple], Hashable],
) -> dict[Hashable, LinearExpr]:
    result: dict[Hashable, LinearExpr] = defaultdict(dict)
    for index_key, var in variables.items():
        expr = result[key(index_key)]
        expr[var] = expr.get(var, 0.0) + 1.0
    return dict(result)


def inflow(x: Mapping[tuple[int, int], int]) -> dict[int, LinearExpr]:
    """Per node j, the sum of arc variables entering j."""
    return _reduce(x, lambda ij: ij[1])


def outflow(x: Mapping[tuple[int, int], int]) -> dict[int, LinearExpr]:
    """Per node i, the sum of arc variables leaving i."""
    return _reduce(x, lambda ij: ij[0])


def sum_over_i(x: Mapping[tuple[int, int, int], int]) -> dict[tuple[int, int], LinearExpr]:
    """Per (j, l), the sum of layered arcs entering j in layer l."""
    return _reduce(x, lambda ijl: (ijl[1], ijl[2]))


def sum_over_j(x: Mapping[tuple[int, int, int], int]) -> dict[tuple[int, int], LinearExpr]:
    """Per (i, l), the sum of layered arcs leaving i in layer l."""
    return _reduce(x, lambda ijl: (ijl[0], ijl[2]))


def sum_over_layers(x: Mapping[tuple[int, int, int], int]) -> dict[tuple[int, int], LinearExpr]:
    """Per arc (i, j), the sum of its copies over all layers."""
    return _reduce(x, lambda ijl: (ijl[0], ijl[1]))


def sum_over_jl(x: Mapping[tuple[int, int, int], int]) -> dict[int, LinearExpr]:
    """Per node i, the sum of layered arcs leaving i in any layer."""
    return _reduce(x, lambda ijl: ijl[0])


def sum_over_ij(x: Mapping[tuple[int, int, int], int]) -> dict[int, LinearExpr]:
    """Per layer l, the sum of all layered arcs in l."""
    return _reduce(x, lambda ijl: ijl[2])


def weighted_sum(
    weights: np.ndarray,
    expressions: Mapping[tuple[int, int], LinearExpr],
) -> LinearExpr:
    """sum over (i, j) of weights[i, j] * expressions[(i, j)]."""
    result: LinearExpr = {}
    for (i, j), expr in expressions.items():
        weight = float(weights[i, j])
        for var, coef in expr.items():
            result[var] = result.get(var, 0.0) + weight * coef
    return result


def arc_sum(
    x: Mapping[tuple[int, int], int],
    arcs: list[tuple[int, int]],
) -> LinearExpr:
    """
    Sum of the variables of the given arcs.

    Raises:
        KeyError: If an arc has no variable
    """
    expr: LinearExpr = {}
    for arc in arcs:
        var = x[arc]
        expr[var] = expr.get(var, 0.0) + 1.0
    return expr
