"""
Extended edge formulation (Constantino et al., 2013).

The graph is copied once per layer l. In layer l only cycles whose
smallest node is l may be built, so every arc gets one variable per layer
it can belong to:

    x[i, j, l]   for i >= l, j >= l and d[l][i] + 1 + d[j][l] <= k

Constraints:
    flow        per node and layer: inflow == outflow
    capacity    per node: outflow over all layers <= 1
    size        per layer: number of arcs <= k
    ordering    per layer l and node i > l: outflow of i in l <= outflow of l in l

The ordering constraint makes layer l usable only when node l itself is
used in it, so l is the true smallest node of the cycle in that layer.
"""

from openkep.core.expressions import (
    sum_over_i,
    sum_over_ij,
    sum_over_j,
    sum_over_jl,
    sum_over_layers,
    weighted_sum,
)
from openkep.core.instance import Instance
from openkep.core.layering import feasible_layered_arcs
from openkep.core.model import Model
from openkep.formulations.base import validate_k


def build_extended_edge(instance: Instance, k: int) -> Model:
    """
    Build the extended edge formulation.

    Variables are registered as group "x", keyed by (i, j, l).
    """
    validate_k(k)
    n = instance.num_nodes
    model = Model("edge")

    x = model.add_group("x", {})
    for i, j, layer in feasible_layered_arcs(instance.A, k):
        x[i, j, layer] = model.add_binary_var(f"x[{i},{j},{layer}]")

    model.set_objective({
        var: -coef
        for var, coef in weighted_sum(instance.w, sum_over_layers(x)).items()
    })

    x_in = sum_over_i(x)
    x_out = sum_over_j(x)

    # flow
    for layer in range(n):
        for node in range(layer, n):
            model.add_comparison(
                x_in.get((node, layer), {}),
                '==',
                x_out.get((node, layer), {}),
                name=f"flow[{node},{layer}]",
            )

    # capacity
    for node, expr in sorted(sum_over_jl(x).items()):
        model.add_constraint(expr, '<=', 1.0, name=f"capacity[{node}]")

    # size
    for layer, expr in sorted(sum_over_ij(x).items()):
        model.add_constraint(expr, '<=', k, name=f"size[{layer}]")

    # ordering
    for layer in range(n):
        leader = x_out.get((layer, layer), {})
        for node in range(layer + 1, n):
            follower = x_out.get((node, layer))
            if follower:
                model.add_comparison(
                    follower, '<=', leader, name=f"ordering[{layer},{node}]"
                )

    return model
