"""
MTZ-like formulation.

Adapts the Miller-Tucker-Zemlin subtour elimination of the travelling
salesman problem. Next to the arc variables, every node i gets

    y[i]  integer in [i, n-1]   id of the cycle it belongs to
    u[i]  integer in [1, k]     position within its cycle
    z[i]  binary                whether i is the last node of its cycle

with

    z[i] = 1            =>  y[i] = i
    x[i, j] = 1         =>  y[i] = y[j]
    x[i, j] = 1         =>  u[i] + 1 <= u[j]  or  z[i] = 1

Positions increase along a used cycle except after its last node, so every
cycle has a last node. That node carries the cycle id, and since
y[j] >= j for every node, it is the largest node of the cycle and the only
one with z = 1. Positions run from 1 to k, bounding the cycle length by k.
"""

from openkep.core.instance import Instance
from openkep.core.model import Model
from openkep.formulations.base import build_arc_model, validate_k


def build_mtz(instance: Instance, k: int) -> Model:
    """
    Build the MTZ-like formulation.

    Groups: "x" (arcs), "y" (cycle id), "u" (position), "z" (last marker).
    """
    validate_k(k)
    n = instance.num_nodes
    model, x = build_arc_model("mtz", instance)

    y = model.add_group("y", {i: model.add_integer_var(f"y[{i}]", i, n - 1) for i in range(n)})
    u = model.add_group("u", {i: model.add_integer_var(f"u[{i}]", 1, k) for i in range(n)})
    z = model.add_group("z", {i: model.add_binary_var(f"z[{i}]") for i in range(n)})

    # z_i = 1 => y_i = i   (y_i >= i holds by its bounds)
    for i in range(n):
        model.add_constraint({y[i]: 1.0, z[i]: n}, '<=', n + i, name=f"last[{i}]")

    # x_ij = 1 => y_i = y_j
    for (i, j), arc in x.items():
        model.add_constraint({y[i]: 1.0, y[j]: -1.0, arc: n}, '<=', n, name=f"same_cycle[{i},{j}]")
        model.add_constraint({y[j]: 1.0, y[i]: -1.0, arc: n}, '<=', n, name=f"same_cycle[{j},{i}]")

    # x_ij = 1 => u_i + 1 <= u_j or z_i = 1
    for (i, j), arc in x.items():
        model.add_constraint(
            {u[i]: 1.0, u[j]: -1.0, arc: k, z[i]: -k},
            '<=',
            k - 1,
            name=f"position[{i},{j}]",
        )

    return model
