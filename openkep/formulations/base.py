"""
Shared building blocks of the arc-based formulations.

ArcPath, ArcPathRowGen, ArcCycleRowGen and Mtz all start from the same
core model: one binary x[i, j] per arc, the objective -sum(w[i, j] x[i, j])
and, per node,

    sum of arcs entering the node == sum of arcs leaving the node
    sum of arcs leaving the node <= 1

They differ only in how cycles longer than k are excluded.
"""

from collections.abc import Sequence

from openkep.core.enumeration import cycle_arcs, path_arcs
from openkep.core.expressions import arc_sum, inflow, outflow
from openkep.core.instance import Instance
from openkep.core.model import LinearConstraint, Model

ArcVars = dict[tuple[int, int], int]


def validate_k(k: int) -> None:
    """
    Raises:
        ValueError: If k < 1
    """
    if k < 1:
        raise ValueError(f"Maximum cycle length k must be at least 1, got {k}")


def add_arc_variables(model: Model, instance: Instance) -> ArcVars:
    """One binary per arc, costing minus its weight. Registered as group "x"."""
    x: ArcVars = {}
    for i, j in instance.arcs():
        x[i, j] = model.add_binary_var(f"x[{i},{j}]", cost=-instance.weight(i, j))
    return model.add_group("x", x)


def add_degree_constraints(model: Model, instance: Instance, x: ArcVars) -> None:
    """in == out and out <= 1 for every node."""
    x_in = inflow(x)
    x_out = outflow(x)

    for node in range(instance.num_nodes):
        model.add_comparison(
            x_in.get(node, {}), '==', x_out.get(node, {}), name=f"in==out[{node}]"
        )
    for node in range(instance.num_nodes):
        model.add_constraint(x_out.get(node, {}), '<=', 1.0, name=f"out<=1[{node}]")


def build_arc_model(name: str, instance: Instance) -> tuple[Model, ArcVars]:
    """The shared arc core: variables, objective and degree constraints."""
    model = Model(name)
    x = add_arc_variables(model, instance)
    add_degree_constraints(model, instance, x)
    return model, x


def long_path_cut(x: ArcVars, path: Sequence[int], k: int) -> LinearConstraint:
    """
    Forbid realising all k arcs of a (k+1)-node path.

    Raises:
        KeyError: If an arc of the path has no variable
    """
    arcs = path_arcs(path)
    return LinearConstraint.from_expr(arc_sum(x, arcs), '<=', k - 1, name="long path")


def long_cycle_cut(x: ArcVars, cycle: Sequence[int]) -> LinearConstraint:
    """
    Forbid realising all arcs of a cycle: sum <= len(cycle) - 1.

    Raises:
        KeyError: If an arc of the cycle has no variable
    """
    arcs = cycle_arcs(cycle)
    return LinearConstraint.from_expr(
        arc_sum(x, arcs), '<=', len(cycle) - 1, name="long cycle"
    )
