"""
Cycle formulation.

One binary per cycle of at most k nodes; the length bound is implicit in
the enumeration. Each node is covered by at most one chosen cycle (set
packing).
"""

from openkep.core.enumeration import CycleEnumerator, cycle_arcs
from openkep.core.instance import Instance
from openkep.core.model import LinearExpr, Model
from openkep.formulations.base import validate_k


def build_cycle(instance: Instance, k: int) -> Model:
    """
    Build the cycle formulation.

    Variables are registered as group "c", keyed by the canonical cycle.
    """
    validate_k(k)
    model = Model("cycle")

    cycles = model.add_group("c", {})
    covering: dict[int, LinearExpr] = {}

    for cycle in CycleEnumerator(instance.A, k):
        cost = -sum(instance.weight(i, j) for i, j in cycle_arcs(cycle))
        var = model.add_binary_var(f"c{list(cycle)}", cost=cost)
        cycles[cycle] = var
        for node in cycle:
            covering.setdefault(node, {})[var] = 1.0

    for node in sorted(covering):
        model.add_constraint(covering[node], '<=', 1.0, name=f"pack[{node}]")

    return model
