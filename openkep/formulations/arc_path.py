"""
Arc formulation with static long-path constraints.

Every simple path with k+1 nodes has k arcs; a solution may use at most
k-1 of them. A cycle longer than k contains such a path, so this excludes
every long cycle up front.
"""

from openkep.core.enumeration import PathEnumerator
from openkep.core.instance import Instance
from openkep.core.model import Model
from openkep.formulations.base import build_arc_model, long_path_cut, validate_k


def build_arc_path(instance: Instance, k: int) -> Model:
    """Build the arc formulation with all long-path constraints."""
    validate_k(k)
    model, x = build_arc_model("arcPath", instance)

    model.add_constraints(
        long_path_cut(x, path, k) for path in PathEnumerator(instance.A, k + 1)
    )

    return model
