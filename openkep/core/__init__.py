"""
Core module - instances, graph algorithms and the solver-neutral model.

Components:
----------
- Instance: Compatibility graph (adjacency and weight matrices)
- generate_instance: Deterministic pseudo-random instance generator
- CycleEnumerator: Bounded, canonical cycle enumeration
- PathEnumerator: Exact-length path enumeration
- shortest_path_distances / feasible_layered_arcs: Extended edge layering
- Model: Variables, constraints and objective handed to a solver adapter
"""

from openkep.core.enumeration import (
    CycleEnumerator,
    PathEnumerator,
    canonical_cycle,
    cycle_arcs,
    path_arcs,
)
from openkep.core.instance import Instance, generate_instance
from openkep.core.layering import (
    UNREACHABLE,
    feasible_layered_arcs,
    is_layer_feasible,
    shortest_path_distances,
)
from openkep.core.model import LinearConstraint, Model, Variable, VarType

__all__ = [
    # Instances
    "Instance",
    "generate_instance",
    # Enumeration
    "CycleEnumerator",
    "PathEnumerator",
    "canonical_cycle",
    "cycle_arcs",
    "path_arcs",
    # Layering
    "UNREACHABLE",
    "shortest_path_distances",
    "is_layer_feasible",
    "feasible_layered_arcs",
    # Model
    "Model",
    "Variable",
    "VarType",
    "LinearConstraint",
]
