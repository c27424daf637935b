"""
Arc formulations that add their length constraints lazily.

Both start from the arc core model without any length constraint and
attach a separator. The solver adapter calls the separator at every
integer-feasible candidate and adds the returned cuts.

- arcPathRowGen: cuts (k+1)-node paths found in the candidate
- arcCycleRowGen: cuts cycles longer than k found in the candidate
"""

from openkep.core.instance import Instance
from openkep.core.model import Model
from openkep.formulations.base import build_arc_model, validate_k
from openkep.formulations.separation import CycleSeparator, PathSeparator


def build_arc_path_row_gen(instance: Instance, k: int) -> Model:
    """Build the arc formulation with lazily generated long-path cuts."""
    validate_k(k)
    model, x = build_arc_model("arcPathRowGen", instance)
    model.set_separator(PathSeparator(x, k, instance.num_nodes))
    return model


def build_arc_cycle_row_gen(instance: Instance, k: int) -> Model:
    """Build the arc formulation with lazily generated long-cycle cuts."""
    validate_k(k)
    model, x = build_arc_model("arcCycleRowGen", instance)
    model.set_separator(CycleSeparator(x, k, instance.num_nodes))
    return model
