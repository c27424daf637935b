"""
Formulations module - six integer programs for the same KEP.

Every builder takes an instance and the maximum cycle length k and returns
a solver-neutral Model that minimises the negated total weight. For a fixed
instance and k all six have the same optimal objective; they differ in how
cycles longer than k are excluded:

    cycle            one variable per enumerated cycle of length <= k
    arcPath          arc variables + a cut per (k+1)-node path
    arcPathRowGen    arc variables + lazily separated path cuts
    arcCycleRowGen   arc variables + lazily separated long-cycle cuts
    edge             layered arc variables (extended edge formulation)
    mtz              arc variables + cycle id / position / last-node variables

The set is closed. Select a variant by name:

    >>> from openkep.formulations import build
    >>> model = build("edge", instance, k=3)
"""

from typing import Callable

from openkep.core.instance import Instance
from openkep.core.model import Model
from openkep.formulations.arc_path import build_arc_path
from openkep.formulations.base import validate_k
from openkep.formulations.cycle import build_cycle
from openkep.formulations.extended_edge import build_extended_edge
from openkep.formulations.mtz import build_mtz
from openkep.formulations.row_generation import (
    build_arc_cycle_row_gen,
    build_arc_path_row_gen,
)
from openkep.formulations.separation import (
    CycleSeparator,
    PathSeparator,
    SeparatorState,
)

Builder = Callable[[Instance, int], Model]

FORMULATIONS: dict[str, Builder] = {
    "arcCycleRowGen": build_arc_cycle_row_gen,
    "arcPath": build_arc_path,
    "arcPathRowGen": build_arc_path_row_gen,
    "cycle": build_cycle,
    "edge": build_extended_edge,
    "mtz": build_mtz,
}


def get_formulation(name: str) -> Builder:
    """
    Look up a formulation builder by name.

    Raises:
        ValueError: If the name is unknown
    """
    try:
        return FORMULATIONS[name]
    except KeyError:
        raise ValueError(
            f"Unknown formulation '{name}'. "
            f"Available: {', '.join(sorted(FORMULATIONS))}"
        ) from None


def build(name: str, instance: Instance, k: int) -> Model:
    """
    Build the named formulation for an instance.

    The name and k are validated before any enumeration starts.

    Raises:
        ValueError: If the name is unknown or k < 1
    """
    builder = get_formulation(name)
    validate_k(k)
    return builder(instance, k)


__all__ = [
    "FORMULATIONS",
    "get_formulation",
    "build",
    "build_cycle",
    "build_arc_path",
    "build_arc_path_row_gen",
    "build_arc_cycle_row_gen",
    "build_extended_edge",
    "build_mtz",
    "PathSeparator",
    "CycleSeparator",
    "SeparatorState",
]
