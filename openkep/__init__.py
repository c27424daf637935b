"""
OpenKEP: Integer Programming Formulations for the Kidney Exchange Problem

Six interchangeable MILP formulations of the cycle-only KEP, a
deterministic instance generator, solver adapters (HiGHS, CPLEX, Gurobi)
with lazy row generation, and an experiment runner.
"""

__version__ = "0.1.0"

# Configuration
from openkep.config import KepConfig, config

# Core classes - these are the main user-facing API
from openkep.core.enumeration import CycleEnumerator, PathEnumerator
from openkep.core.instance import Instance, generate_instance
from openkep.core.layering import feasible_layered_arcs, shortest_path_distances
from openkep.core.model import LinearConstraint, Model

# Formulations
from openkep.formulations import FORMULATIONS, build, get_formulation

# Solvers
from openkep.solver import (
    HIGHS_AVAILABLE,
    HiGHSSolver,
    SolutionStatus,
    SolverAdapter,
    SolveResult,
    create_solver,
)

# Experiments
from openkep.runner import RunConfig, RunResult, run_config, run_formulation, run_many

__all__ = [
    # Version
    "__version__",
    # Configuration
    "KepConfig",
    "config",
    # Core classes
    "Instance",
    "generate_instance",
    "CycleEnumerator",
    "PathEnumerator",
    "shortest_path_distances",
    "feasible_layered_arcs",
    "Model",
    "LinearConstraint",
    # Formulations
    "FORMULATIONS",
    "build",
    "get_formulation",
    # Solvers
    "SolverAdapter",
    "SolveResult",
    "SolutionStatus",
    "HiGHSSolver",
    "HIGHS_AVAILABLE",
    "create_solver",
    # Experiments
    "RunConfig",
    "RunResult",
    "run_config",
    "run_formulation",
    "run_many",
]
