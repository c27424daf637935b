"""
Solver module - MILP solver adapters for the solver-neutral models.

Formulations build an openkep.core.Model; an adapter translates it into a
concrete solver, solves it and runs row generation for models that carry a
separator.

This module provides:
- SolverAdapter: Abstract base class for custom implementations
- HiGHSSolver: Default implementation using HiGHS (re-solve row generation)
- CPLEXSolver: Optional implementation using docplex (re-solve row generation)
- GurobiSolver: Optional implementation using gurobipy (lazy-constraint callbacks)
- SolveResult: Result data structure
- SolutionStatus: Enum for solution status
- create_solver: Factory by solver name

Usage:
------
    >>> from openkep.formulations import build
    >>> from openkep.solver import create_solver
    >>>
    >>> model = build("arcPathRowGen", instance, k=3)
    >>> solver = create_solver("highs", time_limit=1800)
    >>> solver.load(model)
    >>> result = solver.optimize()
    >>> print(f"Weight: {-result.objective_value:.4f} ({result.num_cuts} cuts)")
"""

from typing import Any

from openkep.solver.solution import SolutionStatus, SolveResult
from openkep.solver.base import SolverAdapter

# Try to import HiGHS implementation
try:
    from openkep.solver.highs import HiGHSSolver, HIGHS_AVAILABLE
except ImportError:
    HIGHS_AVAILABLE = False
    HiGHSSolver = None  # type: ignore

# Try to import CPLEX implementation
try:
    from openkep.solver.cplex import CPLEXSolver, CPLEX_AVAILABLE
except ImportError:
    CPLEX_AVAILABLE = False
    CPLEXSolver = None  # type: ignore

# Try to import Gurobi implementation
try:
    from openkep.solver.gurobi import GurobiSolver, GUROBI_AVAILABLE
except ImportError:
    GUROBI_AVAILABLE = False
    GurobiSolver = None  # type: ignore


SOLVERS = {
    'highs': HiGHSSolver,
    'cplex': CPLEXSolver,
    'gurobi': GurobiSolver,
}


def available_solvers() -> list[str]:
    """Names of the solvers whose backend is installed."""
    flags = {
        'highs': HIGHS_AVAILABLE,
        'cplex': CPLEX_AVAILABLE,
        'gurobi': GUROBI_AVAILABLE,
    }
    return [name for name, available in flags.items() if available]


def create_solver(name: str, **options: Any) -> SolverAdapter:
    """
    Create a solver adapter by name.

    Args:
        name: One of 'highs', 'cplex', 'gurobi' (case-insensitive)
        **options: Passed to the adapter (time_limit, mip_gap, threads, verbosity)

    Raises:
        ValueError: If the name is unknown
        ImportError: If the backend is not installed
    """
    key = name.lower()
    if key not in SOLVERS:
        raise ValueError(
            f"Unknown solver '{name}'. Available: {', '.join(sorted(SOLVERS))}"
        )

    solver_class = SOLVERS[key]
    if solver_class is None:
        raise ImportError(f"Solver '{key}' is not installed")

    return solver_class(**options)


__all__ = [
    # Result
    'SolveResult',
    'SolutionStatus',

    # Base class
    'SolverAdapter',

    # HiGHS implementation
    'HiGHSSolver',
    'HIGHS_AVAILABLE',

    # CPLEX implementation
    'CPLEXSolver',
    'CPLEX_AVAILABLE',

    # Gurobi implementation
    'GurobiSolver',
    'GUROBI_AVAILABLE',

    # Factory
    'SOLVERS',
    'available_solvers',
    'create_solver',
]
