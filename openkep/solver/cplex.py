"""
CPLEX implementation of the solver adapter.

This module provides a solver adapter using IBM CPLEX through the docplex
modelling API.

Row-generation formulations use the re-solve protocol of SolverAdapter:
cuts are added to the docplex model between solves.

Usage:
    >>> from openkep.solver import CPLEXSolver
    >>> solver = CPLEXSolver(time_limit=300)
    >>> solver.load(model)
    >>> result = solver.optimize()

Requirements:
    - IBM CPLEX must be installed
    - docplex package: pip install docplex
    - CPLEX Python API configured
"""

import time
from typing import Any, Optional

try:
    from docplex.mp.model import Model as CplexModel
    CPLEX_AVAILABLE = True
except ImportError:
    CPLEX_AVAILABLE = False
    CplexModel = None

from openkep.core.model import LinearConstraint, Model, VarType
from openkep.solver.base import SolverAdapter
from openkep.solver.solution import SolutionStatus, SolveResult


def _map_cplex_status(solve_status: Any) -> SolutionStatus:
    """Map CPLEX solve status to our SolutionStatus."""
    if not CPLEX_AVAILABLE:
        return SolutionStatus.ERROR

    # Check solve status
    if solve_status is None:
        return SolutionStatus.NOT_SOLVED

    status_name = str(solve_status).lower()

    if 'optimal' in status_name:
        return SolutionStatus.OPTIMAL
    elif 'infeasible' in status_name:
        return SolutionStatus.INFEASIBLE
    elif 'unbounded' in status_name:
        return SolutionStatus.UNBOUNDED
    elif 'time' in status_name or 'limit' in status_name:
        return SolutionStatus.TIME_LIMIT
    elif 'feasible' in status_name:
        return SolutionStatus.FEASIBLE
    else:
        return SolutionStatus.ERROR


class CPLEXSolver(SolverAdapter):
    """
    Solver adapter using IBM CPLEX.

    Example:
        >>> from openkep.solver import CPLEXSolver
        >>> solver = CPLEXSolver(time_limit=300, threads=1)
        >>> solver.load(model)
        >>> result = solver.optimize()

    Attributes:
        time_limit: Maximum solve time in seconds (None = no limit)
        verbosity: CPLEX output level (0 = silent, 1+ = verbose)
        threads: Number of threads to use (0 = automatic)
    """

    name = "cplex"

    def __init__(
        self,
        time_limit: Optional[float] = None,
        mip_gap: float = 0.0,
        threads: int = 1,
        verbosity: int = 0,
    ):
        """
        Initialize the CPLEX adapter.

        Raises:
            ImportError: If docplex/CPLEX is not available
        """
        if not CPLEX_AVAILABLE:
            raise ImportError(
                "CPLEX is not available. Install it with: pip install docplex\n"
                "Also ensure IBM CPLEX is installed and configured."
            )

        super().__init__(time_limit, mip_gap, threads, verbosity)

        # CPLEX model (created in _load_impl)
        self._cplex: Optional[CplexModel] = None

        # docplex variables in model index order
        self._vars: list = []

    # =========================================================================
    # Abstract Method Implementations
    # =========================================================================

    def _load_impl(self, model: Model) -> None:
        """Build the docplex model."""
        self._cplex = CplexModel(name=model.name)

        # Set solver parameters
        self._cplex.context.solver.log_output = self._verbosity > 0

        if self._time_limit is not None:
            self._cplex.set_time_limit(self._time_limit)

        if self._threads > 0:
            self._cplex.context.cplex_parameters.threads = self._threads

        self._cplex.parameters.mip.tolerances.mipgap = self._mip_gap

        self._vars = []
        for var in model.variables:
            if var.vtype == VarType.BINARY:
                dvar = self._cplex.binary_var(name=var.name)
            elif var.vtype == VarType.INTEGER:
                dvar = self._cplex.integer_var(lb=var.lower, ub=var.upper, name=var.name)
            else:
                dvar = self._cplex.continuous_var(lb=var.lower, ub=var.upper, name=var.name)
            self._vars.append(dvar)

        self._add_constraints_impl(model.constraints)

        self._cplex.minimize(
            self._cplex.scal_prod(
                [self._vars[v.index] for v in model.variables],
                [v.cost for v in model.variables],
            )
        )

    def _optimize_impl(self) -> SolveResult:
        """Run CPLEX once."""
        start_time = time.time()

        solution = self._cplex.solve()

        solve_time = time.time() - start_time

        details = self._cplex.solve_details

        # Get status
        if solution is None:
            status = _map_cplex_status(details.status if details else None)
        else:
            status = _map_cplex_status(self._cplex.solve_status)

        result = SolveResult(
            status=status,
            solve_time=solve_time,
            message=details.status if details else "",
        )

        # Extract solution if available
        if solution is not None:
            result.objective_value = solution.objective_value
            result.gap = details.mip_relative_gap
            values = solution.get_values(self._vars)
            result.values = {idx: float(value) for idx, value in enumerate(values)}

        return result

    def _add_constraints_impl(self, constraints: list[LinearConstraint]) -> None:
        """Add constraints to the docplex model."""
        cts = []
        for constraint in constraints:
            expr = self._cplex.scal_prod(
                [self._vars[idx] for idx in constraint.indices],
                constraint.coefficients,
            )
            if constraint.sense == '<=':
                cts.append(expr <= constraint.rhs)
            elif constraint.sense == '>=':
                cts.append(expr >= constraint.rhs)
            else:
                cts.append(expr == constraint.rhs)
        if cts:
            self._cplex.add_constraints(cts)

    def _set_time_limit_impl(self, seconds: float) -> None:
        self._cplex.set_time_limit(seconds)

    # =========================================================================
    # CPLEX-specific Methods
    # =========================================================================

    def get_model_stats(self) -> dict[str, Any]:
        """
        Get statistics about the loaded model.

        Returns:
            Dictionary with model statistics
        """
        if self._cplex is None:
            return {'num_variables': 0, 'num_constraints': 0}
        return {
            'num_variables': self._cplex.number_of_variables,
            'num_constraints': self._cplex.number_of_constraints,
        }
