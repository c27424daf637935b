"""
HiGHS implementation of the solver adapter.

This module provides the default solver adapter, using HiGHS through the
highspy Python bindings.

HiGHS is the default solver for OpenKEP because:
- Open source (MIT license)
- Competitive MIP performance
- Good Python bindings (highspy)
- Installs from PyPI without a license

HiGHS offers no way to inject lazy constraints during its search, so the
row-generation formulations use the re-solve protocol of SolverAdapter.
The adapter subscribes to HiGHS's MIP-solution callback, so every
incumbent found during a round is separated, not just the round's optimum.

Usage:
    >>> from openkep.solver import HiGHSSolver
    >>> solver = HiGHSSolver(time_limit=60)
    >>> solver.load(model)
    >>> result = solver.optimize()
"""

import time
from typing import Any, Dict, List, Optional

import numpy as np

try:
    import highspy
    HIGHS_AVAILABLE = True
except ImportError:
    HIGHS_AVAILABLE = False

from openkep.core.model import LinearConstraint, Model, VarType
from openkep.solver.base import SolverAdapter
from openkep.solver.solution import SolutionStatus, SolveResult

# HighsInfo.primal_solution_status value for "feasible solution available"
_PRIMAL_FEASIBLE = 2


# HiGHS status mapping
def _map_highs_status(status: Any) -> SolutionStatus:
    """Map HiGHS model status to our SolutionStatus."""
    if not HIGHS_AVAILABLE:
        return SolutionStatus.ERROR

    status_map = {
        highspy.HighsModelStatus.kNotset: SolutionStatus.NOT_SOLVED,
        highspy.HighsModelStatus.kLoadError: SolutionStatus.ERROR,
        highspy.HighsModelStatus.kModelError: SolutionStatus.ERROR,
        highspy.HighsModelStatus.kPresolveError: SolutionStatus.ERROR,
        highspy.HighsModelStatus.kSolveError: SolutionStatus.ERROR,
        highspy.HighsModelStatus.kPostsolveError: SolutionStatus.ERROR,
        highspy.HighsModelStatus.kModelEmpty: SolutionStatus.OPTIMAL,
        highspy.HighsModelStatus.kOptimal: SolutionStatus.OPTIMAL,
        highspy.HighsModelStatus.kInfeasible: SolutionStatus.INFEASIBLE,
        highspy.HighsModelStatus.kUnbounded: SolutionStatus.UNBOUNDED,
        highspy.HighsModelStatus.kUnboundedOrInfeasible: SolutionStatus.INF_OR_UNBOUNDED,
        highspy.HighsModelStatus.kTimeLimit: SolutionStatus.TIME_LIMIT,
        highspy.HighsModelStatus.kIterationLimit: SolutionStatus.ITERATION_LIMIT,
    }

    return status_map.get(status, SolutionStatus.ERROR)


class HiGHSSolver(SolverAdapter):
    """
    Solver adapter using HiGHS.

    Features:
    - Binary, integer and continuous variables
    - Incremental row addition for re-solve row generation
    - Time limit and relative gap

    Example:
        >>> from openkep.formulations import build
        >>> from openkep.solver import HiGHSSolver
        >>>
        >>> model = build("cycle", instance, k=3)
        >>> solver = HiGHSSolver(time_limit=60)
        >>> solver.load(model)
        >>> result = solver.optimize()
        >>> print(f"Weight: {-result.objective_value}")

    Note:
        Row-generation models are separated at every incumbent HiGHS reports
        through its MIP-solution callback.
    """

    name = "highs"

    def __init__(
        self,
        time_limit: Optional[float] = None,
        mip_gap: float = 0.0,
        threads: int = 1,
        verbosity: int = 0,
    ):
        """
        Initialize the HiGHS adapter.

        Raises:
            ImportError: If highspy is not installed
        """
        if not HIGHS_AVAILABLE:
            raise ImportError(
                "HiGHS is not available. Install it with: pip install highspy"
            )

        super().__init__(time_limit, mip_gap, threads, verbosity)

        # HiGHS model (created in _load_impl)
        self._highs: Optional[highspy.Highs] = None

    # =========================================================================
    # Abstract Method Implementations
    # =========================================================================

    def _load_impl(self, model: Model) -> None:
        """Build the HiGHS model."""
        self._highs = highspy.Highs()

        # Set options
        self._highs.setOptionValue('output_flag', self._verbosity > 0)
        self._highs.setOptionValue('log_to_console', self._verbosity > 0)
        self._highs.setOptionValue('mip_rel_gap', self._mip_gap)
        self._highs.setOptionValue('threads', self._threads)

        if self._time_limit is not None:
            self._highs.setOptionValue('time_limit', float(self._time_limit))

        self._highs.changeObjectiveSense(highspy.ObjSense.kMinimize)

        no_indices = np.array([], dtype=np.int32)
        no_values = np.array([], dtype=np.float64)

        for var in model.variables:
            # addCol(cost, lower, upper, num_nz, indices, values)
            self._highs.addCol(var.cost, var.lower, var.upper, 0, no_indices, no_values)
            if var.vtype != VarType.CONTINUOUS:
                self._highs.changeColIntegrality(
                    var.index, highspy.HighsVarType.kInteger
                )

        self._add_constraints_impl(model.constraints)

        if model.separator is not None:
            self._highs.cbMipSolution.subscribe(self._on_mip_solution)

    def _optimize_impl(self) -> SolveResult:
        """Run HiGHS once."""
        start_time = time.time()

        self._highs.run()
        # The scheduler is global; resetting it lets the next run apply its threads option
        highspy.Highs.resetGlobalScheduler(False)

        solve_time = time.time() - start_time

        model_status = self._highs.getModelStatus()
        status = _map_highs_status(model_status)

        result = SolveResult(
            status=status,
            solve_time=solve_time,
            message=self._highs.modelStatusToString(model_status),
        )

        info = self._highs.getInfo()
        if info.primal_solution_status == _PRIMAL_FEASIBLE:
            result.objective_value = info.objective_function_value
            result.gap = info.mip_gap

            sol = self._highs.getSolution()
            result.values = {
                idx: float(value) for idx, value in enumerate(sol.col_value)
            }

        return result

    def _add_constraints_impl(self, constraints: List[LinearConstraint]) -> None:
        """Add rows to HiGHS."""
        for constraint in constraints:
            lower, upper = self._row_bounds(constraint)
            indices = np.array(constraint.indices, dtype=np.int32)
            values = np.array(constraint.coefficients, dtype=np.float64)
            self._highs.addRow(lower, upper, len(indices), indices, values)

    def _set_time_limit_impl(self, seconds: float) -> None:
        self._highs.setOptionValue('time_limit', float(seconds))

    # =========================================================================
    # HiGHS-specific Methods
    # =========================================================================

    def _on_mip_solution(self, event: Any) -> None:
        """MIP-solution callback: separate the new incumbent."""
        solution = event.data_out.mip_solution
        # Sub-MIP solutions live in a reduced space
        if len(solution) != self._model.num_variables:
            return
        self._separate_incumbent(
            {idx: float(value) for idx, value in enumerate(solution)}
        )

    @staticmethod
    def _row_bounds(constraint: LinearConstraint) -> tuple:
        """Translate a sense and rhs into HiGHS row bounds."""
        if constraint.sense == '<=':
            return -highspy.kHighsInf, constraint.rhs
        if constraint.sense == '>=':
            return constraint.rhs, highspy.kHighsInf
        return constraint.rhs, constraint.rhs

    def get_model_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the loaded model.

        Returns:
            Dictionary with model statistics
        """
        if self._highs is None:
            return {'num_columns': 0, 'num_rows': 0, 'num_nonzeros': 0}
        return {
            'num_columns': self._highs.getNumCol(),
            'num_rows': self._highs.getNumRow(),
            'num_nonzeros': self._highs.getNumNz(),
        }
