"""
Gurobi implementation of the solver adapter.

Gurobi calls back into Python whenever its search finds a new
integer-feasible candidate (``GRB.Callback.MIPSOL``). For row-generation
formulations this adapter enables lazy constraints and registers a callback
that reads the candidate with ``cbGetSolution``, hands it to the model's
separator and injects every returned cut with ``cbLazy``. Lazy constraints
added this way are global: Gurobi keeps them for the rest of the search.

Usage:
    >>> from openkep.solver import GurobiSolver
    >>> solver = GurobiSolver(time_limit=1800, threads=1)
    >>> solver.load(model)
    >>> result = solver.optimize()

Requirements:
    - gurobipy package: pip install gurobipy
    - A Gurobi license for models beyond the size-limited trial
"""

import time
from typing import Any, Optional

try:
    import gurobipy as gp
    from gurobipy import GRB
    GUROBI_AVAILABLE = True
except ImportError:
    GUROBI_AVAILABLE = False

from openkep.core.model import LinearConstraint, Model, Separator, VarType
from openkep.solver.base import SolverAdapter
from openkep.solver.solution import SolutionStatus, SolveResult


def _map_gurobi_status(status: int) -> SolutionStatus:
    """Map Gurobi optimization status to our SolutionStatus."""
    if not GUROBI_AVAILABLE:
        return SolutionStatus.ERROR

    status_map = {
        GRB.LOADED: SolutionStatus.NOT_SOLVED,
        GRB.OPTIMAL: SolutionStatus.OPTIMAL,
        GRB.INFEASIBLE: SolutionStatus.INFEASIBLE,
        GRB.INF_OR_UNBD: SolutionStatus.INF_OR_UNBOUNDED,
        GRB.UNBOUNDED: SolutionStatus.UNBOUNDED,
        GRB.ITERATION_LIMIT: SolutionStatus.ITERATION_LIMIT,
        GRB.NODE_LIMIT: SolutionStatus.NODE_LIMIT,
        GRB.TIME_LIMIT: SolutionStatus.TIME_LIMIT,
        GRB.SUBOPTIMAL: SolutionStatus.FEASIBLE,
    }

    return status_map.get(status, SolutionStatus.ERROR)


_VTYPES = {}
if GUROBI_AVAILABLE:
    _VTYPES = {
        VarType.BINARY: GRB.BINARY,
        VarType.INTEGER: GRB.INTEGER,
        VarType.CONTINUOUS: GRB.CONTINUOUS,
    }


class GurobiSolver(SolverAdapter):
    """
    Solver adapter using Gurobi, with native lazy-constraint callbacks.

    Example:
        >>> from openkep.formulations import build
        >>> model = build("arcCycleRowGen", instance, k=3)
        >>> solver = GurobiSolver(time_limit=60)
        >>> solver.load(model)
        >>> result = solver.optimize()
        >>> result.num_cuts  # cuts injected from the MIPSOL callback
    """

    name = "gurobi"
    supports_lazy_callbacks = True

    def __init__(
        self,
        time_limit: Optional[float] = None,
        mip_gap: float = 0.0,
        threads: int = 1,
        verbosity: int = 0,
    ):
        """
        Initialize the Gurobi adapter.

        Raises:
            ImportError: If gurobipy is not installed
        """
        if not GUROBI_AVAILABLE:
            raise ImportError(
                "Gurobi is not available. Install it with: pip install gurobipy"
            )

        super().__init__(time_limit, mip_gap, threads, verbosity)

        self._env: Optional[gp.Env] = None
        self._grb: Optional[gp.Model] = None
        self._vars: list = []
        self._num_cuts = 0

    # =========================================================================
    # Abstract Method Implementations
    # =========================================================================

    def _load_impl(self, model: Model) -> None:
        """Build the Gurobi model."""
        self._env = gp.Env(empty=True)
        self._env.setParam('OutputFlag', 1 if self._verbosity > 0 else 0)
        self._env.start()

        self._grb = gp.Model(model.name, env=self._env)
        self._grb.Params.MIPGap = self._mip_gap
        if self._threads > 0:
            self._grb.Params.Threads = self._threads
        if self._time_limit is not None:
            self._grb.Params.TimeLimit = self._time_limit

        self._vars = [
            self._grb.addVar(
                lb=var.lower,
                ub=var.upper,
                obj=var.cost,
                vtype=_VTYPES[var.vtype],
                name=var.name,
            )
            for var in model.variables
        ]
        self._grb.ModelSense = GRB.MINIMIZE

        self._add_constraints_impl(model.constraints)

        if model.separator is not None:
            self._grb.Params.LazyConstraints = 1

    def _optimize_impl(self) -> SolveResult:
        """Run Gurobi, with the separator callback if the model has one."""
        self._num_cuts = 0
        separator = self._model.separator

        start_time = time.time()
        if separator is None:
            self._grb.optimize()
        else:
            self._grb.optimize(self._make_callback(separator))
        solve_time = time.time() - start_time

        status = _map_gurobi_status(self._grb.Status)
        result = SolveResult(
            status=status,
            solve_time=solve_time,
            num_cuts=self._num_cuts,
            message=str(self._grb.Status),
        )

        if self._grb.SolCount > 0:
            result.objective_value = self._grb.ObjVal
            result.gap = self._grb.MIPGap
            values = self._grb.getAttr('X', self._vars)
            result.values = {idx: float(value) for idx, value in enumerate(values)}

        return result

    def _add_constraints_impl(self, constraints: list[LinearConstraint]) -> None:
        for constraint in constraints:
            self._grb.addLConstr(
                self._expr(constraint), _sense(constraint.sense), constraint.rhs,
                name=constraint.name,
            )

    def _set_time_limit_impl(self, seconds: float) -> None:
        self._grb.Params.TimeLimit = seconds

    # =========================================================================
    # Lazy constraints
    # =========================================================================

    def _make_callback(self, separator: Separator):
        """Callback that separates every new integer-feasible candidate."""
        variables = self._vars

        def callback(grb_model, where):
            if where != GRB.Callback.MIPSOL:
                return

            values = dict(enumerate(grb_model.cbGetSolution(variables)))
            for cut in separator(values):
                grb_model.cbLazy(self._expr(cut), _sense(cut.sense), cut.rhs)
                self._num_cuts += 1

        return callback

    def _expr(self, constraint: LinearConstraint) -> Any:
        return gp.LinExpr(
            constraint.coefficients,
            [self._vars[idx] for idx in constraint.indices],
        )

    # =========================================================================
    # Gurobi-specific Methods
    # =========================================================================

    def get_model_stats(self) -> dict[str, Any]:
        if self._grb is None:
            return {'num_variables': 0, 'num_constraints': 0}
        self._grb.update()
        return {
            'num_variables': self._grb.NumVars,
            'num_constraints': self._grb.NumConstrs,
        }

    def close(self) -> None:
        """Release the Gurobi model and environment."""
        if self._grb is not None:
            self._grb.dispose()
            self._grb = None
        if self._env is not None:
            self._env.dispose()
            self._env = None


def _sense(sense: str) -> str:
    return {'<=': GRB.LESS_EQUAL, '>=': GRB.GREATER_EQUAL, '==': GRB.EQUAL}[sense]
