"""
Solver adapter abstract base class.

This module defines the interface between the solver-neutral Model built by
a formulation and a concrete MILP solver. Users can either:
1. Use one of the provided adapters (HiGHSSolver is the default)
2. Implement their own by subclassing SolverAdapter

Design Philosophy:
-----------------
- The adapter only translates; formulations never import a solver
- Required methods are abstract and must be implemented
- Hooks allow customization without full reimplementation
- Row generation is part of the interface: the adapter calls the model's
  separator at integer-feasible candidates and adds the returned cuts

Row Generation:
--------------
Solvers with a lazy-constraint callback (Gurobi) set
``supports_lazy_callbacks = True`` and call the separator from inside the
search, at every new integer-feasible candidate.

Solvers without one (HiGHS, CPLEX through docplex) use the default protocol
implemented here: solve the MIP, call the separator on the optimal
incumbent, add the cuts as rows and solve again with the remaining time
budget, until the separator finds nothing. Cuts are never removed, so
later rounds keep every cut found earlier.

Adapters whose solver reports each new incumbent during the search (HiGHS)
pass it to ``_separate_incumbent``. Its cuts are collected and added
together with the cuts of the round's final incumbent. The best incumbent
that violates no cut is kept, so a round that stops at the time limit
still reports a valid solution.

Customization Guide:
-------------------
To add a solver:

1. Subclass SolverAdapter
2. Implement _load_impl, _optimize_impl, _add_constraints_impl and
   _set_time_limit_impl
3. Optionally override the hooks

Example:
    >>> class MySolver(SolverAdapter):
    ...     def _load_impl(self, model: Model) -> None:
    ...         self._solver = mysolver.Model()
    ...         # ... add variables and constraints ...
    ...
    ...     def _optimize_impl(self) -> SolveResult:
    ...         ...
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Optional

from openkep.core.model import LinearConstraint, Model, Separator
from openkep.solver.solution import SolutionStatus, SolveResult


class SolverAdapter(ABC):
    """
    Abstract base class for MILP solver adapters.

    Lifecycle:
    ---------
    1. Create: solver = HiGHSSolver(time_limit=1800, threads=1)
    2. Load: solver.load(model)
    3. Solve: result = solver.optimize()

    Attributes:
        time_limit: Wall-clock limit in seconds for the whole solve (None = no limit)
        mip_gap: Relative optimality gap at which the solver stops (0 = prove optimality)
        threads: Solver threads (1 keeps separator calls deterministic)
        verbosity: Solver output level (0 = silent)
    """

    # Whether separators are called from inside the solver's search
    supports_lazy_callbacks: bool = False

    # Solver name used in messages and by create_solver
    name: str = "abstract"

    def __init__(
        self,
        time_limit: Optional[float] = None,
        mip_gap: float = 0.0,
        threads: int = 1,
        verbosity: int = 0,
    ):
        """
        Initialize the adapter.

        Args:
            time_limit: Maximum solve time in seconds (None = no limit)
            mip_gap: Relative MIP gap tolerance
            threads: Number of solver threads
            verbosity: Solver output level (0 = silent)
        """
        if time_limit is not None and time_limit <= 0:
            raise ValueError(f"Time limit must be positive, got {time_limit}")
        if mip_gap < 0:
            raise ValueError(f"MIP gap must be non-negative, got {mip_gap}")

        self._time_limit = time_limit
        self._mip_gap = mip_gap
        self._threads = threads
        self._verbosity = verbosity

        self._model: Optional[Model] = None

        # Row-generation state of the running solve
        self._separator: Optional[Separator] = None
        self._round_cuts: dict[LinearConstraint, None] = {}
        self._best_incumbent: Optional[tuple[float, dict[int, float]]] = None

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def model(self) -> Optional[Model]:
        """The loaded model (None before load)."""
        return self._model

    @property
    def time_limit(self) -> Optional[float]:
        return self._time_limit

    @property
    def mip_gap(self) -> float:
        return self._mip_gap

    @property
    def threads(self) -> int:
        return self._threads

    # =========================================================================
    # Abstract Methods (MUST be implemented by subclasses)
    # =========================================================================

    @abstractmethod
    def _load_impl(self, model: Model) -> None:
        """
        Create the solver model.

        This method should:
        1. Create the solver's model object and apply the options
        2. Add one solver variable per model variable, in index order
        3. Add every static constraint
        4. Set the objective (minimise)
        5. If the solver supports callbacks and the model has a separator,
           prepare the lazy-constraint callback
        """
        pass

    @abstractmethod
    def _optimize_impl(self) -> SolveResult:
        """
        Run the solver once.

        Returns:
            SolveResult with status, objective, values, solve time and gap
        """
        pass

    @abstractmethod
    def _add_constraints_impl(self, constraints: list[LinearConstraint]) -> None:
        """Add constraints to the already loaded solver model."""
        pass

    @abstractmethod
    def _set_time_limit_impl(self, seconds: float) -> None:
        """Set the time limit of the next solver run."""
        pass

    # =========================================================================
    # Public API
    # =========================================================================

    def load(self, model: Model) -> None:
        """
        Load a model into the solver.

        Args:
            model: The solver-neutral model
        """
        self._model = model
        if not model.is_empty:
            self._load_impl(model)

    def add_constraints(self, constraints: list[LinearConstraint]) -> None:
        """
        Add constraints to the loaded model.

        Raises:
            RuntimeError: If no model is loaded
        """
        self._require_model()
        if constraints:
            self._add_constraints_impl(constraints)

    def optimize(self) -> SolveResult:
        """
        Solve the loaded model.

        For models with a separator, row generation runs until no
        candidate violates a cut. The solver's status is returned as is.

        Returns:
            SolveResult

        Raises:
            RuntimeError: If no model is loaded
        """
        model = self._require_model()

        # Nothing to decide: the empty solution is optimal
        if model.is_empty:
            return SolveResult(
                status=SolutionStatus.OPTIMAL,
                objective_value=0.0,
                gap=0.0,
            )

        self._before_optimize()

        if model.separator is not None and not self.supports_lazy_callbacks:
            result = self._optimize_with_resolve(model.separator)
        else:
            result = self._optimize_impl()
            result.rounds = 1

        return self._after_optimize(result)

    # =========================================================================
    # Row generation by re-solving
    # =========================================================================

    def _optimize_with_resolve(self, separator: Separator) -> SolveResult:
        """
        Solve, separate the incumbents, add the cuts and solve again.

        Stops when the round's final incumbent violates no cut or the time
        budget is spent. A round that stops at a limit reports the best
        cut-free incumbent seen so far (the all-zero solution counts when it
        satisfies the model), or no solution if there is none.
        """
        model = self._require_model()
        elapsed = 0.0
        num_cuts = 0
        rounds = 0

        self._separator = separator
        self._round_cuts = {}
        self._best_incumbent = None

        try:
            zero = _zero_solution(model)
            if zero is not None:
                self._separate_incumbent(zero)
            self._round_cuts = {}

            while True:
                if self._time_limit is not None:
                    remaining = self._time_limit - elapsed
                    if remaining <= 0:
                        result = SolveResult(status=SolutionStatus.TIME_LIMIT)
                        break
                    self._set_time_limit_impl(remaining)

                result = self._optimize_impl()
                rounds += 1
                elapsed += result.solve_time

                final_cuts = []
                if result.has_solution:
                    final_cuts = self._separate_incumbent(result.values)

                cuts = list(self._round_cuts)
                self._round_cuts = {}
                if cuts:
                    self._add_constraints_impl(cuts)
                    num_cuts += len(cuts)

                if not result.has_solution or not final_cuts:
                    break

                if result.status != SolutionStatus.OPTIMAL:
                    # Stopped early on a candidate that the cuts just excluded
                    result = SolveResult(status=result.status, message=result.message)
                    break

            best = self._best_incumbent
            if result.status in _LIMIT_STATUSES and best is not None:
                objective, values = best
                if not result.has_solution or objective < result.objective_value:
                    result = SolveResult(
                        status=result.status,
                        objective_value=objective,
                        values=dict(values),
                        message=result.message,
                    )
        finally:
            self._separator = None
            self._round_cuts = {}
            if self._time_limit is not None:
                self._set_time_limit_impl(self._time_limit)

        result.solve_time = elapsed
        result.num_cuts = num_cuts
        result.rounds = rounds
        return result

    def _separate_incumbent(self, values: Mapping[int, float]) -> list[LinearConstraint]:
        """
        Separate an integer-feasible incumbent of the running round.

        Adapters call this for every incumbent their solver reports during
        the search. Violated cuts are kept for the next round; a cut-free
        incumbent becomes the best known solution when it improves on it.
        Outside a row-generation solve it does nothing.

        Returns:
            The cuts the incumbent violates
        """
        if self._separator is None:
            return []

        cuts = self._separator(values)
        if cuts:
            for cut in cuts:
                self._round_cuts[cut] = None
            return cuts

        objective = self._model.objective_value(values)
        if self._best_incumbent is None or objective < self._best_incumbent[0]:
            self._best_incumbent = (objective, dict(values))
        return cuts

    # =========================================================================
    # Hooks (override for custom behavior)
    # =========================================================================

    def _before_optimize(self) -> None:
        """Hook called before solving."""
        pass

    def _after_optimize(self, result: SolveResult) -> SolveResult:
        """Hook called after solving. May modify the result."""
        return result

    def close(self) -> None:
        """Release solver-side resources. The adapter is unusable afterwards."""
        pass

    # =========================================================================
    # Internal Methods
    # =========================================================================

    def _require_model(self) -> Model:
        if self._model is None:
            raise RuntimeError(f"{self.__class__.__name__}: no model loaded, call load() first")
        return self._model

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"time_limit={self._time_limit}, "
            f"mip_gap={self._mip_gap}, "
            f"threads={self._threads})"
        )


# Statuses of a solve stopped by a limit, which may still carry a solution
_LIMIT_STATUSES = (
    SolutionStatus.TIME_LIMIT,
    SolutionStatus.ITERATION_LIMIT,
    SolutionStatus.NODE_LIMIT,
)


def _zero_solution(model: Model) -> Optional[dict[int, float]]:
    """The all-zero assignment if it satisfies the bounds and constraints."""
    if any(var.lower > 0.0 or var.upper < 0.0 for var in model.variables):
        return None
    values = {var.index: 0.0 for var in model.variables}
    if model.violated_constraints(values):
        return None
    return values
