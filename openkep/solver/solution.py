"""
Solver result module.

This module defines the data structures returned by solver adapters.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional


class SolutionStatus(Enum):
    """
    Status of a MILP solve, as reported by the solver.
    """
    OPTIMAL = auto()           # Optimal solution found
    INFEASIBLE = auto()        # Problem is infeasible
    UNBOUNDED = auto()         # Problem is unbounded
    INF_OR_UNBOUNDED = auto()  # Infeasible or unbounded (solver couldn't determine)
    TIME_LIMIT = auto()        # Time limit reached (may have feasible solution)
    ITERATION_LIMIT = auto()   # Iteration limit reached
    NODE_LIMIT = auto()        # Node limit reached
    FEASIBLE = auto()          # Feasible solution, optimality not proven
    NOT_SOLVED = auto()        # Solve not called yet
    ERROR = auto()             # Solver error occurred


@dataclass
class SolveResult:
    """
    Result of solving a model with a solver adapter.

    Attributes:
        status: Solution status
        objective_value: Objective of the best solution (minimisation sense)
        values: Variable index -> value of the best solution
        solve_time: Wall-clock time spent in the solver, in seconds
        gap: Relative optimality gap (None if unknown)
        num_cuts: Lazy cuts added by the separator
        rounds: Solver invocations (more than one for re-solve row generation)
        message: Solver status text, unmodified

    Example:
        >>> result = solver.optimize()
        >>> if result.is_optimal:
        ...     print(f"Objective: {result.objective_value}")
    """
    status: SolutionStatus = SolutionStatus.NOT_SOLVED
    objective_value: Optional[float] = None
    values: Dict[int, float] = field(default_factory=dict)
    solve_time: float = 0.0
    gap: Optional[float] = None
    num_cuts: int = 0
    rounds: int = 0
    message: str = ""

    # =========================================================================
    # Convenience Properties
    # =========================================================================

    @property
    def is_optimal(self) -> bool:
        return self.status == SolutionStatus.OPTIMAL

    @property
    def has_solution(self) -> bool:
        """Check if a feasible solution is available."""
        return self.status in (
            SolutionStatus.OPTIMAL,
            SolutionStatus.FEASIBLE,
            SolutionStatus.TIME_LIMIT,
            SolutionStatus.ITERATION_LIMIT,
            SolutionStatus.NODE_LIMIT,
        ) and self.objective_value is not None

    def get_active_variables(self, tol: float = 0.5) -> List[int]:
        """Indices of variables with value above tol."""
        return [idx for idx, value in self.values.items() if value > tol]

    def summary(self) -> str:
        lines = [
            "SolveResult:",
            f"  Status: {self.status.name}",
        ]

        if self.objective_value is not None:
            lines.append(f"  Objective: {self.objective_value:.6f}")

        if self.gap is not None:
            lines.append(f"  Gap: {self.gap:.4%}")

        lines.append(f"  Solve time: {self.solve_time:.3f}s")

        if self.num_cuts:
            lines.append(f"  Lazy cuts: {self.num_cuts} in {self.rounds} rounds")

        return "\n".join(lines)

    def __repr__(self) -> str:
        obj_str = f", obj={self.objective_value:.4f}" if self.objective_value is not None else ""
        return f"SolveResult({self.status.name}{obj_str})"
