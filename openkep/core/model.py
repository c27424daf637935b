"""
Model module - solver-neutral integer programs.

A formulation builder does not talk to a solver. It produces a Model: a
list of variables, a list of linear constraints and an objective to
minimise. A solver adapter then loads the Model into a concrete solver.

Linear expressions are plain ``dict[int, float]`` maps from variable index
to coefficient. Constraints are immutable and hashable, which makes cuts
from the separator directly comparable.

Row Generation:
--------------
A Model may carry a separator: a callable that receives the values of an
integer-feasible candidate (variable index -> value) and returns the
constraints that candidate violates. Adapters call it during the solve and
add the returned cuts as globally valid constraints.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Optional

LinearExpr = dict[int, float]

Separator = Callable[[Mapping[int, float]], list['LinearConstraint']]

SENSES = ('<=', '>=', '==')


class VarType(Enum):
    """Domain of a variable."""
    BINARY = auto()
    INTEGER = auto()
    CONTINUOUS = auto()


@dataclass(frozen=True)
class Variable:
    """
    A decision variable.

    Attributes:
        index: Position in Model.variables
        name: Human-readable name, e.g. "x[0,3]"
        lower: Lower bound
        upper: Upper bound
        vtype: Variable domain
        cost: Objective coefficient (the objective is minimised)
    """
    index: int
    name: str
    lower: float = 0.0
    upper: float = 1.0
    vtype: VarType = VarType.BINARY
    cost: float = 0.0


@dataclass(frozen=True)
class LinearConstraint:
    """
    sum(coefficient * variable) <sense> rhs

    Attributes:
        terms: (variable index, coefficient) pairs, sorted by index
        sense: One of '<=', '>=', '=='
        rhs: Right-hand side
        name: Optional name (not part of equality)
    """
    terms: tuple[tuple[int, float], ...]
    sense: str
    rhs: float
    name: str = field(default="", compare=False)

    def __post_init__(self):
        if self.sense not in SENSES:
            raise ValueError(f"Unknown constraint sense '{self.sense}', expected one of {SENSES}")

    @classmethod
    def from_expr(
        cls,
        expr: Mapping[int, float],
        sense: str,
        rhs: float,
        name: str = "",
    ) -> 'LinearConstraint':
        """Build a constraint from a coefficient map, dropping zero terms."""
        terms = tuple(sorted((idx, coef) for idx, coef in expr.items() if coef != 0.0))
        return cls(terms=terms, sense=sense, rhs=float(rhs), name=name)

    @property
    def indices(self) -> list[int]:
        return [idx for idx, _ in self.terms]

    @property
    def coefficients(self) -> list[float]:
        return [coef for _, coef in self.terms]

    def lhs(self, values: Mapping[int, float]) -> float:
        """Evaluate the left-hand side at the given values."""
        return sum(coef * values.get(idx, 0.0) for idx, coef in self.terms)

    def violation(self, values: Mapping[int, float]) -> float:
        """Amount by which the values violate the constraint (0 if satisfied)."""
        lhs = self.lhs(values)
        if self.sense == '<=':
            return max(0.0, lhs - self.rhs)
        if self.sense == '>=':
            return max(0.0, self.rhs - lhs)
        return abs(lhs - self.rhs)

    def is_violated(self, values: Mapping[int, float], tol: float = 1e-6) -> bool:
        return self.violation(values) > tol

    def __str__(self) -> str:
        lhs = " + ".join(f"{coef:g}*v{idx}" for idx, coef in self.terms) or "0"
        return f"{lhs} {self.sense} {self.rhs:g}"


class Model:
    """
    A solver-neutral minimisation model.

    Variables are grouped by name so formulations can expose their sparse
    index maps, e.g. ``model.groups["x"][(i, j)]`` for an arc variable.

    Example:
        >>> model = Model("example")
        >>> x = model.add_binary_var("x", cost=-1.0)
        >>> y = model.add_binary_var("y", cost=-2.0)
        >>> model.add_constraint({x: 1.0, y: 1.0}, '<=', 1.0)
        >>> model.num_variables, model.num_constraints
        (2, 1)

    Attributes:
        name: Model name
        variables: All variables, indexed by Variable.index
        constraints: All static constraints
        groups: Named sparse maps from a key tuple to a variable index
        separator: Optional row-generation callable
    """

    def __init__(self, name: str = "kep"):
        self.name = name
        self.variables: list[Variable] = []
        self.constraints: list[LinearConstraint] = []
        self.groups: dict[str, dict] = {}
        self.separator: Optional[Separator] = None

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def num_variables(self) -> int:
        return len(self.variables)

    @property
    def num_constraints(self) -> int:
        return len(self.constraints)

    @property
    def is_empty(self) -> bool:
        return not self.variables

    @property
    def uses_lazy_constraints(self) -> bool:
        """Whether the model relies on row generation during the solve."""
        return self.separator is not None

    @property
    def objective(self) -> LinearExpr:
        """Objective coefficients of all variables with a non-zero cost."""
        return {v.index: v.cost for v in self.variables if v.cost != 0.0}

    # =========================================================================
    # Building
    # =========================================================================

    def add_var(
        self,
        name: str,
        lower: float = 0.0,
        upper: float = 1.0,
        vtype: VarType = VarType.BINARY,
        cost: float = 0.0,
    ) -> int:
        """
        Add a variable.

        Returns:
            The index of the new variable
        """
        if lower > upper:
            raise ValueError(f"Variable {name} has empty domain [{lower}, {upper}]")
        index = len(self.variables)
        self.variables.append(Variable(index, name, float(lower), float(upper), vtype, float(cost)))
        return index

    def add_binary_var(self, name: str, cost: float = 0.0) -> int:
        return self.add_var(name, 0.0, 1.0, VarType.BINARY, cost)

    def add_integer_var(self, name: str, lower: int, upper: int, cost: float = 0.0) -> int:
        return self.add_var(name, lower, upper, VarType.INTEGER, cost)

    def add_group(self, group: str, mapping: dict) -> dict:
        """Register a named sparse map of variable indices and return it."""
        self.groups[group] = mapping
        return mapping

    def add_constraint(
        self,
        lhs: Mapping[int, float],
        sense: str,
        rhs: float,
        name: str = "",
    ) -> Optional[LinearConstraint]:
        """
        Add lhs <sense> rhs.

        Constraints without any variable are not stored.

        Returns:
            The stored constraint, or None if it had no terms
        """
        constraint = LinearConstraint.from_expr(lhs, sense, rhs, name)
        if not constraint.terms:
            return None
        self.constraints.append(constraint)
        return constraint

    def add_comparison(
        self,
        left: Mapping[int, float],
        sense: str,
        right: Mapping[int, float],
        name: str = "",
    ) -> Optional[LinearConstraint]:
        """Add left <sense> right for two expressions (rhs becomes 0)."""
        return self.add_constraint(subtract(left, right), sense, 0.0, name)

    def add_constraints(self, constraints: Iterable[LinearConstraint]) -> int:
        """Append prebuilt constraints; returns how many were added."""
        count = 0
        for constraint in constraints:
            self.constraints.append(constraint)
            count += 1
        return count

    def set_objective(self, costs: Mapping[int, float]) -> None:
        """Set the objective coefficients (minimised); others become 0."""
        for idx, var in enumerate(self.variables):
            cost = float(costs.get(idx, 0.0))
            if cost != var.cost:
                self.variables[idx] = Variable(
                    var.index, var.name, var.lower, var.upper, var.vtype, cost
                )

    def set_separator(self, separator: Separator) -> None:
        self.separator = separator

    # =========================================================================
    # Evaluation
    # =========================================================================

    def objective_value(self, values: Mapping[int, float]) -> float:
        return sum(var.cost * values.get(var.index, 0.0) for var in self.variables)

    def violated_constraints(
        self,
        values: Mapping[int, float],
        tol: float = 1e-6,
    ) -> list[LinearConstraint]:
        """Static constraints violated by the given values."""
        return [c for c in self.constraints if c.is_violated(values, tol)]

    def summary(self) -> str:
        lines = [
            f"Model: {self.name}",
            f"  Variables: {self.num_variables}",
            f"  Constraints: {self.num_constraints}",
        ]
        for group, mapping in self.groups.items():
            lines.append(f"  Group {group}: {len(mapping)}")
        if self.uses_lazy_constraints:
            lines.append("  Lazy constraints: yes")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"Model('{self.name}', variables={self.num_variables}, "
            f"constraints={self.num_constraints})"
        )


def subtract(left: Mapping[int, float], right: Mapping[int, float]) -> LinearExpr:
    """left - right as a new expression."""
    result = dict(left)
    for idx, coef in right.items():
        result[idx] = result.get(idx, 0.0) - coef
    return result
