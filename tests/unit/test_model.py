"""
Tests for the solver-neutral model and the expression helpers.
"""

import numpy as np
import pytest

from openkep.core.expressions import (
    arc_sum,
    inflow,
    outflow,
    sum_over_i,
    sum_over_ij,
    sum_over_j,
    sum_over_jl,
    sum_over_layers,
    weighted_sum,
)
from openkep.core.model import LinearConstraint, Model, VarType, subtract


# =============================================================================
# LinearConstraint
# =============================================================================


class TestLinearConstraint:
    """Tests for LinearConstraint."""

    def test_from_expr_sorts_and_drops_zeros(self):
        c = LinearConstraint.from_expr({3: 1.0, 1: 2.0, 2: 0.0}, '<=', 4)
        assert c.terms == ((1, 2.0), (3, 1.0))
        assert c.indices == [1, 3]
        assert c.coefficients == [2.0, 1.0]
        assert c.rhs == 4.0

    def test_invalid_sense(self):
        with pytest.raises(ValueError):
            LinearConstraint.from_expr({0: 1.0}, '<', 1)

    @pytest.mark.parametrize("sense,values,violation", [
        ('<=', {0: 1.0, 1: 1.0}, 1.0),
        ('<=', {0: 1.0}, 0.0),
        ('>=', {}, 1.0),
        ('==', {0: 1.0, 1: 1.0}, 1.0),
    ])
    def test_violation(self, sense, values, violation):
        c = LinearConstraint.from_expr({0: 1.0, 1: 1.0}, sense, 1)
        assert c.violation(values) == pytest.approx(violation)
        assert c.is_violated(values) == (violation > 0)

    def test_equality_ignores_name(self):
        a = LinearConstraint.from_expr({0: 1.0}, '<=', 1, name="a")
        b = LinearConstraint.from_expr({0: 1.0}, '<=', 1, name="b")
        assert a == b

    def test_str(self):
        c = LinearConstraint.from_expr({0: 1.0, 2: -1.0}, '==', 0)
        assert str(c) == "1*v0 + -1*v2 == 0"


# =============================================================================
# Model
# =============================================================================


class TestModel:
    """Tests for Model."""

    def test_variables(self):
        model = Model("test")
        x = model.add_binary_var("x", cost=-1.0)
        y = model.add_integer_var("y", 2, 5)
        assert (x, y) == (0, 1)
        assert model.variables[y].vtype == VarType.INTEGER
        assert (model.variables[y].lower, model.variables[y].upper) == (2.0, 5.0)
        assert model.objective == {x: -1.0}

    def test_empty_domain(self):
        model = Model()
        with pytest.raises(ValueError):
            model.add_integer_var("y", 3, 2)

    def test_empty_constraint_skipped(self):
        model = Model()
        model.add_binary_var("x")
        assert model.add_constraint({}, '<=', 1) is None
        assert model.num_constraints == 0

    def test_add_comparison(self):
        model = Model()
        x = model.add_binary_var("x")
        y = model.add_binary_var("y")
        c = model.add_comparison({x: 1.0}, '<=', {y: 1.0})
        assert c.terms == ((x, 1.0), (y, -1.0))
        assert c.rhs == 0.0

    def test_comparison_of_same_expression_is_skipped(self):
        model = Model()
        x = model.add_binary_var("x")
        assert model.add_comparison({x: 1.0}, '==', {x: 1.0}) is None

    def test_set_objective(self):
        model = Model()
        x = model.add_binary_var("x", cost=3.0)
        y = model.add_binary_var("y")
        model.set_objective({y: -2.0})
        assert model.objective == {y: -2.0}
        assert model.objective_value({x: 1.0, y: 1.0}) == -2.0

    def test_violated_constraints(self):
        model = Model()
        x = model.add_binary_var("x")
        y = model.add_binary_var("y")
        model.add_constraint({x: 1.0, y: 1.0}, '<=', 1)
        assert model.violated_constraints({x: 1.0, y: 0.0}) == []
        assert len(model.violated_constraints({x: 1.0, y: 1.0})) == 1

    def test_separator(self):
        model = Model()
        assert not model.uses_lazy_constraints
        model.set_separator(lambda values: [])
        assert model.uses_lazy_constraints
        assert "Lazy constraints: yes" in model.summary()

    def test_is_empty(self):
        model = Model()
        assert model.is_empty
        model.add_binary_var("x")
        assert not model.is_empty

    def test_groups(self):
        model = Model()
        x = model.add_group("x", {(0, 1): model.add_binary_var("x[0,1]")})
        assert model.groups["x"] is x
        assert "Group x: 1" in model.summary()

    def test_subtract(self):
        assert subtract({0: 1.0, 1: 2.0}, {1: 2.0, 2: 1.0}) == {0: 1.0, 1: 0.0, 2: -1.0}


# =============================================================================
# Expressions
# =============================================================================


class TestExpressions:
    """Tests for the reduction helpers."""

    @pytest.fixture
    def x(self):
        return {(0, 1): 10, (1, 0): 11, (1, 2): 12}

    @pytest.fixture
    def x3(self):
        return {(0, 1, 0): 20, (1, 0, 0): 21, (1, 2, 1): 22, (2, 1, 1): 23}

    def test_inflow_outflow(self, x):
        assert inflow(x) == {1: {10: 1.0}, 0: {11: 1.0}, 2: {12: 1.0}}
        assert outflow(x) == {0: {10: 1.0}, 1: {11: 1.0, 12: 1.0}}

    def test_layered_sums(self, x3):
        assert sum_over_i(x3)[(0, 0)] == {21: 1.0}
        assert sum_over_j(x3)[(1, 1)] == {22: 1.0}
        assert sum_over_layers(x3)[(1, 2)] == {22: 1.0}
        assert sum_over_jl(x3)[1] == {21: 1.0, 22: 1.0}
        assert sum_over_ij(x3) == {0: {20: 1.0, 21: 1.0}, 1: {22: 1.0, 23: 1.0}}

    def test_missing_keys_absent(self, x3):
        assert (2, 0) not in sum_over_i(x3)

    def test_weighted_sum(self, x3):
        w = np.array([[0.0, 0.5, 0.0], [0.25, 0.0, 2.0], [0.0, 3.0, 0.0]])
        result = weighted_sum(w, sum_over_layers(x3))
        assert result == {20: 0.5, 21: 0.25, 22: 2.0, 23: 3.0}

    def test_arc_sum(self, x):
        assert arc_sum(x, [(0, 1), (1, 2)]) == {10: 1.0, 12: 1.0}

    def test_arc_sum_missing_arc(self, x):
        with pytest.raises(KeyError):
            arc_sum(x, [(2, 0)])
