"""
Integration tests for the optional solver backends.

CPLEX and Gurobi must reach the same optimum as HiGHS; Gurobi adds the
row-generation cuts from its lazy-constraint callback.
"""

from types import SimpleNamespace

import numpy as np
import pytest

from openkep.core.instance import generate_instance
from openkep.formulations import FORMULATIONS, build
from openkep.solver import (
    CPLEX_AVAILABLE,
    GUROBI_AVAILABLE,
    HIGHS_AVAILABLE,
    SolutionStatus,
    create_solver,
)

NAMES = sorted(FORMULATIONS)


def solve(solver_name, name, instance, k):
    solver = create_solver(solver_name, time_limit=120)
    solver.load(build(name, instance, k))
    return solver.optimize()


@pytest.mark.skipif(not HIGHS_AVAILABLE, reason="HiGHS not installed")
class TestHiGHS:
    """HiGHS specifics."""

    def test_model_stats(self, triangle):
        solver = create_solver("highs")
        solver.load(build("arcPath", triangle, 3))
        stats = solver.get_model_stats()
        assert stats["num_columns"] == 3
        assert stats["num_rows"] == 6

    def test_gap_is_reported(self):
        instance = generate_instance(10, 0.3, real_weights=True, seed=42)
        result = solve("highs", "edge", instance, 3)
        assert result.gap is not None
        assert result.gap <= 1e-6

    @pytest.mark.parametrize("threads", [1, 2])
    def test_threads_applied(self, threads, triangle):
        solver = create_solver("highs", threads=threads)
        solver.load(build("cycle", triangle, 3))
        assert solver._highs.getOptions().threads == threads
        assert solver.optimize().objective_value == pytest.approx(-3.0)

    @pytest.mark.parametrize("name,subscribed", [
        ("arcCycleRowGen", True),
        ("arcPathRowGen", True),
        ("arcPath", False),
    ])
    def test_mip_solution_callback(self, name, subscribed, square_with_chord):
        solver = create_solver("highs")
        solver.load(build(name, square_with_chord, 2))
        callbacks = solver._highs.cbMipSolution.callbacks
        assert (solver._on_mip_solution in callbacks) == subscribed

    def test_callback_ignores_reduced_space_solution(self, square_with_chord):
        solver = create_solver("highs")
        model = build("arcCycleRowGen", square_with_chord, 2)
        solver.load(model)
        solver._separator = model.separator
        event = SimpleNamespace(data_out=SimpleNamespace(mip_solution=np.ones(3)))
        solver._on_mip_solution(event)
        assert solver._round_cuts == {}

        # the full-space 4-cycle is cut
        solution = np.zeros(model.num_variables)
        for arc in [(0, 1), (1, 2), (2, 3), (3, 0)]:
            solution[model.groups["x"][arc]] = 1.0
        event.data_out.mip_solution = solution
        solver._on_mip_solution(event)
        assert len(solver._round_cuts) == 1


@pytest.mark.skipif(not (CPLEX_AVAILABLE and HIGHS_AVAILABLE), reason="CPLEX or HiGHS not installed")
class TestCPLEX:
    """CPLEX agrees with HiGHS."""

    @pytest.mark.parametrize("name", NAMES)
    def test_agreement(self, name):
        instance = generate_instance(10, 0.3, real_weights=True, seed=42)
        expected = solve("highs", name, instance, 3).objective_value
        result = solve("cplex", name, instance, 3)
        assert result.status == SolutionStatus.OPTIMAL
        assert result.objective_value == pytest.approx(expected, abs=1e-6)


@pytest.mark.skipif(not (GUROBI_AVAILABLE and HIGHS_AVAILABLE), reason="Gurobi or HiGHS not installed")
class TestGurobi:
    """Gurobi agrees with HiGHS and separates inside its search."""

    @pytest.mark.parametrize("name", NAMES)
    def test_agreement(self, name):
        instance = generate_instance(10, 0.3, real_weights=True, seed=42)
        expected = solve("highs", name, instance, 3).objective_value
        result = solve("gurobi", name, instance, 3)
        assert result.status == SolutionStatus.OPTIMAL
        assert result.objective_value == pytest.approx(expected, abs=1e-6)

    @pytest.mark.parametrize("name", ["arcPathRowGen", "arcCycleRowGen"])
    def test_lazy_callback(self, name, square_with_chord):
        result = solve("gurobi", name, square_with_chord, 2)
        assert result.status == SolutionStatus.OPTIMAL
        assert result.objective_value == pytest.approx(0.0)
        assert result.num_cuts >= 1
        assert result.rounds == 1

    def test_close_disposes_model(self, triangle):
        solver = create_solver("gurobi")
        solver.load(build("cycle", triangle, 3))
        assert solver.optimize().objective_value == pytest.approx(-3.0)
        solver.close()
        assert solver._grb is None
        assert solver._env is None
        # closing twice is harmless
        solver.close()
