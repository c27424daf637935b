"""
Integration tests: all formulations solved with HiGHS.

For a fixed instance and k the six formulations must reach the same
optimal total weight. Small instances are also checked against a brute
force over node-disjoint cycle packings.
"""

from itertools import combinations

import pytest

from openkep.core.enumeration import CycleEnumerator, cycle_arcs
from openkep.core.instance import Instance, generate_instance
from openkep.formulations import FORMULATIONS, build
from openkep.runner import RunConfig, run_many
from openkep.config import KepConfig
from openkep.solver import HIGHS_AVAILABLE, HiGHSSolver, SolutionStatus

pytestmark = pytest.mark.skipif(not HIGHS_AVAILABLE, reason="HiGHS not installed")

NAMES = sorted(FORMULATIONS)


def solve(name, instance, k):
    model = build(name, instance, k)
    solver = HiGHSSolver(time_limit=120)
    solver.load(model)
    result = solver.optimize()
    assert result.status == SolutionStatus.OPTIMAL, f"{name}: {result.status}"
    return model, result


def total_weight(name, instance, k):
    _, result = solve(name, instance, k)
    return -result.objective_value


def brute_force_optimum(instance, k):
    """Best total weight over all packings of node-disjoint short cycles."""
    cycles = [
        (set(cycle), sum(instance.weight(i, j) for i, j in cycle_arcs(cycle)))
        for cycle in CycleEnumerator(instance.A, k)
    ]

    def best(start, used):
        value = 0.0
        for idx in range(start, len(cycles)):
            nodes, weight = cycles[idx]
            if nodes.isdisjoint(used):
                value = max(value, weight + best(idx + 1, used | nodes))
        return value

    return best(0, frozenset())


# =============================================================================
# Hand-made graphs
# =============================================================================


class TestSmallGraphs:
    """Known optima on hand-made graphs."""

    @pytest.mark.parametrize("name", NAMES)
    def test_triangle(self, name, triangle):
        assert total_weight(name, triangle, 3) == pytest.approx(3.0)
        assert total_weight(name, triangle, 2) == pytest.approx(0.0)

    @pytest.mark.parametrize("name", NAMES)
    def test_square_with_chord(self, name, square_with_chord):
        assert total_weight(name, square_with_chord, 3) == pytest.approx(3.0)
        assert total_weight(name, square_with_chord, 4) == pytest.approx(4.0)

    @pytest.mark.parametrize("name", NAMES)
    def test_competing_pairs(self, name, competing_pairs):
        assert total_weight(name, competing_pairs, 2) == pytest.approx(5.0)

    @pytest.mark.parametrize("name", NAMES)
    def test_k_one_allows_nothing(self, name, competing_pairs):
        assert total_weight(name, competing_pairs, 1) == pytest.approx(0.0)

    @pytest.mark.parametrize("name", NAMES)
    def test_single_node(self, name, single_node):
        assert total_weight(name, single_node, 3) == pytest.approx(0.0)

    @pytest.mark.parametrize("name", NAMES)
    def test_no_arcs(self, name):
        assert total_weight(name, Instance.from_arcs(5, []), 3) == pytest.approx(0.0)


# =============================================================================
# Generated instances
# =============================================================================


class TestAgreement:
    """All formulations agree on generated instances."""

    @pytest.mark.parametrize("n,k,density,real_weights", [
        (6, 2, 0.4, True),
        (7, 3, 0.3, False),
        (7, 3, 0.3, True),
        (8, 4, 0.25, True),
    ])
    def test_matches_brute_force(self, n, k, density, real_weights):
        instance = generate_instance(n, density, real_weights, seed=42)
        expected = brute_force_optimum(instance, k)
        for name in NAMES:
            assert total_weight(name, instance, k) == pytest.approx(expected, abs=1e-6), name

    @pytest.mark.parametrize("n,k,density,real_weights", [
        (10, 3, 0.2, False),
        (10, 3, 0.2, True),
        (12, 4, 0.25, True),
    ])
    def test_all_formulations_agree(self, n, k, density, real_weights):
        instance = generate_instance(n, density, real_weights, seed=42)
        values = {name: total_weight(name, instance, k) for name in NAMES}
        reference = values["cycle"]
        for name, value in values.items():
            assert value == pytest.approx(reference, abs=1e-6), values

    @pytest.mark.slow
    @pytest.mark.parametrize("seed", [42, 43, 44])
    def test_larger_instances(self, seed):
        instance = generate_instance(20, 0.15, real_weights=True, seed=seed)
        values = {name: total_weight(name, instance, 3) for name in NAMES}
        reference = values["cycle"]
        for name, value in values.items():
            assert value == pytest.approx(reference, abs=1e-6), values


# =============================================================================
# Row generation
# =============================================================================


class TestRowGeneration:
    """Solutions of the lazy formulations are valid cycle packings."""

    @pytest.mark.parametrize("name", ["arcPathRowGen", "arcCycleRowGen"])
    def test_cuts_added_when_needed(self, name, square_with_chord):
        _, result = solve(name, square_with_chord, 2)
        assert result.num_cuts >= 1
        assert result.rounds >= 2
        assert -result.objective_value == pytest.approx(0.0)

    @pytest.mark.parametrize("name", ["arcPathRowGen", "arcCycleRowGen"])
    def test_final_solution_has_no_cut(self, name):
        instance = generate_instance(12, 0.3, real_weights=True, seed=42)
        model, result = solve(name, instance, 3)
        values = {idx: round(value) for idx, value in result.values.items()}
        assert model.violated_constraints(values) == []
        assert model.separator(values) == []

    def test_dense_cycle_cuts_converge(self):
        # Dense enough that many long cycles appear among the incumbents
        instance = generate_instance(14, 0.3, True, 43)
        model, result = solve("arcCycleRowGen", instance, 3)
        assert result.rounds < 50
        assert -result.objective_value == pytest.approx(total_weight("cycle", instance, 3), abs=1e-6)
        assert -result.objective_value == pytest.approx(total_weight("arcPath", instance, 3), abs=1e-6)


# =============================================================================
# Runner
# =============================================================================


class TestRunner:
    """Parallel runs give the same results as sequential ones."""

    def test_run_many_parallel(self):
        config = KepConfig(time_limit=120.0)
        runs = [RunConfig("cycle", 10, 3, 0.3, True, seed) for seed in (42, 43)]
        parallel = run_many(runs, config, max_workers=2)
        sequential = run_many(runs, config, max_workers=1)
        assert [r.objective for r in parallel] == pytest.approx([r.objective for r in sequential])
        assert all(r.is_optimal for r in parallel)
