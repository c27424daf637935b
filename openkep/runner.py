"""
Run driver - build, solve and record KEP experiments.

A run is one formulation solved on one generated instance. Runs are
described by RunConfig; each produces a RunResult and, for the results
file, one fixed-width line:

    formulation       n  k  d% alt len seed w setup  run  objective        gap

    >>> from openkep.runner import RunConfig, run_config, format_result_line
    >>> rc = RunConfig("cycle", n=10, k=3, density=0.2, real_weights=True, seed=42)
    >>> result = run_config(rc)
    >>> print(format_result_line(rc, result))

Independent runs (different seeds) are fanned out over worker processes
with run_many; each worker builds its own instance, model and solver.
"""

import math
import time
import warnings
from concurrent.futures import ProcessPoolExecutor
from dataclasses import asdict, dataclass
from itertools import product, repeat
from pathlib import Path
from typing import Iterable, Optional, Sequence

from openkep.config import KepConfig
from openkep.config import config as default_config
from openkep.core.instance import Instance, generate_instance
from openkep.formulations import build, get_formulation
from openkep.formulations.base import validate_k
from openkep.solver import SolutionStatus, SolverAdapter, create_solver

# First seed of every configuration
FIRST_SEED = 42

# Altruistic donors and chain length are fixed in the results file
NUM_ALTRUISTS = 0
MAX_CHAIN_LENGTH = 99

# Characters available for objective and gap
NUMBER_WIDTH = 10


@dataclass(frozen=True)
class RunConfig:
    """
    One experiment: a formulation on one generated instance.

    Attributes:
        formulation: Formulation name (see openkep.formulations.FORMULATIONS)
        n: Number of donor-patient pairs
        k: Maximum cycle length
        density: Arc probability
        real_weights: Uniform weights in [0, 1) instead of unit weights
        seed: Generator seed
    """
    formulation: str
    n: int = 10
    k: int = 3
    density: float = 0.2
    real_weights: bool = False
    seed: int = FIRST_SEED

    def validate(self) -> None:
        """
        Raises:
            ValueError: If any field is out of range or the formulation is unknown
        """
        get_formulation(self.formulation)
        validate_k(self.k)
        if self.n < 1:
            raise ValueError(f"n must be at least 1, got {self.n}")
        if not 0.0 <= self.density <= 1.0:
            raise ValueError(f"density must be in [0, 1], got {self.density}")

    def __str__(self) -> str:
        return (
            f"{self.formulation} n {self.n} k {self.k} d {self.density} "
            f"w {self.real_weights} seed {self.seed}"
        )


@dataclass(frozen=True)
class RunResult:
    """
    Outcome of one run.

    Attributes:
        objective: Total weight of the best solution (NaN if none was found)
        setup_time: Seconds spent building the model and loading it into the solver
        solve_time: Seconds spent in optimize()
        gap: Relative MIP gap reported by the solver (NaN if unknown)
        status: Solver status
        num_cuts: Lazy cuts added during the solve
    """
    objective: float
    setup_time: float
    solve_time: float
    gap: float
    status: SolutionStatus
    num_cuts: int = 0

    @property
    def is_optimal(self) -> bool:
        return self.status == SolutionStatus.OPTIMAL

    def to_dict(self) -> dict:
        d = asdict(self)
        d["status"] = self.status.name
        return d


# =============================================================================
# Running
# =============================================================================


def run_formulation(
    name: str,
    instance: Instance,
    k: int,
    solver: Optional[SolverAdapter] = None,
    config: Optional[KepConfig] = None,
) -> RunResult:
    """
    Build a formulation, solve it and time both phases.

    Args:
        name: Formulation name
        instance: The compatibility graph
        k: Maximum cycle length
        solver: Solver adapter (default: config.default_solver with config's options,
            closed after the solve; a passed-in solver is left open)
        config: Settings (default: the global openkep.config.config)

    Returns:
        RunResult with the total weight as objective

    Raises:
        ValueError: If the name is unknown or k < 1
    """
    config = config or default_config

    start_time = time.time()
    model = build(name, instance, k)
    owns_solver = solver is None
    if owns_solver:
        solver = create_solver(config.default_solver, **config.solver_options())

    try:
        solver.load(model)
        setup_time = time.time() - start_time

        if config.verbose:
            print(f"  {model.summary()}")

        start_time = time.time()
        result = solver.optimize()
        solve_time = time.time() - start_time
    finally:
        if owns_solver:
            solver.close()

    if config.verbose:
        print(f"  {result!r} in {solve_time:.2f}s, {result.num_cuts} cuts, {result.rounds} rounds")

    if result.status == SolutionStatus.TIME_LIMIT:
        warnings.warn(
            f"{name} on {instance.name or 'instance'} stopped at the time limit; "
            "the objective is not proven optimal"
        )

    objective = -result.objective_value if result.has_solution else math.nan
    gap = result.gap if result.gap is not None else math.nan

    return RunResult(
        objective=objective,
        setup_time=setup_time,
        solve_time=solve_time,
        gap=gap,
        status=result.status,
        num_cuts=result.num_cuts,
    )


def run_config(run: RunConfig, config: Optional[KepConfig] = None) -> RunResult:
    """Generate the instance of a RunConfig and run its formulation on it."""
    run.validate()
    instance = generate_instance(run.n, run.density, run.real_weights, run.seed)
    return run_formulation(run.formulation, instance, run.k, config=config)


def run_many(
    runs: Sequence[RunConfig],
    config: Optional[KepConfig] = None,
    max_workers: Optional[int] = None,
) -> list[RunResult]:
    """
    Run independent configurations in parallel worker processes.

    Results are returned in the order of runs. A single run, or
    max_workers=1, runs in this process.

    Raises:
        The first exception raised by a run, in input order
    """
    runs = list(runs)
    for run in runs:
        run.validate()

    if len(runs) <= 1 or max_workers == 1:
        return [run_config(run, config) for run in runs]

    config = config or default_config
    workers = min(max_workers or len(runs), len(runs))
    with ProcessPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(run_config, runs, repeat(config)))


def expand_configurations(
    formulations: Iterable[str],
    ns: Iterable[int] = (10,),
    ks: Iterable[int] = (3,),
    densities: Iterable[float] = (0.2,),
    weight_modes: Iterable[bool] = (False,),
    runs: int = 1,
) -> list[list[RunConfig]]:
    """
    Cartesian product of the settings, one group per configuration.

    Each group holds the same configuration with seeds FIRST_SEED ..
    FIRST_SEED + runs - 1. Groups are ordered by n, density, k, weight
    mode and formulation.

    Raises:
        ValueError: If runs < 1
    """
    if runs < 1:
        raise ValueError(f"runs must be at least 1, got {runs}")

    formulations = list(formulations)
    groups = []
    for n, density, k, real_weights, name in product(
        ns, densities, ks, weight_modes, formulations
    ):
        groups.append([
            RunConfig(name, n, k, density, real_weights, seed)
            for seed in range(FIRST_SEED, FIRST_SEED + runs)
        ])
    return groups


# =============================================================================
# Results file
# =============================================================================


def format_number(number: float, max_length: int = NUMBER_WIDTH) -> str:
    """
    Render a number in at most max_length characters.

    The number is rounded to max_length - 2 decimals, then to fewer and
    fewer, until its shortest text representation fits.

    Raises:
        ValueError: If not even the integer part fits
    """
    for decimals in range(max_length - 2, -1, -1):
        text = _shortest_text(round(number, decimals))
        if len(text) <= max_length:
            return text

    raise ValueError(f"{number} can't be represented in {max_length} characters")


def _shortest_text(value: float) -> str:
    if not math.isfinite(value):
        return repr(value)
    text = repr(value + 0.0)  # -0.0 -> 0.0
    if text.endswith(".0"):
        text = text[:-2]
    return text


def format_result_line(run: RunConfig, result: RunResult) -> str:
    """One fixed-width line of the results file."""
    return (
        f"{run.formulation:<15} "
        f"{run.n:>4} "
        f"{run.k:>2} "
        f"{int(100 * run.density):>2} "
        f"{NUM_ALTRUISTS:>2} "
        f"{MAX_CHAIN_LENGTH:>2} "
        f"{run.seed:>3} "
        f"{int(run.real_weights):>1} "
        f"{int(result.setup_time):>4} "
        f"{int(result.solve_time):>4} "
        f"{format_number(result.objective):>10} "
        f"{format_number(result.gap):>10}"
    )


def append_results(path: Path, lines: Iterable[str]) -> None:
    """Append lines to the results file, creating it if needed."""
    with open(path, "a") as f:
        for line in lines:
            f.write(line + "\n")
