"""
Command line interface for KEP experiments.

Every combination of the given formulations, sizes, cycle lengths,
densities and weight modes is one configuration. Each configuration is
solved on --runs instances (seeds 42, 43, ...) in parallel worker
processes, and one line per run is appended to the results file.

Examples:
    openkep cycle edge -n 10 20 -k 3 4 -d 0.2 -w -t 4
    python -m openkep mtz --solver gurobi --time-limit 600
"""

import argparse
import logging
import sys
import traceback
from dataclasses import replace
from pathlib import Path
from typing import Optional

from openkep.config import KepConfig
from openkep.formulations import FORMULATIONS
from openkep.runner import (
    RunConfig,
    append_results,
    expand_configurations,
    format_result_line,
    run_many,
)


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure console logging."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s  %(message)s',
        datefmt='%Y-%m-%d %H:%M:%SZ',
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    return logging.getLogger("openkep")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="openkep",
        description="Solve generated kidney exchange instances with several formulations",
    )
    parser.add_argument(
        "formulations",
        nargs="+",
        choices=sorted(FORMULATIONS),
        metavar="FORMULATION",
        help=f"Formulations to run: {', '.join(sorted(FORMULATIONS))}",
    )
    parser.add_argument(
        "-n", type=int, nargs="+", default=[10],
        help="Numbers of donor-patient pairs (default: 10)",
    )
    parser.add_argument(
        "-k", type=int, nargs="+", default=[3],
        help="Maximum cycle lengths (default: 3)",
    )
    parser.add_argument(
        "-d", "--density", type=float, nargs="+", default=[0.2],
        help="Arc densities (default: 0.2)",
    )
    parser.add_argument(
        "-w", "--real-weights",
        nargs="*",
        choices=["true", "false"],
        default=None,
        help="Use real weights; optionally list modes, e.g. '-w true false' (default: unit weights)",
    )
    parser.add_argument(
        "-t", "--runs", type=int, default=1,
        help="Instances (seeds) per configuration, solved in parallel (default: 1)",
    )
    parser.add_argument(
        "-s", "--solver", type=str, default=None,
        help="Solver: highs, cplex or gurobi (default: from config)",
    )
    parser.add_argument(
        "--time-limit", type=float, default=None,
        help="Time limit per run in seconds (default: from config, 1800)",
    )
    parser.add_argument(
        "-o", "--output", type=str, default=None,
        help="Results file (default: output.dat)",
    )
    parser.add_argument(
        "--errors", type=str, default=None,
        help="Error file (default: error.dat)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable verbose output",
    )
    return parser


def weight_modes(values: Optional[list[str]]) -> list[bool]:
    """Weight modes from the -w option: absent -> unit, bare -w -> real."""
    if values is None:
        return [False]
    if not values:
        return [True]
    return sorted({value == "true" for value in values})


def make_config(args: argparse.Namespace) -> KepConfig:
    """Apply command line overrides to the loaded configuration."""
    settings = KepConfig.load()
    overrides = {}
    if args.solver is not None:
        overrides["default_solver"] = args.solver
    if args.time_limit is not None:
        overrides["time_limit"] = args.time_limit
    if args.output is not None:
        overrides["results_path"] = Path(args.output)
    if args.errors is not None:
        overrides["errors_path"] = Path(args.errors)
    if args.verbose:
        overrides["verbose"] = True
    return replace(settings, **overrides)


def record_error(path: Path, group: list[RunConfig], error: BaseException) -> None:
    """Append a failed configuration and its traceback to the error file."""
    with open(path, "a") as f:
        f.write(f"{group[0]} runs {len(group)}\n")
        f.write("".join(traceback.format_exception(type(error), error, error.__traceback__)))
        f.write("\n")


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.runs < 1:
        parser.error("--runs must be at least 1")

    try:
        settings = make_config(args)
    except ValueError as e:
        parser.error(str(e))

    log = setup_logging(settings.verbose)

    groups = expand_configurations(
        args.formulations,
        ns=args.n,
        ks=args.k,
        densities=args.density,
        weight_modes=weight_modes(args.real_weights),
        runs=args.runs,
    )

    failures = 0
    for group in groups:
        log.info(f"Start  {group[0]} runs {len(group)}")
        try:
            results = run_many(group, settings, max_workers=len(group))
        except Exception as e:
            failures += 1
            log.error(f"Failed {group[0]}: {e}")
            record_error(settings.errors_path, group, e)
            continue

        append_results(
            settings.results_path,
            [format_result_line(run, result) for run, result in zip(group, results)],
        )
        for run, result in zip(group, results):
            log.debug(f"Done   {run}: objective={result.objective} status={result.status.name}")

    if failures:
        log.error(f"{failures} of {len(groups)} configurations failed, see {settings.errors_path}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
