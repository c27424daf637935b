"""
Configuration module for OpenKEP.

This module provides configuration management for OpenKEP: solver
settings and experiment output files.

Configuration can be set via:
1. Environment variables (OPENKEP_*)
2. Config file (./openkep.toml or ~/.openkep/config.toml)
3. Programmatic API

Example:
    >>> from openkep.config import config
    >>> print(config.time_limit)
    1800.0
    >>> config.default_solver = "gurobi"
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional


def _get_default_time_limit() -> float:
    """Get the default time limit in seconds (30 minutes)."""
    env_value = os.environ.get('OPENKEP_TIME_LIMIT')
    if env_value:
        return float(env_value)
    return 1800.0


def _get_default_solver() -> str:
    return os.environ.get('OPENKEP_SOLVER', 'highs')


@dataclass
class KepConfig:
    """
    Configuration for OpenKEP runs.

    Attributes:
        time_limit: Wall-clock limit per solve, in seconds
        mip_gap: Relative MIP gap (0 = prove optimality)
        threads: Solver threads per run
        default_solver: Solver used when none is given (highs, cplex, gurobi)
        results_path: File that result lines are appended to
        errors_path: File that failed runs are appended to
        verbose: Print progress lines
    """

    # Solver settings
    time_limit: float = field(default_factory=_get_default_time_limit)
    mip_gap: float = 0.0
    threads: int = 1
    default_solver: str = field(default_factory=_get_default_solver)

    # Output files
    results_path: Path = Path("output.dat")
    errors_path: Path = Path("error.dat")

    verbose: bool = False

    def __post_init__(self):
        """Ensure paths are Path objects and settings are usable."""
        if isinstance(self.results_path, str):
            self.results_path = Path(self.results_path)
        if isinstance(self.errors_path, str):
            self.errors_path = Path(self.errors_path)
        if self.time_limit <= 0:
            raise ValueError(f"time_limit must be positive, got {self.time_limit}")
        if self.threads < 1:
            raise ValueError(f"threads must be at least 1, got {self.threads}")

    # =========================================================================
    # Solver helpers
    # =========================================================================

    def solver_options(self) -> dict[str, Any]:
        """Keyword arguments for openkep.solver.create_solver."""
        return {
            "time_limit": self.time_limit,
            "mip_gap": self.mip_gap,
            "threads": self.threads,
        }

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "time_limit": self.time_limit,
            "mip_gap": self.mip_gap,
            "threads": self.threads,
            "default_solver": self.default_solver,
            "results_path": str(self.results_path),
            "errors_path": str(self.errors_path),
            "verbose": self.verbose,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> 'KepConfig':
        """Create config from dictionary."""
        defaults = cls()
        return cls(
            time_limit=float(d.get("time_limit", defaults.time_limit)),
            mip_gap=float(d.get("mip_gap", defaults.mip_gap)),
            threads=int(d.get("threads", defaults.threads)),
            default_solver=d.get("default_solver", defaults.default_solver),
            results_path=Path(d.get("results_path", defaults.results_path)),
            errors_path=Path(d.get("errors_path", defaults.errors_path)),
            verbose=_as_bool(d.get("verbose", defaults.verbose)),
        )

    def save(self, path: Optional[Path] = None) -> None:
        """
        Save configuration to a TOML file.

        Args:
            path: Path to save to (default: ./openkep.toml)
        """
        if path is None:
            path = Path("openkep.toml")

        lines = [
            "# OpenKEP Configuration",
            "",
            "[solver]",
            f"time_limit = {self.time_limit}",
            f"mip_gap = {self.mip_gap}",
            f"threads = {self.threads}",
            f'default_solver = "{self.default_solver}"',
            "",
            "[output]",
            f'results_path = "{self.results_path}"',
            f'errors_path = "{self.errors_path}"',
            f"verbose = {'true' if self.verbose else 'false'}",
        ]

        Path(path).write_text("\n".join(lines) + "\n")

    @classmethod
    def load(cls, path: Optional[Path] = None) -> 'KepConfig':
        """
        Load configuration from a TOML file.

        Args:
            path: Path to load from (default: ./openkep.toml or ~/.openkep/config.toml)

        Returns:
            Loaded configuration (or default if file not found)
        """
        if path is None:
            local_config = Path("openkep.toml")
            user_config = Path.home() / ".openkep" / "config.toml"

            if local_config.exists():
                path = local_config
            elif user_config.exists():
                path = user_config
            else:
                return cls()

        path = Path(path)
        if not path.exists():
            return cls()

        # Flat TOML subset: section headers are skipped, keys are unique
        config_dict: dict[str, Any] = {}

        for line in path.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if line.startswith("[") and line.endswith("]"):
                continue

            if "=" in line:
                key, value = line.split("=", 1)
                config_dict[key.strip()] = _parse_value(value.strip())

        return cls.from_dict(config_dict)


def _parse_value(text: str) -> Any:
    if text.startswith('"') and text.endswith('"'):
        return text[1:-1]
    if text in ("true", "false"):
        return text == "true"
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.lower() in ("1", "true", "yes")
    return bool(value)


# Global configuration instance
config = KepConfig()
