from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

SCHEMA_VERSION = "genpose.solver_options.v0"


class OptionsValidationError(ValueError):
    pass


@dataclass(frozen=True)
class SolverOptions:
    """
    Numerical thresholds of the minimal solver.

    - `singular_tol`: smallest accepted ratio s_min/s_max of the leading 4x4 elimination block
    - `degenerate_tol`: relative threshold for collinear world points, ray pivots and a vanishing reduced map
    - `rank_tol`: relative rank threshold of the polynomial solver's Macaulay matrix
    - `imag_tol`: relative imaginary part below which a polynomial root is treated as real
    - `newton_iterations`: Newton steps used to polish each real polynomial root (0 disables)
    """

    singular_tol: float = 1e-10
    degenerate_tol: float = 1e-9
    rank_tol: float = 1e-11
    imag_tol: float = 1e-6
    newton_iterations: int = 3


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise OptionsValidationError(msg)


def load_solver_options(path: Path) -> SolverOptions:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return parse_solver_options(data)


def parse_solver_options(data: dict[str, Any]) -> SolverOptions:
    _require(isinstance(data, dict), "solver options must be a JSON object")
    schema_version = data.get("schema_version")
    _require(schema_version == SCHEMA_VERSION, f"schema_version must be {SCHEMA_VERSION}")

    defaults = SolverOptions()
    known = set(asdict(defaults)) | {"schema_version"}
    unknown = sorted(set(data) - known)
    _require(not unknown, f"unknown solver options: {unknown}")

    values: dict[str, Any] = {}
    for name in ("singular_tol", "degenerate_tol", "rank_tol", "imag_tol"):
        raw = data.get(name, getattr(defaults, name))
        _require(isinstance(raw, (int, float)) and not isinstance(raw, bool), f"{name} must be a number")
        v = float(raw)
        _require(0.0 < v < 1.0, f"{name} must be in (0, 1)")
        values[name] = v

    iters = data.get("newton_iterations", defaults.newton_iterations)
    _require(isinstance(iters, int) and not isinstance(iters, bool), "newton_iterations must be an integer")
    _require(0 <= iters <= 20, "newton_iterations must be in [0, 20]")
    values["newton_iterations"] = int(iters)

    return SolverOptions(**values)


def solver_options_to_dict(options: SolverOptions) -> dict[str, Any]:
    out: dict[str, Any] = {"schema_version": SCHEMA_VERSION}
    out.update(asdict(options))
    return out
