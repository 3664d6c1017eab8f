import json
from pathlib import Path

import pytest

from genpose.options import (
    OptionsValidationError,
    SolverOptions,
    load_solver_options,
    parse_solver_options,
    solver_options_to_dict,
)


def test_parse_solver_options_ok():
    o = parse_solver_options({"schema_version": "genpose.solver_options.v0", "singular_tol": 1e-8, "newton_iterations": 0})
    assert o.singular_tol == 1e-8
    assert o.newton_iterations == 0
    assert o.imag_tol == SolverOptions().imag_tol


def test_parse_solver_options_rejects_bad_schema():
    with pytest.raises(OptionsValidationError):
        parse_solver_options({"schema_version": "genpose.solver_options.v1"})


@pytest.mark.parametrize(
    "extra",
    [
        {"singular_tol": 0.0},
        {"imag_tol": 2.0},
        {"rank_tol": "small"},
        {"newton_iterations": -1},
        {"newton_iterations": 1.5},
        {"unknown_key": 1},
    ],
)
def test_parse_solver_options_rejects_invalid_values(extra):
    with pytest.raises(OptionsValidationError):
        parse_solver_options({"schema_version": "genpose.solver_options.v0", **extra})


def test_load_solver_options_from_file(tmp_path: Path):
    path = tmp_path / "options.json"
    opts = SolverOptions(degenerate_tol=1e-7, newton_iterations=5)
    path.write_text(json.dumps(solver_options_to_dict(opts)), encoding="utf-8")
    assert load_solver_options(path) == opts
