from __future__ import annotations

import json
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path

import numpy as np

from genpose.core.geometry import CameraPose
from genpose.eval.validator import compute_pose_error, is_valid
from genpose.options import SolverOptions
from genpose.sim.problem_generator import ProblemOptions, generate_problems
from genpose.solvers.gp4ps import gp4ps


@dataclass
class BenchmarkResult:
    name: str
    instances: int = 0
    solutions: int = 0
    valid_solutions: int = 0
    found_gt_pose: int = 0
    runtime_ns: int = 0
    pose_errors: list[float] = field(default_factory=list)

    def summary(self) -> dict[str, float]:
        n = float(max(self.instances, 1))
        return {
            "solutions_per_instance": self.solutions / n,
            "valid_pct": 100.0 * self.valid_solutions / float(max(self.solutions, 1)),
            "gt_found_pct": 100.0 * self.found_gt_pose / n,
            "runtime_ns_per_instance": self.runtime_ns / n,
        }


def benchmark(
    n_problems: int,
    options: ProblemOptions,
    tol: float = 1e-6,
    *,
    repeats: int = 10,
    seed: int = 0,
    solver_options: SolverOptions | None = None,
    name: str = "gP4Ps",
) -> BenchmarkResult:
    """
    Accuracy and timing of the gP4Ps solver on synthetic instances.

    Accuracy pass: counts solutions, valid solutions and instances where the ground
    truth is recovered (pose error < tol). Timing pass: median over `repeats` runs
    of the total time spent solving all instances.
    """
    if n_problems < 1:
        raise ValueError("n_problems must be >= 1")
    if repeats < 1:
        raise ValueError("repeats must be >= 1")

    rng = np.random.default_rng(seed)
    instances = generate_problems(n_problems, options, rng)
    result = BenchmarkResult(name=name, instances=int(n_problems))

    for inst in instances:
        solutions: list[CameraPose] = []
        result.solutions += gp4ps(inst.p, inst.x, inst.X, solutions, options=solver_options)
        pose_error = float("inf")
        for pose in solutions:
            if is_valid(inst, pose, tol):
                result.valid_solutions += 1
            pose_error = min(pose_error, compute_pose_error(inst, pose))
        result.pose_errors.append(pose_error)
        if pose_error < tol:
            result.found_gt_pose += 1

    runtimes: list[int] = []
    solutions = []
    for _ in range(int(repeats)):
        start = time.perf_counter_ns()
        for inst in instances:
            solutions.clear()
            gp4ps(inst.p, inst.x, inst.X, solutions, options=solver_options)
        runtimes.append(time.perf_counter_ns() - start)
    runtimes.sort()
    result.runtime_ns = int(runtimes[len(runtimes) // 2])
    return result


def format_runtime(runtime_ns: float) -> str:
    if runtime_ns < 1e3:
        return f"{runtime_ns:.6g} ns"
    if runtime_ns < 1e6:
        return f"{runtime_ns / 1e3:.6g} us"
    if runtime_ns < 1e9:
        return f"{runtime_ns / 1e6:.6g} ms"
    return f"{runtime_ns / 1e9:.6g} s"


def format_results(results: list[BenchmarkResult], width: int = 13) -> str:
    header = "".join(h.rjust(width) for h in ("Solver", "Solutions", "Valid", "GT found", "Runtime"))
    lines = [header, "-" * (5 * width)]
    for r in results:
        s = r.summary()
        lines.append(
            r.name.rjust(width)
            + f"{s['solutions_per_instance']:.6g}".rjust(width)
            + f"{s['valid_pct']:.6g}".rjust(width)
            + f"{s['gt_found_pct']:.6g}".rjust(width)
            + format_runtime(s["runtime_ns_per_instance"]).rjust(width)
        )
    return "\n".join(lines)


def write_benchmark_report(path: Path, results: list[BenchmarkResult], options: ProblemOptions, tol: float) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    report = {
        "schema_version": "genpose.benchmark.v0",
        "problem_options": asdict(options),
        "tol": float(tol),
        "results": [
            {
                "name": r.name,
                "instances": r.instances,
                "solutions": r.solutions,
                "valid_solutions": r.valid_solutions,
                "found_gt_pose": r.found_gt_pose,
                "runtime_ns": r.runtime_ns,
                **r.summary(),
            }
            for r in results
        ],
    }
    path.write_text(json.dumps(report, indent=2, sort_keys=True), encoding="utf-8")
    return path
