from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

import numpy as np

from genpose.api.pose_io import Correspondences, load_correspondences, pose_to_dict, save_correspondences, save_poses
from genpose.eval.benchmark import benchmark, format_results, write_benchmark_report
from genpose.options import SolverOptions, load_solver_options
from genpose.sim.problem_generator import ProblemOptions, generate_problems
from genpose.solvers.gp4ps import solve_gp4ps


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="genpose")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    solve = sub.add_parser("solve", help="Solve a gP4Ps instance (4 correspondences) from a JSON file.")
    solve.add_argument("input", type=Path, help="Correspondences JSON (genpose.correspondences.v0).")
    solve.add_argument("--options", type=Path, default=None, help="Solver options JSON (genpose.solver_options.v0).")
    solve.add_argument("--out-json", type=Path, default=None, help="Write poses JSON here instead of stdout.")

    bench = sub.add_parser("benchmark", help="Benchmark the solver on synthetic instances.")
    bench.add_argument("--problems", type=int, default=1000)
    bench.add_argument("--fov", type=float, default=120.0, help="Camera field of view (degrees).")
    bench.add_argument("--tol", type=float, default=1e-6)
    bench.add_argument("--repeats", type=int, default=10, help="Timing passes (median is reported).")
    bench.add_argument("--seed", type=int, default=0)
    bench.add_argument("--central", action="store_true", help="Central camera (all ray anchors at the origin).")
    bench.add_argument("--known-scale", action="store_true", help="Generate instances with alpha=1.")
    bench.add_argument("--options", type=Path, default=None, help="Solver options JSON.")
    bench.add_argument("--out-json", type=Path, default=None)
    bench.add_argument("--plot", type=Path, default=None, help="Save a pose error histogram (needs matplotlib).")

    gen = sub.add_parser("generate", help="Write synthetic instances as correspondences JSON files.")
    gen.add_argument("--out", type=Path, required=True)
    gen.add_argument("--problems", type=int, default=10)
    gen.add_argument("--fov", type=float, default=120.0)
    gen.add_argument("--seed", type=int, default=0)

    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.cmd == "solve":
        options = load_solver_options(args.options) if args.options else SolverOptions()
        c = load_correspondences(args.input)
        poses = solve_gp4ps(c.p, c.x, c.X, options=options)
        if args.out_json:
            save_poses(args.out_json, poses)
            print(f"Wrote {args.out_json} ({len(poses)} poses)")
        else:
            print(json.dumps([pose_to_dict(p) for p in poses], indent=2))
        return 0

    if args.cmd == "benchmark":
        solver_options = load_solver_options(args.options) if args.options else None
        problem_options = ProblemOptions(
            camera_fov_deg=args.fov,
            generalized=not args.central,
            unknown_scale=not args.known_scale,
        )
        result = benchmark(
            args.problems,
            problem_options,
            tol=args.tol,
            repeats=args.repeats,
            seed=args.seed,
            solver_options=solver_options,
        )
        print(format_results([result]))
        if args.out_json:
            write_benchmark_report(args.out_json, [result], problem_options, args.tol)
            print(f"Wrote {args.out_json}")
        if args.plot:
            from genpose.eval.plots import plot_pose_error_histogram

            plot_pose_error_histogram(args.plot, [result])
            print(f"Wrote {args.plot}")
        return 0

    if args.cmd == "generate":
        rng = np.random.default_rng(args.seed)
        instances = generate_problems(args.problems, ProblemOptions(camera_fov_deg=args.fov), rng)
        out = Path(args.out)
        gt: list[dict[str, object]] = []
        for i, inst in enumerate(instances):
            name = f"instance_{i:04d}.json"
            save_correspondences(out / name, Correspondences(p=inst.p, x=inst.x, X=inst.X))
            gt.append({"file": name, "pose": pose_to_dict(inst.pose_gt), "depths": inst.depths.tolist()})
        gt_path = out / "ground_truth.json"
        gt_path.write_text(json.dumps({"schema_version": "genpose.ground_truth.v0", "instances": gt}, indent=2), encoding="utf-8")
        print(f"Wrote {len(instances)} instances to {out}")
        return 0

    raise AssertionError(f"Unhandled cmd: {args.cmd}")


if __name__ == "__main__":
    raise SystemExit(main())
