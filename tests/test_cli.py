from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest

from genpose.api.pose_io import load_poses
from genpose.cli.main import main


@pytest.mark.integration
def test_cli_generate_solve_benchmark(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    out_dir = tmp_path / "instances"
    assert main(["generate", "--out", str(out_dir), "--problems", "2", "--seed", "5"]) == 0
    gt = json.loads((out_dir / "ground_truth.json").read_text(encoding="utf-8"))
    assert len(gt["instances"]) == 2

    poses_path = tmp_path / "poses.json"
    assert main(["solve", str(out_dir / "instance_0000.json"), "--out-json", str(poses_path)]) == 0
    poses = load_poses(poses_path)
    R_gt = np.asarray(gt["instances"][0]["pose"]["R"])
    assert any(np.linalg.norm(p.R - R_gt) < 1e-6 for p in poses)

    capsys.readouterr()
    assert main(["solve", str(out_dir / "instance_0001.json")]) == 0
    printed = json.loads(capsys.readouterr().out)
    assert isinstance(printed, list)

    report = tmp_path / "bench.json"
    assert main(["benchmark", "--problems", "3", "--repeats", "1", "--out-json", str(report)]) == 0
    assert report.exists()
    assert "Solutions" in capsys.readouterr().out
