import json
from pathlib import Path

import numpy as np
import pytest

from genpose.api.pose_io import (
    Correspondences,
    load_correspondences,
    load_poses,
    save_correspondences,
    save_poses,
)
from genpose.core.geometry import CameraPose, cayley_to_rotation


def test_correspondences_file_roundtrip(tmp_path: Path):
    rng = np.random.default_rng(0)
    c = Correspondences(p=rng.normal(size=(4, 3)), x=rng.normal(size=(4, 3)), X=rng.normal(size=(4, 3)))
    path = save_correspondences(tmp_path / "c.json", c)
    c2 = load_correspondences(path)
    assert np.array_equal(c.p, c2.p)
    assert np.array_equal(c.x, c2.x)
    assert np.array_equal(c.X, c2.X)


def test_poses_file_roundtrip(tmp_path: Path):
    pose = CameraPose(R=cayley_to_rotation([0.1, 0.2, 0.3]), t=np.array([1.0, 2.0, 3.0]), alpha=0.75)
    path = save_poses(tmp_path / "poses.json", [pose])
    (loaded,) = load_poses(path)
    assert np.array_equal(loaded.R, pose.R)
    assert np.array_equal(loaded.t, pose.t)
    assert loaded.alpha == 0.75


def test_load_correspondences_rejects_bad_schema(tmp_path: Path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"schema_version": "other", "p": [], "x": [], "X": []}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_correspondences(path)


def test_load_correspondences_rejects_mismatched_lengths(tmp_path: Path):
    path = tmp_path / "bad.json"
    data = {"schema_version": "genpose.correspondences.v0", "p": [[0, 0, 0]] * 4, "x": [[0, 0, 1]] * 3, "X": [[1, 1, 1]] * 4}
    path.write_text(json.dumps(data), encoding="utf-8")
    with pytest.raises(ValueError):
        load_correspondences(path)


def test_load_correspondences_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_correspondences(tmp_path / "missing.json")
