from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np

from genpose.core.geometry import CameraPose

CORRESPONDENCES_SCHEMA = "genpose.correspondences.v0"
POSES_SCHEMA = "genpose.poses.v0"


@dataclass(frozen=True)
class Correspondences:
    p: np.ndarray  # (N,3) ray anchors in the rig frame
    x: np.ndarray  # (N,3) ray directions
    X: np.ndarray  # (N,3) world points


def _to_float_matrix(x: object, shape: tuple[int, ...], name: str) -> np.ndarray:
    arr = np.asarray(x, dtype=np.float64)
    if arr.shape != shape:
        raise ValueError(f"{name} must have shape {shape} (got {arr.shape})")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name}: non-finite values")
    return arr


def correspondences_to_dict(c: Correspondences) -> dict[str, Any]:
    return {
        "schema_version": CORRESPONDENCES_SCHEMA,
        "p": np.asarray(c.p, dtype=np.float64).tolist(),
        "x": np.asarray(c.x, dtype=np.float64).tolist(),
        "X": np.asarray(c.X, dtype=np.float64).tolist(),
    }


def parse_correspondences(data: dict[str, Any]) -> Correspondences:
    if str(data.get("schema_version")) != CORRESPONDENCES_SCHEMA:
        raise ValueError(f"schema_version must be {CORRESPONDENCES_SCHEMA}")
    for k in ("p", "x", "X"):
        if k not in data:
            raise ValueError(f"missing key: {k}")
    if not isinstance(data["p"], list):
        raise ValueError("p must be a list of 3-vectors")
    n = len(data["p"])
    return Correspondences(
        p=_to_float_matrix(data["p"], (n, 3), "p"),
        x=_to_float_matrix(data["x"], (n, 3), "x"),
        X=_to_float_matrix(data["X"], (n, 3), "X"),
    )


def load_correspondences(path: Path) -> Correspondences:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing {path}")
    data = json.loads(path.read_text(encoding="utf-8"))
    try:
        return parse_correspondences(data)
    except ValueError as e:
        raise ValueError(f"{path}: {e}") from e


def save_correspondences(path: Path, c: Correspondences) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(correspondences_to_dict(c), indent=2), encoding="utf-8")
    return path


def pose_to_dict(pose: CameraPose) -> dict[str, Any]:
    return {
        "R": np.asarray(pose.R, dtype=np.float64).tolist(),
        "t": np.asarray(pose.t, dtype=np.float64).reshape(3).tolist(),
        "alpha": float(pose.alpha),
    }


def pose_from_dict(d: dict[str, Any]) -> CameraPose:
    return CameraPose(
        R=_to_float_matrix(d["R"], (3, 3), "R"),
        t=_to_float_matrix(d["t"], (3,), "t"),
        alpha=float(d["alpha"]),
    )


def save_poses(path: Path, poses: list[CameraPose]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {"schema_version": POSES_SCHEMA, "poses": [pose_to_dict(p) for p in poses]}
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


def load_poses(path: Path) -> list[CameraPose]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if str(data.get("schema_version")) != POSES_SCHEMA:
        raise ValueError(f"{path}: schema_version must be {POSES_SCHEMA}")
    return [pose_from_dict(d) for d in data.get("poses", [])]
