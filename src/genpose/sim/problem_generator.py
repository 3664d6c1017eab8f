from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from genpose.core.geometry import CameraPose, normalize_rays


@dataclass(frozen=True)
class ProblemOptions:
    camera_fov_deg: float = 120.0
    min_depth: float = 0.1
    max_depth: float = 10.0
    rig_size: float = 1.0
    translation_scale: float = 1.0
    min_scale: float = 0.5
    max_scale: float = 2.0
    n_points: int = 4
    generalized: bool = True
    unknown_scale: bool = True


@dataclass(frozen=True)
class ProblemInstance:
    """
    One synthetic minimal problem with known ground truth.

    - `p`: ray anchors in the rig frame (N,3)
    - `x`: unit ray directions (N,3)
    - `X`: world points (N,3)
    - `depths`: lambda_i such that alpha p + lambda x = R X + t
    """

    p: np.ndarray
    x: np.ndarray
    X: np.ndarray
    depths: np.ndarray
    pose_gt: CameraPose


def _check_options(options: ProblemOptions) -> None:
    if not (0.0 < options.camera_fov_deg < 180.0):
        raise ValueError("camera_fov_deg must be in (0, 180)")
    if not (0.0 < options.min_depth <= options.max_depth):
        raise ValueError("depth range must satisfy 0 < min_depth <= max_depth")
    if not (0.0 < options.min_scale <= options.max_scale):
        raise ValueError("scale range must satisfy 0 < min_scale <= max_scale")
    if options.n_points < 1:
        raise ValueError("n_points must be >= 1")


def generate_problem(options: ProblemOptions, rng: np.random.Generator) -> ProblemInstance:
    from scipy.spatial.transform import Rotation  # type: ignore

    _check_options(options)
    n = int(options.n_points)

    # Normalized Gaussian quaternion: uniform on SO(3).
    R = Rotation.from_quat(rng.normal(size=(4,))).as_matrix()
    t = rng.uniform(-1.0, 1.0, size=(3,)) * float(options.translation_scale)
    alpha = float(rng.uniform(options.min_scale, options.max_scale)) if options.unknown_scale else 1.0
    pose = CameraPose(R=R, t=t, alpha=alpha)

    if options.generalized:
        p = rng.uniform(-0.5, 0.5, size=(n, 3)) * float(options.rig_size)
    else:
        p = np.zeros((n, 3), dtype=np.float64)

    half = np.tan(0.5 * np.deg2rad(float(options.camera_fov_deg)))
    xy = rng.uniform(-half, half, size=(n, 2))
    x = normalize_rays(np.concatenate([xy, np.ones((n, 1))], axis=1))
    depths = rng.uniform(options.min_depth, options.max_depth, size=(n,))

    # X = R^T (alpha p + lambda x - t)
    P_rig = alpha * p + depths[:, None] * x
    X = (P_rig - t.reshape(1, 3)) @ R
    return ProblemInstance(p=p, x=x, X=X, depths=depths, pose_gt=pose)


def generate_problems(n_problems: int, options: ProblemOptions, rng: np.random.Generator) -> list[ProblemInstance]:
    return [generate_problem(options, rng) for _ in range(int(n_problems))]
