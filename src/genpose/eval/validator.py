from __future__ import annotations

import numpy as np

from genpose.core.geometry import CameraPose
from genpose.sim.problem_generator import ProblemInstance


def recover_depths(pose: CameraPose, p: np.ndarray, x: np.ndarray, X: np.ndarray) -> np.ndarray:
    """
    Least-squares depths lambda_i for alpha p + lambda x = R X + t.
    """
    p = np.asarray(p, dtype=np.float64).reshape(-1, 3)
    x = np.asarray(x, dtype=np.float64).reshape(-1, 3)
    Z = pose.transform(X) - pose.alpha * p
    return np.sum(Z * x, axis=-1) / np.sum(x * x, axis=-1)


def constraint_residuals(pose: CameraPose, p: np.ndarray, x: np.ndarray, X: np.ndarray) -> np.ndarray:
    """
    Residual of each correspondence orthogonal to its ray, shape (N,3).

    Zero when some lambda_i satisfies the pose constraint exactly.
    """
    x = np.asarray(x, dtype=np.float64).reshape(-1, 3)
    lam = recover_depths(pose, p, x, X)
    Z = pose.transform(X) - pose.alpha * np.asarray(p, dtype=np.float64).reshape(-1, 3)
    return Z - lam[:, None] * x


def is_valid(instance: ProblemInstance, pose: CameraPose, tol: float) -> bool:
    R = np.asarray(pose.R, dtype=np.float64)
    if not pose.is_finite():
        return False
    if np.linalg.norm(R.T @ R - np.eye(3)) > tol:
        return False
    if np.linalg.det(R) < 0.0:
        return False

    Z = pose.transform(instance.X) - pose.alpha * instance.p
    for z, d in zip(Z, instance.x):
        denom = float(np.linalg.norm(z) * np.linalg.norm(d))
        if denom == 0.0:
            return False
        c = float(z @ d) / denom
        if not (1.0 - abs(c) <= tol):
            return False
    return True


def compute_pose_error(instance: ProblemInstance, pose: CameraPose) -> float:
    gt = instance.pose_gt
    return float(
        np.linalg.norm(pose.R - gt.R) + np.linalg.norm(pose.t - gt.t) + abs(pose.alpha - gt.alpha)
    )
