from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class CameraPose:
    """
    Pose of a generalized camera with unknown scale.

    Convention: for each observed ray, alpha * p + lambda * x = R @ X + t
    with p the rig-frame ray anchor, x the ray direction and X the world point.
    """

    R: np.ndarray  # (3,3)
    t: np.ndarray  # (3,)
    alpha: float

    @classmethod
    def identity(cls) -> "CameraPose":
        return cls(R=np.eye(3, dtype=np.float64), t=np.zeros((3,), dtype=np.float64), alpha=1.0)

    def is_finite(self) -> bool:
        return bool(np.all(np.isfinite(self.R)) and np.all(np.isfinite(self.t)) and np.isfinite(self.alpha))

    def transform(self, X: np.ndarray) -> np.ndarray:
        """World points (N,3) -> rig frame, i.e. R X + t."""
        X = np.asarray(X, dtype=np.float64).reshape(-1, 3)
        return X @ self.R.T + self.t.reshape(1, 3)


def skew(v: np.ndarray) -> np.ndarray:
    v = np.asarray(v, dtype=np.float64).reshape(3)
    return np.array(
        [[0.0, -v[2], v[1]], [v[2], 0.0, -v[0]], [-v[1], v[0], 0.0]],
        dtype=np.float64,
    )


def cayley_to_rotation(s: np.ndarray) -> np.ndarray:
    """
    Cayley parameters s=(s1,s2,s3) -> rotation matrix.

    R = ((1 - |s|^2) I + 2 [s]_x + 2 s s^T) / (1 + |s|^2), which is the rotation of the
    quaternion (w=1, x=s1, y=s2, z=s3). Non-finite parameters (the half-turn limit)
    map to the identity.
    """
    s = np.asarray(s, dtype=np.float64).reshape(3)
    if not np.all(np.isfinite(s)):
        return np.eye(3, dtype=np.float64)
    n2 = float(s @ s)
    R = (1.0 - n2) * np.eye(3) + 2.0 * skew(s) + 2.0 * np.outer(s, s)
    return R / (1.0 + n2)


def rotation_to_cayley(R: np.ndarray) -> np.ndarray:
    """
    Inverse of `cayley_to_rotation`. Half-turn rotations have no finite
    parameters and come back with very large (or infinite) entries.
    """
    from scipy.spatial.transform import Rotation  # type: ignore

    q = Rotation.from_matrix(np.asarray(R, dtype=np.float64).reshape(3, 3)).as_quat()  # (x,y,z,w)
    with np.errstate(divide="ignore", invalid="ignore"):
        return q[:3] / q[3]


def rotation_angle_rad(R_a: np.ndarray, R_b: np.ndarray) -> float:
    """Geodesic angle between two rotations."""
    R_a = np.asarray(R_a, dtype=np.float64).reshape(3, 3)
    R_b = np.asarray(R_b, dtype=np.float64).reshape(3, 3)
    c = 0.5 * (np.trace(R_a.T @ R_b) - 1.0)
    return float(np.arccos(np.clip(c, -1.0, 1.0)))


def orthogonality_error(R: np.ndarray) -> float:
    R = np.asarray(R, dtype=np.float64).reshape(3, 3)
    return float(np.linalg.norm(R.T @ R - np.eye(3)))


def normalize_rays(d: np.ndarray) -> np.ndarray:
    d = np.asarray(d, dtype=np.float64)
    return d / np.linalg.norm(d, axis=-1, keepdims=True)
