from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import MutableSequence, Protocol

import numpy as np

from genpose.core.geometry import CameraPose, cayley_to_rotation
from genpose.core.polynomial import rotation_to_quadrics, solve_quadric_system
from genpose.options import SolverOptions

logger = logging.getLogger(__name__)

N_POINTS = 4


class CorrespondenceError(ValueError):
    pass


class DegenerateConfigurationError(ValueError):
    pass


class RotationBackend(Protocol):
    """Rotation parameterization and polynomial engine used by the rotation recovery stage."""

    def to_quadrics(self, AR: np.ndarray) -> np.ndarray: ...

    def solve(self, coeffs: np.ndarray) -> np.ndarray: ...

    def to_rotation(self, s: np.ndarray) -> np.ndarray: ...


@dataclass(frozen=True)
class CayleyBackend:
    options: SolverOptions = SolverOptions()

    def to_quadrics(self, AR: np.ndarray) -> np.ndarray:
        return rotation_to_quadrics(AR)

    def solve(self, coeffs: np.ndarray) -> np.ndarray:
        return solve_quadric_system(
            coeffs,
            rank_tol=self.options.rank_tol,
            imag_tol=self.options.imag_tol,
            newton_iterations=self.options.newton_iterations,
        )

    def to_rotation(self, s: np.ndarray) -> np.ndarray:
        return cayley_to_rotation(s)


@dataclass(frozen=True)
class EliminationResult:
    """
    Output of the linear elimination stage.

    - `A`: (8,13) constraint matrix acting on [t; alpha; vec(R)]
    - `B`: (4,4) inverse of the leading block A[:4,:4]
    - `AR`: (3,9) reduced map on vec(R) (Schur complement of rows 4..6)
    """

    A: np.ndarray
    B: np.ndarray
    AR: np.ndarray

    def back_substitute(self, R: np.ndarray) -> np.ndarray:
        """[t; alpha] for a given rotation."""
        vec_r = np.asarray(R, dtype=np.float64).reshape(3, 3).reshape(9, order="F")
        return -self.B @ (self.A[:4, 4:] @ vec_r)


def _as_points(name: str, v: object) -> np.ndarray:
    try:
        arr = np.asarray(v, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise CorrespondenceError(f"{name} must be numeric: {e}") from e
    if arr.shape != (N_POINTS, 3):
        raise CorrespondenceError(f"{name} must hold {N_POINTS} vectors of length 3 (got shape {arr.shape})")
    if not np.all(np.isfinite(arr)):
        raise CorrespondenceError(f"{name} contains non-finite values")
    return arr


def check_correspondences(p: object, x: object, X: object) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Validate and convert the three parallel sequences to (4,3) float arrays."""
    p_arr = _as_points("p", p)
    x_arr = _as_points("x", x)
    X_arr = _as_points("X", X)
    if np.any(np.linalg.norm(x_arr, axis=1) == 0.0):
        raise CorrespondenceError("ray directions x must be non-zero")
    return p_arr, x_arr, X_arr


def build_constraint_matrix(p: np.ndarray, x: np.ndarray, X: np.ndarray) -> np.ndarray:
    """
    (8,13) matrix A with A @ [t; alpha; vec(R)] = 0 for the true pose.

    Each correspondence gives two rows xx @ (R X + t - alpha p) = 0 with
    xx = [[x_z, 0, -x_x], [0, x_z, -x_y]], i.e. two components of x cross (alpha p - R X - t).
    """
    A = np.zeros((2 * N_POINTS, 13), dtype=np.float64)
    for i in range(N_POINTS):
        xx = np.array([[x[i, 2], 0.0, -x[i, 0]], [0.0, x[i, 2], -x[i, 1]]], dtype=np.float64)
        rows = slice(2 * i, 2 * i + 2)
        A[rows, 0:3] = xx
        A[rows, 3] = -xx @ p[i]
        A[rows, 4:] = np.kron(X[i].reshape(1, 3), xx)
    return A


def _check_configuration(x: np.ndarray, X: np.ndarray, tol: float) -> None:
    # The third ray coordinate is the elimination pivot.
    if np.any(np.abs(x[:, 2]) <= tol * np.linalg.norm(x, axis=1)):
        raise DegenerateConfigurationError("ray direction with vanishing z component")
    sv = np.linalg.svd(X - X.mean(axis=0, keepdims=True), compute_uv=False)
    if sv[1] <= tol * sv[0]:
        raise DegenerateConfigurationError("world points are coincident or collinear")


def eliminate_translation_scale(
    p: np.ndarray, x: np.ndarray, X: np.ndarray, options: SolverOptions | None = None
) -> EliminationResult:
    """
    Eliminate t and alpha with the first two correspondences, leaving a linear map on vec(R).

    Raises DegenerateConfigurationError when the configuration cannot be reduced.
    """
    if options is None:
        options = SolverOptions()
    _check_configuration(x, X, options.degenerate_tol)

    A = build_constraint_matrix(p, x, X)
    lead = A[:4, :4]
    sv = np.linalg.svd(lead, compute_uv=False)
    if sv[-1] <= options.singular_tol * sv[0]:
        raise DegenerateConfigurationError(f"leading 4x4 block is singular (s_min/s_max={sv[-1] / sv[0]:.3g})")
    B = np.linalg.inv(lead)

    AR = A[4:7, 4:] - A[4:7, :4] @ B @ A[:4, 4:]
    if np.linalg.norm(AR) <= options.degenerate_tol * np.linalg.norm(A[4:7, 4:]):
        raise DegenerateConfigurationError("reduced rotation constraints vanish")
    return EliminationResult(A=A, B=B, AR=AR)


def recover_poses(elim: EliminationResult, backend: RotationBackend) -> list[CameraPose]:
    """Solve the reduced system for rotations and back-substitute t and alpha for each root."""
    coeffs = backend.to_quadrics(elim.AR)
    roots = np.asarray(backend.solve(coeffs), dtype=np.float64).reshape(-1, 3)

    poses: list[CameraPose] = []
    for s in roots:
        R = np.asarray(backend.to_rotation(s), dtype=np.float64).reshape(3, 3)
        ts = elim.back_substitute(R)
        pose = CameraPose(R=R, t=ts[:3].copy(), alpha=float(ts[3]))
        if not pose.is_finite():
            logger.debug("gp4ps: dropping non-finite pose for root %s", s)
            continue
        poses.append(pose)
    return poses


def gp4ps(
    p: object,
    x: object,
    X: object,
    output: MutableSequence[CameraPose],
    *,
    options: SolverOptions | None = None,
    backend: RotationBackend | None = None,
) -> int:
    """
    Minimal generalized-camera pose solver with unknown scale (4 correspondences).

    Finds every (R, t, alpha) such that alpha * p[i] + lambda_i * x[i] = R @ X[i] + t,
    appends one CameraPose per real root to `output` and returns how many were
    appended (0..8). Degenerate configurations append nothing and return 0; malformed
    input raises CorrespondenceError. No validity filtering is applied to the roots.
    """
    p_arr, x_arr, X_arr = check_correspondences(p, x, X)
    if options is None:
        options = SolverOptions()
    if backend is None:
        backend = CayleyBackend(options)

    try:
        elim = eliminate_translation_scale(p_arr, x_arr, X_arr, options)
    except DegenerateConfigurationError as e:
        logger.debug("gp4ps: degenerate configuration (%s), no solutions", e)
        return 0

    poses = recover_poses(elim, backend)
    output.extend(poses)
    return len(poses)


def solve_gp4ps(
    p: object,
    x: object,
    X: object,
    *,
    options: SolverOptions | None = None,
    backend: RotationBackend | None = None,
) -> list[CameraPose]:
    """Convenience wrapper around `gp4ps` returning a fresh list of poses."""
    poses: list[CameraPose] = []
    gp4ps(p, x, X, poses, options=options, backend=backend)
    return poses
