"""
gP4Ps demo (generalized camera, unknown scale).

It does:
1) build the scene X = {(0,0,5),(1,0,5),(0,1,5),(1,1,6)} seen by a rig with R = I, t = 0, alpha = 1,
2) run the minimal solver,
3) print every candidate pose with its ray residuals.
"""

from __future__ import annotations

import numpy as np

from genpose import solve_gp4ps
from genpose.core.geometry import rotation_angle_rad
from genpose.eval.validator import constraint_residuals


def main() -> None:
    X = np.array([[0.0, 0.0, 5.0], [1.0, 0.0, 5.0], [0.0, 1.0, 5.0], [1.0, 1.0, 6.0]], dtype=np.float64)
    # Ray anchors of a small rig, one per observation.
    p = np.array([[0.1, 0.0, 0.0], [-0.1, 0.05, 0.0], [0.0, -0.1, 0.02], [0.05, 0.05, -0.1]], dtype=np.float64)

    # R = I, t = 0, alpha = 1: the ray from p_i passes through X_i.
    x = X - p
    x /= np.linalg.norm(x, axis=1, keepdims=True)

    poses = solve_gp4ps(p, x, X)
    print(f"{len(poses)} candidate poses")
    for k, pose in enumerate(poses):
        res = np.linalg.norm(constraint_residuals(pose, p, x, X), axis=1)
        print(
            f"[{k}] angle_to_identity_rad={rotation_angle_rad(pose.R, np.eye(3)):.3e} "
            f"t={np.array2string(pose.t, precision=4)} alpha={pose.alpha:.6f} "
            f"max_ray_residual={float(res.max()):.3e}"
        )


if __name__ == "__main__":
    main()
