from genpose import options
from genpose.api import load_correspondences, load_poses, save_correspondences, save_poses
from genpose.core.geometry import CameraPose
from genpose.options import SolverOptions
from genpose.solvers.gp4ps import CorrespondenceError, gp4ps, solve_gp4ps

__all__ = [
    "options",
    "CameraPose",
    "SolverOptions",
    "CorrespondenceError",
    "gp4ps",
    "solve_gp4ps",
    "load_correspondences",
    "save_correspondences",
    "load_poses",
    "save_poses",
]
