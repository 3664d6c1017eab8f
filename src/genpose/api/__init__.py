from genpose.api.pose_io import (
    Correspondences,
    load_correspondences,
    load_poses,
    save_correspondences,
    save_poses,
)

__all__ = [
    "Correspondences",
    "load_correspondences",
    "save_correspondences",
    "load_poses",
    "save_poses",
]
