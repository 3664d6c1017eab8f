from __future__ import annotations

from pathlib import Path

import numpy as np

from genpose.eval.benchmark import BenchmarkResult


def plot_pose_error_histogram(path: Path, results: list[BenchmarkResult], bins: int = 60) -> Path:
    """
    Histogram of log10 of the best pose error per instance (numerical stability plot).
    Instances without any solution are left out.
    """
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=(6.0, 4.0))
    for r in results:
        err = np.asarray(r.pose_errors, dtype=np.float64)
        err = err[np.isfinite(err)]
        if err.size == 0:
            continue
        ax.hist(np.log10(np.maximum(err, 1e-18)), bins=int(bins), histtype="step", label=r.name)
    ax.set_xlabel("log10 pose error")
    ax.set_ylabel("instances")
    ax.legend(loc="upper right")
    fig.tight_layout()
    fig.savefig(path, dpi=120)
    plt.close(fig)
    return path
