import numpy as np

from genpose.core.geometry import CameraPose, cayley_to_rotation
from genpose.eval.validator import compute_pose_error, constraint_residuals, is_valid, recover_depths
from genpose.sim.problem_generator import ProblemOptions, generate_problem


def _instance(seed: int = 0, **kwargs):
    return generate_problem(ProblemOptions(**kwargs), np.random.default_rng(seed))


def test_generated_instance_is_consistent():
    inst = _instance()
    gt = inst.pose_gt
    assert inst.p.shape == inst.x.shape == inst.X.shape == (4, 3)
    assert np.allclose(np.linalg.norm(inst.x, axis=1), 1.0)
    assert np.all(inst.x[:, 2] > 0.0)
    lhs = gt.alpha * inst.p + inst.depths[:, None] * inst.x
    assert np.allclose(lhs, gt.transform(inst.X), atol=1e-12)


def test_central_known_scale_options():
    inst = _instance(1, generalized=False, unknown_scale=False)
    assert np.all(inst.p == 0.0)
    assert inst.pose_gt.alpha == 1.0


def test_ground_truth_is_valid_and_has_zero_error():
    inst = _instance(2)
    assert is_valid(inst, inst.pose_gt, 1e-9)
    assert compute_pose_error(inst, inst.pose_gt) == 0.0
    assert np.allclose(recover_depths(inst.pose_gt, inst.p, inst.x, inst.X), inst.depths)
    assert np.max(np.abs(constraint_residuals(inst.pose_gt, inst.p, inst.x, inst.X))) < 1e-12


def test_perturbed_pose_is_invalid():
    inst = _instance(3)
    gt = inst.pose_gt
    R = cayley_to_rotation([0.05, 0.0, 0.0]) @ gt.R
    bad = CameraPose(R=R, t=gt.t, alpha=gt.alpha)
    assert not is_valid(inst, bad, 1e-6)
    assert compute_pose_error(inst, bad) > 1e-3


def test_non_orthogonal_rotation_is_invalid():
    inst = _instance(4)
    gt = inst.pose_gt
    assert not is_valid(inst, CameraPose(R=1.01 * gt.R, t=gt.t, alpha=gt.alpha), 1e-6)
