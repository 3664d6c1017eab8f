from __future__ import annotations

import itertools

import numpy as np

from genpose.core.geometry import cayley_to_rotation, rotation_to_cayley
from genpose.core.polynomial import (
    MAX_SOLUTIONS,
    evaluate_quadrics,
    macaulay_matrix,
    quadric_monomials,
    rotation_to_quadrics,
    solve_quadric_system,
)


def _product_system(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    # (s_i - a_i)(s_i - b_i) = 0 for i = 1..3
    coeffs = np.zeros((3, 10), dtype=np.float64)
    square = (0, 3, 5)
    for i in range(3):
        coeffs[i, square[i]] = 1.0
        coeffs[i, 6 + i] = -(a[i] + b[i])
        coeffs[i, 9] = a[i] * b[i]
    return coeffs


def test_product_system_has_all_eight_real_roots():
    a = np.array([0.5, -1.2, 2.0])
    b = np.array([-0.3, 0.7, -1.5])
    sols = solve_quadric_system(_product_system(a, b))
    assert sols.shape == (8, 3)
    expected = np.array(list(itertools.product(*zip(a, b))), dtype=np.float64)
    for e in expected:
        assert np.min(np.linalg.norm(sols - e[None, :], axis=1)) < 1e-10


def test_system_without_real_roots_returns_empty():
    # s_i^2 + 1 = 0
    coeffs = np.zeros((3, 10), dtype=np.float64)
    coeffs[0, 0] = coeffs[1, 3] = coeffs[2, 5] = 1.0
    coeffs[:, 9] = 1.0
    sols = solve_quadric_system(coeffs)
    assert sols.shape == (0, 3)


def test_zero_equation_returns_empty():
    coeffs = _product_system(np.array([1.0, 2.0, 3.0]), np.array([0.0, 0.0, 0.0]))
    coeffs[1] = 0.0
    assert solve_quadric_system(coeffs).shape == (0, 3)


def test_macaulay_matrix_shape_and_rank():
    rng = np.random.default_rng(0)
    M = macaulay_matrix(rng.normal(size=(3, 10)))
    assert M.shape == (30, 35)
    assert np.linalg.matrix_rank(M) == 27


def test_rotation_to_quadrics_matches_cayley_substitution():
    rng = np.random.default_rng(1)
    AR = rng.normal(size=(3, 9))
    coeffs = rotation_to_quadrics(AR)
    assert coeffs.shape == (3, 10)
    for _ in range(5):
        s = rng.normal(size=3)
        R = cayley_to_rotation(s)
        lhs = (1.0 + s @ s) * (AR @ R.reshape(9, order="F"))
        assert np.allclose(lhs, coeffs @ quadric_monomials(s), atol=1e-10)


def test_rotation_system_recovers_planted_rotation():
    rng = np.random.default_rng(2)
    s_true = np.array([0.3, -0.4, 0.8])
    v = cayley_to_rotation(s_true).reshape(9, order="F")
    G = rng.normal(size=(3, 9))
    AR = G - np.outer(G @ v, v) / (v @ v)
    coeffs = rotation_to_quadrics(AR)
    sols = solve_quadric_system(coeffs)
    assert 1 <= sols.shape[0] <= MAX_SOLUTIONS
    assert np.min(np.linalg.norm(sols - s_true[None, :], axis=1)) < 1e-9
    for s in sols:
        assert np.max(np.abs(evaluate_quadrics(coeffs, s))) < 1e-8 * np.max(np.abs(coeffs))
    assert np.allclose(rotation_to_cayley(cayley_to_rotation(s_true)), s_true, atol=1e-12)
