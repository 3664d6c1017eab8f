from __future__ import annotations

import numpy as np

# Monomial order of one quadric row: [s1^2, s1 s2, s1 s3, s2^2, s2 s3, s3^2, s1, s2, s3, 1].
QUADRIC_MONOMIALS: tuple[tuple[int, int, int], ...] = (
    (2, 0, 0),
    (1, 1, 0),
    (1, 0, 1),
    (0, 2, 0),
    (0, 1, 1),
    (0, 0, 2),
    (1, 0, 0),
    (0, 1, 0),
    (0, 0, 1),
    (0, 0, 0),
)

# (1 + |s|^2) * vec(R(s)) for the Cayley map, vec() column-major. Shape (9,10).
_CAYLEY_VEC = np.array(
    [
        [1.0, 0.0, 0.0, -1.0, 0.0, -1.0, 0.0, 0.0, 0.0, 1.0],  # R00
        [0.0, 2.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 2.0, 0.0],  # R10
        [0.0, 0.0, 2.0, 0.0, 0.0, 0.0, 0.0, -2.0, 0.0, 0.0],  # R20
        [0.0, 2.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, -2.0, 0.0],  # R01
        [-1.0, 0.0, 0.0, 1.0, 0.0, -1.0, 0.0, 0.0, 0.0, 1.0],  # R11
        [0.0, 0.0, 0.0, 0.0, 2.0, 0.0, 2.0, 0.0, 0.0, 0.0],  # R21
        [0.0, 0.0, 2.0, 0.0, 0.0, 0.0, 0.0, 2.0, 0.0, 0.0],  # R02
        [0.0, 0.0, 0.0, 0.0, 2.0, 0.0, -2.0, 0.0, 0.0, 0.0],  # R12
        [-1.0, 0.0, 0.0, -1.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0],  # R22
    ],
    dtype=np.float64,
)

# Bezout bound for three quadrics in three unknowns.
MAX_SOLUTIONS = 8


def _monomials_up_to(degree: int) -> list[tuple[int, int, int]]:
    out: list[tuple[int, int, int]] = []
    for d in range(degree + 1):
        for a in range(d, -1, -1):
            for b in range(d - a, -1, -1):
                out.append((a, b, d - a - b))
    return out


def _add(m: tuple[int, int, int], n: tuple[int, int, int]) -> tuple[int, int, int]:
    return (m[0] + n[0], m[1] + n[1], m[2] + n[2])


# Macaulay matrix at degree 4: each quadric times every monomial of degree <= 2.
_MONOMIALS = _monomials_up_to(4)  # 35 columns, ascending degree
_INDEX = {m: i for i, m in enumerate(_MONOMIALS)}
_MULTIPLIERS = _monomials_up_to(2)  # 10 per quadric -> 30 rows
_MACAULAY_COLS = np.array([[_INDEX[_add(m, q)] for q in QUADRIC_MONOMIALS] for m in _MULTIPLIERS], dtype=np.intp)
# Three Koszul syzygies at degree 4, so a zero-dimensional system has rank 30 - 3.
_MACAULAY_RANK = 3 * len(_MULTIPLIERS) - 3
_N_LOW = len(_monomials_up_to(3))
_SHIFT_COLS = np.array(
    [[_INDEX[_add(m, e)] for e in ((1, 0, 0), (0, 1, 0), (0, 0, 1))] for m in _MONOMIALS[:_N_LOW]],
    dtype=np.intp,
)
_ONE = _INDEX[(0, 0, 0)]
_LINEAR = [_INDEX[(1, 0, 0)], _INDEX[(0, 1, 0)], _INDEX[(0, 0, 1)]]

# Generic linear form g(s) = c0 + c1 s1 + c2 s2 + c3 s3 whose multiplication map is diagonalized.
_SHIFT = np.array([0.3141, 0.7391, -0.4387, 0.5119], dtype=np.float64)


def rotation_to_quadrics(AR: np.ndarray) -> np.ndarray:
    """
    Turn a linear constraint AR @ vec(R) = 0 on rotation entries into three quadrics in
    the Cayley parameters, by substituting R(s) and clearing the denominator 1 + |s|^2.

    Returns a (3,10) coefficient matrix in the `QUADRIC_MONOMIALS` order.
    """
    AR = np.asarray(AR, dtype=np.float64).reshape(3, 9)
    return AR @ _CAYLEY_VEC


def quadric_monomials(s: np.ndarray) -> np.ndarray:
    s1, s2, s3 = (float(v) for v in np.asarray(s, dtype=np.float64).reshape(3))
    return np.array([s1 * s1, s1 * s2, s1 * s3, s2 * s2, s2 * s3, s3 * s3, s1, s2, s3, 1.0], dtype=np.float64)


def evaluate_quadrics(coeffs: np.ndarray, s: np.ndarray) -> np.ndarray:
    return np.asarray(coeffs, dtype=np.float64).reshape(3, 10) @ quadric_monomials(s)


def _quadrics_jacobian(coeffs: np.ndarray, s: np.ndarray) -> np.ndarray:
    s1, s2, s3 = (float(v) for v in s)
    dm = np.array(
        [
            [2.0 * s1, 0.0, 0.0],
            [s2, s1, 0.0],
            [s3, 0.0, s1],
            [0.0, 2.0 * s2, 0.0],
            [0.0, s3, s2],
            [0.0, 0.0, 2.0 * s3],
            [1.0, 0.0, 0.0],
            [0.0, 1.0, 0.0],
            [0.0, 0.0, 1.0],
            [0.0, 0.0, 0.0],
        ],
        dtype=np.float64,
    )
    return coeffs @ dm


def _polish_root(coeffs: np.ndarray, s: np.ndarray, iterations: int) -> np.ndarray:
    best = s
    best_res = float(np.linalg.norm(evaluate_quadrics(coeffs, s)))
    for _ in range(int(iterations)):
        J = _quadrics_jacobian(coeffs, s)
        try:
            step = np.linalg.solve(J, evaluate_quadrics(coeffs, s))
        except np.linalg.LinAlgError:
            break
        s = s - step
        res = float(np.linalg.norm(evaluate_quadrics(coeffs, s)))
        if not np.isfinite(res):
            break
        if res < best_res:
            best, best_res = s, res
    return best


def macaulay_matrix(coeffs: np.ndarray) -> np.ndarray:
    """Degree-4 Macaulay matrix (30,35) of three quadrics."""
    coeffs = np.asarray(coeffs, dtype=np.float64).reshape(3, 10)
    M = np.zeros((3 * len(_MULTIPLIERS), len(_MONOMIALS)), dtype=np.float64)
    rows = np.arange(len(_MULTIPLIERS))[:, None]
    for i in range(3):
        M[i * len(_MULTIPLIERS) + rows, _MACAULAY_COLS] = coeffs[i][None, :]
    return M


def solve_quadric_system(
    coeffs: np.ndarray,
    *,
    rank_tol: float = 1e-11,
    imag_tol: float = 1e-6,
    newton_iterations: int = 3,
) -> np.ndarray:
    """
    All real solutions of three quadrics in three unknowns.

    Null-space method: the degree-4 Macaulay matrix of a generic system has an
    8-dimensional null space spanned (up to a change of basis) by the monomial vectors
    of the 8 solutions. Restricting it to monomials of degree <= 3 and applying a
    linear shift gives an 8x8 eigenproblem whose eigenvectors recover the solutions.
    Complex roots are discarded and real roots are polished with a few Newton steps.

    Returns an (n,3) array with 0 <= n <= 8. Systems with a positive-dimensional
    solution set or solutions at infinity return no solutions.
    """
    from scipy import linalg  # type: ignore

    coeffs = np.asarray(coeffs, dtype=np.float64).reshape(3, 10)
    empty = np.zeros((0, 3), dtype=np.float64)
    norms = np.linalg.norm(coeffs, axis=1)
    if not np.all(np.isfinite(coeffs)) or np.any(norms == 0.0):
        return empty
    coeffs = coeffs / norms[:, None]

    M = macaulay_matrix(coeffs)
    _u, sv, vt = linalg.svd(M)
    if sv[_MACAULAY_RANK - 1] <= rank_tol * sv[0]:
        return empty
    N = vt[_MACAULAY_RANK:].T  # (35,8)

    K1 = N[:_N_LOW]
    sv1 = linalg.svd(K1, compute_uv=False)
    if sv1[-1] <= rank_tol * sv1[0]:
        return empty
    Kg = _SHIFT[0] * K1
    for j in range(3):
        Kg = Kg + _SHIFT[j + 1] * N[_SHIFT_COLS[:, j]]

    mult = np.linalg.lstsq(K1, Kg, rcond=None)[0]
    _eigvals, W = linalg.eig(mult)
    V = K1 @ W  # columns proportional to monomial vectors of the roots

    sols: list[np.ndarray] = []
    for j in range(V.shape[1]):
        v = V[:, j]
        if abs(v[_ONE]) <= 1e-12 * np.linalg.norm(v):
            continue
        s = v[_LINEAR] / v[_ONE]
        if np.any(np.abs(s.imag) > imag_tol * (1.0 + np.abs(s.real))):
            continue
        s_real = np.asarray(s.real, dtype=np.float64)
        if newton_iterations > 0:
            s_real = _polish_root(coeffs, s_real, newton_iterations)
        if np.all(np.isfinite(s_real)):
            sols.append(s_real)
    if not sols:
        return empty
    return np.stack(sols[:MAX_SOLUTIONS], axis=0)
