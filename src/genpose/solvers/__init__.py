"""
Minimal pose solvers.

Each solver consumes the smallest number of correspondences that makes the problem
finite and returns every algebraic solution in closed form.
"""
