"""
Central configuration constants for the least-squares spherical harmonic expansion.
"""

# ========== Spherical harmonic conventions ==========
CSPHASE_DEFAULT = 1  # 1: exclude the Condon-Shortley phase (-1)^m, -1: include it
DEFAULT_NORMALIZATION = 1  # 1 geodesy, 2 Schmidt, 3 unnormalized, 4 orthonormalized

# ========== Solver settings ==========
# Workspace per unknown handed to LAPACK dgels: lwork = min(ncoef, nmax) * (1 + OPT)
SOLVER_WORKSPACE_OPT = 80

# ========== Numerical tolerances ==========
EPS = 1e-12  # slack allowed on |sin(latitude)| <= 1
