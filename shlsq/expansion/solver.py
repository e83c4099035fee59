"""Dense linear least-squares solvers consumed by the expansion routine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import numpy as np
from scipy.linalg import get_lapack_funcs

__all__ = ["DgelsSolver", "LeastSquaresSolver", "SolverOutput"]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SolverOutput:
    """Result of a single least-squares solve."""

    solution: np.ndarray  # length max(rows, cols)
    info: int  # 0 on success
    optimal_lwork: float  # workspace size the backend would have preferred


class LeastSquaresSolver(Protocol):
    """Solve min ||A x - b|| (rows > cols) or min ||x|| s.t. A x = b (rows <= cols)."""

    def solve(self, design: np.ndarray, rhs: np.ndarray, lwork: int) -> SolverOutput:
        """
        Args:
            design: Matrix A of shape (rows, cols); may be overwritten
            rhs: Right-hand side padded to length max(rows, cols)
            lwork: Workspace size the caller allotted

        Returns:
            SolverOutput whose first cols entries hold x. When rows > cols,
            entries cols..rows-1 hold the residual components.
        """
        ...


class DgelsSolver:
    """QR/LQ based solver using LAPACK ``?gels`` through SciPy.

    Assumes the design matrix has full rank; LAPACK reports an exactly
    singular triangular factor with a positive INFO.
    """

    def solve(self, design: np.ndarray, rhs: np.ndarray, lwork: int) -> SolverOutput:
        design = np.asfortranarray(design, dtype=np.float64)
        rhs = np.asarray(rhs, dtype=np.float64)
        rows, cols = design.shape
        if rhs.shape != (max(rows, cols),):
            raise ValueError(
                f"rhs must have shape ({max(rows, cols)},); got {rhs.shape}"
            )

        gels, gels_lwork = get_lapack_funcs(("gels", "gels_lwork"), (design, rhs))

        optimal, query_info = gels_lwork(rows, cols, 1)
        if query_info != 0:
            logger.debug("gels workspace query returned INFO = %d", query_info)
            optimal = float(lwork)

        _, solution, info = gels(
            design, rhs, trans="N", lwork=int(lwork), overwrite_a=True, overwrite_b=False
        )
        return SolverOutput(
            solution=np.asarray(solution, dtype=np.float64).ravel(),
            info=int(info),
            optimal_lwork=float(np.real(optimal)),
        )
