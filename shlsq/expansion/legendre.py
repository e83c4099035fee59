"""
Associated Legendre function evaluators for the four supported normalizations.

All variants return values in triangular-packed order (see
:mod:`shlsq.expansion.indexing`). The 4π (geodesy) normalized functions are
computed with the standard forward column recursion

    P(m, m)   = u sqrt((2m+1) / 2m) P(m-1, m-1)
    P(m+1, m) = z sqrt(2m+3) P(m, m)
    P(l, m)   = a(l, m) z P(l-1, m) - b(l, m) P(l-2, m)

with z = cos(colatitude) and u = sin(colatitude); the Schmidt, unnormalized and
orthonormalized variants are rescalings of it.
"""

from __future__ import annotations

import logging

import numpy as np
from scipy.special import gammaln

from shlsq import config
from shlsq.errors import InvalidArgument

from .indexing import packed_size
from .types import NormalizationMode, PhaseConvention, parse_normalization, parse_phase

__all__ = [
    "LegendreEvaluator",
    "PLegendreA",
    "PlmBar",
    "PlmON",
    "PlmSchmidt",
    "get_evaluator",
]

logger = logging.getLogger(__name__)


class LegendreEvaluator:
    """
    Base evaluator producing 4π-normalized associated Legendre functions.

    Recursion coefficients are cached per maximum degree; call :meth:`release`
    to drop them once an expansion is done.
    """

    normalization = NormalizationMode.GEODESY

    def __init__(self) -> None:
        self._tables: dict[int, tuple[np.ndarray, np.ndarray]] = {}
        self._scales: dict[int, np.ndarray] = {}

    def evaluate(
        self,
        lmax: int,
        z: float | np.ndarray,
        csphase: PhaseConvention | int | None = None,
    ) -> np.ndarray:
        """
        Evaluate all P(l, m) up to degree lmax.

        Args:
            lmax: Maximum degree (>= 0)
            z: Argument(s), usually sin(latitude); each must satisfy |z| <= 1
            csphase: Phase convention; INCLUDE multiplies order m by (-1)^m

        Returns:
            Packed values of shape (packed_size(lmax),) for scalar z, or
            (packed_size(lmax), n) for an array of n arguments.
        """
        if lmax < 0:
            raise InvalidArgument(f"LMAX must be greater than or equal to 0; got {lmax}")
        phase = parse_phase(csphase)

        z_arr = np.asarray(z, dtype=np.float64)
        scalar = z_arr.ndim == 0
        z_arr = np.atleast_1d(z_arr).ravel()
        if np.any(np.abs(z_arr) > 1.0 + config.EPS) or not np.all(np.isfinite(z_arr)):
            raise InvalidArgument("Legendre argument must lie in [-1, 1]")
        z_arr = np.clip(z_arr, -1.0, 1.0)

        p = self._geodesy(lmax, z_arr)
        p *= self._scale(lmax)[:, np.newaxis]
        if phase is PhaseConvention.INCLUDE:
            p *= _phase_factors(lmax)[:, np.newaxis]

        return p[:, 0] if scalar else p

    def release(self) -> None:
        """Drop cached recursion tables."""
        self._tables.clear()
        self._scales.clear()

    def _scale(self, lmax: int) -> np.ndarray:
        """Factors converting 4π-normalized values to this variant."""
        scale = self._scales.get(lmax)
        if scale is None:
            scale = self._build_scale(lmax)
            self._scales[lmax] = scale
        return scale

    def _build_scale(self, lmax: int) -> np.ndarray:
        return np.ones(packed_size(lmax), dtype=np.float64)

    def _recursion_tables(self, lmax: int) -> tuple[np.ndarray, np.ndarray]:
        tables = self._tables.get(lmax)
        if tables is not None:
            return tables

        size = packed_size(lmax)
        a = np.zeros(size, dtype=np.float64)
        b = np.zeros(size, dtype=np.float64)
        k = 0
        for l in range(lmax + 1):  # noqa: E741
            for m in range(l + 1):
                if l >= m + 2:
                    a[k] = np.sqrt((2 * l - 1) * (2 * l + 1) / ((l - m) * (l + m)))
                    b[k] = np.sqrt(
                        (2 * l + 1) * (l + m - 1) * (l - m - 1)
                        / ((l - m) * (l + m) * (2 * l - 3))
                    )
                k += 1

        logger.debug("Built Legendre recursion tables for lmax=%d", lmax)
        self._tables[lmax] = (a, b)
        return a, b

    def _geodesy(self, lmax: int, z: np.ndarray) -> np.ndarray:
        a, b = self._recursion_tables(lmax)
        u = np.sqrt(np.clip(1.0 - z * z, 0.0, None))
        p = np.zeros((packed_size(lmax), z.size), dtype=np.float64)

        pmm = np.ones_like(z)
        for m in range(lmax + 1):
            kmm = m * (m + 1) // 2 + m
            if m == 1:
                pmm = np.sqrt(3.0) * u
            elif m > 1:
                pmm = pmm * u * np.sqrt((2 * m + 1) / (2 * m))
            p[kmm] = pmm

            if m == lmax:
                break
            k_prev = kmm + m + 1
            p[k_prev] = z * np.sqrt(2 * m + 3) * pmm

            for l in range(m + 2, lmax + 1):  # noqa: E741
                k = l * (l + 1) // 2 + m
                p[k] = a[k] * z * p[k - l] - b[k] * p[k - 2 * l + 1]

        return p


class PlmBar(LegendreEvaluator):
    """4π (geodesy) normalized functions."""

    normalization = NormalizationMode.GEODESY


class PlmSchmidt(LegendreEvaluator):
    """Schmidt semi-normalized functions: PlmBar / sqrt(2l+1)."""

    normalization = NormalizationMode.SCHMIDT

    def _build_scale(self, lmax: int) -> np.ndarray:
        degrees = _packed_degrees(lmax)
        return 1.0 / np.sqrt(2.0 * degrees + 1.0)


class PLegendreA(LegendreEvaluator):
    """Unnormalized associated Legendre functions.

    Values grow like (2l)!/(2^l l!) at high order, so double precision
    overflows for degrees beyond roughly 150.
    """

    normalization = NormalizationMode.UNNORMALIZED

    def _build_scale(self, lmax: int) -> np.ndarray:
        degrees = _packed_degrees(lmax)
        orders = _packed_orders(lmax)
        delta = np.where(orders == 0, 1.0, 2.0)
        log_ratio = gammaln(degrees + orders + 1.0) - gammaln(degrees - orders + 1.0)
        return np.exp(0.5 * log_ratio) / np.sqrt(delta * (2.0 * degrees + 1.0))


class PlmON(LegendreEvaluator):
    """Orthonormalized functions: PlmBar / sqrt(4π)."""

    normalization = NormalizationMode.ORTHONORMALIZED

    def _build_scale(self, lmax: int) -> np.ndarray:
        return np.full(packed_size(lmax), 1.0 / np.sqrt(4.0 * np.pi))


_EVALUATORS: dict[NormalizationMode, type[LegendreEvaluator]] = {
    NormalizationMode.GEODESY: PlmBar,
    NormalizationMode.SCHMIDT: PlmSchmidt,
    NormalizationMode.UNNORMALIZED: PLegendreA,
    NormalizationMode.ORTHONORMALIZED: PlmON,
}


def get_evaluator(normalization: NormalizationMode | int | str | None = None) -> LegendreEvaluator:
    """Return a fresh evaluator for the requested normalization."""
    return _EVALUATORS[parse_normalization(normalization)]()


def _packed_degrees(lmax: int) -> np.ndarray:
    return np.concatenate([np.full(l + 1, l, dtype=np.float64) for l in range(lmax + 1)])  # noqa: E741


def _packed_orders(lmax: int) -> np.ndarray:
    return np.concatenate([np.arange(l + 1, dtype=np.float64) for l in range(lmax + 1)])  # noqa: E741


def _phase_factors(lmax: int) -> np.ndarray:
    return np.where(_packed_orders(lmax) % 2 == 1, -1.0, 1.0)
