"""
Least-squares spherical harmonic expansion of scattered data.

Fits real coefficients C_lm, S_lm of

    f(lat, lon) = Σ_l Σ_m P_lm(sin lat) [C_lm cos(m lon) + S_lm sin(m lon)]

to samples at arbitrary points. When there are more samples than unknowns
(nmax > (lmax+1)^2) the overdetermined system is solved in the least-squares
sense; otherwise the minimum-norm solution of the underdetermined system is
returned.

The design matrix is dense, nmax x (lmax+1)^2, so memory grows as
8 * nmax * (lmax+1)^2 bytes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

import numpy as np

from shlsq.errors import InvalidArgument, ShapeMismatch, SolverFailure

from .indexing import is_integer, plm_index_zero
from .legendre import LegendreEvaluator, get_evaluator
from .solver import DgelsSolver, LeastSquaresSolver
from .types import ExpansionConfig, PhaseConvention, parse_normalization, parse_phase

__all__ = [
    "ExpansionResult",
    "build_design_matrix",
    "coefficient_count",
    "evaluate_expansion",
    "pack_coefficients",
    "sh_expand_lsq",
    "unpack_coefficients",
]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ExpansionResult:
    """Outcome of a least-squares expansion."""

    cilm: np.ndarray  # shape (2, >= lmax+1, >= lmax+1)
    chi2: float | None  # residual sum of squares, overdetermined case only
    lmax: int
    nmax: int
    overdetermined: bool


def coefficient_count(lmax: int) -> int:
    """Number of real spherical harmonic coefficients up to degree lmax."""
    return (lmax + 1) ** 2


def _column_layout(lmax: int) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Describe the design-matrix columns.

    For each degree l the cosine columns m = 0..l come first, followed by the
    sine columns m = 1..l. Returns per-column (selector, degree, order, packed
    Legendre index), where selector 0 is cosine and 1 is sine.
    """
    selector: list[int] = []
    degree: list[int] = []
    order: list[int] = []
    packed: list[int] = []
    for l in range(lmax + 1):  # noqa: E741
        for m in range(l + 1):
            selector.append(0)
            degree.append(l)
            order.append(m)
            packed.append(plm_index_zero(l, m))
        for m in range(1, l + 1):
            selector.append(1)
            degree.append(l)
            order.append(m)
            packed.append(plm_index_zero(l, m))
    return (
        np.array(selector, dtype=np.intp),
        np.array(degree, dtype=np.intp),
        np.array(order, dtype=np.intp),
        np.array(packed, dtype=np.intp),
    )


def build_design_matrix(
    lat_deg: np.ndarray,
    lon_deg: np.ndarray,
    lmax: int,
    evaluator: LegendreEvaluator | None = None,
    csphase: PhaseConvention | int | None = None,
) -> np.ndarray:
    """
    Build the (n_samples, (lmax+1)^2) matrix of basis functions at the samples.

    Args:
        lat_deg: Latitudes in degrees
        lon_deg: Longitudes in degrees
        lmax: Maximum spherical harmonic degree
        evaluator: Legendre evaluator (default: geodesy normalization)
        csphase: Condon-Shortley phase convention

    Returns:
        Design matrix G with G[i, j] = basis function j at sample i
    """
    if evaluator is None:
        evaluator = get_evaluator()

    lat_rad = np.deg2rad(np.asarray(lat_deg, dtype=np.float64).ravel())
    lon_rad = np.deg2rad(np.asarray(lon_deg, dtype=np.float64).ravel())
    if lat_rad.size != lon_rad.size:
        raise ShapeMismatch(
            f"LAT and LON must have the same length; got {lat_rad.size} and {lon_rad.size}"
        )

    n_rows = lat_rad.size
    n_cols = coefficient_count(lmax)
    design = np.empty((n_rows, n_cols), dtype=np.float64)
    if n_rows == 0:
        return design

    # (n_packed, n_rows)
    plm = evaluator.evaluate(lmax, np.sin(lat_rad), csphase=csphase)
    m_lon = np.outer(lon_rad, np.arange(lmax + 1, dtype=np.float64))
    cos_m = np.cos(m_lon)
    sin_m = np.sin(m_lon)

    selector, _, order, packed = _column_layout(lmax)
    for col in range(n_cols):
        trig = sin_m if selector[col] else cos_m
        design[:, col] = plm[packed[col]] * trig[:, order[col]]

    return design


def pack_coefficients(cilm: np.ndarray, lmax: int) -> np.ndarray:
    """Flatten cilm into the design-matrix column order."""
    _check_cilm_shape(cilm, lmax)
    selector, degree, order, _ = _column_layout(lmax)
    return np.asarray(cilm, dtype=np.float64)[selector, degree, order].copy()


def unpack_coefficients(
    vector: np.ndarray, lmax: int, cilm: np.ndarray | None = None
) -> np.ndarray:
    """
    Scatter a vector in design-matrix column order into a cilm array.

    Args:
        vector: At least (lmax+1)^2 values; extra entries are ignored
        lmax: Maximum spherical harmonic degree
        cilm: Optional output array, filled in place

    Returns:
        The filled cilm array
    """
    n_coeffs = coefficient_count(lmax)
    vector = np.asarray(vector, dtype=np.float64).ravel()
    if vector.size < n_coeffs:
        raise ShapeMismatch(
            f"Coefficient vector must hold at least {n_coeffs} values; got {vector.size}"
        )
    if cilm is None:
        cilm = np.zeros((2, lmax + 1, lmax + 1), dtype=np.float64)
    else:
        _check_cilm_output(cilm, lmax)
        cilm[:2, : lmax + 1, : lmax + 1] = 0.0

    selector, degree, order, _ = _column_layout(lmax)
    cilm[selector, degree, order] = vector[:n_coeffs]
    return cilm


def evaluate_expansion(
    cilm: np.ndarray,
    lat_deg: np.ndarray,
    lon_deg: np.ndarray,
    lmax: int,
    norm=None,
    csphase=None,
) -> np.ndarray:
    """Evaluate the expansion cilm (truncated at lmax) at scattered points."""
    evaluator = get_evaluator(norm)
    try:
        design = build_design_matrix(lat_deg, lon_deg, lmax, evaluator, parse_phase(csphase))
    finally:
        evaluator.release()
    return design @ pack_coefficients(cilm, lmax)


def _check_cilm_shape(cilm: np.ndarray, lmax: int) -> None:
    shape = np.shape(cilm)
    if len(shape) != 3 or shape[0] < 2 or shape[1] < lmax + 1 or shape[2] < lmax + 1:
        raise ShapeMismatch(
            f"CILM must be dimensioned as (2, {lmax + 1}, {lmax + 1}) where LMAX is "
            f"{lmax}; input dimension is {shape}"
        )


def _check_cilm_output(cilm: np.ndarray, lmax: int) -> None:
    _check_cilm_shape(cilm, lmax)
    dtype = getattr(cilm, "dtype", None)
    if dtype is None or not np.can_cast(np.float64, dtype, casting="safe"):
        raise InvalidArgument(
            f"CILM must be a float64 array to hold the coefficients; got dtype {dtype}"
        )


def _check_sample_length(name: str, values: np.ndarray, nmax: int) -> None:
    if values.size < nmax:
        raise ShapeMismatch(
            f"{name} must be dimensioned as ({nmax},) where NMAX is {nmax}; "
            f"input array is dimensioned ({values.size},)"
        )


def sh_expand_lsq(
    d: np.ndarray,
    lat: np.ndarray,
    lon: np.ndarray,
    lmax: int,
    *,
    nmax: int | None = None,
    cilm: np.ndarray | None = None,
    norm=None,
    csphase=None,
    config: ExpansionConfig | None = None,
    solver: LeastSquaresSolver | None = None,
    evaluator: LegendreEvaluator | None = None,
) -> ExpansionResult:
    """
    Expand scattered data into spherical harmonics by least squares.

    Args:
        d: Data values (length >= nmax)
        lat: Latitudes in degrees (length >= nmax)
        lon: Longitudes in degrees (length >= nmax)
        lmax: Maximum spherical harmonic degree of the expansion
        nmax: Number of samples to use (default: len(d))
        cilm: Optional float64 output array of shape (2, >= lmax+1, >= lmax+1),
              filled in place on success
        norm: Normalization override (1 geodesy, 2 Schmidt, 3 unnormalized,
              4 orthonormalized, or the matching NormalizationMode/name)
        csphase: Phase override (1 exclude, -1 include)
        config: Conventions and solver workspace settings
        solver: Dense least-squares backend (default: LAPACK dgels)
        evaluator: Legendre evaluator; must match the normalization when given

    Returns:
        ExpansionResult with the coefficients and, for overdetermined
        systems, the residual sum of squares

    Raises:
        InvalidArgument: bad lmax/nmax or convention selector
        ShapeMismatch: cilm or a sample array is too small
        SolverFailure: the solver returned a non-zero status
    """
    if not is_integer(lmax) or lmax < 0:
        raise InvalidArgument(f"LMAX must be a non-negative integer; got {lmax!r}")
    lmax = int(lmax)

    d = np.asarray(d, dtype=np.float64).ravel()
    lat = np.asarray(lat, dtype=np.float64).ravel()
    lon = np.asarray(lon, dtype=np.float64).ravel()

    if nmax is None:
        nmax = d.size
    if not is_integer(nmax) or nmax < 1:
        raise InvalidArgument(f"NMAX must be a positive integer; got {nmax!r}")
    nmax = int(nmax)

    if cilm is not None:
        _check_cilm_output(cilm, lmax)
    _check_sample_length("D", d, nmax)
    _check_sample_length("LAT", lat, nmax)
    _check_sample_length("LON", lon, nmax)

    if config is None:
        config = ExpansionConfig(
            normalization=parse_normalization(norm), csphase=parse_phase(csphase)
        )
    else:
        overrides = {}
        if norm is not None:
            overrides["normalization"] = parse_normalization(norm)
        if csphase is not None:
            overrides["csphase"] = parse_phase(csphase)
        if overrides:
            config = replace(config, **overrides)

    if evaluator is None:
        evaluator = get_evaluator(config.normalization)
    elif evaluator.normalization != config.normalization:
        raise InvalidArgument(
            f"Evaluator normalization {evaluator.normalization.name} does not match "
            f"requested {config.normalization.name}"
        )
    if solver is None:
        solver = DgelsSolver()

    n_coeffs = coefficient_count(lmax)
    overdetermined = nmax > n_coeffs
    if overdetermined:
        logger.info(
            "Determining least squares solution of an overdetermined system "
            "(%d samples, %d coefficients)",
            nmax,
            n_coeffs,
        )
    else:
        logger.info(
            "Determining minimum norm solution of an underdetermined system "
            "(%d samples, %d coefficients)",
            nmax,
            n_coeffs,
        )

    try:
        design = build_design_matrix(lat[:nmax], lon[:nmax], lmax, evaluator, config.csphase)

        rhs = np.zeros(max(n_coeffs, nmax), dtype=np.float64)
        rhs[:nmax] = d[:nmax]

        min_dim = min(n_coeffs, nmax)
        lwork = min_dim * (1 + config.workspace_opt)
        output = solver.solve(design, rhs, lwork)
    finally:
        evaluator.release()

    if output.info != 0:
        logger.error(
            "Problem performing least squares inversion: INFO = %d", output.info
        )
        raise SolverFailure(output.info)

    if output.optimal_lwork > lwork:
        suggested = int(output.optimal_lwork / min_dim) - 1
        logger.warning(
            "Solver workspace of %d is below the optimal %d; consider setting "
            "workspace_opt to %d",
            lwork,
            int(output.optimal_lwork),
            suggested,
        )

    solution = output.solution
    if cilm is None:
        cilm = np.zeros((2, lmax + 1, lmax + 1), dtype=np.float64)
    unpack_coefficients(solution[:n_coeffs], lmax, cilm)

    chi2 = None
    if overdetermined:
        chi2 = float(np.sum(solution[n_coeffs:nmax] ** 2))
        logger.debug("Residual sum of squares: %.6g", chi2)

    return ExpansionResult(
        cilm=cilm,
        chi2=chi2,
        lmax=lmax,
        nmax=nmax,
        overdetermined=overdetermined,
    )
