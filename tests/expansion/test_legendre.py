# Tests for shlsq/expansion/legendre.py

import numpy as np
import pytest
from scipy.special import lpmv

from shlsq.errors import InvalidArgument
from shlsq.expansion.indexing import packed_size, plm_index_zero
from shlsq.expansion.legendre import (
    PLegendreA,
    PlmBar,
    PlmON,
    PlmSchmidt,
    get_evaluator,
)
from shlsq.expansion.types import NormalizationMode, PhaseConvention

Z_VALUES = np.array([-1.0, -0.73, -0.2, 0.0, 0.31, 0.9, 1.0])


def _scipy_unnormalized(lmax, z):
    """Packed P_lm from scipy, which includes the Condon-Shortley phase."""
    return np.array(
        [lpmv(m, l, z) for l in range(lmax + 1) for m in range(l + 1)]
    )


def test_unnormalized_matches_scipy_with_phase():
    lmax = 8
    p = PLegendreA().evaluate(lmax, Z_VALUES, csphase=PhaseConvention.INCLUDE)
    np.testing.assert_allclose(p, _scipy_unnormalized(lmax, Z_VALUES), rtol=1e-10, atol=1e-12)


def test_phase_exclusion_flips_odd_orders():
    lmax = 6
    evaluator = PlmBar()
    with_phase = evaluator.evaluate(lmax, Z_VALUES, csphase=-1)
    without_phase = evaluator.evaluate(lmax, Z_VALUES, csphase=1)
    for l in range(lmax + 1):
        for m in range(l + 1):
            k = plm_index_zero(l, m)
            np.testing.assert_allclose(with_phase[k], (-1) ** m * without_phase[k])


def test_geodesy_low_degree_closed_forms():
    z = 0.4
    u = np.sqrt(1 - z**2)
    p = PlmBar().evaluate(2, z, csphase=1)
    expected = [
        1.0,
        np.sqrt(3) * z,
        np.sqrt(3) * u,
        np.sqrt(5) * 0.5 * (3 * z**2 - 1),
        np.sqrt(15) * z * u,
        np.sqrt(15) / 2 * u**2,
    ]
    np.testing.assert_allclose(p, expected, rtol=1e-14)


@pytest.mark.parametrize(
    "evaluator,norm_integral",
    [
        (PlmBar(), lambda l, m: 2.0 * (2 - (m == 0))),
        (PlmSchmidt(), lambda l, m: 2.0 * (2 - (m == 0)) / (2 * l + 1)),
        (PlmON(), lambda l, m: 2.0 * (2 - (m == 0)) / (4 * np.pi)),
    ],
)
def test_normalization_integrals(evaluator, norm_integral):
    """∫ P_lm(z)^2 dz over [-1, 1] has the closed form of each convention."""
    lmax = 10
    nodes, weights = np.polynomial.legendre.leggauss(2 * lmax + 2)
    p = evaluator.evaluate(lmax, nodes)
    for l in range(lmax + 1):
        for m in range(l + 1):
            integral = np.sum(weights * p[plm_index_zero(l, m)] ** 2)
            assert integral == pytest.approx(norm_integral(l, m), rel=1e-12)


def test_schmidt_and_orthonormal_are_rescaled_geodesy():
    lmax = 7
    geodesy = PlmBar().evaluate(lmax, Z_VALUES)
    schmidt = PlmSchmidt().evaluate(lmax, Z_VALUES)
    ortho = PlmON().evaluate(lmax, Z_VALUES)
    for l in range(lmax + 1):
        for m in range(l + 1):
            k = plm_index_zero(l, m)
            np.testing.assert_allclose(schmidt[k], geodesy[k] / np.sqrt(2 * l + 1))
            np.testing.assert_allclose(ortho[k], geodesy[k] / np.sqrt(4 * np.pi))


def test_scalar_and_vector_shapes():
    evaluator = PlmBar()
    assert evaluator.evaluate(4, 0.5).shape == (packed_size(4),)
    assert evaluator.evaluate(4, Z_VALUES).shape == (packed_size(4), Z_VALUES.size)


def test_degree_zero():
    np.testing.assert_allclose(PlmBar().evaluate(0, 0.3), [1.0])
    np.testing.assert_allclose(PlmON().evaluate(0, 0.3), [1.0 / np.sqrt(4 * np.pi)])


def test_rejects_out_of_range_argument():
    with pytest.raises(InvalidArgument):
        PlmBar().evaluate(3, 1.5)


def test_rejects_negative_degree():
    with pytest.raises(InvalidArgument):
        PlmBar().evaluate(-1, 0.5)


def test_release_drops_cached_tables():
    evaluator = PlmSchmidt()
    first = evaluator.evaluate(5, Z_VALUES)
    assert evaluator._tables and evaluator._scales
    evaluator.release()
    assert not evaluator._tables and not evaluator._scales
    np.testing.assert_array_equal(evaluator.evaluate(5, Z_VALUES), first)


@pytest.mark.parametrize(
    "selector,cls",
    [
        (1, PlmBar),
        ("schmidt", PlmSchmidt),
        (NormalizationMode.UNNORMALIZED, PLegendreA),
        (4, PlmON),
        (None, PlmBar),
    ],
)
def test_get_evaluator(selector, cls):
    evaluator = get_evaluator(selector)
    assert type(evaluator) is cls
    assert evaluator.normalization is cls.normalization


def test_get_evaluator_returns_fresh_instances():
    assert get_evaluator(1) is not get_evaluator(1)


@pytest.mark.parametrize("selector", [0, 5])
def test_get_evaluator_rejects_unknown_normalization(selector):
    with pytest.raises(InvalidArgument):
        get_evaluator(selector)
