import numpy as np
import pytest


@pytest.fixture
def rng():
    """Deterministic generator so fits are reproducible across runs."""
    return np.random.default_rng(20240611)


@pytest.fixture
def random_points(rng):
    """Factory for scattered (lat, lon) samples spread over the sphere."""

    def _make(n: int) -> tuple[np.ndarray, np.ndarray]:
        # uniform in sin(lat) gives uniform area coverage
        lat = np.rad2deg(np.arcsin(rng.uniform(-1.0, 1.0, n)))
        lon = rng.uniform(-180.0, 180.0, n)
        return lat, lon

    return _make


@pytest.fixture
def random_cilm(rng):
    """Factory for a synthetic coefficient array of a given degree."""

    def _make(lmax: int) -> np.ndarray:
        cilm = np.zeros((2, lmax + 1, lmax + 1))
        for l in range(lmax + 1):
            cilm[0, l, : l + 1] = rng.normal(size=l + 1)
            cilm[1, l, 1 : l + 1] = rng.normal(size=l)
        return cilm

    return _make
