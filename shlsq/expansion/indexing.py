"""Addressing of triangular-packed associated Legendre arrays.

Packed arrays hold P(l, m) for every degree l = 0..lmax and order m = 0..l,
ordered by increasing degree and then by increasing order within a degree.
"""

from __future__ import annotations

import numbers

from shlsq.errors import InvalidArgument

__all__ = ["is_integer", "packed_size", "plm_index", "plm_index_zero"]


def is_integer(value) -> bool:
    """True for Python and NumPy integers; bools are rejected."""
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def plm_index(l: int, m: int) -> int:  # noqa: E741
    """
    Return the 1-based position of (l, m) in a packed Legendre array.

    Args:
        l: Spherical harmonic degree, l >= 0
        m: Spherical harmonic order, 0 <= m <= l

    Returns:
        l*(l+1)/2 + m + 1

    Raises:
        InvalidArgument: if l < 0, or m lies outside 0..l
    """
    if not is_integer(l) or not is_integer(m):
        raise InvalidArgument(f"L and M must be integers; got L = {l!r}, M = {m!r}")
    if l < 0:
        raise InvalidArgument(f"L must be greater than or equal to 0; got L = {l}, M = {m}")
    if m < 0 or m > l:
        raise InvalidArgument(
            "M must be greater than or equal to zero and less than or equal to L; "
            f"got L = {l}, M = {m}"
        )
    return (l * (l + 1)) // 2 + m + 1


def plm_index_zero(l: int, m: int) -> int:  # noqa: E741
    """0-based variant of :func:`plm_index`, for indexing NumPy buffers."""
    return plm_index(l, m) - 1


def packed_size(lmax: int) -> int:
    """Length of a packed Legendre array up to degree lmax."""
    if lmax < 0:
        raise InvalidArgument(f"LMAX must be greater than or equal to 0; got {lmax}")
    return (lmax + 1) * (lmax + 2) // 2
