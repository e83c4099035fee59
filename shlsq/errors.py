"""Exception types raised by the expansion routines."""

from __future__ import annotations

__all__ = ["ExpansionError", "InvalidArgument", "ShapeMismatch", "SolverFailure"]


class ExpansionError(Exception):
    """Base class for all expansion errors."""


class InvalidArgument(ExpansionError, ValueError):
    """A degree/order pair or a convention selector is out of range."""


class ShapeMismatch(ExpansionError, ValueError):
    """An input or output array is smaller than the problem requires."""


class SolverFailure(ExpansionError, RuntimeError):
    """The dense least-squares solver returned a non-zero status."""

    def __init__(self, info: int, message: str | None = None):
        self.info = int(info)
        if message is None:
            message = f"Least squares solver failed with status INFO = {self.info}"
        super().__init__(message)
