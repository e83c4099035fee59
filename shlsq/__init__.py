"""
Least-squares spherical harmonic expansion of scattered geographic data.

The public entry points are re-exported here; see :mod:`shlsq.expansion`.
"""

from shlsq.errors import ExpansionError, InvalidArgument, ShapeMismatch, SolverFailure
from shlsq.expansion import (
    ExpansionConfig,
    ExpansionResult,
    NormalizationMode,
    PhaseConvention,
    plm_index,
    sh_expand_lsq,
)

__all__ = [
    "ExpansionConfig",
    "ExpansionError",
    "ExpansionResult",
    "InvalidArgument",
    "NormalizationMode",
    "PhaseConvention",
    "ShapeMismatch",
    "SolverFailure",
    "plm_index",
    "sh_expand_lsq",
]
