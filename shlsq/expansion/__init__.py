"""Least-squares spherical harmonic expansion of scattered data."""

from shlsq.expansion.indexing import packed_size, plm_index, plm_index_zero
from shlsq.expansion.legendre import (
    LegendreEvaluator,
    PLegendreA,
    PlmBar,
    PlmON,
    PlmSchmidt,
    get_evaluator,
)
from shlsq.expansion.lsq import (
    ExpansionResult,
    build_design_matrix,
    coefficient_count,
    evaluate_expansion,
    pack_coefficients,
    sh_expand_lsq,
    unpack_coefficients,
)
from shlsq.expansion.solver import DgelsSolver, LeastSquaresSolver, SolverOutput
from shlsq.expansion.types import (
    ExpansionConfig,
    NormalizationMode,
    PhaseConvention,
    parse_normalization,
    parse_phase,
)

__all__ = [
    "DgelsSolver",
    "ExpansionConfig",
    "ExpansionResult",
    "LeastSquaresSolver",
    "LegendreEvaluator",
    "NormalizationMode",
    "PLegendreA",
    "PhaseConvention",
    "PlmBar",
    "PlmON",
    "PlmSchmidt",
    "SolverOutput",
    "build_design_matrix",
    "coefficient_count",
    "evaluate_expansion",
    "get_evaluator",
    "pack_coefficients",
    "packed_size",
    "parse_normalization",
    "parse_phase",
    "plm_index",
    "plm_index_zero",
    "sh_expand_lsq",
    "unpack_coefficients",
]
