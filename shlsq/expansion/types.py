from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from shlsq import config
from shlsq.errors import InvalidArgument

from .indexing import is_integer


class NormalizationMode(IntEnum):
    """Spherical harmonic normalization of the basis and output coefficients."""

    GEODESY = 1
    SCHMIDT = 2
    UNNORMALIZED = 3
    ORTHONORMALIZED = 4


class PhaseConvention(IntEnum):
    """Whether the Condon-Shortley phase (-1)^m is folded into the Legendre values."""

    EXCLUDE = 1
    INCLUDE = -1


_NORMALIZATION_NAMES = {
    "geodesy": NormalizationMode.GEODESY,
    "4pi": NormalizationMode.GEODESY,
    "schmidt": NormalizationMode.SCHMIDT,
    "unnorm": NormalizationMode.UNNORMALIZED,
    "unnormalized": NormalizationMode.UNNORMALIZED,
    "ortho": NormalizationMode.ORTHONORMALIZED,
    "orthonormalized": NormalizationMode.ORTHONORMALIZED,
}

_PHASE_NAMES = {
    "exclude": PhaseConvention.EXCLUDE,
    "include": PhaseConvention.INCLUDE,
}


def parse_normalization(value: NormalizationMode | int | str | None) -> NormalizationMode:
    if value is None:
        value = config.DEFAULT_NORMALIZATION
    if isinstance(value, NormalizationMode):
        return value
    if isinstance(value, str):
        try:
            return _NORMALIZATION_NAMES[value.strip().lower()]
        except KeyError:
            raise InvalidArgument(
                f"Unknown normalization: {value!r}. "
                f"Available: {sorted(_NORMALIZATION_NAMES)}"
            ) from None
    try:
        if not is_integer(value):
            raise TypeError(value)
        return NormalizationMode(int(value))
    except (TypeError, ValueError):
        raise InvalidArgument(
            "Normalization must be 1 (geodesy), 2 (Schmidt), "
            f"3 (unnormalized), or 4 (orthonormalized); got {value!r}"
        ) from None


def parse_phase(value: PhaseConvention | int | str | None) -> PhaseConvention:
    if value is None:
        value = config.CSPHASE_DEFAULT
    if isinstance(value, PhaseConvention):
        return value
    if isinstance(value, str):
        try:
            return _PHASE_NAMES[value.strip().lower()]
        except KeyError:
            raise InvalidArgument(f"Unknown csphase: {value!r}") from None
    try:
        if not is_integer(value):
            raise TypeError(value)
        return PhaseConvention(int(value))
    except (TypeError, ValueError):
        raise InvalidArgument(
            f"csphase must be 1 (exclude) or -1 (include); got {value!r}"
        ) from None


@dataclass(frozen=True)
class ExpansionConfig:
    """Per-call conventions for the least-squares expansion.

    Attributes:
        normalization: Normalization of the basis functions and of the output
            coefficients (default: geodesy).
        csphase: Condon-Shortley phase convention (default:
            ``config.CSPHASE_DEFAULT``, i.e. excluded).
        workspace_opt: Workspace block per unknown used to size the LAPACK
            workspace, ``lwork = min(ncoef, nmax) * (1 + workspace_opt)``.
    """

    normalization: NormalizationMode = NormalizationMode(config.DEFAULT_NORMALIZATION)
    csphase: PhaseConvention = PhaseConvention(config.CSPHASE_DEFAULT)
    workspace_opt: int = config.SOLVER_WORKSPACE_OPT

    def __post_init__(self) -> None:
        object.__setattr__(self, "normalization", parse_normalization(self.normalization))
        object.__setattr__(self, "csphase", parse_phase(self.csphase))
        if int(self.workspace_opt) < 1:
            raise InvalidArgument(
                f"workspace_opt must be a positive integer; got {self.workspace_opt!r}"
            )
        object.__setattr__(self, "workspace_opt", int(self.workspace_opt))
