import numpy as np
import pytest

from shlsq import config
from shlsq.errors import InvalidArgument
from shlsq.expansion.types import (
    ExpansionConfig,
    NormalizationMode,
    PhaseConvention,
    parse_normalization,
    parse_phase,
)


class TestParseNormalization:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (1, NormalizationMode.GEODESY),
            (2, NormalizationMode.SCHMIDT),
            (3, NormalizationMode.UNNORMALIZED),
            (4, NormalizationMode.ORTHONORMALIZED),
            ("4pi", NormalizationMode.GEODESY),
            ("Schmidt", NormalizationMode.SCHMIDT),
            ("unnorm", NormalizationMode.UNNORMALIZED),
            ("ortho", NormalizationMode.ORTHONORMALIZED),
            (NormalizationMode.SCHMIDT, NormalizationMode.SCHMIDT),
        ],
    )
    def test_accepted_values(self, value, expected):
        assert parse_normalization(value) is expected

    def test_default_follows_config(self):
        assert parse_normalization(None) == config.DEFAULT_NORMALIZATION

    @pytest.mark.parametrize("value", [0, 5, -1, "bogus", 2.5j])
    def test_rejected_values(self, value):
        with pytest.raises(InvalidArgument):
            parse_normalization(value)

    @pytest.mark.parametrize("value", [2.5, 1.0, True, False])
    def test_rejects_non_integer_selectors(self, value):
        with pytest.raises(InvalidArgument):
            parse_normalization(value)

    def test_accepts_numpy_integers(self):
        assert parse_normalization(np.int64(4)) is NormalizationMode.ORTHONORMALIZED


class TestParsePhase:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (1, PhaseConvention.EXCLUDE),
            (-1, PhaseConvention.INCLUDE),
            ("include", PhaseConvention.INCLUDE),
            (PhaseConvention.EXCLUDE, PhaseConvention.EXCLUDE),
        ],
    )
    def test_accepted_values(self, value, expected):
        assert parse_phase(value) is expected

    def test_default_follows_config(self):
        assert parse_phase(None) == config.CSPHASE_DEFAULT

    @pytest.mark.parametrize("value", [0, 2, -2, "sometimes"])
    def test_rejected_values(self, value):
        with pytest.raises(InvalidArgument):
            parse_phase(value)

    @pytest.mark.parametrize("value", [-1.5, -1.0, 1.0, True])
    def test_rejects_non_integer_selectors(self, value):
        with pytest.raises(InvalidArgument):
            parse_phase(value)


class TestExpansionConfig:
    def test_defaults(self):
        cfg = ExpansionConfig()
        assert cfg.normalization is NormalizationMode.GEODESY
        assert cfg.csphase is PhaseConvention.EXCLUDE
        assert cfg.workspace_opt == config.SOLVER_WORKSPACE_OPT

    def test_coerces_raw_selectors(self):
        cfg = ExpansionConfig(normalization=3, csphase=-1)
        assert cfg.normalization is NormalizationMode.UNNORMALIZED
        assert cfg.csphase is PhaseConvention.INCLUDE

    def test_rejects_bad_workspace(self):
        with pytest.raises(InvalidArgument):
            ExpansionConfig(workspace_opt=0)

    def test_is_frozen(self):
        cfg = ExpansionConfig()
        with pytest.raises(AttributeError):
            cfg.csphase = PhaseConvention.INCLUDE
