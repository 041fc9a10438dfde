import numpy as np
import pytest

from nss_bonds.curves import (
    NelsonSiegelSvensson,
    curve_qc_report,
    parallel_shift_bp,
    steepener_shift_bp,
)
from nss_bonds.errors import InvalidCurveError


def test_zero_rate_limit_at_zero(curve):
    assert curve.zero_rate(0.0) == pytest.approx(curve.beta0 + curve.beta1, abs=1e-15)
    assert curve.zero_rate(0.0, 100.0) == pytest.approx(curve.beta0 + curve.beta1 + 0.01, abs=1e-15)


def test_zero_rate_continuous_near_zero(curve):
    assert curve.zero_rate(1e-8) == pytest.approx(curve.zero_rate(0.0), abs=1e-9)


def test_discount_factor_is_one_at_zero(curve):
    assert curve.discount_factor(0.0) == 1.0
    assert curve.discount_factor(0.0, 250.0) == 1.0


def test_discount_factor_annual_compounding(curve):
    r = curve.zero_rate(2.5, 40.0)
    assert curve.discount_factor(2.5, 40.0) == pytest.approx((1.0 + r) ** -2.5, rel=1e-14)


def test_flat_curve_three_percent(flat_curve):
    assert flat_curve.zero_rate(7.0) == pytest.approx(0.03, abs=1e-15)
    assert flat_curve.discount_factor(1.0) == pytest.approx(1.0 / 1.03, rel=1e-14)


def test_discount_factors_strictly_decreasing(curve):
    t = np.linspace(0.01, 30.0, 500)
    dfs = curve.discount_factor(t)
    assert isinstance(dfs, np.ndarray) and dfs.shape == t.shape
    assert np.all(dfs > 0.0) and np.all(dfs < 1.0)
    assert np.all(np.diff(dfs) < 0.0), "DF must decrease with maturity for positive rates"


def test_spread_lowers_discount_factor(curve):
    assert curve.discount_factor(5.0, 150.0) < curve.discount_factor(5.0) < curve.discount_factor(5.0, -150.0)


def test_scalar_in_scalar_out(curve):
    assert isinstance(curve.zero_rate(3.0), float)
    assert isinstance(curve.discount_factor(3.0), float)


@pytest.mark.parametrize(
    "params",
    [
        (0.03, 0.0, 0.0, 0.0, 0.0, 1.0),
        (0.03, 0.0, 0.0, 0.0, 1.0, -2.0),
        (float("nan"), 0.0, 0.0, 0.0, 1.0, 1.0),
        (0.03, float("inf"), 0.0, 0.0, 1.0, 1.0),
    ],
)
def test_invalid_parameters_rejected(params):
    with pytest.raises(InvalidCurveError):
        NelsonSiegelSvensson(*params)


def test_negative_maturity_rejected(curve):
    with pytest.raises(ValueError):
        curve.discount_factor(-0.5)


def test_rate_below_minus_100_percent_rejected(curve):
    with pytest.raises(InvalidCurveError):
        curve.discount_factor(2.0, -20000.0)


def test_non_finite_spread_rejected(curve):
    with pytest.raises(InvalidCurveError):
        curve.discount_factor(2.0, float("nan"))


def test_forward_rate_limit(curve):
    assert curve.forward_rate(0.0) == pytest.approx(curve.beta0 + curve.beta1, abs=1e-15)
    assert curve.forward_rate(200.0) == pytest.approx(curve.beta0, abs=1e-6)


def test_parallel_shift(curve):
    shifted = curve.shifted(parallel_shift_bp(25))
    t = np.array([0.5, 2.0, 10.0])
    assert np.allclose(shifted.zero_rate(t) - curve.zero_rate(t), 0.0025)


def test_steepener_shift_direction(curve):
    steep = curve.shifted(steepener_shift_bp(25))
    assert steep.zero_rate(1.0) < curve.zero_rate(1.0)
    assert steep.zero_rate(20.0) > curve.zero_rate(20.0)


def test_curve_qc_report_flags(curve):
    qc = curve_qc_report(curve)
    assert qc["df_positive"].all()
    assert qc["df_monotone"].all()
    assert qc.loc[qc["tenor"] == 0.0, "df"].iloc[0] == 1.0
