import numpy as np
import pandas as pd
import pytest

from nss_bonds.bonds import (
    StraightBond,
    duration,
    flat_yield_price,
    price,
    years_to_maturity,
)
from nss_bonds.solver import irr


@pytest.fixture(scope="module")
def one_year_bond():
    return StraightBond.from_terms("2024-01-01", "2025-01-01", coupon=5.0, frequency=1, redemption=100.0, day_count="30E/360")


def test_one_year_bond_on_flat_curve(one_year_bond, flat_curve):
    dirty, clean = price(one_year_bond, flat_curve, 0.0)
    assert dirty == pytest.approx(105.0 / 1.03, rel=1e-12)
    assert round(dirty, 2) == 101.94
    assert one_year_bond.accrued() == 0.0
    assert clean == dirty
    assert years_to_maturity(one_year_bond) == 1.0


def test_dirty_clean_identity(bond, curve):
    for spread in (-50.0, 0.0, 120.0):
        dirty, clean = price(bond, curve, spread)
        assert np.isfinite(dirty) and np.isfinite(clean)
        assert clean == dirty - bond.accrued(), "clean must equal dirty - accrued"
        assert dirty > clean


def test_cash_flows(bond):
    times, amounts = bond.cash_flows()
    assert len(times) == len(amounts) == 14
    assert np.all(amounts[:-1] == 2.5)
    assert amounts[-1] == 102.5


def test_accrued_zero_on_coupon_date_and_increasing_between():
    accrued = []
    for settle in pd.date_range("2024-06-15", "2024-12-14", freq="D"):
        b = StraightBond.from_terms(settle, "2026-06-15", coupon=4.0, frequency=2, day_count="ACT/365")
        accrued.append(b.accrued())
    assert accrued[0] == 0.0
    assert np.all(np.diff(accrued) > 0.0), "accrued must grow day by day within a coupon period"
    assert accrued[-1] < 2.0


def test_zero_coupon_bond(curve):
    zcb = StraightBond.from_terms("2024-03-10", "2029-06-15", coupon=0.0, frequency=2, day_count="ACT/ACT")
    dirty, clean = price(zcb, curve, 75.0)
    assert zcb.accrued() == 0.0
    assert dirty == clean


def test_price_decreases_with_spread(bond, curve):
    px0, _ = price(bond, curve, 0.0)
    px50, _ = price(bond, curve, 50.0)
    px100, _ = price(bond, curve, 100.0)
    assert px0 > px50 > px100, "Price should decrease as spread increases"


def test_flat_yield_at_coupon_prices_at_par():
    b = StraightBond.from_terms("2024-04-01", "2031-04-01", coupon=4.5, frequency=1, day_count="30E/360")
    dirty, clean = flat_yield_price(b, 4.5)
    assert dirty == pytest.approx(100.0, abs=1e-10)
    assert clean == dirty


def test_zero_coupon_duration_on_flat_curve(flat_curve):
    zcb = StraightBond.from_terms("2024-01-01", "2029-01-01", coupon=0.0, frequency=1, day_count="30E/360")
    assert duration(zcb, flat_curve) == pytest.approx(5.0 / 1.03, rel=1e-8)


def test_duration_matches_yield_sensitivity(bond, curve):
    d = duration(bond, curve, 35.0)
    dirty, clean = price(bond, curve, 35.0)
    y = irr(clean, bond)

    h = 1e-4  # percent
    up, _ = flat_yield_price(bond, y + h)
    down, _ = flat_yield_price(bond, y - h)
    fd = -(up - down) / (2 * h / 100.0) / dirty

    assert d == pytest.approx(fd, rel=1e-5)
    assert 0.0 < d < bond.years_to_maturity()


@pytest.mark.parametrize("coupon, redemption", [(-1.0, 100.0), (5.0, 0.0), (float("nan"), 100.0)])
def test_invalid_bond_terms(coupon, redemption):
    with pytest.raises(ValueError):
        StraightBond.from_terms("2024-01-01", "2030-01-01", coupon=coupon, redemption=redemption)
