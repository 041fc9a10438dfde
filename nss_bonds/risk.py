from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np
import pandas as pd

from .bonds import StraightBond, price
from .curves import TermStructure, parallel_shift_bp
from .portfolio import price_portfolio_vectorized
from .utils import DateLike

BP = 0.0001


def dv01(bond: StraightBond, curve: TermStructure, spread_bps: float = 0.0, bp: float = 1.0) -> float:
    """Dirty price change for a +bp parallel shift of the zero curve (negative for a long bond)."""
    base, _ = price(bond, curve, spread_bps)
    up, _ = price(bond, curve.shifted(parallel_shift_bp(bp)), spread_bps)
    return up - base


def effective_duration(bond: StraightBond, curve: TermStructure, spread_bps: float = 0.0, bp: float = 1.0) -> float:
    base, _ = price(bond, curve, spread_bps)
    up, _ = price(bond, curve.shifted(parallel_shift_bp(bp)), spread_bps)
    down, _ = price(bond, curve.shifted(parallel_shift_bp(-bp)), spread_bps)
    return -(up - down) / (2.0 * base * bp * BP)


def convexity(bond: StraightBond, curve: TermStructure, spread_bps: float = 0.0, bp: float = 1.0) -> float:
    base, _ = price(bond, curve, spread_bps)
    up, _ = price(bond, curve.shifted(parallel_shift_bp(bp)), spread_bps)
    down, _ = price(bond, curve.shifted(parallel_shift_bp(-bp)), spread_bps)

    h = bp * BP
    return (up + down - 2 * base) / (base * h**2)


def spread_dv01(bond: StraightBond, curve: TermStructure, spread_bps: float = 0.0, bp: float = 1.0) -> float:
    base, _ = price(bond, curve, spread_bps)
    bumped, _ = price(bond, curve, spread_bps + bp)
    return bumped - base


# ---- KRD hat basis ----

def hat_basis(taus: np.ndarray, k: int):
    n = len(taus)
    if not (0 <= k < n):
        raise ValueError("k out of range")
    if n < 2:
        raise ValueError("Need at least two key rate tenors")

    def b(tau: float) -> float:
        if k == 0:
            if tau <= taus[0]:
                return 1.0
            if tau >= taus[1]:
                return 0.0
            return (taus[1] - tau) / (taus[1] - taus[0])

        if k == n - 1:
            if tau <= taus[n - 2]:
                return 0.0
            if tau >= taus[n - 1]:
                return 1.0
            return (tau - taus[n - 2]) / (taus[n - 1] - taus[n - 2])

        if tau <= taus[k - 1] or tau >= taus[k + 1]:
            return 0.0
        if tau <= taus[k]:
            return (tau - taus[k - 1]) / (taus[k] - taus[k - 1])
        return (taus[k + 1] - tau) / (taus[k + 1] - taus[k])

    return b


def key_rate_dv01(
    bond: StraightBond,
    curve: TermStructure,
    tenors: Sequence[float] = (1.0, 2.0, 5.0, 10.0, 30.0),
    spread_bps: float = 0.0,
    bp: float = 1.0,
) -> Tuple[pd.Series, float]:
    """
    Bucketed dirty price change for hat-shaped zero shocks at `tenors`,
    and the parallel DV01 they sum up to.
    """
    taus = np.array(sorted(float(t) for t in tenors), dtype=float)
    base, _ = price(bond, curve, spread_bps)
    s = bp * BP

    bucket_pnl = []
    for k in range(len(taus)):
        b_k = hat_basis(taus, k)
        shocked, _ = price(bond, curve.shifted(lambda tau, b_k=b_k: b_k(tau) * s), spread_bps)
        bucket_pnl.append(shocked - base)

    return pd.Series(bucket_pnl, index=taus, name="krd"), dv01(bond, curve, spread_bps, bp)


# ---- portfolio level ----

def compute_portfolio_dv01(curve: TermStructure, portfolio: pd.DataFrame, settle: DateLike) -> pd.DataFrame:
    base = price_portfolio_vectorized(curve, portfolio, settle)

    shocked = curve.shifted(parallel_shift_bp(1.0))
    shocked_prices = price_portfolio_vectorized(shocked, portfolio, settle)

    out = base[["bond_id", "dirty"]].merge(
        shocked_prices[["bond_id", "dirty"]],
        on="bond_id",
        suffixes=("_base", "_up1bp"),
    )

    out["dv01"] = out["dirty_up1bp"] - out["dirty_base"]
    return out


def duration_from_dv01(dv01_df: pd.DataFrame) -> pd.DataFrame:
    df = dv01_df.copy()
    df["eff_duration"] = -df["dv01"] / (df["dirty_base"] * BP)
    return df[["bond_id", "eff_duration"]]


def compute_spread_dv01_per_bond(curve: TermStructure, portfolio: pd.DataFrame, settle: DateLike) -> pd.DataFrame:
    base = price_portfolio_vectorized(curve, portfolio, settle).rename(columns={"dirty": "base"})
    bumped = portfolio.copy()
    bumped["spread_bps"] = bumped.get("spread_bps", 0.0) + 1.0
    shocked = price_portfolio_vectorized(curve, bumped, settle).rename(columns={"dirty": "shocked"})
    tmp = base.merge(shocked, on="bond_id")
    tmp["spread_dv01"] = tmp["shocked"] - tmp["base"]
    return tmp
