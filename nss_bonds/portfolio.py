from __future__ import annotations

from typing import List, Optional

import numpy as np
import pandas as pd

from .bonds import StraightBond
from .curves import TermStructure
from .errors import BondEngineError
from .solver import Solver
from .utils import DateLike, DayCountConvention, to_timestamp
from .valuation import value_bond

STATIC_COLS = ["bond_id", "maturity", "coupon", "freq", "day_count", "redemption", "spread_bps"]
VALUE_COLS = ["dirty", "clean", "accrued", "years_to_maturity", "modified_duration", "ytm", "implied_spread"]


def qc_flags_for_row(row: pd.Series, settle: pd.Timestamp) -> List[str]:
    flags: List[str] = []

    if to_timestamp(row["maturity"]) <= settle:
        flags.append("MATURED")

    freq = row["freq"]
    if int(freq) != freq or freq <= 0 or 12 % int(freq) != 0:
        flags.append("BAD_FREQ")

    try:
        DayCountConvention.parse(str(row["day_count"]))
    except BondEngineError:
        flags.append("BAD_DAYCOUNT")

    if not np.isfinite(row["coupon"]) or row["coupon"] < 0.0:
        flags.append("BAD_COUPON")

    if not np.isfinite(row["redemption"]) or row["redemption"] <= 0.0:
        flags.append("BAD_REDEMPTION")

    return flags


def _with_defaults(portfolio: pd.DataFrame) -> pd.DataFrame:
    out = portfolio.copy()
    if "freq" not in out:
        out["freq"] = 1
    if "day_count" not in out:
        out["day_count"] = DayCountConvention.THIRTY_E_360.value
    if "redemption" not in out:
        out["redemption"] = 100.0
    if "spread_bps" not in out:
        out["spread_bps"] = 0.0
    return out


def bond_from_row(row: pd.Series, settle: pd.Timestamp) -> StraightBond:
    return StraightBond.from_terms(
        settlement=settle,
        maturity=row["maturity"],
        coupon=float(row["coupon"]),
        frequency=int(row["freq"]),
        redemption=float(row["redemption"]),
        day_count=str(row["day_count"]),
        bond_id=str(row["bond_id"]),
    )


def build_cashflow_table(portfolio: pd.DataFrame, settle: DateLike) -> pd.DataFrame:
    """One row per (bond, payment date); flagged bonds are skipped."""
    settle = to_timestamp(settle)
    portfolio = _with_defaults(portfolio)

    rows = []
    for _, r in portfolio.iterrows():
        if qc_flags_for_row(r, settle):
            continue

        bond = bond_from_row(r, settle)
        times, amounts = bond.cash_flows()
        for cf, t, amount in zip(bond.schedule.cash_flow_dates(), times, amounts):
            rows.append((bond.bond_id, cf.date, t, amount, float(r["spread_bps"])))

    return pd.DataFrame(rows, columns=["bond_id", "pay_date", "years", "cashflow", "spread_bps"])


def price_portfolio_vectorized(curve: TermStructure, portfolio: pd.DataFrame, settle: DateLike) -> pd.DataFrame:
    """Dirty prices only, one curve evaluation per distinct spread."""
    cf = build_cashflow_table(portfolio, settle)
    if cf.empty:
        raise ValueError("Cashflow table is empty. Check portfolio or settlement/maturity logic.")

    cf["df"] = np.nan
    for spread_bps, idx in cf.groupby("spread_bps").groups.items():
        cf.loc[idx, "df"] = curve.discount_factor(cf.loc[idx, "years"].to_numpy(dtype=float), spread_bps)
    cf["pv_cf"] = cf["cashflow"] * cf["df"]

    pv_by_bond = cf.groupby("bond_id", as_index=False)["pv_cf"].sum().rename(columns={"pv_cf": "dirty"})
    return portfolio[["bond_id"]].merge(pv_by_bond, on="bond_id", how="left")


def price_portfolio(
    curve: TermStructure,
    portfolio: pd.DataFrame,
    settle: DateLike,
    solver: Optional[Solver] = None,
) -> pd.DataFrame:
    """
    Value every bond of `portfolio` against the same curve.

    Expected columns: bond_id, maturity, coupon (percent); optional freq,
    day_count, redemption, spread_bps, quote (clean price).
    Rows failing QC keep NaN values and list the problems in `flags`.
    """
    settle = to_timestamp(settle)
    portfolio = _with_defaults(portfolio)

    out = portfolio[STATIC_COLS].copy().reset_index(drop=True)
    values = {c: [] for c in VALUE_COLS}
    flag_list = []

    for _, r in portfolio.reset_index(drop=True).iterrows():
        flags = qc_flags_for_row(r, settle)
        if not flags:
            quote = r.get("quote", np.nan)
            quote = None if pd.isna(quote) else float(quote)
            try:
                v = value_bond(bond_from_row(r, settle), curve, float(r["spread_bps"]), quote, solver)
            except BondEngineError as exc:
                flags.append(type(exc).__name__.upper())
            else:
                for c in VALUE_COLS:
                    values[c].append(getattr(v, c))

        if flags:
            for c in VALUE_COLS:
                values[c].append(np.nan)
        flag_list.append("|".join(flags))

    for c in VALUE_COLS:
        out[c] = values[c]
    out["flags"] = flag_list
    return out


def make_sample_portfolio(
    n: int = 20,
    settle: Optional[DateLike] = None,
    seed: int = 7,
) -> pd.DataFrame:
    """
    Synthetic fixed-rate bond portfolio for demo/testing.

    - Maturities: 1Y..10Y from settlement, snapped to a Feb-15 cycle
    - Coupons: uniform in [2%, 8%]
    - Frequency: annual or semiannual
    - Day count: mostly 30E/360 with some ACT/ACT
    """
    settle = to_timestamp(settle if settle is not None else pd.Timestamp.today())

    rng = np.random.default_rng(seed)

    years = rng.integers(1, 11, size=n)
    mats = [(settle + pd.DateOffset(years=int(y))).replace(month=2, day=15) for y in years]
    mats = [m if m > settle else m + pd.DateOffset(years=1) for m in mats]

    return pd.DataFrame({
        "bond_id": [f"BOND_{i:03d}" for i in range(n)],
        "maturity": mats,
        "coupon": np.round(rng.uniform(2.0, 8.0, size=n), 3),
        "freq": rng.choice([1, 2], size=n),
        "day_count": rng.choice(["30E/360", "ACT/ACT"], size=n, p=[0.8, 0.2]),
        "redemption": 100.0,
        "spread_bps": 0.0,
    })


def add_random_spreads(
    portfolio: pd.DataFrame,
    seed: int = 11,
    min_bp: float = 30.0,
    max_bp: float = 250.0,
) -> pd.DataFrame:
    """Add a synthetic constant spread column (bps). Default: IG-ish 30bp..250bp."""
    rng = np.random.default_rng(seed)
    out = portfolio.copy()
    out["spread_bps"] = rng.uniform(min_bp, max_bp, size=len(out))
    return out
