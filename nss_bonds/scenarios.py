from __future__ import annotations

from typing import Tuple

import pandas as pd

from .curves import (
    TermStructure,
    flattener_shift_bp,
    parallel_shift_bp,
    steepener_shift_bp,
)
from .portfolio import price_portfolio_vectorized
from .utils import DateLike


def _bumped_spreads(portfolio: pd.DataFrame, bump_bp: float) -> pd.DataFrame:
    out = portfolio.copy()
    out["spread_bps"] = out.get("spread_bps", 0.0) + bump_bp
    return out


def run_rate_scenarios(
    curve: TermStructure,
    portfolio: pd.DataFrame,
    settle: DateLike,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    base = price_portfolio_vectorized(curve, portfolio, settle).rename(columns={"dirty": "base"})

    scenarios = {
        "PAR_-50bp": curve.shifted(parallel_shift_bp(-50)),
        "PAR_-25bp": curve.shifted(parallel_shift_bp(-25)),
        "PAR_+25bp": curve.shifted(parallel_shift_bp(+25)),
        "PAR_+50bp": curve.shifted(parallel_shift_bp(+50)),
        "STEEPENER_25bp": curve.shifted(steepener_shift_bp(25)),
        "FLATTENER_25bp": curve.shifted(flattener_shift_bp(25)),
    }

    per_bond = base.copy()
    for name, scurve in scenarios.items():
        px = price_portfolio_vectorized(scurve, portfolio, settle).rename(columns={"dirty": name})
        per_bond = per_bond.merge(px, on="bond_id", how="left")
        per_bond[name + "_PnL"] = per_bond[name] - per_bond["base"]

    pnl_cols = [c for c in per_bond.columns if c.endswith("_PnL")]
    summary = pd.DataFrame({"scenario": pnl_cols, "total_pnl": [per_bond[c].sum() for c in pnl_cols]})

    return per_bond, summary


def run_spread_scenarios(
    curve: TermStructure,
    portfolio: pd.DataFrame,
    settle: DateLike,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    base = price_portfolio_vectorized(curve, portfolio, settle).rename(columns={"dirty": "base"})

    scenarios = {"SPR_+25bp": 25.0, "SPR_+100bp": 100.0}

    per_bond = base.copy()
    for name, bump in scenarios.items():
        shocked = price_portfolio_vectorized(curve, _bumped_spreads(portfolio, bump), settle).rename(columns={"dirty": name})
        per_bond = per_bond.merge(shocked, on="bond_id")
        per_bond[name + "_PnL"] = per_bond[name] - per_bond["base"]

    pnl_cols = [c for c in per_bond.columns if c.endswith("_PnL")]
    summary = pd.DataFrame({"scenario": pnl_cols, "total_pnl": [per_bond[c].sum() for c in pnl_cols]})
    return per_bond, summary


def run_combined_rate_spread_scenarios(
    base_curve: TermStructure,
    portfolio: pd.DataFrame,
    settle: DateLike,
) -> pd.DataFrame:
    base_total = price_portfolio_vectorized(base_curve, portfolio, settle)["dirty"].sum()

    rate_shocks = [-50, -25, 0, 25, 50]
    spread_shocks = [0, 25, 100]

    rows = []
    for r_bp in rate_shocks:
        scurve = base_curve.shifted(parallel_shift_bp(r_bp))

        for s_bp in spread_shocks:
            shocked_total = price_portfolio_vectorized(scurve, _bumped_spreads(portfolio, s_bp), settle)["dirty"].sum()
            rows.append(
                {
                    "rate_shock_bp": r_bp,
                    "spread_shock_bp": s_bp,
                    "total_dirty_base": base_total,
                    "total_dirty_shocked": shocked_total,
                    "total_pnl": shocked_total - base_total,
                }
            )

    out = pd.DataFrame(rows)
    return out.sort_values(["rate_shock_bp", "spread_shock_bp"]).reset_index(drop=True)
