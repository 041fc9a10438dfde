from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional

import pandas as pd

from .bonds import StraightBond, duration, price
from .curves import TermStructure
from .solver import Solver, implied_spread, irr


@dataclass(frozen=True)
class Valuation:
    bond_id: str
    settlement: pd.Timestamp
    maturity: pd.Timestamp
    coupon: float
    frequency: int
    day_count: str
    redemption: float
    spread_bps: float
    dirty: float
    clean: float
    accrued: float
    years_to_maturity: float
    modified_duration: float
    yield_price: float       # clean price the yields below were solved for
    quoted: bool             # True when yield_price is a market quote
    ytm: float               # percent
    implied_spread: float    # bps

    def to_dict(self) -> dict:
        return asdict(self)


def value_bond(
    bond: StraightBond,
    curve: TermStructure,
    spread_bps: float = 0.0,
    quote: Optional[float] = None,
    solver: Optional[Solver] = None,
) -> Valuation:
    """
    Full valuation of one bond against one curve.

    Yields are solved for the quoted clean price when given, otherwise for
    the model clean price (the implied spread then reproduces spread_bps).
    """
    dirty, clean = price(bond, curve, spread_bps)
    yield_price = clean if quote is None else float(quote)

    sched = bond.schedule
    return Valuation(
        bond_id=bond.bond_id,
        settlement=sched.settlement,
        maturity=sched.maturity,
        coupon=bond.coupon,
        frequency=sched.frequency,
        day_count=sched.day_count.value,
        redemption=bond.redemption,
        spread_bps=float(spread_bps),
        dirty=dirty,
        clean=clean,
        accrued=bond.accrued(),
        years_to_maturity=bond.years_to_maturity(),
        modified_duration=duration(bond, curve, spread_bps),
        yield_price=yield_price,
        quoted=quote is not None,
        ytm=irr(yield_price, bond, solver),
        implied_spread=implied_spread(yield_price, bond, curve, solver),
    )
