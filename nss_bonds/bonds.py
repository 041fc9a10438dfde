from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np

from .curves import TermStructure
from .schedule import BondSchedule
from .utils import DateLike, DayCountConvention


@dataclass(frozen=True)
class StraightBond:
    """
    Fixed-coupon bullet bond. Coupon is in percent of par (5.0 = 5%),
    redemption is paid with the last coupon at maturity.
    """
    schedule: BondSchedule
    coupon: float
    redemption: float = 100.0
    bond_id: str = "BOND"

    def __post_init__(self):
        if not math.isfinite(self.coupon) or self.coupon < 0.0:
            raise ValueError(f"{self.bond_id}: coupon must be a non-negative percentage, got {self.coupon}.")
        if not math.isfinite(self.redemption) or self.redemption <= 0.0:
            raise ValueError(f"{self.bond_id}: redemption must be positive, got {self.redemption}.")

    @classmethod
    def from_terms(
        cls,
        settlement: DateLike,
        maturity: DateLike,
        coupon: float,
        frequency: int = 1,
        redemption: float = 100.0,
        day_count: Union[str, DayCountConvention] = DayCountConvention.THIRTY_E_360,
        bond_id: str = "BOND",
    ) -> "StraightBond":
        schedule = BondSchedule(settlement, maturity, frequency, day_count)
        return cls(schedule, float(coupon), float(redemption), bond_id)

    @property
    def frequency(self) -> int:
        return self.schedule.frequency

    def coupon_amount(self) -> float:
        """Coupon paid per period."""
        return self.coupon * self.redemption / self.frequency / 100.0

    def cash_flows(self) -> Tuple[np.ndarray, np.ndarray]:
        """(years from settlement, amount) for every future payment."""
        times = self.schedule.times()
        amounts = np.full(len(times), self.coupon_amount(), dtype=float)
        amounts[-1] += self.redemption
        return times, amounts

    def accrued(self) -> float:
        return self.coupon_amount() * self.schedule.accrual_fraction()

    def years_to_maturity(self) -> float:
        return self.schedule.years_to_maturity()


def flat_discount_factors(times: np.ndarray, rate: float, frequency: int) -> np.ndarray:
    """DF(t) = (1 + y/f) ** (-f t) for a flat yield y (decimal)."""
    base = 1.0 + rate / frequency
    if base <= 0.0:
        raise ValueError(f"Flat yield {rate:.6f} at or below -{frequency * 100}% for frequency {frequency}.")
    return base ** (-frequency * np.asarray(times, dtype=float))


def price(bond: StraightBond, curve: TermStructure, spread_bps: float = 0.0) -> Tuple[float, float]:
    """
    Returns (dirty, clean). Every cash flow is discounted with the
    spread-adjusted curve; clean = dirty - accrued.
    """
    times, amounts = bond.cash_flows()
    dfs = np.asarray(curve.discount_factor(times, spread_bps), dtype=float)

    dirty = float(np.sum(amounts * dfs))
    clean = dirty - bond.accrued()
    return dirty, clean


def flat_yield_price(bond: StraightBond, ytm: float) -> Tuple[float, float]:
    """(dirty, clean) at a flat yield ytm in percent, compounded `frequency` times a year."""
    times, amounts = bond.cash_flows()
    dirty = float(np.sum(amounts * flat_discount_factors(times, ytm / 100.0, bond.frequency)))
    return dirty, dirty - bond.accrued()


def duration(bond: StraightBond, curve: TermStructure, spread_bps: float = 0.0) -> float:
    """
    Modified duration.

    The curve dirty price is converted to its flat yield y (same convention
    as the IRR solver), then
      D_mod = sum(t * CF * DF_y(t)) / P / (1 + y/f) = -(1/P) dP/dy
    """
    from .solver import irr  # local import to keep module boundaries clean

    _, clean = price(bond, curve, spread_bps)
    y = irr(clean, bond) / 100.0

    times, amounts = bond.cash_flows()
    pv = amounts * flat_discount_factors(times, y, bond.frequency)
    macaulay = float(np.sum(times * pv)) / float(np.sum(pv))
    return macaulay / (1.0 + y / bond.frequency)


def years_to_maturity(bond: StraightBond) -> float:
    return bond.years_to_maturity()
