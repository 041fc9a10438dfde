from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Tuple, Union

import numpy as np
import pandas as pd

from .errors import InvalidScheduleError
from .utils import DateLike, DayCountConvention, to_timestamp, yearfrac


@dataclass(frozen=True)
class CashFlowDate:
    date: pd.Timestamp
    years: float  # year fraction from settlement


@dataclass(frozen=True)
class BondSchedule:
    """
    Coupon schedule anchored at maturity and stepped backward in whole
    periods of 12 / frequency months. No issue date is needed: the coupon
    period containing settlement may start at a virtual date before issue.
    """
    settlement: pd.Timestamp
    maturity: pd.Timestamp
    frequency: int = 1
    day_count: DayCountConvention = DayCountConvention.THIRTY_E_360

    def __post_init__(self):
        object.__setattr__(self, "day_count", DayCountConvention.parse(self.day_count))

        if isinstance(self.frequency, bool) or not isinstance(self.frequency, (int, np.integer)):
            raise InvalidScheduleError(f"Coupon frequency must be an integer, got {self.frequency!r}.")
        if self.frequency <= 0:
            raise InvalidScheduleError(f"Coupon frequency must be positive, got {self.frequency}.")
        if 12 % self.frequency != 0:
            raise InvalidScheduleError(
                f"Coupon frequency {self.frequency} does not split the year into whole months."
            )
        object.__setattr__(self, "frequency", int(self.frequency))

        settle = to_timestamp(self.settlement)
        maturity = to_timestamp(self.maturity)
        if maturity <= settle:
            raise InvalidScheduleError(
                f"Maturity {maturity.date()} must be after settlement {settle.date()}."
            )
        object.__setattr__(self, "settlement", settle)
        object.__setattr__(self, "maturity", maturity)

    @property
    def period_months(self) -> int:
        return 12 // self.frequency

    def coupon_date(self, k: int) -> pd.Timestamp:
        """k-th coupon date counted backward from maturity (k = 0 is maturity)."""
        return self.maturity - pd.DateOffset(months=k * self.period_months)

    @cached_property
    def _previous_index(self) -> int:
        k = 1
        while self.coupon_date(k) > self.settlement:
            k += 1
        return k

    def previous_coupon_date(self) -> pd.Timestamp:
        """Most recent coupon date on or before settlement (possibly virtual)."""
        return self.coupon_date(self._previous_index)

    def next_coupon_date(self) -> pd.Timestamp:
        """First coupon date strictly after settlement."""
        return self.coupon_date(self._previous_index - 1)

    def cash_flow_dates(self) -> Tuple[CashFlowDate, ...]:
        """Future coupon dates in chronological order, ending at maturity."""
        dates = [self.coupon_date(k) for k in range(self._previous_index - 1, -1, -1)]
        return tuple(CashFlowDate(d, yearfrac(self.settlement, d, self.day_count)) for d in dates)

    def times(self) -> np.ndarray:
        return np.array([cf.years for cf in self.cash_flow_dates()], dtype=float)

    def accrual_fraction(self) -> float:
        """
        Share of the current coupon period elapsed at settlement:
          yearfrac(prev, settle) / yearfrac(prev, next)
        0 on a coupon date, increasing towards 1 at the next coupon.
        """
        prev = self.previous_coupon_date()
        nxt = self.next_coupon_date()

        accrual_num = yearfrac(prev, self.settlement, self.day_count)
        accrual_den = yearfrac(prev, nxt, self.day_count)
        if accrual_den <= 0:
            raise InvalidScheduleError("Invalid coupon period length from schedule/daycount.")
        return accrual_num / accrual_den

    def years_to_maturity(self) -> float:
        return yearfrac(self.settlement, self.maturity, self.day_count)

    def to_frame(self) -> pd.DataFrame:
        flows = self.cash_flow_dates()
        return pd.DataFrame(
            {
                "pay_date": [cf.date for cf in flows],
                "years": [cf.years for cf in flows],
            }
        )


def generate(
    settlement: DateLike,
    maturity: DateLike,
    frequency: int,
    convention: Union[str, DayCountConvention],
) -> Tuple[CashFlowDate, ...]:
    return BondSchedule(settlement, maturity, frequency, convention).cash_flow_dates()
