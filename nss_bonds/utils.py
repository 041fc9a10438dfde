from __future__ import annotations

import re
from datetime import date
from enum import Enum
from typing import Union

import pandas as pd

from .errors import UnsupportedConventionError

DateLike = Union[str, date, pd.Timestamp]


def to_timestamp(d: DateLike) -> pd.Timestamp:
    """Calendar date as a midnight-normalised Timestamp (time of day dropped)."""
    ts = pd.Timestamp(d)
    if pd.isna(ts):
        raise ValueError(f"Not a calendar date: {d!r}")
    return ts.normalize()


def _key(name: str) -> str:
    return re.sub(r"[\s/_\-]", "", name.upper()).replace("ACTUAL", "ACT")


class DayCountConvention(str, Enum):
    """
    Supported day count conventions.

    - 30/360  : US bond basis
    - 30E/360 : Eurobond basis
    - ACT/360
    - ACT/365 : Actual/365 fixed
    - ACT/ACT : Actual/Actual ISDA (leap-year days over 366)
    """
    THIRTY_360 = "30/360"
    THIRTY_E_360 = "30E/360"
    ACT_360 = "ACT/360"
    ACT_365 = "ACT/365"
    ACT_ACT = "ACT/ACT"

    @classmethod
    def parse(cls, name: Union[str, "DayCountConvention"]) -> "DayCountConvention":
        """
        Resolve a convention name. Case, '/', '-', '_' and blanks are ignored,
        so '30E360', '30e/360' and '30E/360' are the same convention.
        """
        if isinstance(name, cls):
            return name
        if not isinstance(name, str):
            raise UnsupportedConventionError(f"Unsupported day count convention: {name!r}")
        try:
            return _ALIASES[_key(name)]
        except KeyError as exc:
            raise UnsupportedConventionError(
                f"Unsupported day count convention: {name}. "
                f"Available: {', '.join(implemented())}"
            ) from exc


_ALIASES = {
    "30360": DayCountConvention.THIRTY_360,
    "30U360": DayCountConvention.THIRTY_360,
    "30360US": DayCountConvention.THIRTY_360,
    "BONDBASIS": DayCountConvention.THIRTY_360,
    "30E360": DayCountConvention.THIRTY_E_360,
    "30360E": DayCountConvention.THIRTY_E_360,
    "EUROBONDBASIS": DayCountConvention.THIRTY_E_360,
    "ACT360": DayCountConvention.ACT_360,
    "ACT365": DayCountConvention.ACT_365,
    "ACT365F": DayCountConvention.ACT_365,
    "ACTACT": DayCountConvention.ACT_ACT,
    "ACTACTISDA": DayCountConvention.ACT_ACT,
}


def implemented() -> list:
    """Canonical names of the supported conventions."""
    return [c.value for c in DayCountConvention]


def _thirty_360(start: pd.Timestamp, end: pd.Timestamp, european: bool) -> float:
    y1, m1, d1 = start.year, start.month, start.day
    y2, m2, d2 = end.year, end.month, end.day

    if d1 == 31:
        d1 = 30
    if d2 == 31 and (european or d1 == 30):
        d2 = 30

    return ((y2 - y1) * 360 + (m2 - m1) * 30 + (d2 - d1)) / 360.0


def _act_act_isda(start: pd.Timestamp, end: pd.Timestamp) -> float:
    if start.year == end.year:
        return (end - start).days / (366.0 if start.is_leap_year else 365.0)

    first_year_end = pd.Timestamp(year=start.year + 1, month=1, day=1)
    last_year_start = pd.Timestamp(year=end.year, month=1, day=1)

    frac = (first_year_end - start).days / (366.0 if start.is_leap_year else 365.0)
    frac += end.year - start.year - 1
    frac += (end - last_year_start).days / (366.0 if end.is_leap_year else 365.0)
    return frac


def yearfrac(start: DateLike, end: DateLike, convention: Union[str, DayCountConvention]) -> float:
    """
    Year fraction between two dates under a day count convention.

    The convention is resolved before any date arithmetic. The result is 0
    when start == end and changes sign when start > end.
    """
    convention = DayCountConvention.parse(convention)

    start = to_timestamp(start)
    end = to_timestamp(end)

    if end < start:
        return -yearfrac(end, start, convention)

    if convention is DayCountConvention.ACT_360:
        return (end - start).days / 360.0

    if convention is DayCountConvention.ACT_365:
        return (end - start).days / 365.0

    if convention is DayCountConvention.ACT_ACT:
        return _act_act_isda(start, end)

    return _thirty_360(start, end, european=convention is DayCountConvention.THIRTY_E_360)
