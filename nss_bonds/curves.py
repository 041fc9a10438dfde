from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Iterable, Tuple, Union

import numpy as np
import pandas as pd

from .errors import InvalidCurveError

Years = Union[float, Iterable[float], np.ndarray]

DEFAULT_TENORS = (0.0, 0.25, 0.5, 1.0, 2.0, 3.0, 5.0, 7.0, 10.0, 15.0, 20.0, 30.0)


def _as_years(years: Years) -> np.ndarray:
    t = np.asarray(years, dtype=float)
    if np.any(~np.isfinite(t)):
        raise ValueError("Maturity must be finite.")
    if np.any(t < 0.0):
        raise ValueError("Maturity must be non-negative (years from settlement).")
    return t


def _same_shape(values: np.ndarray, years: Years):
    if np.ndim(years) == 0:
        return float(values)
    return values


def _spread(spread_bps: float) -> float:
    s = float(spread_bps)
    if not math.isfinite(s):
        raise InvalidCurveError(f"Spread must be finite, got {spread_bps!r} bps.")
    return s / 10000.0


def _loadings(t: np.ndarray, tau: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    NSS factor loadings at maturities t for decay constant tau:
      slope = (1 - exp(-t/tau)) / (t/tau)
      hump  = slope - exp(-t/tau)
    with their t -> 0 limits (1 and 0).
    """
    pos = t > 0.0
    x = np.where(pos, t / tau, 1.0)
    decay = np.exp(-x)
    slope = np.where(pos, (1.0 - decay) / x, 1.0)
    hump = np.where(pos, slope - decay, 0.0)
    return slope, hump


class TermStructure:
    """
    Zero-rate term structure discounted with annual compounding:
      DF(t) = (1 + r(t) + spread) ** (-t)

    Subclasses provide zero_rate(); discount_factor() is shared so every
    curve in the engine discounts the same way.
    """

    def zero_rate(self, years: Years, spread_bps: float = 0.0):
        raise NotImplementedError

    def discount_factor(self, years: Years, spread_bps: float = 0.0):
        t = _as_years(years)
        r = np.asarray(self.zero_rate(t, spread_bps), dtype=float)

        base = 1.0 + r
        if np.any(base <= 0.0):
            raise InvalidCurveError("Spread-adjusted zero rate at or below -100%: no discount factor.")

        dfs = base ** (-t)
        if np.any(~np.isfinite(dfs)) or np.any(dfs <= 0.0):
            raise InvalidCurveError("Discount factor is not a positive finite number.")
        return _same_shape(dfs, years)

    def shifted(self, shift_func: Callable[[float], float]) -> "ShiftedCurve":
        """Curve with zero rates z(t) shifted by shift_func(t) (decimal)."""
        return ShiftedCurve(self, shift_func)


@dataclass(frozen=True)
class NelsonSiegelSvensson(TermStructure):
    """
    Nelson-Siegel-Svensson zero curve, rates in decimal (0.03 = 3%).

    r(t) = beta0
         + beta1 * ((1 - exp(-t/tau1)) / (t/tau1))
         + beta2 * (((1 - exp(-t/tau1)) / (t/tau1)) - exp(-t/tau1))
         + beta3 * (((1 - exp(-t/tau2)) / (t/tau2)) - exp(-t/tau2))

    - beta0 = long-run level, beta1 = slope
    - beta2, beta3 = curvature humps with decay constants tau1, tau2 > 0
    """
    beta0: float
    beta1: float
    beta2: float
    beta3: float
    tau1: float
    tau2: float

    def __post_init__(self):
        for name, value in zip(("beta0", "beta1", "beta2", "beta3", "tau1", "tau2"), self.params()):
            try:
                value = float(value)
            except (TypeError, ValueError) as exc:
                raise InvalidCurveError(f"{name} must be a real number, got {value!r}.") from exc
            if not math.isfinite(value):
                raise InvalidCurveError(f"{name} must be finite, got {value!r}.")
        if float(self.tau1) <= 0.0 or float(self.tau2) <= 0.0:
            raise InvalidCurveError(f"Decay constants must be positive: tau1={self.tau1}, tau2={self.tau2}.")

    def params(self) -> Tuple[float, float, float, float, float, float]:
        return (self.beta0, self.beta1, self.beta2, self.beta3, self.tau1, self.tau2)

    def zero_rate(self, years: Years, spread_bps: float = 0.0):
        """Zero rate at t years plus spread_bps / 10000. r(0) = beta0 + beta1."""
        t = _as_years(years)
        slope1, hump1 = _loadings(t, float(self.tau1))
        _, hump2 = _loadings(t, float(self.tau2))

        r = self.beta0 + self.beta1 * slope1 + self.beta2 * hump1 + self.beta3 * hump2
        return _same_shape(r + _spread(spread_bps), years)

    def forward_rate(self, years: Years):
        """Instantaneous forward rate of the model."""
        t = _as_years(years)
        x1 = t / float(self.tau1)
        x2 = t / float(self.tau2)
        f = (
            self.beta0
            + self.beta1 * np.exp(-x1)
            + self.beta2 * x1 * np.exp(-x1)
            + self.beta3 * x2 * np.exp(-x2)
        )
        return _same_shape(f, years)

    @classmethod
    def flat(cls, rate: float) -> "NelsonSiegelSvensson":
        """Flat curve at `rate` for every maturity."""
        return cls(rate, 0.0, 0.0, 0.0, 1.0, 1.0)


@dataclass(frozen=True)
class ShiftedCurve(TermStructure):
    base: TermStructure
    shift_func: Callable[[float], float]

    def zero_rate(self, years: Years, spread_bps: float = 0.0):
        t = _as_years(years)
        r = np.asarray(self.base.zero_rate(t, spread_bps), dtype=float)
        shifts = np.array([self.shift_func(x) for x in t.ravel()], dtype=float).reshape(t.shape)
        return _same_shape(r + shifts, years)


def curve_qc_report(curve: TermStructure, tenors: Iterable[float] = DEFAULT_TENORS) -> pd.DataFrame:
    taus = np.array(sorted(float(t) for t in tenors), dtype=float)
    zeros = np.asarray(curve.zero_rate(taus), dtype=float)
    dfs = np.asarray(curve.discount_factor(taus), dtype=float)

    return pd.DataFrame(
        {
            "tenor": taus,
            "zero": zeros,
            "df": dfs,
            "df_positive": dfs > 0,
            "df_monotone": np.r_[True, np.diff(dfs) <= 1e-12],
        }
    )


def parallel_shift_bp(bp: float):
    s = bp / 10000.0
    return lambda tau: s


def steepener_shift_bp(bp: float, pivot: float = 2.0, long: float = 10.0):
    A = bp / 10000.0

    def f(tau: float) -> float:
        if tau <= pivot:
            return -A
        if tau >= long:
            return +A
        w = (tau - pivot) / (long - pivot)
        return (1 - w) * (-A) + w * (+A)

    return f


def flattener_shift_bp(bp: float, pivot: float = 2.0, long: float = 10.0):
    A = bp / 10000.0

    def f(tau: float) -> float:
        if tau <= pivot:
            return +A
        if tau >= long:
            return -A
        w = (tau - pivot) / (long - pivot)
        return (1 - w) * (+A) + w * (-A)

    return f
