"""
Root finding for price inversion.

Both solves work on a residual that is monotonically decreasing in the
unknown (price falls as yield or spread rises):
  1. bracket the root, expanding the initial interval a bounded number of times
  2. run Brent's method inside the bracket with a bounded iteration count

Target prices are CLEAN prices. Accrued interest is added back (IRR) or
the curve clean price is compared directly (spread).
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np
from scipy.optimize import brentq

from .bonds import StraightBond, flat_discount_factors, price
from .curves import TermStructure
from .errors import ConvergenceError, NoRootError

logger = logging.getLogger(__name__)

Func = Callable[[float], float]

YIELD_BRACKET = (-0.50, 1.00)          # decimal
SPREAD_BRACKET = (-1000.0, 10000.0)    # bps


@dataclass(frozen=True)
class RootResult:
    root: float
    iterations: int
    function_calls: int
    bracket: Tuple[float, float]


@dataclass(frozen=True)
class Solver:
    tolerance: float = 1e-10
    max_iter: int = 100
    max_expansions: int = 20

    def __post_init__(self):
        if not (self.tolerance > 0.0):
            raise ValueError("tolerance must be positive")
        if self.max_iter < 1:
            raise ValueError("max_iter must be at least 1")
        if self.max_expansions < 0:
            raise ValueError("max_expansions must be non-negative")

    def bracket(self, func: Func, lower: float, upper: float, floor: Optional[float] = None) -> Tuple[float, float]:
        """
        Widen [lower, upper] until func(lower) >= 0 >= func(upper).

        The upper end grows by the current width; the lower end either does
        the same or, when a floor is given, moves halfway towards it.
        """
        f_lower, f_upper = func(lower), func(upper)

        for expansion in range(self.max_expansions + 1):
            if f_lower >= 0.0 >= f_upper:
                return lower, upper
            if expansion == self.max_expansions:
                break

            width = upper - lower
            if f_lower < 0.0:
                lower = lower - width if floor is None else max(lower - width, 0.5 * (lower + floor))
                f_lower = func(lower)
            if f_upper > 0.0:
                upper = upper + width
                f_upper = func(upper)
            logger.debug("Bracket expansion %s: [%s, %s] -> [%s, %s]", expansion + 1, lower, upper, f_lower, f_upper)

        raise NoRootError(
            f"Target not reachable after {self.max_expansions} bracket expansions "
            f"(residual {f_lower:.6g} at {lower:.6g}, {f_upper:.6g} at {upper:.6g})."
        )

    def find_root(self, func: Func, lower: float, upper: float, floor: Optional[float] = None) -> RootResult:
        a, b = self.bracket(func, lower, upper, floor)
        root, info = brentq(
            func, a, b,
            xtol=self.tolerance,
            maxiter=self.max_iter,
            full_output=True,
            disp=False,
        )
        logger.debug("Brent: root=%s iterations=%s calls=%s converged=%s", root, info.iterations, info.function_calls, info.converged)
        if not info.converged:
            raise ConvergenceError(
                f"No convergence within {self.max_iter} iterations (tolerance {self.tolerance:g}); last x={root:.10g}."
            )
        return RootResult(float(root), int(info.iterations), int(info.function_calls), (a, b))


DEFAULT_SOLVER = Solver()


def _check_target(target_price: float) -> float:
    target = float(target_price)
    if not math.isfinite(target) or target <= 0.0:
        raise NoRootError(f"Target price must be positive and finite, got {target_price!r}.")
    return target


def irr(target_price: float, bond: StraightBond, solver: Optional[Solver] = None) -> float:
    """
    Yield-to-maturity in percent for a clean price: the flat yield y,
    compounded `frequency` times a year, such that the discounted cash
    flows equal target_price + accrued.
    """
    solver = solver or DEFAULT_SOLVER
    dirty_target = _check_target(target_price) + bond.accrued()

    times, amounts = bond.cash_flows()
    freq = bond.frequency

    def residual(y: float) -> float:
        return float(np.sum(amounts * flat_discount_factors(times, y, freq))) - dirty_target

    result = solver.find_root(residual, *YIELD_BRACKET, floor=-float(freq))
    logger.debug("%s: IRR %.8f%% for clean price %s", bond.bond_id, 100.0 * result.root, target_price)
    return 100.0 * result.root


def implied_spread(
    target_price: float,
    bond: StraightBond,
    curve: TermStructure,
    solver: Optional[Solver] = None,
) -> float:
    """Static spread in bps over `curve` that reprices the bond to a clean target_price."""
    solver = solver or DEFAULT_SOLVER
    target = _check_target(target_price)

    times, _ = bond.cash_flows()
    # spread at which 1 + r(t) + s reaches zero for some cash flow
    floor = -(1.0 + float(np.min(curve.zero_rate(times)))) * 10000.0
    lower = max(SPREAD_BRACKET[0], 0.5 * floor)

    def residual(s: float) -> float:
        return price(bond, curve, s)[1] - target

    result = solver.find_root(residual, lower, SPREAD_BRACKET[1], floor=floor)
    logger.debug("%s: implied spread %.6f bps for clean price %s", bond.bond_id, result.root, target_price)
    return result.root
