"""
NSS Bond Valuation Engine

Modules:
- utils: day count conventions + date helpers
- curves: Nelson-Siegel-Svensson term structure + curve shifts
- schedule: maturity-anchored coupon schedule + accrual
- bonds: straight bond + pricing, flat-yield pricing, modified duration
- solver: bracketed root finding for yield-to-maturity and static spread
- valuation: one-call valuation record for a bond
- risk: DV01/convexity/KRD/spread risk
- portfolio, scenarios: batch valuation and rate/spread scenario runners
- config, report, cli: parameter file, text report, command line
"""
from .bonds import StraightBond, duration, flat_yield_price, price, years_to_maturity
from .curves import NelsonSiegelSvensson
from .errors import (
    BondEngineError,
    ConfigError,
    ConvergenceError,
    InvalidCurveError,
    InvalidScheduleError,
    NoRootError,
    UnsupportedConventionError,
)
from .schedule import BondSchedule, CashFlowDate, generate
from .solver import Solver, implied_spread, irr
from .utils import DayCountConvention, yearfrac
from .valuation import Valuation, value_bond

__version__ = "0.1.0"
