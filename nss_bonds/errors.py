from __future__ import annotations


class BondEngineError(Exception):
    """Base class for all valuation engine errors."""


class UnsupportedConventionError(BondEngineError, ValueError):
    """Unknown day count convention name."""


class InvalidCurveError(BondEngineError, ValueError):
    """Non-physical term structure parameters or discount factor."""


class InvalidScheduleError(BondEngineError, ValueError):
    """Maturity not after settlement, or an unusable coupon frequency."""


class NoRootError(BondEngineError, ValueError):
    """Target price cannot be reached inside the solver bracket."""


class ConvergenceError(BondEngineError, RuntimeError):
    """Root search hit its iteration cap before meeting tolerance."""


class ConfigError(BondEngineError):
    """Term structure file could not be read or decoded."""
