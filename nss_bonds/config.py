"""
Term structure parameter files.

JSON object with the six NSS parameters in decimal, e.g.

    {"b0": 0.03, "b1": -0.01, "b2": 0.005, "b3": 0.0, "t1": 2.0, "t2": 8.0}

Keys are case-insensitive; beta0..beta3 / tau1, tau2 are accepted as well.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Mapping, Union

from .curves import NelsonSiegelSvensson
from .errors import ConfigError, InvalidCurveError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_KEYS = {
    "b0": "beta0", "beta0": "beta0",
    "b1": "beta1", "beta1": "beta1",
    "b2": "beta2", "beta2": "beta2",
    "b3": "beta3", "beta3": "beta3",
    "t1": "tau1", "tau1": "tau1",
    "t2": "tau2", "tau2": "tau2",
}
_FIELDS = ("beta0", "beta1", "beta2", "beta3", "tau1", "tau2")
_TEMPLATE_KEYS = ("b0", "b1", "b2", "b3", "t1", "t2")


def term_structure_from_dict(data: Mapping) -> NelsonSiegelSvensson:
    if not isinstance(data, Mapping):
        raise InvalidCurveError(f"Term structure must be a JSON object, got {type(data).__name__}.")

    params = {}
    for key, value in data.items():
        field = _KEYS.get(str(key).lower())
        if field is None:
            raise InvalidCurveError(f"Unknown term structure parameter: {key!r}.")
        if field in params:
            raise InvalidCurveError(f"Duplicate term structure parameter: {key!r}.")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidCurveError(f"Parameter {key!r} must be a number, got {value!r}.")
        params[field] = float(value)

    missing = [f for f in _FIELDS if f not in params]
    if missing:
        raise InvalidCurveError(f"Missing term structure parameters: {', '.join(missing)}.")

    return NelsonSiegelSvensson(**params)


def term_structure_to_dict(curve: NelsonSiegelSvensson) -> dict:
    return dict(zip(_TEMPLATE_KEYS, (float(p) for p in curve.params())))


def term_structure_template() -> dict:
    return {key: 0.0 for key in _TEMPLATE_KEYS}


def load_term_structure(path: PathLike) -> NelsonSiegelSvensson:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read term structure file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Term structure file {path} is not valid JSON: {exc}") from exc

    curve = term_structure_from_dict(data)
    logger.debug("Loaded term structure from %s: %s", path, curve)
    return curve


def save_term_structure(curve: NelsonSiegelSvensson, path: PathLike) -> Path:
    path = Path(path)
    path.write_text(json.dumps(term_structure_to_dict(curve), indent=2), encoding="utf-8")
    return path
