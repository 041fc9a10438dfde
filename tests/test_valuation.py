import json

import pandas as pd
import pytest

from nss_bonds.bonds import StraightBond, price
from nss_bonds.cli import main
from nss_bonds.config import (
    load_term_structure,
    save_term_structure,
    term_structure_from_dict,
    term_structure_template,
)
from nss_bonds.curves import NelsonSiegelSvensson
from nss_bonds.errors import ConfigError, InvalidCurveError
from nss_bonds.report import format_report
from nss_bonds.solver import irr
from nss_bonds.valuation import value_bond


@pytest.fixture
def term_file(tmp_path):
    path = tmp_path / "term.json"
    path.write_text(json.dumps({"b0": 0.03, "b1": 0.0, "b2": 0.0, "b3": 0.0, "t1": 1.0, "t2": 1.0}))
    return path


def test_value_bond_model_price(bond, curve):
    v = value_bond(bond, curve, spread_bps=120.0)
    dirty, clean = price(bond, curve, 120.0)

    assert v.dirty == dirty and v.clean == clean
    assert v.clean == v.dirty - v.accrued
    assert not v.quoted and v.yield_price == clean
    assert v.implied_spread == pytest.approx(120.0, abs=1e-6)
    assert v.ytm == pytest.approx(irr(clean, bond), abs=1e-12)
    assert v.day_count == "30E/360"
    assert v.settlement == pd.Timestamp("2026-02-16")


def test_value_bond_quoted_price(bond, curve):
    v = value_bond(bond, curve, quote=97.25)
    assert v.quoted and v.yield_price == 97.25
    assert v.implied_spread > 0.0, "quote below model price implies a positive spread"


def test_report_layout(flat_curve):
    b = StraightBond.from_terms("2024-01-01", "2025-01-01", coupon=5.0, frequency=1)
    text = format_report(value_bond(b, flat_curve))
    assert "Years to Maturity: 1.00 years" in text
    assert "[=] Clean Price           101.94" in text
    assert "Yields for the calculated clean price:" in text
    assert "Yield-to-Maturity         3.00 %" in text
    assert "Implied spread" in text and text.rstrip().endswith("bps")


def test_config_round_trip(tmp_path, curve):
    path = save_term_structure(curve, tmp_path / "nss.json")
    assert load_term_structure(path) == curve


def test_config_accepts_long_and_upper_case_keys():
    data = {"Beta0": 0.03, "BETA1": -0.01, "beta2": 0.0, "B3": 0.0, "tau1": 2.0, "T2": 5.0}
    assert term_structure_from_dict(data) == NelsonSiegelSvensson(0.03, -0.01, 0.0, 0.0, 2.0, 5.0)


@pytest.mark.parametrize(
    "data",
    [
        {"b0": 0.03, "b1": 0.0, "b2": 0.0, "b3": 0.0, "t1": 1.0},
        {"b0": 0.03, "b1": 0.0, "b2": 0.0, "b3": 0.0, "t1": 1.0, "t2": 1.0, "t3": 1.0},
        {"b0": "3%", "b1": 0.0, "b2": 0.0, "b3": 0.0, "t1": 1.0, "t2": 1.0},
        {"b0": 0.03, "b1": 0.0, "b2": 0.0, "b3": 0.0, "t1": 0.0, "t2": 1.0},
        [0.03, 0.0, 0.0, 0.0, 1.0, 1.0],
    ],
)
def test_config_rejects_bad_parameters(data):
    with pytest.raises(InvalidCurveError):
        term_structure_from_dict(data)


def test_config_file_errors(tmp_path):
    with pytest.raises(ConfigError):
        load_term_structure(tmp_path / "missing.json")
    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    with pytest.raises(ConfigError):
        load_term_structure(bad)


def test_template_is_loadable_shape():
    assert set(term_structure_template()) == {"b0", "b1", "b2", "b3", "t1", "t2"}


def test_cli_prices_bond(term_file, capsys):
    rc = main(["-f", str(term_file), "--settlement", "2024-01-01", "--maturity", "2025-01-01", "--coupon", "5"])
    out = capsys.readouterr().out
    assert rc == 0
    assert "101.94" in out
    assert "Day Convention   : 30E/360" in out


def test_cli_with_quote(term_file, capsys):
    rc = main(["-f", str(term_file), "--settlement", "2024-01-01", "--maturity", "2029-01-01",
               "--coupon", "4", "-n", "2", "--quote", "99.5", "--daycount", "ACT/ACT"])
    out = capsys.readouterr().out
    assert rc == 0
    assert "Yields for the quoted price:" in out


def test_cli_missing_term_file_prints_template(tmp_path, capsys):
    rc = main(["-f", str(tmp_path / "nope.json")])
    out = capsys.readouterr().out
    assert rc == 1
    assert json.loads(out) == term_structure_template()


def test_cli_template_flag(capsys):
    assert main(["--template"]) == 0
    assert json.loads(capsys.readouterr().out) == term_structure_template()


@pytest.mark.parametrize(
    "extra",
    [
        ["--daycount", "BUS/252"],
        ["--maturity", "2024-01-01"],
        ["-n", "0"],
        ["--maturity", "not-a-date"],
    ],
)
def test_cli_reports_errors(term_file, extra):
    assert main(["-f", str(term_file), "--settlement", "2024-01-01", "--coupon", "3"] + extra) == 1
