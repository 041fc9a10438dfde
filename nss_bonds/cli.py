"""
Value a fixed-coupon bond against a Nelson-Siegel-Svensson curve.

Examples:
  nss-bonds -f term.json --settlement 2024-01-01 --maturity 2030-06-15 --coupon 2.5 -n 2
  nss-bonds -f term.json --maturity 2031-03-01 --coupon 4 --quote 97.5 --daycount ACT/ACT
  nss-bonds --template > term.json
"""
from __future__ import annotations

import argparse
import json
import logging
import sys

import pandas as pd

from .bonds import StraightBond
from .config import load_term_structure, term_structure_template
from .errors import BondEngineError
from .report import format_report
from .utils import implemented, to_timestamp
from .valuation import value_bond

logger = logging.getLogger("nss_bonds")


def build_parser() -> argparse.ArgumentParser:
    today = pd.Timestamp.today().normalize()

    ap = argparse.ArgumentParser(prog="nss-bonds", description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    ap.add_argument("--settlement", default=f"{today:%Y-%m-%d}", help="valuation date / settlement date")
    ap.add_argument("--maturity", default=f"{today + pd.DateOffset(years=1):%Y-%m-%d}", help="maturity date of bond")
    ap.add_argument("--coupon", type=float, default=0.0, help="coupon in percent of par value")
    ap.add_argument("-n", dest="frequency", type=int, default=1, help="compounding frequency per year")
    ap.add_argument("--quote", type=float, default=0.0, help="quoted clean price at settlement date (0 = use model price)")
    ap.add_argument("--redemption", type=float, default=100.0, help="redemption value of bond at maturity")
    ap.add_argument("--spread", type=float, default=0.0, help="static (zero-volatility) spread in basis points for valuing risky bonds")
    ap.add_argument("-f", dest="file", default="term.json", help="json file containing the Nelson-Siegel-Svensson parameters")
    ap.add_argument(
        "--daycount",
        default="30E360",
        help=f"day count convention for accrued interest, available: {', '.join(implemented())}",
    )
    ap.add_argument("--template", action="store_true", help="print a term structure template and exit")
    ap.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    if args.template:
        print(json.dumps(term_structure_template(), indent=1))
        return 0

    try:
        curve = load_term_structure(args.file)
    except BondEngineError as exc:
        logger.error("%s", exc)
        logger.error("no usable term structure parameters. Template for Nelson-Siegel-Svensson:")
        print(json.dumps(term_structure_template(), indent=1))
        return 1

    try:
        bond = StraightBond.from_terms(
            settlement=to_timestamp(args.settlement),
            maturity=to_timestamp(args.maturity),
            coupon=args.coupon,
            frequency=args.frequency,
            redemption=args.redemption,
            day_count=args.daycount,
        )
        quote = args.quote if args.quote > 0.0 else None
        valuation = value_bond(bond, curve, spread_bps=args.spread, quote=quote)
    except (BondEngineError, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    print(format_report(valuation))
    return 0


if __name__ == "__main__":
    sys.exit(main())
