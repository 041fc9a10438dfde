from __future__ import annotations

from .valuation import Valuation


def format_report(v: Valuation) -> str:
    """Plain-text valuation summary, one value per line."""
    heading = "Yields for the quoted price:" if v.quoted else "Yields for the calculated clean price:"
    lines = [
        "",
        f"Settlement Date  : {v.settlement:%Y-%m-%d}",
        f"Maturity Date    : {v.maturity:%Y-%m-%d}",
        "",
        f"Years to Maturity: {v.years_to_maturity:.2f} years",
        f"Modified duration: {v.modified_duration:.2f}",
        "",
        f"Coupon           : {v.coupon:.2f}",
        f"Frequency        : {v.frequency}",
        f"Day Convention   : {v.day_count}",
        "",
        f"Spread           : {v.spread_bps:.2f}",
        "",
        f"    Dirty Price       {v.dirty:10.2f}",
        f"[-] Accrued Interest  {v.accrued:10.2f}",
        "--------------------------------",
        f"[=] Clean Price       {v.clean:10.2f}",
        "================================",
        "",
        heading,
        f"  Price               {v.yield_price:10.2f}",
        f"  Yield-to-Maturity   {v.ytm:10.2f} %",
        f"  Implied spread      {v.implied_spread:10.1f} bps",
        "",
    ]
    return "\n".join(lines)
