import pandas as pd
import pytest

from nss_bonds.bonds import StraightBond
from nss_bonds.curves import NelsonSiegelSvensson


@pytest.fixture(scope="module")
def curve():
    # upward sloping, rates roughly 2.5% .. 4%
    return NelsonSiegelSvensson(beta0=0.035, beta1=-0.01, beta2=0.02, beta3=-0.01, tau1=1.8, tau2=9.0)


@pytest.fixture(scope="module")
def flat_curve():
    return NelsonSiegelSvensson.flat(0.03)


@pytest.fixture(scope="module")
def settle():
    # not a coupon date of the bonds below, so accrued > 0
    return pd.Timestamp("2026-02-16")


@pytest.fixture(scope="module")
def bond(settle):
    return StraightBond.from_terms(
        settlement=settle,
        maturity="2033-02-15",
        coupon=5.0,
        frequency=2,
        day_count="30E/360",
        bond_id="CORP_7Y_5PCT",
    )
