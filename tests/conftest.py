"""
Shared fixtures for the tktdblm test suite.
"""

import os

os.environ.setdefault("MPLBACKEND", "Agg")

import numpy as np
import pandas as pd
import pytest
from scipy.optimize import brentq

from tktdblm import EnvironmentalScenario, StabilityConstants, TKTDParameters, invert_uptake_flux

LOG_K_CD = 7.96


@pytest.fixture
def params():
    """TK-TD parameters of the Cd study (h0 fixed at zero)."""
    return TKTDParameters(ke=0.00308, jmax=3.16, cit=33.5, kk=0.00267, h0=0.0)


@pytest.fixture
def constants():
    return StabilityConstants.from_log10(
        {"Cd": LOG_K_CD, "Ca": 3.34, "Mg": 3.10, "Na": 2.90, "K": 2.70, "H": 5.77}
    )


@pytest.fixture
def metal_only():
    return EnvironmentalScenario.metal_only(series="none", level="0")


@pytest.fixture
def hard_water():
    return EnvironmentalScenario(
        Ca=1e-3, Mg=2.5e-4, Na=1e-3, K=1e-4, H=1e-7,
        free_ion_fraction=0.6, activity_coefficient=0.45,
        series="Ca", level="high",
    )


@pytest.fixture
def scenario_df():
    return pd.DataFrame({
        "series": ["Ca", "Ca", "Mg"],
        "level": ["low", "high", "low"],
        "Ca": [2.5e-4, 2e-3, 5e-4],
        "Mg": [1e-4, 1e-4, 1e-3],
        "Na": [5e-4, 5e-4, 5e-4],
        "K": [5e-5, 5e-5, 5e-5],
        "H": [1e-7, 1e-7, 1e-7],
        "fi": [0.7, 0.6, 0.65],
        "gamma": [0.5, 0.45, 0.48],
    })


def analytic_hazard(flux, params, duration):
    """
    Closed-form cumulative hazard for a constant uptake flux with h0 = 0.

    Cint(t) = A (1 - exp(-ke t)), A = flux / ke, crosses CIT at t0.
    """
    a = flux / params.ke
    if a <= params.cit:
        return 0.0
    t0 = -np.log(1.0 - params.cit / a) / params.ke
    if t0 >= duration:
        return 0.0
    span = duration - t0
    integral = a * span + a / params.ke * (np.exp(-params.ke * duration) - np.exp(-params.ke * t0))
    return params.kk * (integral - params.cit * span)


def analytic_ec50(scenario, constants, params, duration):
    """Cd activity giving exp(-H(duration)) = 0.5, from the closed form."""
    lo = params.cit * params.ke * (1.0 + 1e-9)
    hi = params.jmax * (1.0 - 1e-12)
    flux = brentq(lambda j: analytic_hazard(j, params, duration) - np.log(2.0), lo, hi, xtol=1e-15)
    return invert_uptake_flux(flux, scenario, constants, params.jmax)
