"""
models.py
---------------
Biotic-ligand TK-TD model for Cd toxicity.

Provides the parameter containers, the competitive-binding uptake flux,
the two-state TK-TD derivative, the hazard-to-survival transform and the
activity <-> mass-concentration conversion.

"""
# BSD 3-Clause License
#
# Copyright (c) 2025, Abhinav Mishra
# All rights reserved.
# Email: mishraabhinav36@gmail.com
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
# 1. Redistributions of source code must retain the above copyright notice,
#    this list of conditions and the following disclaimer.
#
# 2. Redistributions in binary form must reproduce the above copyright notice,
#    this list of conditions and the following disclaimer in the documentation
#    and/or other materials provided with the distribution.
#
# 3. Neither the name of Abhinav Mishra nor the names of its contributors may
#    be used to endorse or promote products derived from this software without
#    specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE
# DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE LIABLE
# FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL
# DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR
# SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY,
# OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE
# OF THIS SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Tuple

import numpy as np
import yaml

from .config import (
    COMPETITORS,
    LOG_STABILITY_CONSTANTS,
    MOLAR_MASS,
    TKTD_DEFAULTS,
)


class InvalidInputError(ValueError):
    """Raised when model inputs are outside their physical domain."""


# ---------------------------------------------------------------------------
#  Parameter containers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StabilityConstants:
    """
    Equilibrium constants (L/mol) for 1:1 binding to the biotic ligand.

    One constant for the toxic metal and one per competing cation.
    """

    Cd: float
    Ca: float
    Mg: float
    Na: float
    K: float
    H: float

    def __post_init__(self) -> None:
        for name in ("Cd",) + COMPETITORS:
            value = getattr(self, name)
            if not np.isfinite(value) or value <= 0:
                raise InvalidInputError(
                    f"Stability constant K_{name} must be positive, got {value!r}"
                )

    @classmethod
    def from_log10(cls, log_k: Mapping[str, float]) -> "StabilityConstants":
        """Build from log10 values keyed by species name."""
        return cls(**{name: 10.0 ** float(log_k[name]) for name in ("Cd",) + COMPETITORS})

    @property
    def competitors(self) -> np.ndarray:
        return np.array([getattr(self, name) for name in COMPETITORS], dtype=float)


@dataclass(frozen=True)
class TKTDParameters:
    """
    Toxicokinetic / toxicodynamic constants.

    ke   : elimination rate
    jmax : maximum uptake rate
    cit  : internal threshold concentration
    kk   : killing rate
    h0   : background hazard rate
    """

    ke: float
    jmax: float
    cit: float
    kk: float
    h0: float = 0.0

    def __post_init__(self) -> None:
        for name in ("ke", "jmax", "cit", "kk", "h0"):
            value = getattr(self, name)
            if not np.isfinite(value) or value < 0:
                raise InvalidInputError(
                    f"TK-TD parameter {name} must be non-negative, got {value!r}"
                )


@dataclass(frozen=True)
class EnvironmentalScenario:
    """
    One water-chemistry record.

    Competitor activities are in mol/L. `free_ion_fraction` and
    `activity_coefficient` convert a Cd2+ activity back to total dissolved Cd.
    """

    Ca: float
    Mg: float
    Na: float
    K: float
    H: float
    free_ion_fraction: float = 1.0
    activity_coefficient: float = 1.0
    series: str = ""
    level: str = ""
    competitors: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        acts = np.array([getattr(self, name) for name in COMPETITORS], dtype=float)
        bad = [n for n, a in zip(COMPETITORS, acts) if not np.isfinite(a) or a < 0]
        if bad:
            raise InvalidInputError(f"Negative or missing ion activities: {bad}")
        for name in ("free_ion_fraction", "activity_coefficient"):
            value = getattr(self, name)
            if not np.isfinite(value) or value <= 0:
                raise InvalidInputError(f"{name} must be positive, got {value!r}")
        acts.setflags(write=False)
        object.__setattr__(self, "competitors", acts)

    @classmethod
    def metal_only(cls, **kwargs: Any) -> "EnvironmentalScenario":
        """Scenario with every competitor activity set to zero."""
        return cls(Ca=0.0, Mg=0.0, Na=0.0, K=0.0, H=0.0, **kwargs)

    def with_activity(self, name: str, value: float) -> "EnvironmentalScenario":
        """Copy of the scenario with one competitor activity replaced."""
        kwargs = {n: getattr(self, n) for n in COMPETITORS}
        kwargs[name] = value
        return EnvironmentalScenario(
            free_ion_fraction=self.free_ion_fraction,
            activity_coefficient=self.activity_coefficient,
            series=self.series,
            level=self.level,
            **kwargs,
        )


def default_stability_constants() -> StabilityConstants:
    return StabilityConstants.from_log10(LOG_STABILITY_CONSTANTS)


def default_tktd_parameters() -> TKTDParameters:
    return TKTDParameters(**TKTD_DEFAULTS)


def load_model_parameters(path: str | Path) -> Tuple[StabilityConstants, TKTDParameters]:
    """
    Read stability constants and TK-TD parameters from a YAML file.

    Keys missing from the file keep the package defaults.
    """
    with open(path, "r") as f:
        cfg = yaml.safe_load(f) or {}
    model = cfg.get("model", {})

    log_k = dict(LOG_STABILITY_CONSTANTS)
    log_k.update(model.get("log_stability_constants", {}) or {})
    tktd = dict(TKTD_DEFAULTS)
    tktd.update(model.get("tktd", {}) or {})

    return (
        StabilityConstants.from_log10(log_k),
        TKTDParameters(**{k: float(v) for k, v in tktd.items()}),
    )


# ---------------------------------------------------------------------------
#  Binding / uptake
# ---------------------------------------------------------------------------

def uptake_flux(
        c_metal: float | np.ndarray,
        scenario: EnvironmentalScenario,
        constants: StabilityConstants,
        jmax: float,
) -> float | np.ndarray:
    """
    Langmuir-type competitive uptake flux:

        Jin = Jmax * K_Cd * C_Cd / (1 + K_Cd * C_Cd + sum_i K_i * C_i)

    Parameters
    ----------
    c_metal : float or np.ndarray
        Free Cd2+ activity (mol/L). Arrays are evaluated elementwise.
    scenario : EnvironmentalScenario
        Supplies the competing-ion activities.
    constants : StabilityConstants
        Binding constants for Cd and the competitors.
    jmax : float
        Maximum uptake rate.

    Returns
    -------
    float or np.ndarray
        Uptake flux, in [0, jmax).
    """
    bound_metal = constants.Cd * c_metal
    competition = float(np.dot(constants.competitors, scenario.competitors))
    return jmax * bound_metal / (1.0 + bound_metal + competition)


def invert_uptake_flux(
        flux: float,
        scenario: EnvironmentalScenario,
        constants: StabilityConstants,
        jmax: float,
) -> float:
    """Cd2+ activity producing a given uptake flux (0 <= flux < jmax)."""
    if not 0 <= flux < jmax:
        raise InvalidInputError(f"Flux must lie in [0, jmax), got {flux!r}")
    competition = float(np.dot(constants.competitors, scenario.competitors))
    return flux * (1.0 + competition) / (constants.Cd * (jmax - flux))


# ---------------------------------------------------------------------------
#  TK-TD dynamics
# ---------------------------------------------------------------------------

def tktd_derivative(
        state: Tuple[Any, Any],
        flux: float | np.ndarray,
        params: TKTDParameters,
) -> Tuple[Any, Any]:
    """
    Right-hand side of the TK-TD system for a constant uptake flux.

        dCint/dt   = Jin - ke * Cint
        dHazard/dt = kk * max(Cint - CIT, 0) + h0

    The hazard term does not depend on the hazard itself, so `state` may
    hold scalars or equally-shaped arrays.
    """
    cint, _ = state
    d_cint = flux - params.ke * cint
    d_hazard = params.kk * np.maximum(cint - params.cit, 0.0) + params.h0
    return d_cint, d_hazard


def make_rhs(
        c_metal: float,
        scenario: EnvironmentalScenario,
        constants: StabilityConstants,
        params: TKTDParameters,
):
    """Bind one exposure into an ``f(y, t)`` callable for scipy integrators."""
    flux = uptake_flux(c_metal, scenario, constants, params.jmax)

    def rhs(y: np.ndarray, t: float) -> list:
        d_cint, d_hazard = tktd_derivative((y[0], y[1]), flux, params)
        return [d_cint, d_hazard]

    return rhs


# ---------------------------------------------------------------------------
#  Survivorship and units
# ---------------------------------------------------------------------------

def survivorship(hazard: float | np.ndarray) -> float | np.ndarray:
    """Exponential survival law, S = exp(-H)."""
    return np.exp(-np.asarray(hazard, dtype=float))


def activity_to_ugL(
        activity: float | np.ndarray,
        free_ion_fraction: float,
        activity_coefficient: float,
        molar_mass: float = MOLAR_MASS,
) -> float | np.ndarray:
    """
    Convert a free-ion activity (mol/L) to total dissolved metal (ug/L).

        conc = activity / free_ion_fraction / activity_coefficient * M * 1e6
    """
    if free_ion_fraction <= 0 or activity_coefficient <= 0 or molar_mass <= 0:
        raise InvalidInputError("Conversion factors and molar mass must be positive.")
    return activity / free_ion_fraction / activity_coefficient * molar_mass * 1e6


def ugL_to_activity(
        conc_ugL: float | np.ndarray,
        free_ion_fraction: float,
        activity_coefficient: float,
        molar_mass: float = MOLAR_MASS,
) -> float | np.ndarray:
    """Inverse of `activity_to_ugL`."""
    if free_ion_fraction <= 0 or activity_coefficient <= 0 or molar_mass <= 0:
        raise InvalidInputError("Conversion factors and molar mass must be positive.")
    return conc_ugL / 1e6 / molar_mass * free_ion_fraction * activity_coefficient


def scenario_to_ugL(activity: float, scenario: EnvironmentalScenario, molar_mass: float = MOLAR_MASS) -> float:
    return float(activity_to_ugL(
        activity, scenario.free_ion_fraction, scenario.activity_coefficient, molar_mass
    ))

