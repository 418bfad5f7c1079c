"""
integrate.py
------------
Fixed-grid integration of the TK-TD system for a constant exposure.

The default method is classical 4th-order Runge-Kutta on the time grid,
vectorised over an array of Cd2+ activities so that several exposures can
be advanced in one pass. `method="odeint"` hands the same grid to
scipy's LSODA wrapper instead.

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

from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd
from scipy.integrate import odeint

from .config import DURATION, TIME_STEP, INTEGRATION_METHOD
from .models import (
    EnvironmentalScenario,
    InvalidInputError,
    StabilityConstants,
    TKTDParameters,
    make_rhs,
    survivorship,
    tktd_derivative,
    uptake_flux,
)


@dataclass(frozen=True)
class SimulationState:
    """Internal concentration and cumulative hazard at one instant."""

    cint: float
    hazard: float

    @property
    def survival(self) -> float:
        return float(survivorship(self.hazard))


@dataclass(frozen=True)
class Trajectory:
    """
    States on the integration grid.

    `cint` and `hazard` have shape (n_times,) + shape of the activity input.
    """

    times: np.ndarray
    cint: np.ndarray
    hazard: np.ndarray

    @property
    def survival(self) -> np.ndarray:
        return survivorship(self.hazard)

    def final(self) -> SimulationState:
        """Final state; only defined for a scalar exposure."""
        if self.cint.ndim != 1:
            raise ValueError("final() needs a trajectory for a single activity.")
        return SimulationState(float(self.cint[-1]), float(self.hazard[-1]))


def time_grid(duration: float = DURATION, step: float = TIME_STEP) -> np.ndarray:
    """
    Uniform grid from 0 to `duration` with spacing no larger than `step`.

    The end point is always included.
    """
    if not np.isfinite(duration) or duration <= 0:
        raise InvalidInputError(f"duration must be positive, got {duration!r}")
    if not np.isfinite(step) or step <= 0:
        raise InvalidInputError(f"step must be positive, got {step!r}")
    n_steps = max(int(np.ceil(duration / step - 1e-9)), 1)
    return np.linspace(0.0, duration, n_steps + 1)


def _rk4(flux: np.ndarray, params: TKTDParameters, times: np.ndarray):
    cint = np.zeros_like(flux)
    hazard = np.zeros_like(flux)
    cint_out = np.empty((times.size,) + flux.shape)
    hazard_out = np.empty((times.size,) + flux.shape)
    cint_out[0] = cint
    hazard_out[0] = hazard

    for i, dt in enumerate(np.diff(times), start=1):
        k1c, k1h = tktd_derivative((cint, hazard), flux, params)
        k2c, k2h = tktd_derivative((cint + 0.5 * dt * k1c, hazard + 0.5 * dt * k1h), flux, params)
        k3c, k3h = tktd_derivative((cint + 0.5 * dt * k2c, hazard + 0.5 * dt * k2h), flux, params)
        k4c, k4h = tktd_derivative((cint + dt * k3c, hazard + dt * k3h), flux, params)
        cint = cint + dt / 6.0 * (k1c + 2.0 * k2c + 2.0 * k3c + k4c)
        hazard = hazard + dt / 6.0 * (k1h + 2.0 * k2h + 2.0 * k3h + k4h)
        cint_out[i] = cint
        hazard_out[i] = hazard

    return cint_out, hazard_out


def integrate(
        c_metal: float | np.ndarray,
        scenario: EnvironmentalScenario,
        constants: StabilityConstants,
        params: TKTDParameters,
        times: Optional[np.ndarray] = None,
        method: str = INTEGRATION_METHOD,
) -> Trajectory:
    """
    Integrate the TK-TD system from (0, 0) over a fixed time grid.

    Parameters
    ----------
    c_metal : float or np.ndarray
        Constant free Cd2+ activity (mol/L). An array gives one independent
        run per element.
    scenario : EnvironmentalScenario
        Competing-ion activities, held fixed for the whole run.
    constants : StabilityConstants
        Biotic-ligand binding constants.
    params : TKTDParameters
        TK-TD constants.
    times : np.ndarray, optional
        Increasing grid starting at 0. Defaults to `time_grid()`.
    method : str
        "rk4" (fixed-step) or "odeint" (LSODA, reported on the grid).

    Returns
    -------
    Trajectory
    """
    times = time_grid() if times is None else np.asarray(times, dtype=float)
    if times.ndim != 1 or times.size < 2 or times[0] != 0 or np.any(np.diff(times) <= 0):
        raise InvalidInputError("times must be an increasing 1D grid starting at 0.")

    c_arr = np.asarray(c_metal, dtype=float)
    if np.any(~np.isfinite(c_arr)) or np.any(c_arr < 0):
        raise InvalidInputError("Cd activity must be finite and non-negative.")

    if method == "rk4":
        flux = np.asarray(uptake_flux(c_arr, scenario, constants, params.jmax), dtype=float)
        cint, hazard = _rk4(flux, params, times)
    elif method == "odeint":
        cint = np.empty((times.size,) + c_arr.shape)
        hazard = np.empty((times.size,) + c_arr.shape)
        for idx in np.ndindex(c_arr.shape):
            rhs = make_rhs(float(c_arr[idx]), scenario, constants, params)
            sol = odeint(rhs, [0.0, 0.0], times)
            cint[(slice(None),) + idx] = sol[:, 0]
            hazard[(slice(None),) + idx] = sol[:, 1]
    else:
        raise ValueError(f"Unknown integration method={method!r} (use rk4|odeint)")

    return Trajectory(times=times, cint=cint, hazard=hazard)


def final_survival(
        c_metal: float | np.ndarray,
        scenario: EnvironmentalScenario,
        constants: StabilityConstants,
        params: TKTDParameters,
        times: Optional[np.ndarray] = None,
        method: str = INTEGRATION_METHOD,
) -> float | np.ndarray:
    """Survivorship at the last grid point."""
    traj = integrate(c_metal, scenario, constants, params, times=times, method=method)
    s_final = traj.survival[-1]
    return float(s_final) if np.ndim(s_final) == 0 else s_final


def simulate(
        c_metal: float,
        scenario: EnvironmentalScenario,
        constants: StabilityConstants,
        params: TKTDParameters,
        duration: float = DURATION,
        step: float = TIME_STEP,
        method: str = INTEGRATION_METHOD,
) -> pd.DataFrame:
    """
    Trajectory of one exposure as a table.

    Returns
    -------
    pd.DataFrame
        Columns: time, Cint, hazard, survival.
    """
    traj = integrate(
        float(c_metal), scenario, constants, params,
        times=time_grid(duration, step), method=method,
    )
    return pd.DataFrame({
        "time": traj.times,
        "Cint": traj.cint,
        "hazard": traj.hazard,
        "survival": traj.survival,
    })
