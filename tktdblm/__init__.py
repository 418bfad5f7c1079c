"""
tktdblm – biotic-ligand TK-TD toolkit for metal toxicity.

This package estimates the 48 h EC50 and the no-effect concentration
(NEC) of Cd from a threshold-hazard TK-TD model whose uptake follows a
competitive biotic-ligand binding law, for many water-chemistry
scenarios, and repeats the EC50 fit across exposure durations.

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

from .config import (
    SPECIES,
    COMPETITORS,
    REQUIRED_COLS,
    SERIES_COL,
    LEVEL_COL,
    EC50_COL,
    NEC_COL,
    MOLAR_MASS,
)
from .models import (
    InvalidInputError,
    StabilityConstants,
    TKTDParameters,
    EnvironmentalScenario,
    default_stability_constants,
    default_tktd_parameters,
    load_model_parameters,
    uptake_flux,
    invert_uptake_flux,
    tktd_derivative,
    survivorship,
    activity_to_ugL,
    ugL_to_activity,
)
from .integrate import SimulationState, Trajectory, time_grid, integrate, final_survival, simulate
from .fit import BracketError, ConvergenceError, FitResult, EC50Solver, fit_ec50, fit_nec, nec_function
from .dataio import load_scenarios_csv, load_table, scenario_from_row, save_table, validate_columns
from .batch import fit_scenario, fit_all_scenarios, fit_time_course, default_durations, summarize_endpoints
from .plotting import plot_endpoint_by_series, plot_time_course, plot_survival

__all__ = [
    "SPECIES",
    "COMPETITORS",
    "REQUIRED_COLS",
    "SERIES_COL",
    "LEVEL_COL",
    "EC50_COL",
    "NEC_COL",
    "MOLAR_MASS",
    "InvalidInputError",
    "StabilityConstants",
    "TKTDParameters",
    "EnvironmentalScenario",
    "default_stability_constants",
    "default_tktd_parameters",
    "load_model_parameters",
    "uptake_flux",
    "invert_uptake_flux",
    "tktd_derivative",
    "survivorship",
    "activity_to_ugL",
    "ugL_to_activity",
    "SimulationState",
    "Trajectory",
    "time_grid",
    "integrate",
    "final_survival",
    "simulate",
    "BracketError",
    "ConvergenceError",
    "FitResult",
    "EC50Solver",
    "fit_ec50",
    "fit_nec",
    "nec_function",
    "load_scenarios_csv",
    "load_table",
    "scenario_from_row",
    "save_table",
    "validate_columns",
    "fit_scenario",
    "fit_all_scenarios",
    "fit_time_course",
    "default_durations",
    "summarize_endpoints",
    "plot_endpoint_by_series",
    "plot_time_course",
    "plot_survival",
]
