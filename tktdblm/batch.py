"""
batch.py
-------------
Drivers that apply the EC50 / NEC solvers across scenarios and durations.

fit_all_scenarios : one EC50 (bounded mode) and one NEC per water-chemistry
                    record, appended to the input table in ug/L.
fit_time_course   : EC50 (least-squares mode) for one scenario over a range
                    of exposure durations, optionally warm-started.

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

import logging
from typing import Any, Dict, Iterable, List, Optional

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from tqdm.auto import tqdm

from .config import (
    DURATION,
    EC50_COL,
    MOLAR_MASS,
    NEC_COL,
    SERIES_COL,
    TIME_COURSE_START,
    TIME_COURSE_STEP,
    TIME_COURSE_STOP,
)
from .dataio import scenario_from_row, validate_columns
from .fit import BracketError, ConvergenceError, EC50Solver, FitResult, fit_nec
from .models import (
    EnvironmentalScenario,
    InvalidInputError,
    StabilityConstants,
    TKTDParameters,
    default_stability_constants,
    default_tktd_parameters,
    scenario_to_ugL,
)

logger = logging.getLogger(__name__)

RESULT_COLS = [
    EC50_COL,
    NEC_COL,
    "EC50_activity",
    "NEC_activity",
    "EC50_converged",
    "EC50_at_bound",
    "NEC_converged",
    "NEC_at_bound",
    "error",
]


def _empty_result() -> Dict[str, Any]:
    return {
        EC50_COL: np.nan,
        NEC_COL: np.nan,
        "EC50_activity": np.nan,
        "NEC_activity": np.nan,
        "EC50_converged": False,
        "EC50_at_bound": False,
        "NEC_converged": False,
        "NEC_at_bound": False,
        "error": "",
    }


def fit_scenario(
        scenario: EnvironmentalScenario,
        constants: StabilityConstants,
        params: TKTDParameters,
        duration: float = DURATION,
        molar_mass: float = MOLAR_MASS,
        solver: Optional[EC50Solver] = None,
        nec_kwargs: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    EC50 and NEC for one scenario.

    Failures are recorded in the returned dict ('error') and never raised,
    so a single bad record cannot stop a batch.

    Returns
    -------
    dict
        Keys of RESULT_COLS. EC50/NEC are in ug/L total metal.
    """
    out = _empty_result()
    errors: List[str] = []
    solver = solver or EC50Solver(constants, params, mode="bounded")

    try:
        ec50 = solver.solve(scenario, duration=duration)
    except (InvalidInputError, ConvergenceError) as e:
        errors.append(f"EC50: {e}")
    else:
        _store(out, "EC50", ec50, scenario, molar_mass)

    try:
        nec = fit_nec(scenario, constants, params, **(nec_kwargs or {}))
    except (InvalidInputError, BracketError) as e:
        logger.warning("NEC failed for %s/%s: %s", scenario.series, scenario.level, e)
        errors.append(f"NEC: {e}")
    else:
        _store(out, "NEC", nec, scenario, molar_mass)

    out["error"] = "; ".join(errors)
    return out


def _store(out: Dict[str, Any], name: str, res: FitResult,
           scenario: EnvironmentalScenario, molar_mass: float) -> None:
    out[name] = scenario_to_ugL(res.activity, scenario, molar_mass)
    out[f"{name}_activity"] = res.activity
    out[f"{name}_converged"] = res.converged
    out[f"{name}_at_bound"] = res.at_bound


def fit_all_scenarios(
        df: pd.DataFrame,
        constants: Optional[StabilityConstants] = None,
        params: Optional[TKTDParameters] = None,
        duration: float = DURATION,
        molar_mass: float = MOLAR_MASS,
        n_jobs: int = 1,
        progress: bool = True,
        **solver_kwargs: Any,
) -> pd.DataFrame:
    """
    Fit EC50 and NEC for every water-chemistry record.

    Parameters
    ----------
    df : pd.DataFrame
        One row per scenario, with the columns listed in config.REQUIRED_COLS.
    constants, params : optional
        Model constants; default to the values in config.yaml.
    duration : float
        Exposure duration for the EC50.
    molar_mass : float
        Molar mass used for the ug/L conversion.
    n_jobs : int
        joblib workers; rows are independent so any value is safe.
    progress : bool
        Show a tqdm progress bar.
    **solver_kwargs
        Forwarded to EC50Solver (bounded mode), e.g. lower/upper/step.

    Returns
    -------
    pd.DataFrame
        Copy of `df` with RESULT_COLS appended, rows in input order.
    """
    validate_columns(df)
    constants = constants or default_stability_constants()
    params = params or default_tktd_parameters()
    solver = EC50Solver(constants, params, mode="bounded", **solver_kwargs)

    def _process_row(row: pd.Series) -> Dict[str, Any]:
        """Build the scenario for one row and fit it."""
        try:
            scenario = scenario_from_row(row)
        except InvalidInputError as e:
            res = _empty_result()
            res["error"] = f"invalid input: {e}"
            return res
        return fit_scenario(scenario, constants, params, duration, molar_mass, solver=solver)

    rows = [row for _, row in df.iterrows()]
    iterator = tqdm(rows, desc="Fitting scenarios", unit="scen", disable=not progress)
    if n_jobs == 1:
        results = [_process_row(row) for row in iterator]
    else:
        # Parallel keeps the input order of the generator
        results = Parallel(n_jobs=n_jobs)(delayed(_process_row)(row) for row in iterator)

    res_df = pd.DataFrame(results, columns=RESULT_COLS)
    out = df.copy()
    for col in RESULT_COLS:
        out[col] = res_df[col].to_numpy()

    n_failed = int((out["error"] != "").sum())
    if n_failed:
        logger.warning("%d of %d scenarios have errors", n_failed, len(out))
    return out


def default_durations() -> np.ndarray:
    """Durations from config.yaml time_course (inclusive of stop)."""
    return np.arange(TIME_COURSE_START, TIME_COURSE_STOP + TIME_COURSE_STEP / 2, TIME_COURSE_STEP)


def fit_time_course(
        scenario: EnvironmentalScenario,
        constants: Optional[StabilityConstants] = None,
        params: Optional[TKTDParameters] = None,
        durations: Optional[Iterable[float]] = None,
        initial_guess: Optional[float] = None,
        warm_start: bool = True,
        molar_mass: float = MOLAR_MASS,
        n_jobs: int = 1,
        progress: bool = True,
        **solver_kwargs: Any,
) -> pd.DataFrame:
    """
    EC50 across exposure durations for one fixed scenario.

    Each duration is fitted in least-squares mode. With `warm_start`, the
    previous duration's converged activity seeds the next fit; otherwise
    every duration starts from `initial_guess`. Warm start is dropped when
    n_jobs != 1 because parallel fits cannot see each other's results.

    Returns
    -------
    pd.DataFrame
        Columns: duration, EC50 (ug/L), EC50_activity, converged, at_bound,
        in duration order.
    """
    constants = constants or default_stability_constants()
    params = params or default_tktd_parameters()
    durations = default_durations() if durations is None else np.asarray(list(durations), dtype=float)
    solver = EC50Solver(constants, params, mode="least_squares", **solver_kwargs)

    if n_jobs != 1 and warm_start:
        logger.info("warm start disabled for parallel time course (n_jobs=%s)", n_jobs)
        warm_start = False

    def _record(duration: float, res: FitResult) -> Dict[str, Any]:
        return {
            "duration": float(duration),
            EC50_COL: scenario_to_ugL(res.activity, scenario, molar_mass),
            "EC50_activity": res.activity,
            "converged": res.converged,
            "at_bound": res.at_bound,
        }

    iterator = tqdm(durations, desc="Time course", unit="dur", disable=not progress)
    if not warm_start:
        if n_jobs == 1:
            fits = [solver.solve(scenario, d, initial_guess=initial_guess) for d in iterator]
        else:
            fits = Parallel(n_jobs=n_jobs)(
                delayed(solver.solve)(scenario, d, initial_guess=initial_guess) for d in iterator
            )
        records = [_record(d, r) for d, r in zip(durations, fits)]
    else:
        records = []
        previous = initial_guess
        for d in iterator:
            res = solver.solve(scenario, d, initial_guess=previous)
            records.append(_record(d, res))
            if res.reliable:
                previous = res.activity

    return pd.DataFrame(records, columns=["duration", EC50_COL, "EC50_activity", "converged", "at_bound"])


def summarize_endpoints(res_df: pd.DataFrame, by: str = SERIES_COL) -> pd.DataFrame:
    """
    Per-series summary of the fitted endpoints.

    Returns
    -------
    pd.DataFrame
        One row per series: n, n_failed, median/min/max of EC50 and NEC.
    """
    if res_df.empty:
        return pd.DataFrame(
            columns=[by, "n", "n_failed", "EC50_median", "EC50_min", "EC50_max",
                     "NEC_median", "NEC_min", "NEC_max"]
        )

    tmp = res_df.assign(_failed=(res_df["error"].fillna("") != "").astype(int))
    summary = (
        tmp
        .groupby(by, dropna=False, sort=False)
        .agg(
            n=(EC50_COL, "size"),
            n_failed=("_failed", "sum"),
            EC50_median=(EC50_COL, "median"),
            EC50_min=(EC50_COL, "min"),
            EC50_max=(EC50_COL, "max"),
            NEC_median=(NEC_COL, "median"),
            NEC_min=(NEC_COL, "min"),
            NEC_max=(NEC_COL, "max"),
        )
        .reset_index()
    )
    return summary
