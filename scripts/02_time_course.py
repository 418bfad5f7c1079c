#!/usr/bin/env python
"""
Script to fit the EC50 of one scenario over a range of exposure durations.
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

import argparse
from pathlib import Path

import numpy as np

from tktdblm import (
    default_stability_constants,
    default_tktd_parameters,
    fit_time_course,
    load_model_parameters,
    load_scenarios_csv,
    save_table,
    scenario_from_row,
)
from tktdblm.config import TIME_COURSE_START, TIME_COURSE_STEP, TIME_COURSE_STOP


def main() -> None:
    p = argparse.ArgumentParser(description="EC50 time course for one scenario.")
    p.add_argument("--input-table", default="../data/scenarios.txt", help="Scenario table.")
    p.add_argument("--row", type=int, default=0, help="Row index of the scenario to use.")
    p.add_argument("--out-table", default="../results/ec50_time_course.txt",
                   help="Output (duration, EC50) table.")
    p.add_argument("--config", default=None, help="YAML file overriding model parameters.")
    p.add_argument("--start", type=float, default=TIME_COURSE_START)
    p.add_argument("--stop", type=float, default=TIME_COURSE_STOP)
    p.add_argument("--step", type=float, default=TIME_COURSE_STEP)
    p.add_argument("--initial-guess", type=float, default=None,
                   help="Starting Cd2+ activity for the first duration (mol/L).")
    p.add_argument("--no-warm-start", action="store_true",
                   help="Start every duration from --initial-guess.")
    p.add_argument("--positional", action="store_true")
    args = p.parse_args()

    if args.config:
        constants, params = load_model_parameters(args.config)
    else:
        constants, params = default_stability_constants(), default_tktd_parameters()

    df = load_scenarios_csv(args.input_table, positional=args.positional)
    scenario = scenario_from_row(df.iloc[args.row])
    durations = np.arange(args.start, args.stop + args.step / 2, args.step)

    tc_df = fit_time_course(
        scenario,
        constants,
        params,
        durations=durations,
        initial_guess=args.initial_guess,
        warm_start=not args.no_warm_start,
    )
    out_path = save_table(tc_df, Path(args.out_table))

    n_bad = int((~tc_df["converged"]).sum())
    print(f"Saved EC50 time course for {scenario.series}/{scenario.level} to {out_path} (n={len(tc_df)})")
    if n_bad:
        print(f"[WARNING] {n_bad} durations did not converge")


if __name__ == "__main__":
    main()
