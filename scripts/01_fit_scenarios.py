#!/usr/bin/env python
"""
Script to fit EC50 and NEC for every water-chemistry scenario in a table.
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

from tktdblm import (
    EC50_COL,
    NEC_COL,
    default_stability_constants,
    default_tktd_parameters,
    fit_all_scenarios,
    load_model_parameters,
    load_scenarios_csv,
    save_table,
    summarize_endpoints,
)


def main() -> None:
    p = argparse.ArgumentParser(description="Fit EC50 and NEC for all water-chemistry scenarios.")
    p.add_argument(
        "--input-table",
        default="../data/scenarios.txt",
        help="Scenario table (tab-separated for .txt/.tsv, comma-separated otherwise).",
    )
    p.add_argument(
        "--out-table",
        default="../results/endpoints.txt",
        help="Output table with EC50 and NEC appended (ug/L).",
    )
    p.add_argument("--config", default=None, help="YAML file overriding model parameters.")
    p.add_argument("--duration", type=float, default=48.0, help="Exposure duration for EC50.")
    p.add_argument("--positional", action="store_true",
                   help="Read the first nine columns by position instead of by name.")
    p.add_argument("--n-jobs", type=int, default=1, help="Parallel workers (joblib).")
    args = p.parse_args()

    in_path = Path(args.input_table)
    out_path = Path(args.out_table)

    if args.config:
        constants, params = load_model_parameters(args.config)
    else:
        constants, params = default_stability_constants(), default_tktd_parameters()

    df = load_scenarios_csv(in_path, positional=args.positional)
    res_df = fit_all_scenarios(df, constants, params, duration=args.duration, n_jobs=args.n_jobs)
    save_table(res_df, out_path)

    n_failed = int((res_df["error"] != "").sum())
    n_bound = int(res_df["EC50_at_bound"].sum() + res_df["NEC_at_bound"].sum())
    print(f"Saved {EC50_COL}/{NEC_COL} for {len(res_df)} scenarios to {out_path}")
    if n_failed or n_bound:
        print(f"[WARNING] {n_failed} scenarios with errors, {n_bound} endpoints on a search bound")

    print(summarize_endpoints(res_df).to_string(index=False))


if __name__ == "__main__":
    main()
