#!/usr/bin/env python3
"""
Plot EC50 / NEC across chemistry series and the EC50 time course.
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

import argparse
from pathlib import Path

from matplotlib import pyplot as plt

from tktdblm import EC50_COL, NEC_COL, load_table, plot_endpoint_by_series, plot_time_course


def main() -> None:
    p = argparse.ArgumentParser(description="Plot fitted endpoints.")
    p.add_argument("--endpoints", default="../results/endpoints.txt",
                   help="Output of 01_fit_scenarios.py")
    p.add_argument("--time-course", default="../results/ec50_time_course.txt",
                   help="Output of 02_time_course.py (skipped if missing)")
    p.add_argument("--outdir", default="../results/plots")
    args = p.parse_args()

    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    res_df = load_table(args.endpoints)
    for endpoint in (EC50_COL, NEC_COL):
        fig, ax = plot_endpoint_by_series(res_df, endpoint=endpoint)
        fig.savefig(outdir / f"{endpoint}_by_series.png", dpi=300, bbox_inches="tight")
        plt.close(fig)

    tc_path = Path(args.time_course)
    if tc_path.exists():
        tc_df = load_table(tc_path)
        fig, ax = plot_time_course(tc_df)
        fig.savefig(outdir / "EC50_time_course.png", dpi=300, bbox_inches="tight")
        plt.close(fig)

    print(f"Saved plots to {outdir}")


if __name__ == "__main__":
    main()
