"""
Quick plotting utilities for fitted EC50 / NEC tables.

All functions accept an optional `ax` and return (fig, ax).
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

from typing import Optional

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

from .config import EC50_COL, LEVEL_COL, NEC_COL, SERIES_COL


def plot_endpoint_by_series(
        res_df: pd.DataFrame,
        endpoint: str = EC50_COL,
        ax: Optional[plt.Axes] = None,
):
    """
    Categorical scatter of one endpoint across chemistry series.

    Points within a series are spread horizontally in level order and
    rows flagged at a search bound are drawn as open markers.
    """
    if endpoint not in (EC50_COL, NEC_COL):
        raise ValueError(f"endpoint must be {EC50_COL!r} or {NEC_COL!r}")
    if res_df.empty:
        raise ValueError("res_df is empty; nothing to plot.")

    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 5))
    else:
        fig = ax.figure

    series = pd.unique(res_df[SERIES_COL])
    bound_col = f"{endpoint}_at_bound"

    for i, name in enumerate(series):
        sub = res_df[res_df[SERIES_COL] == name]
        n = len(sub)
        x = i + (np.linspace(-0.25, 0.25, n) if n > 1 else np.zeros(1))
        y = sub[endpoint].to_numpy(dtype=float)
        flagged = sub[bound_col].to_numpy(dtype=bool) if bound_col in sub else np.zeros(n, dtype=bool)

        ax.scatter(x[~flagged], y[~flagged], color=f"C{i}", s=30, label=str(name))
        if flagged.any():
            ax.scatter(x[flagged], y[flagged], facecolors="none", edgecolors=f"C{i}", s=30)

        if LEVEL_COL in sub:
            for xi, yi, lvl in zip(x, y, sub[LEVEL_COL]):
                if np.isfinite(yi):
                    ax.annotate(str(lvl), (xi, yi), fontsize=6, xytext=(2, 2),
                                textcoords="offset points")

    ax.set_xticks(range(len(series)))
    ax.set_xticklabels([str(s) for s in series], rotation=45, ha="right")
    ax.set_yscale("log")
    ax.set_xlabel("Series")
    ax.set_ylabel(f"{endpoint} (µg/L)")
    ax.set_title(f"{endpoint} across water chemistry")
    return fig, ax


def plot_time_course(
        tc_df: pd.DataFrame,
        ax: Optional[plt.Axes] = None,
):
    """EC50 versus exposure duration."""
    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 4))
    else:
        fig = ax.figure

    ax.plot(tc_df["duration"], tc_df[EC50_COL], "-", color="C0")
    if "converged" in tc_df:
        bad = ~tc_df["converged"].astype(bool)
        if bad.any():
            ax.scatter(tc_df.loc[bad, "duration"], tc_df.loc[bad, EC50_COL],
                       marker="x", color="C3", label="not converged")
            ax.legend()

    ax.set_xlabel("Exposure duration (h)")
    ax.set_ylabel(f"{EC50_COL} (µg/L)")
    ax.set_title("EC50 time course")
    return fig, ax


def plot_survival(
        traj_df: pd.DataFrame,
        ax: Optional[plt.Axes] = None,
):
    """Internal concentration and survivorship of one simulated exposure."""
    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 4))
    else:
        fig = ax.figure

    ax.plot(traj_df["time"], traj_df["survival"], color="C0", label="Survival")
    ax.set_ylim(0, 1.05)
    ax.set_xlabel("Time (h)")
    ax.set_ylabel("Survivorship")

    ax2 = ax.twinx()
    ax2.plot(traj_df["time"], traj_df["Cint"], color="C1", linestyle="--", label="Cint")
    ax2.set_ylabel("Internal concentration")

    lines = ax.get_lines() + ax2.get_lines()
    ax.legend(lines, [ln.get_label() for ln in lines], loc="best")
    return fig, ax
