"""
Smoke tests for the plotting wrappers.
"""

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest

from tktdblm import plot_endpoint_by_series, plot_survival, plot_time_course, simulate


@pytest.fixture
def result_df():
    return pd.DataFrame({
        "series": ["Ca", "Ca", "Mg"],
        "level": ["low", "high", "low"],
        "EC50": [3.1, 9.4, 4.2],
        "NEC": [0.2, 0.5, np.nan],
        "EC50_at_bound": [False, True, False],
        "NEC_at_bound": [False, False, False],
    })


@pytest.mark.parametrize("endpoint", ["EC50", "NEC"])
def test_endpoint_by_series(result_df, endpoint):
    fig, ax = plot_endpoint_by_series(result_df, endpoint=endpoint)
    assert [t.get_text() for t in ax.get_xticklabels()] == ["Ca", "Mg"]
    plt.close(fig)


def test_endpoint_rejects_unknown(result_df):
    with pytest.raises(ValueError):
        plot_endpoint_by_series(result_df, endpoint="LC10")


def test_time_course_plot():
    tc = pd.DataFrame({
        "duration": [40.0, 48.0, 60.0],
        "EC50": [5.0, 4.0, 3.0],
        "converged": [True, False, True],
    })
    fig, ax = plot_time_course(tc)
    assert ax.get_xlabel().startswith("Exposure duration")
    plt.close(fig)


def test_survival_plot(hard_water, constants, params):
    traj = simulate(1e-7, hard_water, constants, params, duration=48.0)
    fig, ax = plot_survival(traj)
    assert len(ax.get_lines()) == 1
    plt.close(fig)
