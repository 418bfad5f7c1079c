"""
Tests for the fixed-grid TK-TD integrator.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from tktdblm import (
    InvalidInputError,
    TKTDParameters,
    final_survival,
    integrate,
    simulate,
    time_grid,
    uptake_flux,
)

from .conftest import analytic_hazard


class TestTimeGrid:
    def test_reference_grid(self):
        t = time_grid(48.0, 0.1)
        assert t.size == 481
        assert t[0] == 0.0
        assert t[-1] == 48.0
        assert_allclose(np.diff(t), 0.1)

    def test_end_point_included_when_not_divisible(self):
        t = time_grid(1.0, 0.3)
        assert t[-1] == 1.0
        assert np.all(np.diff(t) <= 0.3 + 1e-12)

    @pytest.mark.parametrize("duration, step", [(0.0, 0.1), (10.0, 0.0), (-1.0, 0.1)])
    def test_invalid(self, duration, step):
        with pytest.raises(InvalidInputError):
            time_grid(duration, step)


class TestIntegrate:
    def test_no_metal_no_accumulation(self, metal_only, constants):
        p = TKTDParameters(ke=0.00308, jmax=3.16, cit=33.5, kk=0.00267, h0=0.01)
        traj = integrate(0.0, metal_only, constants, p, times=time_grid(100.0, 0.1))
        assert np.all(traj.cint == 0.0)
        assert_allclose(traj.hazard, p.h0 * traj.times, atol=1e-12)

    def test_internal_concentration_matches_closed_form(self, hard_water, constants, params):
        c = 5e-8
        traj = integrate(c, hard_water, constants, params, times=time_grid(48.0, 0.1))
        flux = uptake_flux(c, hard_water, constants, params.jmax)
        expected = flux / params.ke * (1.0 - np.exp(-params.ke * traj.times))
        assert_allclose(traj.cint, expected, rtol=1e-9, atol=1e-12)

    def test_final_hazard_matches_closed_form(self, metal_only, constants, params):
        c = 1e-8
        traj = integrate(c, metal_only, constants, params, times=time_grid(48.0, 0.1))
        flux = uptake_flux(c, metal_only, constants, params.jmax)
        assert traj.final().hazard > 0
        assert_allclose(traj.final().hazard, analytic_hazard(flux, params, 48.0), rtol=1e-3)

    def test_hazard_non_decreasing(self, hard_water, constants, params):
        traj = integrate(1e-7, hard_water, constants, params, times=time_grid(200.0, 0.1))
        assert np.all(np.diff(traj.hazard) >= 0)
        assert np.all(traj.cint >= 0)

    def test_vectorised_matches_scalar_runs(self, hard_water, constants, params):
        cs = np.array([1e-9, 3e-8, 2e-7])
        times = time_grid(48.0, 0.1)
        batch = integrate(cs, hard_water, constants, params, times=times)
        assert batch.hazard.shape == (times.size, 3)
        for i, c in enumerate(cs):
            single = integrate(c, hard_water, constants, params, times=times)
            assert_allclose(batch.hazard[:, i], single.hazard, rtol=1e-14)
            assert_allclose(batch.cint[:, i], single.cint, rtol=1e-14)

    def test_odeint_agrees_with_rk4(self, hard_water, constants, params):
        times = time_grid(96.0, 0.1)
        rk4 = integrate(6e-8, hard_water, constants, params, times=times, method="rk4")
        lsoda = integrate(6e-8, hard_water, constants, params, times=times, method="odeint")
        assert_allclose(lsoda.final().cint, rk4.final().cint, rtol=1e-5)
        assert_allclose(lsoda.final().hazard, rk4.final().hazard, rtol=1e-3)

    def test_unknown_method(self, hard_water, constants, params):
        with pytest.raises(ValueError, match="Unknown integration method"):
            integrate(1e-8, hard_water, constants, params, method="euler")

    def test_negative_activity_rejected(self, hard_water, constants, params):
        with pytest.raises(InvalidInputError):
            integrate(-1e-8, hard_water, constants, params)

    def test_bad_grid_rejected(self, hard_water, constants, params):
        with pytest.raises(InvalidInputError):
            integrate(1e-8, hard_water, constants, params, times=np.array([1.0, 2.0]))

    def test_final_requires_scalar_run(self, hard_water, constants, params):
        traj = integrate(np.array([1e-8, 2e-8]), hard_water, constants, params)
        with pytest.raises(ValueError):
            traj.final()


class TestSurvivalOutputs:
    def test_final_survival_in_unit_interval(self, hard_water, constants, params):
        s = final_survival(np.logspace(-10, -4, 7), hard_water, constants, params)
        assert np.all((s > 0) & (s <= 1))
        assert np.all(np.diff(s) <= 0)

    def test_simulate_table(self, hard_water, constants, params):
        df = simulate(1e-7, hard_water, constants, params, duration=10.0, step=0.5)
        assert list(df.columns) == ["time", "Cint", "hazard", "survival"]
        assert len(df) == 21
        assert df["survival"].iloc[0] == 1.0
