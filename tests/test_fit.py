"""
Tests for the EC50 and NEC solvers.
"""

import logging

import numpy as np
import pytest
from numpy.testing import assert_allclose

from tktdblm import (
    BracketError,
    ConvergenceError,
    EC50Solver,
    InvalidInputError,
    TKTDParameters,
    final_survival,
    fit_ec50,
    fit_nec,
    nec_function,
    time_grid,
    uptake_flux,
)

from .conftest import analytic_ec50


# =============================================================================
# EC50
# =============================================================================


class TestEC50Bounded:
    def test_recovers_analytic_ec50(self, metal_only, constants, params):
        expected = analytic_ec50(metal_only, constants, params, 48.0)
        res = fit_ec50(metal_only, constants, params, duration=48.0)
        assert res.reliable
        assert res.mode == "bounded"
        assert_allclose(res.activity, expected, rtol=1e-3)
        assert res.objective < 1e-4

    def test_survival_is_half_at_solution(self, hard_water, constants, params):
        res = fit_ec50(hard_water, constants, params)
        s = final_survival(res.activity, hard_water, constants, params, times=time_grid(48.0, 0.1))
        assert_allclose(s, 0.5, atol=1e-4)

    def test_ec50_above_interval_flags_upper_bound(self, metal_only, constants, params, caplog):
        with caplog.at_level(logging.WARNING, logger="tktdblm.fit"):
            res = fit_ec50(metal_only, constants, params, lower=1e-12, upper=1e-9)
        assert res.at_bound
        assert not res.reliable
        assert_allclose(res.activity, 1e-9)
        assert "search bound" in caplog.text

    def test_ec50_below_interval_flags_lower_bound(self, metal_only, constants, params):
        res = fit_ec50(metal_only, constants, params, lower=1e-6, upper=1e-3)
        assert res.at_bound
        assert_allclose(res.activity, 1e-6)

    def test_threshold_never_reached(self, metal_only, constants):
        # jmax / ke < cit: no exposure can kill
        p = TKTDParameters(ke=0.00308, jmax=3.16, cit=2000.0, kk=0.00267)
        res = fit_ec50(metal_only, constants, p)
        assert res.at_bound
        assert_allclose(res.activity, 1e-3)


class TestEC50LeastSquares:
    def test_recovers_analytic_ec50(self, metal_only, constants, params):
        expected = analytic_ec50(metal_only, constants, params, 48.0)
        res = fit_ec50(metal_only, constants, params, mode="least_squares", initial_guess=2 * expected)
        assert res.reliable
        assert_allclose(res.activity, expected, rtol=1e-3)

    def test_default_guess(self, hard_water, constants, params):
        bounded = fit_ec50(hard_water, constants, params, duration=72.0)
        lsq = fit_ec50(hard_water, constants, params, duration=72.0, mode="least_squares")
        assert lsq.converged
        assert_allclose(lsq.activity, bounded.activity, rtol=1e-3)

    def test_iteration_cap_reports_failure(self, hard_water, constants, params):
        res = fit_ec50(hard_water, constants, params, mode="least_squares",
                       initial_guess=1e-6, max_nfev=1)
        assert not res.converged
        assert not res.reliable

    def test_strict_raises(self, hard_water, constants, params):
        with pytest.raises(ConvergenceError) as exc:
            fit_ec50(hard_water, constants, params, mode="least_squares",
                     initial_guess=1e-6, max_nfev=1, strict=True)
        assert exc.value.result.activity > 0


class TestEC50Solver:
    def test_unknown_mode(self, constants, params):
        with pytest.raises(ValueError, match="Unknown mode"):
            EC50Solver(constants, params, mode="newton")

    def test_unknown_option(self, constants, params):
        with pytest.raises(TypeError):
            EC50Solver(constants, params, mode="bounded", max_nfev=10)

    def test_invalid_interval(self, constants, params):
        with pytest.raises(InvalidInputError):
            EC50Solver(constants, params, lower=1e-3, upper=1e-9)

    def test_mode_defaults(self, constants, params):
        assert EC50Solver(constants, params).upper == 1e-3
        assert EC50Solver(constants, params, mode="least_squares").upper == 1e-5

    def test_objective_scaling(self, hard_water, constants, params):
        solver = EC50Solver(constants, params)
        times = time_grid(48.0, 0.1)
        s = solver.survival(1e-8, hard_water, times)
        assert_allclose(solver.objective(1e-8, hard_water, times), abs(s - 0.5) * 1000)

    def test_more_calcium_raises_ec50(self, hard_water, constants, params):
        base = fit_ec50(hard_water, constants, params)
        more = fit_ec50(hard_water.with_activity("Ca", 4e-3), constants, params)
        assert more.activity > base.activity

    def test_longer_exposure_lowers_ec50(self, hard_water, constants, params):
        short = fit_ec50(hard_water, constants, params, duration=48.0)
        long = fit_ec50(hard_water, constants, params, duration=96.0)
        assert long.activity < short.activity


# =============================================================================
# NEC
# =============================================================================


class TestNEC:
    def test_metal_only_fixed_point(self, metal_only, constants, params):
        # C = CIT*ke*(1 + K*C) / (Jmax*K)  =>  C = CIT*ke / (K*(Jmax - CIT*ke))
        target = params.cit * params.ke
        expected = target / (constants.Cd * (params.jmax - target))
        res = fit_nec(metal_only, constants, params)
        assert res.converged
        assert not res.at_bound
        assert_allclose(res.activity, expected, rtol=1e-6)
        assert_allclose(
            res.activity,
            target * (1 + constants.Cd * res.activity) / (params.jmax * constants.Cd),
            rtol=1e-6,
        )

    def test_uptake_balances_threshold_clearance(self, hard_water, constants, params):
        res = fit_nec(hard_water, constants, params)
        assert_allclose(
            uptake_flux(res.activity, hard_water, constants, params.jmax),
            params.cit * params.ke,
            rtol=1e-9,
        )

    def test_function_decreasing(self, hard_water, constants, params):
        c = np.logspace(-12, -6, 30)
        f = [nec_function(ci, hard_water, constants, params) for ci in c]
        assert np.all(np.diff(f) < 0)

    def test_more_competition_raises_nec(self, hard_water, constants, params):
        base = fit_nec(hard_water, constants, params)
        for ion in ("Ca", "Mg", "Na", "K", "H"):
            more = fit_nec(hard_water.with_activity(ion, getattr(hard_water, ion) * 3), constants, params)
            assert more.activity > base.activity

    def test_nec_below_ec50(self, hard_water, constants, params):
        assert fit_nec(hard_water, constants, params).activity < fit_ec50(hard_water, constants, params).activity

    def test_unreachable_threshold_raises(self, hard_water, constants):
        p = TKTDParameters(ke=0.00308, jmax=3.16, cit=2000.0, kk=0.00267)
        with pytest.raises(BracketError, match="does not change sign"):
            fit_nec(hard_water, constants, p)

    def test_threshold_exceeded_at_lower_bound_raises(self, metal_only, constants):
        p = TKTDParameters(ke=0.00308, jmax=3.16, cit=1e-9, kk=0.00267)
        with pytest.raises(BracketError):
            fit_nec(metal_only, constants, p)

    def test_custom_bracket(self, metal_only, constants, params):
        with pytest.raises(BracketError):
            fit_nec(metal_only, constants, params, lower=1e-8, upper=1e-6)
