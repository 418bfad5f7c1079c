"""
fit.py
-------------
Inversion of the TK-TD model for the two endpoints.

EC50 : Cd2+ activity whose simulated end-of-exposure survivorship is 0.5.
       Found by either a bounded scalar minimiser (batch use) or a bounded
       least-squares solver seeded with an initial guess (time-course use).
NEC  : Cd2+ activity at which steady-state uptake balances elimination of
       the internal threshold, CIT * ke = Jin(C). Closed form per scenario,
       solved with a bracketing root finder.

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
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np
from scipy.optimize import brentq, least_squares, minimize_scalar

from .config import (
    BOUND_TOL,
    DURATION,
    EC50_BOUNDED,
    EC50_LEAST_SQUARES,
    INTEGRATION_METHOD,
    NEC_BRACKET,
    OBJECTIVE_TOL,
    TIME_STEP,
)
from .integrate import final_survival, time_grid
from .models import (
    EnvironmentalScenario,
    InvalidInputError,
    StabilityConstants,
    TKTDParameters,
    uptake_flux,
)

logger = logging.getLogger(__name__)

# Cosmetic scaling of |S - 0.5|; does not move the minimum.
OBJECTIVE_SCALE = 1000.0

MODES = ("bounded", "least_squares")


class BracketError(ValueError):
    """The NEC function has no sign change on the search interval."""


class ConvergenceError(RuntimeError):
    """Raised by strict solves when the optimiser did not converge."""

    def __init__(self, message: str, result: "FitResult"):
        super().__init__(message)
        self.result = result


@dataclass(frozen=True)
class FitResult:
    """
    Outcome of one EC50 or NEC solve.

    activity  : solved Cd2+ activity (mol/L)
    objective : |S - 0.5| at the solution (EC50) or |f| (NEC)
    converged : optimiser met its tolerance
    at_bound  : solution sits on a search-interval bound, so the true
                value is probably outside the interval
    """

    activity: float
    objective: float
    converged: bool
    at_bound: bool
    n_evals: int
    mode: str
    message: str = ""

    @property
    def reliable(self) -> bool:
        return self.converged and not self.at_bound


def _at_bound(x: float, lower: float, upper: float, tol: float = BOUND_TOL) -> bool:
    lx = np.log10(x)
    return bool(abs(lx - np.log10(lower)) <= tol or abs(lx - np.log10(upper)) <= tol)


def _check_interval(lower: float, upper: float) -> None:
    if not (np.isfinite(lower) and np.isfinite(upper)) or lower <= 0 or upper <= lower:
        raise InvalidInputError(f"Invalid search interval [{lower!r}, {upper!r}]")


# ---------------------------------------------------------------------------
#  EC50
# ---------------------------------------------------------------------------

class EC50Solver:
    """
    EC50 search with two strategies behind one call.

    mode="bounded"
        Log-spaced scan of the interval, then a bounded scalar minimiser
        (scipy ``minimize_scalar``) of |S - 0.5| * 1000 in log10-activity
        space between the neighbours of the best scan point.
    mode="least_squares"
        Bounded trust-region least squares (scipy ``least_squares``) on
        (S - 0.5) * 1000, started from ``initial_guess``.

    Bounds and tolerances default to the per-mode settings in config.yaml.
    """

    def __init__(
            self,
            constants: StabilityConstants,
            params: TKTDParameters,
            mode: str = "bounded",
            lower: Optional[float] = None,
            upper: Optional[float] = None,
            step: float = TIME_STEP,
            method: str = INTEGRATION_METHOD,
            **options: Any,
    ):
        if mode not in MODES:
            raise ValueError(f"Unknown mode={mode!r} (use bounded|least_squares)")
        defaults = EC50_BOUNDED if mode == "bounded" else EC50_LEAST_SQUARES
        self.constants = constants
        self.params = params
        self.mode = mode
        self.lower = float(defaults["lower"] if lower is None else lower)
        self.upper = float(defaults["upper"] if upper is None else upper)
        _check_interval(self.lower, self.upper)
        self.step = step
        self.method = method
        self.options = {k: v for k, v in defaults.items() if k not in ("lower", "upper")}
        unknown = set(options) - set(self.options)
        if unknown:
            raise TypeError(f"Unknown options for mode={mode!r}: {sorted(unknown)}")
        self.options.update(options)

    def survival(self, c_metal, scenario: EnvironmentalScenario, times: np.ndarray):
        return final_survival(
            c_metal, scenario, self.constants, self.params, times=times, method=self.method
        )

    def objective(self, c_metal, scenario: EnvironmentalScenario, times: np.ndarray):
        """|S_final - 0.5| * 1000."""
        return np.abs(self.survival(c_metal, scenario, times) - 0.5) * OBJECTIVE_SCALE

    def solve(
            self,
            scenario: EnvironmentalScenario,
            duration: float = DURATION,
            initial_guess: Optional[float] = None,
            strict: bool = False,
    ) -> FitResult:
        """
        Find the EC50 activity for one scenario and exposure duration.

        Parameters
        ----------
        scenario : EnvironmentalScenario
            Water chemistry, fixed during the solve.
        duration : float
            Exposure duration; the grid is rebuilt for every call.
        initial_guess : float, optional
            Starting activity for mode="least_squares" (ignored otherwise).
        strict : bool
            Raise ConvergenceError instead of returning an unconverged result.

        Returns
        -------
        FitResult
        """
        times = time_grid(duration, self.step)
        if self.mode == "bounded":
            result = self._solve_bounded(scenario, times)
        else:
            result = self._solve_least_squares(scenario, times, initial_guess)

        if result.at_bound:
            logger.warning(
                "EC50 (%s) for %s/%s at duration %g sits on the search bound %.3g; "
                "the true value is likely outside [%.3g, %.3g]",
                self.mode, scenario.series, scenario.level, duration,
                result.activity, self.lower, self.upper,
            )
        if not result.converged:
            logger.warning(
                "EC50 (%s) for %s/%s at duration %g did not converge: %s",
                self.mode, scenario.series, scenario.level, duration, result.message,
            )
            if strict:
                raise ConvergenceError(result.message, result)
        return result

    def _finish(self, activity: float, objective: float, success: bool,
                n_evals: int, message: str) -> FitResult:
        at_bound = _at_bound(activity, self.lower, self.upper)
        converged = bool(success)
        if converged and not at_bound and objective / OBJECTIVE_SCALE > OBJECTIVE_TOL:
            converged = False
            message = f"stalled with |S - 0.5| = {objective / OBJECTIVE_SCALE:.3g}"
        return FitResult(
            activity=float(activity),
            objective=float(objective / OBJECTIVE_SCALE),
            converged=converged,
            at_bound=at_bound,
            n_evals=int(n_evals),
            mode=self.mode,
            message=message,
        )

    def _solve_bounded(self, scenario: EnvironmentalScenario, times: np.ndarray) -> FitResult:
        log_lo, log_hi = np.log10(self.lower), np.log10(self.upper)
        n_scan = max(int(self.options["scan_points"]), 3)
        grid = np.linspace(log_lo, log_hi, n_scan)

        # One vectorised integration for the whole scan
        s_grid = np.atleast_1d(self.survival(10.0 ** grid, scenario, times))
        obj_grid = np.abs(s_grid - 0.5) * OBJECTIVE_SCALE

        # Survival falls with activity: if the ends do not straddle 0.5 the
        # optimum is the nearer bound.
        if s_grid[-1] > 0.5:
            return self._finish(self.upper, obj_grid[-1], True, n_scan, "EC50 above search interval")
        if s_grid[0] < 0.5:
            return self._finish(self.lower, obj_grid[0], True, n_scan, "EC50 below search interval")

        i_best = int(np.argmin(obj_grid))
        a = grid[max(i_best - 1, 0)]
        b = grid[min(i_best + 1, n_scan - 1)]

        def fun(log_c: float) -> float:
            return float(self.objective(10.0 ** log_c, scenario, times))

        res = minimize_scalar(
            fun,
            bounds=(a, b),
            method="bounded",
            options={"xatol": self.options["xatol"], "maxiter": self.options["maxiter"]},
        )

        log_c, obj = float(res.x), float(res.fun)
        message = str(res.message)
        if obj > obj_grid[i_best]:
            # Polishing lost to the scan on a plateau; keep the scan point
            log_c, obj = float(grid[i_best]), float(obj_grid[i_best])
            message = "kept scan point; bounded minimiser did not improve on it"
        return self._finish(10.0 ** log_c, obj, res.success, n_scan + res.nfev, message)

    def _solve_least_squares(
            self,
            scenario: EnvironmentalScenario,
            times: np.ndarray,
            initial_guess: Optional[float],
    ) -> FitResult:
        log_lo, log_hi = np.log10(self.lower), np.log10(self.upper)
        guess = self.options["initial_guess"] if initial_guess is None else initial_guess
        if not np.isfinite(guess) or guess <= 0:
            raise InvalidInputError(f"initial_guess must be positive, got {guess!r}")
        x0 = float(np.clip(np.log10(guess), log_lo, log_hi))

        def residuals(x: np.ndarray) -> np.ndarray:
            s = self.survival(10.0 ** x[0], scenario, times)
            return np.array([(s - 0.5) * OBJECTIVE_SCALE])

        res = least_squares(
            residuals,
            np.array([x0]),
            bounds=([log_lo], [log_hi]),
            method="trf",
            ftol=self.options["ftol"],
            xtol=self.options["xtol"],
            gtol=self.options["gtol"],
            max_nfev=self.options["max_nfev"],
        )

        # status 0: max_nfev reached
        success = bool(res.success and res.status > 0)
        return self._finish(
            10.0 ** float(res.x[0]), abs(float(res.fun[0])), success, res.nfev, str(res.message)
        )


def fit_ec50(
        scenario: EnvironmentalScenario,
        constants: StabilityConstants,
        params: TKTDParameters,
        duration: float = DURATION,
        mode: str = "bounded",
        initial_guess: Optional[float] = None,
        **kwargs: Any,
) -> FitResult:
    """Convenience wrapper around `EC50Solver(...).solve(...)`."""
    strict = kwargs.pop("strict", False)
    solver = EC50Solver(constants, params, mode=mode, **kwargs)
    return solver.solve(scenario, duration=duration, initial_guess=initial_guess, strict=strict)


# ---------------------------------------------------------------------------
#  NEC
# ---------------------------------------------------------------------------

def nec_function(
        c_metal: float,
        scenario: EnvironmentalScenario,
        constants: StabilityConstants,
        params: TKTDParameters,
) -> float:
    """f(C) = CIT * ke - Jin(C); decreasing in C."""
    return params.cit * params.ke - float(uptake_flux(c_metal, scenario, constants, params.jmax))


def fit_nec(
        scenario: EnvironmentalScenario,
        constants: StabilityConstants,
        params: TKTDParameters,
        lower: float = NEC_BRACKET["lower"],
        upper: float = NEC_BRACKET["upper"],
        xtol: float = NEC_BRACKET["xtol"],
        maxiter: int = NEC_BRACKET["maxiter"],
) -> FitResult:
    """
    Solve CIT * ke = Jin(C) for C on [lower, upper] with Brent's method.

    Raises
    ------
    BracketError
        If f(lower) and f(upper) have the same sign.
    """
    _check_interval(lower, upper)

    def f(c: float) -> float:
        return nec_function(c, scenario, constants, params)

    f_lo, f_hi = f(lower), f(upper)
    if f_lo * f_hi > 0:
        raise BracketError(
            f"NEC function does not change sign on [{lower:.3g}, {upper:.3g}] "
            f"(f={f_lo:.3g}, {f_hi:.3g}) for {scenario.series}/{scenario.level}"
        )

    root, info = brentq(f, lower, upper, xtol=xtol, maxiter=maxiter, full_output=True, disp=False)
    result = FitResult(
        activity=float(root),
        objective=abs(f(root)),
        converged=bool(info.converged),
        at_bound=_at_bound(root, lower, upper),
        n_evals=int(info.function_calls) + 2,
        mode="nec",
        message=str(info.flag),
    )
    if not result.converged:
        logger.warning("NEC for %s/%s did not converge: %s",
                       scenario.series, scenario.level, result.message)
    return result
