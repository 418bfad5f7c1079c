"""
Configuration and constants for the Cd biotic-ligand TK-TD model.
Dynamically loaded from config.yaml.
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

import yaml
from pathlib import Path

# 1. Locate config.yaml
# Assumes config.yaml is in the project root (parents[1] relative to tktdblm/)
BASE_DIR = Path(__file__).resolve().parent.parent
CONFIG_PATH = BASE_DIR / "config.yaml"


def load_yaml_config(path: Path):
    """Safe load the yaml config."""
    if not path.exists():
        # Fallback: Try looking in current working directory
        path = Path("config.yaml")
        if not path.exists():
            raise FileNotFoundError(
                f"Could not find 'config.yaml' at {CONFIG_PATH} or current directory."
            )

    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


# 2. Load the Config
try:
    _cfg = load_yaml_config(CONFIG_PATH)
except Exception as e:
    print(f"[WARNING] Failed to load config.yaml: {e}")
    print("Using hardcoded defaults for safety.")
    _cfg = {}  # This will trigger the .get() defaults below

# 3. Map YAML values to Python Constants
# We use .get() with defaults to prevent crashes if yaml keys are missing

_model = _cfg.get("model", {})

# Order matters: the toxic metal first, then the five competing cations
SPECIES = ("Cd", "Ca", "Mg", "Na", "K", "H")
COMPETITORS = SPECIES[1:]

_logk = _model.get("log_stability_constants", {})
LOG_STABILITY_CONSTANTS = {
    "Cd": float(_logk.get("Cd", 7.96)),
    "Ca": float(_logk.get("Ca", 3.34)),
    "Mg": float(_logk.get("Mg", 3.10)),
    "Na": float(_logk.get("Na", 2.90)),
    "K": float(_logk.get("K", 2.70)),
    "H": float(_logk.get("H", 5.77)),
}

_tktd = _model.get("tktd", {})
TKTD_DEFAULTS = {
    "ke": float(_tktd.get("ke", 0.00308)),
    "jmax": float(_tktd.get("jmax", 3.16)),
    "cit": float(_tktd.get("cit", 33.5)),
    "kk": float(_tktd.get("kk", 0.00267)),
    "h0": float(_tktd.get("h0", 0.0)),
}

MOLAR_MASS = float(_model.get("molar_mass", 112.4))

# Simulation grid
_sim = _cfg.get("simulation", {})
DURATION = float(_sim.get("duration", 48.0))
TIME_STEP = float(_sim.get("step", 0.1))
INTEGRATION_METHOD = _sim.get("method", "rk4")

# Solver settings
_solver = _cfg.get("solver", {})

_bnd = _solver.get("ec50_bounded", {})
EC50_BOUNDED = {
    "lower": float(_bnd.get("lower", 1e-9)),
    "upper": float(_bnd.get("upper", 1e-3)),
    "scan_points": int(_bnd.get("scan_points", 61)),
    "xatol": float(_bnd.get("xatol", 1e-10)),
    "maxiter": int(_bnd.get("maxiter", 500)),
}

_lsq = _solver.get("ec50_least_squares", {})
EC50_LEAST_SQUARES = {
    "lower": float(_lsq.get("lower", 1e-9)),
    "upper": float(_lsq.get("upper", 1e-5)),
    "initial_guess": float(_lsq.get("initial_guess", 1e-7)),
    "ftol": float(_lsq.get("ftol", 1e-15)),
    "xtol": float(_lsq.get("xtol", 1e-15)),
    "gtol": float(_lsq.get("gtol", 1e-15)),
    "max_nfev": int(_lsq.get("max_nfev", 500)),
}

_nec = _solver.get("nec", {})
NEC_BRACKET = {
    "lower": float(_nec.get("lower", 1e-12)),
    "upper": float(_nec.get("upper", 1e-6)),
    "xtol": float(_nec.get("xtol", 1e-20)),
    "maxiter": int(_nec.get("maxiter", 500)),
}

BOUND_TOL = float(_solver.get("bound_tol", 1e-6))
OBJECTIVE_TOL = float(_solver.get("objective_tol", 1e-4))

# Time-course durations
_tc = _cfg.get("time_course", {})
TIME_COURSE_START = float(_tc.get("start", 40))
TIME_COURSE_STOP = float(_tc.get("stop", 200))
TIME_COURSE_STEP = float(_tc.get("step", 1))

# Column names
_cols = _cfg.get("columns", {})
SERIES_COL = _cols.get("series", "series")
LEVEL_COL = _cols.get("level", "level")
CA_COL = _cols.get("ca", "Ca")
MG_COL = _cols.get("mg", "Mg")
NA_COL = _cols.get("na", "Na")
K_COL = _cols.get("k", "K")
H_COL = _cols.get("h", "H")
FREE_ION_COL = _cols.get("free_ion_fraction", "fi")
ACTIVITY_COEF_COL = _cols.get("activity_coefficient", "gamma")

COMPETITOR_COLS = [CA_COL, MG_COL, NA_COL, K_COL, H_COL]
REQUIRED_COLS = [SERIES_COL, LEVEL_COL] + COMPETITOR_COLS + [FREE_ION_COL, ACTIVITY_COEF_COL]

# Output columns appended by the batch driver
EC50_COL = "EC50"
NEC_COL = "NEC"
