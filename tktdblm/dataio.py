"""
Data loading and saving for water-chemistry scenario tables.
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from .config import (
    ACTIVITY_COEF_COL,
    CA_COL,
    COMPETITOR_COLS,
    FREE_ION_COL,
    H_COL,
    K_COL,
    LEVEL_COL,
    MG_COL,
    NA_COL,
    REQUIRED_COLS,
    SERIES_COL,
)
from .models import EnvironmentalScenario

NUMERIC_COLS = COMPETITOR_COLS + [FREE_ION_COL, ACTIVITY_COEF_COL]


def _sep_for(path: str | Path) -> str:
    return "\t" if Path(path).suffix.lower() in (".tsv", ".txt") else ","


def validate_columns(df: pd.DataFrame) -> None:
    """Raise ValueError if any required scenario column is missing."""
    missing = [c for c in REQUIRED_COLS if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")


def load_scenarios_csv(path: str | Path, positional: bool = False) -> pd.DataFrame:
    """
    Load a water-chemistry table.

    Tab-separated for .tsv/.txt, comma-separated otherwise.

    Parameters
    ----------
    path : str or Path
        Input table.
    positional : bool
        If True, the first nine columns are taken to be series, level, the
        five ion activities, free-ion fraction and activity coefficient, in
        that order, whatever their header says.
    Returns
    -------
    pd.DataFrame
        Table with numeric ion columns.
    """
    df = pd.read_csv(path, sep=_sep_for(path))
    if "Unnamed: 0" in df.columns:
        df = df.drop(columns=["Unnamed: 0"])

    if positional:
        if df.shape[1] < len(REQUIRED_COLS):
            raise ValueError(
                f"Expected at least {len(REQUIRED_COLS)} columns, found {df.shape[1]}"
            )
        mapping = dict(zip(df.columns[:len(REQUIRED_COLS)], REQUIRED_COLS))
        df = df.rename(columns=mapping)

    validate_columns(df)

    # Non-numeric entries become NaN and are rejected per scenario later
    for col in NUMERIC_COLS:
        df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


def scenario_from_row(row: pd.Series) -> EnvironmentalScenario:
    """Build an EnvironmentalScenario from one table row."""
    return EnvironmentalScenario(
        Ca=float(row[CA_COL]),
        Mg=float(row[MG_COL]),
        Na=float(row[NA_COL]),
        K=float(row[K_COL]),
        H=float(row[H_COL]),
        free_ion_fraction=float(row[FREE_ION_COL]),
        activity_coefficient=float(row[ACTIVITY_COEF_COL]),
        series=str(row[SERIES_COL]),
        level=str(row[LEVEL_COL]),
    )


def load_table(path: str | Path) -> pd.DataFrame:
    """Read a result table written by `save_table`."""
    return pd.read_csv(path, sep=_sep_for(path))


def save_table(df: pd.DataFrame, path: str | Path) -> Path:
    """Write a result table; separator follows the file suffix."""
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(out_path, sep=_sep_for(out_path), index=False)
    return out_path
