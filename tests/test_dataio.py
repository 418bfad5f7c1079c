"""
Tests for scenario table loading and saving.
"""

import pandas as pd
import pytest

from tktdblm import InvalidInputError, load_scenarios_csv, load_table, save_table, scenario_from_row


def test_load_csv(tmp_path, scenario_df):
    path = tmp_path / "scen.csv"
    scenario_df.to_csv(path, index=False)
    df = load_scenarios_csv(path)
    pd.testing.assert_frame_equal(df, scenario_df)


def test_load_tab_separated(tmp_path, scenario_df):
    path = tmp_path / "scen.txt"
    scenario_df.to_csv(path, sep="\t", index=False)
    df = load_scenarios_csv(path)
    assert list(df.columns) == list(scenario_df.columns)


def test_positional_layout(tmp_path, scenario_df):
    renamed = scenario_df.copy()
    renamed.columns = ["Serie", "Niveau", "aCa", "aMg", "aNa", "aK", "aH", "f_free", "act"]
    path = tmp_path / "scen.csv"
    renamed.to_csv(path, index=False)

    with pytest.raises(ValueError, match="Missing required columns"):
        load_scenarios_csv(path)

    df = load_scenarios_csv(path, positional=True)
    assert list(df.columns) == list(scenario_df.columns)


def test_non_numeric_becomes_nan(tmp_path, scenario_df):
    raw = scenario_df.astype({"Na": object})
    raw.loc[0, "Na"] = "n.d."
    path = tmp_path / "scen.csv"
    raw.to_csv(path, index=False)
    df = load_scenarios_csv(path)
    assert df["Na"].isna().iloc[0]
    with pytest.raises(InvalidInputError):
        scenario_from_row(df.iloc[0])


def test_scenario_from_row(scenario_df):
    scen = scenario_from_row(scenario_df.iloc[1])
    assert scen.series == "Ca" and scen.level == "high"
    assert scen.Ca == 2e-3
    assert scen.free_ion_fraction == 0.6


def test_save_table(tmp_path, scenario_df):
    out = save_table(scenario_df, tmp_path / "nested" / "out.txt")
    assert out.exists()
    back = pd.read_csv(out, sep="\t")
    assert len(back) == len(scenario_df)


def test_load_table_round_trip(tmp_path, scenario_df):
    out = save_table(scenario_df, tmp_path / "out.csv")
    pd.testing.assert_frame_equal(load_table(out), scenario_df)
