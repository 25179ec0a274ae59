"""Tests for the command-line driver."""

import numpy as np
import pandas as pd
import pytest

from embodied_mrio import config, main


@pytest.fixture
def two_region_config(monkeypatch):
    """Shrink the configured layout to the two-region toy economy."""
    monkeypatch.setattr(config, "N_REGIONS", 2)
    monkeypatch.setattr(config, "N_SECTORS", 1)
    monkeypatch.setattr(config, "REGION_NAMES", ["north", "south"])
    monkeypatch.setattr(config, "SECTOR_NAMES", ["all"])


@pytest.fixture
def bundle_folder(tmp_path, toy_arrays):
    folder = tmp_path / "bundles"
    folder.mkdir()
    variables = {
        upstream: toy_arrays[field] for field, upstream in config.BUNDLE_VARIABLES.items()
    }
    np.savez(folder / "2012_MRIO_preprocessed.npz", **variables)
    return folder


def test_parse_arguments_defaults():
    args = main.parse_arguments([])
    assert args.years == [config.DEFAULT_YEAR]
    assert args.output_format == "csv"
    assert args.validate is True
    assert not args.explicit_inverse


def test_parse_arguments_options(tmp_path):
    args = main.parse_arguments([
        "--years", "2012", "2017",
        "--input-folder", str(tmp_path),
        "--explicit-inverse",
        "--max-condition-number", "1e6",
        "--no-validate",
    ])
    assert args.years == [2012, 2017]
    assert args.input_folder == tmp_path
    assert args.explicit_inverse
    assert args.max_condition_number == 1e6
    assert args.validate is False


def test_main_runs_and_saves(two_region_config, bundle_folder, tmp_path):
    output = tmp_path / "out"
    exit_code = main.main([
        "--years", "2012",
        "--input-folder", str(bundle_folder),
        "--output-folder", str(output),
        "--save-results",
    ])
    assert exit_code == 0

    net_flow = pd.read_csv(output / "employment_net_flow_matrix_2012.csv", index_col=0)
    assert list(net_flow.index) == ["north", "south"]
    np.testing.assert_allclose(net_flow.to_numpy(), np.zeros((2, 2)), atol=1e-12)

    free_flow = pd.read_csv(output / "value_added_self_trade_free_flow_2012.csv", index_col=0)
    np.testing.assert_allclose(free_flow.to_numpy(), [[0.0, 1 / 3], [1 / 3, 0.0]])
    assert (output / "transfer_summary_2012.csv").exists()


def test_main_fails_when_no_year_succeeds(two_region_config, bundle_folder, tmp_path):
    exit_code = main.main([
        "--years", "2015",
        "--input-folder", str(bundle_folder),
        "--output-folder", str(tmp_path / "out"),
    ])
    assert exit_code == 1


def test_main_skips_failed_years(two_region_config, bundle_folder, tmp_path):
    exit_code = main.main([
        "--years", "2012", "2015",
        "--input-folder", str(bundle_folder),
        "--output-folder", str(tmp_path / "out"),
    ])
    assert exit_code == 0


def test_main_rejects_missing_input_folder(two_region_config, tmp_path):
    exit_code = main.main(["--input-folder", str(tmp_path / "missing")])
    assert exit_code == 1


def test_main_completes_with_non_finite_final_demand(two_region_config, tmp_path, toy_arrays):
    folder = tmp_path / "bundles"
    folder.mkdir()
    variables = {
        upstream: toy_arrays[field] for field, upstream in config.BUNDLE_VARIABLES.items()
    }
    variables["Final_use2"] = np.array([[1.0, 0.0], [np.nan, 1.0]])
    np.savez(folder / "2012_MRIO_preprocessed.npz", **variables)

    exit_code = main.main([
        "--years", "2012",
        "--input-folder", str(folder),
        "--output-folder", str(tmp_path / "out"),
    ])
    assert exit_code == 0
