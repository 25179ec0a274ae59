"""Fixtures for testing the embodied MRIO analysis package."""

from collections import OrderedDict

import numpy as np
import pytest

from embodied_mrio.analysis.regions import RegionBlocks
from embodied_mrio.io_data.bundle import MRIOBundle


@pytest.fixture
def toy_blocks() -> RegionBlocks:
    """Two regions with one sector each."""
    return RegionBlocks.uniform(2, 1, ["north", "south"])


@pytest.fixture
def toy_arrays() -> dict:
    """Raw arrays of the two-region, one-sector example economy."""
    return {
        "intermediate_use": np.array([[0.0, 1.0], [1.0, 0.0]]),
        "final_demand": np.array([[1.0, 0.0], [0.0, 1.0]]),
        "total_output": np.array([2.0, 2.0]),
        "total_input": np.array([2.0, 2.0]),
        "employment": np.array([1.0, 1.0]),
        "value_added": np.array([1.0, 1.0]),
    }


@pytest.fixture
def toy_bundle(toy_arrays, toy_blocks) -> MRIOBundle:
    return MRIOBundle.from_arrays(toy_arrays, toy_blocks, label="toy")


@pytest.fixture
def uneven_blocks() -> RegionBlocks:
    """Three regions with 2, 3 and 1 sectors (N = 6)."""
    return RegionBlocks.from_sizes(OrderedDict([("east", 2), ("west", 3), ("south", 1)]))


@pytest.fixture
def uneven_arrays(uneven_blocks) -> dict:
    """
    A random but productive economy on the uneven layout.

    Coefficient columns sum to 0.3-0.6, so (I - A) is well conditioned and
    the output accounting identity holds by construction.
    """
    rng = np.random.default_rng(42)
    n = uneven_blocks.n_sectors_total
    r = uneven_blocks.n_regions

    A = rng.uniform(0.0, 1.0, size=(n, n))
    A = A / A.sum(axis=0) * rng.uniform(0.3, 0.6, size=n)
    Y = rng.uniform(1.0, 10.0, size=(n, r))
    X = np.linalg.solve(np.eye(n) - A, Y.sum(axis=1))
    Z = A * X[np.newaxis, :]

    return {
        "intermediate_use": Z,
        "final_demand": Y,
        "total_output": X,
        "total_input": X.copy(),
        "employment": rng.uniform(5.0, 50.0, size=n),
        "value_added": X - Z.sum(axis=0),
    }


@pytest.fixture
def uneven_bundle(uneven_arrays, uneven_blocks) -> MRIOBundle:
    return MRIOBundle.from_arrays(uneven_arrays, uneven_blocks, label="uneven")
