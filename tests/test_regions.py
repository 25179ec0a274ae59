"""Tests for the region-major block layout."""

from collections import OrderedDict

import pytest

from embodied_mrio.analysis.regions import RegionBlocks
from embodied_mrio.exceptions import MissingDataError


def test_uniform_layout():
    blocks = RegionBlocks.uniform(3, 2, ["a", "b", "c"])
    assert blocks.n_regions == 3
    assert blocks.n_sectors_total == 6
    assert [span for _, *span in blocks] == [[0, 2], [2, 4], [4, 6]]
    assert blocks.span("b") == (2, 4)
    assert blocks.slice("c") == slice(4, 6)
    assert blocks.index_of("c") == 2


def test_default_region_names():
    blocks = RegionBlocks.uniform(2, 3)
    assert blocks.names == ["region_1", "region_2"]


def test_from_sizes_unequal(uneven_blocks):
    assert uneven_blocks.names == ["east", "west", "south"]
    assert uneven_blocks.span("west") == (2, 5)
    assert uneven_blocks.span("south") == (5, 6)
    assert len(uneven_blocks) == 3


def test_sector_labels():
    blocks = RegionBlocks.uniform(2, 2, ["x", "y"])
    assert blocks.sector_labels(["agr", "ind"]) == ["x_agr", "x_ind", "y_agr", "y_ind"]
    assert blocks.sector_labels() == ["x_1", "x_2", "y_1", "y_2"]


def test_sector_labels_fall_back_to_numbers_for_unequal_blocks(uneven_blocks):
    labels = uneven_blocks.sector_labels(["p", "s"])
    assert labels[:2] == ["east_p", "east_s"]
    assert labels[2:5] == ["west_1", "west_2", "west_3"]


def test_gap_between_regions_rejected():
    with pytest.raises(MissingDataError, match="contiguous"):
        RegionBlocks(OrderedDict([("a", (0, 2)), ("b", (3, 4))]))


def test_empty_region_rejected():
    with pytest.raises(MissingDataError, match="empty range"):
        RegionBlocks(OrderedDict([("a", (0, 2)), ("b", (2, 2))]))


def test_no_regions_rejected():
    with pytest.raises(MissingDataError):
        RegionBlocks({})


def test_name_count_mismatch_rejected():
    with pytest.raises(MissingDataError):
        RegionBlocks.uniform(3, 1, ["a", "b"])


def test_unknown_region():
    blocks = RegionBlocks.uniform(2, 1)
    with pytest.raises(KeyError):
        blocks.span("nowhere")


def test_equality():
    assert RegionBlocks.uniform(2, 2, ["a", "b"]) == RegionBlocks.from_sizes({"a": 2, "b": 2})
    assert RegionBlocks.uniform(2, 2, ["a", "b"]) != RegionBlocks.uniform(2, 1, ["a", "b"])
