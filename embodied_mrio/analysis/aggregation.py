"""
Regional aggregation and self-trade removal for embodied-flow matrices.

Both operations act on the N x R sector-by-region embodied flow, where the
rows follow the region-major layout described by ``RegionBlocks`` and
column s is the flow induced by final demand of region s.
"""

import numpy as np

from embodied_mrio.analysis.regions import RegionBlocks
from embodied_mrio.exceptions import MissingDataError
from embodied_mrio.utils.logging_config import setup_logger
from embodied_mrio.utils.helpers import safe_division, zero_non_finite

logger = setup_logger(__name__)


def _check_sector_flow(sector_flow: np.ndarray, blocks: RegionBlocks) -> np.ndarray:
    sector_flow = np.asarray(sector_flow, dtype=float)
    expected = (blocks.n_sectors_total, blocks.n_regions)
    if sector_flow.shape != expected:
        raise MissingDataError(
            f"Sector flow has shape {sector_flow.shape}, expected {expected}"
        )
    return sector_flow


def aggregate_to_regions(sector_flow: np.ndarray, blocks: RegionBlocks) -> np.ndarray:
    """
    Sum the sector rows of each region into an R x R region flow matrix.

    Row r of the result is the sum of rows ``[start_r, end_r)`` of
    ``sector_flow``: the factor located in region r induced by the final
    demand of each region s. Non-finite entries count as zero.

    Parameters
    ----------
    sector_flow : np.ndarray
        Embodied flow, N x R.
    blocks : RegionBlocks
        Region-major layout of the N rows.

    Returns
    -------
    np.ndarray
        Region flow matrix, R x R.
    """
    sector_flow = zero_non_finite(_check_sector_flow(sector_flow, blocks))

    region_flow = np.zeros((blocks.n_regions, blocks.n_regions))
    for r, (_, start, end) in enumerate(blocks):
        region_flow[r, :] = sector_flow[start:end, :].sum(axis=0)

    return region_flow


def remove_self_trade(sector_flow: np.ndarray, blocks: RegionBlocks) -> np.ndarray:
    """
    Zero the part of the embodied flow that a region supplies to itself.

    For every region r, rows ``[start_r, end_r)`` of column r are set to
    zero. The input is left untouched; a new array is returned.

    Parameters
    ----------
    sector_flow : np.ndarray
        Embodied flow, N x R.
    blocks : RegionBlocks
        Region-major layout of the N rows.

    Returns
    -------
    np.ndarray
        Self-trade-free sector flow, N x R.
    """
    self_trade_free = np.array(_check_sector_flow(sector_flow, blocks), copy=True)

    for r, (_, start, end) in enumerate(blocks):
        self_trade_free[start:end, r] = 0.0

    removed = np.nansum(sector_flow) - np.nansum(self_trade_free)
    logger.debug(f"Removed {removed:.4g} of intra-regional embodied flow")

    return self_trade_free


def self_trade_share(sector_flow: np.ndarray, blocks: RegionBlocks) -> np.ndarray:
    """
    Share of each region's induced factor total met by its own production.

    Returns
    -------
    np.ndarray
        Length-R vector: diagonal of the region flow divided by its column
        sums, 0 where a region induces nothing.
    """
    region_flow = aggregate_to_regions(sector_flow, blocks)
    return safe_division(np.diag(region_flow), region_flow.sum(axis=0))
