"""
Embodied Factor Flow Module.

This module traces a production factor (employment, value-added) through the
supply chain to the region whose final demand induces it. It answers the
question: "How much employment located in region r works, directly or
through upstream suppliers, for consumers in region s?"

Mathematical Framework:
    E = D L Y

where:
- E: Embodied sector flow (N x R)
- D: Diagonal matrix of factor intensities (d_i = factor_i / X_i)
- L: Leontief inverse matrix
- Y: Final demand by destination region (N x R)

Element E_is is the factor located in sector i induced by the final demand of
region s. Aggregating the sector rows of each region, and removing the part of
each region's demand met by its own production, yields the interregional
transfer matrices.

References
----------
Miller & Blair (2009): Chapter 6 "Multipliers", Chapter 10 "Energy and
    environmental input-output analysis" (embodied factor accounting).
Feng et al. (2013): "Outsourcing CO2 within China", PNAS 110(28).
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

import numpy as np
import pandas as pd

from embodied_mrio import config
from embodied_mrio.analysis.aggregation import (
    aggregate_to_regions,
    remove_self_trade,
    self_trade_share,
)
from embodied_mrio.analysis.intensity import build_intensity_matrix
from embodied_mrio.analysis.leontief import LeontiefAnalyzer
from embodied_mrio.analysis.net_flows import compute_net_flows
from embodied_mrio.analysis.regions import RegionBlocks
from embodied_mrio.exceptions import MissingDataError
from embodied_mrio.utils.logging_config import setup_logger
from embodied_mrio.utils.helpers import freeze

logger = setup_logger(__name__)


@dataclass(frozen=True, eq=False)
class EmbodiedFlowResult:
    """
    Embodied flows of one factor branch.

    Attributes
    ----------
    factor : str
        Branch name, e.g. 'employment' or 'value_added'.
    intensity : np.ndarray
        Factor per unit of output, length N.
    multipliers : np.ndarray
        Column sums of D L: factor required per unit of final demand of each
        sector, length N.
    sector_flow : np.ndarray
        Embodied sector flow D L Y, N x R.
    region_flow : np.ndarray
        Sector flow aggregated to regions, self-trade included, R x R.
    self_trade_free_flow : np.ndarray
        Region flow with intra-regional flows removed, R x R, zero diagonal.
    exports, imports, net : np.ndarray
        Embodied export, import and net transfer per region, length R.
    net_flow_matrix : np.ndarray
        Antisymmetric bilateral net flow, R x R.
    blocks : RegionBlocks
        Region layout used to aggregate the sector rows.
    sector_labels : list of str
        Labels of the N sector rows.
    """

    factor: str
    intensity: np.ndarray
    multipliers: np.ndarray
    sector_flow: np.ndarray
    region_flow: np.ndarray
    self_trade_free_flow: np.ndarray
    exports: np.ndarray
    imports: np.ndarray
    net: np.ndarray
    net_flow_matrix: np.ndarray
    blocks: RegionBlocks = field(repr=False)
    sector_labels: List[str] = field(repr=False, default_factory=list)

    @property
    def self_sufficiency(self) -> np.ndarray:
        """Share of each region's induced factor supplied by the region itself."""
        return self_trade_share(self.sector_flow, self.blocks)

    def to_frames(self) -> Dict[str, Union[pd.DataFrame, pd.Series]]:
        """
        Return every result array as a labeled pandas object.

        Region-level matrices are indexed by producing region (rows) and
        consuming region (columns); sector-level matrices by sector label.
        """
        regions = pd.Index(self.blocks.names, name='region')
        consumers = pd.Index(self.blocks.names, name='consuming_region')
        producers = pd.Index(self.blocks.names, name='producing_region')
        sectors = pd.Index(self.sector_labels or self.blocks.sector_labels(), name='sector')

        return {
            'intensity': pd.Series(self.intensity, index=sectors, name=f'{self.factor}_intensity'),
            'multipliers': pd.Series(self.multipliers, index=sectors, name=f'{self.factor}_multiplier'),
            'sector_flow': pd.DataFrame(self.sector_flow, index=sectors, columns=consumers),
            'region_flow': pd.DataFrame(self.region_flow, index=producers, columns=consumers),
            'self_trade_free_flow': pd.DataFrame(
                self.self_trade_free_flow, index=producers, columns=consumers
            ),
            'exports': pd.Series(self.exports, index=regions, name='export'),
            'imports': pd.Series(self.imports, index=regions, name='import'),
            'net': pd.Series(self.net, index=regions, name='net'),
            'net_flow_matrix': pd.DataFrame(self.net_flow_matrix, index=producers, columns=consumers),
        }


class EmbodiedFlowAnalyzer:
    """
    Analyzer for factor flows embodied in interregional final demand.

    One analyzer serves every factor branch: the total requirements L Y are
    computed once from the shared Leontief system and reweighted by each
    factor's intensities.

    Attributes
    ----------
    leontief : LeontiefAnalyzer
        Leontief system of the MRIO table.
    Y : np.ndarray
        Final demand by destination region, N x R.
    blocks : RegionBlocks
        Region-major layout of the N sectors.
    use_lu_solve : bool
        If True, L Y is obtained by LU solve; otherwise through the explicit
        inverse. Both give the same result up to rounding.

    Examples
    --------
    >>> leontief = LeontiefAnalyzer(Z, total_input)
    >>> analyzer = EmbodiedFlowAnalyzer(leontief, Y, blocks)
    >>> employment = analyzer.analyze('employment', empl, total_output)
    >>> employment.net
    """

    def __init__(
        self,
        leontief: LeontiefAnalyzer,
        Y: np.ndarray,
        blocks: RegionBlocks,
        use_lu_solve: Optional[bool] = None,
        sector_labels: Optional[List[str]] = None
    ):
        """
        Initialize embodied flow analyzer.

        Parameters
        ----------
        leontief : LeontiefAnalyzer
            Analyzer holding the intermediate use matrix and total input.
        Y : np.ndarray
            Final demand matrix, one column per consuming region.
        blocks : RegionBlocks
            Region layout; must cover the N rows of Y and match its R columns.
        use_lu_solve : bool, optional
            By default ``config.USE_LU_SOLVE``.
        sector_labels : list of str, optional
            Labels of the sector rows, defaults to ``blocks.sector_labels()``.
        """
        self.leontief = leontief
        self.Y = np.array(Y, dtype=float, copy=True)
        self.blocks = blocks
        self.use_lu_solve = config.USE_LU_SOLVE if use_lu_solve is None else use_lu_solve
        self.sector_labels = sector_labels if sector_labels is not None else blocks.sector_labels()

        expected = (blocks.n_sectors_total, blocks.n_regions)
        if self.Y.shape != expected:
            raise MissingDataError(f"Final demand has shape {self.Y.shape}, expected {expected}")
        if leontief.n != blocks.n_sectors_total:
            raise MissingDataError(
                f"Leontief system has {leontief.n} sectors, layout has {blocks.n_sectors_total}"
            )

        self._LY = None

        logger.debug("EmbodiedFlowAnalyzer initialized")

    def compute_total_requirements(self) -> np.ndarray:
        """
        Compute L Y, the gross output of each sector required by each region's
        final demand. Cached and shared by all factor branches.
        """
        if self._LY is None:
            if self.use_lu_solve:
                LY = self.leontief.solve(self.Y)
            else:
                LY = self.leontief.compute_leontief_inverse() @ self.Y
            self._LY = freeze(LY)
            logger.debug(f"Computed total requirements L Y (LU solve: {self.use_lu_solve})")
        return self._LY

    def compute_sector_flow(self, intensity_matrix: np.ndarray) -> np.ndarray:
        """
        Compute the embodied sector flow E = D L Y.

        Parameters
        ----------
        intensity_matrix : np.ndarray
            Diagonal intensity matrix D, N x N.

        Returns
        -------
        np.ndarray
            Embodied sector flow, N x R.

        Notes
        -----
        With LU solve enabled the diagonal product is applied as a row
        scaling of L Y instead of a dense matrix product.
        """
        D = np.asarray(intensity_matrix, dtype=float)
        n = self.blocks.n_sectors_total
        if D.shape != (n, n):
            raise MissingDataError(f"Intensity matrix has shape {D.shape}, expected {(n, n)}")

        if self.use_lu_solve:
            return np.diag(D)[:, np.newaxis] * self.compute_total_requirements()
        return D @ self.leontief.compute_leontief_inverse() @ self.Y

    def compute_factor_multipliers(self, intensity: np.ndarray) -> np.ndarray:
        """
        Compute factor multipliers, the column sums of D L.

        Element j is the factor required across the whole economy per unit of
        final demand for sector j; computed as L.T d without forming L.
        """
        return self.leontief.solve_transposed(np.asarray(intensity, dtype=float))

    def analyze(
        self,
        factor: str,
        factor_values: np.ndarray,
        total_output: np.ndarray
    ) -> EmbodiedFlowResult:
        """
        Run one factor branch: intensities, embodied flows, regional
        aggregation, self-trade removal and net flows.

        Parameters
        ----------
        factor : str
            Branch name.
        factor_values : np.ndarray
            Factor quantity per sector, length N.
        total_output : np.ndarray
            Total output per sector, length N.

        Returns
        -------
        EmbodiedFlowResult
            Read-only results of the branch.
        """
        logger.info(f"Computing embodied {factor} flows...")

        D = build_intensity_matrix(factor_values, total_output, name=factor)
        intensity = np.diag(D).copy()

        sector_flow = self.compute_sector_flow(D)
        region_flow = aggregate_to_regions(sector_flow, self.blocks)
        self_trade_free_flow = aggregate_to_regions(
            remove_self_trade(sector_flow, self.blocks), self.blocks
        )
        flows = compute_net_flows(self_trade_free_flow)
        multipliers = self.compute_factor_multipliers(intensity)

        logger.info(
            f"  Embodied {factor}: total {region_flow.sum():.4g}, "
            f"interregional {self_trade_free_flow.sum():.4g}"
        )

        return EmbodiedFlowResult(
            factor=factor,
            intensity=freeze(intensity),
            multipliers=freeze(multipliers),
            sector_flow=freeze(sector_flow),
            region_flow=freeze(region_flow),
            self_trade_free_flow=freeze(self_trade_free_flow),
            exports=freeze(flows['exports']),
            imports=freeze(flows['imports']),
            net=freeze(flows['net']),
            net_flow_matrix=freeze(flows['net_flow_matrix']),
            blocks=self.blocks,
            sector_labels=list(self.sector_labels),
        )


def summarize_transfers(result: EmbodiedFlowResult) -> pd.DataFrame:
    """
    Tabulate embodied export, import and net transfer per region.

    Parameters
    ----------
    result : EmbodiedFlowResult
        Results of one factor branch.

    Returns
    -------
    pd.DataFrame
        One row per region with columns 'export', 'import', 'net' and
        'self_sufficiency', sorted by net transfer (largest net exporter
        first).
    """
    summary = pd.DataFrame(
        {
            'export': result.exports,
            'import': result.imports,
            'net': result.net,
            'self_sufficiency': result.self_sufficiency,
        },
        index=pd.Index(result.blocks.names, name='region'),
    )
    return summary.sort_values('net', ascending=False)
