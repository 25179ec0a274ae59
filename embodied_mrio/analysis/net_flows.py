"""
Embodied exports, imports and net bilateral transfers between regions.

All quantities derive from the self-trade-free region flow matrix F, where
F[r, s] is the factor located in region r induced by final demand of region
s (r != s):

    export_r   = sum_s F[r, s]
    import_r   = sum_s F[s, r]
    net_r      = export_r - import_r
    N[r, s]    = F[r, s] - F[s, r]
"""

import numpy as np
from typing import Dict

from embodied_mrio.exceptions import MissingDataError
from embodied_mrio.utils.logging_config import setup_logger

logger = setup_logger(__name__)


def compute_net_flows(self_trade_free_flow: np.ndarray) -> Dict[str, np.ndarray]:
    """
    Derive export, import, net transfer and the net flow matrix.

    Parameters
    ----------
    self_trade_free_flow : np.ndarray
        Region flow matrix with zero diagonal, R x R.

    Returns
    -------
    Dict[str, np.ndarray]
        Dictionary containing:
        - 'exports': row sums, length R
        - 'imports': column sums (row sums of the transpose), length R
        - 'net': exports - imports, length R
        - 'net_flow_matrix': F - F.T, antisymmetric R x R

    Notes
    -----
    Imports are summed over the transpose of the matrix after self-trade
    removal, the same convention in every factor branch. ``net`` is computed
    as the difference of the returned vectors, so ``exports - imports == net``
    holds exactly.
    """
    flow = np.asarray(self_trade_free_flow, dtype=float)
    if flow.ndim != 2 or flow.shape[0] != flow.shape[1]:
        raise MissingDataError(f"Region flow must be square, got shape {flow.shape}")

    exports = flow.sum(axis=1)
    imports = flow.T.sum(axis=1)
    net = exports - imports
    net_flow_matrix = flow - flow.T

    logger.debug(
        f"Net transfer range: [{net.min():.4g}, {net.max():.4g}], "
        f"total embodied trade {exports.sum():.4g}"
    )

    return {
        'exports': exports,
        'imports': imports,
        'net': net,
        'net_flow_matrix': net_flow_matrix,
    }
