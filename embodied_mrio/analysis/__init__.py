"""
Input-output analysis components of the embodied MRIO package.
"""

from .regions import RegionBlocks
from .leontief import LeontiefAnalyzer
from .intensity import build_intensity_matrix, compute_intensity, diagonalize_intensity
from .aggregation import aggregate_to_regions, remove_self_trade, self_trade_share
from .net_flows import compute_net_flows
from .embodied import EmbodiedFlowAnalyzer, EmbodiedFlowResult, summarize_transfers

__all__ = [
    'RegionBlocks',
    'LeontiefAnalyzer',
    'build_intensity_matrix',
    'compute_intensity',
    'diagonalize_intensity',
    'aggregate_to_regions',
    'remove_self_trade',
    'self_trade_share',
    'compute_net_flows',
    'EmbodiedFlowAnalyzer',
    'EmbodiedFlowResult',
    'summarize_transfers',
]
