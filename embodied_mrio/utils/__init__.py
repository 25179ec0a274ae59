"""
Utility functions for the embodied MRIO analysis package.
"""

from .helpers import (
    zero_non_finite,
    safe_division,
    check_matrix_singularity,
    describe_shape_mismatch,
    freeze,
)
from .logging_config import setup_logger

__all__ = [
    'zero_non_finite',
    'safe_division',
    'check_matrix_singularity',
    'describe_shape_mismatch',
    'freeze',
    'setup_logger',
]
