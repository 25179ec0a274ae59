"""
Factor intensities per unit of output.

An intensity is a factor quantity (employment, value-added) divided by the
total output of the same sector. The diagonalized intensity matrix turns the
Leontief total-requirements matrix into factor requirements.
"""

import numpy as np

from embodied_mrio.exceptions import MissingDataError
from embodied_mrio.utils.logging_config import setup_logger
from embodied_mrio.utils.helpers import freeze, safe_division

logger = setup_logger(__name__)


def compute_intensity(
    factor: np.ndarray,
    total_output: np.ndarray,
    name: str = 'factor'
) -> np.ndarray:
    """
    Compute the per-sector intensity ``factor / total_output``.

    Parameters
    ----------
    factor : np.ndarray
        Factor vector of length N (employment count or value-added).
    total_output : np.ndarray
        Total output of each sector, length N.
    name : str, optional
        Factor name used in log messages, by default 'factor'.

    Returns
    -------
    np.ndarray
        Intensity vector. Sectors with zero output, or any other non-finite
        ratio, get intensity 0.

    Raises
    ------
    MissingDataError
        If the two vectors differ in length.
    """
    factor = np.asarray(factor, dtype=float).reshape(-1)
    total_output = np.asarray(total_output, dtype=float).reshape(-1)

    if factor.shape != total_output.shape:
        raise MissingDataError(
            f"{name} has length {factor.shape[0]}, total output has length {total_output.shape[0]}"
        )

    intensity = safe_division(factor, total_output, fill_value=0.0)

    logger.debug(f"{name} intensity range: [{intensity.min():.4g}, {intensity.max():.4g}]")
    return intensity


def diagonalize_intensity(intensity: np.ndarray) -> np.ndarray:
    """Return the read-only N x N matrix with ``intensity`` on its diagonal."""
    return freeze(np.diag(np.asarray(intensity, dtype=float).reshape(-1)))


def build_intensity_matrix(
    factor: np.ndarray,
    total_output: np.ndarray,
    name: str = 'factor'
) -> np.ndarray:
    """
    Compute the diagonal intensity matrix for one factor branch.

    Examples
    --------
    >>> build_intensity_matrix(np.array([1.0, 1.0]), np.array([2.0, 0.0]))
    array([[0.5, 0. ],
           [0. , 0. ]])
    """
    return diagonalize_intensity(compute_intensity(factor, total_output, name=name))
