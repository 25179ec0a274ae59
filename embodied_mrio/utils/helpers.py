"""
Helper utility functions for numerically guarded matrix operations.

This module centralizes the "non-finite becomes zero" division policy used by
every coefficient and intensity computation, together with the conditioning
checks performed before the Leontief system is factorized.
"""

import numpy as np
from typing import Optional, Sequence, Tuple

from embodied_mrio.utils.logging_config import setup_logger

logger = setup_logger(__name__)


def zero_non_finite(array: np.ndarray, fill_value: float = 0.0) -> np.ndarray:
    """
    Return a float copy of ``array`` with NaN and +/-inf replaced.

    Parameters
    ----------
    array : np.ndarray
        Input array of any shape.
    fill_value : float, optional
        Replacement for non-finite entries, by default 0.0.

    Returns
    -------
    np.ndarray
        New array; the input is never modified.
    """
    result = np.array(array, dtype=float, copy=True)
    result[~np.isfinite(result)] = fill_value
    return result


def safe_division(
    numerator: np.ndarray,
    denominator: np.ndarray,
    fill_value: float = 0.0
) -> np.ndarray:
    """
    Perform element-wise division with non-finite results replaced.

    This is the single division primitive of the package. Any quotient that
    comes out as NaN or +/-inf (zero denominators, 0/0, missing values) is
    replaced by ``fill_value``. Usual numpy broadcasting applies, so a
    ``(1, n)`` denominator divides every column ``j`` by ``denominator[0, j]``.

    Parameters
    ----------
    numerator : np.ndarray
        Numerator array.
    denominator : np.ndarray
        Denominator array, broadcastable against the numerator.
    fill_value : float, optional
        Value to use where the quotient is not finite, by default 0.0.

    Returns
    -------
    np.ndarray
        Result of numerator / denominator with fill_value for non-finite
        quotients.

    Notes
    -----
    Sanitization is expected for sectors with zero total input or zero
    output; it is logged at DEBUG level and never raised.

    Examples
    --------
    >>> num = np.array([1, 2, 3])
    >>> den = np.array([2, 0, 3])
    >>> safe_division(num, den)
    array([0.5, 0. , 1. ])
    """
    numerator = np.asarray(numerator, dtype=float)
    denominator = np.asarray(denominator, dtype=float)

    with np.errstate(divide='ignore', invalid='ignore'):
        result = numerator / denominator

    non_finite = ~np.isfinite(result)
    n_sanitized = int(non_finite.sum())
    if n_sanitized:
        result[non_finite] = fill_value
        logger.debug(f"Sanitized {n_sanitized} non-finite quotient(s) to {fill_value}")

    return result


def check_matrix_singularity(
    matrix: np.ndarray,
    max_condition_number: float = 1e15
) -> Tuple[bool, Optional[float]]:
    """
    Check if a matrix is singular or ill-conditioned.

    Parameters
    ----------
    matrix : np.ndarray
        Square matrix to check.
    max_condition_number : float, optional
        Maximum acceptable condition number, by default 1e15.

    Returns
    -------
    is_singular : bool
        True if matrix is singular or ill-conditioned, False otherwise.
    condition_number : float or None
        2-norm condition number of the matrix, or None if it could not be
        computed.

    Notes
    -----
    For the Leontief system (I - A), singularity means the economy described
    by the coefficients is not productive: some sector requires at least as
    much input as it produces. The determinant is deliberately not used; for
    the matrix sizes of regional tables it under- or overflows long before
    the system becomes unstable.
    """
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        logger.error(f"Matrix is not square: {matrix.shape}")
        return True, None

    if not np.all(np.isfinite(matrix)):
        logger.error("Matrix contains non-finite entries")
        return True, None

    try:
        cond = float(np.linalg.cond(matrix))
    except np.linalg.LinAlgError:
        logger.error("Failed to compute condition number")
        return True, None

    if not np.isfinite(cond):
        logger.warning("Matrix is singular (condition number is infinite)")
        return True, cond

    if cond > max_condition_number:
        logger.warning(
            f"Matrix is ill-conditioned (cond = {cond:.2e} > {max_condition_number:.2e})"
        )
        return True, cond

    return False, cond


def describe_shape_mismatch(
    name: str,
    actual: Sequence[int],
    expected: Sequence[int]
) -> Optional[str]:
    """
    Return a readable message if ``actual`` differs from ``expected``.

    Parameters
    ----------
    name : str
        Name of the array being checked.
    actual : sequence of int
        Observed shape.
    expected : sequence of int
        Required shape.

    Returns
    -------
    str or None
        Error message, or None when the shapes agree.
    """
    if tuple(actual) == tuple(expected):
        return None
    return f"{name} has shape {tuple(actual)}, expected {tuple(expected)}"


def freeze(array: np.ndarray) -> np.ndarray:
    """Mark an array read-only and return it."""
    array.flags.writeable = False
    return array
