"""
Leontief Input-Output Analysis Module.

This module implements the technical coefficients and Leontief inverse of a
multi-regional input-output (MRIO) system. The Leontief inverse matrix
L = (I-A)^(-1) is the basis of every embodied-flow calculation in the package.

The mathematical framework follows:
    X = AX + Y  (use accounting identity)
    X = (I-A)^(-1) Y = LY  (solving for gross output)

where:
- X: Gross output vector (total production by each region-sector)
- A: Technical coefficients matrix (input requirements per unit of input)
- Y: Final demand matrix (one column per consuming region)
- L: Leontief inverse matrix (total requirements matrix)

References
----------
Leontief, W. (1986): Input-Output Economics, 2nd edition.
Miller & Blair (2009): Input-Output Analysis: Foundations and Extensions.
"""

import numpy as np
import pandas as pd
from scipy import linalg as scipy_linalg
from typing import Optional, Sequence, Tuple

from embodied_mrio import config
from embodied_mrio.exceptions import MissingDataError, NumericalError
from embodied_mrio.utils.logging_config import setup_logger
from embodied_mrio.utils.helpers import (
    check_matrix_singularity,
    freeze,
    safe_division,
)

logger = setup_logger(__name__)


class LeontiefAnalyzer:
    """
    Analyzer for Leontief input-output calculations.

    This class encapsulates the technical coefficients matrix A, the LU
    factorization of (I - A) and the Leontief inverse L. The factorization is
    computed once and shared by the explicit inverse and by ``solve``, so both
    factor branches (employment and value-added) reuse the same system.

    Each element l_ij of L is the gross output of sector i required, directly
    and through every upstream supplier, to deliver one unit of final output
    of sector j.

    Attributes
    ----------
    Z : np.ndarray
        Intermediate use matrix (sector-to-sector flows), N x N.
    total_input : np.ndarray
        Total input absorbed by each sector, length N.
    A : np.ndarray or None
        Technical coefficients matrix (computed on demand).
    L : np.ndarray or None
        Leontief inverse matrix (computed on demand).
    condition_number : float or None
        Condition number of (I - A) once factorized.

    Examples
    --------
    >>> analyzer = LeontiefAnalyzer(Z, total_input)
    >>> L = analyzer.compute_leontief_inverse()
    >>> LY = analyzer.solve(final_demand)
    """

    def __init__(
        self,
        Z: np.ndarray,
        total_input: np.ndarray,
        sector_labels: Optional[Sequence[str]] = None,
        max_condition_number: Optional[float] = None
    ):
        """
        Initialize Leontief analyzer.

        Parameters
        ----------
        Z : np.ndarray
            Intermediate use matrix. Z[i,j] is the flow of goods from producing
            sector i to consuming sector j.
        total_input : np.ndarray
            Total input of each sector; the denominator of the coefficients.
        sector_labels : sequence of str, optional
            Labels for rows/columns, used by ``to_dataframe``.
        max_condition_number : float, optional
            Largest acceptable condition number of (I - A), by default
            ``config.MAX_CONDITION_NUMBER``.

        Raises
        ------
        MissingDataError
            If Z is not square or total_input does not match its size.
        """
        self.Z = np.array(Z, dtype=float, copy=True)
        self.total_input = np.array(total_input, dtype=float, copy=True).reshape(-1)

        if self.Z.ndim != 2 or self.Z.shape[0] != self.Z.shape[1]:
            raise MissingDataError(f"Z must be square, got shape {self.Z.shape}")
        if self.total_input.shape[0] != self.Z.shape[0]:
            raise MissingDataError(
                f"total_input length {self.total_input.shape[0]} != Z dimensions {self.Z.shape[0]}"
            )

        self.n = self.Z.shape[0]
        self.sector_labels = list(sector_labels) if sector_labels is not None else None
        self.max_condition_number = (
            config.MAX_CONDITION_NUMBER if max_condition_number is None
            else max_condition_number
        )

        self.A = None
        self.L = None
        self.condition_number = None
        self._lu = None

        logger.debug(f"LeontiefAnalyzer initialized with {self.n} sectors")

    def compute_technical_coefficients(self) -> np.ndarray:
        """
        Compute technical coefficients matrix A.

        Element a_ij is the input from sector i needed per unit of total input
        of sector j:
            a_ij = Z_ij / total_input_j  (column normalization)

        Returns
        -------
        np.ndarray
            Read-only technical coefficients matrix A.

        Notes
        -----
        A column whose total input is zero yields zero coefficients instead
        of inf/NaN (guarded by ``safe_division``).
        """
        if self.A is not None:
            return self.A

        A = safe_division(self.Z, self.total_input[np.newaxis, :], fill_value=0.0)

        self.A = freeze(A)
        logger.debug("Computed technical coefficients matrix")
        logger.debug(f"  A sparsity: {(A == 0).sum() / A.size:.1%}")
        logger.debug(f"  A range: [{A.min():.4f}, {A.max():.4f}]")

        return self.A

    def _factorize(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        LU-factorize (I - A), refusing singular or ill-conditioned systems.

        Raises
        ------
        NumericalError
            If the condition number exceeds ``max_condition_number`` or the
            factorization has a zero pivot.
        """
        if self._lu is not None:
            return self._lu

        A = self.compute_technical_coefficients()
        I_minus_A = np.eye(self.n) - A

        with np.errstate(divide='ignore', invalid='ignore'):
            is_singular, cond = check_matrix_singularity(
                I_minus_A, max_condition_number=self.max_condition_number
            )
        self.condition_number = cond

        if is_singular:
            cond_text = "undefined" if cond is None else f"{cond:.3e}"
            raise NumericalError(
                f"(I - A) is singular or ill-conditioned (condition number {cond_text}, "
                f"limit {self.max_condition_number:.3e}); the input dataset is not a "
                "productive input-output system",
                condition_number=cond,
            )

        try:
            lu, piv = scipy_linalg.lu_factor(I_minus_A, check_finite=True)
        except (ValueError, np.linalg.LinAlgError) as e:
            raise NumericalError(f"LU factorization of (I - A) failed: {e}",
                                 condition_number=cond) from e

        if np.any(np.diag(lu) == 0.0):
            raise NumericalError("(I - A) has a zero pivot in its LU factorization",
                                 condition_number=cond)

        self._lu = (lu, piv)
        logger.debug(f"Factorized (I - A) (cond = {cond:.2e})")
        return self._lu

    def compute_leontief_inverse(self) -> np.ndarray:
        """
        Compute the Leontief inverse matrix L = (I-A)^(-1).

        The inverse can be expressed as an infinite series:
            L = (I-A)^(-1) = I + A + A^2 + A^3 + ...

        which converges when the spectral radius of A is below 1, i.e. when
        the economy is productive.

        Returns
        -------
        np.ndarray
            Read-only Leontief inverse matrix L.

        Raises
        ------
        NumericalError
            If (I - A) is singular or ill-conditioned. There is no
            pseudo-inverse fallback: a poisoned inverse is never returned.
        """
        if self.L is not None:
            return self.L

        L = self.solve(np.eye(self.n))
        self.L = freeze(L)

        logger.info("Computed Leontief inverse matrix")
        if self.n > 1:
            off_diagonal = L[~np.eye(self.n, dtype=bool)]
            logger.debug(f"  L diagonal range: [{np.diag(L).min():.3f}, {np.diag(L).max():.3f}]")
            logger.debug(f"  L off-diagonal range: [{off_diagonal.min():.3f}, {off_diagonal.max():.3f}]")

        diag_L = np.diag(L)
        if not np.all(diag_L >= 1.0 - config.NUMERICAL_TOLERANCE):
            n_violations = int(np.sum(diag_L < 1.0 - config.NUMERICAL_TOLERANCE))
            logger.warning(
                f"Leontief inverse has {n_violations} diagonal elements < 1.0 "
                "(possible data quality issue)"
            )

        residual = self.identity_residual()
        if residual > config.IDENTITY_TOLERANCE:
            logger.warning(f"L (I - A) deviates from identity by {residual:.2e}")
        else:
            logger.debug(f"  Round-trip residual max|L(I-A) - I| = {residual:.2e}")

        return self.L

    def solve(self, rhs: np.ndarray) -> np.ndarray:
        """
        Compute L @ rhs by solving (I - A) X = rhs with the cached LU factors.

        Parameters
        ----------
        rhs : np.ndarray
            Right-hand side with N rows (vector or matrix), e.g. final demand.

        Returns
        -------
        np.ndarray
            Solution X with the shape of ``rhs``.

        Notes
        -----
        Non-finite entries of ``rhs`` are not rejected. They propagate into
        the solution as they would through ``L @ rhs`` and are zeroed by the
        regional aggregation.
        """
        rhs = np.asarray(rhs, dtype=float)
        if rhs.shape[0] != self.n:
            raise MissingDataError(
                f"Right-hand side has {rhs.shape[0]} rows, system has {self.n} sectors"
            )
        lu, piv = self._factorize()
        return scipy_linalg.lu_solve((lu, piv), rhs, check_finite=False)

    def solve_transposed(self, rhs: np.ndarray) -> np.ndarray:
        """Compute L.T @ rhs, i.e. solve (I - A).T X = rhs, with the cached factors."""
        rhs = np.asarray(rhs, dtype=float)
        if rhs.shape[0] != self.n:
            raise MissingDataError(
                f"Right-hand side has {rhs.shape[0]} rows, system has {self.n} sectors"
            )
        lu, piv = self._factorize()
        return scipy_linalg.lu_solve((lu, piv), rhs, trans=1, check_finite=False)

    def identity_residual(self) -> float:
        """Return max |L (I - A) - I|, the round-trip error of the inverse."""
        L = self.compute_leontief_inverse() if self.L is None else self.L
        product = L @ (np.eye(self.n) - self.A)
        return float(np.max(np.abs(product - np.eye(self.n))))

    def compute_output_multipliers(self) -> np.ndarray:
        """
        Compute output multipliers from Leontief inverse.

        The output multiplier m_j = sum_i l_ij is the economy-wide gross output
        required to satisfy one unit of final demand for sector j.

        Returns
        -------
        np.ndarray
            Vector of output multipliers (one per sector).
        """
        L = self.compute_leontief_inverse()
        multipliers = L.sum(axis=0)

        logger.debug(f"Output multipliers range: [{multipliers.min():.2f}, {multipliers.max():.2f}]")

        return multipliers

    def to_dataframe(
        self,
        matrix: np.ndarray,
        name: str = 'value'
    ) -> pd.DataFrame:
        """
        Convert an N x N matrix to a labeled DataFrame.

        Parameters
        ----------
        matrix : np.ndarray
            Matrix to convert.
        name : str, optional
            Name for the matrix (used in logging), by default 'value'.

        Returns
        -------
        pd.DataFrame
            DataFrame with sector labels for rows and columns (numeric
            indices when no labels were given).
        """
        df = pd.DataFrame(
            matrix,
            index=self.sector_labels,
            columns=self.sector_labels
        )
        logger.debug(f"Converted {name} matrix to DataFrame")
        return df
