"""
Input bundle of one MRIO analysis run.

The bundle is the boundary between the external loader and the numeric
pipeline: six arrays laid out over the region-major sector axis of size
N = R x S. Arrays are copied and made read-only on construction so that no
buffer is shared between runs.
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Optional

import numpy as np

from embodied_mrio.analysis.regions import RegionBlocks
from embodied_mrio.exceptions import MissingDataError
from embodied_mrio.utils.logging_config import setup_logger
from embodied_mrio.utils.helpers import describe_shape_mismatch, freeze

logger = setup_logger(__name__)

VECTOR_FIELDS = ('total_output', 'total_input', 'employment', 'value_added')
MATRIX_FIELDS = ('intermediate_use', 'final_demand')
REQUIRED_FIELDS = MATRIX_FIELDS + VECTOR_FIELDS


def _as_vector(name: str, values) -> np.ndarray:
    """Flatten a length-N, 1 x N or N x 1 array into a length-N vector."""
    array = np.asarray(values, dtype=float)
    if array.ndim == 2 and 1 in array.shape:
        array = array.reshape(-1)
    if array.ndim != 1:
        raise MissingDataError(f"{name} must be a vector, got shape {array.shape}")
    return array


@dataclass(frozen=True, eq=False)
class MRIOBundle:
    """
    Validated, immutable inputs of the embodied-flow pipeline.

    Attributes
    ----------
    intermediate_use : np.ndarray
        N x N flows from producing sector i to consuming sector j.
    final_demand : np.ndarray
        N x R final demand by destination region.
    total_output : np.ndarray
        Total output of each sector, length N.
    total_input : np.ndarray
        Total input of each sector, length N.
    employment : np.ndarray
        Employment per sector, length N.
    value_added : np.ndarray
        Value-added per sector, length N.
    blocks : RegionBlocks
        Region-major layout of the sector axis.
    label : str, optional
        Dataset identifier, e.g. the table year.
    """

    intermediate_use: np.ndarray
    final_demand: np.ndarray
    total_output: np.ndarray
    total_input: np.ndarray
    employment: np.ndarray
    value_added: np.ndarray
    blocks: RegionBlocks
    label: Optional[str] = None

    @classmethod
    def from_arrays(
        cls,
        arrays: Mapping[str, object],
        blocks: RegionBlocks,
        label: Optional[str] = None
    ) -> "MRIOBundle":
        """
        Build and validate a bundle from a mapping of field name to array.

        Parameters
        ----------
        arrays : Mapping[str, array_like]
            Must contain every name in ``REQUIRED_FIELDS``.
        blocks : RegionBlocks
            Region layout the arrays must conform to.
        label : str, optional
            Dataset identifier.

        Raises
        ------
        MissingDataError
            If an array is absent, not numeric, or its shape does not match
            the layout. No computation is attempted.
        """
        missing = [name for name in REQUIRED_FIELDS if arrays.get(name) is None]
        if missing:
            raise MissingDataError(f"Bundle is missing required arrays: {', '.join(missing)}")

        fields: Dict[str, np.ndarray] = {}
        for name in MATRIX_FIELDS:
            try:
                fields[name] = np.array(arrays[name], dtype=float, copy=True)
            except (TypeError, ValueError) as e:
                raise MissingDataError(f"{name} is not a numeric array: {e}") from e
        for name in VECTOR_FIELDS:
            try:
                fields[name] = np.array(_as_vector(name, arrays[name]), copy=True)
            except MissingDataError:
                raise
            except (TypeError, ValueError) as e:
                raise MissingDataError(f"{name} is not a numeric array: {e}") from e

        bundle = cls(
            **{name: freeze(array) for name, array in fields.items()},
            blocks=blocks,
            label=label,
        )
        bundle.validate()
        return bundle

    @property
    def n_sectors(self) -> int:
        return self.blocks.n_sectors_total

    @property
    def n_regions(self) -> int:
        return self.blocks.n_regions

    def validate(self) -> None:
        """
        Check every array against N = R x S.

        Raises
        ------
        MissingDataError
            Listing every inconsistent array.
        """
        n, r = self.n_sectors, self.n_regions
        expected = {
            'intermediate_use': (n, n),
            'final_demand': (n, r),
            'total_output': (n,),
            'total_input': (n,),
            'employment': (n,),
            'value_added': (n,),
        }

        errors = []
        for name, shape in expected.items():
            array = getattr(self, name)
            if array is None:
                errors.append(f"{name} is missing")
                continue
            message = describe_shape_mismatch(name, np.shape(array), shape)
            if message:
                errors.append(message)

        if errors:
            raise MissingDataError(
                f"Bundle {self.label or ''} is inconsistent with {r} regions / {n} sectors: "
                + "; ".join(errors)
            )

        logger.debug(f"Bundle {self.label or ''} validated ({r} regions, {n} sectors)")

    def check_data_quality(self, tolerance: float = 0.01) -> Dict[str, int]:
        """
        Log data-quality observations without modifying any array.

        Checks:
        1. Output accounting identity: X ~ Z.sum(axis=1) + Y.sum(axis=1)
        2. Negative entries in any array
        3. Non-finite entries in any array

        Parameters
        ----------
        tolerance : float, optional
            Relative tolerance of the accounting identity, by default 1 %.

        Returns
        -------
        Dict[str, int]
            Count of sectors or entries affected by each observation.
        """
        report = {}

        X_computed = self.intermediate_use.sum(axis=1) + self.final_demand.sum(axis=1)
        with np.errstate(divide='ignore', invalid='ignore'):
            relative_error = np.abs(X_computed - self.total_output) / (np.abs(self.total_output) + 1e-10)
        violations = int(np.sum(relative_error > tolerance))
        report['accounting_violations'] = violations
        if violations:
            logger.warning(
                f"Output accounting identity violated for {violations} sectors "
                f"(max relative error: {np.nanmax(relative_error):.2%})"
            )

        n_negative = 0
        n_non_finite = 0
        for name in REQUIRED_FIELDS:
            array = getattr(self, name)
            negatives = int(np.sum(array < 0))
            non_finite = int(np.sum(~np.isfinite(array)))
            if negatives:
                logger.warning(f"Found {negatives} negative values in {name}")
            if non_finite:
                logger.warning(f"Found {non_finite} non-finite values in {name}")
            n_negative += negatives
            n_non_finite += non_finite
        report['negative_entries'] = n_negative
        report['non_finite_entries'] = n_non_finite

        return report
