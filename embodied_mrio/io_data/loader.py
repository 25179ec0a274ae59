"""
Preprocessed MRIO bundle loader.

This module reads the per-year bundles produced by the upstream
preprocessing step (provincial MRIO tables aggregated to three sectors, joined
with employment and value-added statistics) and turns them into validated
``MRIOBundle`` objects.

Bundles are stored as ``{year}_MRIO_preprocessed.mat`` (MATLAB format, read
with scipy) or ``{year}_MRIO_preprocessed.npz`` (numpy archive). Both hold the
same variables:

- Mid_use: intermediate use matrix (N x N)
- Final_use2: final demand by destination region (N x R)
- Total_output: total output (N)
- Total_input: total input (1 x N row vector)
- Empl: employment (N)
- Total_add_value: value-added (1 x N row vector)

Other variables in the file (raw final use, exports, imports, ...) are
ignored.
"""

from pathlib import Path
from typing import Dict, List, Mapping, Optional

import numpy as np
from scipy import io as scipy_io

from embodied_mrio import config
from embodied_mrio.analysis.regions import RegionBlocks
from embodied_mrio.exceptions import MissingDataError
from embodied_mrio.io_data.bundle import MRIOBundle
from embodied_mrio.utils.logging_config import setup_logger

logger = setup_logger(__name__)


class MRIODataLoader:
    """
    Loader for preprocessed MRIO bundles, one file per table year.

    Attributes
    ----------
    input_folder : Path
        Directory containing the bundle files.
    blocks : RegionBlocks
        Region layout every bundle must conform to.
    variables : Dict[str, str]
        Mapping from bundle field to the variable name stored in the file.

    Examples
    --------
    >>> loader = MRIODataLoader(Path("data/mrio_bundles"))
    >>> bundle = loader.load_year(2012)
    >>> bundle.final_demand.shape
    (93, 31)
    """

    def __init__(
        self,
        input_folder: Path,
        blocks: Optional[RegionBlocks] = None,
        variables: Optional[Mapping[str, str]] = None
    ):
        """
        Initialize the bundle loader.

        Parameters
        ----------
        input_folder : Path
            Directory containing bundle files.
        blocks : RegionBlocks, optional
            Region layout, by default ``config.N_REGIONS`` x ``config.N_SECTORS``
            with ``config.REGION_NAMES``.
        variables : Mapping[str, str], optional
            Field-to-variable names, by default ``config.BUNDLE_VARIABLES``.
        """
        self.input_folder = Path(input_folder)
        self.blocks = blocks if blocks is not None else RegionBlocks.uniform(
            config.N_REGIONS, config.N_SECTORS, config.REGION_NAMES
        )
        self.variables = dict(variables if variables is not None else config.BUNDLE_VARIABLES)

        logger.info("MRIO loader initialized")
        logger.info(f"  Input folder: {self.input_folder}")
        logger.info(f"  Layout: {self.blocks.n_regions} regions, {self.blocks.n_sectors_total} sectors")

    def bundle_path(self, year: int) -> Path:
        """
        Locate the bundle file of ``year``, preferring ``.mat`` over ``.npz``.

        Raises
        ------
        MissingDataError
            If no bundle file exists for the year.
        """
        stem = config.BUNDLE_FILENAME_TEMPLATE.format(year=year)
        for extension in config.BUNDLE_EXTENSIONS:
            candidate = self.input_folder / f"{stem}{extension}"
            if candidate.exists():
                return candidate

        raise MissingDataError(
            f"No MRIO bundle found for year {year} in {self.input_folder} "
            f"(looked for {stem} with extensions {', '.join(config.BUNDLE_EXTENSIONS)})"
        )

    def _read_variables(self, path: Path) -> Dict[str, np.ndarray]:
        """Read the configured variables from a .mat or .npz file."""
        names = list(self.variables.values())

        if path.suffix == '.mat':
            contents = scipy_io.loadmat(str(path), variable_names=names)
            return {name: contents[name] for name in names if name in contents}

        with np.load(path, allow_pickle=False) as archive:
            return {name: archive[name] for name in names if name in archive.files}

    def load_year(
        self,
        year: int,
        validate: bool = True
    ) -> MRIOBundle:
        """
        Load the MRIO bundle of a specific year.

        Parameters
        ----------
        year : int
            Table year (e.g., 2012).
        validate : bool, optional
            Whether to log data-quality observations, by default True.
            Shape validation always happens.

        Returns
        -------
        MRIOBundle
            Validated bundle labeled with the year.

        Raises
        ------
        MissingDataError
            If the file or one of its variables is missing, or shapes are
            inconsistent with the layout.
        """
        path = self.bundle_path(year)
        logger.info(f"Loading MRIO bundle for year {year} from {path.name}...")

        raw = self._read_variables(path)

        missing = [var for var in self.variables.values() if var not in raw]
        if missing:
            raise MissingDataError(f"{path.name} is missing variables: {', '.join(missing)}")

        arrays = {field: raw[var] for field, var in self.variables.items()}
        bundle = MRIOBundle.from_arrays(arrays, self.blocks, label=str(year))

        if validate:
            bundle.check_data_quality(tolerance=config.ACCOUNTING_TOLERANCE)

        logger.info(f"Successfully loaded {year} bundle:")
        logger.info(f"  Dimensions: {bundle.n_sectors} sectors x {bundle.n_regions} regions")

        return bundle

    def load_multiple_years(
        self,
        years: List[int],
        validate: bool = True
    ) -> Dict[int, MRIOBundle]:
        """
        Load bundles for multiple years, skipping years that fail to load.

        Parameters
        ----------
        years : List[int]
            Years to load.
        validate : bool, optional
            Whether to log data-quality observations, by default True.

        Returns
        -------
        Dict[int, MRIOBundle]
            Dictionary mapping year to its bundle.
        """
        results = {}
        for year in years:
            try:
                results[year] = self.load_year(year, validate=validate)
            except MissingDataError as e:
                logger.error(f"Failed to load year {year}: {e}")
                continue

        logger.info(f"Successfully loaded {len(results)}/{len(years)} years")
        return results
