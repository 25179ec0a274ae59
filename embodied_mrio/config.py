"""
Configuration module for the embodied MRIO analysis package.

This module centralizes all configuration settings, avoiding hard-coded paths
and magic numbers throughout the codebase. Paths default to a ``data`` folder
in the working directory and can be redirected with the ``MRIO_BASE_FOLDER``
environment variable.
"""

import os
from pathlib import Path
from typing import List, Optional

# =============================================================================
# FILE PATHS
# =============================================================================

BASE_FOLDER = Path(os.environ.get("MRIO_BASE_FOLDER", "data"))

# Preprocessed bundles, one per year: {year}_MRIO_preprocessed.mat (or .npz)
INPUT_FOLDER = BASE_FOLDER / "mrio_bundles"
OUTPUT_FOLDER = BASE_FOLDER / "output"

BUNDLE_FILENAME_TEMPLATE = "{year}_MRIO_preprocessed"
BUNDLE_EXTENSIONS = (".mat", ".npz")

# =============================================================================
# ANALYSIS PARAMETERS
# =============================================================================

# Years for which CEADs provincial MRIO tables are available
AVAILABLE_YEARS: List[int] = [2012, 2015, 2017]
DEFAULT_YEAR = 2012

# 31 provinces x 3 sectors (aggregated from the original 42 departments)
N_REGIONS = 31
N_SECTORS = 3

# Region-major ordering: all sectors of REGION_NAMES[0] come first
REGION_NAMES: List[str] = [
    "Beijing", "Tianjin", "Hebei", "Shanxi", "Inner Mongolia",
    "Liaoning", "Jilin", "Heilongjiang", "Shanghai", "Jiangsu",
    "Zhejiang", "Anhui", "Fujian", "Jiangxi", "Shandong",
    "Henan", "Hubei", "Hunan", "Guangdong", "Guangxi",
    "Hainan", "Chongqing", "Sichuan", "Guizhou", "Yunnan",
    "Tibet", "Shaanxi", "Gansu", "Qinghai", "Ningxia",
    "Xinjiang",
]

SECTOR_NAMES: List[str] = ["Primary", "Secondary", "Tertiary"]

# Upstream variable names in the preprocessed bundle -> bundle fields
BUNDLE_VARIABLES = {
    "intermediate_use": "Mid_use",
    "final_demand": "Final_use2",
    "total_output": "Total_output",
    "total_input": "Total_input",
    "employment": "Empl",
    "value_added": "Total_add_value",
}

# =============================================================================
# COMPUTATIONAL SETTINGS
# =============================================================================

# Numerical tolerance for sanity checks on computed matrices
NUMERICAL_TOLERANCE = 1e-10

# Maximum condition number of (I - A); beyond this the run aborts
MAX_CONDITION_NUMBER = 1e12

# Solve (I - A) X = F by LU instead of multiplying by the explicit inverse
USE_LU_SOLVE = True

# Acceptable max |L (I - A) - I| before a warning is logged
IDENTITY_TOLERANCE = 1e-8

# Relative tolerance for the output accounting identity check in the loader
ACCOUNTING_TOLERANCE = 0.01

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = os.environ.get("MRIO_LOG_LEVEL", "INFO")

# Optional file that receives the driver log in addition to stdout
LOG_FILE = os.environ.get("MRIO_LOG_FILE")

# =============================================================================
# VALIDATION
# =============================================================================


def validate_config(
    input_folder: Optional[Path] = None,
    output_folder: Optional[Path] = None
) -> bool:
    """
    Validate that required paths exist and configuration is sensible.

    Parameters
    ----------
    input_folder : Path, optional
        Bundle folder to check, by default INPUT_FOLDER.
    output_folder : Path, optional
        Output folder to create, by default OUTPUT_FOLDER.

    Returns
    -------
    bool
        True if configuration is valid, False otherwise.
    """
    errors = []

    input_folder = Path(input_folder) if input_folder is not None else INPUT_FOLDER
    output_folder = Path(output_folder) if output_folder is not None else OUTPUT_FOLDER

    if not input_folder.exists():
        errors.append(f"Input folder not found: {input_folder}")

    if len(REGION_NAMES) != N_REGIONS:
        errors.append(
            f"REGION_NAMES has {len(REGION_NAMES)} entries, expected {N_REGIONS}"
        )

    if len(SECTOR_NAMES) != N_SECTORS:
        errors.append(
            f"SECTOR_NAMES has {len(SECTOR_NAMES)} entries, expected {N_SECTORS}"
        )

    if MAX_CONDITION_NUMBER <= 1:
        errors.append(f"MAX_CONDITION_NUMBER must exceed 1, got {MAX_CONDITION_NUMBER}")

    if errors:
        print("Configuration validation errors:")
        for error in errors:
            print(f"  - {error}")
        return False

    output_folder.mkdir(parents=True, exist_ok=True)

    return True


if __name__ == "__main__":
    print("Testing configuration...")
    if validate_config():
        print("Configuration valid!")
        print(f"  Input folder: {INPUT_FOLDER}")
        print(f"  Output folder: {OUTPUT_FOLDER}")
        print(f"  Layout: {N_REGIONS} regions x {N_SECTORS} sectors")
    else:
        print("Configuration invalid. Please fix errors above.")
