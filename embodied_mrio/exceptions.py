"""
Exception taxonomy for the embodied MRIO analysis package.

Sanitized division (NaN or infinite ratios replaced by zero) is a documented
policy and never raises; only the two conditions below abort a run.
"""

import numpy as np


class MRIOError(Exception):
    """Base class for all errors raised by the analysis pipeline."""


class MissingDataError(MRIOError, ValueError):
    """
    A required input array is absent or has a shape inconsistent with the
    region/sector layout. Raised before any computation is attempted.
    """


class NumericalError(MRIOError, np.linalg.LinAlgError):
    """
    The Leontief system (I - A) is singular or ill-conditioned beyond the
    configured tolerance.

    Attributes
    ----------
    condition_number : float or None
        Condition number of (I - A) when it could be computed.
    """

    def __init__(self, message: str, condition_number: float = None):
        super().__init__(message)
        self.condition_number = condition_number
