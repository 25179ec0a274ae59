"""
Input bundle construction and loading.
"""

from .bundle import MRIOBundle
from .loader import MRIODataLoader

__all__ = ['MRIOBundle', 'MRIODataLoader']
