"""
Embodied employment and value-added transfers in multi-regional
input-output (MRIO) tables.
"""

__version__ = "0.1.0"
