"""
mlsims package for machine-learning simulations.

This is the Python implementation of the numeric kernels behind the
interactive machine-learning teaching pages.
"""

__version__ = '0.1.0'

from mlsims.components.config import Config, ConfigManager
from mlsims.utils.general import InvalidInputError
