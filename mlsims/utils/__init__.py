"""
Utility helpers for mlsims.
"""

from mlsims.utils.general import InvalidInputError
