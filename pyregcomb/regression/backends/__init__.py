"""
Combination search backends.

Available backends:
    CPUCombinationBackend: Gauss-Jordan inversion, Jacobi eigenvectors
"""

from pyregcomb.regression.backends.cpu import CPUCombinationBackend

__all__ = [
    "CPUCombinationBackend",
]
