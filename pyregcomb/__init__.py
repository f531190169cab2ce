"""
pyregcomb: combinatorial best-subset and principal components regression.

Searches combinations of independent variables, screens each fit for
significance and coefficient signs, and keeps the equations with the
smallest standard error. Missing observations are marked by sentinels.

Submodules:
    regression: Combination search, OLS fits, missing-value filling
    core: Exceptions, result envelope, validation, linear algebra kernels
"""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from pyregcomb import regression  # noqa: E402

__all__ = [
    "__version__",
    "regression",
]
