"""
Numerical constants and tolerance tiers.

The constants fix the behaviour of the kernels and the combination
search; the tolerance tiers are the precision expectations used by the
test suite when comparing against numpy/scipy reference results.
"""

from dataclasses import dataclass


# Gauss-Jordan: a pivot whose magnitude is <= this makes the matrix singular
PIVOT_EPSILON = 1.0e-10

# Jacobi: sweep budget before the iteration is declared failed
JACOBI_MAX_SWEEPS = 50

# Jacobi: sweeps that use the 0.2 * sum / n^2 skip threshold
JACOBI_THRESHOLD_SWEEPS = 3

# Jacobi: after this many sweeps negligible off-diagonal entries are zeroed
JACOBI_ZEROING_SWEEP = 4

# Combination search: fewest observations a stored model may use
MIN_OBSERVATIONS = 6

# Combination search: residual degrees of freedom required to add a component
MIN_RESIDUAL_DF = 4

# Combination search: default |t| a coefficient must reach
DEFAULT_T_CRITICAL = 1.2

# Combination search: retained models when the caller asks for 0
DEFAULT_MAX_COMBINATIONS = 20


@dataclass(frozen=True)
class ToleranceTier:
    """Tolerance specification for numerical comparison."""
    rtol: float
    atol: float
    name: str
    description: str


# Well-conditioned problems: kernels against numpy.linalg
CPU_FP64 = ToleranceTier(
    rtol=1e-9,
    atol=1e-10,
    name='cpu_fp64',
    description='CPU double precision, well-conditioned input',
)


# Jacobi eigenpairs: rotations stop at exact zero, residuals stay near eps * ||A||
JACOBI_FP64 = ToleranceTier(
    rtol=1e-8,
    atol=1e-9,
    name='jacobi_fp64',
    description='Cyclic Jacobi eigenpairs against A v = lambda v',
)
