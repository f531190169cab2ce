"""
Generic result container for pyregcomb computations.

The Result class is the envelope every backend returns. It carries the
domain-specific parameter payload together with metadata, timing and
provenance, so a search can be reproduced and inspected after the fact.

Design decisions:
    - Generic over parameter payload P
    - info dict for flexible metadata (counters, options used)
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True) for reproducibility
"""

from __future__ import annotations

import platform
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

P = TypeVar('P')  # Parameter payload type


def _default_provenance() -> dict[str, str]:
    """Library and interpreter versions at the time the result was built."""
    import numpy as np
    import scipy

    from pyregcomb import __version__

    return {
        'pyregcomb_version': __version__,
        'numpy_version': np.__version__,
        'scipy_version': scipy.__version__,
        'python_version': platform.python_version(),
    }


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for a computation.

    Type Parameters:
        P: The domain-specific parameter payload type

    Attributes:
        params: Domain-specific parameters (ranked models, counters, ...)
        info: Structured metadata (method, options, diagnostics)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation
        provenance: Version metadata; generated automatically unless given

    Examples:
        >>> Result(
        ...     params=SearchParams(...),
        ...     info={'method': 'pcr_combinations', 'n_candidates': 7},
        ...     timing={'total_seconds': 0.01},
        ...     backend_name='cpu_gauss_jordan',
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)
    provenance: dict[str, str] = field(default_factory=_default_provenance)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
