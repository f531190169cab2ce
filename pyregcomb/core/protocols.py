"""
Core protocols for pyregcomb.

Structural interfaces that designs and backends satisfy. Protocol
(structural typing) rather than ABC, so a backend only has to look right.
"""

from typing import Any, Protocol, TypeVar, runtime_checkable

P = TypeVar('P', covariant=True)  # Parameter payload type
D = TypeVar('D', contravariant=True)  # Design type


@runtime_checkable
class DataSource(Protocol):
    """
    Minimal protocol for a data container fed to a backend.

    SearchDesign implements this; the metadata dict is unstructured and
    describes the problem (observations, variables, sentinels).
    """

    @property
    def n_observations(self) -> int:
        """Number of observations (rows)."""
        ...

    @property
    def metadata(self) -> dict[str, Any]:
        """Domain-specific metadata."""
        ...


@runtime_checkable
class Backend(Protocol[D, P]):
    """
    Protocol for computational backends.

    A backend takes a validated design and produces a Result envelope
    around a parameter payload. Backends hold no state between calls;
    everything a run needs lives in the design or in per-call scratch.

    Type Parameters:
        D: The design type this backend accepts
        P: The parameter payload type this backend produces
    """

    @property
    def name(self) -> str:
        """
        Backend identifier.

        Convention: '{device}_{algorithm}', e.g. 'cpu_gauss_jordan'.
        """
        ...

    def solve(self, design: D) -> 'Result[P]':
        """
        Execute the computation.

        Raises:
            ConvergenceError: If the eigenvalue iteration fails
            NumericalError: If a required inversion is singular
            NoValidModelError: If nothing survives screening
        """
        ...
