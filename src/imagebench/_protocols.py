"""Protocol definitions for benchmark backends.

The case runner and suite orchestrator depend only on this interface, never on
a concrete backend. Using a Protocol keeps third-party adapters free to
implement it without inheriting from anything in this package.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from imagebench.context import BenchContext
    from imagebench.results import CaseResult
    from imagebench.workloads import Workload


@runtime_checkable
class BenchBackend(Protocol):
    """Interface every rendering backend satisfies.

    Attributes
    ----------
    name : str
        Display name used in progress output and reports. Must be unique among
        the backends of one suite run.

    Notes
    -----
    Backends may additionally define ``prepare(context) -> None`` for one-time
    setup such as font registration. It is optional and therefore not part of
    the Protocol; the orchestrator looks it up with ``getattr`` and calls it
    once before the backend's first case. Implementations must make it
    idempotent and keep any initialization state on the instance.

    ``run`` signals a structurally impossible workload by raising
    :class:`imagebench.errors.UnsupportedWorkloadError`. Any other exception
    aborts the suite.
    """

    name: str

    def run(self, context: BenchContext, workload: Workload) -> CaseResult:
        """Perform one workload and return its output."""
        ...
