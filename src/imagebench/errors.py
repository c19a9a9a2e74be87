"""Exception types shared by the harness and its backends.

Two failure families matter to the suite:

- ``UnsupportedWorkloadError`` is raised by a backend that structurally cannot
  perform a workload (for example an encoder it does not have). The case runner
  recovers from it and records a skip.
- ``BenchmarkConfigError`` is raised before any case runs when the requested
  configuration is invalid.

Every other exception raised while a case runs is treated as fatal and is
propagated to the caller unchanged.
"""

from __future__ import annotations

__all__ = ["BenchmarkConfigError", "UnsupportedWorkloadError"]


class UnsupportedWorkloadError(Exception):
    """Raised by a backend that cannot perform the requested workload.

    Parameters
    ----------
    workload : str
        Name of the workload that was requested.
    detail : str
        Human-readable explanation of why the backend cannot perform it.

    Examples
    --------
    >>> err = UnsupportedWorkloadError("encode-svg", "raster-only backend")
    >>> str(err)
    'encode-svg: raster-only backend'
    >>> err.workload, err.detail
    ('encode-svg', 'raster-only backend')
    """

    def __init__(self, workload: str, detail: str) -> None:
        super().__init__(f"{workload}: {detail}")
        self.workload = str(workload)
        self.detail = detail

    def __reduce__(self):
        return (type(self), (self.workload, self.detail))


class BenchmarkConfigError(ValueError):
    """Raised when a suite configuration is rejected before running.

    The message is prefixed with an error code so that reports and issue
    threads can refer to the failure precisely:

    - ``E2001``: unknown workload name
    - ``E2002``: non-positive warmup or iteration count
    - ``E2003``: empty workload list
    - ``E2004``: unknown backend name
    - ``E2005``: missing or empty fixture file

    Parameters
    ----------
    error_code : str
        Code of the failure, e.g. ``"E2001"``.
    message : str
        Description of what was rejected, including the offending value.

    Notes
    -----
    Inherits from ``ValueError`` so callers that validate user input with a
    generic ``except ValueError`` keep working.
    """

    def __init__(self, error_code: str, message: str) -> None:
        super().__init__(f"[{error_code}] {message}")
        self.error_code = error_code

    def __reduce__(self):
        message = str(self).removeprefix(f"[{self.error_code}] ")
        return (type(self), (self.error_code, message))
