"""Timing instrumentation for harness setup phases.

Measured benchmark latencies never go through this module; it only helps when
profiling the harness itself (backend preparation, sample writing, report
generation).

Enable it by setting the environment variable:
    IMAGEBENCH_TIMING=1 imagebench --workload text-layout

Each phase prints ``[TIMING] name: 12.34 ms`` to stderr, and the CLI banner
says when phase timing is on.
"""

from __future__ import annotations

import contextlib
import os
import sys
import time
from collections.abc import Iterator

TIMING_ENV = "IMAGEBENCH_TIMING"

_TIMING_ENABLED = bool(os.environ.get(TIMING_ENV))


def is_timing_enabled() -> bool:
    """Whether phase timing was switched on when the package was imported."""
    return _TIMING_ENABLED


@contextlib.contextmanager
def timing(phase: str) -> Iterator[None]:
    """Report the wall-clock duration of a harness phase on stderr.

    Parameters
    ----------
    phase : str
        Label printed with the elapsed time.

    Notes
    -----
    Does nothing unless ``IMAGEBENCH_TIMING`` is set. The line is printed even
    when the phase raises.
    """
    if not is_timing_enabled():
        yield
        return

    started_ns = time.perf_counter_ns()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter_ns() - started_ns) / 1e6
        sys.stderr.write(f"[TIMING] {phase}: {elapsed_ms:.2f} ms\n")
