"""Process memory sampling for benchmark cases.

Resident-set size comes from ``psutil``. The "heap" figure is the amount of
memory currently allocated through Python's allocator, as reported by
``tracemalloc``; it reads as zero while tracing is off.
"""

from __future__ import annotations

import contextlib
import gc
import logging
import os
import tracemalloc
from collections.abc import Generator
from dataclasses import dataclass

import psutil

__all__ = ["MemoryProbe", "MemorySample", "force_gc", "heap_tracing"]

logger = logging.getLogger("imagebench.memory")


@dataclass(frozen=True)
class MemorySample:
    """Point-in-time memory usage of the current process, in bytes."""

    rss: int
    heap: int


def force_gc() -> None:
    """Collect garbage before a baseline or ending sample.

    Best effort: reduces noise from unreachable objects but guarantees nothing
    about memory returned to the operating system.
    """
    gc.collect()
    gc.collect()


class MemoryProbe:
    """Samples RSS and traced heap usage of this process.

    Parameters
    ----------
    pid : int, optional
        Process to observe. Defaults to the current process.
    """

    def __init__(self, pid: int | None = None) -> None:
        self._process = psutil.Process(os.getpid() if pid is None else pid)

    def sample(self) -> MemorySample:
        rss = int(self._process.memory_info().rss)
        heap = tracemalloc.get_traced_memory()[0] if tracemalloc.is_tracing() else 0
        return MemorySample(rss=rss, heap=heap)

    def collect(self) -> None:
        force_gc()


@contextlib.contextmanager
def heap_tracing(enabled: bool = True) -> Generator[bool, None, None]:
    """Keep ``tracemalloc`` running for the duration of the block.

    Tracing that was already active on entry is left running on exit, so
    nesting inside a caller's own tracing session is safe.

    Parameters
    ----------
    enabled : bool, default=True
        When False the block runs without touching ``tracemalloc``.

    Yields
    ------
    bool
        Whether heap figures are traced inside the block.
    """
    started = enabled and not tracemalloc.is_tracing()
    if started:
        tracemalloc.start()
        logger.debug("Started tracemalloc for heap sampling")
    try:
        yield tracemalloc.is_tracing()
    finally:
        if started:
            tracemalloc.stop()
            logger.debug("Stopped tracemalloc")
