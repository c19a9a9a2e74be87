"""Execution of a single (backend, workload) case.

A case goes through ``IDLE -> WARMING -> MEASURING -> DONE``:

1. Warming: ``run`` is invoked ``warmup`` times; outputs and timings are
   discarded so lazy caches inside the backend are primed without polluting
   the statistics.
2. Baseline: garbage is collected and a memory sample is taken. Each case has
   its own baseline so memory retained by earlier cases does not bias later
   ones.
3. Measuring: ``run`` is invoked ``iterations`` times. Each call is timed with
   ``time.perf_counter``; its output size is recorded and memory is sampled to
   keep running RSS and heap peaks.
4. Done: garbage is collected again, an ending sample is taken and the
   statistics record is computed.

A backend raising :class:`~imagebench.errors.UnsupportedWorkloadError` at any
point of warming or measuring ends the case in ``SKIPPED`` instead of
``DONE``. Any other exception propagates to the caller.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from imagebench.errors import BenchmarkConfigError, UnsupportedWorkloadError
from imagebench.memory import MemoryProbe
from imagebench.results import (
    CaseSample,
    CaseStatistics,
    ImageResult,
    OutputKind,
    SkipRecord,
    output_unit,
    output_value,
)
from imagebench.stats import mean, percentile, round_ms, to_megabytes

if TYPE_CHECKING:
    from imagebench._protocols import BenchBackend
    from imagebench.context import BenchContext
    from imagebench.workloads import Workload

__all__ = ["CaseRun", "CaseRunner", "CaseState", "run_case"]

logger = logging.getLogger("imagebench.runner")

P95 = 0.95


class CaseState(str, Enum):
    IDLE = "idle"
    WARMING = "warming"
    MEASURING = "measuring"
    DONE = "done"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class CaseRun:
    """Outcome of a successful case.

    Attributes
    ----------
    stats : CaseStatistics
        Aggregated measurements.
    sample : CaseSample or None
        First image produced during measuring, when sampling was requested
        and the backend produced an image.
    latencies_ms : tuple of float
        Raw per-iteration latencies, unrounded.
    """

    stats: CaseStatistics
    sample: CaseSample | None
    latencies_ms: tuple[float, ...]


class CaseRunner:
    """Runs one backend against one workload.

    Parameters
    ----------
    backend : BenchBackend
        Backend under test. Its ``prepare`` hook is not called here; that is
        the orchestrator's job.
    workload : Workload
        Workload to perform.
    context : BenchContext
        Shared read-only fixtures.
    warmup : int
        Number of discarded warmup invocations.
    iterations : int
        Number of measured invocations.
    capture_sample : bool, default=False
        Keep the first image produced during measuring.
    probe : MemoryProbe, optional
        Memory sampler. A new :class:`MemoryProbe` is created when omitted.

    Attributes
    ----------
    state : CaseState
        Current phase; ``DONE`` or ``SKIPPED`` once :meth:`run` returns.
    """

    def __init__(
        self,
        backend: BenchBackend,
        workload: Workload,
        context: BenchContext,
        *,
        warmup: int,
        iterations: int,
        capture_sample: bool = False,
        probe: MemoryProbe | None = None,
    ) -> None:
        if iterations < 1:
            raise BenchmarkConfigError(
                "E2002", f"iterations must be a positive integer (got {iterations})"
            )
        if warmup < 0:
            raise BenchmarkConfigError(
                "E2002", f"warmup must not be negative (got {warmup})"
            )
        self.backend = backend
        self.workload = workload
        self.context = context
        self.warmup = warmup
        self.iterations = iterations
        self.capture_sample = capture_sample
        self.probe = probe if probe is not None else MemoryProbe()
        self.state = CaseState.IDLE

    def run(self) -> CaseRun | SkipRecord:
        """Execute the case.

        Returns
        -------
        CaseRun or SkipRecord
            ``SkipRecord`` when the backend declared the workload unsupported.

        Raises
        ------
        RuntimeError
            If the runner was already used.
        Exception
            Anything other than ``UnsupportedWorkloadError`` raised by the
            backend or by instrumentation, unchanged.
        """
        if self.state is not CaseState.IDLE:
            raise RuntimeError(
                f"CaseRunner for {self.backend.name} :: {self.workload} "
                f"already ran (state={self.state.value})"
            )

        try:
            self._warm()
            return self._measure()
        except UnsupportedWorkloadError as error:
            self.state = CaseState.SKIPPED
            logger.info(
                "%s :: %s unsupported: %s", self.backend.name, self.workload, error
            )
            return SkipRecord(
                backend=self.backend.name,
                workload=str(self.workload),
                reason=str(error),
            )

    def _warm(self) -> None:
        self.state = CaseState.WARMING
        for _ in range(self.warmup):
            self.backend.run(self.context, self.workload)

    def _measure(self) -> CaseRun:
        self.probe.collect()
        baseline = self.probe.sample()
        self.state = CaseState.MEASURING

        latencies: list[float] = []
        outputs: list[float] = []
        rss_peak = baseline.rss
        heap_peak = baseline.heap
        kind: OutputKind = "metric"
        sample: CaseSample | None = None

        for _ in range(self.iterations):
            start = time.perf_counter()
            result = self.backend.run(self.context, self.workload)
            end = time.perf_counter()

            latencies.append((end - start) * 1000.0)
            outputs.append(output_value(result))
            kind = result.kind

            if self.capture_sample and sample is None and isinstance(result, ImageResult):
                sample = CaseSample(payload=result.payload, format=result.format)

            current = self.probe.sample()
            rss_peak = max(rss_peak, current.rss)
            heap_peak = max(heap_peak, current.heap)

        self.probe.collect()
        ending = self.probe.sample()
        self.state = CaseState.DONE

        stats = CaseStatistics(
            backend=self.backend.name,
            workload=str(self.workload),
            iterations=self.iterations,
            warmup=self.warmup,
            avg_ms=round_ms(mean(latencies)),
            p95_ms=round_ms(percentile(latencies, P95)),
            min_ms=round_ms(min(latencies)),
            max_ms=round_ms(max(latencies)),
            rss_peak_delta_mb=round_ms(to_megabytes(rss_peak - baseline.rss)),
            heap_peak_delta_mb=round_ms(to_megabytes(heap_peak - baseline.heap)),
            heap_end_delta_mb=round_ms(to_megabytes(ending.heap - baseline.heap)),
            output_kind=kind,
            output_average=round_ms(mean(outputs)),
            output_unit=output_unit(kind),
        )
        logger.info(
            "%s :: %s finished %d iterations, avg %.3f ms",
            self.backend.name,
            self.workload,
            self.iterations,
            stats.avg_ms,
        )
        return CaseRun(stats=stats, sample=sample, latencies_ms=tuple(latencies))


def run_case(
    backend: BenchBackend,
    workload: Workload,
    context: BenchContext,
    *,
    warmup: int,
    iterations: int,
    capture_sample: bool = False,
    probe: MemoryProbe | None = None,
) -> CaseRun | SkipRecord:
    """Run one case; shortcut for ``CaseRunner(...).run()``."""
    return CaseRunner(
        backend,
        workload,
        context,
        warmup=warmup,
        iterations=iterations,
        capture_sample=capture_sample,
        probe=probe,
    ).run()
