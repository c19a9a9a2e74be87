"""Suite orchestration: every requested workload against every backend.

Cases run strictly one after another, workload-major and backend-minor, in
the order given by the configuration and the backend list. Wall-clock timing
and peak-memory tracking both need an undisturbed process, so nothing here is
parallel.
"""

from __future__ import annotations

import logging
import numbers
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Union

from imagebench._timing import timing
from imagebench.errors import BenchmarkConfigError
from imagebench.memory import MemoryProbe, heap_tracing
from imagebench.results import CaseSample, CaseStatistics, SavedSample, SkipRecord
from imagebench.runner import run_case
from imagebench.workloads import ALL_WORKLOADS, Workload, parse_workloads

if TYPE_CHECKING:
    from imagebench._protocols import BenchBackend
    from imagebench.context import BenchContext

__all__ = [
    "DEFAULT_ITERATIONS",
    "DEFAULT_SAVE_DIR",
    "DEFAULT_WARMUP",
    "CaseOutcome",
    "SuiteConfig",
    "SuiteResult",
    "run_suite",
    "safe_file_name",
    "write_sample",
]

logger = logging.getLogger("imagebench.suite")

DEFAULT_WARMUP = 3
DEFAULT_ITERATIONS = 12
DEFAULT_SAVE_DIR = Path("outputs") / "samples"

CaseOutcome = Union[CaseStatistics, SkipRecord]


def _validate_count(label: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value <= 0:
        raise BenchmarkConfigError(
            "E2002", f"{label} must be a positive integer (got {value!r})"
        )
    return int(value)


@dataclass(frozen=True)
class SuiteConfig:
    """Validated configuration of one suite run.

    Parameters
    ----------
    workloads : iterable of Workload or str, optional
        Workloads to run, in order. Strings are validated against the
        workload registry. Defaults to every workload.
    warmup : int, default=3
        Discarded invocations per case before measuring.
    iterations : int, default=12
        Measured invocations per case.
    save_samples : bool, default=False
        Persist the first image produced by each successful case.
    save_dir : str or Path, default="outputs/samples"
        Directory for persisted samples.
    trace_heap : bool, default=True
        Trace Python allocations with ``tracemalloc`` during the run so heap
        deltas are meaningful. Tracing adds the same overhead to every backend.

    Raises
    ------
    BenchmarkConfigError
        If a count is not a positive integer or the workload list is empty
        or names an unknown workload.
    """

    workloads: tuple[Workload, ...] = ALL_WORKLOADS
    warmup: int = DEFAULT_WARMUP
    iterations: int = DEFAULT_ITERATIONS
    save_samples: bool = False
    save_dir: Path = DEFAULT_SAVE_DIR
    trace_heap: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "workloads", parse_workloads(self.workloads))
        object.__setattr__(self, "warmup", _validate_count("warmup", self.warmup))
        object.__setattr__(
            self, "iterations", _validate_count("iterations", self.iterations)
        )
        object.__setattr__(self, "save_dir", Path(self.save_dir))


@dataclass
class SuiteResult:
    """Accumulated outcomes in execution order."""

    stats: list[CaseStatistics] = field(default_factory=list)
    skipped: list[SkipRecord] = field(default_factory=list)
    saved_samples: list[SavedSample] = field(default_factory=list)


def safe_file_name(text: str) -> str:
    """Lowercase ``text`` and collapse every non-alphanumeric run to ``-``.

    Examples
    --------
    >>> safe_file_name("matplotlib (agg)")
    'matplotlib-agg'
    """
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def write_sample(
    sample: CaseSample, save_dir: str | Path, backend: str, workload: str
) -> SavedSample:
    """Persist a captured sample as ``<workload>__<backend>.<format>``."""
    directory = Path(save_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / (
        f"{safe_file_name(str(workload))}__{safe_file_name(backend)}.{sample.format}"
    )
    with timing(f"write_sample {path.name}"):
        path.write_bytes(sample.payload)
    logger.debug("Saved %s sample to %s", sample.format, path)
    return SavedSample(
        backend=backend, workload=str(workload), format=sample.format, path=path
    )


def _check_backend_names(backends: list[BenchBackend]) -> None:
    seen: set[str] = set()
    for backend in backends:
        if backend.name in seen:
            raise BenchmarkConfigError(
                "E2004", f"Backend name '{backend.name}' is registered twice"
            )
        seen.add(backend.name)


def _prepare(backend: BenchBackend, context: BenchContext) -> None:
    prepare = getattr(backend, "prepare", None)
    if prepare is None:
        return
    with timing(f"prepare {backend.name}"):
        prepare(context)
    logger.debug("Prepared backend %s", backend.name)


def run_suite(
    backends: Iterable[BenchBackend],
    context: BenchContext,
    config: SuiteConfig,
    *,
    on_case: Callable[[CaseOutcome], None] | None = None,
    probe: MemoryProbe | None = None,
) -> SuiteResult:
    """Run every configured workload against every backend.

    Parameters
    ----------
    backends : iterable of BenchBackend
        Backends in registration order. Names must be unique.
    context : BenchContext
        Shared read-only fixtures passed to every invocation.
    config : SuiteConfig
        Validated run configuration.
    on_case : callable, optional
        Called after each case with its ``CaseStatistics`` or ``SkipRecord``.
    probe : MemoryProbe, optional
        Memory sampler shared by all cases.

    Returns
    -------
    SuiteResult
        Statistics, skips and saved samples in execution order.

    Raises
    ------
    BenchmarkConfigError
        If two backends share a name.
    Exception
        The first error other than ``UnsupportedWorkloadError`` raised by a
        backend's ``prepare`` or ``run``. The remaining cases are not run.

    Notes
    -----
    Each backend's optional ``prepare`` is called once, right before its first
    case. A backend raising ``UnsupportedWorkloadError`` only loses that case;
    every other (backend, workload) pair still runs.
    """
    backend_list = list(backends)
    _check_backend_names(backend_list)

    probe = probe if probe is not None else MemoryProbe()
    result = SuiteResult()
    prepared: set[int] = set()

    with heap_tracing(config.trace_heap):
        for workload in config.workloads:
            for index, backend in enumerate(backend_list):
                try:
                    if index not in prepared:
                        _prepare(backend, context)
                        prepared.add(index)

                    logger.info("running %s :: %s", backend.name, workload)
                    outcome = run_case(
                        backend,
                        workload,
                        context,
                        warmup=config.warmup,
                        iterations=config.iterations,
                        capture_sample=config.save_samples,
                        probe=probe,
                    )
                except Exception:
                    logger.error(
                        "%s :: %s failed; aborting suite", backend.name, workload
                    )
                    raise

                if isinstance(outcome, SkipRecord):
                    result.skipped.append(outcome)
                    if on_case is not None:
                        on_case(outcome)
                    continue

                result.stats.append(outcome.stats)
                if config.save_samples and outcome.sample is not None:
                    result.saved_samples.append(
                        write_sample(
                            outcome.sample, config.save_dir, backend.name, workload
                        )
                    )
                if on_case is not None:
                    on_case(outcome.stats)

    return result
