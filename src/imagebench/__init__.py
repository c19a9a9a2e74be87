"""Comparative benchmarks for Python image generation backends.

**imagebench** runs the same visual workloads (decoding fixtures, compositing
a scene, laying out text, encoding PNG/WebP/SVG) against interchangeable
rendering backends and reports latency, peak memory and output size for each
(backend, workload) pair.

Core API (Top-Level Exports)
----------------------------
run_suite, SuiteConfig : Run every requested workload against every backend
CaseRunner : Warmup and measurement of a single case
create_bench_context : Shared read-only fixtures for all cases
assemble_report, write_reports : Group results and write JSON/Markdown
Workload, parse_workloads : The closed workload registry
BenchBackend : Protocol implemented by rendering backends
UnsupportedWorkloadError, BenchmarkConfigError : Error types

Submodule Organization
----------------------
backends : Pillow, matplotlib (Agg) and SVG markup adapters

    >>> from imagebench.backends import default_backends, select_backends

stats : Mean and nearest-rank percentile helpers
scene : Backend-neutral description of the drawing workloads
memory : RSS and traced-heap sampling
cli : ``imagebench`` command line

Examples
--------
>>> from imagebench import SuiteConfig, create_bench_context, run_suite
>>> from imagebench.backends import select_backends
>>> config = SuiteConfig(workloads=("text-layout",), warmup=1, iterations=3)
>>> result = run_suite(select_backends("pillow"), create_bench_context(), config)  # doctest: +SKIP
>>> result.stats[0].output_kind  # doctest: +SKIP
'metric'
"""

from imagebench._protocols import BenchBackend
from imagebench.context import BenchContext, create_bench_context
from imagebench.errors import BenchmarkConfigError, UnsupportedWorkloadError
from imagebench.report import (
    BenchmarkReport,
    assemble_report,
    collect_environment_info,
    write_reports,
)
from imagebench.results import (
    CaseStatistics,
    ImageResult,
    MetricResult,
    SavedSample,
    SkipRecord,
)
from imagebench.runner import CaseRunner, CaseState, run_case
from imagebench.suite import SuiteConfig, SuiteResult, run_suite
from imagebench.workloads import ALL_WORKLOADS, Workload, parse_workloads

__version__ = "0.1.0"

__all__ = [
    "ALL_WORKLOADS",
    "BenchBackend",
    "BenchContext",
    "BenchmarkConfigError",
    "BenchmarkReport",
    "CaseRunner",
    "CaseState",
    "CaseStatistics",
    "ImageResult",
    "MetricResult",
    "SavedSample",
    "SkipRecord",
    "SuiteConfig",
    "SuiteResult",
    "UnsupportedWorkloadError",
    "Workload",
    "__version__",
    "assemble_report",
    "collect_environment_info",
    "create_bench_context",
    "parse_workloads",
    "run_case",
    "run_suite",
    "write_reports",
]
