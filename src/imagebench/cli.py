"""Command-line entry point.

Usage:
    imagebench
    imagebench --workload kitchen-sink,encode-png --backend pillow --iterations 20
    imagebench --save-images --output-dir outputs
    python -m imagebench --list
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from imagebench._timing import TIMING_ENV, is_timing_enabled
from imagebench.backends import BACKEND_FACTORIES, select_backends
from imagebench.context import create_bench_context
from imagebench.errors import BenchmarkConfigError
from imagebench.report import assemble_report, collect_environment_info, write_reports
from imagebench.results import CaseStatistics
from imagebench.suite import (
    DEFAULT_ITERATIONS,
    DEFAULT_WARMUP,
    CaseOutcome,
    SuiteConfig,
    run_suite,
)
from imagebench.workloads import ALL_WORKLOADS

__all__ = ["build_parser", "main"]

logger = logging.getLogger("imagebench.cli")

WARMUP_ENV = "IMAGEBENCH_WARMUP"
ITERATIONS_ENV = "IMAGEBENCH_ITERATIONS"
DEFAULT_OUTPUT_DIR = Path("outputs")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise BenchmarkConfigError(
            "E2002", f"{name} must be an integer (got {raw!r})"
        ) from None


def build_parser() -> argparse.ArgumentParser:
    """Argument parser for the ``imagebench`` command."""
    parser = argparse.ArgumentParser(
        prog="imagebench",
        description="Benchmark Python image generation backends on identical workloads",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Workloads: {", ".join(w.value for w in ALL_WORKLOADS)}
Backends:  {", ".join(BACKEND_FACTORIES)}

Defaults for --warmup and --iterations can be set with {WARMUP_ENV} and
{ITERATIONS_ENV}.
        """,
    )
    parser.add_argument(
        "--workload",
        action="append",
        metavar="NAME[,NAME...]",
        help="Workload(s) to run; repeatable. Defaults to all.",
    )
    parser.add_argument(
        "--backend",
        action="append",
        metavar="NAME[,NAME...]",
        help="Backend(s) to run; repeatable. Defaults to all.",
    )
    parser.add_argument(
        "--iterations", type=int, default=None, help="Measured iterations per case"
    )
    parser.add_argument(
        "--warmup", type=int, default=None, help="Warmup iterations per case"
    )
    parser.add_argument(
        "--save-images",
        action="store_true",
        help="Save the first image produced by each successful case",
    )
    parser.add_argument(
        "--save-dir",
        type=Path,
        default=None,
        help="Directory for saved images (implies --save-images)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help="Directory for the JSON and Markdown reports",
    )
    parser.add_argument(
        "--fixtures-dir",
        type=Path,
        default=None,
        help="Directory with background.png, avatar.png and guild.png; "
        "fixtures are synthesized when omitted",
    )
    parser.add_argument(
        "--no-heap-trace",
        action="store_true",
        help="Do not trace Python allocations (heap columns read 0)",
    )
    parser.add_argument(
        "--list", action="store_true", help="List workloads and backends, then exit"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser


def _print_listing() -> None:
    print("Workloads:")
    for workload in ALL_WORKLOADS:
        print(f"  {workload.value}")
    print("Backends:")
    for backend in select_backends():
        print(f"  {backend.name}")


def _print_progress(outcome: CaseOutcome) -> None:
    if isinstance(outcome, CaseStatistics):
        print(
            f"running {outcome.backend} :: {outcome.workload} ... "
            f"avg {outcome.avg_ms:.3f} ms"
        )
    else:
        print(f"running {outcome.backend} :: {outcome.workload} ... skipped")


def _build_config(args: argparse.Namespace) -> SuiteConfig:
    warmup = args.warmup if args.warmup is not None else _env_int(WARMUP_ENV, DEFAULT_WARMUP)
    iterations = (
        args.iterations
        if args.iterations is not None
        else _env_int(ITERATIONS_ENV, DEFAULT_ITERATIONS)
    )
    save_samples = args.save_images or args.save_dir is not None
    save_dir = (
        args.save_dir if args.save_dir is not None else args.output_dir / "samples"
    )
    return SuiteConfig(
        workloads=args.workload,
        warmup=warmup,
        iterations=iterations,
        save_samples=save_samples,
        save_dir=save_dir,
        trace_heap=not args.no_heap_trace,
    )


def main(argv: list[str] | None = None) -> int:
    """Run the benchmark suite from the command line.

    Returns
    -------
    int
        Process exit status. Invalid arguments exit through
        ``parser.error`` with status 2.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.list:
        _print_listing()
        return 0

    try:
        config = _build_config(args)
        backends = select_backends(args.backend)
        context = create_bench_context(args.fixtures_dir)
    except BenchmarkConfigError as error:
        parser.error(str(error))

    print("=" * 60)
    print("IMAGE BACKEND BENCHMARK")
    print("=" * 60)
    print(f"Workloads: {', '.join(w.value for w in config.workloads)}")
    print(f"Backends: {', '.join(b.name for b in backends)}")
    print(f"Warmup: {config.warmup}, iterations: {config.iterations}")
    if is_timing_enabled():
        print(f"Phase timing: on ({TIMING_ENV})")

    result = run_suite(backends, context, config, on_case=_print_progress)

    report = assemble_report(
        result, config, collect_environment_info(heap_tracing=config.trace_heap)
    )
    json_path, markdown_path = write_reports(report, args.output_dir)

    print(f"JSON report: {json_path}")
    print(f"Markdown report: {markdown_path}")
    if result.saved_samples:
        print(f"Saved {len(result.saved_samples)} image(s) to {config.save_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
