"""Report assembly and serialization.

:func:`assemble_report` is a pure regrouping of a :class:`SuiteResult`: cases
grouped by workload and sorted by average latency, with skips and saved
samples kept alongside. The serializers below consume the assembled report
and add no analysis of their own.
"""

from __future__ import annotations

import gc
import json
import logging
import platform
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from imagebench._timing import timing
from imagebench.results import CaseStatistics, SavedSample, SkipRecord

if TYPE_CHECKING:
    from imagebench.suite import SuiteConfig, SuiteResult

__all__ = [
    "JSON_REPORT_NAME",
    "MARKDOWN_REPORT_NAME",
    "BenchmarkReport",
    "EnvironmentInfo",
    "WorkloadGroup",
    "assemble_report",
    "collect_environment_info",
    "format_output",
    "render_markdown",
    "report_to_dict",
    "write_reports",
]

logger = logging.getLogger("imagebench.report")

JSON_REPORT_NAME = "benchmark-report.json"
MARKDOWN_REPORT_NAME = "benchmark-report.md"


@dataclass(frozen=True)
class EnvironmentInfo:
    """Where and when a report was produced."""

    generated_at: str
    python: str
    implementation: str
    platform: str
    cpu: str
    gc_enabled: bool
    heap_tracing: bool


@dataclass(frozen=True)
class WorkloadGroup:
    """Successful cases of one workload, fastest first."""

    workload: str
    stats: tuple[CaseStatistics, ...]


@dataclass(frozen=True)
class BenchmarkReport:
    """Structured summary of one suite run."""

    environment: EnvironmentInfo
    workloads: tuple[str, ...]
    warmup: int
    iterations: int
    groups: tuple[WorkloadGroup, ...]
    stats: tuple[CaseStatistics, ...]
    skipped: tuple[SkipRecord, ...]
    saved_samples: tuple[SavedSample, ...]


def collect_environment_info(*, heap_tracing: bool) -> EnvironmentInfo:
    """Snapshot interpreter and platform identifiers for a report."""
    return EnvironmentInfo(
        generated_at=datetime.now(timezone.utc).isoformat(),
        python=platform.python_version(),
        implementation=sys.implementation.name,
        platform=f"{sys.platform}-{platform.machine() or 'unknown'}",
        cpu=platform.processor() or "unknown",
        gc_enabled=gc.isenabled(),
        heap_tracing=heap_tracing,
    )


def assemble_report(
    result: SuiteResult, config: SuiteConfig, environment: EnvironmentInfo
) -> BenchmarkReport:
    """Group suite statistics by workload.

    Parameters
    ----------
    result : SuiteResult
        Outcomes of a suite run.
    config : SuiteConfig
        Configuration the suite ran with; its workload order fixes the group
        order.
    environment : EnvironmentInfo
        Metadata to embed in the report.

    Returns
    -------
    BenchmarkReport
        One group per requested workload (possibly empty), each sorted
        ascending by ``avg_ms``; ties keep execution order.
    """
    workloads = tuple(str(workload) for workload in config.workloads)
    groups = tuple(
        WorkloadGroup(
            workload=workload,
            stats=tuple(
                sorted(
                    (entry for entry in result.stats if entry.workload == workload),
                    key=lambda entry: entry.avg_ms,
                )
            ),
        )
        for workload in workloads
    )
    return BenchmarkReport(
        environment=environment,
        workloads=workloads,
        warmup=config.warmup,
        iterations=config.iterations,
        groups=groups,
        stats=tuple(result.stats),
        skipped=tuple(result.skipped),
        saved_samples=tuple(result.saved_samples),
    )


def report_to_dict(report: BenchmarkReport) -> dict[str, Any]:
    """JSON-ready representation of ``report``."""
    env = report.environment
    return {
        "generatedAt": env.generated_at,
        "python": env.python,
        "implementation": env.implementation,
        "platform": env.platform,
        "cpu": env.cpu,
        "gcEnabled": env.gc_enabled,
        "heapTracing": env.heap_tracing,
        "workloads": list(report.workloads),
        "warmup": report.warmup,
        "iterations": report.iterations,
        "stats": [entry.to_dict() for entry in report.stats],
        "skipped": [entry.to_dict() for entry in report.skipped],
        "savedSamples": [entry.to_dict() for entry in report.saved_samples],
    }


def format_output(stats: CaseStatistics) -> str:
    """Human-readable output size: KB for images, the raw value otherwise."""
    if stats.output_kind == "image":
        return f"{round(stats.output_average / 1024, 2)} KB"
    return f"{round(stats.output_average, 2)}"


def _escape_cell(text: str) -> str:
    return text.replace("|", "\\|")


def render_markdown(report: BenchmarkReport) -> str:
    """Render ``report`` as a Markdown document with one table per workload."""
    env = report.environment
    lines: list[str] = [
        "# Python Image Library Benchmark Report",
        "",
        f"Generated: {env.generated_at}",
        f"- Python: {env.python} ({env.implementation})",
        f"- Platform: {env.platform}",
        f"- CPU: {env.cpu}",
        f"- GC enabled: {'yes' if env.gc_enabled else 'no'}",
        f"- Heap tracing: {'yes' if env.heap_tracing else 'no'}",
        f"- Warmup iterations: {report.warmup}",
        f"- Measured iterations: {report.iterations}",
        "",
        "## Method",
        "",
        "- `image-stream` reads in-memory streams over preloaded fixture buffers (disk I/O excluded).",
        "- Memory columns are per-case peak deltas from a per-case baseline (RSS, traced heap).",
        "- P95 is nearest-rank over the measured iterations.",
        "- `text-layout`: raster backends report summed text advance widths; markup backends report document size.",
        "",
    ]

    for group in report.groups:
        lines.append(f"## {group.workload}")
        lines.append("")

        if not group.stats:
            lines.append("No successful runs.")
            lines.append("")
            continue

        lines.append(
            "| Backend | Avg (ms) | P95 (ms) | Min (ms) | Max (ms) "
            "| RSS peak Δ (MB) | Heap peak Δ (MB) | Output |"
        )
        lines.append("|---|---:|---:|---:|---:|---:|---:|---:|")
        for row in group.stats:
            lines.append(
                f"| {_escape_cell(row.backend)} | {row.avg_ms:.3f} | {row.p95_ms:.3f} "
                f"| {row.min_ms:.3f} | {row.max_ms:.3f} | {row.rss_peak_delta_mb:.3f} "
                f"| {row.heap_peak_delta_mb:.3f} | {format_output(row)} |"
            )
        lines.append("")

    if report.skipped:
        lines.extend(
            ["## Unsupported / Skipped", "", "| Backend | Workload | Reason |", "|---|---|---|"]
        )
        for skip in report.skipped:
            lines.append(
                f"| {_escape_cell(skip.backend)} | {skip.workload} | {_escape_cell(skip.reason)} |"
            )
        lines.append("")

    if report.saved_samples:
        lines.extend(
            [
                "## Saved Images",
                "",
                "| Backend | Workload | Format | Path |",
                "|---|---|---|---|",
            ]
        )
        for saved in report.saved_samples:
            lines.append(
                f"| {_escape_cell(saved.backend)} | {saved.workload} | {saved.format} "
                f"| {_escape_cell(str(saved.path))} |"
            )
        lines.append("")

    return "\n".join(lines)


def write_reports(report: BenchmarkReport, output_dir: str | Path) -> tuple[Path, Path]:
    """Write the JSON and Markdown reports into ``output_dir``.

    Returns
    -------
    json_path, markdown_path : Path
        Paths of the written files.
    """
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    json_path = directory / JSON_REPORT_NAME
    markdown_path = directory / MARKDOWN_REPORT_NAME

    with timing("write_reports"):
        json_path.write_text(
            json.dumps(report_to_dict(report), indent=2) + "\n", encoding="utf-8"
        )
        markdown_path.write_text(render_markdown(report), encoding="utf-8")

    logger.info("Wrote reports to %s", directory)
    return json_path, markdown_path
