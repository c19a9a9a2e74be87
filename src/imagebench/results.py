"""Result records produced by backends, the case runner and the suite."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Literal, Union

__all__ = [
    "CaseResult",
    "CaseSample",
    "CaseStatistics",
    "ImageFormat",
    "ImageResult",
    "MetricResult",
    "OutputKind",
    "OutputUnit",
    "SavedSample",
    "SkipRecord",
    "output_unit",
    "output_value",
]

ImageFormat = Literal["png", "webp", "svg"]
OutputKind = Literal["image", "metric"]
OutputUnit = Literal["bytes", "value"]


@dataclass(frozen=True)
class ImageResult:
    """Encoded image returned by one backend invocation.

    Parameters
    ----------
    payload : bytes
        Encoded image data.
    format : {"png", "webp", "svg"}
        Declared encoding of ``payload``.
    """

    payload: bytes = field(repr=False)
    format: ImageFormat
    kind: Literal["image"] = field(default="image", init=False)

    @property
    def byte_length(self) -> int:
        """Size of the encoded payload in bytes."""
        return len(self.payload)


@dataclass(frozen=True)
class MetricResult:
    """Scalar measurement returned by one backend invocation.

    Parameters
    ----------
    value : float
        The measured quantity, e.g. the summed advance width of laid-out text.
    """

    value: float
    kind: Literal["metric"] = field(default="metric", init=False)


CaseResult = Union[ImageResult, MetricResult]


def output_value(result: CaseResult) -> float:
    """Numeric projection of a result: byte length for images, value for metrics."""
    if isinstance(result, ImageResult):
        return float(result.byte_length)
    if isinstance(result, MetricResult):
        return float(result.value)
    raise TypeError(
        f"Backend returned {type(result).__name__}; expected ImageResult or MetricResult"
    )


def output_unit(kind: OutputKind) -> OutputUnit:
    """Unit tag for an output kind."""
    return "bytes" if kind == "image" else "value"


@dataclass(frozen=True)
class CaseStatistics:
    """Aggregated measurements for one (backend, workload) case.

    Latencies are in milliseconds. Memory figures are in megabytes and relative
    to the baseline taken right before the case's measured loop.
    """

    backend: str
    workload: str
    iterations: int
    warmup: int
    avg_ms: float
    p95_ms: float
    min_ms: float
    max_ms: float
    rss_peak_delta_mb: float
    heap_peak_delta_mb: float
    heap_end_delta_mb: float
    output_kind: OutputKind
    output_average: float
    output_unit: OutputUnit

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SkipRecord:
    """A case the backend declared unsupported."""

    backend: str
    workload: str
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CaseSample:
    """First image captured during a case's measured loop."""

    payload: bytes = field(repr=False)
    format: ImageFormat


@dataclass(frozen=True)
class SavedSample:
    """A captured sample persisted to disk."""

    backend: str
    workload: str
    format: ImageFormat
    path: Path

    def to_dict(self) -> dict[str, Any]:
        return {
            "backend": self.backend,
            "workload": self.workload,
            "format": self.format,
            "path": str(self.path),
        }
