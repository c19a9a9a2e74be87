"""Registry of benchmark workloads.

The set of workloads is closed: every backend is measured against the same
named scenarios, and user requests are validated against this registry before
any case runs.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from imagebench.errors import BenchmarkConfigError

__all__ = ["ALL_WORKLOADS", "ENCODE_FORMATS", "Workload", "parse_workloads"]


class Workload(str, Enum):
    """Named benchmark scenario.

    The enum value is the public name used on the command line and in reports.
    """

    IMAGE_BUFFER = "image-buffer"
    IMAGE_STREAM = "image-stream"
    KITCHEN_SINK = "kitchen-sink"
    TEXT_LAYOUT = "text-layout"
    ENCODE_PNG = "encode-png"
    ENCODE_WEBP = "encode-webp"
    ENCODE_SVG = "encode-svg"

    def __str__(self) -> str:
        return self.value


# Default execution order
ALL_WORKLOADS: tuple[Workload, ...] = tuple(Workload)

# Output format produced by the scene-drawing workloads
ENCODE_FORMATS: dict[Workload, str] = {
    Workload.KITCHEN_SINK: "png",
    Workload.ENCODE_PNG: "png",
    Workload.ENCODE_WEBP: "webp",
    Workload.ENCODE_SVG: "svg",
}


def parse_workloads(
    requested: str | Workload | Iterable[str | Workload] | None,
) -> tuple[Workload, ...]:
    """Validate and expand a user request into workloads.

    Parameters
    ----------
    requested : str, Workload, iterable of those, or None
        Requested workload names. Strings may hold several comma-separated
        names; surrounding whitespace and empty items are ignored. ``None``
        selects every workload in default order.

    Returns
    -------
    tuple of Workload
        Workloads in the order they were requested.

    Raises
    ------
    BenchmarkConfigError
        ``E2003`` when the request names no workload at all, ``E2001`` when
        any name is not a known workload.

    Examples
    --------
    >>> parse_workloads("text-layout, encode-png")
    (<Workload.TEXT_LAYOUT: 'text-layout'>, <Workload.ENCODE_PNG: 'encode-png'>)
    >>> len(parse_workloads(None))
    7
    """
    if requested is None:
        return ALL_WORKLOADS

    if isinstance(requested, (str, Workload)):
        requested = [requested]

    names: list[str] = []
    for item in requested:
        if isinstance(item, Workload):
            names.append(item.value)
            continue
        names.extend(part.strip() for part in str(item).split(",") if part.strip())

    if not names:
        raise BenchmarkConfigError(
            "E2003", "At least one workload name is required."
        )

    known = {workload.value for workload in Workload}
    invalid = [name for name in names if name not in known]
    if invalid:
        raise BenchmarkConfigError(
            "E2001",
            f"Unknown workload(s): {', '.join(invalid)}. "
            f"Available: {', '.join(w.value for w in ALL_WORKLOADS)}",
        )

    return tuple(Workload(name) for name in names)
