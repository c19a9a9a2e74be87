"""Summary statistics for benchmark samples.

All functions are pure and accept any sequence of real numbers. Empty input
never raises; it yields ``0.0`` so that a case with no samples still produces
a well-formed statistics record.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

__all__ = ["BYTES_PER_MEGABYTE", "mean", "percentile", "round_ms", "to_megabytes"]

BYTES_PER_MEGABYTE: int = 1024 * 1024


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean of ``values``.

    Parameters
    ----------
    values : sequence of float
        Samples to average.

    Returns
    -------
    float
        The mean, or ``0.0`` when ``values`` is empty.

    Examples
    --------
    >>> mean([1.0, 2.0, 3.0])
    2.0
    >>> mean([])
    0.0
    """
    if len(values) == 0:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=np.float64)))


def percentile(values: Sequence[float], fraction: float) -> float:
    """Nearest-rank percentile of ``values``.

    Sorts a copy of the samples ascending and returns the element at index
    ``ceil(n * fraction) - 1``, clamped into ``[0, n - 1]``.

    Parameters
    ----------
    values : sequence of float
        Samples. The input is not modified.
    fraction : float
        Requested rank as a fraction, e.g. ``0.95`` for P95.

    Returns
    -------
    float
        The selected sample, or ``0.0`` when ``values`` is empty.

    Notes
    -----
    This is the nearest-rank definition, not an interpolated percentile. It
    always returns an observed sample, which makes it coarse for small sample
    counts: with five samples, P95 selects index ``ceil(4.75) - 1 = 4``, the
    maximum. Reports produced by earlier versions of the harness use the same
    formula, so it is kept for comparability.

    Examples
    --------
    >>> percentile([5.0, 1.0, 4.0, 2.0, 3.0], 0.95)
    5.0
    >>> percentile([5.0, 1.0, 4.0, 2.0, 3.0], 0.5)
    3.0
    >>> percentile([3.0, 1.0], 0.0)
    1.0
    """
    n = len(values)
    if n == 0:
        return 0.0
    ordered = np.sort(np.asarray(values, dtype=np.float64))
    index = min(n - 1, max(0, math.ceil(n * fraction) - 1))
    return float(ordered[index])


def to_megabytes(n_bytes: float) -> float:
    """Convert a byte count to megabytes (MiB). No rounding is applied."""
    return n_bytes / BYTES_PER_MEGABYTE


def round_ms(value: float, digits: int = 3) -> float:
    """Round a reported figure to ``digits`` decimal places."""
    return round(float(value), digits)
