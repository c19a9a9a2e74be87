"""Concrete rendering backends.

- pillow_backend: Pillow raster drawing, PNG/WebP encoding
- matplotlib_backend: matplotlib Agg rendering, PNG/WebP/SVG via ``savefig``
- svg_backend: hand-built SVG markup, no rasterization

Backends are created fresh by :func:`default_backends`, so font caches and
other per-instance state never leak between suite runs.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from imagebench._protocols import BenchBackend
from imagebench.backends.matplotlib_backend import MatplotlibBackend
from imagebench.backends.pillow_backend import PillowBackend
from imagebench.backends.svg_backend import SvgMarkupBackend
from imagebench.errors import BenchmarkConfigError

__all__ = [
    "BACKEND_FACTORIES",
    "MatplotlibBackend",
    "PillowBackend",
    "SvgMarkupBackend",
    "backend_names",
    "default_backends",
    "select_backends",
]

# Short key -> factory, in registration (execution) order
BACKEND_FACTORIES: dict[str, Callable[[], BenchBackend]] = {
    "pillow": PillowBackend,
    "matplotlib": MatplotlibBackend,
    "svg": SvgMarkupBackend,
}


def default_backends() -> list[BenchBackend]:
    """Fresh instances of every registered backend, in registration order."""
    return [factory() for factory in BACKEND_FACTORIES.values()]


def backend_names() -> list[str]:
    """Display names of the registered backends."""
    return [backend.name for backend in default_backends()]


def select_backends(
    names: str | Iterable[str] | None = None,
) -> list[BenchBackend]:
    """Registered backends filtered by name.

    Parameters
    ----------
    names : str, iterable of str, or None
        Short keys (``"matplotlib"``) or display names (``"matplotlib (agg)"``);
        strings may hold several comma-separated names. ``None`` or an empty
        request selects every backend.

    Returns
    -------
    list of BenchBackend
        Fresh instances in registration order, regardless of request order.

    Raises
    ------
    BenchmarkConfigError
        ``E2004`` if any name matches no registered backend.
    """
    backends = default_backends()
    if names is None:
        return backends

    if isinstance(names, str):
        names = [names]
    requested = {
        part.strip() for item in names for part in item.split(",") if part.strip()
    }
    if not requested:
        return backends

    keys = list(BACKEND_FACTORIES)
    selected: list[BenchBackend] = []
    matched: set[str] = set()
    for key, backend in zip(keys, backends):
        hits = requested & {key, backend.name}
        if hits:
            selected.append(backend)
            matched |= hits

    unknown = sorted(requested - matched)
    if unknown:
        available = ", ".join(f"{key} ({backend.name})" for key, backend in zip(keys, backends))
        raise BenchmarkConfigError(
            "E2004",
            f"Unknown backend(s): {', '.join(unknown)}. Available: {available}",
        )
    return selected
