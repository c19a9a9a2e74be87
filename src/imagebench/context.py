"""Shared, read-only fixture data handed to every backend invocation.

A :class:`BenchContext` is built once per process, before the suite starts,
and passed by reference to every ``prepare``/``run`` call. It is a frozen
dataclass holding only immutable values (``bytes``, ``str``, tuples), so
aliasing it across all cases is safe.
"""

from __future__ import annotations

import base64
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

import numpy as np
from matplotlib import font_manager
from PIL import Image

from imagebench.errors import BenchmarkConfigError

__all__ = [
    "DEFAULT_FONT_FAMILY",
    "DEFAULT_HEIGHT",
    "DEFAULT_TEXT_SAMPLES",
    "DEFAULT_WIDTH",
    "FIXTURE_FILES",
    "BenchContext",
    "FixtureImages",
    "FontPaths",
    "create_bench_context",
    "stream_to_bytes",
    "synthesize_fixture_png",
    "to_data_uri",
]

logger = logging.getLogger("imagebench.context")

DEFAULT_WIDTH = 1_280
DEFAULT_HEIGHT = 720
DEFAULT_FONT_FAMILY = "DejaVu Sans"

# Fixture role -> file name inside a fixtures directory
FIXTURE_FILES: dict[str, str] = {
    "background": "background.png",
    "avatar": "avatar.png",
    "badge": "guild.png",
}

# Synthesized fixture geometry (width, height, seed) when no directory is given
_SYNTHETIC_FIXTURES: dict[str, tuple[int, int, int]] = {
    "background": (1_600, 900, 7),
    "avatar": (256, 256, 11),
    "badge": (128, 128, 13),
}

DEFAULT_TEXT_SAMPLES: tuple[str, ...] = (
    "benchmark: the quick brown fox jumps over the lazy dog",
    "python image generation libraries",
    "buffer decode + draw + encode",
    "stream decode (disk io excluded)",
    "kitchen sink rendering and compositing",
    "text layout and metrics throughput",
    "0123456789 abcdefghijklmnopqrstuvwxyz",
    "Symbols !@#$%^&*()[]{}<>?/~",
    "Longer sample with mixed CASE and numbers 492178",
    "Short",
    "Spacing    and    punctuation...",
    "Wrapping is intentionally disabled",
)


@dataclass(frozen=True)
class FontPaths:
    """Font files for the two weights the scenes use."""

    regular: str
    semibold: str


@dataclass(frozen=True)
class FixtureImages:
    """Encoded fixture images (PNG bytes) or their data URIs."""

    background: bytes | str = field(repr=False)
    avatar: bytes | str = field(repr=False)
    badge: bytes | str = field(repr=False)


@dataclass(frozen=True)
class BenchContext:
    """Read-only bundle of fixture data shared by all cases.

    Parameters
    ----------
    width, height : int
        Canvas size in pixels for every drawing workload.
    font_family : str
        Family name used by backends that resolve fonts by name.
    font_paths : FontPaths
        Font files for backends that load fonts from disk.
    buffers : FixtureImages
        PNG-encoded fixture images as ``bytes``.
    data_uris : FixtureImages
        The same fixtures as ``data:image/png;base64,...`` strings.
    text_samples : tuple of str
        Strings measured by the text-layout workload.
    """

    width: int
    height: int
    font_family: str
    font_paths: FontPaths
    buffers: FixtureImages
    data_uris: FixtureImages
    text_samples: tuple[str, ...]

    def create_background_stream(self) -> BinaryIO:
        """Fresh in-memory stream over the background fixture."""
        return io.BytesIO(self.buffers.background)

    def create_avatar_stream(self) -> BinaryIO:
        """Fresh in-memory stream over the avatar fixture."""
        return io.BytesIO(self.buffers.avatar)


def to_data_uri(payload: bytes, mime_type: str = "image/png") -> str:
    """Encode ``payload`` as a base64 data URI."""
    return f"data:{mime_type};base64,{base64.b64encode(payload).decode('ascii')}"


def stream_to_bytes(stream: BinaryIO, chunk_size: int = 64 * 1024) -> bytes:
    """Drain a binary stream chunk by chunk.

    Parameters
    ----------
    stream : binary file-like
        Stream to read until exhausted.
    chunk_size : int, default=65536
        Bytes requested per ``read`` call.

    Returns
    -------
    bytes
        Concatenation of all chunks.
    """
    chunks: list[bytes] = []
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def synthesize_fixture_png(width: int, height: int, *, seed: int) -> bytes:
    """Generate a deterministic, photo-like PNG fixture.

    Layered sinusoidal color bands plus Gaussian grain, so the image does not
    compress trivially and decode/encode costs are realistic.

    Parameters
    ----------
    width, height : int
        Image size in pixels.
    seed : int
        Seed for ``numpy.random.default_rng``; equal seeds give identical bytes.

    Returns
    -------
    bytes
        PNG-encoded RGB image.
    """
    rng = np.random.default_rng(seed)
    yy, xx = np.mgrid[0:height, 0:width].astype(np.float64)
    u = xx / max(width - 1, 1)
    v = yy / max(height - 1, 1)

    phase = rng.uniform(0.0, 2.0 * np.pi, size=3)
    freq = rng.uniform(1.5, 4.5, size=3)
    tilt = rng.uniform(0.3, 1.7, size=3)

    channels = [
        127.5 + 110.0 * np.sin(np.pi * freq[c] * (u + tilt[c] * v) + phase[c])
        for c in range(3)
    ]
    rgb = np.stack(channels, axis=-1) + rng.normal(0.0, 6.0, size=(height, width, 3))
    pixels = np.clip(rgb, 0, 255).astype(np.uint8)

    buf = io.BytesIO()
    Image.fromarray(pixels).save(buf, format="PNG")
    return buf.getvalue()


def _resolve_font_paths(font_family: str) -> FontPaths:
    regular = font_manager.findfont(
        font_manager.FontProperties(family=font_family, weight="normal")
    )
    semibold = font_manager.findfont(
        font_manager.FontProperties(family=font_family, weight="bold")
    )
    return FontPaths(regular=str(regular), semibold=str(semibold))


def _load_fixture(fixtures_dir: Path, role: str) -> bytes:
    path = fixtures_dir / FIXTURE_FILES[role]
    if not path.is_file():
        raise BenchmarkConfigError("E2005", f"Fixture '{role}' not found at {path}")
    data = path.read_bytes()
    if len(data) == 0:
        raise BenchmarkConfigError("E2005", f"Fixture '{role}' at {path} is empty")
    return data


def create_bench_context(
    fixtures_dir: str | Path | None = None,
    *,
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
    font_family: str = DEFAULT_FONT_FAMILY,
    text_samples: tuple[str, ...] = DEFAULT_TEXT_SAMPLES,
) -> BenchContext:
    """Build the shared benchmark context.

    Parameters
    ----------
    fixtures_dir : str or Path, optional
        Directory holding ``background.png``, ``avatar.png`` and ``guild.png``.
        When omitted, deterministic fixtures are synthesized in memory.
    width, height : int
        Canvas size for drawing workloads. Defaults to 1280x720.
    font_family : str, default="DejaVu Sans"
        Font family, resolved to files through matplotlib's font manager.
    text_samples : tuple of str, optional
        Strings for the text-layout workload.

    Returns
    -------
    BenchContext
        Immutable context to share across all cases.

    Raises
    ------
    ValueError
        If ``width`` or ``height`` is not positive.
    BenchmarkConfigError
        ``E2005`` if a fixture file is missing or empty.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Canvas size must be positive, got {width}x{height}")

    if fixtures_dir is not None:
        fixtures_path = Path(fixtures_dir)
        images = {role: _load_fixture(fixtures_path, role) for role in FIXTURE_FILES}
        logger.debug("Loaded fixtures from %s", fixtures_path)
    else:
        images = {
            role: synthesize_fixture_png(w, h, seed=seed)
            for role, (w, h, seed) in _SYNTHETIC_FIXTURES.items()
        }
        logger.debug("Synthesized %d fixtures", len(images))

    return BenchContext(
        width=width,
        height=height,
        font_family=font_family,
        font_paths=_resolve_font_paths(font_family),
        buffers=FixtureImages(**images),
        data_uris=FixtureImages(
            **{role: to_data_uri(data) for role, data in images.items()}
        ),
        text_samples=tuple(text_samples),
    )
