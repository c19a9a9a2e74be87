"""Backend-neutral description of the drawing workloads.

Every backend renders the same primitives from this module, so the workloads
differ only in the technology that draws them. Coordinates are in canvas
pixels with the origin at the top-left corner and y growing downward; text
positions refer to the top of the line box.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, Union

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from imagebench.context import BenchContext

__all__ = [
    "OVERLAY_STOPS",
    "Circle",
    "Color",
    "GradientLayer",
    "ImageLayer",
    "Primitive",
    "RoundedRect",
    "TextRun",
    "cover_rect",
    "font_path_for",
    "gradient_rgba",
    "kitchen_sink_scene",
    "rgba_to_bytes",
    "rgba_to_float",
    "rgba_to_hex",
    "text_layout_runs",
]

# (red, green, blue, alpha) with channels in 0-255 and alpha in 0-1, as in CSS rgba()
Color = tuple[int, int, int, float]
FontWeight = Literal["regular", "semibold"]
FixtureRole = Literal["background", "avatar", "badge"]

WHITE: Color = (255, 255, 255, 1.0)
TRACK: Color = (31, 41, 55, 0.95)
PROGRESS: Color = (79, 145, 223, 1.0)
AMBER: Color = (245, 158, 11, 1.0)
INK: Color = (17, 24, 39, 1.0)
MUTED_WHITE: Color = (255, 255, 255, 0.82)
PALE_BLUE: Color = (209, 229, 255, 1.0)
SLATE: Color = (226, 232, 240, 1.0)
NIGHT: Color = (15, 23, 42, 1.0)

OVERLAY_STOPS: tuple[tuple[float, Color], ...] = (
    (0.0, (10, 18, 32, 0.65)),
    (0.5, (24, 42, 64, 0.25)),
    (1.0, (8, 12, 20, 0.8)),
)

PROGRESS_FRACTION = 0.67
TEXT_LAYOUT_PADDING = 40
TEXT_LAYOUT_GAP = 8
LINE_HEIGHT = 1.2


@dataclass(frozen=True)
class ImageLayer:
    """A fixture image drawn into a rectangle.

    ``fit="cover"`` scales the image to cover the rectangle while preserving
    its aspect ratio (overflow is clipped); ``fit="fill"`` stretches it.
    ``radius`` rounds the clip corners.
    """

    source: FixtureRole
    x: float
    y: float
    width: float
    height: float
    radius: float = 0.0
    fit: Literal["cover", "fill"] = "fill"


@dataclass(frozen=True)
class GradientLayer:
    """Diagonal linear gradient from the top-left to the bottom-right corner."""

    x: float
    y: float
    width: float
    height: float
    stops: tuple[tuple[float, Color], ...]


@dataclass(frozen=True)
class RoundedRect:
    x: float
    y: float
    width: float
    height: float
    radius: float
    color: Color


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    radius: float
    color: Color


@dataclass(frozen=True)
class TextRun:
    """One line of text; ``size`` is the font size in pixels."""

    text: str
    x: float
    y: float
    size: float
    weight: FontWeight
    color: Color


Primitive = Union[ImageLayer, GradientLayer, RoundedRect, Circle, TextRun]


def rgba_to_float(color: Color) -> tuple[float, float, float, float]:
    """Color as matplotlib-style floats in ``[0, 1]``."""
    r, g, b, a = color
    return (r / 255.0, g / 255.0, b / 255.0, float(a))


def rgba_to_bytes(color: Color) -> tuple[int, int, int, int]:
    """Color as Pillow-style integers in ``[0, 255]``."""
    r, g, b, a = color
    return (int(r), int(g), int(b), int(round(a * 255)))


def rgba_to_hex(color: Color) -> str:
    """Opaque part of the color as ``#rrggbb``."""
    r, g, b, _ = color
    return f"#{int(r):02x}{int(g):02x}{int(b):02x}"


def font_path_for(context: BenchContext, weight: FontWeight) -> str:
    """Font file of ``context`` matching ``weight``."""
    if weight == "semibold":
        return context.font_paths.semibold
    return context.font_paths.regular


def cover_rect(
    image_width: float, image_height: float, canvas_width: float, canvas_height: float
) -> tuple[float, float, float, float]:
    """Placement that makes an image cover a canvas (CSS ``object-fit: cover``).

    Parameters
    ----------
    image_width, image_height : float
        Natural size of the image.
    canvas_width, canvas_height : float
        Size of the area to cover.

    Returns
    -------
    x, y, width, height : float
        Destination rectangle. One dimension matches the canvas exactly and
        the other overflows symmetrically, so ``x`` or ``y`` may be negative.

    Examples
    --------
    >>> cover_rect(200, 100, 100, 100)
    (-50.0, 0.0, 200.0, 100.0)
    >>> cover_rect(100, 200, 100, 100)
    (0.0, -50.0, 100.0, 200.0)
    """
    image_ratio = image_width / image_height
    canvas_ratio = canvas_width / canvas_height

    if image_ratio > canvas_ratio:
        draw_width = canvas_height * image_ratio
        return ((canvas_width - draw_width) / 2, 0.0, float(draw_width), float(canvas_height))

    draw_height = canvas_width / image_ratio
    return (0.0, (canvas_height - draw_height) / 2, float(canvas_width), float(draw_height))


def gradient_rgba(
    width: int, height: int, stops: tuple[tuple[float, Color], ...]
) -> NDArray[np.uint8]:
    """Rasterize a diagonal gradient.

    The gradient runs along the vector from ``(0, 0)`` to ``(width, height)``;
    each pixel takes the color at its projection onto that vector, linearly
    interpolated between stops.

    Returns
    -------
    ndarray of shape (height, width, 4), dtype uint8
        Straight (non-premultiplied) RGBA pixels.
    """
    yy, xx = np.mgrid[0:height, 0:width].astype(np.float64)
    t = (xx * width + yy * height) / float(width * width + height * height)
    t = np.clip(t, 0.0, 1.0)

    offsets = np.array([offset for offset, _ in stops], dtype=np.float64)
    colors = np.array([rgba_to_bytes(color) for _, color in stops], dtype=np.float64)

    rgba = np.empty((height, width, 4), dtype=np.float64)
    for channel in range(4):
        rgba[..., channel] = np.interp(t, offsets, colors[:, channel])
    return np.clip(np.rint(rgba), 0, 255).astype(np.uint8)


def kitchen_sink_scene(context: BenchContext) -> tuple[Primitive, ...]:
    """Composite scene: background, overlay, clipped images, shapes and text."""
    width = context.width
    height = context.height
    track_width = max(width - 84, 0)

    return (
        ImageLayer("background", 0, 0, width, height, fit="cover"),
        GradientLayer(0, 0, width, height, OVERLAY_STOPS),
        ImageLayer("avatar", 42, 42, 220, 220, radius=28),
        ImageLayer("badge", 288, 64, 120, 120, radius=24),
        RoundedRect(42, 288, track_width, 54, 27, TRACK),
        RoundedRect(42, 288, round(track_width * PROGRESS_FRACTION), 54, 27, PROGRESS),
        Circle(width - 74, 88, 28, AMBER),
        Circle(width - 74, 88, 18, INK),
        TextRun("Image Benchmark Suite", 438, 58, 64, "semibold", WHITE),
        TextRun(
            "buffer | stream | kitchen sink | text layout | format compare",
            438,
            136,
            30,
            "regular",
            MUTED_WHITE,
        ),
        TextRun("PNG / WEBP / SVG", 438, 194, 44, "semibold", PALE_BLUE),
        TextRun(f"samples: {len(context.text_samples)}", 42, 364, 28, "regular", WHITE),
        TextRun(
            "stream source is in-memory (disk I/O excluded)", 42, 404, 28, "regular", WHITE
        ),
    )


def text_layout_runs(context: BenchContext) -> tuple[TextRun, ...]:
    """Lines measured by the text-layout workload.

    Every sample at 40px semibold, followed by every sample annotated with its
    length (``"<sample> :: <len>"``) at 26px regular. Lines are stacked in a
    single padded column so markup backends can lay them out as a document.
    """
    runs: list[TextRun] = []
    y = float(TEXT_LAYOUT_PADDING)

    for sample in context.text_samples:
        runs.append(TextRun(sample, TEXT_LAYOUT_PADDING, y, 40, "semibold", WHITE))
        y += 40 * LINE_HEIGHT + TEXT_LAYOUT_GAP

    for sample in context.text_samples:
        runs.append(
            TextRun(
                f"{sample} :: {len(sample)}", TEXT_LAYOUT_PADDING, y, 26, "regular", SLATE
            )
        )
        y += 26 * LINE_HEIGHT + TEXT_LAYOUT_GAP

    return tuple(runs)
