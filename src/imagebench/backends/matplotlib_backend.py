"""Matplotlib (Agg) backend.

Scenes are drawn onto a bare :class:`~matplotlib.figure.Figure` attached to a
``FigureCanvasAgg``, never through ``pyplot``, so no global figure state is
created or leaked between iterations. The figure is sized so that one data
unit equals one output pixel, with the y axis inverted to match the scene's
top-left origin.
"""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING

import numpy as np
from matplotlib import image as mpimg
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.font_manager import FontProperties
from matplotlib.patches import Circle as CirclePatch
from matplotlib.patches import FancyBboxPatch
from numpy.typing import NDArray

from imagebench.context import stream_to_bytes
from imagebench.errors import UnsupportedWorkloadError
from imagebench.results import CaseResult, ImageResult, MetricResult
from imagebench.scene import (
    Circle,
    GradientLayer,
    ImageLayer,
    Primitive,
    RoundedRect,
    TextRun,
    cover_rect,
    font_path_for,
    gradient_rgba,
    kitchen_sink_scene,
    rgba_to_float,
    text_layout_runs,
)
from imagebench.workloads import ENCODE_FORMATS, Workload

if TYPE_CHECKING:
    from matplotlib.axes import Axes

    from imagebench.context import BenchContext

__all__ = ["MatplotlibBackend"]

_logger = logging.getLogger("imagebench.backends.matplotlib_backend")

POINTS_PER_INCH = 72.0
PIXEL_PAD = 1e-3


class MatplotlibBackend:
    """Benchmark adapter for matplotlib's Agg renderer.

    Parameters
    ----------
    dpi : int, default=100
        Figure resolution. Font sizes are converted from pixels to points
        with it, so output geometry does not depend on its value.
    """

    name = "matplotlib (agg)"

    def __init__(self, dpi: int = 100) -> None:
        self.dpi = dpi
        self._fonts: dict[tuple[str, float], FontProperties] = {}
        self._measure_canvas: FigureCanvasAgg | None = None

    def prepare(self, context: BenchContext) -> None:
        if self._measure_canvas is not None:
            return
        self._measure_canvas = FigureCanvasAgg(Figure(figsize=(1, 1), dpi=self.dpi))
        for run in kitchen_sink_scene(context) + text_layout_runs(context):
            if isinstance(run, TextRun):
                self._font(context, run)
        _logger.debug("Prepared %d font properties", len(self._fonts))

    def run(self, context: BenchContext, workload: Workload | str) -> CaseResult:
        workload = Workload(workload)

        if workload is Workload.IMAGE_BUFFER:
            figure, ax = self._new_figure(context)
            self._draw_image(
                ax,
                ImageLayer("background", 0, 0, context.width, context.height, fit="cover"),
                _decode(context.buffers.background),
            )
            return self._encode(figure, "png", workload)

        if workload is Workload.IMAGE_STREAM:
            data = stream_to_bytes(context.create_background_stream())
            figure, ax = self._new_figure(context)
            self._draw_image(
                ax,
                ImageLayer("background", 0, 0, context.width, context.height, fit="cover"),
                _decode(data),
            )
            return self._encode(figure, "png", workload)

        if workload is Workload.TEXT_LAYOUT:
            return MetricResult(value=self._measure_text(context))

        figure, ax = self._new_figure(context)
        self._draw_scene(context, ax, kitchen_sink_scene(context))
        return self._encode(figure, ENCODE_FORMATS[workload], workload)

    def _font(self, context: BenchContext, run: TextRun) -> FontProperties:
        path = font_path_for(context, run.weight)
        key = (path, float(run.size))
        prop = self._fonts.get(key)
        if prop is None:
            prop = FontProperties(
                fname=path, size=run.size * POINTS_PER_INCH / self.dpi
            )
            self._fonts[key] = prop
        return prop

    def _new_figure(self, context: BenchContext) -> tuple[Figure, Axes]:
        # Agg truncates the pixel size, so pad it to survive float rounding
        figure = Figure(
            figsize=(
                (context.width + PIXEL_PAD) / self.dpi,
                (context.height + PIXEL_PAD) / self.dpi,
            ),
            dpi=self.dpi,
            facecolor="black",
        )
        FigureCanvasAgg(figure)
        ax = figure.add_axes((0.0, 0.0, 1.0, 1.0))
        ax.set_xlim(0, context.width)
        ax.set_ylim(context.height, 0)
        ax.set_axis_off()
        return figure, ax

    def _draw_image(
        self, ax: Axes, layer: ImageLayer, pixels: NDArray[np.floating]
    ) -> None:
        height, width = pixels.shape[:2]
        if layer.fit == "cover":
            x, y, draw_width, draw_height = cover_rect(
                width, height, layer.width, layer.height
            )
            x += layer.x
            y += layer.y
        else:
            x, y, draw_width, draw_height = layer.x, layer.y, layer.width, layer.height

        artist = ax.imshow(
            pixels,
            extent=(x, x + draw_width, y + draw_height, y),
            aspect="auto",
            interpolation="bilinear",
        )
        clip = FancyBboxPatch(
            (layer.x, layer.y),
            layer.width,
            layer.height,
            boxstyle=f"round,pad=0,rounding_size={layer.radius}",
            transform=ax.transData,
            facecolor="none",
            edgecolor="none",
        )
        artist.set_clip_path(clip)

    def _draw_scene(
        self, context: BenchContext, ax: Axes, scene: tuple[Primitive, ...]
    ) -> None:
        decoded: dict[str, NDArray[np.floating]] = {}

        for primitive in scene:
            if isinstance(primitive, ImageLayer):
                if primitive.source not in decoded:
                    decoded[primitive.source] = _decode(
                        getattr(context.buffers, primitive.source)
                    )
                self._draw_image(ax, primitive, decoded[primitive.source])
            elif isinstance(primitive, GradientLayer):
                pixels = gradient_rgba(
                    int(primitive.width), int(primitive.height), primitive.stops
                )
                ax.imshow(
                    pixels,
                    extent=(
                        primitive.x,
                        primitive.x + primitive.width,
                        primitive.y + primitive.height,
                        primitive.y,
                    ),
                    aspect="auto",
                )
            elif isinstance(primitive, RoundedRect):
                if primitive.width <= 0 or primitive.height <= 0:
                    continue
                ax.add_patch(
                    FancyBboxPatch(
                        (primitive.x, primitive.y),
                        primitive.width,
                        primitive.height,
                        boxstyle=f"round,pad=0,rounding_size={primitive.radius}",
                        facecolor=rgba_to_float(primitive.color),
                        edgecolor="none",
                    )
                )
            elif isinstance(primitive, Circle):
                ax.add_patch(
                    CirclePatch(
                        (primitive.cx, primitive.cy),
                        primitive.radius,
                        facecolor=rgba_to_float(primitive.color),
                        edgecolor="none",
                    )
                )
            elif isinstance(primitive, TextRun):
                ax.text(
                    primitive.x,
                    primitive.y,
                    primitive.text,
                    fontproperties=self._font(context, primitive),
                    color=rgba_to_float(primitive.color),
                    ha="left",
                    va="top",
                    parse_math=False,
                )
            else:
                raise TypeError(f"Unknown scene primitive: {type(primitive).__name__}")

    def _measure_text(self, context: BenchContext) -> float:
        if self._measure_canvas is None:
            self._measure_canvas = FigureCanvasAgg(Figure(figsize=(1, 1), dpi=self.dpi))
        renderer = self._measure_canvas.get_renderer()

        total = 0.0
        for run in text_layout_runs(context):
            width, _, _ = renderer.get_text_width_height_descent(
                run.text, self._font(context, run), ismath=False
            )
            total += width
        return float(total)

    def _encode(
        self, figure: Figure, image_format: str, workload: Workload
    ) -> ImageResult:
        if image_format not in figure.canvas.get_supported_filetypes():
            raise UnsupportedWorkloadError(
                workload, f"this matplotlib build cannot write {image_format}"
            )
        buf = io.BytesIO()
        figure.savefig(buf, format=image_format, dpi=self.dpi)
        return ImageResult(payload=buf.getvalue(), format=image_format)


def _decode(data: bytes) -> NDArray[np.floating]:
    return mpimg.imread(io.BytesIO(data), format="png")
