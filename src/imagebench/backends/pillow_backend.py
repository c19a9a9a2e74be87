"""Pillow raster backend.

Decodes fixtures with ``PIL.Image``, composites the scene with ``ImageDraw``
in RGBA blending mode and encodes PNG or WebP. Pillow has no vector output,
so ``encode-svg`` is reported as unsupported.
"""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING

from PIL import Image, ImageDraw, ImageFont, features

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
    rgba_to_bytes,
    text_layout_runs,
)
from imagebench.workloads import ENCODE_FORMATS, Workload

if TYPE_CHECKING:
    from imagebench.context import BenchContext

__all__ = ["PillowBackend"]

_logger = logging.getLogger("imagebench.backends.pillow_backend")

_PIL_FORMATS = {"png": "PNG", "webp": "WEBP"}


class PillowBackend:
    """Benchmark adapter for Pillow.

    Parameters
    ----------
    webp_quality : int, default=80
        Lossy WebP quality passed to ``Image.save``.

    Notes
    -----
    ``prepare`` loads every font size used by the workloads into an
    instance-level cache; ``run`` falls back to loading on demand, so calling
    ``prepare`` is optional but keeps font parsing out of the measurements.
    """

    name = "pillow"

    def __init__(self, webp_quality: int = 80) -> None:
        self.webp_quality = webp_quality
        self._fonts: dict[tuple[str, int], ImageFont.FreeTypeFont] = {}
        self._prepared = False

    def prepare(self, context: BenchContext) -> None:
        if self._prepared:
            return
        runs = kitchen_sink_scene(context) + text_layout_runs(context)
        for run in runs:
            if isinstance(run, TextRun):
                self._font(context, run)
        self._prepared = True
        _logger.debug("Loaded %d font faces", len(self._fonts))

    def run(self, context: BenchContext, workload: Workload | str) -> CaseResult:
        workload = Workload(workload)

        if workload is Workload.IMAGE_BUFFER:
            image = _decode(context.buffers.background)
            return self._encode(self._cover_canvas(context, image), "png", workload)

        if workload is Workload.IMAGE_STREAM:
            data = stream_to_bytes(context.create_background_stream())
            image = _decode(data)
            return self._encode(self._cover_canvas(context, image), "png", workload)

        if workload is Workload.TEXT_LAYOUT:
            total = sum(
                self._font(context, run).getlength(run.text)
                for run in text_layout_runs(context)
            )
            return MetricResult(value=float(total))

        image_format = ENCODE_FORMATS[workload]
        if image_format == "svg":
            raise UnsupportedWorkloadError(
                workload, "Pillow rasterizes only; it has no SVG encoder"
            )

        canvas = self._draw_scene(context, kitchen_sink_scene(context))
        return self._encode(canvas, image_format, workload)

    def _font(self, context: BenchContext, run: TextRun) -> ImageFont.FreeTypeFont:
        path = font_path_for(context, run.weight)
        key = (path, int(run.size))
        font = self._fonts.get(key)
        if font is None:
            font = ImageFont.truetype(path, int(run.size))
            self._fonts[key] = font
        return font

    def _cover_canvas(self, context: BenchContext, image: Image.Image) -> Image.Image:
        canvas = Image.new("RGBA", (context.width, context.height), (0, 0, 0, 255))
        layer = ImageLayer("background", 0, 0, context.width, context.height, fit="cover")
        _paste_layer(canvas, layer, image)
        return canvas

    def _draw_scene(
        self, context: BenchContext, scene: tuple[Primitive, ...]
    ) -> Image.Image:
        canvas = Image.new("RGBA", (context.width, context.height), (0, 0, 0, 255))
        decoded: dict[str, Image.Image] = {}

        for primitive in scene:
            if isinstance(primitive, ImageLayer):
                if primitive.source not in decoded:
                    decoded[primitive.source] = _decode(
                        getattr(context.buffers, primitive.source)
                    )
                _paste_layer(canvas, primitive, decoded[primitive.source])
            elif isinstance(primitive, GradientLayer):
                overlay = Image.fromarray(
                    gradient_rgba(
                        int(primitive.width), int(primitive.height), primitive.stops
                    )
                )
                canvas.alpha_composite(overlay, dest=(int(primitive.x), int(primitive.y)))
            elif isinstance(primitive, RoundedRect):
                if primitive.width <= 0 or primitive.height <= 0:
                    continue
                ImageDraw.Draw(canvas, "RGBA").rounded_rectangle(
                    (
                        primitive.x,
                        primitive.y,
                        primitive.x + primitive.width,
                        primitive.y + primitive.height,
                    ),
                    radius=primitive.radius,
                    fill=rgba_to_bytes(primitive.color),
                )
            elif isinstance(primitive, Circle):
                ImageDraw.Draw(canvas, "RGBA").ellipse(
                    (
                        primitive.cx - primitive.radius,
                        primitive.cy - primitive.radius,
                        primitive.cx + primitive.radius,
                        primitive.cy + primitive.radius,
                    ),
                    fill=rgba_to_bytes(primitive.color),
                )
            elif isinstance(primitive, TextRun):
                ImageDraw.Draw(canvas, "RGBA").text(
                    (primitive.x, primitive.y),
                    primitive.text,
                    font=self._font(context, primitive),
                    fill=rgba_to_bytes(primitive.color),
                )
            else:
                raise TypeError(f"Unknown scene primitive: {type(primitive).__name__}")

        return canvas

    def _encode(
        self, canvas: Image.Image, image_format: str, workload: Workload
    ) -> ImageResult:
        if image_format == "webp" and not features.check("webp"):
            raise UnsupportedWorkloadError(
                workload, "this Pillow build was compiled without WebP support"
            )
        buf = io.BytesIO()
        if image_format == "webp":
            canvas.save(buf, format="WEBP", quality=self.webp_quality)
        else:
            canvas.save(buf, format=_PIL_FORMATS[image_format])
        return ImageResult(payload=buf.getvalue(), format=image_format)


def _decode(data: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(data))
    return image.convert("RGBA")


def _paste_layer(canvas: Image.Image, layer: ImageLayer, image: Image.Image) -> None:
    width = int(round(layer.width))
    height = int(round(layer.height))
    if width <= 0 or height <= 0:
        return

    if layer.fit == "cover":
        x, y, draw_width, draw_height = cover_rect(
            image.width, image.height, layer.width, layer.height
        )
        scaled = image.resize((max(int(round(draw_width)), 1), max(int(round(draw_height)), 1)))
        left = int(round(-x))
        top = int(round(-y))
        fitted = scaled.crop((left, top, left + width, top + height))
    else:
        fitted = image.resize((width, height))

    mask = None
    if layer.radius > 0:
        mask = Image.new("L", (width, height), 0)
        ImageDraw.Draw(mask).rounded_rectangle(
            (0, 0, width - 1, height - 1), radius=layer.radius, fill=255
        )
    canvas.paste(fitted, (int(round(layer.x)), int(round(layer.y))), mask)
